"""Exceptions raised by the coaching layer."""

from __future__ import annotations


class CoachError(Exception):
    """Base class for coaching-layer errors."""


class BridgeBusyError(CoachError):
    """A move was requested while another request is still outstanding."""


class UnresponsiveEngineError(CoachError):
    """The engine never answered a request within the allowed time."""


class TemplatePoolError(CoachError):
    """No feedback template is configured for the requested situation."""
