"""Chess coaching layer: heuristic position analysis and move feedback."""
