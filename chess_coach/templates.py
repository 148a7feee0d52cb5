"""Sentence templates for move feedback.

Base pools are keyed by voice, phase and move quality. Every base
template names the moving piece with ``{piece}`` and the destination
with ``{square}``. Situational pools are added on top of the base pool
when the position calls for them; they may use ``{advantage}`` (points
of material) and ``{threat}`` (a threat sentence), which are expanded
when the pool is assembled.
"""

from __future__ import annotations

from chess_coach.models import MoveQuality, Perspective, Phase

_MY = Perspective.FIRST_PERSON
_YOUR = Perspective.SECOND_PERSON
_WOULD = Perspective.CONDITIONAL

_EXCELLENT = MoveQuality.EXCELLENT
_GOOD = MoveQuality.GOOD
_ACCEPTABLE = MoveQuality.ACCEPTABLE
_NORMAL = MoveQuality.NORMAL


BASE_TEMPLATES: dict[Perspective, dict[Phase, dict[MoveQuality, tuple[str, ...]]]] = {
    # ── Player's own moves ───────────────────────────────────────────
    _YOUR: {
        Phase.OPENING: {
            _EXCELLENT: (
                "Superb capture! Your {piece} takes on {square} and wins material before the game has settled.",
                "Your {piece} grabs a valuable piece on {square}. Early gifts like that are worth taking.",
                "Excellent! Taking on {square} with your {piece} puts you ahead right out of the opening.",
                "Sharp eyes: your {piece} punishes the loose piece on {square}.",
            ),
            _GOOD: (
                "Nice developing move. Your {piece} on {square} joins the fight for the center.",
                "Good choice. Your {piece} heads to {square} and your setup keeps growing.",
                "Solid opening play: {square} is a natural home for your {piece}.",
                "Your {piece} on {square} helps you build a healthy position.",
            ),
            _ACCEPTABLE: (
                "Your {piece} to {square} is playable, though developing another piece might be stronger.",
                "{square} is a reasonable square for your {piece}, but keep an eye on your development.",
                "Fine. Your {piece} on {square} does no harm, but think about castling soon.",
            ),
            _NORMAL: (
                "Your {piece} moves to {square}. In the opening, try to bring out knights and bishops first.",
                "You played your {piece} to {square}. Remember to fight for the center.",
                "Your {piece} steps to {square}. Every opening move should develop or claim the center.",
            ),
        },
        Phase.MIDDLEGAME: {
            _EXCELLENT: (
                "Brilliant! Your {piece} wins material on {square}.",
                "Your {piece} strikes on {square} and comes out ahead in the exchange.",
                "Great capture on {square}! Your {piece} tips the balance your way.",
                "Well spotted. Your {piece} picks off a bigger piece on {square}.",
            ),
            _GOOD: (
                "Good move. Your {piece} on {square} is well placed for the middlegame.",
                "Your {piece} finds an active post on {square}.",
                "Nicely played: your {piece} on {square} keeps the pressure on.",
            ),
            _ACCEPTABLE: (
                "Your {piece} to {square} is okay, but look for moves that create threats.",
                "A reasonable move. Still, your {piece} on {square} could be doing more.",
                "Playable. Check whether your {piece} is safe on {square} before moving on.",
            ),
            _NORMAL: (
                "Your {piece} goes to {square}. Ask yourself what your opponent is planning.",
                "You moved your {piece} to {square}. Look for a plan that improves your worst piece.",
                "Your {piece} on {square}. In the middlegame, every move should serve a plan.",
                "Your {piece} settles on {square}. Keep scanning for tactics on both sides.",
            ),
        },
        Phase.ENDGAME: {
            _EXCELLENT: (
                "Excellent! Winning material on {square} with your {piece} is huge in an endgame.",
                "Your {piece} takes on {square}. With so few pieces left, that could decide the game.",
                "Great capture on {square}! Your {piece} turns the endgame in your favour.",
            ),
            _GOOD: (
                "Good endgame technique: your {piece} to {square}.",
                "Your {piece} on {square} is exactly where it belongs in the endgame.",
                "Nice. Your {piece} to {square} keeps your endgame plan on track.",
                "Your {piece} heads for {square}. Active pieces win endgames.",
            ),
            _ACCEPTABLE: (
                "Your {piece} to {square} is fine, but remember your king is a fighting piece now.",
                "Playable. In the endgame, check whether your {piece} could help a passed pawn from {square}.",
                "Your {piece} on {square} works, though a more active square may exist.",
            ),
            _NORMAL: (
                "Your {piece} moves to {square}. Count the pawns and think about promotion.",
                "You played your {piece} to {square}. Activate your king while you can.",
                "Your {piece} steps to {square}. In endgames, every tempo counts.",
            ),
        },
    },
    # ── Engine's own moves ───────────────────────────────────────────
    _MY: {
        Phase.OPENING: {
            _EXCELLENT: (
                "I'll take that! My {piece} captures on {square} and I'm ahead already.",
                "Thanks for the gift: my {piece} takes on {square}.",
                "My {piece} wins material on {square}. Watch your loose pieces in the opening.",
            ),
            _GOOD: (
                "I develop my {piece} to {square}.",
                "My {piece} comes out to {square} to fight for the center.",
                "I'm putting my {piece} on {square}. Development first!",
                "My {piece} takes up a good post on {square}.",
            ),
            _ACCEPTABLE: (
                "I'll play my {piece} to {square} for now.",
                "My {piece} goes to {square}. Let's see how you respond.",
                "I move my {piece} to {square}; nothing fancy yet.",
            ),
            _NORMAL: (
                "I play my {piece} to {square}.",
                "My {piece} moves to {square}.",
                "I'm shifting my {piece} to {square}. Your move.",
            ),
        },
        Phase.MIDDLEGAME: {
            _EXCELLENT: (
                "Got it! My {piece} wins material on {square}.",
                "My {piece} captures on {square}, and I'm coming out ahead.",
                "I take on {square} with my {piece}. That piece was worth more than mine.",
                "My {piece} strikes on {square}. Did you see that coming?",
            ),
            _GOOD: (
                "My {piece} on {square} improves my position.",
                "I'm bringing my {piece} to {square} to increase the pressure.",
                "My {piece} to {square}. I like where this is going.",
            ),
            _ACCEPTABLE: (
                "I'll put my {piece} on {square} and regroup.",
                "My {piece} goes to {square}. A quiet move for now.",
                "I play my {piece} to {square}, keeping things flexible.",
            ),
            _NORMAL: (
                "My {piece} moves to {square}.",
                "I'm repositioning my {piece} to {square}.",
                "My {piece} to {square}. What's your plan?",
                "I shuffle my {piece} to {square} and wait.",
            ),
        },
        Phase.ENDGAME: {
            _EXCELLENT: (
                "My {piece} captures on {square}. That should matter in this endgame.",
                "I win material with my {piece} on {square}. Few pieces left to defend with!",
                "My {piece} takes on {square}. The endgame is tilting my way.",
            ),
            _GOOD: (
                "My {piece} heads to {square}, just where it belongs.",
                "I bring my {piece} to {square}. Endgames reward activity.",
                "My {piece} to {square} supports my plan.",
            ),
            _ACCEPTABLE: (
                "My {piece} goes to {square} for now.",
                "I'll play my {piece} to {square} and keep my options open.",
                "My {piece} steps to {square}. Let's see if you can use the tempo.",
            ),
            _NORMAL: (
                "My {piece} moves to {square}.",
                "I play my {piece} to {square}. Every tempo counts here.",
                "My {piece} to {square}. Can you find the winning plan?",
                "I'm moving my {piece} to {square}.",
            ),
        },
    },
    # ── Hints ────────────────────────────────────────────────────────
    _WOULD: {
        Phase.OPENING: {
            _EXCELLENT: (
                "Your {piece} could capture on {square}; that would win material early.",
                "Taking on {square} with your {piece} would leave you ahead.",
                "Look at {square}: your {piece} would win a valuable piece there.",
            ),
            _GOOD: (
                "Developing your {piece} to {square} would strengthen your opening.",
                "Your {piece} on {square} would help you fight for the center.",
                "Consider {square} for your {piece}; it would be a natural developing move.",
                "Moving your {piece} to {square} would keep your development on track.",
            ),
            _ACCEPTABLE: (
                "Your {piece} to {square} would be a reasonable option.",
                "You could play your {piece} to {square}; it would keep things solid.",
                "Moving your {piece} to {square} would be playable here.",
            ),
            _NORMAL: (
                "Your {piece} to {square} would be a quiet, sensible move.",
                "Try your {piece} on {square}; it would keep your position flexible.",
                "Your {piece} to {square} would be a useful probe of your opponent's plans.",
            ),
        },
        Phase.MIDDLEGAME: {
            _EXCELLENT: (
                "Capturing on {square} with your {piece} would win material.",
                "Taking on {square} with your {piece} would tip the balance in your favour.",
                "There's a strong capture: your {piece} would take a bigger piece on {square}.",
            ),
            _GOOD: (
                "Your {piece} to {square} would improve your position.",
                "Placing your {piece} on {square} would add pressure.",
                "Consider your {piece} to {square}; it would be an active square.",
            ),
            _ACCEPTABLE: (
                "Your {piece} to {square} would be a solid, if modest, choice.",
                "You could reposition your {piece} to {square}; that would keep things steady.",
                "Moving your {piece} to {square} would be playable.",
                "A calm option: your {piece} would go to {square}.",
            ),
            _NORMAL: (
                "Your {piece} to {square} would be a useful waiting move.",
                "Try your {piece} on {square}; it would keep your options open.",
                "Moving your {piece} to {square} would be a reasonable step.",
            ),
        },
        Phase.ENDGAME: {
            _EXCELLENT: (
                "Your {piece} could capture on {square}; winning material now would be decisive.",
                "Taking on {square} with your {piece} would give you a winning endgame.",
                "Look for the capture on {square}: your {piece} would pick up material.",
            ),
            _GOOD: (
                "Your {piece} to {square} would be good endgame technique.",
                "Activating your {piece} on {square} would help your plan.",
                "Your {piece} would be well placed on {square}.",
            ),
            _ACCEPTABLE: (
                "Your {piece} to {square} would be fine.",
                "You could play your {piece} to {square}; it would hold the position.",
                "Moving your {piece} to {square} would be a steady choice.",
            ),
            _NORMAL: (
                "Your {piece} to {square} would gain a tempo.",
                "Try your {piece} on {square}; it would keep the endgame under control.",
                "Your {piece} would improve slowly from {square}.",
                "Moving your {piece} to {square} would be a patient move.",
            ),
        },
    },
}


CHECK_TEMPLATES: dict[Perspective, tuple[str, ...]] = {
    _YOUR: (
        "Check! Your {piece} puts the king under pressure.",
        "You give check from {square}. Keep the initiative!",
    ),
    _MY: (
        "Check! Your king has to deal with my {piece}.",
        "I give check from {square}. Watch your king.",
    ),
    _WOULD: (
        "This would give check and seize the initiative.",
        "Your {piece} on {square} would put the king in check.",
    ),
}

# Material templates: "ahead" when the voice's side leads, "behind" otherwise
MATERIAL_TEMPLATES: dict[Perspective, dict[str, tuple[str, ...]]] = {
    _YOUR: {
        "ahead": (
            "You're ahead by {advantage} points of material. Trading pieces will make it count.",
            "With a {advantage}-point material lead, simplify and stay safe.",
        ),
        "behind": (
            "You're down {advantage} points of material; look for active counterplay.",
            "Your opponent leads by {advantage} points. Avoid further trades and create threats.",
        ),
    },
    _MY: {
        "ahead": (
            "I'm up {advantage} points of material now.",
            "My material lead is {advantage} points. I'll be happy to trade down.",
        ),
        "behind": (
            "You're up {advantage} points, but I'm still fighting.",
            "I'm down {advantage} points of material, so I need to stir up trouble.",
        ),
    },
    _WOULD: {
        "ahead": (
            "This would keep your {advantage}-point material lead.",
        ),
        "behind": (
            "You're down {advantage} points, so this move would need to create counterplay.",
        ),
    },
}

CENTER_TEMPLATES: dict[Perspective, tuple[str, ...]] = {
    _YOUR: (
        "You have the better grip on the center.",
        "Your pieces control the center nicely.",
    ),
    _MY: (
        "My pieces control the center now.",
        "I have the upper hand in the center.",
    ),
    _WOULD: (
        "This would strengthen your hold on the center.",
    ),
}

TACTICAL_TEMPLATES: dict[Perspective, tuple[str, ...]] = {
    _YOUR: (
        "There are tactics in the air. Check every capture on the board.",
        "Pieces are hanging around; look for double attacks.",
    ),
    _MY: (
        "Careful, this position is full of tactics.",
        "I see tactical chances here. Do you?",
    ),
    _WOULD: (
        "This would lead to a sharp, tactical position.",
    ),
}

THREAT_TEMPLATES: dict[Perspective, str] = {
    _YOUR: "Watch out: {threat}!",
    _MY: "Heads up: {threat}.",
    _WOULD: "Be aware: {threat}.",
}
