"""Interactive round driver: asks a player the engine's questions."""
from __future__ import annotations

from typing import Callable, Optional

from .engine import GameEngine
from .questions import NO_MATCH_CHARACTER_ID, Character, CharacterNotFoundError
from .tree import Outcome, OutcomeKind

# Type alias for a character lookup: takes an id, returns the Character.
CharacterLookup = Callable[[int], Character]

_YES = frozenset({"y", "yes", "1", "true"})
_NO = frozenset({"n", "no", "0", "false"})


def parse_answer(text: str) -> Optional[bool]:
    """Map a typed reply to ``True``/``False``, or ``None`` if unrecognised."""
    normalized = text.strip().lower()
    if normalized in _YES:
        return True
    if normalized in _NO:
        return False
    return None


def play_round(
    engine: GameEngine,
    ask_fn: Optional[Callable[[str], str]] = None,
    say_fn: Optional[Callable[[str], None]] = None,
) -> Outcome:
    """Ask questions until the engine reaches a leaf, then return its outcome.

    Unrecognised replies are reported through *say_fn* and the same question
    is asked again.

    Args:
        engine: Engine positioned where the round should start.
        ask_fn: Prompts the player and returns the reply.  Defaults to
            :func:`input`.
        say_fn: Shows a message to the player.  Defaults to :func:`print`.
    """
    ask = ask_fn if ask_fn is not None else input
    say = say_fn if say_fn is not None else print

    outcome = engine.current_outcome()
    while outcome is None:
        question = engine.current_question()
        answer = parse_answer(ask(f"{question} (y/n)\n> "))
        if answer is None:
            say("Please answer 'y' or 'n'.")
            continue
        engine.submit_answer(answer)
        outcome = engine.current_outcome()
    return outcome


def resolve_character(outcome: Outcome, lookup: CharacterLookup) -> Optional[Character]:
    """Return the character an outcome points at, if any.

    An identified outcome resolves to its candidate.  A no-match outcome
    resolves to the table's reserved "nobody" record when the table has one.
    """
    if outcome.kind == OutcomeKind.IDENTIFIED:
        return lookup(outcome.candidate_id)
    if outcome.kind == OutcomeKind.NO_MATCH:
        try:
            return lookup(NO_MATCH_CHARACTER_ID)
        except CharacterNotFoundError:
            return None
    return None
