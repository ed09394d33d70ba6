"""character_guesser – guess a character by asking yes/no questions."""

from .engine import GameEngine, InvalidStateError
from .questions import (
    NO_MATCH_CHARACTER_ID,
    Character,
    CharacterNotFoundError,
    QuestionSpec,
    parse_id_set,
    read_character_by_id,
    read_character_ids,
    read_questions,
)
from .session import parse_answer, play_round, resolve_character
from .tree import (
    EXHAUSTED,
    NO_MATCH,
    UNDISTINGUISHABLE,
    Internal,
    Leaf,
    Outcome,
    OutcomeKind,
    ScoreFn,
    TreeNode,
    build_tree,
    render_tree,
    split_score,
    strict_split_score,
    to_dot,
)

__all__ = [
    "Character",
    "CharacterNotFoundError",
    "EXHAUSTED",
    "GameEngine",
    "Internal",
    "InvalidStateError",
    "Leaf",
    "NO_MATCH",
    "NO_MATCH_CHARACTER_ID",
    "Outcome",
    "OutcomeKind",
    "QuestionSpec",
    "ScoreFn",
    "TreeNode",
    "UNDISTINGUISHABLE",
    "build_tree",
    "parse_answer",
    "parse_id_set",
    "play_round",
    "read_character_by_id",
    "read_character_ids",
    "read_questions",
    "render_tree",
    "resolve_character",
    "split_score",
    "strict_split_score",
    "to_dot",
]
