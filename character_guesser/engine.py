"""Game engine: walks a built question tree as answers come in.

The engine owns a cursor into a shared, immutable tree plus its own running
set of candidates.  It never mutates tree nodes, so one tree can back many
independent engines.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from .questions import QuestionSpec
from .tree import Internal, Leaf, Outcome, TreeNode

logger = logging.getLogger(__name__)


class InvalidStateError(RuntimeError):
    """An engine operation was used in a state that does not allow it."""


class GameEngine:
    """Cursor-plus-candidates state machine over a question tree.

    While the cursor sits on an :class:`~character_guesser.tree.Internal`
    node there is a question to answer; once it reaches a
    :class:`~character_guesser.tree.Leaf` the game is over and
    :meth:`current_outcome` reports the result.

    Args:
        universe: Every candidate id; the starting candidate set.
        root: Root of the tree returned by
            :func:`~character_guesser.tree.build_tree`.
    """

    def __init__(self, universe: Iterable[int], root: TreeNode) -> None:
        self._universe: FrozenSet[int] = frozenset(universe)
        self._root = root
        self._cursor: TreeNode = root
        self._remaining: Set[int] = set(self._universe)
        self._history: List[Tuple[QuestionSpec, bool]] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def universe(self) -> FrozenSet[int]:
        return self._universe

    @property
    def remaining(self) -> FrozenSet[int]:
        """Candidates still consistent with the answers given so far."""
        return frozenset(self._remaining)

    @property
    def cursor(self) -> TreeNode:
        return self._cursor

    @property
    def history(self) -> List[Tuple[QuestionSpec, bool]]:
        """``(question, answer)`` pairs in the order they were answered."""
        return list(self._history)

    # ------------------------------------------------------------------
    # Game API
    # ------------------------------------------------------------------

    def current_question(self) -> Optional[str]:
        """Return the text of the question to ask, or ``None`` once over."""
        if isinstance(self._cursor, Internal):
            return self._cursor.question.text
        return None

    def current_outcome(self) -> Optional[Outcome]:
        """Return the result once the game is over, ``None`` before that."""
        if isinstance(self._cursor, Leaf):
            return self._cursor.outcome
        return None

    def submit_answer(self, answer: bool) -> None:
        """Apply a yes (``True``) or no (``False``) answer.

        A yes drops every candidate in the question's ``no_ids`` and follows
        the yes branch; a no drops the ``yes_ids`` and follows the no branch.

        Raises:
            InvalidStateError: If the game is already over, whatever *answer* is.
            TypeError: If *answer* is not a ``bool``.
        """
        node = self._cursor
        if not isinstance(node, Internal):
            raise InvalidStateError(
                f"Game is over ({node.outcome.kind.value}); there is no question to answer"
            )
        if not isinstance(answer, bool):
            raise TypeError(f"answer must be a bool, got {type(answer).__name__}")

        question = node.question
        if answer:
            self._remaining -= question.no_ids
            self._cursor = node.yes_branch
        else:
            self._remaining -= question.yes_ids
            self._cursor = node.no_branch
        self._history.append((question, answer))
        logger.debug(
            "q%d answered %s; %d candidates remain",
            question.question_id,
            "yes" if answer else "no",
            len(self._remaining),
        )

    def restart(self) -> None:
        """Return to the root with every candidate back in play."""
        self._cursor = self._root
        self._remaining = set(self._universe)
        self._history.clear()

    def __repr__(self) -> str:  # pragma: no cover
        state = "over" if isinstance(self._cursor, Leaf) else "asking"
        return f"GameEngine({state}, remaining={len(self._remaining)})"
