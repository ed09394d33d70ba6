"""Greedy binary question-tree builder and Graphviz DOT exporter.

:func:`build_tree` partitions a set of candidate ids into a binary tree.  Each
internal node asks the question whose yes/no split of the remaining
candidates is most balanced; each leaf carries an :class:`Outcome`.  The tree
is built once and never mutated, so any number of game engines may walk it.

The tree can be serialised to Graphviz DOT format; optional SVG/PNG rendering
requires the ``graphviz`` Python package and the Graphviz system binaries.

Install optional rendering support::

    pip install graphviz
    # and the system graphviz package (e.g. apt-get install graphviz)
"""

from __future__ import annotations

import logging
import re
import textwrap
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Union

from .questions import QuestionSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


class OutcomeKind(str, Enum):
    """How a walk down the tree ended."""

    IDENTIFIED = "identified"
    EXHAUSTED = "exhausted"
    UNDISTINGUISHABLE = "undistinguishable"
    NO_MATCH = "no_match"


_OUTCOME_TEXT: Dict[OutcomeKind, str] = {
    OutcomeKind.EXHAUSTED: "No more questions. Unable to identify.",
    OutcomeKind.UNDISTINGUISHABLE: "Unable to further differentiate.",
    OutcomeKind.NO_MATCH: "No character matches those answers.",
}


@dataclass(frozen=True)
class Outcome:
    """Result stored in a leaf; ``candidate_id`` is set only when identified."""

    kind: OutcomeKind
    candidate_id: Optional[int] = None

    @classmethod
    def identified(cls, candidate_id: int) -> "Outcome":
        return cls(OutcomeKind.IDENTIFIED, candidate_id)

    def describe(self) -> str:
        if self.kind == OutcomeKind.IDENTIFIED:
            return f"Character identified: {self.candidate_id}"
        return _OUTCOME_TEXT[self.kind]


EXHAUSTED = Outcome(OutcomeKind.EXHAUSTED)
UNDISTINGUISHABLE = Outcome(OutcomeKind.UNDISTINGUISHABLE)
NO_MATCH = Outcome(OutcomeKind.NO_MATCH)


@dataclass(frozen=True)
class Leaf:
    outcome: Outcome


@dataclass(frozen=True)
class Internal:
    """A decision node.

    ``question`` keeps the question's full id sets, not their intersection with
    the candidates that reached this node.
    """

    question: QuestionSpec
    yes_branch: "TreeNode"
    no_branch: "TreeNode"


TreeNode = Union[Leaf, Internal]


# ---------------------------------------------------------------------------
# Question selection
# ---------------------------------------------------------------------------

#: ``score_fn(remaining, question) -> score``; lower is better, ``None``
#: means the question may not be asked here.
ScoreFn = Callable[[FrozenSet[int], QuestionSpec], Optional[int]]


def split_score(remaining: FrozenSet[int], question: QuestionSpec) -> int:
    """Absolute imbalance between the yes and no hits among *remaining*.

    A question that covers none of *remaining* scores 0, the same as a
    perfect split, and so can win selection while narrowing nothing.
    """
    return abs(len(remaining & question.yes_ids) - len(remaining & question.no_ids))


def strict_split_score(remaining: FrozenSet[int], question: QuestionSpec) -> Optional[int]:
    """Like :func:`split_score`, but rejects questions leaving a branch empty."""
    if not remaining & question.yes_ids or not remaining & question.no_ids:
        return None
    return split_score(remaining, question)


def select_question(
    remaining: FrozenSet[int],
    questions: Sequence[QuestionSpec],
    score_fn: ScoreFn = split_score,
) -> Optional[int]:
    """Return the index of the lowest-scoring question, or ``None``.

    Ties go to the earliest question in *questions*.
    """
    best_index: Optional[int] = None
    best_score: Optional[int] = None
    for index, question in enumerate(questions):
        score = score_fn(remaining, question)
        if score is None:
            continue
        if best_score is None or score < best_score:
            best_index, best_score = index, score
    return best_index


# ---------------------------------------------------------------------------
# Tree builder
# ---------------------------------------------------------------------------


@dataclass
class _Expand:
    remaining: FrozenSet[int]
    pool: List[QuestionSpec]


@dataclass
class _Assemble:
    question: QuestionSpec


def build_tree(
    universe: Iterable[int],
    questions: Sequence[QuestionSpec],
    *,
    score_fn: Optional[ScoreFn] = None,
) -> TreeNode:
    """Build the decision tree for *universe* from the question bank.

    At every node the selected question is removed from the pool handed to
    both subtrees, so no path asks the same question twice.  Leaves are:

    * ``Outcome.identified(id)`` when one candidate remains,
    * :data:`NO_MATCH` when no candidate remains,
    * :data:`EXHAUSTED` when 2+ candidates remain and no questions are left,
    * :data:`UNDISTINGUISHABLE` when questions remain but *score_fn* rejects
      all of them.

    Args:
        universe: Every candidate id.
        questions: The question bank, in tie-break order.
        score_fn: Question scorer.  Defaults to :func:`split_score`, which
            never rejects a question.

    Returns:
        The root node of the built tree.
    """
    _score = score_fn or split_score

    # Paths can be as long as the question bank; no recursion.  ``_Expand``
    # pushes a finished subtree onto ``built``, ``_Assemble`` pops its two
    # children (no on top of yes).
    tasks: List[Union[_Expand, _Assemble]] = [_Expand(frozenset(universe), list(questions))]
    built: List[TreeNode] = []
    while tasks:
        task = tasks.pop()
        if isinstance(task, _Assemble):
            no_branch = built.pop()
            yes_branch = built.pop()
            built.append(Internal(task.question, yes_branch, no_branch))
            continue

        remaining, pool = task.remaining, task.pool
        if len(remaining) == 1:
            built.append(Leaf(Outcome.identified(next(iter(remaining)))))
            continue
        if not remaining:
            built.append(Leaf(NO_MATCH))
            continue
        if not pool:
            built.append(Leaf(EXHAUSTED))
            continue

        index = select_question(remaining, pool, _score)
        if index is None:
            built.append(Leaf(UNDISTINGUISHABLE))
            continue

        chosen = pool[index]
        rest = pool[:index] + pool[index + 1:]
        tasks.append(_Assemble(chosen))
        tasks.append(_Expand(remaining & chosen.no_ids, rest))
        tasks.append(_Expand(remaining & chosen.yes_ids, rest))

    root = built.pop()
    if logger.isEnabledFor(logging.DEBUG):
        counts = outcome_counts(root)
        logger.debug(
            "Built tree: depth=%d, leaves=%s",
            tree_depth(root),
            {kind.value: n for kind, n in counts.items()},
        )
    return root


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


def iter_nodes(root: TreeNode) -> Iterator[TreeNode]:
    """Yield every node breadth-first, yes branch before no branch."""
    queue = deque([root])
    while queue:
        node = queue.popleft()
        yield node
        if isinstance(node, Internal):
            queue.append(node.yes_branch)
            queue.append(node.no_branch)


def tree_depth(root: TreeNode) -> int:
    """Number of questions on the longest root-to-leaf path."""
    deepest = 0
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, Leaf):
            deepest = max(deepest, depth)
            continue
        stack.append((node.yes_branch, depth + 1))
        stack.append((node.no_branch, depth + 1))
    return deepest


def outcome_counts(root: TreeNode) -> Dict[OutcomeKind, int]:
    return dict(Counter(n.outcome.kind for n in iter_nodes(root) if isinstance(n, Leaf)))


# ---------------------------------------------------------------------------
# DOT export + optional render
# ---------------------------------------------------------------------------


def _sanitize_id(s: str) -> str:
    s = re.sub(r"[^a-zA-Z0-9_]+", "_", s.strip())
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "tree"


def _wrap_label(s: str, width: int = 36) -> str:
    """Wrap *s* at *width* characters for DOT labels, escaping quotes."""
    wrapped = "\n".join(textwrap.wrap(s, width=width)) if s else ""
    return wrapped.replace('"', r"\"")


def to_dot(
    root: TreeNode,
    *,
    graph_name: str = "QuestionTree",
    rankdir: str = "TB",
    node_shape: str = "box",
    fontname: str = "Helvetica",
) -> str:
    """Serialise the tree under *root* to Graphviz DOT format.

    Nodes are named ``n0, n1, ...`` in breadth-first order.  Question nodes
    are labelled ``[q<id>] <text>``; leaves carry :meth:`Outcome.describe`
    and are drawn as ellipses.

    Returns:
        A DOT-format string.
    """
    lines: List[str] = []
    lines.append(f"digraph {_sanitize_id(graph_name)} {{")
    lines.append(f"  rankdir={rankdir};")
    lines.append(f'  node [shape={node_shape}, fontname="{fontname}"];')
    lines.append(f'  edge [fontname="{fontname}"];')

    queue = deque([(root, "n0")])
    next_id = 1
    while queue:
        node, name = queue.popleft()
        if isinstance(node, Leaf):
            label = _wrap_label(node.outcome.describe())
            lines.append(f'  {name} [label="{label}", shape=ellipse];')
            continue

        label = _wrap_label(f"[q{node.question.question_id}] {node.question.text}")
        lines.append(f'  {name} [label="{label}"];')
        for branch, child in (("Yes", node.yes_branch), ("No", node.no_branch)):
            child_name = f"n{next_id}"
            next_id += 1
            lines.append(f'  {name} -> {child_name} [label="{branch}"];')
            queue.append((child, child_name))

    lines.append("}")
    return "\n".join(lines)


def render_tree(root: TreeNode, out_path_no_ext: str, *, fmt: str = "svg", **dot_options) -> str:
    """Draw the tree under *root* to ``<out_path_no_ext>.<fmt>`` via Graphviz.

    *dot_options* are passed through to :func:`to_dot`.  The intermediate DOT
    source is removed once the image is written.

    Returns:
        The path of the rendered image.

    Raises:
        RuntimeError: If the ``graphviz`` package is not installed.  The
            package's own ``ExecutableNotFound`` (also a ``RuntimeError``)
            propagates when the ``dot`` binary is missing.
    """
    try:
        import graphviz  # type: ignore
    except ImportError as exc:
        raise RuntimeError(
            "Rendering needs the 'graphviz' package. "
            "Install with: pip install 'character-guesser[render]'"
        ) from exc

    source = graphviz.Source(to_dot(root, **dot_options))
    path = source.render(filename=out_path_no_ext, format=fmt, cleanup=True)
    logger.info("Rendered question tree to %s", path)
    return path
