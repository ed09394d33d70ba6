"""Question bank and character table: data model plus CSV readers.

The question CSV has a header row followed by ``id,text,positiveSet,negativeSet``
records.  Id sets are written ``{1.2.3}``: braces around a *period*-separated
list so they never clash with the comma field delimiter.  ``{}`` is the empty
set.

The character CSV has a header row followed by ``id,name,imagePath`` records.
Characters are looked up on demand rather than preloaded.
"""

from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, List

logger = logging.getLogger(__name__)

#: Id of the "nobody matches" record in the character table.
NO_MATCH_CHARACTER_ID = 0

#: Sample question bank and character table shipped with the package.
SAMPLE_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
SAMPLE_QUESTIONS_CSV = os.path.join(SAMPLE_DATA_DIR, "questions.csv")
SAMPLE_CHARACTERS_CSV = os.path.join(SAMPLE_DATA_DIR, "characters.csv")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuestionSpec:
    """A yes/no question and the candidates each answer points at.

    ``yes_ids`` and ``no_ids`` need not be disjoint, nor cover every
    candidate; an id missing from both is simply not discriminated.
    """

    question_id: int
    text: str
    yes_ids: FrozenSet[int] = field(default_factory=frozenset)
    no_ids: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "yes_ids", frozenset(self.yes_ids))
        object.__setattr__(self, "no_ids", frozenset(self.no_ids))


@dataclass(frozen=True)
class Character:
    char_id: int
    name: str
    image_path: str


class CharacterNotFoundError(LookupError):
    """No row in the character table carries the requested id."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_id_set(text: str) -> FrozenSet[int]:
    """Parse ``"{1.2.3}"`` into ``frozenset({1, 2, 3})``.

    Raises:
        ValueError: If *text* is not brace-delimited or an item is not an
            integer.
    """
    raw = text.strip()
    if len(raw) < 2 or raw[0] != "{" or raw[-1] != "}":
        raise ValueError(f"Id set must be wrapped in braces: {text!r}")
    body = raw[1:-1].strip()
    if not body:
        return frozenset()
    ids = set()
    for item in body.split("."):
        try:
            ids.add(int(item.strip()))
        except ValueError:
            raise ValueError(f"Invalid id {item!r} in id set {text!r}") from None
    return frozenset(ids)


def _data_rows(path: str):
    """Yield ``(line_number, row)`` for every non-blank row after the header."""
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for row in reader:
            if not row or all(not cell.strip() for cell in row):
                continue
            yield reader.line_num, row


def read_questions(path: str) -> List[QuestionSpec]:
    """Read the question bank at *path*, in file order.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If a row has fewer than four columns or a malformed field.
    """
    questions: List[QuestionSpec] = []
    for line_num, row in _data_rows(path):
        if len(row) < 4:
            raise ValueError(f"{path}:{line_num}: expected 4 columns, got {len(row)}")
        id_str, text, yes_str, no_str = row[:4]
        try:
            questions.append(
                QuestionSpec(
                    question_id=int(id_str),
                    text=text.strip(),
                    yes_ids=parse_id_set(yes_str),
                    no_ids=parse_id_set(no_str),
                )
            )
        except ValueError as exc:
            raise ValueError(f"{path}:{line_num}: {exc}") from exc
    logger.info("Read %d questions from %s", len(questions), path)
    return questions


def read_character_by_id(path: str, char_id: int) -> Character:
    """Scan the character table at *path* for *char_id*.

    Raises:
        FileNotFoundError: If *path* does not exist.
        CharacterNotFoundError: If no row carries *char_id*.
    """
    for _, row in _data_rows(path):
        if len(row) >= 3 and int(row[0]) == char_id:
            return Character(char_id=char_id, name=row[1].strip(), image_path=row[2].strip())
    raise CharacterNotFoundError(f"Character with id {char_id} not found in {path}")


def read_character_ids(path: str) -> FrozenSet[int]:
    """Return every playable character id in the table at *path*.

    The reserved :data:`NO_MATCH_CHARACTER_ID` row is not part of the universe.
    """
    ids = frozenset(
        int(row[0]) for _, row in _data_rows(path) if int(row[0]) != NO_MATCH_CHARACTER_ID
    )
    logger.info("Read %d character ids from %s", len(ids), path)
    return ids
