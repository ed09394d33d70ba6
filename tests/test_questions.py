"""Tests for character_guesser.questions (data model and CSV readers)."""
from __future__ import annotations

import pytest

from character_guesser.questions import (
    NO_MATCH_CHARACTER_ID,
    Character,
    CharacterNotFoundError,
    QuestionSpec,
    parse_id_set,
    read_character_by_id,
    read_character_ids,
    read_questions,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(tmp_path, name: str, text: str) -> str:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


QUESTIONS_CSV = """\
id,text,positive_set,negative_set
1,"Does your character wear glasses?",{1.3},{2.4}
2,"Is your character tall, or short?",{2},{}

3,Plain text question?,{},{1.2.3.4}
"""

CHARACTERS_CSV = """\
id,name,image_path
0,Nobody,images/nobody.png
1,Alice,images/alice.png
2,Bob,images/bob.png
"""


# ---------------------------------------------------------------------------
# QuestionSpec
# ---------------------------------------------------------------------------


def test_question_spec_coerces_sets_to_frozenset():
    q = QuestionSpec(1, "Q?", {1, 2}, [3])
    assert q.yes_ids == frozenset({1, 2})
    assert q.no_ids == frozenset({3})
    assert isinstance(q.yes_ids, frozenset)


def test_question_spec_defaults_empty():
    q = QuestionSpec(1, "Q?")
    assert q.yes_ids == frozenset()
    assert q.no_ids == frozenset()


def test_question_spec_is_immutable():
    q = QuestionSpec(1, "Q?", {1}, {2})
    with pytest.raises(AttributeError):
        q.text = "changed"  # type: ignore[misc]


def test_question_spec_overlapping_sets_allowed():
    q = QuestionSpec(1, "Q?", {1, 2}, {2, 3})
    assert q.yes_ids & q.no_ids == {2}


# ---------------------------------------------------------------------------
# parse_id_set
# ---------------------------------------------------------------------------


def test_parse_id_set_basic():
    assert parse_id_set("{1.2.3}") == frozenset({1, 2, 3})


def test_parse_id_set_empty():
    assert parse_id_set("{}") == frozenset()


def test_parse_id_set_single():
    assert parse_id_set("{32}") == frozenset({32})


def test_parse_id_set_tolerates_whitespace():
    assert parse_id_set("  { 4. 5 }  ") == frozenset({4, 5})


def test_parse_id_set_missing_braces_raises():
    with pytest.raises(ValueError, match="braces"):
        parse_id_set("1.2.3")


def test_parse_id_set_non_integer_raises():
    with pytest.raises(ValueError, match="Invalid id 'x'"):
        parse_id_set("{1.x.3}")


def test_parse_id_set_comma_separated_rejected():
    with pytest.raises(ValueError):
        parse_id_set("{1,2}")


# ---------------------------------------------------------------------------
# read_questions
# ---------------------------------------------------------------------------


def test_read_questions_parses_rows_in_order(tmp_path):
    path = _write(tmp_path, "questions.csv", QUESTIONS_CSV)
    questions = read_questions(path)
    assert [q.question_id for q in questions] == [1, 2, 3]
    assert questions[0] == QuestionSpec(1, "Does your character wear glasses?", {1, 3}, {2, 4})


def test_read_questions_unwraps_quoted_text_with_comma(tmp_path):
    path = _write(tmp_path, "questions.csv", QUESTIONS_CSV)
    assert read_questions(path)[1].text == "Is your character tall, or short?"


def test_read_questions_empty_set_column(tmp_path):
    path = _write(tmp_path, "questions.csv", QUESTIONS_CSV)
    questions = read_questions(path)
    assert questions[1].no_ids == frozenset()
    assert questions[2].yes_ids == frozenset()


def test_read_questions_header_only(tmp_path):
    path = _write(tmp_path, "questions.csv", "id,text,positive_set,negative_set\n")
    assert read_questions(path) == []


def test_read_questions_short_row_raises(tmp_path):
    path = _write(tmp_path, "questions.csv", "id,text,p,n\n1,Only text,{1}\n")
    with pytest.raises(ValueError, match="expected 4 columns"):
        read_questions(path)


def test_read_questions_bad_set_names_line(tmp_path):
    path = _write(tmp_path, "questions.csv", "id,text,p,n\n1,Q?,{1},2\n")
    with pytest.raises(ValueError, match=r"questions\.csv:2"):
        read_questions(path)


def test_read_questions_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_questions(str(tmp_path / "nope.csv"))


# ---------------------------------------------------------------------------
# Character table
# ---------------------------------------------------------------------------


def test_read_character_by_id_found(tmp_path):
    path = _write(tmp_path, "characters.csv", CHARACTERS_CSV)
    assert read_character_by_id(path, 2) == Character(2, "Bob", "images/bob.png")


def test_read_character_by_id_no_match_record(tmp_path):
    path = _write(tmp_path, "characters.csv", CHARACTERS_CSV)
    assert read_character_by_id(path, NO_MATCH_CHARACTER_ID).name == "Nobody"


def test_read_character_by_id_missing_raises(tmp_path):
    path = _write(tmp_path, "characters.csv", CHARACTERS_CSV)
    with pytest.raises(CharacterNotFoundError, match="id 99"):
        read_character_by_id(path, 99)


def test_character_not_found_is_lookup_error():
    assert issubclass(CharacterNotFoundError, LookupError)


def test_read_character_ids_excludes_no_match_record(tmp_path):
    path = _write(tmp_path, "characters.csv", CHARACTERS_CSV)
    assert read_character_ids(path) == frozenset({1, 2})
