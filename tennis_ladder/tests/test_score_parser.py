"""
Tests for the score parser - set validation and canonical score strings.
"""
import pytest

from tennis_ladder.services import score_parser
from tennis_ladder.services.exceptions import (
    IncompleteSetError,
    InvalidSetScoreError,
    ScoreError,
)
from tennis_ladder.services.score_parser import ScorePolicy, build_score, parse_score, split_score


def test_two_set_match():
    """Sets are joined by one space as W-L."""
    assert build_score("6", "4", "6", "3") == "6-4 6-3"


def test_three_set_match():
    assert build_score("6", "4", "3", "6", "10", "8") == "6-4 3-6 10-8"


def test_integer_and_padded_values():
    """JSON numbers and surrounding whitespace are accepted."""
    assert build_score(6, 4, " 7 ", "6 ", None, "") == "6-4 7-6"


def test_blank_third_set_is_ignored():
    parsed = parse_score([("6", "2"), ("6", "1"), ("", "  ")])
    assert parsed.sets == ((6, 2), (6, 1))
    assert parsed.canonical == "6-2 6-1"


@pytest.mark.parametrize(
    "sets",
    [
        ((6, 4), (6, 3)),
        ((7, 6), (4, 6), (10, 8)),
        ((0, 6), (6, 0), (1, 0)),
        ((10, 9), (9, 10)),
    ],
)
def test_canonical_score_splits_back_to_sets(sets):
    """Splitting the canonical string on spaces then '-' gives the validated pairs."""
    raw = [(str(w), str(l)) for w, l in sets]
    canonical = parse_score(raw).canonical
    assert split_score(canonical) == sets
    assert [tuple(int(n) for n in chunk.split("-")) for chunk in canonical.split(" ")] == list(sets)


@pytest.mark.parametrize("w_s3, l_s3", [("6", ""), ("", "4"), ("6", None), (None, "4")])
def test_one_sided_third_set_rejected(w_s3, l_s3):
    """A third set needs both values, even when sets 1 and 2 are valid."""
    with pytest.raises(IncompleteSetError) as exc_info:
        build_score("6", "4", "4", "6", w_s3, l_s3)
    assert exc_info.value.set_number == 3


@pytest.mark.parametrize(
    "raw_sets, set_number",
    [
        ([("", "4"), ("6", "3")], 1),
        ([("6", None), ("6", "3")], 1),
        ([("6", "4"), ("6", "")], 2),
        ([("6", "4")], 2),
        ([], 1),
    ],
)
def test_mandatory_sets_must_be_complete(raw_sets, set_number):
    with pytest.raises(IncompleteSetError) as exc_info:
        parse_score(raw_sets)
    assert exc_info.value.set_number == set_number
    assert f"Set {set_number}" in str(exc_info.value)


@pytest.mark.parametrize("bad_value", ["six", "6.5", "-1", "+6", "1e1", "٣"])
def test_non_integer_games_rejected(bad_value):
    with pytest.raises(InvalidSetScoreError) as exc_info:
        build_score("6", bad_value, "6", "3")
    assert exc_info.value.set_number == 1
    assert "whole numbers" in str(exc_info.value)


def test_strict_caps_regular_sets_at_ten():
    assert build_score("10", "8", "6", "4") == "10-8 6-4"
    with pytest.raises(InvalidSetScoreError) as exc_info:
        build_score("6", "4", "11", "9")
    assert exc_info.value.set_number == 2
    assert "between 0 and 10" in str(exc_info.value)


def test_strict_caps_third_set_at_twenty():
    assert build_score("6", "4", "4", "6", "20", "18") == "6-4 4-6 20-18"
    with pytest.raises(InvalidSetScoreError, match="between 0 and 20"):
        build_score("6", "4", "4", "6", "21", "19")


def test_strict_rejects_zero_zero_set():
    with pytest.raises(InvalidSetScoreError, match="0-0"):
        build_score("6", "4", "0", "0")


def test_lenient_policy_allows_large_and_zero_sets():
    assert build_score("0", "0", "15", "13", policy=ScorePolicy.LENIENT) == "0-0 15-13"
    assert build_score("6", "4", "4", "6", "25", "23", policy=ScorePolicy.LENIENT) == "6-4 4-6 25-23"


def test_lenient_policy_still_requires_integers():
    with pytest.raises(InvalidSetScoreError):
        build_score("6", "-2", "6", "3", policy=ScorePolicy.LENIENT)


def test_more_than_three_sets_rejected():
    with pytest.raises(InvalidSetScoreError):
        parse_score([("6", "4")] * 4)


def test_score_errors_are_value_errors():
    """Routes catch ScoreError; callers outside the API can treat them as ValueError."""
    with pytest.raises(ScoreError):
        build_score("", "", "6", "3")
    with pytest.raises(ValueError):
        build_score("", "", "6", "3")


def test_split_score_malformed():
    assert split_score("") == ()
    with pytest.raises(ValueError):
        split_score("6:4 6-3")


def test_format_score():
    assert score_parser.format_score([(6, 4), (7, 5)]) == "6-4 7-5"
