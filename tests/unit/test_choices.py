"""Unit tests for choice generation and answer matching (studyquest/quiz/choices.py)"""
import random

import pytest

from studyquest.quiz.choices import (
    format_number,
    generate_choices,
    is_correct_answer,
    normalize_answer,
    parse_number,
)


def assert_valid_choices(choices, answer):
    assert 1 <= len(choices) <= 4
    assert choices.count(answer) == 1
    assert len(set(choices)) == len(choices)


# ============================================================================
# Choice Generation Tests
# ============================================================================

@pytest.mark.parametrize("answer", ["5", "0", "2.5", "-3", "Paris", "a", "New York", "5.0"])
def test_generate_choices_invariants(answer, rng):
    """Test answer present once, 1 to 4 entries, no duplicates"""
    assert_valid_choices(generate_choices(answer, rng), answer)


def test_generate_choices_numeric():
    """Test numeric distractors n+1, n-1, n*2"""
    assert set(generate_choices("5")) == {"5", "6", "4", "10"}


def test_generate_choices_zero():
    """Test zero gets 1 instead of a duplicate 0"""
    assert set(generate_choices("0")) == {"0", "1", "-1"}


def test_generate_choices_decimal():
    """Test decimal answers keep a decimal form"""
    assert set(generate_choices("2.5")) == {"2.5", "3.5", "1.5", "5"}


def test_generate_choices_text():
    """Test text distractors derived from the answer"""
    assert set(generate_choices("Paris")) == {"Paris", "Pariss", "Pari", "PARIS"}


def test_generate_choices_single_character():
    """Test empty and duplicate distractors are dropped"""
    assert set(generate_choices("a")) == {"a", "as", "A"}


def test_generate_choices_deterministic_with_rng():
    """Test equal seeds give equal orderings"""
    first = generate_choices("Paris", random.Random(7))
    second = generate_choices("Paris", random.Random(7))

    assert first == second


# ============================================================================
# Answer Matching Tests
# ============================================================================

def test_normalize_answer():
    """Test trim, whitespace collapse and lower-case"""
    assert normalize_answer("  New   York ") == "new york"


@pytest.mark.parametrize("selected,stored", [
    ("Paris ", "paris"),
    ("10", "10.0"),
    ("1e1", "10"),
    ("new  york", "New York"),
])
def test_is_correct_answer_matches(selected, stored):
    """Test case, whitespace and numeric equivalence"""
    assert is_correct_answer(selected, stored) is True


@pytest.mark.parametrize("selected,stored", [
    ("10", "ten"),
    ("Pariss", "Paris"),
    ("4", "5"),
])
def test_is_correct_answer_mismatches(selected, stored):
    """Test different answers do not match"""
    assert is_correct_answer(selected, stored) is False


def test_parse_number():
    """Test numeric parsing ignores text and non-finite values"""
    assert parse_number(" 42 ") == 42.0
    assert parse_number("Paris") is None
    assert parse_number("nan") is None
    assert parse_number("inf") is None
    assert parse_number("1_000") is None


def test_format_number():
    """Test integral floats render without a decimal point"""
    assert format_number(10.0) == "10"
    assert format_number(-1.0) == "-1"
    assert format_number(3.5) == "3.5"
