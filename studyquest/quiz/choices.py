"""
Multiple-choice option generation and answer matching

Distractors are derived from the stored answer itself:
- Numbers: n+1, n-1 and n*2 (1 when n is 0)
- Text: plural "s", last character dropped, upper-cased, capitalized
"""

import math
import random
import re
from typing import List, Optional

MAX_CHOICES = 4
MAX_DISTRACTORS = MAX_CHOICES - 1

_WHITESPACE = re.compile(r"\s+")


def parse_number(value: str) -> Optional[float]:
    """Float value of a numeric answer, None for text (and nan/inf)"""
    if "_" in value:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def format_number(number: float) -> str:
    if number.is_integer():
        return str(int(number))
    return repr(number)


def normalize_answer(value: str) -> str:
    """Trim, collapse internal whitespace and lower-case"""
    return _WHITESPACE.sub(" ", value.strip()).lower()


def is_correct_answer(selected: str, stored: str) -> bool:
    """Case/whitespace-insensitive match, falling back to numeric equality"""
    if normalize_answer(selected) == normalize_answer(stored):
        return True

    selected_number = parse_number(selected)
    stored_number = parse_number(stored)
    if selected_number is None or stored_number is None:
        return False
    return selected_number == stored_number


def _numeric_distractors(number: float) -> List[str]:
    candidates = [number + 1, number - 1, 1.0 if number == 0 else number * 2]
    return [format_number(c) for c in candidates if c != number and math.isfinite(c)]


def _text_distractors(answer: str) -> List[str]:
    return [
        answer + "s",
        answer[:-1],
        answer.upper(),
        answer[:1].upper() + answer[1:],
    ]


def generate_choices(correct_answer: str, rng: Optional[random.Random] = None) -> List[str]:
    """
    Build the shuffled option list for a card

    The result holds ``correct_answer`` exactly once, between 1 and 4
    entries, and no duplicates.

    Args:
        correct_answer: The card's stored answer
        rng: Randomness source for the shuffle (module RNG when omitted)
    """
    number = parse_number(correct_answer)
    if number is not None:
        candidates = _numeric_distractors(number)
    else:
        candidates = _text_distractors(correct_answer)

    distractors: List[str] = []
    for candidate in candidates:
        if not candidate or candidate == correct_answer or candidate in distractors:
            continue
        distractors.append(candidate)

    choices = ([correct_answer] + distractors[:MAX_DISTRACTORS])[:MAX_CHOICES]
    (rng or random).shuffle(choices)
    return choices
