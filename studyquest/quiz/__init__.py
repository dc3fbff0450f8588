"""Flashcard quiz engine"""

from studyquest.quiz.choices import generate_choices, is_correct_answer, normalize_answer
from studyquest.quiz.session import QuizSession

__all__ = [
    "generate_choices",
    "is_correct_answer",
    "normalize_answer",
    "QuizSession",
]
