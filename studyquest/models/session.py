"""Quiz session models"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union
from uuid import uuid4
from pydantic import BaseModel, Field

XP_PER_CORRECT_ANSWER = 10


class SessionState(str, Enum):
    """Lifecycle of a quiz session"""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    COMPLETING = "completing"
    COMPLETED = "completed"


class CardStatus(str, Enum):
    """Per-card result within one traversal"""
    UNANSWERED = "unanswered"
    CORRECT_ANSWER = "correct_answer"
    WRONG_ANSWER = "wrong_answer"
    REVEALED_NO_ANSWER = "revealed_no_answer"

    @property
    def is_answered(self) -> bool:
        return self is not CardStatus.UNANSWERED


# Visit state of the card currently on screen. Reset to Unanswered on every
# index change.

@dataclass(frozen=True)
class Unanswered:
    pass


@dataclass(frozen=True)
class Selected:
    option: str
    correct: bool


@dataclass(frozen=True)
class Revealed:
    answer: str
    option: Optional[str] = None  # the selection made before revealing, if any


CardVisit = Union[Unanswered, Selected, Revealed]


class StudySessionResult(BaseModel):
    """Append-only log row, one per completed traversal"""
    session_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    deck_id: str
    questions_answered: int = Field(ge=0)
    correct_answers: int = Field(ge=0)
    xp_earned: int = Field(ge=0)
    session_date: date = Field(default_factory=date.today)
