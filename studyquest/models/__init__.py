"""Pydantic models for the progression core"""
from studyquest.models.profile import ProgressProfile, ActivityLog, DEFAULT_SLOT
from studyquest.models.achievement import Achievement, AchievementKind
from studyquest.models.shop import ShopItem, ItemType, PurchaseResult, SLOT_FIELDS
from studyquest.models.deck import StudyDeck, CardItem
from studyquest.models.session import (
    SessionState,
    CardStatus,
    CardVisit,
    Unanswered,
    Selected,
    Revealed,
    StudySessionResult,
    XP_PER_CORRECT_ANSWER,
)

__all__ = [
    "ProgressProfile",
    "ActivityLog",
    "DEFAULT_SLOT",
    "Achievement",
    "AchievementKind",
    "ShopItem",
    "ItemType",
    "PurchaseResult",
    "SLOT_FIELDS",
    "StudyDeck",
    "CardItem",
    "SessionState",
    "CardStatus",
    "CardVisit",
    "Unanswered",
    "Selected",
    "Revealed",
    "StudySessionResult",
    "XP_PER_CORRECT_ANSWER",
]
