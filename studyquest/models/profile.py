"""Progress profile models"""
from typing import Optional
from datetime import date
from pydantic import BaseModel, Field

DEFAULT_SLOT = "default"


class ProgressProfile(BaseModel):
    """XP, level and equipped cosmetics of one user"""
    user_id: str
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    border_style: str = DEFAULT_SLOT
    name_color: str = DEFAULT_SLOT
    full_name: Optional[str] = None
    role: str = "student"  # student, professional
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_study_date: Optional[date] = None


class ActivityLog(BaseModel):
    """Audit row (level changes and other observational events)"""
    user_id: str
    action: str
    details: dict = Field(default_factory=dict)
