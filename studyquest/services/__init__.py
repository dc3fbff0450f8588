"""
Service Layer Package

Business flows that combine the progression engines:
- GamificationService: post XP, progress summaries, leaderboards
"""

from studyquest.services.gamification_service import GamificationService

__all__ = ["GamificationService"]
