"""
Goal tracking core for Eternal Quest.

Provides the goal variants, the store that scores them, achievement
evaluation, levels, the save-file codec and the optional activity log.
"""

from .errors import QuestError, ValidationError, GoalIndexError, ParseError, StorageError
from .goals import (
    Goal, SimpleGoal, EternalGoal, ChecklistGoal, NegativeGoal, GOAL_TYPES,
    build_goal, record_event, is_complete, details_text
)
from .achievements import CATALOG, Achievement
from .codec import encode_goal as serialize
from .store import GoalStore, ScoreSummary
from .activity_log import ActivityLog

__all__ = [
    'QuestError', 'ValidationError', 'GoalIndexError', 'ParseError', 'StorageError',
    'Goal', 'SimpleGoal', 'EternalGoal', 'ChecklistGoal', 'NegativeGoal', 'GOAL_TYPES',
    'build_goal', 'record_event', 'is_complete', 'details_text', 'serialize',
    'CATALOG', 'Achievement',
    'GoalStore', 'ScoreSummary',
    'ActivityLog'
]
