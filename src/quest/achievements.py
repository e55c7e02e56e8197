"""
Achievement catalog and evaluation.

Achievements are unlocked from counts over the current goals and are never
revoked. Evaluation only reads goals; the store records what it returns.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from .goals import ChecklistGoal, EternalGoal, Goal, SimpleGoal, is_complete


@dataclass(frozen=True)
class Achievement:
    """A catalog entry: unlocked when `counts[metric] >= threshold`."""
    name: str
    description: str
    metric: str
    threshold: int


# Evaluation order is catalog order
CATALOG = (
    Achievement("Scripture Warrior", "Complete 50 eternal goals", "eternal_goals", 50),
    Achievement("Goal Crusher", "Complete 10 simple goals", "completed_simple", 10),
    Achievement("Completionist", "Complete 5 checklist goals", "completed_checklist", 5),
)

CATALOG_NAMES = tuple(achievement.name for achievement in CATALOG)


def count_progress(goals: Iterable[Goal]) -> Dict[str, int]:
    """
    Count the metrics achievements are measured against.

    Eternal goals are counted by presence, not by how often they were recorded.
    """
    counts = {'completed_simple': 0, 'eternal_goals': 0, 'completed_checklist': 0}
    for goal in goals:
        if isinstance(goal, SimpleGoal) and is_complete(goal):
            counts['completed_simple'] += 1
        elif isinstance(goal, EternalGoal):
            counts['eternal_goals'] += 1
        elif isinstance(goal, ChecklistGoal) and is_complete(goal):
            counts['completed_checklist'] += 1
    return counts


def evaluate(goals: Iterable[Goal], unlocked: Iterable[str]) -> List[str]:
    """
    Determine which achievements become unlocked.

    Args:
        goals: Current goals
        unlocked: Names already unlocked

    Returns:
        Newly unlocked names in catalog order (empty if none)
    """
    already = set(unlocked)
    counts = count_progress(goals)
    return [
        achievement.name
        for achievement in CATALOG
        if achievement.name not in already
        and counts[achievement.metric] >= achievement.threshold
    ]


def describe(name: str) -> str:
    for achievement in CATALOG:
        if achievement.name == name:
            return achievement.description
    return ""
