"""
Score levels.

Every 1000 points is one level, up to level 10. Negative scores, which
negative goals make possible, stay at level 1.
"""

from typing import Optional

POINTS_PER_LEVEL = 1000

LEVEL_TITLES = (
    "Beginner", "Apprentice", "Journeyman", "Skilled", "Expert",
    "Master", "Grandmaster", "Champion", "Hero", "Legend",
)

MAX_LEVEL = len(LEVEL_TITLES)


def level_for(score: int) -> int:
    """Level 1-10 for a score, using floor division and clamping both ends."""
    return max(1, min(MAX_LEVEL, score // POINTS_PER_LEVEL + 1))


def title_for(level: int) -> str:
    return LEVEL_TITLES[level - 1]


def points_to_next_level(score: int) -> Optional[int]:
    """Points still needed for the next level, or None at the maximum level."""
    level = level_for(score)
    if level >= MAX_LEVEL:
        return None
    return level * POINTS_PER_LEVEL - score
