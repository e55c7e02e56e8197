"""
Goal Store

Owns the ordered goals, the running score and the unlocked achievements.
All mutation goes through this class; goals are addressed by position.

Usage:
    store = GoalStore()
    index = store.create_goal("simple", "Run a marathon", "26.2 miles", 1000)
    store.record_event(index)         # 1000
    store.display_score().level       # 2
    store.save("goals.txt")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from utils import get_logger

from . import codec
from .achievements import evaluate
from .errors import GoalIndexError
from .goals import Goal, build_goal, details_text, record_event
from .levels import level_for, points_to_next_level, title_for


logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoreSummary:
    """Score with the level derived from it."""
    total_score: int
    level: int
    title: str
    points_to_next_level: Optional[int]


class GoalStore:
    """In-memory goals, score and achievements for one session."""

    def __init__(self):
        self.goals: List[Goal] = []
        self.total_score = 0
        self._achievements: List[str] = []

    def __len__(self) -> int:
        return len(self.goals)

    def __eq__(self, other) -> bool:
        if not isinstance(other, GoalStore):
            return NotImplemented
        return (
            self.total_score == other.total_score
            and self.goals == other.goals
            and self._achievements == other._achievements
        )

    def __repr__(self) -> str:
        return (
            f"GoalStore(goals={len(self.goals)}, total_score={self.total_score}, "
            f"achievements={self._achievements!r})"
        )

    def create_goal(
        self,
        kind: Union[str, int],
        name: str,
        description: str,
        points: Union[int, str],
        bonus: Union[int, str, None] = None,
        target: Union[int, str, None] = None
    ) -> int:
        """
        Create a goal and append it to the store.

        Args:
            kind: simple, eternal, checklist or negative (or tag / menu number)
            name: Goal name
            description: Short description
            points: Base points
            bonus: Checklist bonus
            target: Checklist target count

        Returns:
            Index of the new goal

        Raises:
            ValidationError: If the input is invalid; nothing is appended
        """
        goal = build_goal(kind, name, description, points, bonus=bonus, target=target)
        self.goals.append(goal)
        logger.info(f"Created {goal.kind} goal {goal.name!r} at index {len(self.goals) - 1}")
        return len(self.goals) - 1

    def get_goal(self, index: int) -> Goal:
        """
        Raises:
            GoalIndexError: If index is outside 0..len-1
        """
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.goals):
            raise GoalIndexError(index, len(self.goals))
        return self.goals[index]

    def record_event(self, index: int) -> int:
        """
        Record an event against the goal at `index`.

        The returned delta is added to the score (which may go negative) and
        achievements are re-evaluated.

        Returns:
            Points gained (negative for negative goals, 0 for a finished simple goal)

        Raises:
            GoalIndexError: If index is out of range
        """
        goal = self.get_goal(index)
        delta = record_event(goal)
        self.total_score += delta
        logger.info(f"Recorded event for {goal.name!r}: {delta:+d} points, total {self.total_score}")

        for name in evaluate(self.goals, self._achievements):
            self._achievements.append(name)
            logger.info(f"Achievement unlocked: {name}")

        return delta

    def list_goals(self) -> Iterator[str]:
        """Yield each goal's display line in insertion order."""
        for goal in self.goals:
            yield details_text(goal)

    def display_score(self) -> ScoreSummary:
        level = level_for(self.total_score)
        return ScoreSummary(
            total_score=self.total_score,
            level=level,
            title=title_for(level),
            points_to_next_level=points_to_next_level(self.total_score),
        )

    def achievements(self) -> List[str]:
        """Unlocked achievement names in unlock order."""
        return list(self._achievements)

    def replace(self, goals: Iterable[Goal], total_score: int, achievements: Iterable[str]) -> None:
        """Swap in complete new contents, as produced by a successful load."""
        new_achievements: List[str] = []
        for name in achievements:
            if name not in new_achievements:
                new_achievements.append(name)
        self.goals, self.total_score, self._achievements = list(goals), total_score, new_achievements

    def save(self, path: Union[str, Path]) -> None:
        codec.save(self, path)

    def load(self, path: Union[str, Path]) -> None:
        codec.load(self, path)
