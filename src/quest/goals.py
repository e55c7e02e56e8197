"""
Goal Variants

A goal is one of four plain records. Behaviour lives in per-variant
function tables instead of methods, so adding a variant means adding one
dataclass and one entry to each table below.

Variants:
- SimpleGoal: completed once, awards its points a single time
- EternalGoal: never completes, awards its points every time
- ChecklistGoal: completed after `target` events, pays `bonus` once on the
  event that first reaches the target
- NegativeGoal: a habit to avoid; every event costs `points`

Usage:
    goal = build_goal("checklist", "Read", "Read scriptures", 10, bonus=5, target=3)
    record_event(goal)      # 10
    details_text(goal)      # "[ ] Read (Read scriptures) -- Completed 1/3"
"""

import re
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Optional, Type, Union

from .errors import ValidationError


_INT_PATTERN = re.compile(r'[+-]?[0-9]+')


@dataclass
class SimpleGoal:
    """A one-shot goal."""
    kind: ClassVar[str] = "simple"
    tag: ClassVar[str] = "SimpleGoal"

    name: str
    description: str
    points: int
    completed: bool = False


@dataclass
class EternalGoal:
    """A goal that is never finished."""
    kind: ClassVar[str] = "eternal"
    tag: ClassVar[str] = "EternalGoal"

    name: str
    description: str
    points: int
    times_completed: int = 0


@dataclass
class ChecklistGoal:
    """A goal that must be accomplished `target` times."""
    kind: ClassVar[str] = "checklist"
    tag: ClassVar[str] = "ChecklistGoal"

    name: str
    description: str
    points: int
    bonus: int
    target: int
    amount_completed: int = 0


@dataclass
class NegativeGoal:
    """A bad habit; `points` is the magnitude lost per event."""
    kind: ClassVar[str] = "negative"
    tag: ClassVar[str] = "NegativeGoal"

    name: str
    description: str
    points: int
    times_failed: int = 0


Goal = Union[SimpleGoal, EternalGoal, ChecklistGoal, NegativeGoal]

# Order matches the numbering of the interactive menu
GOAL_TYPES = (SimpleGoal, EternalGoal, ChecklistGoal, NegativeGoal)

KIND_LABELS = {
    SimpleGoal: "Simple Goal",
    EternalGoal: "Eternal Goal",
    ChecklistGoal: "Checklist Goal",
    NegativeGoal: "Negative Goal (lose points for bad habits)",
}

_KIND_ALIASES: Dict[str, Type] = {}
for _number, _goal_type in enumerate(GOAL_TYPES, 1):
    _KIND_ALIASES[_goal_type.kind] = _goal_type
    _KIND_ALIASES[_goal_type.tag.lower()] = _goal_type
    _KIND_ALIASES[str(_number)] = _goal_type


def to_int(value: Union[int, str]) -> int:
    """
    Convert user or file input to an int.

    Only an optional sign and ASCII digits are accepted, so values such as
    "1_000", "1e3" or "10.0" are rejected.

    Raises:
        ValueError: If the value is not a plain integer
    """
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"not an integer: {value!r}")
    return int(text)


def resolve_kind(kind: Union[str, int]) -> Type:
    """
    Map a kind name, save-file tag or menu number to its goal class.

    Raises:
        ValidationError: If the kind is not recognized
    """
    goal_type = _KIND_ALIASES.get(str(kind).strip().lower())
    if goal_type is None:
        raise ValidationError('kind', f"unknown goal type {kind!r}")
    return goal_type


def _require_int(field: str, value, minimum: Optional[int] = None) -> int:
    if value is None:
        raise ValidationError(field, "a value is required")
    try:
        number = to_int(value)
    except ValueError:
        raise ValidationError(field, f"{value!r} is not a whole number")
    if minimum is not None and number < minimum:
        raise ValidationError(field, f"must be at least {minimum}, got {number}")
    return number


def build_goal(
    kind: Union[str, int],
    name: str,
    description: str,
    points: Union[int, str],
    bonus: Union[int, str, None] = None,
    target: Union[int, str, None] = None
) -> Goal:
    """
    Validate creation input and construct a fresh goal.

    Args:
        kind: Variant name, save-file tag or menu number (1-4)
        name: Goal name, must not be blank
        description: Short description
        points: Base points (a magnitude, also for negative goals)
        bonus: Checklist bonus, required for checklist goals
        target: Checklist target count, required for checklist goals

    Returns:
        New goal with all counters at zero

    Raises:
        ValidationError: If any input is invalid
    """
    goal_type = resolve_kind(kind)

    name = (name or "").strip()
    if not name:
        raise ValidationError('name', "must not be empty")
    description = (description or "").strip()
    for field_name, text in (("name", name), ("description", description)):
        if "\n" in text or "\r" in text:
            raise ValidationError(field_name, "must be a single line")
    base_points = _require_int('points', points, minimum=0)

    if goal_type is ChecklistGoal:
        return ChecklistGoal(
            name,
            description,
            base_points,
            bonus=_require_int('bonus', bonus, minimum=0),
            target=_require_int('target', target, minimum=1),
        )
    return goal_type(name, description, base_points)


# --- record_event -----------------------------------------------------------

def _record_simple(goal: SimpleGoal) -> int:
    if goal.completed:
        return 0
    goal.completed = True
    return goal.points


def _record_eternal(goal: EternalGoal) -> int:
    goal.times_completed += 1
    return goal.points


def _record_checklist(goal: ChecklistGoal) -> int:
    goal.amount_completed += 1
    if goal.amount_completed == goal.target:
        return goal.points + goal.bonus
    return goal.points


def _record_negative(goal: NegativeGoal) -> int:
    goal.times_failed += 1
    return -goal.points


# --- is_complete ------------------------------------------------------------

def _never(goal: Goal) -> bool:
    return False


# --- details_text -----------------------------------------------------------

def _checkbox(done: bool) -> str:
    return "[X]" if done else "[ ]"


def _details_simple(goal: SimpleGoal) -> str:
    return f"{_checkbox(goal.completed)} {goal.name} ({goal.description})"


def _details_eternal(goal: EternalGoal) -> str:
    return f"[ ] {goal.name} ({goal.description}) -- Completed {goal.times_completed} times"


def _details_checklist(goal: ChecklistGoal) -> str:
    checkbox = _checkbox(goal.amount_completed >= goal.target)
    return (
        f"{checkbox} {goal.name} ({goal.description}) -- "
        f"Completed {goal.amount_completed}/{goal.target}"
    )


def _details_negative(goal: NegativeGoal) -> str:
    return f"[!] {goal.name} ({goal.description}) -- Failed {goal.times_failed} times"


_RECORDERS: Dict[Type, Callable[..., int]] = {
    SimpleGoal: _record_simple,
    EternalGoal: _record_eternal,
    ChecklistGoal: _record_checklist,
    NegativeGoal: _record_negative,
}

_COMPLETION_CHECKS: Dict[Type, Callable[..., bool]] = {
    SimpleGoal: lambda goal: goal.completed,
    EternalGoal: _never,
    ChecklistGoal: lambda goal: goal.amount_completed >= goal.target,
    NegativeGoal: _never,
}

_DETAILS: Dict[Type, Callable[..., str]] = {
    SimpleGoal: _details_simple,
    EternalGoal: _details_eternal,
    ChecklistGoal: _details_checklist,
    NegativeGoal: _details_negative,
}


def _dispatch(table: Dict[Type, Callable], goal: Goal) -> Callable:
    try:
        return table[type(goal)]
    except KeyError:
        raise TypeError(f"Not a goal: {goal!r}")


def record_event(goal: Goal) -> int:
    """Record one occurrence against the goal and return the points delta."""
    return _dispatch(_RECORDERS, goal)(goal)


def is_complete(goal: Goal) -> bool:
    return _dispatch(_COMPLETION_CHECKS, goal)(goal)


def details_text(goal: Goal) -> str:
    """Human-readable line with completion marker, name, description and progress."""
    return _dispatch(_DETAILS, goal)(goal)
