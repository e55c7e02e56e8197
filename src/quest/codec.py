"""
Save File Codec

Reads and writes the whole goal store as a line-oriented text file.

File Format:
    <total score>
    <tag>:<name>|<description>|<points>[|<extra fields>]
    ...
    ACHIEVEMENTS:
    <achievement name>
    ...

Extra fields per tag, in order:
- SimpleGoal: completed (True/False)
- EternalGoal: times completed
- ChecklistGoal: bonus, amount completed, target
- NegativeGoal: times failed

The tag ends at the first ':' and fields are separated by '|'. Neither is
escaped, so names and descriptions must not contain them.

Saving composes the complete text before touching the disk and replaces the
destination atomically. Loading parses everything into a Snapshot first and
only then swaps it into the store, so a bad file leaves the store as it was.
"""

import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Tuple, Type, Union

from utils import get_logger

from .achievements import CATALOG_NAMES
from .errors import ParseError, StorageError
from .goals import GOAL_TYPES, ChecklistGoal, EternalGoal, Goal, NegativeGoal, SimpleGoal, to_int

if TYPE_CHECKING:
    from .store import GoalStore


logger = get_logger(__name__)

ACHIEVEMENTS_HEADER = "ACHIEVEMENTS:"
TAG_SEPARATOR = ":"
FIELD_SEPARATOR = "|"

# Fields stored after name, description and points
EXTRA_FIELDS: Dict[Type, Tuple[str, ...]] = {
    SimpleGoal: ('completed',),
    EternalGoal: ('times_completed',),
    ChecklistGoal: ('bonus', 'amount_completed', 'target'),
    NegativeGoal: ('times_failed',),
}

_TYPES_BY_TAG = {goal_type.tag: goal_type for goal_type in GOAL_TYPES}
_BOOL_FIELDS = {'completed'}
_NON_NEGATIVE_FIELDS = {'points', 'bonus', 'times_completed', 'amount_completed', 'times_failed'}


@dataclass
class Snapshot:
    """Fully parsed contents of a save file."""
    total_score: int = 0
    goals: List[Goal] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


def encode_goal(goal: Goal) -> str:
    """Serialize one goal to its save-file line (without newline)."""
    values = [goal.name, goal.description, goal.points]
    values.extend(getattr(goal, name) for name in EXTRA_FIELDS[type(goal)])
    return goal.tag + TAG_SEPARATOR + FIELD_SEPARATOR.join(_format_value(v) for v in values)


def dumps(store: 'GoalStore') -> str:
    """Serialize a store to the complete save-file text."""
    lines = [str(store.total_score)]
    lines.extend(encode_goal(goal) for goal in store.goals)
    lines.append(ACHIEVEMENTS_HEADER)
    lines.extend(store.achievements())
    return "\n".join(lines) + "\n"


def _parse_bool(name: str, text: str, line_number: int) -> bool:
    lowered = text.strip().lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    raise ParseError(f"{name} must be True or False, got {text!r}", line_number)


def _parse_int(name: str, text: str, line_number: int) -> int:
    try:
        number = to_int(text)
    except ValueError:
        raise ParseError(f"{name} must be an integer, got {text!r}", line_number)
    if name in _NON_NEGATIVE_FIELDS and number < 0:
        raise ParseError(f"{name} must not be negative, got {number}", line_number)
    if name == 'target' and number < 1:
        raise ParseError(f"target must be positive, got {number}", line_number)
    return number


def decode_goal(line: str, line_number: int = 0) -> Goal:
    """
    Parse one goal line.

    Args:
        line: Line without trailing newline
        line_number: 1-based line number used in error messages

    Raises:
        ParseError: If the tag, field count or a field value is invalid
    """
    tag, separator, body = line.partition(TAG_SEPARATOR)
    if not separator:
        raise ParseError(f"expected '<tag>:<fields>', got {line!r}", line_number)

    goal_type = _TYPES_BY_TAG.get(tag.strip())
    if goal_type is None:
        raise ParseError(f"unrecognized goal type {tag!r}", line_number)

    extra_names = EXTRA_FIELDS[goal_type]
    fields = body.split(FIELD_SEPARATOR)
    expected = 3 + len(extra_names)
    if len(fields) != expected:
        raise ParseError(
            f"{tag} needs {expected} fields, found {len(fields)}", line_number
        )

    name, description = fields[0], fields[1]
    if not name.strip():
        raise ParseError("goal name must not be empty", line_number)
    points = _parse_int('points', fields[2], line_number)

    extras = {}
    for extra_name, text in zip(extra_names, fields[3:]):
        if extra_name in _BOOL_FIELDS:
            extras[extra_name] = _parse_bool(extra_name, text, line_number)
        else:
            extras[extra_name] = _parse_int(extra_name, text, line_number)

    return goal_type(name, description, points, **extras)


def _split_lines(text: str) -> List[str]:
    """Split on "\n" only; other Unicode line breaks may appear inside fields."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def loads(text: str) -> Snapshot:
    """
    Parse save-file text into a Snapshot without touching any store.

    Blank lines are ignored. A file without an ACHIEVEMENTS: section has no
    achievements.

    Raises:
        ParseError: On the first malformed line
    """
    lines = _split_lines(text)
    if not lines or not lines[0].strip():
        raise ParseError("missing total score", 1)

    try:
        total_score = to_int(lines[0])
    except ValueError:
        raise ParseError(f"total score must be an integer, got {lines[0]!r}", 1)

    snapshot = Snapshot(total_score=total_score)
    reading_achievements = False

    for line_number, line in enumerate(lines[1:], 2):
        if not line.strip():
            continue

        if not reading_achievements and line.strip() == ACHIEVEMENTS_HEADER:
            reading_achievements = True
            continue

        if reading_achievements:
            name = line.strip()
            if name in snapshot.achievements:
                continue
            if name not in CATALOG_NAMES:
                logger.warning(f"Line {line_number}: unknown achievement {name!r} kept as-is")
            snapshot.achievements.append(name)
        else:
            snapshot.goals.append(decode_goal(line, line_number))

    return snapshot


def _target_mode(path: Path) -> int:
    """Permission bits for the replacement file: the existing file's, else umask default."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def save(store: 'GoalStore', path: Union[str, Path]) -> None:
    """
    Write the store to `path`, replacing any existing file.

    Raises:
        StorageError: If the file cannot be written; an existing file is
            left untouched
    """
    path = Path(path)
    content = dumps(store)

    temp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            'w',
            encoding='utf-8',
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix='.tmp',
            delete=False
        ) as temp_file:
            temp_name = temp_file.name
            temp_file.write(content)
        os.chmod(temp_name, _target_mode(path))
        os.replace(temp_name, path)
    except OSError as e:
        if temp_name and os.path.exists(temp_name):
            os.remove(temp_name)
        logger.error(f"Failed to save goals to {path}: {e}")
        raise StorageError('write', str(path), e.strerror or str(e))

    logger.info(f"Saved {len(store.goals)} goals to {path}")


def load(store: 'GoalStore', path: Union[str, Path]) -> None:
    """
    Replace the store's contents with those of the file at `path`.

    Raises:
        StorageError: If the file is missing or unreadable
        ParseError: If the file is malformed; the store is unchanged
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8-sig')
    except FileNotFoundError:
        raise StorageError('read', str(path), "file not found")
    except UnicodeDecodeError as e:
        raise ParseError(f"not UTF-8 text ({e.reason})")
    except OSError as e:
        raise StorageError('read', str(path), e.strerror or str(e))

    try:
        snapshot = loads(text)
    except ParseError as e:
        logger.warning(f"Rejected {path}: {e}")
        raise

    store.replace(snapshot.goals, snapshot.total_score, snapshot.achievements)
    logger.info(f"Loaded {len(snapshot.goals)} goals from {path}")
