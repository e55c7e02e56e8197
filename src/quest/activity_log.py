"""
Activity Log - Recorded Events

Keeps an append-only history of recorded events as Markdown with YAML
frontmatter, next to the save file. The log is a convenience: failing to
write it never fails the event itself.

File Format:
- Markdown (activity.md) with one YAML frontmatter block per entry
- Entries separated by a line of '=' characters
- Frontmatter: timestamp, type, goal, kind, points, total_score, achievements

Example entry:
---
achievements: []
goal: Read scriptures
kind: eternal
points: 100
timestamp: '2024-01-19T10:30:00+00:00'
total_score: 1250
type: goal_event
---

Read scriptures: +100 points (total 1250)

==================================================

Usage:
    log = ActivityLog(data_dir)
    log.add_entry("Read scriptures", "eternal", 100, 1250)
    recent = log.get_recent_entries(limit=5)
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from utils import get_logger
from utils.timestamps import get_current_timestamp, validate_timestamp


logger = get_logger(__name__)

ACTIVITY_FILE_NAME = "activity.md"
ENTRY_TYPE = "goal_event"
SEPARATOR = '=' * 50


@dataclass
class ActivityEntry:
    """One recorded event."""
    timestamp: str
    goal: str
    kind: str
    points: int
    total_score: int
    achievements: List[str] = field(default_factory=list)
    type: str = ENTRY_TYPE


class ActivityLog:
    """Append-only Markdown log of recorded events."""

    def __init__(self, data_dir: Union[str, Path]):
        """
        Args:
            data_dir: Directory holding activity.md (created on first write)
        """
        self.data_dir = Path(data_dir)
        self.log_file = self.data_dir / ACTIVITY_FILE_NAME

    def _parse_frontmatter(self, content: str) -> Tuple[Dict[str, Any], str]:
        """
        Parse YAML frontmatter from one entry block.

        Returns:
            Tuple of (frontmatter dict, remaining Markdown)
        """
        frontmatter_match = re.match(r'^---\s*\n(.*?)\n---\s*\n(.*)', content, re.DOTALL)
        if not frontmatter_match:
            return {}, content

        try:
            frontmatter = yaml.safe_load(frontmatter_match.group(1))
            if not isinstance(frontmatter, dict):
                frontmatter = {}
        except yaml.YAMLError:
            frontmatter = {}

        return frontmatter, frontmatter_match.group(2)

    def _format_entry(self, entry: ActivityEntry) -> str:
        frontmatter = {
            'timestamp': entry.timestamp,
            'type': entry.type,
            'goal': entry.goal,
            'kind': entry.kind,
            'points': entry.points,
            'total_score': entry.total_score,
            'achievements': entry.achievements,
        }
        frontmatter_yaml = yaml.safe_dump(frontmatter, default_flow_style=False, allow_unicode=True)

        summary = f"{entry.goal}: {entry.points:+d} points (total {entry.total_score})"
        if entry.achievements:
            summary += f"\n\nUnlocked: {', '.join(entry.achievements)}"

        return f"---\n{frontmatter_yaml}---\n\n{summary}\n"

    def add_entry(
        self,
        goal: str,
        kind: str,
        points: int,
        total_score: int,
        achievements: Optional[List[str]] = None
    ) -> Optional[str]:
        """
        Append an entry for a recorded event.

        Args:
            goal: Goal name
            kind: Goal variant (simple, eternal, checklist, negative)
            points: Points delta of the event
            total_score: Score after the event
            achievements: Achievements unlocked by the event

        Returns:
            Timestamp of the entry, or None if it could not be written
        """
        entry = ActivityEntry(
            timestamp=get_current_timestamp(),
            goal=goal,
            kind=kind,
            points=points,
            total_score=total_score,
            achievements=list(achievements or []),
        )

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(self._format_entry(entry))
                f.write('\n' + SEPARATOR + '\n\n')
        except OSError as e:
            logger.warning(f"Could not write activity log {self.log_file}: {e}")
            return None

        logger.debug(f"Appended activity entry for {goal!r} at {entry.timestamp}")
        return entry.timestamp

    def get_all_entries(self) -> List[Dict[str, Any]]:
        """
        Read all entries in file order.

        Blocks without valid frontmatter or timestamp are skipped.

        Returns:
            List of dicts with 'frontmatter' and 'content' keys
        """
        if not self.log_file.exists():
            return []

        try:
            content = self.log_file.read_text(encoding='utf-8')
        except OSError as e:
            logger.error(f"Error reading activity log: {e}")
            return []

        entries = []
        for block in re.split(r'\n={50,}(?:\n|$)', content.strip()):
            if not block.strip():
                continue

            frontmatter, entry_content = self._parse_frontmatter(block.strip())
            if not validate_timestamp(str(frontmatter.get('timestamp', ''))):
                continue

            entries.append({
                'frontmatter': frontmatter,
                'content': entry_content.strip(),
            })

        return entries

    def get_recent_entries(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent entries, newest first."""
        entries = self.get_all_entries()
        # Later lines win ties between identical timestamps
        entries.reverse()
        entries.sort(key=lambda e: str(e['frontmatter']['timestamp']), reverse=True)
        return entries[:limit]
