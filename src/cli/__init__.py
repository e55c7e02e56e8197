"""
Command-line interface for Eternal Quest.

Provides one-shot subcommands that work on the save file and an interactive
menu mode for a whole session.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from config import config, ENV_VARS
from utils import setup_logging, get_logger
from quest import ActivityLog, GoalStore, QuestError
from quest.achievements import CATALOG, describe
from quest.goals import GOAL_TYPES, KIND_LABELS, ChecklistGoal, NegativeGoal, resolve_kind
from quest.levels import level_for, title_for


logger = get_logger(__name__)

VERSION = "Eternal Quest v0.1.0"
KIND_CHOICES = [goal_type.kind for goal_type in GOAL_TYPES]


class QuestSession:
    """A store bound to its save file and optional activity log."""

    def __init__(self, save_path: Path, activity_log: Optional[ActivityLog] = None):
        self.store = GoalStore()
        self.save_path = Path(save_path)
        self.activity_log = activity_log
        # Events recorded since the last save; logged once they are on disk
        self.pending_entries: List[Dict[str, Any]] = []

    def open(self) -> None:
        """Load the save file if there is one; otherwise start empty."""
        if self.save_path.exists():
            self.store.load(self.save_path)
        else:
            logger.info(f"No save file at {self.save_path}, starting a new quest")

    def save(self, path: Optional[Path] = None) -> Path:
        path = Path(path) if path else self.save_path
        path.parent.mkdir(parents=True, exist_ok=True)
        self.store.save(path)
        self._flush_activity()
        return path

    def load(self, path: Path) -> None:
        """Replace the store from `path`, dropping unsaved events."""
        self.store.load(path)
        self.pending_entries.clear()

    def _flush_activity(self) -> None:
        if self.activity_log is not None:
            for entry in self.pending_entries:
                self.activity_log.add_entry(**entry)
        self.pending_entries.clear()

    def record(self, index: int) -> int:
        """Record an event and report it. The activity entry is written on the next save."""
        store = self.store
        goal = store.get_goal(index)
        previous_level = level_for(store.total_score)
        previous_achievements = store.achievements()

        delta = store.record_event(index)
        unlocked = [name for name in store.achievements() if name not in previous_achievements]

        _print_event_result(delta, store.total_score, previous_level)
        for name in unlocked:
            print(f"\n🏆 NEW ACHIEVEMENT UNLOCKED: {name}!")
            print(f"   ({describe(name)})")

        self.pending_entries.append({
            'goal': goal.name,
            'kind': goal.kind,
            'points': delta,
            'total_score': store.total_score,
            'achievements': unlocked,
        })

        return delta


def _print_event_result(delta: int, total_score: int, previous_level: int) -> None:
    if delta > 0:
        print(f"\n🎉 Congratulations! You have earned {delta} points!")
        print(f"You now have {total_score} points.")
        level = level_for(total_score)
        if level > previous_level:
            print(f"\n⭐ LEVEL UP! You are now Level {level}: {title_for(level)}! ⭐")
    elif delta < 0:
        print(f"\n❌ Ouch. You lost {-delta} points.")
        print(f"You now have {total_score} points. Keep trying!")
    else:
        print("\nThis goal is already complete!")


def _print_score(store: GoalStore) -> None:
    summary = store.display_score()
    print(f"\nYou have {summary.total_score} points.")
    print(f"Level {summary.level}: {summary.title}")
    if summary.points_to_next_level is None:
        print("(MAX LEVEL ACHIEVED!)")
    else:
        print(f"({summary.points_to_next_level} points until Level {summary.level + 1})")


def _print_goals(store: GoalStore) -> None:
    if not len(store):
        print("📭 No goals yet")
        return
    print("The goals are:")
    for number, line in enumerate(store.list_goals(), 1):
        print(f"{number}. {line}")


def _print_achievements(store: GoalStore) -> None:
    print("🏆 YOUR ACHIEVEMENTS 🏆")
    print("=" * 24)
    unlocked = store.achievements()
    if unlocked:
        for name in unlocked:
            print(f"✓ {name}")
    else:
        print("No achievements yet. Keep working on your goals!")

    print("\nAvailable Achievements:")
    for achievement in CATALOG:
        print(f"  - {achievement.name} ({achievement.description})")


class InteractiveQuest:
    """Menu-driven session, one command at a time until Quit."""

    MENU = [
        ('1', "Create New Goal"),
        ('2', "List Goals"),
        ('3', "Save Goals"),
        ('4', "Load Goals"),
        ('5', "Record Event"),
        ('6', "View Achievements"),
        ('7', "Quit"),
    ]

    def __init__(self, session: QuestSession, input_func: Callable[[str], str] = input):
        self.session = session
        self.input = input_func
        self.actions = {
            '1': self._create_goal,
            '2': self._list_goals,
            '3': self._save_goals,
            '4': self._load_goals,
            '5': self._record_event,
            '6': self._view_achievements,
        }

    def run(self) -> None:
        print("Welcome to Eternal Quest!")
        print("=" * 40)

        while True:
            _print_score(self.session.store)
            print("\nMenu Options:")
            for key, label in self.MENU:
                print(f"  {key}. {label}")

            try:
                choice = self.input("Select a choice from the menu: ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break
            print()

            if choice == '7':
                break

            action = self.actions.get(choice)
            if action is None:
                print("Invalid choice. Please try again.")
                continue

            try:
                action()
            except (EOFError, KeyboardInterrupt):
                print()
                break
            except (QuestError, OSError) as e:
                logger.debug(f"Menu action {choice} failed: {e}")
                print(f"❌ {e}")

        print("Thank you for using Eternal Quest! Keep striving!")

    def _ask_path(self) -> Path:
        answer = self.input(f"What is the filename for the goal file? [{self.session.save_path}] ").strip()
        return Path(os.path.expanduser(answer)) if answer else self.session.save_path

    def _create_goal(self) -> None:
        print("The types of Goals are:")
        for number, goal_type in enumerate(GOAL_TYPES, 1):
            print(f"  {number}. {KIND_LABELS[goal_type]}")
        goal_type = resolve_kind(self.input("Which type of goal would you like to create? "))

        name = self.input("What is the name of your goal? ")
        description = self.input("What is a short description of it? ")
        points = self.input("What is the amount of points associated with this goal? ")

        bonus = target = None
        if goal_type is ChecklistGoal:
            target = self.input("How many times does this goal need to be accomplished for a bonus? ")
            bonus = self.input("What is the bonus for accomplishing it that many times? ")

        self.session.store.create_goal(goal_type.kind, name, description, points, bonus=bonus, target=target)
        if goal_type is NegativeGoal:
            print("Remember: You'll LOSE points each time you record this goal!")
        print("Goal created successfully!")

    def _list_goals(self) -> None:
        _print_goals(self.session.store)

    def _save_goals(self) -> None:
        path = self.session.save(self._ask_path())
        print(f"Goals saved to {path}")

    def _load_goals(self) -> None:
        path = self._ask_path()
        self.session.load(path)
        print(f"Goals loaded from {path}")

    def _record_event(self) -> None:
        _print_goals(self.session.store)
        answer = self.input("Which goal did you accomplish? ").strip()
        try:
            number = int(answer)
        except ValueError:
            print("Invalid goal number.")
            return
        self.session.record(number - 1)

    def _view_achievements(self) -> None:
        _print_achievements(self.session.store)


def setup_argparse() -> argparse.ArgumentParser:
    """Set up the argument parser."""
    parser = argparse.ArgumentParser(
        description="Eternal Quest - track goals, earn points, level up",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                             # Interactive menu
  %(prog)s create simple "Marathon" "Run 26.2 miles" 1000
  %(prog)s create checklist "Temple" "Attend the temple" 50 --target 10 --bonus 500
  %(prog)s list                                        # List goals
  %(prog)s record 2                                    # Record an event for goal 2
  %(prog)s score                                       # Show score and level
        """
    )

    parser.add_argument('--version', action='version', version=VERSION)
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Set logging level (default: LOG_LEVEL or WARNING)'
    )
    parser.add_argument('--log-file', help='Also write log records to this file')
    parser.add_argument('--file', help='Save file to use (default: QUEST_SAVE_FILE in QUEST_DATA_DIR)')
    parser.add_argument(
        '--no-activity-log',
        action='store_true',
        help='Do not append recorded events to the activity log'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('play', help='Interactive menu (default)')

    create_parser = subparsers.add_parser('create', help='Create a new goal')
    create_parser.add_argument('kind', choices=KIND_CHOICES, help='Goal type')
    create_parser.add_argument('name', help='Goal name')
    create_parser.add_argument('description', help='Short description')
    create_parser.add_argument('points', help='Points per event (points lost for negative goals)')
    create_parser.add_argument('--bonus', help='Checklist bonus when the target is reached')
    create_parser.add_argument('--target', help='Checklist target count')

    record_parser = subparsers.add_parser('record', help='Record an event for a goal')
    record_parser.add_argument('number', type=int, help='Goal number as shown by list')

    subparsers.add_parser('list', help='List all goals')
    subparsers.add_parser('score', help='Show score and level')
    subparsers.add_parser('achievements', help='Show unlocked and available achievements')

    history_parser = subparsers.add_parser('history', help='Show recently recorded events')
    history_parser.add_argument('--limit', type=int, default=10, help='Number of events to show')

    config_parser = subparsers.add_parser('config', help='Configuration management')
    config_subparsers = config_parser.add_subparsers(dest='config_action', help='Config actions')
    config_subparsers.add_parser('init', help='Generate .env file with current settings')

    return parser


def _build_session(args: argparse.Namespace) -> QuestSession:
    save_path = Path(os.path.expanduser(args.file)) if args.file else config.save_path
    activity_log = None
    if config.activity_log and not args.no_activity_log:
        activity_log = ActivityLog(save_path.parent)
    session = QuestSession(save_path, activity_log)
    session.open()
    return session


def handle_play(args: argparse.Namespace) -> None:
    InteractiveQuest(_build_session(args)).run()


def handle_create(args: argparse.Namespace) -> None:
    """Handle the create command."""
    session = _build_session(args)
    index = session.store.create_goal(
        args.kind, args.name, args.description, args.points,
        bonus=args.bonus, target=args.target
    )
    session.save()
    print(f"✅ Created goal {index + 1}: {args.name}")
    if args.kind == NegativeGoal.kind:
        print("Remember: You'll LOSE points each time you record this goal!")


def handle_record(args: argparse.Namespace) -> None:
    """Handle the record command."""
    session = _build_session(args)
    session.record(args.number - 1)
    session.save()


def handle_list(args: argparse.Namespace) -> None:
    _print_goals(_build_session(args).store)


def handle_score(args: argparse.Namespace) -> None:
    _print_score(_build_session(args).store)


def handle_achievements(args: argparse.Namespace) -> None:
    _print_achievements(_build_session(args).store)


def handle_history(args: argparse.Namespace) -> None:
    """Handle the history command."""
    save_path = Path(os.path.expanduser(args.file)) if args.file else config.save_path
    entries = ActivityLog(save_path.parent).get_recent_entries(limit=args.limit)
    if not entries:
        print("📭 No recorded events yet")
        return

    print(f"📖 Last {len(entries)} events:")
    for entry in entries:
        frontmatter = entry['frontmatter']
        timestamp = str(frontmatter.get('timestamp', ''))[:19].replace('T', ' ')
        try:
            points = f"{int(frontmatter.get('points', 0)):+d}"
        except (TypeError, ValueError):
            points = "?"
        print(f"   • {timestamp}  {frontmatter.get('goal', '?')}: {points} (total {frontmatter.get('total_score', '?')})")
        for name in frontmatter.get('achievements') or []:
            print(f"     🏆 {name}")


def handle_config(args: argparse.Namespace) -> None:
    """Handle configuration-related commands."""
    if args.config_action == 'init':
        _generate_env_file(Path('.env'))
        print("✅ Generated .env file with current settings")
        print("   Review and edit .env as needed for your configuration")
    else:
        print("Usage: config init")


def _generate_env_file(env_file: Path) -> None:
    """Write a .env file from the current environment, keeping values already in the file."""
    existing_vars = {}
    if env_file.exists():
        with open(env_file, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if '=' in line and not line.startswith('#'):
                    key, value = line.split('=', 1)
                    existing_vars[key.strip()] = value.strip()

    content_lines = [
        "# Eternal Quest Environment Configuration",
        "",
    ]
    for var_name, description in ENV_VARS:
        content_lines.append(f"# {description}")
        value = os.getenv(var_name) or existing_vars.get(var_name, '')
        content_lines.append(f"{var_name}={value}")
        content_lines.append("")

    with open(env_file, 'w', encoding='utf-8') as f:
        f.write('\n'.join(content_lines))


HANDLERS = {
    'play': handle_play,
    'create': handle_create,
    'record': handle_record,
    'list': handle_list,
    'score': handle_score,
    'achievements': handle_achievements,
    'history': handle_history,
    'config': handle_config,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = setup_argparse()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level or config.log_level,
        log_file=args.log_file or config.log_file
    )

    handler = HANDLERS.get(args.command or 'play')
    try:
        handler(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\nGoodbye!")
        return 130
    except QuestError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        print(f"❌ {e}", file=sys.stderr)
        return 1

    return 0
