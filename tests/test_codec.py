"""
Tests for the save file codec.

Tests cover:
1. Exact output format
2. Save/load round trips
3. Rejection of malformed files without touching the store
4. Atomic saving
"""
import copy
import itertools
import logging
import os
import stat

import pytest

from quest import GoalStore, ParseError, StorageError
from quest import codec
from quest.achievements import CATALOG_NAMES
from quest.goals import ChecklistGoal, EternalGoal, NegativeGoal, SimpleGoal


EXPECTED_MIXED = (
    "1125\n"
    "SimpleGoal:Run a marathon|Finish 26.2 miles|1000|True\n"
    "EternalGoal:Read scriptures|Daily study|100|1\n"
    "ChecklistGoal:Attend the temple|Ten visits|50|500|1|10\n"
    "NegativeGoal:Junk food|Skip the snacks|25|1\n"
    "ACHIEVEMENTS:\n"
)


class TestDumps:

    def test_mixed_store_format(self, mixed_store):
        assert codec.dumps(mixed_store) == EXPECTED_MIXED

    def test_empty_store(self, store):
        assert codec.dumps(store) == "0\nACHIEVEMENTS:\n"

    def test_achievements_follow_header(self, store):
        store.replace([], -40, ["Goal Crusher", "Completionist"])
        assert codec.dumps(store) == "-40\nACHIEVEMENTS:\nGoal Crusher\nCompletionist\n"

    def test_encode_uncompleted_simple(self):
        assert codec.encode_goal(SimpleGoal("A", "b", 5)) == "SimpleGoal:A|b|5|False"


class TestRoundTrip:

    def test_mixed_store(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        mixed_store.save(path)

        loaded = GoalStore()
        loaded.load(path)
        assert loaded == mixed_store
        assert loaded.goals == mixed_store.goals

    @pytest.mark.parametrize("achievements", [
        list(subset)
        for size in range(len(CATALOG_NAMES) + 1)
        for subset in itertools.combinations(CATALOG_NAMES, size)
    ])
    def test_any_achievement_subset(self, mixed_store, tmp_path, achievements):
        mixed_store.replace(mixed_store.goals, mixed_store.total_score, achievements)
        path = tmp_path / "goals.txt"
        codec.save(mixed_store, path)

        loaded = GoalStore()
        codec.load(loaded, path)
        assert loaded == mixed_store
        assert loaded.achievements() == achievements

    def test_untouched_counters_and_negative_score(self, tmp_path):
        store = GoalStore()
        store.replace([
            SimpleGoal("S", "", 0),
            EternalGoal("E", "with spaces ", 3, times_completed=12),
            ChecklistGoal("C", "d", 1, bonus=0, target=1, amount_completed=4),
            NegativeGoal("N", "d", 100, times_failed=30),
        ], -2900, [])
        path = tmp_path / "goals.txt"
        store.save(path)

        loaded = GoalStore()
        loaded.load(path)
        assert loaded == store

    @pytest.mark.parametrize("separator", [
        "\x0b", "\x0c", "\x1c", "\x1d", "\x1e", "\x85", "\u2028", "\u2029",
    ])
    def test_unicode_line_breaks_inside_fields(self, tmp_path, separator):
        """Only '\\n' ends a line; other line-break characters are field text."""
        store = GoalStore()
        store.create_goal("eternal", f"Read{separator}daily", f"Scripture{separator}study", 10)
        store.create_goal("simple", "Fast", "Sunday", 50)
        store.record_event(0)
        path = tmp_path / "goals.txt"
        store.save(path)

        loaded = GoalStore()
        loaded.load(path)
        assert loaded == store
        assert loaded.get_goal(0).name == f"Read{separator}daily"
        assert codec.loads(codec.dumps(store)) == codec.Snapshot(
            10, store.goals, []
        )

    def test_load_replaces_everything(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        GoalStore().save(path)

        mixed_store.load(path)
        assert len(mixed_store) == 0
        assert mixed_store.total_score == 0
        assert mixed_store.achievements() == []


class TestLoads:

    def test_crlf_and_blank_lines(self):
        text = "10\r\n\r\nSimpleGoal:A|b|10|true\r\n\r\nACHIEVEMENTS:\r\n\r\nGoal Crusher\r\n"
        snapshot = codec.loads(text)
        assert snapshot.total_score == 10
        assert snapshot.goals == [SimpleGoal("A", "b", 10, completed=True)]
        assert snapshot.achievements == ["Goal Crusher"]

    def test_missing_achievement_section(self):
        snapshot = codec.loads("5\nEternalGoal:E|d|5|1\n")
        assert snapshot.achievements == []
        assert len(snapshot.goals) == 1

    def test_duplicate_achievements_kept_once(self):
        snapshot = codec.loads("0\nACHIEVEMENTS:\nCompletionist\nCompletionist\n")
        assert snapshot.achievements == ["Completionist"]

    def test_unknown_achievement_kept_with_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="eternal_quest")
        snapshot = codec.loads("0\nACHIEVEMENTS:\nSpeed Runner\n")
        assert snapshot.achievements == ["Speed Runner"]
        assert "Speed Runner" in caplog.text

    def test_colon_inside_description_stays_in_fields(self):
        snapshot = codec.loads("0\nSimpleGoal:Wake|Up at 6:00|10|False\n")
        assert snapshot.goals[0].description == "Up at 6:00"

    @pytest.mark.parametrize("text,line_number", [
        ("", 1),
        ("ten\n", 1),
        ("1.5\nACHIEVEMENTS:\n", 1),
        ("0\nFooGoal:A|b|1|1\n", 2),
        ("0\nSimpleGoal:A|b|1\n", 2),
        ("0\nSimpleGoal:A|b|1|True|extra\n", 2),
        ("0\nChecklistGoal:A|b|1|2|3\n", 2),
        ("0\nEternalGoal:A|b|x|1\n", 2),
        ("0\nSimpleGoal:A|b|1|yes\n", 2),
        ("0\nEternalGoal:A|b|1|-1\n", 2),
        ("0\nChecklistGoal:A|b|1|2|0|0\n", 2),
        ("0\nEternalGoal:|b|1|1\n", 2),
        ("0\nEternalGoal:A|b|1|1\njust some text\n", 3),
    ])
    def test_malformed(self, text, line_number):
        with pytest.raises(ParseError) as exc_info:
            codec.loads(text)
        assert exc_info.value.line_number == line_number


class TestLoad:
    """Loading is all-or-nothing"""

    def test_unknown_tag_leaves_store_unchanged(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        path.write_text("300\nFooGoal:A|b|10|1\nACHIEVEMENTS:\n", encoding='utf-8')
        before = copy.deepcopy(mixed_store)

        with pytest.raises(ParseError):
            mixed_store.load(path)
        assert mixed_store == before

    def test_error_late_in_file_leaves_store_unchanged(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        path.write_text(
            "300\nSimpleGoal:A|b|10|False\nEternalGoal:E|d|5|1\nNegativeGoal:N|d|5\n",
            encoding='utf-8'
        )
        before = copy.deepcopy(mixed_store)

        with pytest.raises(ParseError):
            mixed_store.load(path)
        assert mixed_store == before

    def test_missing_file(self, mixed_store, tmp_path):
        before = copy.deepcopy(mixed_store)

        with pytest.raises(StorageError) as exc_info:
            mixed_store.load(tmp_path / "missing.txt")

        assert isinstance(exc_info.value, OSError)
        assert exc_info.value.path.endswith("missing.txt")
        assert mixed_store == before

    def test_directory_is_unreadable(self, store, tmp_path):
        with pytest.raises(StorageError):
            store.load(tmp_path)

    def test_not_utf8(self, store, tmp_path):
        path = tmp_path / "goals.txt"
        path.write_bytes(b"0\nSimpleGoal:\xff\xfe|b|1|False\n")
        with pytest.raises(ParseError):
            store.load(path)

    def test_utf8_bom_is_accepted(self, store, tmp_path):
        path = tmp_path / "goals.txt"
        path.write_bytes("\ufeff7\nACHIEVEMENTS:\n".encode("utf-8"))
        store.load(path)
        assert store.total_score == 7


class TestSave:

    def test_overwrites_existing_file(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        path.write_text("old contents\n", encoding='utf-8')

        mixed_store.save(path)
        assert path.read_text(encoding='utf-8') == EXPECTED_MIXED

    def test_missing_directory(self, mixed_store, tmp_path):
        with pytest.raises(StorageError) as exc_info:
            mixed_store.save(tmp_path / "nowhere" / "goals.txt")
        assert isinstance(exc_info.value, OSError)

    def test_failed_replace_keeps_previous_file(self, mixed_store, tmp_path, monkeypatch):
        path = tmp_path / "goals.txt"
        path.write_text("42\nACHIEVEMENTS:\n", encoding='utf-8')

        def failing_replace(src, dst):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(codec.os, "replace", failing_replace)

        with pytest.raises(StorageError):
            mixed_store.save(path)

        assert path.read_text(encoding='utf-8') == "42\nACHIEVEMENTS:\n"
        assert os.listdir(tmp_path) == ["goals.txt"]

    @pytest.mark.skipif(os.name != 'posix', reason="POSIX permission bits")
    def test_keeps_permissions_of_existing_file(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        path.write_text("0\n", encoding='utf-8')
        os.chmod(path, 0o644)

        mixed_store.save(path)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644

    @pytest.mark.skipif(os.name != 'posix', reason="POSIX permission bits")
    def test_new_file_follows_umask(self, mixed_store, tmp_path):
        path = tmp_path / "goals.txt"
        previous = os.umask(0o022)
        try:
            mixed_store.save(path)
        finally:
            os.umask(previous)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
