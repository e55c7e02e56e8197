"""Shared fixtures for the Eternal Quest tests."""

import pytest

from quest import GoalStore


@pytest.fixture
def store():
    return GoalStore()


@pytest.fixture
def mixed_store():
    """One goal of each type, each recorded once (score 1125)."""
    store = GoalStore()
    store.create_goal("simple", "Run a marathon", "Finish 26.2 miles", 1000)
    store.create_goal("eternal", "Read scriptures", "Daily study", 100)
    store.create_goal("checklist", "Attend the temple", "Ten visits", 50, bonus=500, target=10)
    store.create_goal("negative", "Junk food", "Skip the snacks", 25)
    for index in range(4):
        store.record_event(index)
    return store
