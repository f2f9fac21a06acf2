"""Shared fixtures for notifier tests."""

import pytest


OPEN = {"name": "Open", "presentation": "Open"}
CLOSED = {"name": "Closed", "presentation": "Closed"}
ALICE = {"fullName": "Alice", "login": "alice", "email": "alice@example.com"}
BOB = {"fullName": "Bob", "login": "bob", "email": "bob@example.com"}


@pytest.fixture
def snapshot_data():
    """Factory for host snapshots; keyword arguments override top-level keys"""
    def _make(**overrides):
        data = {
            "issue": {
                "id": "2-17",
                "idReadable": "DEMO-17",
                "summary": "Login page times out",
                "baseUrl": "https://tracker.example.com",
                "project": {"name": "Demo", "presentation": "Demo Project", "shortName": "DEMO"},
            },
            "fields": {"State": CLOSED, "Priority": {"name": "Major", "presentation": "Major"}, "Assignee": ALICE},
            "oldValues": {},
            "dirty": [],
            "addedComments": [],
            "currentUser": BOB,
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def make_context(snapshot_data):
    """Factory for SnapshotContexts; users populate the lookup directory"""
    from notifier.relay.directory import UserDirectory
    from notifier.relay.handlers import SnapshotContext

    def _make(users=None, **overrides):
        return SnapshotContext(snapshot_data(**overrides), directory=UserDirectory(users or []))
    return _make
