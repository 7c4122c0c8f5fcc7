"""
Pytest configuration for local imports and shared fixtures.
"""

import os
import sys

import pytest


def _ensure_repo_on_path() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_repo_on_path()

from pipeline.session import LabelSession  # noqa: E402


@pytest.fixture
def records():
    return [
        {"id": 1, "Name": "Ada Lovelace", "Qty": "3.00", "Due": "2024-01-15", "LabelCount": 2},
        {"id": 2, "Name": "Alan Turing", "Qty": 3.14159, "Due": "not a date", "LabelCount": "bad"},
        {"id": 3, "Name": "Grace Hopper", "Qty": None, "Due": "March 5, 2023", "LabelCount": 0},
    ]


class OptionSink:
    """Persistence sink that records writes and can notify a session."""

    def __init__(self):
        self.options = {}
        self.writes = []
        self.session = None

    def set_option(self, key, value):
        self.options[key] = value
        self.writes.append((key, value))
        if self.session is not None:
            self.session.on_options(dict(self.options))


@pytest.fixture
def sink():
    return OptionSink()


@pytest.fixture
def session(sink):
    session = LabelSession(set_option=sink.set_option)
    sink.session = session
    return session
