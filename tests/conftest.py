"""
Pytest configuration and fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient

from honeypote import config
from honeypote import main
from honeypote.memory import finalized_sessions


@pytest.fixture(autouse=True)
def audit_log(tmp_path, monkeypatch):
    """Point the audit log at a throwaway file for every test."""
    path = tmp_path / "honeypot_output.json"
    monkeypatch.setattr(config, "LOG_FILE", str(path))
    return path


@pytest.fixture(autouse=True)
def reset_finalized_sessions():
    finalized_sessions.clear()
    yield
    finalized_sessions.clear()


@pytest.fixture
def sent_reports(monkeypatch):
    """Capture reports instead of posting them to the real callback URL."""
    reports = []
    monkeypatch.setattr(main, "send_callback_async", reports.append)
    return reports


@pytest.fixture
def client(sent_reports):
    return TestClient(main.app)


class FirstPicker:
    """Deterministic picker: always the first option."""

    def choice(self, options):
        return options[0]


@pytest.fixture
def first_picker():
    return FirstPicker()


@pytest.fixture
def live_client():
    """Client that leaves the real background callback path in place."""
    return TestClient(main.app)
