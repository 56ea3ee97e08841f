"""
Tests for the finalization gate and final-result delivery.
"""

import pytest
import requests

from honeypote import callback, config
from honeypote.audit import read_events
from honeypote.callback import (
    DEFAULT_AGENT_NOTES,
    build_agent_notes,
    evaluate_finalization,
    is_scam_detected,
    send_callback_async,
)
from honeypote.extractor import IntelligenceBundle, extract_intelligence
from honeypote.memory import FinalizedSessionStore
from honeypote.models import FinalReport


@pytest.fixture
def store():
    return FinalizedSessionStore()


@pytest.fixture
def scam_intel():
    return IntelligenceBundle(phoneNumbers={"9876543210"}, suspiciousKeywords={"urgent"})


class TestDetection:

    def test_bank_accounts_alone_do_not_count(self):
        assert not is_scam_detected(IntelligenceBundle(bankAccounts={"123456789012"}))

    @pytest.mark.parametrize("kind", ["upiIds", "phishingLinks", "phoneNumbers", "suspiciousKeywords"])
    def test_any_other_indicator_counts(self, kind):
        assert is_scam_detected(IntelligenceBundle(**{kind: {"x"}}))

    def test_nothing_found(self):
        assert not is_scam_detected(IntelligenceBundle())


class TestFinalizationGate:

    def test_turn_floor(self, store, scam_intel):
        assert evaluate_finalization("s1", scam_intel, 5, store) is None
        assert "s1" not in store

    def test_finalizes_once(self, store, scam_intel):
        report = evaluate_finalization("s1", scam_intel, 6, store)

        assert isinstance(report, FinalReport)
        assert report.sessionId == "s1"
        assert report.scamDetected is True
        assert report.totalMessagesExchanged == 6
        assert report.extractedIntelligence.phoneNumbers == ["9876543210"]
        assert "s1" in store

        assert evaluate_finalization("s1", scam_intel, 7, store) is None

    def test_sessions_are_independent(self, store, scam_intel):
        assert evaluate_finalization("s1", scam_intel, 6, store) is not None
        assert evaluate_finalization("s2", scam_intel, 6, store) is not None
        assert len(store) == 2

    def test_bank_accounts_only_never_finalize(self, store):
        intel = IntelligenceBundle(bankAccounts={"123456789012"})
        assert evaluate_finalization("s1", intel, 20, store) is None
        assert "s1" not in store

    def test_configured_turn_floor(self, store, scam_intel, monkeypatch):
        monkeypatch.setattr(config, "MIN_TURNS_BEFORE_FINAL", 3)
        assert evaluate_finalization("s1", scam_intel, 3, store) is not None

    def test_explicit_notes(self, store, scam_intel):
        report = evaluate_finalization("s1", scam_intel, 6, store, agent_notes="manual note")
        assert report.agentNotes == "manual note"

    def test_payload_shape(self, store, scam_intel):
        payload = evaluate_finalization("s1", scam_intel, 6, store).model_dump()
        assert set(payload) == {
            "sessionId", "scamDetected", "totalMessagesExchanged",
            "extractedIntelligence", "agentNotes",
        }
        assert set(payload["extractedIntelligence"]) == {
            "bankAccounts", "upiIds", "phishingLinks", "phoneNumbers", "suspiciousKeywords",
        }


class TestAgentNotes:

    def test_tactics_and_counts(self):
        intel = extract_intelligence([
            "URGENT your account is blocked",
            "share otp or pay fraud@ybl, call 9876543210",
        ])
        notes = build_agent_notes(intel)
        assert notes.startswith("Scammer used urgency, OTP request and account blocking threats.")
        assert "1 phone numbers" in notes
        assert "1 UPI IDs" in notes

    def test_falls_back_to_default(self):
        assert build_agent_notes(IntelligenceBundle(phoneNumbers={"9876543210"})) == DEFAULT_AGENT_NOTES


class FakeResponse:

    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")


@pytest.fixture
def report():
    return FinalReport(sessionId="session-1234", totalMessagesExchanged=6, agentNotes="n")


class TestDelivery:

    def test_success(self, report, monkeypatch):
        calls = []

        def fake_post(url, **kwargs):
            calls.append((url, kwargs))
            return FakeResponse(200)

        monkeypatch.setattr(callback.requests, "post", fake_post)
        monkeypatch.setattr(config, "CALLBACK_URL", "https://callback.test/final")
        monkeypatch.setattr(config, "CALLBACK_API_KEY", "shared-secret")

        assert callback._do_send(report) is True

        url, kwargs = calls[0]
        assert url == "https://callback.test/final"
        assert kwargs["headers"]["x-api-key"] == "shared-secret"
        assert kwargs["json"]["sessionId"] == "session-1234"
        assert kwargs["timeout"] == config.CALLBACK_TIMEOUT
        assert read_events()[-1]["event"] == "final_callback_sent"

    @pytest.mark.parametrize("outcome", [
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.Timeout("slow"),
        FakeResponse(500),
    ])
    def test_failure_is_logged(self, report, monkeypatch, outcome):
        def fake_post(url, **kwargs):
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(callback.requests, "post", fake_post)

        assert callback._do_send(report) is False

        event = read_events()[-1]
        assert event["event"] == "callback_error"
        assert event["sessionId"] == "session-1234"
        assert event["error"]

    def test_single_attempt_by_default(self, report, monkeypatch):
        attempts = []
        monkeypatch.setattr(callback, "_do_send", lambda r: attempts.append(r) or False)
        monkeypatch.setattr(config, "CALLBACK_MAX_ATTEMPTS", 1)

        assert callback._send_with_retry(report) is False
        assert len(attempts) == 1

    def test_bounded_retries(self, report, monkeypatch):
        results = iter([False, True])
        sleeps = []
        monkeypatch.setattr(callback, "_do_send", lambda r: next(results))
        monkeypatch.setattr(callback.time, "sleep", sleeps.append)
        monkeypatch.setattr(config, "CALLBACK_MAX_ATTEMPTS", 3)

        assert callback._send_with_retry(report) is True
        assert sleeps == [1]

    def test_async_dispatch(self, report, monkeypatch):
        monkeypatch.setattr(callback, "_do_send", lambda r: True)
        done = []

        thread = send_callback_async(report, on_done=lambda sid, ok: done.append((sid, ok)))
        thread.join(timeout=5)

        assert done == [("session-1234", True)]


def test_non_ascii_digits_do_not_trigger_detection():
    intel = extract_intelligence(["call 9\u0668\u0667\u0666\u0665\u0664\u0663\u0662\u0661\u0660"])
    assert not is_scam_detected(intel)
