"""Decides when a session is finished and ships the final report.

The finalization gate fires at most once per session. It needs a detected
scam and enough turns, and the session id must win the atomic insert into
the finalized-session store. Delivery runs on a background thread and the
scammer-facing response never waits on it.
"""

import logging
import threading
import time
from typing import Callable, Optional

import requests

from honeypote import config
from honeypote.audit import log_event
from honeypote.extractor import IntelligenceBundle
from honeypote.memory import FinalizedSessionStore
from honeypote.models import ExtractedIntelligence, FinalReport

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NOTES = "Scammer used urgency, OTP request and account blocking threats."

RETRY_DELAYS: tuple = (1, 2, 4)


def is_scam_detected(intel: IntelligenceBundle) -> bool:
    """True if any indicator other than a bank account was found."""
    return bool(
        intel.upiIds
        or intel.phishingLinks
        or intel.phoneNumbers
        or intel.suspiciousKeywords
    )


def evaluate_finalization(
    session_id: str,
    intel: IntelligenceBundle,
    turn_count: int,
    finalized_sessions: FinalizedSessionStore,
    agent_notes: Optional[str] = None,
    min_turns: Optional[int] = None,
) -> Optional[FinalReport]:
    """Return the session's FinalReport once, or None.

    The store is only touched when the other two conditions already hold,
    so a session that is not ready yet can still finalize later.
    """
    floor = config.MIN_TURNS_BEFORE_FINAL if min_turns is None else min_turns
    if not is_scam_detected(intel) or turn_count < floor:
        return None
    if not finalized_sessions.add_if_absent(session_id):
        return None
    return FinalReport(
        sessionId=session_id,
        scamDetected=True,
        totalMessagesExchanged=turn_count,
        extractedIntelligence=ExtractedIntelligence(**intel.to_dict()),
        agentNotes=agent_notes or build_agent_notes(intel),
    )


def build_agent_notes(intel: IntelligenceBundle) -> str:
    """Short analyst summary of the tactics and indicators observed."""
    tactics = []
    keywords = intel.suspiciousKeywords
    if keywords & {"urgent", "verify", "kyc"}:
        tactics.append("urgency")
    if "otp" in keywords:
        tactics.append("OTP request")
    if keywords & {"blocked", "suspend", "police"}:
        tactics.append("account blocking threats")
    if not tactics:
        return DEFAULT_AGENT_NOTES

    parts = ["Scammer used " + _join_words(tactics) + "."]
    counts = []
    for kind, label in (
        ("phoneNumbers", "phone numbers"),
        ("upiIds", "UPI IDs"),
        ("phishingLinks", "links"),
        ("bankAccounts", "bank accounts"),
    ):
        found = getattr(intel, kind)
        if found:
            counts.append(f"{len(found)} {label}")
    if counts:
        parts.append("Collected " + ", ".join(counts) + ".")
    return " ".join(parts)


def _join_words(words: list) -> str:
    if len(words) == 1:
        return words[0]
    return ", ".join(words[:-1]) + " and " + words[-1]


def send_callback_async(
    report: FinalReport,
    on_done: Optional[Callable[[str, bool], None]] = None,
) -> threading.Thread:
    """Deliver the report in a daemon thread and return immediately."""
    def _worker():
        success = _send_with_retry(report)
        if on_done:
            on_done(report.sessionId, success)

    thread = threading.Thread(target=_worker, daemon=True)
    thread.start()
    return thread


def _send_with_retry(report: FinalReport) -> bool:
    """Bounded attempts (CALLBACK_MAX_ATTEMPTS, default a single one)."""
    attempts = config.CALLBACK_MAX_ATTEMPTS
    for attempt in range(attempts):
        if _do_send(report):
            return True
        if attempt < attempts - 1:
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            logger.info(f"[{report.sessionId[:8]}] Callback retry {attempt + 1} in {delay}s")
            time.sleep(delay)
    return False


def _do_send(report: FinalReport) -> bool:
    """Single POST to the callback endpoint. Returns True on 2xx."""
    short_id = report.sessionId[:8]
    try:
        response = requests.post(
            config.CALLBACK_URL,
            json=report.model_dump(),
            timeout=config.CALLBACK_TIMEOUT,
            headers={
                "Content-Type": "application/json",
                "x-api-key": config.CALLBACK_API_KEY,
            },
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as exc:
        logger.error(f"[{short_id}] Callback failed: {exc}")
        log_event("callback_error", sessionId=report.sessionId, error=str(exc))
        return False

    logger.info(f"[{short_id}] Callback accepted ({response.status_code})")
    log_event(
        "final_callback_sent",
        sessionId=report.sessionId,
        responseStatus=response.status_code,
    )
    return True
