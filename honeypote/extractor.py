"""Regex-based intelligence extraction.

Pulls bank accounts, UPI IDs, phishing links, Indian mobile numbers and scam
keywords out of the whole conversation. Each kind is a named pattern that can
be run on its own through `extract(kind, text)`; `extract_intelligence` runs
all of them over the concatenated turns and returns a de-duplicated bundle.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Pattern, Set

from honeypote.sanitizer import sanitize

BANK_ACCOUNTS = "bankAccounts"
UPI_IDS = "upiIds"
PHISHING_LINKS = "phishingLinks"
PHONE_NUMBERS = "phoneNumbers"
SUSPICIOUS_KEYWORDS = "suspiciousKeywords"

SUSPICIOUS_VOCABULARY = ("urgent", "verify", "blocked", "suspend", "kyc", "police", "otp")

PATTERNS: Dict[str, Pattern] = {
    # Digit and word classes are ASCII-only; other scripts never count
    # Bare 9-18 digit run
    BANK_ACCOUNTS: re.compile(r"\b\d{9,18}\b", re.ASCII),
    UPI_IDS: re.compile(r"[a-zA-Z0-9.\-_]{2,256}@[a-zA-Z]{2,64}"),
    PHISHING_LINKS: re.compile(r"https?://\S+|www\.\S+"),
    # Optional +91 prefix, then a 10-digit mobile starting 6-9
    PHONE_NUMBERS: re.compile(r"(?:\+91[\-\s]?)?[6-9]\d{9}", re.ASCII),
    SUSPICIOUS_KEYWORDS: re.compile(
        r"\b(" + "|".join(SUSPICIOUS_VOCABULARY) + r")\b", re.IGNORECASE | re.ASCII
    ),
}

# Keywords are case-insensitive, so "URGENT" and "urgent" collapse
_NORMALIZERS = {
    SUSPICIOUS_KEYWORDS: str.lower,
}


@dataclass
class IntelligenceBundle:
    """De-duplicated indicators collected from one conversation."""

    bankAccounts: Set[str] = field(default_factory=set)
    upiIds: Set[str] = field(default_factory=set)
    phishingLinks: Set[str] = field(default_factory=set)
    phoneNumbers: Set[str] = field(default_factory=set)
    suspiciousKeywords: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, List[str]]:
        """JSON-friendly form: every field as a sorted list."""
        return {kind: sorted(getattr(self, kind)) for kind in PATTERNS}

    def is_empty(self) -> bool:
        return not any(getattr(self, kind) for kind in PATTERNS)


def extract(kind: str, text: str) -> Set[str]:
    """Run a single named pattern over text. Unknown kinds raise KeyError."""
    pattern = PATTERNS[kind]
    if not text:
        return set()
    normalize = _NORMALIZERS.get(kind)
    matches = (m.group(0) for m in pattern.finditer(text))
    if normalize:
        return {normalize(m) for m in matches}
    return set(matches)


def extract_intelligence(turns: Iterable[str]) -> IntelligenceBundle:
    """Scan the full conversation (all turns, joined by spaces)."""
    blob = sanitize(" ".join(turns))
    return IntelligenceBundle(**{kind: extract(kind, blob) for kind in PATTERNS})
