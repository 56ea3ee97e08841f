"""
The Agent - a scripted "confused victim" that keeps scammers talking.

Every reply is built from three pieces: an opener, a body that reacts to
whatever the scammer is pushing (bank, UPI, link, OTP, threats) and a closer
that nudges them to answer. Nothing here understands language; a keyword
decides the category and the rest is a random draw, which is enough to make
the scammer believe someone is on the other side and keep sending details.
"""
import random
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from honeypote.sanitizer import sanitize


class ReplyCategory(str, Enum):
    BANK = "bank"
    UPI = "upi"
    LINK = "link"
    OTP = "otp"
    THREAT = "threat"
    GENERIC = "generic"


# Checked in order, first hit wins
CATEGORY_KEYWORDS: List[Tuple[ReplyCategory, Tuple[str, ...]]] = [
    (ReplyCategory.BANK, ("bank", "account", "ifsc")),
    (ReplyCategory.UPI, ("upi", "gpay", "paytm", "phonepe")),
    (ReplyCategory.LINK, ("http", "link", "apk", "url")),
    (ReplyCategory.OTP, ("otp", "pin", "code")),
    (ReplyCategory.THREAT, ("block", "police", "suspend")),
]

OPENERS: List[str] = [
    "Hello sir,",
    "Excuse me,",
    "One second please,",
    "Listen,",
    "I am confused,",
    "Sorry beta,",
]

BODIES: Dict[ReplyCategory, List[str]] = {
    ReplyCategory.BANK: [
        "Why will my account be blocked?",
        "Which bank are you talking about?",
        "I just received pension yesterday.",
    ],
    ReplyCategory.UPI: [
        "I don't know my UPI ID.",
        "Can I send 1 rupee to check?",
        "Do I share this with anyone?",
    ],
    ReplyCategory.LINK: [
        "The link is not opening.",
        "Chrome says unsafe website.",
        "Is this government site?",
    ],
    ReplyCategory.OTP: [
        "My son told me not to share OTP.",
        "The message disappeared.",
        "Is OTP required?",
    ],
    ReplyCategory.THREAT: [
        "Please don't block my account.",
        "Will police really come?",
        "I am very scared.",
    ],
    ReplyCategory.GENERIC: [
        "What should I do now?",
        "Please explain slowly.",
        "I don't understand technology.",
    ],
}

CLOSERS: List[str] = [
    "Please reply.",
    "Are you there?",
    "Waiting for response.",
]


class RandomPicker:
    """Uniform picker over a sequence. Pass a seed for repeatable draws."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choice(self, options: Sequence[str]) -> str:
        return self._rng.choice(options)


def classify(message: str) -> ReplyCategory:
    """Map a message to a reply category by keyword substring match."""
    text = (message or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return ReplyCategory.GENERIC


def select_reply(message: str, picker=None) -> str:
    """Compose a victim reply for an already-sanitized scammer message.

    `picker` is anything with a `choice(sequence)` method; defaults to the
    module-level RandomPicker.
    """
    picker = picker or _default_picker
    category = classify(message)
    parts = (
        picker.choice(OPENERS),
        picker.choice(BODIES[category]),
        picker.choice(CLOSERS),
    )
    return sanitize(" ".join(parts))


_default_picker = RandomPicker()
