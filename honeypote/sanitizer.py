"""Text normalization shared by the reply engine and the extractor."""

import re
import unicodedata

# Compatibility decomposition: ligatures and circled digits fold to plain letters and digits
NORMALIZATION_FORM = "NFKD"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize(text) -> str:
    """Normalize text and strip ASCII control characters.

    Anything that is not a non-empty string becomes "". Controls are removed
    before normalizing, which keeps the function idempotent.
    """
    if not text or not isinstance(text, str):
        return ""
    text = _CONTROL_CHARS.sub("", text)
    text = unicodedata.normalize(NORMALIZATION_FORM, text)
    return text.strip()
