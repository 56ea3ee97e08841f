"""Runtime configuration loaded from the environment (and an optional .env)."""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", 10000))

# Outbound final-result callback
CALLBACK_URL: str = os.getenv(
    "CALLBACK_URL",
    "https://hackathon.guvi.in/api/updateHoneyPotFinalResult",
)
CALLBACK_API_KEY: str = os.getenv("CALLBACK_API_KEY", "")
CALLBACK_TIMEOUT: float = float(os.getenv("CALLBACK_TIMEOUT", 5))
CALLBACK_MAX_ATTEMPTS: int = max(int(os.getenv("CALLBACK_MAX_ATTEMPTS", 1)), 1)

# Conversation must reach this many turns before a final report is sent
MIN_TURNS_BEFORE_FINAL: int = int(os.getenv("MIN_TURNS_BEFORE_FINAL", 6))

# Append-only audit log (JSON array)
LOG_FILE: str = os.getenv("LOG_FILE", "honeypot_output.json")

# Reject malformed payloads with 400 instead of degrading to empty strings
STRICT_VALIDATION: bool = _env_bool("STRICT_VALIDATION")
