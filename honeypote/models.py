"""Pydantic request/response models for the Honeypot API.

Inbound models are deliberately forgiving: wrong types and missing fields
turn into empty values instead of validation errors.
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class Message(BaseModel):
    """Single chat message; only the text is used."""

    model_config = ConfigDict(extra="ignore")

    text: str = Field(default="")

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return _as_text(value)


class HoneypotRequest(BaseModel):
    """Incoming payload on POST /honey-pote."""

    model_config = ConfigDict(extra="ignore")

    sessionId: str = Field(default="")
    message: Message = Field(default_factory=Message)
    conversationHistory: List[Message] = Field(default_factory=list)

    @field_validator("sessionId", mode="before")
    @classmethod
    def _coerce_session_id(cls, value):
        return _as_text(value)

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value):
        if isinstance(value, (dict, Message)):
            return value
        return {}

    @field_validator("conversationHistory", mode="before")
    @classmethod
    def _coerce_history(cls, value):
        """Non-list history is dropped; non-object entries become empty turns."""
        if not isinstance(value, list):
            return []
        return [item if isinstance(item, (dict, Message)) else {} for item in value]


class HoneypotResponse(BaseModel):
    """Response returned to the caller: only status + reply."""

    status: str = Field(...)
    reply: str = Field(...)


# Callback payload models

class ExtractedIntelligence(BaseModel):
    bankAccounts: List[str] = Field(default_factory=list)
    upiIds: List[str] = Field(default_factory=list)
    phishingLinks: List[str] = Field(default_factory=list)
    phoneNumbers: List[str] = Field(default_factory=list)
    suspiciousKeywords: List[str] = Field(default_factory=list)


class FinalReport(BaseModel):
    """Final-result payload sent to the notification endpoint."""

    sessionId: str
    scamDetected: bool = True
    totalMessagesExchanged: int = 0
    extractedIntelligence: ExtractedIntelligence = Field(default_factory=ExtractedIntelligence)
    agentNotes: str = ""
