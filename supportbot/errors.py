"""
Error types for the Support Q&A Bot.
Each error carries an HTTP status code and a stable machine-readable code
so the web layer can map it without inspecting messages.
"""

from datetime import datetime, timezone
from typing import Dict, Optional


class SupportBotError(Exception):
    """Base class for all errors raised by the bot."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict:
        """Return the JSON error envelope body."""
        return {
            "code": self.code,
            "message": self.message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class ValidationError(SupportBotError):
    """Bad user input (empty message, wrong type, too long)."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class ConfigError(SupportBotError):
    """Missing or invalid configuration."""

    code = "CONFIG_ERROR"


# ── Corpus ────────────────────────────────────────────────────────────────

class CorpusError(SupportBotError):
    """The document corpus could not be loaded."""

    status_code = 503
    code = "RAG_ERROR"


class DataDirectoryMissing(CorpusError):
    """The data path does not exist or is not a directory."""


class NoDocumentsFound(CorpusError):
    """The data directory holds no eligible text files."""


class DocumentReadError(CorpusError):
    """A document could not be read or decoded."""


class RetrievalError(SupportBotError):
    """Scoring failed unexpectedly."""

    code = "RETRIEVAL_ERROR"


# ── Inference ─────────────────────────────────────────────────────────────

class InferenceError(SupportBotError):
    """The language-model backend failed."""

    status_code = 502
    code = "OLLAMA_ERROR"


class InferenceUnavailable(InferenceError):
    """The backend refused the connection or timed out."""


class ModelNotFound(InferenceError):
    """The configured model is not installed on the backend."""
