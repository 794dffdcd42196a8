"""
Central configuration for the Support Q&A Bot.
All tuneable parameters in one place. Values come from the environment
(a project .env is loaded first) and fall back to the defaults below.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from supportbot.errors import ConfigError

# ── Paths ──────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent
load_dotenv(PROJECT_ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


DOCS_DIR = Path(os.getenv("RAG_DATA_PATH", str(PROJECT_ROOT / "data")))

# ── Chunking ──────────────────────────────────────────────────────────────
CHUNK_SIZE = _env_int("RAG_CHUNK_SIZE", 800)          # characters per chunk
CHUNK_OVERLAP = _env_int("RAG_CHUNK_OVERLAP", 150)    # characters shared by neighbours

# ── Retrieval ─────────────────────────────────────────────────────────────
TOP_K = _env_int("RAG_TOP_K", 5)                   # number of chunks to retrieve
MIN_SCORE = _env_float("RAG_MIN_SCORE", 0.5)       # chunks must score above this

# ── LLM Backend ───────────────────────────────────────────────────────────
LLM_BACKEND = os.getenv("LLM_BACKEND", "ollama")   # "ollama" | "mock"
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2:3b")
OLLAMA_TIMEOUT = _env_float("OLLAMA_TIMEOUT", 25.0)   # seconds

OLLAMA_OPTIONS = {
    "temperature": _env_float("OLLAMA_TEMPERATURE", 0.1),
    "top_p": _env_float("OLLAMA_TOP_P", 0.3),
    "top_k": _env_int("OLLAMA_TOP_K", 3),
    "num_predict": _env_int("OLLAMA_NUM_PREDICT", 100),
    "num_ctx": _env_int("OLLAMA_NUM_CTX", 512),
    "repeat_penalty": _env_float("OLLAMA_REPEAT_PENALTY", 1.1),
    "num_thread": _env_int("OLLAMA_NUM_THREAD", -1),
}

# ── Company ───────────────────────────────────────────────────────────────
COMPANY_NAME = os.getenv("COMPANY_NAME", "ATG Solutions")
COMPANY_DOMAIN = os.getenv("COMPANY_DOMAIN", "technology consulting")

# ── Web Server ────────────────────────────────────────────────────────────
WEB_HOST = os.getenv("HOST", "127.0.0.1")
WEB_PORT = _env_int("PORT", 3000)
APP_ENV = os.getenv("APP_ENV", "development")
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")
RATE_LIMIT_WINDOW = _env_float("RATE_LIMIT_WINDOW", 60.0)   # seconds
RATE_LIMIT_MAX = _env_int("RATE_LIMIT_MAX", 20)             # requests per window

# ── Logging ───────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")


def validate_config() -> None:
    """Fail fast on settings the bot cannot run with."""
    if CHUNK_SIZE <= 0:
        raise ConfigError(f"RAG_CHUNK_SIZE must be positive, got {CHUNK_SIZE}")
    if not 0 <= CHUNK_OVERLAP < CHUNK_SIZE:
        raise ConfigError(
            f"RAG_CHUNK_OVERLAP must be in [0, {CHUNK_SIZE}), got {CHUNK_OVERLAP}"
        )
    if TOP_K <= 0:
        raise ConfigError(f"RAG_TOP_K must be positive, got {TOP_K}")
    if MIN_SCORE < 0:
        raise ConfigError(f"RAG_MIN_SCORE cannot be negative, got {MIN_SCORE}")
    if LLM_BACKEND == "ollama":
        if not OLLAMA_BASE_URL:
            raise ConfigError("Missing required configuration: OLLAMA_BASE_URL")
        if not OLLAMA_MODEL:
            raise ConfigError("Missing required configuration: OLLAMA_MODEL")
