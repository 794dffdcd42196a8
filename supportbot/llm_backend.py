"""
Pluggable LLM backend module.
Provides an abstract interface, an Ollama implementation and an offline mock.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, List, Optional

import requests

from supportbot.errors import ConfigError, InferenceError, InferenceUnavailable, ModelNotFound
from supportbot.prompts import CONTEXT_SEPARATOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationOptions:
    """
    Sampling options sent with every generation request.

    Precedence: call-site overrides > environment defaults (config.py) >
    the built-in defaults below. Apply each layer with merged().
    """
    temperature: float = 0.1
    top_p: float = 0.3
    top_k: int = 3
    num_predict: int = 100
    num_ctx: int = 512
    repeat_penalty: float = 1.1
    num_thread: int = -1
    mirostat: int = 0
    tfs_z: float = 1.0
    seed: int = -1

    def merged(self, **overrides) -> "GenerationOptions":
        """Return a copy with non-None overrides applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown generation options: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class GenerationResult:
    content: str
    model: str
    tokens: int = 0
    response_time_ms: int = 0


class LLMBackend(ABC):
    """Abstract base class for LLM backends."""

    def __init__(self, default_options: Optional[GenerationOptions] = None):
        self.default_options = default_options or GenerationOptions()

    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[Dict] = None,
    ) -> GenerationResult:
        """Generate an answer for a system/user prompt pair."""
        pass

    @abstractmethod
    def health(self) -> Dict:
        """Return backend health details; must not raise."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend name."""
        pass

    def resolve_options(self, options: Optional[Dict] = None) -> GenerationOptions:
        return self.default_options.merged(**(options or {}))


class OllamaBackend(LLMBackend):
    """Chat completions from a local Ollama server over its HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2:3b",
        timeout: float = 25.0,
        default_options: Optional[GenerationOptions] = None,
    ):
        super().__init__(default_options)
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def model(self) -> str:
        return self._model

    def _request(self, method: str, path: str, **kwargs) -> Dict:
        url = f"{self._base_url}{path}"
        try:
            response = requests.request(method, url, timeout=self._timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            raise InferenceUnavailable(
                f"Cannot connect to Ollama server at {self._base_url}. Make sure Ollama is running."
            ) from e
        except requests.exceptions.Timeout as e:
            raise InferenceUnavailable(
                f"Ollama did not answer within {self._timeout}s"
            ) from e
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise ModelNotFound(f"Model '{self._model}' not found on {self._base_url}") from e
            raise InferenceError(f"Ollama request failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise InferenceError(f"Ollama request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise InferenceError(f"Invalid JSON from Ollama: {e}") from e

    def list_models(self) -> List[str]:
        payload = self._request("GET", "/api/tags")
        return [m.get("name", "") for m in payload.get("models", [])]

    def is_model_available(self, models: Optional[List[str]] = None) -> bool:
        models = self.list_models() if models is None else models
        return any(self._model in m for m in models)

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[Dict] = None,
    ) -> GenerationResult:
        resolved = self.resolve_options(options)
        logger.debug(
            "Generating response with %s (system prompt %d chars, user prompt %d chars)",
            self._model, len(system_prompt), len(user_prompt),
        )

        start = time.monotonic()
        payload = self._request(
            "POST",
            "/api/chat",
            json={
                "model": self._model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "stream": False,
                "options": resolved.to_dict(),
            },
        )
        elapsed_ms = int((time.monotonic() - start) * 1000)

        content = (payload.get("message") or {}).get("content", "")
        logger.debug("Response generated in %dms (%d chars)", elapsed_ms, len(content))

        return GenerationResult(
            content=content,
            model=self._model,
            tokens=payload.get("eval_count", 0) or 0,
            response_time_ms=elapsed_ms,
        )

    def health(self) -> Dict:
        try:
            models = self.list_models()
        except InferenceError as e:
            return {"status": "error", "connected": False, "error": e.message}

        return {
            "status": "healthy",
            "connected": True,
            "base_url": self._base_url,
            "model": self._model,
            "model_available": self.is_model_available(models),
            "models_count": len(models),
        }


class MockLLMBackend(LLMBackend):
    """
    Offline backend for tests and demos.
    Quotes the context sentences that share the most words with the question.
    """

    _CONTEXT_BLOCK_RE = re.compile(
        r"\[Document \d+ - ([^\]]+)\]\n(.*?)(?=" + re.escape(CONTEXT_SEPARATOR) + r"|\n\n\S+:\n|\Z)",
        re.DOTALL,
    )

    @property
    def name(self) -> str:
        return "mock"

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[Dict] = None,
    ) -> GenerationResult:
        self.resolve_options(options)
        blocks = self._CONTEXT_BLOCK_RE.findall(system_prompt)

        if not blocks:
            return GenerationResult(
                content=(
                    "I don't have specific company information about that, "
                    "but I'm happy to help with general questions."
                ),
                model="mock",
            )

        question_words = self._get_keywords(user_prompt)
        passages = []
        for source, text in blocks:
            passage = self._extract_best_passage(text, question_words)
            if passage:
                passages.append(f"{passage} ({source})")

        content = "Based on our company information:\n" + "\n".join(passages)
        return GenerationResult(content=content, model="mock", tokens=len(content.split()))

    @staticmethod
    def _get_keywords(text: str) -> set:
        return {w for w in re.findall(r"\w+", text.lower()) if len(w) > 2}

    @staticmethod
    def _extract_best_passage(text: str, question_words: set, max_sentences: int = 2) -> str:
        sentences = [s.strip() for s in re.split(r"(?<=[.!?؟])\s+", text) if s.strip()]
        if not sentences:
            return ""
        ranked = sorted(
            sentences,
            key=lambda s: len(question_words & set(re.findall(r"\w+", s.lower()))),
            reverse=True,
        )
        return " ".join(ranked[:max_sentences])

    def health(self) -> Dict:
        return {"status": "healthy", "connected": True, "model": "mock"}


def get_llm_backend(backend_name: str = "ollama", **kwargs) -> LLMBackend:
    """Factory to create an LLM backend by name."""
    backends = {
        "ollama": OllamaBackend,
        "mock": MockLLMBackend,
    }

    if backend_name not in backends:
        raise ConfigError(
            f"Unknown LLM backend: {backend_name}. Available: {list(backends.keys())}"
        )

    return backends[backend_name](**kwargs)
