"""
End-to-end Support Chat Pipeline.
Orchestrates: corpus loading → retrieval → prompt composition → generation.
"""

import logging
import re
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from supportbot.errors import ValidationError
from supportbot.language import detect_language
from supportbot.llm_backend import GenerationOptions, LLMBackend, get_llm_backend
from supportbot.prompts import PromptBundle, compose_prompt
from supportbot.retriever import KeywordRetriever, ScoredChunk
from supportbot.store import DocumentStore

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def validate_chat_input(payload) -> str:
    """Check a chat request body and return the trimmed message."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a valid object")

    message = payload.get("message")
    if message is None or message == "":
        raise ValidationError("Message is required", "message")
    if not isinstance(message, str):
        raise ValidationError("Message must be a string", "message")
    if not message.strip():
        raise ValidationError("Message cannot be empty", "message")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(
            f"Message too long (max {MAX_MESSAGE_LENGTH} characters)", "message"
        )

    return message.strip()


def optimized_options(message: str, has_context: bool) -> Dict:
    """Smaller generation budgets for short, context-free questions."""
    if len(message) < 50 and not has_context:
        return {"num_predict": 50, "num_ctx": 256, "temperature": 0.1, "top_k": 3}
    if has_context:
        return {"num_predict": 150, "num_ctx": 1024, "temperature": 0.2, "top_k": 5}
    return {"num_predict": 200, "num_ctx": 1024, "temperature": 0.3, "top_k": 5}


class SupportChatPipeline:
    """
    Main pipeline class that ties the store, retriever and model together.

    Usage:
        pipeline = SupportChatPipeline.from_config()
        pipeline.initialize()
        result = pipeline.ask("What courses do you offer?")
    """

    # ── Conversational patterns ──────────────────────────────────────────
    _GREETING_PATTERNS = [
        re.compile(r"^(hi|hello|hey|ازيك|اهلا|أهلا|مرحبا|السلام عليكم)$", re.IGNORECASE),
        re.compile(r"^(good morning|good evening|صباح الخير|مساء الخير)$", re.IGNORECASE),
        re.compile(r"^(how are you|ازيك|إزيك|كيف حالك|إيه الأخبار|ايه الاخبار)$", re.IGNORECASE),
    ]
    _HOW_ARE_YOU_MARKERS = ("how are you", "ازيك", "إزيك", "كيف حالك", "الأخبار", "الاخبار")

    def __init__(
        self,
        store: DocumentStore,
        retriever: KeywordRetriever,
        llm: LLMBackend,
        company_name: str = "ATG Solutions",
        company_domain: str = "technology consulting",
    ):
        self._store = store
        self._retriever = retriever
        self._llm = llm
        self._company_name = company_name
        self._company_domain = company_domain

    @classmethod
    def from_config(cls) -> "SupportChatPipeline":
        """Build every component from config.py settings."""
        import config

        config.validate_config()

        store = DocumentStore(config.DOCS_DIR, config.CHUNK_SIZE, config.CHUNK_OVERLAP)
        retriever = KeywordRetriever(store, top_k=config.TOP_K, min_score=config.MIN_SCORE)

        default_options = GenerationOptions().merged(**config.OLLAMA_OPTIONS)
        if config.LLM_BACKEND == "ollama":
            llm = get_llm_backend(
                "ollama",
                base_url=config.OLLAMA_BASE_URL,
                model=config.OLLAMA_MODEL,
                timeout=config.OLLAMA_TIMEOUT,
                default_options=default_options,
            )
        else:
            llm = get_llm_backend(config.LLM_BACKEND, default_options=default_options)

        return cls(store, retriever, llm, config.COMPANY_NAME, config.COMPANY_DOMAIN)

    def initialize(self) -> None:
        """Load the document corpus. Corpus errors propagate."""
        logger.info("Initializing support chat pipeline...")
        start = time.time()
        self._store.load()
        stats = self._store.stats()
        logger.info(
            "Pipeline ready in %.1fs: %d documents, %d chunks, LLM backend %s",
            time.time() - start, stats.documents_loaded, stats.chunks_created, self._llm.name,
        )
        logger.info("Documents: %s", ", ".join(self._store.doc_names))

    # ── Core operations ──────────────────────────────────────────────────

    def search(self, query: str, top_k: Optional[int] = None) -> List[ScoredChunk]:
        return self._retriever.search(query, top_k)

    def compose_prompt(self, query: str, chunks: List[ScoredChunk]) -> PromptBundle:
        return compose_prompt(query, chunks, self._company_name, self._company_domain)

    def refresh_corpus(self) -> None:
        self._store.refresh()

    def get_stats(self) -> Dict:
        return self._store.stats().to_dict()

    # ── Chat ─────────────────────────────────────────────────────────────

    def _quick_response(self, message: str) -> Optional[Dict]:
        """Canned replies for greetings, no retrieval or model call needed."""
        text = message.strip().lower().rstrip("?!.؟")
        if not any(p.match(text) for p in self._GREETING_PATTERNS):
            return None

        language = detect_language(message)
        how_are_you = any(m in text for m in self._HOW_ARE_YOU_MARKERS)

        if language == "ar":
            answer = (
                "الحمد لله تمام! شكراً إنك سألت. إيه اللي ممكن أقدملك من مساعدة؟"
                if how_are_you else
                f"أهلاً وسهلاً! ازيك؟ أنا مساعدك الذكي في شركة {self._company_name}. "
                "إيه اللي ممكن أساعدك فيه النهارده؟"
            )
        else:
            answer = (
                "I'm doing great, thank you for asking! How can I assist you?"
                if how_are_you else
                f"Hello! I'm your AI assistant at {self._company_name}. How can I help you today?"
            )

        return {
            "response": answer,
            "has_context": False,
            "language": language,
            "sources": [],
            "chunk_count": 0,
            "response_time": "0ms",
            "model": "quick-response",
            "tokens": 0,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "is_quick_response": True,
        }

    def ask(self, payload) -> Dict:
        """
        Answer one chat message.
        Accepts a request body dict ({"message": ...}) or a plain string.
        """
        if isinstance(payload, str):
            payload = {"message": payload}
        message = validate_chat_input(payload)

        logger.info(
            "Processing chat message (%d chars): %s",
            len(message), message[:50] + ("..." if len(message) > 50 else ""),
        )

        quick = self._quick_response(message)
        if quick:
            return quick

        chunks = self.search(message)
        bundle = self.compose_prompt(message, chunks)
        logger.debug(
            "Context search completed: %d chunks, has_context=%s, language=%s, sources=%s",
            len(chunks), bundle.has_context, bundle.language, bundle.sources,
        )

        result = self._llm.generate(
            bundle.system_prompt,
            bundle.user_prompt,
            optimized_options(message, bundle.has_context),
        )

        logger.info(
            "Chat response generated (%d chars, has_context=%s, language=%s, %dms)",
            len(result.content), bundle.has_context, bundle.language, result.response_time_ms,
        )

        return {
            "response": result.content,
            "has_context": bundle.has_context,
            "language": bundle.language,
            "sources": bundle.sources,
            "chunk_count": bundle.chunk_count,
            "response_time": f"{result.response_time_ms}ms",
            "model": result.model,
            "tokens": result.tokens,
            "best_score": round(self._retriever.get_best_score(chunks), 4),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def get_health(self) -> Dict:
        llm_health = self._llm.health()
        stats = self.get_stats()
        healthy = llm_health.get("connected") and stats["is_initialized"]

        return {
            "status": "healthy" if healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "services": {
                "llm": llm_health,
                "rag": {
                    "status": "initialized" if stats["is_initialized"] else "not-initialized",
                    **stats,
                },
            },
        }

    @property
    def llm(self) -> LLMBackend:
        return self._llm

    @property
    def is_initialized(self) -> bool:
        return self._store.is_loaded
