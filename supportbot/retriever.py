"""
Retriever module.
Scores every chunk in the store against the expanded query keywords and
returns the best matches.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from supportbot.chunking import DocumentChunk
from supportbot.errors import RetrievalError, ValidationError
from supportbot.language import KeywordSet, detect_language, extract_keywords, normalize_text
from supportbot.store import DocumentStore

logger = logging.getLogger(__name__)

# ── Scoring Weights ───────────────────────────────────────────────────────

KEYWORD_MATCH_WEIGHT = 2
EXACT_QUERY_BONUS = 10
QUERY_WORD_BONUS = 1
LANGUAGE_MATCH_BONUS = 0.5
TYPE_RELEVANCE_BONUS = 3

# Document type -> keywords that make that type relevant
TYPE_KEYWORDS: Dict[str, List[str]] = {
    "courses": ["course", "courses", "training", "bootcamp", "دورات", "تدريب"],
    "pricing": ["price", "prices", "pricing", "cost", "أسعار", "تكلفة"],
    "services": ["service", "services", "خدمات", "consulting"],
    "contact": ["contact", "phone", "اتصال", "هاتف"],
    "policies": ["policy", "policies", "terms", "سياسات"],
    "faqs": ["question", "questions", "faq", "faqs", "أسئلة"],
}


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk paired with its relevance score for one query."""
    chunk: DocumentChunk
    score: float

    @property
    def content(self) -> str:
        return self.chunk.content

    @property
    def source(self) -> str:
        return self.chunk.source

    @property
    def type(self) -> str:
        return self.chunk.type

    @property
    def language(self) -> str:
        return self.chunk.language

    def to_dict(self) -> Dict:
        return {
            "content": self.chunk.content,
            "source": self.chunk.source,
            "type": self.chunk.type,
            "score": self.score,
            "language": self.chunk.language,
        }


class KeywordRetriever:
    """Lexical retriever over a DocumentStore."""

    def __init__(
        self,
        store: DocumentStore,
        top_k: int = 5,
        min_score: float = 0.5,
    ):
        self._store = store
        self._top_k = top_k
        self._min_score = min_score

    @property
    def top_k(self) -> int:
        return self._top_k

    @property
    def min_score(self) -> float:
        return self._min_score

    def search(self, query: str, top_k: Optional[int] = None) -> List[ScoredChunk]:
        """
        Return up to top_k chunks scoring above min_score, best first.
        Ties keep corpus order. An empty result means nothing matched.
        """
        top_k = self._top_k if top_k is None else top_k
        if top_k < 0:
            raise ValidationError(f"top_k cannot be negative, got {top_k}", "top_k")

        self._store.ensure_loaded()
        chunks = self._store.chunks

        try:
            keywords = extract_keywords(query)
            logger.debug("Searching for context: %r, keywords: %s", query, sorted(keywords.expanded))

            scored = [
                ScoredChunk(chunk=chunk, score=self.score_chunk(chunk, keywords, query))
                for chunk in chunks
            ]
        except Exception as e:
            logger.exception("Search failed for query %r", query)
            raise RetrievalError(f"Context search failed: {e}") from e

        results = [r for r in scored if r.score > self._min_score]
        results.sort(key=lambda r: r.score, reverse=True)
        results = results[:top_k]

        logger.debug("Found %d relevant chunks", len(results))
        return results

    def score_chunk(self, chunk: DocumentChunk, keywords: KeywordSet, query: str) -> float:
        """Relevance of one chunk to a query."""
        content = normalize_text(chunk.content)
        query_lower = query.lower()
        score = 0.0

        for word in keywords.expanded:
            pattern = re.compile(r"\b" + re.escape(word) + r"\b", re.IGNORECASE)
            score += len(pattern.findall(content)) * KEYWORD_MATCH_WEIGHT

        normalized_query = normalize_text(query)
        if normalized_query and normalized_query in content:
            score += EXACT_QUERY_BONUS

        for word in query_lower.split():
            if len(word) > 2 and word in content:
                score += QUERY_WORD_BONUS

        if chunk.language == detect_language(query):
            score += LANGUAGE_MATCH_BONUS

        score += self.type_relevance(chunk.type, keywords)
        return score

    @staticmethod
    def type_relevance(doc_type: str, keywords: KeywordSet) -> float:
        """Bonus when the chunk's category matches an expanded keyword."""
        relevant = TYPE_KEYWORDS.get(doc_type.lower(), [])
        if any(k.lower() in relevant for k in keywords.expanded):
            return TYPE_RELEVANCE_BONUS
        return 0

    @staticmethod
    def get_best_score(results: List[ScoredChunk]) -> float:
        """Return the highest score from results."""
        if not results:
            return 0.0
        return max(r.score for r in results)
