"""
Sliding-window chunking module.
Splits documents into fixed-size overlapping chunks tagged with metadata.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from supportbot.errors import ConfigError
from supportbot.ingestion import TextDocument
from supportbot.language import detect_language

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentChunk:
    """A slice of one source document used as a retrieval unit."""
    content: str
    source: str
    chunk_index: int
    type: str
    word_count: int
    language: str

    def to_metadata(self) -> Dict:
        """Return metadata dict for responses."""
        return {
            "source": self.source,
            "chunk": self.chunk_index,
            "type": self.type,
            "word_count": self.word_count,
            "language": self.language,
        }


def derive_type(source: str) -> str:
    """Category used for type boosting: the file name without .txt."""
    if source.lower().endswith(".txt"):
        return source[:-4]
    return source


def validate_window(chunk_size: int, chunk_overlap: int) -> None:
    if chunk_size <= 0:
        raise ConfigError(f"Chunk size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ConfigError(f"Chunk overlap cannot be negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ConfigError(
            f"Chunk overlap ({chunk_overlap}) must be smaller than chunk size ({chunk_size})"
        )


def split_text(text: str, chunk_size: int = 800, chunk_overlap: int = 150) -> List[str]:
    """
    Split text with a fixed-size window that advances by
    chunk_size - chunk_overlap characters.

    Consecutive pieces share exactly chunk_overlap characters, so
    merge_chunks() rebuilds the original text.
    """
    validate_window(chunk_size, chunk_overlap)

    if not text:
        return []

    step = chunk_size - chunk_overlap
    pieces = []
    for start in range(0, len(text), step):
        pieces.append(text[start : start + chunk_size])
        if start + chunk_size >= len(text):
            break

    return pieces


def merge_chunks(pieces: Iterable[str], chunk_overlap: int) -> str:
    """Rebuild a document from its ordered split_text() pieces."""
    pieces = list(pieces)
    if not pieces:
        return ""
    return pieces[0] + "".join(p[chunk_overlap:] for p in pieces[1:])


def chunk_documents(
    documents: List[TextDocument],
    chunk_size: int = 800,
    chunk_overlap: int = 150,
) -> List[DocumentChunk]:
    """Chunk every document and tag each chunk with source, type and language."""
    all_chunks = []

    for doc in documents:
        doc_type = derive_type(doc.doc_name)
        pieces = split_text(doc.text, chunk_size, chunk_overlap)

        for i, piece in enumerate(pieces):
            all_chunks.append(DocumentChunk(
                content=piece,
                source=doc.doc_name,
                chunk_index=i,
                type=doc_type,
                word_count=len(piece.split()),
                language=detect_language(piece),
            ))

        logger.debug("Processed %d chunks from %s", len(pieces), doc.doc_name)

    logger.info("Created %d chunks from %d documents", len(all_chunks), len(documents))
    return all_chunks
