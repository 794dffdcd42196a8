"""
In-memory document store.
Owns the chunked corpus and rebuilds it wholesale on load/refresh.
"""

import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

from supportbot.chunking import DocumentChunk, chunk_documents, validate_window
from supportbot.ingestion import load_text_documents

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusStats:
    documents_loaded: int
    chunks_created: int
    is_initialized: bool
    last_update_time: Optional[str]
    data_path: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class _Corpus:
    """Immutable snapshot; replaced as a whole, never mutated."""
    chunks: Tuple[DocumentChunk, ...] = ()
    documents_loaded: int = 0
    last_update_time: Optional[str] = None
    is_initialized: bool = False


class DocumentStore:
    """
    Holds all document chunks in memory.

    Readers take the current snapshot through the ``chunks`` property. A load
    builds a complete new snapshot before publishing it with one reference
    swap, so readers see either the old corpus or the new one.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        chunk_size: int = 800,
        chunk_overlap: int = 150,
    ):
        validate_window(chunk_size, chunk_overlap)
        self._data_dir = Path(data_dir).resolve()
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._corpus = _Corpus()
        self._write_lock = threading.Lock()

    def load(self, directory: Optional[Union[str, Path]] = None) -> None:
        """
        Load and chunk every document, then publish the new corpus.
        On any error the previous corpus is kept and the error propagates.
        """
        with self._write_lock:
            if directory is not None:
                self._data_dir = Path(directory).resolve()
            self._rebuild()

    def ensure_loaded(self) -> None:
        """Load the corpus on first use."""
        if self._corpus.is_initialized:
            return
        with self._write_lock:
            # A concurrent load or refresh may have finished while we waited.
            if not self._corpus.is_initialized:
                self._rebuild()

    def refresh(self) -> None:
        """Mark the store uninitialized and rebuild every chunk from disk."""
        logger.info("Refreshing document store...")
        with self._write_lock:
            self._corpus = _Corpus(
                chunks=self._corpus.chunks,
                documents_loaded=self._corpus.documents_loaded,
                last_update_time=self._corpus.last_update_time,
                is_initialized=False,
            )
            self._rebuild()

    def _rebuild(self) -> None:
        # Caller holds _write_lock.
        logger.info("Loading documents from %s", self._data_dir)
        documents = load_text_documents(self._data_dir)
        chunks = chunk_documents(documents, self._chunk_size, self._chunk_overlap)

        self._corpus = _Corpus(
            chunks=tuple(chunks),
            documents_loaded=len(documents),
            last_update_time=datetime.now(timezone.utc).isoformat(),
            is_initialized=True,
        )
        logger.info(
            "Corpus ready: %d documents, %d chunks", len(documents), len(chunks)
        )

    def teardown(self) -> None:
        """Drop the corpus and return to the uninitialized state."""
        with self._write_lock:
            self._corpus = _Corpus()

    def stats(self) -> CorpusStats:
        corpus = self._corpus
        return CorpusStats(
            documents_loaded=corpus.documents_loaded,
            chunks_created=len(corpus.chunks),
            is_initialized=corpus.is_initialized,
            last_update_time=corpus.last_update_time,
            data_path=str(self._data_dir),
        )

    @property
    def chunks(self) -> Tuple[DocumentChunk, ...]:
        return self._corpus.chunks

    @property
    def is_loaded(self) -> bool:
        return self._corpus.is_initialized

    @property
    def doc_names(self) -> List[str]:
        return list(dict.fromkeys(c.source for c in self._corpus.chunks))
