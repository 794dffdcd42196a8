"""
Shared fixtures for the Support Q&A Bot tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from supportbot.llm_backend import MockLLMBackend
from supportbot.pipeline import SupportChatPipeline
from supportbot.retriever import KeywordRetriever
from supportbot.store import DocumentStore
from tests.test_cases import DATA_DIR

COURSES_TEXT = "Full-Stack Bootcamp costs $500. Data Science Bootcamp costs $700."


@pytest.fixture
def write_corpus(tmp_path):
    """Write {filename: text} into a fresh directory and return its path."""
    def _write(files, name="corpus"):
        corpus_dir = tmp_path / name
        corpus_dir.mkdir()
        for filename, text in files.items():
            (corpus_dir / filename).write_text(text, encoding="utf-8")
        return corpus_dir
    return _write


@pytest.fixture
def courses_dir(write_corpus):
    return write_corpus({"courses.txt": COURSES_TEXT})


@pytest.fixture
def courses_store(courses_dir):
    return DocumentStore(courses_dir, chunk_size=800, chunk_overlap=150)


@pytest.fixture
def courses_retriever(courses_store):
    return KeywordRetriever(courses_store, top_k=5, min_score=0.5)


def _build_pipeline(data_dir, llm=None):
    store = DocumentStore(data_dir, chunk_size=800, chunk_overlap=150)
    retriever = KeywordRetriever(store, top_k=5, min_score=0.5)
    return SupportChatPipeline(store, retriever, llm or MockLLMBackend())


@pytest.fixture(scope="session")
def pipeline():
    """Pipeline over the bundled data directory with the offline backend."""
    p = _build_pipeline(DATA_DIR)
    p.initialize()
    return p


@pytest.fixture
def make_pipeline():
    """Factory for an uninitialized pipeline over a directory."""
    return _build_pipeline
