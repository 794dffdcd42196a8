"""
Document ingestion module.
Loads the plain-text company documents from the data directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from supportbot.errors import DataDirectoryMissing, DocumentReadError, NoDocumentsFound

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".txt",)


@dataclass
class TextDocument:
    """One knowledge file: its name is the retrieval source."""
    doc_name: str
    text: str


def list_document_files(docs_dir: Path) -> List[Path]:
    """Return eligible text files in a directory, sorted by name."""
    return sorted(
        f for f in docs_dir.iterdir()
        if f.is_file()
        and f.suffix.lower() in SUPPORTED_SUFFIXES
        and not f.name.startswith(".")
    )


def load_text_file(path: Path) -> TextDocument:
    """Read a single UTF-8 text file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(f"Could not read {path.name}: {e}") from e
    return TextDocument(doc_name=path.name, text=text)


def load_text_documents(docs_dir: Union[str, Path]) -> List[TextDocument]:
    """
    Load every text document in a directory.

    Raises DataDirectoryMissing if the path is not a directory and
    NoDocumentsFound if it contains no .txt files. A file that cannot be
    read aborts the whole load. Files that are blank are skipped.
    """
    docs_dir = Path(docs_dir)

    if not docs_dir.exists():
        raise DataDirectoryMissing(f"Data directory not found: {docs_dir}")
    if not docs_dir.is_dir():
        raise DataDirectoryMissing(f"Data path is not a directory: {docs_dir}")

    files = list_document_files(docs_dir)
    if not files:
        raise NoDocumentsFound(f"No text files found in data directory: {docs_dir}")

    logger.info("Found %d text files to process in %s", len(files), docs_dir)

    documents = []
    for f in files:
        doc = load_text_file(f)
        if not doc.text.strip():
            logger.warning("File is empty: %s", f.name)
            continue
        logger.debug("Loaded %s (%d chars)", f.name, len(doc.text))
        documents.append(doc)

    return documents
