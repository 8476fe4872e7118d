"""Exception hierarchy for the search stack."""

from __future__ import annotations

from pathlib import Path


class SearchError(Exception):
    """Base class for all search errors."""


class IndexIOError(SearchError, OSError):
    """Raised when a document or snapshot file cannot be read or written."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class SnapshotParseError(SearchError, ValueError):
    """Raised when snapshot content does not match the expected shape."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Malformed snapshot {self.path}: {message}")


class NotFoundError(SearchError, LookupError):
    """Raised when a term or document id is absent from the index."""


class TermNotFoundError(NotFoundError):
    def __init__(self, term: str) -> None:
        self.term = term
        super().__init__(f"Term not in index: {term!r}")


class DocumentNotFoundError(NotFoundError):
    def __init__(self, doc_id: int) -> None:
        self.doc_id = doc_id
        super().__init__(f"Document not in index: {doc_id}")


class EmptyCorpusError(SearchError):
    """Raised when a query is issued against an index holding no documents."""
