"""
Indexing and ranking package.

- analyzers: tokenizer and term counter
- store: in-memory inverted index and document table
- locking: shared/exclusive access discipline for the store
- stats: TF-IDF and BM25 formulas
- scoring: ranking engine over a store
- snapshot: whole-store JSON persistence
- files: file discovery and reads for ingestion
"""

from minisearch.search.analyzers import count_terms, tokenize
from minisearch.search.errors import (
    DocumentNotFoundError,
    EmptyCorpusError,
    IndexIOError,
    NotFoundError,
    SearchError,
    SnapshotParseError,
    TermNotFoundError,
)
from minisearch.search.files import find_files, read_document_text
from minisearch.search.models import Document, NamedResult, SearchResult
from minisearch.search.scoring import ScoringEngine
from minisearch.search.snapshot import load_snapshot, save_snapshot
from minisearch.search.store import IndexView, InvertedIndexStore


__all__ = [
    "Document",
    "DocumentNotFoundError",
    "EmptyCorpusError",
    "IndexIOError",
    "IndexView",
    "InvertedIndexStore",
    "NamedResult",
    "NotFoundError",
    "ScoringEngine",
    "SearchError",
    "SearchResult",
    "SnapshotParseError",
    "TermNotFoundError",
    "count_terms",
    "find_files",
    "load_snapshot",
    "read_document_text",
    "save_snapshot",
    "tokenize",
]
