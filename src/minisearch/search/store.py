"""In-memory inverted index with document metadata.

``InvertedIndexStore`` owns two maps:

* the inverted index, ``term -> {doc_id -> occurrence count}``
* the document table, ``doc_id -> Document``

Mutations (``index_document``, ``remove_term``) take the exclusive side of a
``ReadWriteLock``. Readers go through ``reading()``, which holds the shared
side and yields an ``IndexView`` of read-only proxies over the live maps, so
scoring and snapshotting never work from a copy that could drift.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import logging
from pathlib import Path
from types import MappingProxyType

from minisearch.observability.metrics import DOCUMENTS_INDEXED, INDEX_TERM_COUNT
from minisearch.search.analyzers import count_terms, tokenize
from minisearch.search.errors import DocumentNotFoundError, TermNotFoundError
from minisearch.search.files import read_document_text
from minisearch.search.locking import ReadWriteLock
from minisearch.search.models import Document


logger = logging.getLogger(__name__)

PostingList = Mapping[int, int]


class IndexView:
    """Read-only access to a store's maps while its read lock is held."""

    __slots__ = ("_documents", "_index")

    def __init__(self, index: dict[str, dict[int, int]], documents: dict[int, Document]) -> None:
        self._index = index
        self._documents = documents

    @property
    def document_count(self) -> int:
        return len(self._documents)

    @property
    def term_count(self) -> int:
        return len(self._index)

    @property
    def total_length(self) -> int:
        return sum(doc.length for doc in self._documents.values())

    def has_term(self, term: str) -> bool:
        return bool(self._index.get(term))

    def get_postings(self, term: str) -> PostingList:
        """Return the posting list for ``term``; empty lists count as absent."""
        postings = self._index.get(term)
        if not postings:
            raise TermNotFoundError(term)
        return MappingProxyType(postings)

    def get_document(self, doc_id: int) -> Document:
        try:
            return self._documents[doc_id]
        except KeyError:
            raise DocumentNotFoundError(doc_id) from None

    def index(self) -> Mapping[str, PostingList]:
        return MappingProxyType(self._index)

    def documents(self) -> Mapping[int, Document]:
        return MappingProxyType(self._documents)


class InvertedIndexStore:
    """Single-writer, multi-reader inverted index."""

    def __init__(self) -> None:
        self._index: dict[str, dict[int, int]] = {}
        self._documents: dict[int, Document] = {}
        self._lock = ReadWriteLock()

    @classmethod
    def from_maps(
        cls,
        index: Mapping[str, Mapping[int, int]],
        documents: Iterable[Document],
    ) -> InvertedIndexStore:
        """Build a store from already-validated maps, dropping empty posting lists."""

        store = cls()
        store._index = {term: dict(postings) for term, postings in index.items() if postings}
        store._documents = {doc.id: doc for doc in documents}
        return store

    # ------------------------------------------------------------------ access

    @contextmanager
    def reading(self) -> Iterator[IndexView]:
        """Hold shared access for the duration of the block."""
        with self._lock.read():
            yield IndexView(self._index, self._documents)

    @contextmanager
    def writing(self) -> Iterator[None]:
        """Hold exclusive access for the duration of the block."""
        with self._lock.write():
            yield

    @property
    def document_count(self) -> int:
        with self.reading() as view:
            return view.document_count

    @property
    def term_count(self) -> int:
        with self.reading() as view:
            return view.term_count

    def has_term(self, term: str) -> bool:
        with self.reading() as view:
            return view.has_term(term)

    def get_postings(self, term: str) -> dict[int, int]:
        """Return a copy of the posting list for ``term``.

        Raises:
            TermNotFoundError: if the term is not indexed.
        """
        with self.reading() as view:
            return dict(view.get_postings(term))

    def get_document(self, doc_id: int) -> Document:
        with self.reading() as view:
            return view.get_document(doc_id)

    def terms(self) -> list[str]:
        with self.reading() as view:
            return list(view.index())

    def documents(self) -> dict[int, Document]:
        with self.reading() as view:
            return dict(view.documents())

    def index(self) -> dict[str, dict[int, int]]:
        with self.reading() as view:
            return {term: dict(postings) for term, postings in view.index().items()}

    # --------------------------------------------------------------- mutation

    def index_document(self, text: str, name: str) -> int:
        """Tokenize ``text`` and add it to the index under a fresh document id."""

        counts = count_terms(tokenize(text))
        length = sum(counts.values())

        with self._lock.write():
            doc_id = len(self._documents)
            self._documents[doc_id] = Document(id=doc_id, name=name, length=length)
            for term, count in counts.items():
                postings = self._index.setdefault(term, {})
                postings[doc_id] = postings.get(doc_id, 0) + count
            term_count = len(self._index)

        DOCUMENTS_INDEXED.inc()
        INDEX_TERM_COUNT.set(term_count)
        logger.debug("Indexed document %d (%s): %d tokens, %d distinct", doc_id, name, length, len(counts))
        return doc_id

    def index_file(self, path: Path | str) -> int:
        """Read a whole file and index its text, named by its path.

        Raises:
            IndexIOError: if the file cannot be read; the store is unchanged.
        """
        text = read_document_text(path)
        return self.index_document(text, str(path))

    def index_files(self, paths: Iterable[Path | str]) -> list[int]:
        doc_ids = [self.index_file(path) for path in paths]
        logger.info("Indexed %d files", len(doc_ids))
        return doc_ids

    def remove_term(self, term: str) -> None:
        """Drop the whole posting list for ``term``. Absent terms are ignored."""

        with self._lock.write():
            removed = self._index.pop(term, None)
            term_count = len(self._index)

        if removed is None:
            logger.debug("remove_term(%r): term not indexed", term)
            return
        INDEX_TERM_COUNT.set(term_count)
        logger.debug("Removed term %r (%d postings)", term, len(removed))

    # ------------------------------------------------------------- comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InvertedIndexStore):
            return NotImplemented
        if other is self:
            return True
        # Fixed lock order so concurrent ``a == b`` and ``b == a`` cannot deadlock
        first, second = sorted((self, other), key=id)
        with first.reading() as left, second.reading() as right:
            return dict(left.index()) == dict(right.index()) and dict(left.documents()) == dict(right.documents())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"InvertedIndexStore(documents={len(self._documents)}, terms={len(self._index)})"
