"""TF-IDF and BM25 ranking over an ``InvertedIndexStore``."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import heapq
import logging
from typing import TYPE_CHECKING, Literal

from minisearch.observability.metrics import SEARCH_LATENCY, track_latency
from minisearch.observability.tracing import create_span
from minisearch.search.analyzers import tokenize
from minisearch.search.errors import EmptyCorpusError, TermNotFoundError
from minisearch.search.models import NamedResult, SearchResult
from minisearch.search.stats import AvgdlMode, average_length, bm25, bm25_idf, length_normalize, tfidf


if TYPE_CHECKING:
    from minisearch.config import Settings
    from minisearch.search.store import IndexView, InvertedIndexStore


logger = logging.getLogger(__name__)

RankingModel = Literal["tfidf", "bm25"]
Bm25Variant = Literal["legacy", "textbook"]


def _sort_results(scores: dict[int, float], limit: int | None) -> list[SearchResult]:
    """Order by descending score, ties by ascending doc id."""

    def sort_key(item: tuple[int, float]) -> tuple[float, int]:
        return (-item[1], item[0])

    if limit is not None and limit < len(scores):
        if limit <= 0:
            return []
        items = heapq.nsmallest(limit, scores.items(), key=sort_key)
    else:
        items = sorted(scores.items(), key=sort_key)
    return [SearchResult(doc_id=doc_id, score=score) for doc_id, score in items]


class ScoringEngine:
    """Rank documents of a store against query terms.

    The engine holds no index state of its own; every ranking call reads the
    store under its shared lock.
    """

    def __init__(
        self,
        store: InvertedIndexStore,
        *,
        k1: float = 1.5,
        b: float = 0.75,
        bm25_variant: Bm25Variant = "legacy",
        avgdl_mode: AvgdlMode = "mean",
    ) -> None:
        if bm25_variant not in ("legacy", "textbook"):
            raise ValueError(f"Unknown BM25 variant {bm25_variant!r}")
        if avgdl_mode not in ("mean", "sum"):
            raise ValueError(f"Unknown avgdl mode {avgdl_mode!r}")
        self.store = store
        self.k1 = k1
        self.b = b
        self.bm25_variant = bm25_variant
        self.avgdl_mode = avgdl_mode

    @classmethod
    def from_settings(cls, store: InvertedIndexStore, settings: Settings) -> ScoringEngine:
        return cls(
            store,
            k1=settings.bm25_k1,
            b=settings.bm25_b,
            bm25_variant=settings.bm25_variant,
            avgdl_mode=settings.avgdl_mode,
        )

    # ----------------------------------------------------------------- TF-IDF

    def term_scores(self, term: str) -> dict[int, float]:
        """Return the per-document TF-IDF contribution of a single term."""
        with self.store.reading() as view:
            return self._term_scores(view, term)

    def _term_scores(self, view: IndexView, term: str) -> dict[int, float]:
        try:
            postings = view.get_postings(term)
        except TermNotFoundError:
            return {}
        term_count = view.term_count
        doc_freq = len(postings)
        return {doc_id: tfidf(count, term_count, doc_freq) for doc_id, count in postings.items()}

    def rank_tfidf(self, terms: Iterable[str], *, limit: int | None = None) -> list[SearchResult]:
        """Accumulate TF-IDF per document, then normalize by ``sqrt(length)``.

        Each term goes through the same analysis as indexed text, so ``"Dog"``
        matches ``dog``.
        """

        terms = [token for term in terms for token in tokenize(term)]
        with (
            create_span("search.rank", attributes={"search.model": "tfidf", "search.terms": len(terms)}),
            track_latency(SEARCH_LATENCY, model="tfidf"),
            self.store.reading() as view,
        ):
            totals: dict[int, float] = {}
            for term in terms:
                for doc_id, score in self._term_scores(view, term).items():
                    totals[doc_id] = totals.get(doc_id, 0.0) + score

            scores = {
                doc_id: length_normalize(total, view.get_document(doc_id).length) for doc_id, total in totals.items()
            }

        logger.debug("tfidf query %s matched %d documents", terms, len(scores))
        return _sort_results(scores, limit)

    # ------------------------------------------------------------------- BM25

    def rank_bm25(self, query: str, *, limit: int | None = None) -> list[SearchResult]:
        """Tokenize ``query`` and rank documents with BM25."""

        query_terms = tokenize(query)
        with (
            create_span(
                "search.rank",
                attributes={
                    "search.model": "bm25",
                    "search.terms": len(query_terms),
                    "search.bm25_variant": self.bm25_variant,
                },
            ),
            track_latency(SEARCH_LATENCY, model="bm25"),
            self.store.reading() as view,
        ):
            total_docs = view.document_count
            if total_docs == 0 or not query_terms:
                return []
            avgdl = average_length(view.total_length, total_docs, self.avgdl_mode)
            if self.bm25_variant == "legacy":
                scores = self._bm25_legacy(view, query_terms, total_docs, avgdl)
            else:
                scores = self._bm25_textbook(view, query_terms, total_docs, avgdl)

        logger.debug("bm25 query %s matched %d documents", query_terms, len(scores))
        return _sort_results(scores, limit)

    def _bm25_legacy(
        self,
        view: IndexView,
        query_terms: Sequence[str],
        total_docs: int,
        avgdl: float,
    ) -> dict[int, float]:
        # The first query term to touch a document fixes its component; the
        # idf of every present term is summed and applied once at the end.
        components: dict[int, float] = {}
        idf_sum = 0.0
        for term in query_terms:
            try:
                postings = view.get_postings(term)
            except TermNotFoundError:
                continue
            idf_sum += bm25_idf(len(postings), total_docs)
            for doc_id, tf in postings.items():
                if doc_id in components:
                    continue
                doc_length = view.get_document(doc_id).length
                components[doc_id] = bm25(tf, doc_length, avgdl, k1=self.k1, b=self.b)
        return {doc_id: component * idf_sum for doc_id, component in components.items()}

    def _bm25_textbook(
        self,
        view: IndexView,
        query_terms: Sequence[str],
        total_docs: int,
        avgdl: float,
    ) -> dict[int, float]:
        scores: dict[int, float] = {}
        for term in query_terms:
            try:
                postings = view.get_postings(term)
            except TermNotFoundError:
                continue
            idf = bm25_idf(len(postings), total_docs)
            for doc_id, tf in postings.items():
                doc_length = view.get_document(doc_id).length
                weight = bm25(tf, doc_length, avgdl, k1=self.k1, b=self.b)
                scores[doc_id] = scores.get(doc_id, 0.0) + idf * weight
        return scores

    # ------------------------------------------------------------ entry point

    def rank(
        self,
        query_terms: Sequence[str],
        *,
        model: RankingModel = "tfidf",
        limit: int | None = None,
    ) -> list[SearchResult]:
        """Rank with the requested model; BM25 re-tokenizes the joined terms."""

        if model == "tfidf":
            return self.rank_tfidf(query_terms, limit=limit)
        if model == "bm25":
            return self.rank_bm25(" ".join(query_terms), limit=limit)
        raise ValueError(f"Unknown ranking model {model!r}; expected 'tfidf' or 'bm25'")

    def lookup(
        self,
        query_terms: Sequence[str],
        *,
        model: RankingModel = "tfidf",
        limit: int | None = None,
    ) -> list[NamedResult]:
        """Rank and resolve document ids to names.

        Raises:
            EmptyCorpusError: if the store holds no documents.
        """

        if self.store.document_count == 0:
            raise EmptyCorpusError("Cannot query an index with no documents")
        results = self.rank(query_terms, model=model, limit=limit)
        documents = self.store.documents()
        return [
            NamedResult(doc_id=result.doc_id, name=documents[result.doc_id].name, score=result.score)
            for result in results
        ]
