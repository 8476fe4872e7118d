"""Statistical helpers for TF-IDF and BM25 scoring.

The functions here stay independent of the store so they can be unit tested
on plain numbers. Zero denominators are special-cased to 0.0 rather than
raising.
"""

from __future__ import annotations

import math
from typing import Literal


AvgdlMode = Literal["mean", "sum"]


def tfidf(count: int, term_count: int, doc_freq: int) -> float:
    """Return ``count * ln(N / df) + 1`` where ``N`` is the number of distinct terms.

    The ``+ 1`` is applied once per (term, document) pair and is part of the
    scoring contract; it is not IDF smoothing.
    """

    if doc_freq <= 0 or term_count <= 0:
        return 0.0
    return count * math.log(term_count / doc_freq) + 1.0


def length_normalize(score: float, doc_length: int) -> float:
    """Divide an accumulated score by ``sqrt(doc_length)``."""

    if doc_length <= 0:
        return 0.0
    return score / math.sqrt(doc_length)


def bm25_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln((N - nq + 0.5) / (nq + 0.5) + 1)``."""

    if total_docs <= 0:
        return 0.0
    return math.log((total_docs - doc_freq + 0.5) / (doc_freq + 0.5) + 1.0)


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = 1.5, b: float = 0.75) -> float:
    """Compute the BM25 term weight without IDF."""

    if tf <= 0 or avg_doc_length <= 0:
        return 0.0
    denominator = tf + k1 * (1 - b + b * (doc_length / avg_doc_length))
    return (tf * (k1 + 1)) / denominator


def average_length(total_length: int, document_count: int, mode: AvgdlMode = "mean") -> float:
    """Return the ``avgdl`` used by BM25.

    ``"mean"`` divides the total length by the document count. ``"sum"``
    returns the undivided total length. ``bm25`` divides by it in floating
    point, so ``dl / avgdl`` is never truncated to an integer.
    """

    if document_count <= 0:
        return 0.0
    if mode == "sum":
        return float(total_length)
    if mode == "mean":
        return total_length / document_count
    raise ValueError(f"Unknown avgdl mode {mode!r}; expected 'mean' or 'sum'")
