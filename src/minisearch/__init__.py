"""Minimal full-text search engine with TF-IDF and BM25 ranking."""

__version__ = "0.1.0"
