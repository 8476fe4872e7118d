"""Shared test fixtures and configuration."""

import logging
import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from minisearch.search.store import InvertedIndexStore


# Three-document corpus used across the ranking tests
SCENARIO_CORPUS = (
    ("cat dog", "d0"),
    ("dog dog bird", "d1"),
    ("bird bird bird", "d2"),
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Drop MINISEARCH_* variables and run from an empty directory (no stray .env)."""
    for key in list(os.environ):
        if key.upper().startswith("MINISEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_root_logging():
    """Put back the root logger's handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def store() -> InvertedIndexStore:
    return InvertedIndexStore()


@pytest.fixture
def scenario_store() -> InvertedIndexStore:
    store = InvertedIndexStore()
    for text, name in SCENARIO_CORPUS:
        store.index_document(text, name)
    return store
