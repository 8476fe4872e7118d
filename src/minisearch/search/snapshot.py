"""Whole-store JSON snapshots.

A snapshot is a single JSON object::

    {
        "index": {"<term>": {"<doc_id>": <count>, ...}, ...},
        "documents": {"<doc_id>": {"name": "<name>", "length": <int>}, ...}
    }

Document ids are map keys and therefore travel as strings; loading converts
them back to integers. Saving writes to a temporary sibling file and renames
it over the destination, so readers never observe a half-written snapshot.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, StringConstraints, ValidationError

from minisearch.observability.metrics import SNAPSHOT_OPERATIONS
from minisearch.observability.tracing import create_span
from minisearch.search.errors import IndexIOError, SnapshotParseError
from minisearch.search.models import Document
from minisearch.search.store import InvertedIndexStore


logger = logging.getLogger(__name__)

PositiveCount = Annotated[StrictInt, Field(ge=1)]
# Canonical decimal form only, so "1" and "01" cannot collapse onto one id
DocIdKey = Annotated[StrictStr, StringConstraints(pattern=r"^(0|[1-9][0-9]*)$")]


class DocumentPayload(BaseModel):
    """Snapshot form of a document record."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr
    length: Annotated[StrictInt, Field(ge=0)]


class SnapshotPayload(BaseModel):
    """Validated shape of a snapshot file."""

    model_config = ConfigDict(extra="forbid")

    index: dict[StrictStr, dict[DocIdKey, PositiveCount]]
    documents: dict[DocIdKey, DocumentPayload]


def _serialize_store(store: InvertedIndexStore) -> bytes:
    with store.reading() as view:
        payload: dict[str, Any] = {
            "index": {
                term: {str(doc_id): count for doc_id, count in postings.items()}
                for term, postings in view.index().items()
            },
            "documents": {str(doc_id): doc.to_dict() for doc_id, doc in view.documents().items()},
        }
        return orjson.dumps(payload)


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def save_snapshot(store: InvertedIndexStore, destination: Path | str) -> Path:
    """Serialize ``store`` and atomically write it to ``destination``.

    Raises:
        IndexIOError: if the destination cannot be written.
    """

    path = Path(destination)
    with create_span("snapshot.save", attributes={"snapshot.path": str(path)}):
        data = _serialize_store(store)
        try:
            _atomic_write_bytes(path, data)
        except OSError as exc:
            SNAPSHOT_OPERATIONS.labels(operation="save", status="error").inc()
            raise IndexIOError(path, f"Failed to write snapshot ({exc.strerror or exc})") from exc

    SNAPSHOT_OPERATIONS.labels(operation="save", status="ok").inc()
    logger.info("Saved snapshot to %s (%d bytes)", path, len(data))
    return path


def _parse_snapshot(path: Path, raw: bytes) -> InvertedIndexStore:
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise SnapshotParseError(path, f"invalid JSON ({exc})") from exc

    try:
        payload = SnapshotPayload.model_validate(data)
    except ValidationError as exc:
        raise SnapshotParseError(path, f"unexpected structure ({exc.error_count()} errors)\n{exc}") from exc

    documents = [Document.from_dict(int(key), doc.model_dump()) for key, doc in payload.documents.items()]
    known_ids = {doc.id for doc in documents}
    # New ids are assigned from the document count, so loaded ids must be exactly 0..n-1
    if known_ids != set(range(len(documents))):
        missing = sorted(set(range(len(documents))) - known_ids)
        raise SnapshotParseError(path, f"document ids are not contiguous from 0 (missing {missing})")

    index: dict[str, dict[int, int]] = {}
    for term, postings in payload.index.items():
        index[term] = {int(key): count for key, count in postings.items()}
        unknown = set(index[term]) - known_ids
        if unknown:
            raise SnapshotParseError(path, f"term {term!r} references unknown document ids {sorted(unknown)}")

    return InvertedIndexStore.from_maps(index, documents)


def load_snapshot(source: Path | str) -> InvertedIndexStore:
    """Read a snapshot and rebuild the store it describes.

    Raises:
        IndexIOError: if the source cannot be read.
        SnapshotParseError: if the content is not a well-formed snapshot.
    """

    path = Path(source)
    with create_span("snapshot.load", attributes={"snapshot.path": str(path)}):
        try:
            raw = path.read_bytes()
        except OSError as exc:
            SNAPSHOT_OPERATIONS.labels(operation="load", status="error").inc()
            raise IndexIOError(path, f"Failed to read snapshot ({exc.strerror or exc})") from exc

        try:
            store = _parse_snapshot(path, raw)
        except SnapshotParseError:
            SNAPSHOT_OPERATIONS.labels(operation="load", status="error").inc()
            raise

    SNAPSHOT_OPERATIONS.labels(operation="load", status="ok").inc()
    logger.info("Loaded snapshot from %s: %d documents, %d terms", path, store.document_count, store.term_count)
    return store
