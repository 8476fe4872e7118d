"""Search data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Document:
    """Metadata for one ingested document."""

    id: int
    name: str
    length: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (the id travels as the map key)."""
        return {"name": self.name, "length": self.length}

    @classmethod
    def from_dict(cls, doc_id: int, data: dict[str, Any]) -> Document:
        """Create from dictionary."""
        return cls(id=doc_id, name=data["name"], length=data["length"])


@dataclass(frozen=True)
class SearchResult:
    """Represents a scored document produced by the scoring engine."""

    doc_id: int
    score: float


@dataclass(frozen=True)
class NamedResult:
    """A search result resolved to the document's name for presentation."""

    doc_id: int
    name: str
    score: float
