"""File discovery and whole-file reads for ingestion."""

from __future__ import annotations

import glob
import logging
from pathlib import Path

from minisearch.search.errors import IndexIOError


logger = logging.getLogger(__name__)


def find_files(pattern: str, max_files: int | None = None) -> list[Path]:
    """Expand a glob pattern into a sorted list of regular files.

    ``**`` matches across directories. When ``max_files`` is given, only the
    first ``max_files`` paths (in sorted order) are returned.
    """

    if max_files is not None and max_files < 0:
        raise ValueError(f"max_files must be >= 0, got {max_files}")

    matches = sorted(Path(match) for match in glob.iglob(pattern, recursive=True))
    files = [path for path in matches if path.is_file()]
    if max_files is not None:
        files = files[:max_files]
    logger.info("Found %d files matching %s", len(files), pattern)
    return files


def read_document_text(path: Path | str) -> str:
    """Return the full UTF-8 text of ``path``.

    Raises:
        IndexIOError: if the file is missing, unreadable or not valid UTF-8.
    """

    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise IndexIOError(path, f"File is not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise IndexIOError(path, f"Failed to read file ({exc.strerror or exc})") from exc
