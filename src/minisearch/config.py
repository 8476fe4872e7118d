"""Centralized configuration for minisearch using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


class Settings(BaseSettings):
    """Typed configuration loaded from ``MINISEARCH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MINISEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Ranking
    default_model: Literal["tfidf", "bm25"] = Field(default="tfidf", description="Ranking model used by queries")
    bm25_k1: float = Field(default=1.5, gt=0.0, description="BM25 term-frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization strength")
    bm25_variant: Literal["legacy", "textbook"] = Field(
        default="legacy",
        description="'legacy': first term per document sets the component, times the summed idf; "
        "'textbook': sum of idf * component over query terms",
    )
    avgdl_mode: Literal["mean", "sum"] = Field(
        default="mean",
        description="'mean': average document length; 'sum': undivided total length",
    )

    # Index files
    snapshot_path: Path = Field(default=Path("index.json"), description="Snapshot file read and written by the CLI")
    max_files: int | None = Field(default=None, ge=1, description="Cap on files picked up by one index run")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Metrics
    metrics_file: Path | None = Field(
        default=None, description="Write Prometheus text exposition here after each command (textfile collector)"
    )

    @model_validator(mode="after")
    def _check_log_level(self) -> "Settings":
        if self.log_level.lower() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}")
        return self


def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
