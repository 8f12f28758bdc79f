"""Configuration primitives for the statistics report pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
import os


def _env_flag(name: str, *, default: bool) -> bool:
    """Interpret common truthy/falsey environment values."""

    value = os.environ.get(name)
    if value is None:
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, *, default: int, minimum: int | None = None) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


@dataclass(frozen=True)
class Settings:
    """Runtime configuration defaults for one aggregation run."""

    # Size of each per-kind slowest queries leaderboard.
    top_slow_size: int = _env_int("PERFSTATS_TOP_SLOW_SIZE", default=30, minimum=1)
    # Legacy reports key rows and properties by identity only.
    scope_rows_by_kind: bool = _env_flag("PERFSTATS_SCOPE_ROWS_BY_KIND", default=False)
    output_root: Path = Path(os.environ.get("PERFSTATS_OUT_ROOT", "out"))
    parquet_compression: str = os.environ.get("PERFSTATS_PARQUET_COMPRESSION", "snappy")
    write_parquet: bool = _env_flag("PERFSTATS_WRITE_PARQUET", default=True)
    report_version: int = _env_int("PERFSTATS_REPORT_VERSION", default=1)

    def __post_init__(self) -> None:
        if self.top_slow_size < 1:
            raise ValueError(f"top_slow_size must be positive, got {self.top_slow_size}")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "top_slow_size": self.top_slow_size,
            "scope_rows_by_kind": self.scope_rows_by_kind,
            "output_root": str(self.output_root),
            "parquet_compression": self.parquet_compression,
            "write_parquet": self.write_parquet,
            "report_version": self.report_version,
        }


settings = Settings()
