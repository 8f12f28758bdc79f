"""Manifest helpers recording the artifacts of each report run."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from ..utils.logging_utils import get_logger

LOGGER = get_logger("report.manifest")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_manifest(path: Path) -> Dict[str, Any] | None:
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError:
        LOGGER.warning("Manifest at %s is corrupt; starting fresh", path)
        return None


def append_manifest_entry(
    path: Path,
    *,
    report_version: int,
    event_counts: Dict[str, int],
    section_sizes: Dict[str, int],
    artifacts: Dict[str, str],
    run_settings: Dict[str, Any],
) -> Dict[str, Any]:
    manifest = load_manifest(path)
    now = _now()

    if manifest is None:
        manifest = {
            "report_version": report_version,
            "created_at": now,
            "runs": [],
        }

    manifest["report_version"] = report_version
    manifest["updated_at"] = now

    run_entry = {
        "run_id": len(manifest["runs"]) + 1,
        "created_at": now,
        "event_counts": event_counts,
        "section_sizes": section_sizes,
        "settings": run_settings,
        "artifacts": artifacts,
    }
    manifest["runs"].append(run_entry)

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(manifest, handle, indent=2)

    LOGGER.info("Updated manifest at %s with run #%d", path, run_entry["run_id"])
    return {"path": str(path), "run_id": run_entry["run_id"]}
