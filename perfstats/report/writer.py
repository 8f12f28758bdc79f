"""Serialization of finished reports to JSON and Parquet."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pyarrow as pa
import pyarrow.parquet as pq

from .builder import REPORT_SECTIONS
from ..utils.logging_utils import get_logger

LOGGER = get_logger("report.writer")

ROLLUP_SCHEMA = pa.schema(
    [
        ("text", pa.string()),
        ("count", pa.int64()),
        ("duration_ms", pa.int64()),
        ("logical_reads", pa.int64()),
        ("physical_reads", pa.int64()),
        ("failures", pa.int64()),
        ("properties", pa.string()),
        ("rows", pa.string()),
    ]
)

TOP_SLOW_SCHEMA = pa.schema(
    [
        ("text", pa.string()),
        ("start_time", pa.int64()),
        ("duration_ms", pa.int64()),
        ("node_id", pa.string()),
        ("success", pa.bool_()),
        ("logical_reads", pa.int64()),
        ("physical_reads", pa.int64()),
        ("properties", pa.string()),
        ("rows", pa.string()),
    ]
)


def _json_or_none(block: Optional[Mapping[str, Any]]) -> Optional[str]:
    if block is None:
        return None
    return json.dumps(block, sort_keys=True, separators=(",", ":"))


def rollup_rows(section: Mapping[str, Mapping[str, Any]]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for text, entry in section.items():
        rows.append(
            {
                "text": text,
                "count": entry["count"],
                "duration_ms": entry["duration"],
                "logical_reads": entry["logicalReads"],
                "physical_reads": entry["physicalReads"],
                "failures": entry["failures"],
                "properties": _json_or_none(entry.get("properties")),
                "rows": _json_or_none(entry.get("rows")),
            }
        )
    return rows


def top_slow_rows(section: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for entry in section:
        rows.append(
            {
                "text": entry["text"],
                "start_time": entry["startTime"],
                "duration_ms": entry["duration"],
                "node_id": entry["nodeId"],
                "success": entry["success"],
                "logical_reads": entry["logicalReads"],
                "physical_reads": entry["physicalReads"],
                "properties": _json_or_none(entry.get("properties")),
                "rows": _json_or_none(entry.get("rows")),
            }
        )
    return rows


def write_report_json(report: Mapping[str, Any], destination: Path) -> Dict[str, Any]:
    """Write the report sections as one indented JSON document."""

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2)
    LOGGER.info("Wrote report with %d sections to %s", len(report), path)
    return {"path": str(path), "sections": len(report)}


def write_table(
    rows: List[Dict[str, Any]],
    destination: Path,
    schema: pa.Schema,
    *,
    compression: str,
) -> Dict[str, Any]:
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    table = pa.Table.from_pylist(rows, schema=schema)
    pq.write_table(table, path, compression=compression)
    LOGGER.debug("Wrote %d rows to %s", table.num_rows, path)
    return {"rows_written": int(table.num_rows), "path": str(path)}


def export_parquet(
    report: Mapping[str, Any],
    root: Path,
    *,
    compression: str = "snappy",
) -> Dict[str, Dict[str, Any]]:
    """Write one Parquet table per rollup and slowest queries section.

    Sections missing from *report* are skipped. Properties and rows blocks
    are stored as compact JSON strings.
    """

    root = Path(root)
    artifacts: Dict[str, Dict[str, Any]] = {}
    for _, rollup_name, top_slow_name in REPORT_SECTIONS:
        if rollup_name in report:
            artifacts[rollup_name] = write_table(
                rollup_rows(report[rollup_name]),
                root / "rollups" / f"{rollup_name}.parquet",
                ROLLUP_SCHEMA,
                compression=compression,
            )
        if top_slow_name in report:
            artifacts[top_slow_name] = write_table(
                top_slow_rows(report[top_slow_name]),
                root / "top_slow" / f"{top_slow_name}.parquet",
                TOP_SLOW_SCHEMA,
                compression=compression,
            )
    return artifacts
