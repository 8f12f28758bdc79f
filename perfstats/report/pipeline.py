"""End-to-end report generation for one aggregation run."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

from .manifest import append_manifest_entry
from .writer import export_parquet, write_report_json
from ..config import Settings, settings as default_settings
from ..handlers.base import PerformanceStatisticsHandler
from ..handlers.query import QueryHandler
from ..ingest.dispatcher import EventPayload, replay_events
from ..utils.logging_utils import get_logger
from ..utils.timing import collect_into, timed

LOGGER = get_logger("report.pipeline")


def default_handlers(run_settings: Settings) -> list[PerformanceStatisticsHandler]:
    return [QueryHandler(run_settings)]


def collect_results(handlers: Sequence[PerformanceStatisticsHandler]) -> Dict[str, Any]:
    """Merge the sections of every handler; later handlers win on name clashes."""

    report: Dict[str, Any] = {}
    for handler in handlers:
        sections = handler.results()
        for name in sections:
            if name in report:
                LOGGER.warning("Section %s produced by several handlers", name)
        report.update(sections)
    return report


def generate_report(
    events: Iterable[EventPayload],
    *,
    output_root: Path | None = None,
    settings: Optional[Settings] = None,
    handlers: Optional[Sequence[PerformanceStatisticsHandler]] = None,
) -> Dict[str, Any]:
    """Aggregate *events* with fresh handlers and persist the report."""

    run_settings = settings or default_settings
    root = Path(output_root) if output_root is not None else run_settings.output_root
    active = list(handlers) if handlers is not None else default_handlers(run_settings)

    LOGGER.info("Starting report run into %s (%d handlers)", root, len(active))
    overall_start = time.perf_counter()
    timings: Dict[str, float] = {}
    sink = collect_into(timings)

    try:
        with timed("replay_seconds", sink):
            summary = replay_events(events, active)

        with timed("build_seconds", sink):
            report = collect_results(active)

        with timed("write_seconds", sink):
            json_info = write_report_json(report, root / "report.json")
            artifacts: Dict[str, str] = {"report": json_info["path"]}
            parquet_info: Dict[str, Dict[str, Any]] = {}
            if run_settings.write_parquet:
                parquet_info = export_parquet(
                    report, root, compression=run_settings.parquet_compression
                )
                artifacts.update(
                    {name: info["path"] for name, info in parquet_info.items()}
                )

            manifest_info = append_manifest_entry(
                root / "manifest.json",
                report_version=run_settings.report_version,
                event_counts=summary.as_dict(),
                section_sizes={name: len(section) for name, section in report.items()},
                artifacts=artifacts,
                run_settings=run_settings.as_dict(),
            )
    except Exception:
        LOGGER.exception("Report run into %s failed", root)
        raise

    duration = time.perf_counter() - overall_start
    LOGGER.info(
        "Report complete: events=%d skipped=%d sections=%d in %.2fs (replay %.2fs, build %.2fs, write %.2fs)",
        summary.delivered,
        summary.skipped,
        len(report),
        duration,
        timings.get("replay_seconds", 0.0),
        timings.get("build_seconds", 0.0),
        timings.get("write_seconds", 0.0),
    )
    return {
        "report": report,
        "events": summary.as_dict(),
        "json": json_info,
        "parquet": parquet_info,
        "manifest": manifest_info,
        "timings": timings,
        "duration_seconds": duration,
    }
