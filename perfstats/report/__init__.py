"""Report building and serialization."""

from .builder import REPORT_SECTIONS, ReportBuilder, nanos_to_millis
from .writer import export_parquet, write_report_json

__all__ = ["REPORT_SECTIONS", "ReportBuilder", "export_parquet", "nanos_to_millis", "write_report_json"]
