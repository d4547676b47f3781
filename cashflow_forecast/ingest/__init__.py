"""Export ingestion: section splitting and per-format adapters."""

from .utils import detect_header, load_export_file, parse_export, parse_records

__all__ = ["detect_header", "load_export_file", "parse_export", "parse_records"]
