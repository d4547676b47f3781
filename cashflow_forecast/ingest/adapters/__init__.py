"""Per-format adapters mapping tokenized export rows to raw records.

Each adapter module exposes ``FORMAT_NAME``, ``matches_header(line)`` and
``to_raw_records(rows) -> (records, skipped)``.
"""
