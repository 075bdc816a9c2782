# -*- coding: utf-8 -*-
"""CSV export of the accumulated table."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Sequence, Union

DEFAULT_EXPORT_NAME = "handwrite_rows.csv"


def to_csv_text(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Header line followed by one line per row, comma delimited with standard quoting."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def to_csv_bytes(header: Sequence[str], rows: Sequence[Sequence[str]]) -> bytes:
    return to_csv_text(header, rows).encode("utf-8")


def write_csv(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    path: Union[str, Path] = DEFAULT_EXPORT_NAME,
) -> Path:
    """Writes the CSV file and returns its path. OSError propagates."""
    output_path = Path(path)
    with output_path.open("w", newline="", encoding="utf-8") as csvfile:
        csvfile.write(to_csv_text(header, rows))
    return output_path
