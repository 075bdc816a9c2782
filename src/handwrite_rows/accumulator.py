# -*- coding: utf-8 -*-
"""Accumulates parsed rows across recognition batches for export."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

Cells = Tuple[str, ...]


def synthesize_labels(width: int, start: int = 0) -> List[str]:
    """Returns col_<n> labels for positions start..width-1."""
    return [f"col_{i + 1}" for i in range(start, width)]


@dataclass(frozen=True)
class Table:
    """Immutable header + rows view. Rows keep their original widths."""

    columns: Cells = ()
    rows: Tuple[Cells, ...] = field(default_factory=tuple)

    @property
    def width(self) -> int:
        return max([len(self.columns), *(len(row) for row in self.rows)], default=0)

    def header(self) -> List[str]:
        """Column labels padded with synthesized labels up to the table width."""
        labels = list(self.columns)
        return labels + synthesize_labels(self.width, start=len(labels))

    def padded_rows(self) -> List[List[str]]:
        width = self.width
        return [list(row) + [""] * (width - len(row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


class RowAccumulator:
    """
    Owns the working table: column labels plus every appended row.
    Rows are stored as given; width mismatches are resolved by Table at read time.
    """

    def __init__(self, columns: Sequence[str] = ()) -> None:
        self._columns: Cells = tuple(columns)
        self._rows: List[Cells] = []

    @property
    def columns(self) -> Cells:
        return self._columns

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def append(self, batches: Iterable[Iterable[Sequence[str]]]) -> int:
        """Appends the rows of every batch in order and returns how many were added."""
        added = [tuple(row) for batch in batches for row in batch]
        self._rows.extend(added)
        return len(added)

    def clear(self) -> None:
        """Drops all rows; column labels are kept."""
        self._rows = []

    def set_columns(self, labels: Sequence[str]) -> None:
        self._columns = tuple(labels)

    def snapshot(self) -> Table:
        """
        Returns the table for export. Without configured labels the header is
        col_1..col_n for the widest row.
        """
        rows = tuple(self._rows)
        columns = self._columns
        if not columns:
            width = max((len(row) for row in rows), default=0)
            columns = tuple(synthesize_labels(width))
        return Table(columns=columns, rows=rows)
