# -*- coding: utf-8 -*-
"""Commands behind the user actions: submit, append, preview, export and clear."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from . import export
from .accumulator import RowAccumulator, Table
from .jobs import ImageFile, JobOrchestrator
from .row_parser import DelimiterPolicy, parse_text_to_rows
from .settings import AppSettings

PREVIEW_ROWS = 10


class RowSession:
    """Wires the job orchestrator, the row parser and the accumulator together."""

    def __init__(
        self,
        orchestrator: JobOrchestrator,
        accumulator: Optional[RowAccumulator] = None,
        settings: Optional[AppSettings] = None,
        logger: Optional[Any] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.accumulator = accumulator if accumulator is not None else RowAccumulator()
        self._logger = logger
        self.settings: AppSettings
        self.policy: DelimiterPolicy
        self.custom_pattern: str
        self.apply_settings(settings if settings is not None else AppSettings())

    def apply_settings(self, settings: AppSettings) -> None:
        """Validates the settings and applies columns and delimiter configuration."""
        self.settings = settings
        self.policy = settings.policy()
        self.custom_pattern = settings.custom_pattern
        self.accumulator.set_columns(settings.column_labels())

    def submit(self, files: Iterable[ImageFile]) -> List[str]:
        return self.orchestrator.submit(files)

    def parse(self, text: str) -> List[List[str]]:
        return parse_text_to_rows(text, self.policy, self.custom_pattern)

    def append_rows(self) -> int:
        """Parses the text of every finished job and appends the rows. Returns the number added."""
        batches = [self.parse(text) for text in self.orchestrator.done_texts()]
        added = self.accumulator.append(batches)
        self._log_info(f"Appended {added} row(s) from {len(batches)} image(s)")
        return added

    def preview(self, limit: int = PREVIEW_ROWS) -> Table:
        """First rows of the first finished job, parsed with the current settings."""
        texts = self.orchestrator.done_texts()
        if not texts:
            return Table(columns=self.accumulator.columns)
        rows = tuple(tuple(row) for row in self.parse(texts[0])[:limit])
        return Table(columns=self.accumulator.columns, rows=rows)

    def snapshot(self) -> Table:
        return self.accumulator.snapshot()

    def export(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Writes the accumulated table as CSV and returns the written path."""
        table = self.accumulator.snapshot()
        output = export.write_csv(
            table.header(),
            table.padded_rows(),
            path if path is not None else self.settings.export_name,
        )
        self._log_info(f"Exported {len(table)} row(s) to {output}")
        return output

    def clear_rows(self) -> None:
        self.accumulator.clear()

    def clear(self) -> None:
        """Drops every job and every accumulated row. Column labels stay."""
        self.orchestrator.clear()
        self.accumulator.clear()

    def _log_info(self, message: str) -> None:
        if self._logger is not None:
            try:
                self._logger.info(message)
            except Exception:
                pass
