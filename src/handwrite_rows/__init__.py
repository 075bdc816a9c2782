# -*- coding: utf-8 -*-
"""
Handwrite Rows - turn photos of handwritten notes and tables into CSV rows.

This package runs PaddleOCR (CPU-only) on uploaded images, splits the
recognized text into rows with a configurable delimiter policy, accumulates
rows across batches and exports them as CSV.
"""

__version__ = "1.0.0"
__author__ = "Handwrite Rows Team"

from .ocr_engine import OCREngine, OCREngineError
from .row_parser import DelimiterPolicy, parse_columns, parse_policy, parse_text_to_rows
from .accumulator import RowAccumulator, Table
from .jobs import (
    ImageFile,
    JobOrchestrator,
    JobStatus,
    RecognitionJob,
    apply_event,
)
from .session import RowSession
from .settings import AppSettings, load_config, save_config

__all__ = [
    "OCREngine",
    "OCREngineError",
    "DelimiterPolicy",
    "parse_columns",
    "parse_policy",
    "parse_text_to_rows",
    "RowAccumulator",
    "Table",
    "ImageFile",
    "JobOrchestrator",
    "JobStatus",
    "RecognitionJob",
    "apply_event",
    "RowSession",
    "AppSettings",
    "load_config",
    "save_config",
]
