# -*- coding: utf-8 -*-
"""
Tests for the main window (app.py).

The OCR backend is replaced by a scripted engine so the window can be driven
end to end: submit images, wait for the jobs, append rows and export.
"""

import json
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from handwrite_rows.app import MainWindow
from handwrite_rows.ocr_engine import OCREngineError, PHASE_RECOGNIZING, ProgressEvent, TextResult


class ScriptedEngine:
    def __init__(self, results):
        self.results = results

    def iter_recognize(self, image):
        yield ProgressEvent(PHASE_RECOGNIZING, 0.5)
        result = self.results[Path(image).name]
        if isinstance(result, Exception):
            raise result
        yield TextResult(result)


@pytest.fixture
def window(qtbot, tmp_path):
    engine = ScriptedEngine({
        "good.png": "Apple | 3 | 1.20\nPear | 1 | 0.80",
        "bad.png": OCREngineError("Could not read image"),
    })
    main_window = MainWindow(engine=engine, config_path=str(tmp_path / "config.json"))
    qtbot.addWidget(main_window)
    yield main_window
    assert main_window.orchestrator.wait_for_workers(5000)


def _recognize(qtbot, window, names):
    window.submit_paths(names)
    qtbot.waitUntil(lambda: not window.orchestrator.is_busy(), timeout=5000)


def test_initial_state(window):
    assert window.columns_edit.text() == "Item, Quantity, Price"
    assert window.delimiter_combo.currentData() == "auto"
    assert not window.pattern_edit.isEnabled()
    assert window.jobs_table.rowCount() == 0
    assert window.rows_table.rowCount() == 0


def test_jobs_table_shows_status_and_errors(qtbot, window):
    _recognize(qtbot, window, ["bad.png", "good.png"])

    assert window.jobs_table.rowCount() == 2
    assert window.jobs_table.item(0, 1).text() == "error"
    assert window.jobs_table.item(0, 3).text() == "Could not read image"
    assert window.jobs_table.item(1, 1).text() == "done"
    assert window.jobs_table.cellWidget(1, 2).value() == 100


def test_preview_and_append(qtbot, window):
    _recognize(qtbot, window, ["good.png"])

    assert window.preview_table.rowCount() == 2
    assert window.rows_table.rowCount() == 0

    window.on_append_rows()

    assert window.rows_table.rowCount() == 2
    assert window.rows_table.horizontalHeaderItem(0).text() == "Item"
    assert window.rows_table.item(1, 0).text() == "Pear"
    assert window.results_tabs.currentIndex() == 1


def test_custom_delimiter_enables_pattern(window):
    index = window.delimiter_combo.findData("custom")
    window.delimiter_combo.setCurrentIndex(index)

    assert window.pattern_edit.isEnabled()
    assert window.session.policy.value == "custom"


def test_save_settings(window):
    window.columns_edit.setText("Date, Amount")
    window.on_save_settings()

    saved = json.loads(Path(window.config_path).read_text(encoding="utf-8"))
    assert saved["columns"] == "Date, Amount"
    assert window.session.accumulator.columns == ("Date", "Amount")


def test_export_csv(qtbot, window, tmp_path):
    _recognize(qtbot, window, ["good.png"])
    window.on_append_rows()

    target = tmp_path / "export.csv"
    with patch("handwrite_rows.app.QFileDialog.getSaveFileName", return_value=(str(target), "CSV (*.csv)")):
        window.on_export_csv()

    assert target.read_text(encoding="utf-8").splitlines() == [
        "Item,Quantity,Price",
        "Apple,3,1.20",
        "Pear,1,0.80",
    ]


def test_clear_all(qtbot, window):
    _recognize(qtbot, window, ["good.png"])
    window.on_append_rows()

    window.on_clear_all()

    assert window.jobs_table.rowCount() == 0
    assert window.rows_table.rowCount() == 0
    assert window.preview_table.rowCount() == 0
    assert window.columns_edit.text() == "Item, Quantity, Price"


class GatedEngine:
    """Holds every recognition until the gate opens."""

    def __init__(self, gate, text):
        self.gate = gate
        self.text = text

    def iter_recognize(self, image):
        yield ProgressEvent(PHASE_RECOGNIZING, 0.5)
        self.gate.wait(5)
        yield TextResult(self.text)


def test_close_is_deferred_until_recognition_finishes(qtbot, tmp_path):
    gate = threading.Event()
    main_window = MainWindow(engine=GatedEngine(gate, "a,b"), config_path=str(tmp_path / "config.json"))
    qtbot.addWidget(main_window)
    main_window.show()
    qtbot.waitExposed(main_window)

    main_window.submit_paths(["slow.png"])
    with patch.object(main_window.orchestrator, "wait_for_workers", return_value=False):
        assert not main_window.close()
    assert main_window.isVisible()
    assert "still running" in main_window.log_text.toPlainText()

    with qtbot.waitSignal(main_window.orchestrator.workers_finished, timeout=5000):
        gate.set()

    qtbot.waitUntil(lambda: not main_window.isVisible(), timeout=5000)
    assert not main_window.orchestrator.is_busy()
