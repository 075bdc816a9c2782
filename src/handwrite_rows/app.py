# -*- coding: utf-8 -*-
"""Main GUI application for handwrite_rows."""

from __future__ import annotations

import sys
import signal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# Fix Ctrl+C on Windows - must be done before importing paddle (via ocr_engine)
if sys.platform == "win32":
    signal.signal(signal.SIGINT, signal.default_int_handler)

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QSplitter,
    QTabWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from . import ocr_engine, settings as app_settings
from .accumulator import Table
from .jobs import ImageFile, JobOrchestrator, JobStatus, RecognitionJob
from .row_parser import DelimiterPolicy
from .session import RowSession

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.tif *.tiff *.webp)"
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp"}

DELIMITER_LABELS = [
    (DelimiterPolicy.AUTO, "Auto"),
    (DelimiterPolicy.COMMA, "Comma"),
    (DelimiterPolicy.TAB, "Tab"),
    (DelimiterPolicy.PIPE, "Pipe |"),
    (DelimiterPolicy.SPACES, "Multiple spaces"),
    (DelimiterPolicy.CUSTOM, "Custom RegExp"),
]

JOB_COLUMNS = ["File", "Status", "Progress", "Error"]


class TextLogger:
    """Logger that writes to a QPlainTextEdit widget."""

    def __init__(self, widget: QPlainTextEdit):
        self.widget = widget

    def info(self, message: str) -> None:
        self.widget.appendPlainText(f"[INFO] {message}")

    def warning(self, message: str) -> None:
        self.widget.appendPlainText(f"[WARN] {message}")


def fill_table_widget(widget: QTableWidget, table: Table) -> None:
    """Shows a Table, padding short rows and the header to the widest row."""
    header = table.header()
    rows = table.padded_rows()

    widget.clear()
    widget.setColumnCount(len(header))
    widget.setRowCount(len(rows))
    widget.setHorizontalHeaderLabels(header)
    for i, row in enumerate(rows):
        for j, cell in enumerate(row):
            widget.setItem(i, j, QTableWidgetItem(cell))
    widget.resizeColumnsToContents()


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, engine: Optional[Any] = None, config_path: str = app_settings.DEFAULT_CONFIG_PATH):
        super().__init__()
        self.setWindowTitle("Handwrite → Rows")
        self.setGeometry(100, 100, 1200, 800)
        self.setAcceptDrops(True)

        self.config_path = config_path
        self.settings = app_settings.load_config(config_path)

        # Log pane is created first so every component can log into it
        self.log_text = QPlainTextEdit()
        self.log_text.setReadOnly(True)
        self.text_logger = TextLogger(self.log_text)

        if engine is None:
            engine = ocr_engine.OCREngine(
                lang=self.settings.language,
                use_angle_cls=self.settings.use_angle_cls,
                logger=self.text_logger,
            )
        self.orchestrator = JobOrchestrator(engine, logger=self.text_logger, parent=self)
        self.session = RowSession(self.orchestrator, settings=self.settings, logger=self.text_logger)

        # job_id -> row in the job table
        self._job_rows: Dict[str, int] = {}
        self._close_requested = False

        self._init_ui()

        self.orchestrator.jobs_changed.connect(self.on_jobs_changed)
        self.orchestrator.job_updated.connect(self.on_job_updated)
        self.orchestrator.workers_finished.connect(self.on_workers_finished)

        self.refresh_preview()
        self.refresh_rows()

    def _init_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_splitter = QSplitter(Qt.Horizontal)
        main_splitter.addWidget(self._create_left_panel())
        main_splitter.addWidget(self._create_right_panel())
        main_splitter.setSizes([450, 750])

        layout_main = QHBoxLayout(central_widget)
        layout_main.addWidget(main_splitter)

    def _create_left_panel(self) -> QWidget:
        panel = QWidget()
        panel_layout = QVBoxLayout(panel)

        # --- Upload Group ---
        upload_group = QGroupBox("Upload images")
        upload_layout = QVBoxLayout(upload_group)

        btn_layout = QHBoxLayout()
        self.select_btn = QPushButton("Select files")
        self.select_btn.clicked.connect(self.on_select_files)
        btn_layout.addWidget(self.select_btn)

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self.on_clear_all)
        btn_layout.addWidget(self.clear_btn)
        upload_layout.addLayout(btn_layout)

        self.drop_label = QLabel("Drag & drop images here")
        self.drop_label.setAlignment(Qt.AlignCenter)
        self.drop_label.setMinimumHeight(60)
        self.drop_label.setStyleSheet("background-color: #f0f0f0; border: 1px dashed #999;")
        upload_layout.addWidget(self.drop_label)

        self.jobs_table = QTableWidget(0, len(JOB_COLUMNS))
        self.jobs_table.setHorizontalHeaderLabels(JOB_COLUMNS)
        self.jobs_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        upload_layout.addWidget(self.jobs_table)

        panel_layout.addWidget(upload_group, 2)

        # --- Table Settings Group ---
        settings_group = QGroupBox("Table settings")
        settings_layout = QFormLayout(settings_group)

        self.columns_edit = QLineEdit(self.settings.columns)
        self.columns_edit.setPlaceholderText("e.g. Date, Name, Amount")
        self.columns_edit.textChanged.connect(self.on_settings_edited)
        settings_layout.addRow("Columns:", self.columns_edit)

        self.delimiter_combo = QComboBox()
        for policy, label in DELIMITER_LABELS:
            self.delimiter_combo.addItem(label, policy.value)
        index = self.delimiter_combo.findData(self.settings.policy().value)
        self.delimiter_combo.setCurrentIndex(max(index, 0))
        self.delimiter_combo.currentIndexChanged.connect(self.on_settings_edited)
        settings_layout.addRow("Delimiter:", self.delimiter_combo)

        self.pattern_edit = QLineEdit(self.settings.custom_pattern)
        self.pattern_edit.setPlaceholderText(r"e.g. \s{3,} or \s*;\s*")
        self.pattern_edit.textChanged.connect(self.on_settings_edited)
        settings_layout.addRow("Custom pattern:", self.pattern_edit)
        self._update_pattern_enabled()

        self.save_settings_btn = QPushButton("Save settings")
        self.save_settings_btn.clicked.connect(self.on_save_settings)
        settings_layout.addRow(self.save_settings_btn)

        panel_layout.addWidget(settings_group)

        # --- Log Group ---
        log_group = QGroupBox("Log")
        log_layout = QVBoxLayout(log_group)
        log_layout.addWidget(self.log_text)
        panel_layout.addWidget(log_group, 1)

        return panel

    def _create_right_panel(self) -> QWidget:
        panel = QWidget()
        panel_layout = QVBoxLayout(panel)
        panel_layout.setContentsMargins(0, 0, 0, 0)

        self.results_tabs = QTabWidget()

        self.preview_table = QTableWidget()
        self.preview_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.results_tabs.addTab(self.preview_table, "Sample preview")

        self.rows_table = QTableWidget()
        self.rows_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.results_tabs.addTab(self.rows_table, "Rows")

        panel_layout.addWidget(self.results_tabs, 1)

        btn_layout = QHBoxLayout()

        self.append_btn = QPushButton("Append parsed rows")
        self.append_btn.clicked.connect(self.on_append_rows)
        btn_layout.addWidget(self.append_btn)

        self.export_btn = QPushButton("Export CSV")
        self.export_btn.clicked.connect(self.on_export_csv)
        btn_layout.addWidget(self.export_btn)

        self.copy_table_btn = QPushButton("Copy Table (TSV)")
        self.copy_table_btn.clicked.connect(self.copy_table_as_tsv)
        btn_layout.addWidget(self.copy_table_btn)

        self.clear_rows_btn = QPushButton("Clear rows")
        self.clear_rows_btn.clicked.connect(self.on_clear_rows)
        btn_layout.addWidget(self.clear_rows_btn)

        panel_layout.addLayout(btn_layout)
        return panel

    # --- Drag & drop ---

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        paths = [url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()]
        images = [p for p in paths if Path(p).suffix.lower() in IMAGE_SUFFIXES]
        if images:
            self.submit_paths(images)
            event.acceptProposedAction()

    # --- Commands ---

    def submit_paths(self, paths: Sequence[str]) -> List[str]:
        """Start recognition for the given image files."""
        return self.session.submit(ImageFile.from_path(p) for p in paths)

    @Slot()
    def on_select_files(self):
        file_paths, _ = QFileDialog.getOpenFileNames(self, "Select Images", "", IMAGE_FILTER)
        if file_paths:
            self.submit_paths(file_paths)

    @Slot()
    def on_append_rows(self):
        added = self.session.append_rows()
        self.refresh_rows()
        self.results_tabs.setCurrentIndex(1)
        if added == 0:
            self.text_logger.warning("No finished recognition results to append.")

    @Slot()
    def on_export_csv(self):
        file_path, _ = QFileDialog.getSaveFileName(
            self, "Export CSV", self.settings.export_name, "CSV (*.csv)"
        )
        if not file_path:
            return
        try:
            self.session.export(file_path)
        except OSError as exc:
            QMessageBox.critical(self, "Export Error", f"Could not write {file_path}: {exc}")

    @Slot()
    def on_clear_rows(self):
        self.session.clear_rows()
        self.refresh_rows()

    @Slot()
    def on_clear_all(self):
        self.session.clear()
        self.refresh_rows()
        self.refresh_preview()

    @Slot()
    def on_settings_edited(self):
        self.settings = self.current_settings()
        self.session.apply_settings(self.settings)
        self._update_pattern_enabled()
        self.refresh_preview()
        self.refresh_rows()

    @Slot()
    def on_save_settings(self):
        self.settings = self.current_settings()
        app_settings.save_config(self.settings, self.config_path)
        self.text_logger.info("Table settings saved.")

    def current_settings(self) -> app_settings.AppSettings:
        """Settings as currently shown in the form."""
        return app_settings.AppSettings(
            columns=self.columns_edit.text(),
            delimiter=self.delimiter_combo.currentData() or DelimiterPolicy.AUTO.value,
            custom_pattern=self.pattern_edit.text(),
            language=self.settings.language,
            use_angle_cls=self.settings.use_angle_cls,
            export_name=self.settings.export_name,
        )

    def _update_pattern_enabled(self):
        self.pattern_edit.setEnabled(self.delimiter_combo.currentData() == DelimiterPolicy.CUSTOM.value)

    # --- Views ---

    @Slot()
    def on_jobs_changed(self):
        jobs = self.orchestrator.jobs()
        self._job_rows = {job.job_id: i for i, job in enumerate(jobs)}
        self.jobs_table.setRowCount(len(jobs))
        for i, job in enumerate(jobs):
            self._show_job(i, job)
        self.refresh_preview()

    @Slot(str)
    def on_job_updated(self, job_id: str):
        job = self.orchestrator.job(job_id)
        row = self._job_rows.get(job_id)
        if job is None or row is None:
            return
        self._show_job(row, job)
        if job.status == JobStatus.DONE:
            self.refresh_preview()

    def _show_job(self, row: int, job: RecognitionJob):
        self.jobs_table.setItem(row, 0, QTableWidgetItem(job.file_name))
        self.jobs_table.setItem(row, 1, QTableWidgetItem(job.status.value))

        progress_bar = self.jobs_table.cellWidget(row, 2)
        if not isinstance(progress_bar, QProgressBar):
            progress_bar = QProgressBar()
            progress_bar.setRange(0, 100)
            self.jobs_table.setCellWidget(row, 2, progress_bar)
        progress_bar.setValue(int(round(job.progress * 100)))

        self.jobs_table.setItem(row, 3, QTableWidgetItem(job.error_message or ""))

    def refresh_preview(self):
        fill_table_widget(self.preview_table, self.session.preview())

    def refresh_rows(self):
        fill_table_widget(self.rows_table, self.session.snapshot())

    def copy_table_as_tsv(self):
        """Copy the accumulated rows as TSV."""
        table = self.session.snapshot()
        lines = ["\t".join(table.header())]
        lines.extend("\t".join(row) for row in table.padded_rows())
        QApplication.clipboard().setText("\n".join(lines))
        self.text_logger.info("Copied to clipboard.")

    def closeEvent(self, event):
        """Handle window close event."""
        # Recognition cannot be cancelled and its threads must not outlive the orchestrator
        if self.orchestrator.wait_for_workers(2000):
            event.accept()
            return
        self._close_requested = True
        self.text_logger.warning("Recognition tasks are still running; the window closes when they finish.")
        event.ignore()

    @Slot()
    def on_workers_finished(self):
        if self._close_requested:
            self.close()


def main():
    """Main entry point."""
    app = QApplication(sys.argv)
    app.setApplicationName("Handwrite Rows")

    # Set application style
    app.setStyle("Fusion")

    window = MainWindow()
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
