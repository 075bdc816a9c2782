# -*- coding: utf-8 -*-
"""
Recognition job orchestration.

Every submitted image gets a RecognitionJob with an id minted at submission
time and its own RecognitionWorker thread. Workers only emit signals tagged
with that id; the JobOrchestrator lives on the GUI thread and folds the
events into its job records one at a time through apply_event().
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from PySide6.QtCore import QObject, QThread, Signal, Slot

from .ocr_engine import PHASE_RECOGNIZING, ProgressEvent, TextResult

DEFAULT_ERROR_MESSAGE = "OCR failed"


class JobStatus(str, Enum):
    PENDING = "pending"
    RECOGNIZING = "recognizing"
    DONE = "done"
    ERROR = "error"


TERMINAL_STATUSES = (JobStatus.DONE, JobStatus.ERROR)


@dataclass(frozen=True)
class ImageFile:
    """An uploaded image: display name plus a path or the encoded bytes."""
    name: str
    source: Union[str, Path, bytes]

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        path = Path(path)
        return cls(name=path.name, source=path)


@dataclass(frozen=True)
class RecognitionJob:
    job_id: str
    file_name: str
    recognized_text: str = ""
    progress: float = 0.0
    status: JobStatus = JobStatus.PENDING
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True)
class JobProgress:
    job_id: str
    phase: str
    progress: float


@dataclass(frozen=True)
class JobSucceeded:
    job_id: str
    text: Optional[str]


@dataclass(frozen=True)
class JobFailed:
    job_id: str
    message: Optional[str]


JobEvent = Union[JobProgress, JobSucceeded, JobFailed]


def new_job_id() -> str:
    return uuid.uuid4().hex


def apply_event(job: RecognitionJob, event: JobEvent) -> RecognitionJob:
    """
    Returns the job with the event applied.

    Terminal jobs are returned unchanged. Progress outside the recognition
    phase is ignored; recognition progress replaces the previous value but
    never moves backwards.
    """
    if job.is_terminal or event.job_id != job.job_id:
        return job

    if isinstance(event, JobProgress):
        if event.phase != PHASE_RECOGNIZING:
            return job
        progress = min(1.0, max(0.0, float(event.progress)))
        return replace(
            job,
            status=JobStatus.RECOGNIZING,
            progress=max(job.progress, progress),
        )

    if isinstance(event, JobSucceeded):
        return replace(
            job,
            recognized_text=event.text or "",
            progress=1.0,
            status=JobStatus.DONE,
            error_message=None,
        )

    if isinstance(event, JobFailed):
        return replace(
            job,
            recognized_text="",
            status=JobStatus.ERROR,
            error_message=event.message or DEFAULT_ERROR_MESSAGE,
        )

    raise TypeError(f"Unknown job event: {event!r}")


class RecognitionWorker(QThread):
    """Worker thread driving one recognition task.

    Emits any number of progressed signals, then exactly one of
    recognized or failed.
    """

    progressed = Signal(str, str, float)  # job_id, phase, progress
    recognized = Signal(str, str)  # job_id, text
    failed = Signal(str, str)  # job_id, message

    def __init__(self, job_id: str, image: Any, engine: Any, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.job_id = job_id
        self.image = image
        self.engine = engine

    def run(self):
        try:
            for event in self.engine.iter_recognize(self.image):
                if isinstance(event, ProgressEvent):
                    self.progressed.emit(self.job_id, event.phase, float(event.progress))
                elif isinstance(event, TextResult):
                    self.recognized.emit(self.job_id, event.text or "")
                    return
            raise RuntimeError("Recognition ended without a result")
        except Exception as exc:
            self.failed.emit(self.job_id, str(exc) or type(exc).__name__)


class JobOrchestrator(QObject):
    """
    Owns the job list. Only this object mutates job records, always on its own
    thread; everyone else reads immutable snapshots.
    """

    jobs_changed = Signal()
    job_updated = Signal(str)  # job_id
    workers_finished = Signal()

    def __init__(self, engine: Any, logger: Optional[Any] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.engine = engine
        self._logger = logger
        self._jobs: Dict[str, RecognitionJob] = {}
        # Workers outlive clear() until their thread finishes.
        self._workers: Dict[str, RecognitionWorker] = {}

    def submit(self, files: Iterable[ImageFile]) -> List[str]:
        """Creates one job per file and starts its recognition. Returns the new job ids."""
        created: List[Tuple[RecognitionJob, ImageFile]] = []
        for image_file in files:
            job = RecognitionJob(
                job_id=new_job_id(),
                file_name=image_file.name,
                status=JobStatus.RECOGNIZING,
            )
            self._jobs[job.job_id] = job
            created.append((job, image_file))

        if not created:
            return []

        self._log_info(f"Submitted {len(created)} image(s) for recognition")
        self.jobs_changed.emit()

        for job, image_file in created:
            self._start_worker(job.job_id, image_file)
        return [job.job_id for job, _ in created]

    def _start_worker(self, job_id: str, image_file: ImageFile) -> None:
        worker = RecognitionWorker(job_id, image_file.source, self.engine)
        worker.progressed.connect(self._on_progressed)
        worker.recognized.connect(self._on_recognized)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(self._on_worker_finished)
        self._workers[job_id] = worker
        worker.start()

    def jobs(self) -> Tuple[RecognitionJob, ...]:
        """Snapshot of all jobs in submission order."""
        return tuple(self._jobs.values())

    def job(self, job_id: str) -> Optional[RecognitionJob]:
        return self._jobs.get(job_id)

    def done_texts(self) -> List[str]:
        """Texts of finished jobs that recognized something, in submission order."""
        return [
            job.recognized_text
            for job in self._jobs.values()
            if job.status == JobStatus.DONE and job.recognized_text.strip()
        ]

    def is_busy(self) -> bool:
        return any(not job.is_terminal for job in self._jobs.values())

    def clear(self) -> None:
        """Forgets every job. Results of still-running tasks are discarded when they arrive."""
        self._jobs = {}
        self.jobs_changed.emit()

    def wait_for_workers(self, msecs: int = 30000) -> bool:
        """Blocks until all worker threads have finished. Returns False on timeout."""
        return all(worker.wait(msecs) for worker in list(self._workers.values()))

    def dispatch(self, event: JobEvent) -> bool:
        """Applies one event to its job. Returns False when the job no longer exists."""
        job = self._jobs.get(event.job_id)
        if job is None:
            self._log_info(f"Discarded {type(event).__name__} for cleared job {event.job_id[:8]}")
            return False

        updated = apply_event(job, event)
        if updated == job:
            return True

        self._jobs[job.job_id] = updated
        if updated.status == JobStatus.DONE and job.status != JobStatus.DONE:
            self._log_info(f"Recognized {updated.file_name}")
        elif updated.status == JobStatus.ERROR and job.status != JobStatus.ERROR:
            self._log_warning(f"Recognition failed for {updated.file_name}: {updated.error_message}")
        self.job_updated.emit(job.job_id)
        return True

    @Slot(str, str, float)
    def _on_progressed(self, job_id: str, phase: str, progress: float) -> None:
        self.dispatch(JobProgress(job_id, phase, progress))

    @Slot(str, str)
    def _on_recognized(self, job_id: str, text: str) -> None:
        self.dispatch(JobSucceeded(job_id, text))

    @Slot(str, str)
    def _on_failed(self, job_id: str, message: str) -> None:
        self.dispatch(JobFailed(job_id, message))

    @Slot()
    def _on_worker_finished(self) -> None:
        for job_id, worker in list(self._workers.items()):
            if worker.isFinished():
                del self._workers[job_id]
                worker.deleteLater()
        if not self._workers:
            self.workers_finished.emit()

    def _log_info(self, message: str) -> None:
        if self._logger is not None:
            try:
                self._logger.info(message)
            except Exception:
                pass

    def _log_warning(self, message: str) -> None:
        if self._logger is not None:
            try:
                self._logger.warning(message)
            except Exception:
                pass
