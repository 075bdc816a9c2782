from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

os.environ.setdefault("PADDLE_DISABLE_ONEDNN", "1")
os.environ.setdefault("FLAGS_use_mkldnn", "0")
os.environ.setdefault("FLAGS_enable_onednn", "0")
os.environ.setdefault("FLAGS_enable_pir_api", "0")
os.environ.setdefault("FLAGS_enable_pir_in_executor", "0")

try:
    import numpy as np
except Exception:  # pragma: no cover - optional dependency
    np = None

try:
    import cv2
except Exception:  # pragma: no cover - optional dependency
    cv2 = None

try:
    from PIL import Image
except Exception:  # pragma: no cover - optional dependency
    Image = None

try:
    from paddleocr import PaddleOCR
except Exception:  # pragma: no cover - optional dependency
    PaddleOCR = None

from . import layout

BBox = List[List[float]]
OCRResult = List[Tuple[BBox, Tuple[str, float]]]

PHASE_INITIALIZING = "initializing"
PHASE_LOADING = "loading image"
PHASE_RECOGNIZING = "recognizing text"


class OCREngineError(RuntimeError):
    """Raised when OCR initialization or recognition fails."""


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification; progress is in [0, 1] within its phase."""
    phase: str
    progress: float


@dataclass(frozen=True)
class TextResult:
    """Final event of a recognition stream."""
    text: str


RecognitionEvent = Union[ProgressEvent, TextResult]


class OCREngine:
    """PaddleOCR wrapper for CPU-only usage, shared by concurrent recognition tasks."""

    def __init__(
        self,
        lang: str = "en",
        use_angle_cls: bool = True,
        logger: Optional[Any] = None,
        padding: int = 20,
    ) -> None:
        self.lang = lang
        self.use_angle_cls = use_angle_cls
        self._logger = logger
        self._padding = padding
        self._ocr: Optional[Any] = None
        self._initialized = False
        self._init_seconds: Optional[float] = None
        # PaddleOCR predictors are not safe to call from several threads at once.
        self._lock = threading.Lock()

    def initialize(self) -> float:
        """Initialize the PaddleOCR model once and return elapsed seconds."""
        with self._lock:
            if self._initialized and self._init_seconds is not None:
                return self._init_seconds

            if PaddleOCR is None:
                raise OCREngineError("PaddleOCR is not installed")

            start = time.perf_counter()
            try:
                import paddle

                self._set_paddle_flags(paddle)
                paddle.set_device("cpu")
                self._ocr = PaddleOCR(
                    use_textline_orientation=self.use_angle_cls,
                    lang=self.lang,
                )
            except Exception as exc:
                raise OCREngineError(f"Failed to initialize PaddleOCR: {exc}") from exc

            self._initialized = True
            self._init_seconds = time.perf_counter() - start
        self._log_info(f"OCR initialized in {self._init_seconds:.3f}s")
        return self._init_seconds

    def iter_recognize(self, image: Any) -> Iterator[RecognitionEvent]:
        """
        Recognize one image as a lazy stream of events.

        Yields ProgressEvent items and finally exactly one TextResult.
        Failures are raised as OCREngineError from the iterator.
        """
        yield ProgressEvent(PHASE_INITIALIZING, 0.0)
        self.initialize()
        yield ProgressEvent(PHASE_INITIALIZING, 1.0)

        yield ProgressEvent(PHASE_LOADING, 0.0)
        image_np = self._normalize_input(image)
        yield ProgressEvent(PHASE_LOADING, 1.0)

        yield ProgressEvent(PHASE_RECOGNIZING, 0.0)
        items = self._recognize_array(image_np)
        yield ProgressEvent(PHASE_RECOGNIZING, 0.9)

        text = layout.reconstruct_text(items)
        yield ProgressEvent(PHASE_RECOGNIZING, 1.0)
        yield TextResult(text)

    def recognize(self, image: Any) -> OCRResult:
        """Run OCR on an image and return [(bbox, (text, score)), ...]."""
        if not self._initialized:
            self.initialize()
        return self._recognize_array(self._normalize_input(image))

    def recognize_text(self, image: Any) -> str:
        """Run OCR on an image and return its text, one line per text row."""
        return layout.reconstruct_text(self.recognize(image))

    def _recognize_array(self, image_np: Any) -> OCRResult:
        padded_image = self._add_padding(image_np)

        start = time.perf_counter()
        with self._lock:
            if self._ocr is None:
                raise OCREngineError("OCR engine is not initialized")
            try:
                raw = self._ocr.predict(padded_image)
            except Exception as exc:
                raise OCREngineError(f"OCR recognition failed: {exc}") from exc
        elapsed = time.perf_counter() - start

        results: OCRResult = []
        for bbox, (text, score) in self._extract_items(raw):
            results.append((bbox, (str(text), float(score))))

        self._log_info(f"OCR recognize finished in {elapsed:.3f}s, {len(results)} items")
        if not results:
            self._log_warning("OCR result is empty")
        return results

    def _normalize_input(self, image: Any) -> Any:
        """Ensure the input image is a NumPy array in BGR format."""
        if np is None:
            raise OCREngineError("NumPy is required to handle images")
        if isinstance(image, np.ndarray):
            return image
        if isinstance(image, (bytes, bytearray)):
            if cv2 is None:
                raise OCREngineError("OpenCV (cv2) is required to decode image data.")
            image_bgr = cv2.imdecode(np.frombuffer(bytes(image), dtype=np.uint8), cv2.IMREAD_COLOR)
            if image_bgr is None:
                raise OCREngineError("Could not decode image data")
            return image_bgr
        if isinstance(image, (str, Path)):
            if cv2 is None:
                raise OCREngineError("OpenCV (cv2) is required to read image files.")
            image_bgr = cv2.imread(str(image))
            if image_bgr is None:
                raise OCREngineError(f"Could not read image from path: {image}")
            return image_bgr
        if Image is not None and isinstance(image, Image.Image):
            if cv2 is None:
                raise OCREngineError("OpenCV (cv2) is required to handle PIL images")
            # Convert PIL (RGB) to OpenCV (BGR)
            return cv2.cvtColor(np.array(image.convert("RGB")), cv2.COLOR_RGB2BGR)
        raise OCREngineError(f"Unsupported image type: {type(image)}")

    def _add_padding(self, image: Any) -> Any:
        """Add a white border to the image to help detect text near edges."""
        if self._padding <= 0:
            return image
        if cv2 is None:
            self._log_warning("OpenCV (cv2) not available, cannot add padding.")
            return image
        return cv2.copyMakeBorder(
            image,
            self._padding,
            self._padding,
            self._padding,
            self._padding,
            cv2.BORDER_CONSTANT,
            value=[255, 255, 255],  # White border
        )

    def _extract_items(self, raw: Any) -> Sequence[Sequence[Any]]:
        """Extracts items from the dictionary-based PaddleOCR result format."""
        if not isinstance(raw, list) or not raw or not isinstance(raw[0], dict):
            return []

        result_dict = raw[0]
        boxes = result_dict.get("rec_polys")
        texts = result_dict.get("rec_texts")
        scores = result_dict.get("rec_scores")

        if boxes is None or texts is None or scores is None:
            return []
        if len(texts) != len(scores) or len(texts) != len(boxes):
            return []

        reformatted_items = []
        for box, text, score in zip(boxes, texts, scores):
            # Undo the padding offset so coordinates match the original image
            bbox_list = [[float(pt[0]) - self._padding, float(pt[1]) - self._padding] for pt in box]
            reformatted_items.append([bbox_list, [text, score]])
        return reformatted_items

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

    @staticmethod
    def _set_paddle_flags(paddle_module: Any) -> None:
        flags = {
            "FLAGS_use_mkldnn": False,
            "FLAGS_enable_onednn": False,
            "FLAGS_enable_new_ir": False,
            "FLAGS_enable_new_executor": False,
            "FLAGS_enable_pir_api": False,
            "FLAGS_enable_pir_in_executor": False,
        }
        for name, value in flags.items():
            try:
                paddle_module.set_flags({name: value})
            except Exception:
                pass
