# -*- coding: utf-8 -*-
import unittest

from handwrite_rows.layout import (
    normalize_bbox,
    reconstruct_text,
    OcrResult
)
from handwrite_rows.row_parser import DelimiterPolicy, parse_text_to_rows


class TestLayout(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        """Set up mock OCR data for testing."""
        # Two handwritten table rows with a wide gap between the columns
        cls.table_ocr_result: OcrResult = [
            ([150, 12, 180, 32], ("Qty", 0.97)),
            ([10, 10, 50, 30], ("Item", 0.99)),
            ([10, 40, 60, 60], ("Apple", 0.98)),
            ([150, 42, 160, 62], ("3", 0.95)),
        ]

        # Two words of one cell, almost touching
        cls.phrase_ocr_result: OcrResult = [
            ([[52, 0], [102, 0], [102, 20], [52, 20]], ("apple", 0.99)),
            ([[0, 0], [50, 0], [50, 20], [0, 20]], ("Green", 0.99)),
        ]

    def test_normalize_bbox(self):
        """Test normalization for both polygon and rectangle bboxes."""
        poly_bbox = [[10, 20], [100, 20], [100, 50], [10, 50]]
        rect_bbox = [10, 20, 100, 50]

        expected = {
            'cx': 55.0, 'cy': 35.0, 'w': 90.0, 'h': 30.0,
            'x1': 10, 'y1': 20, 'x2': 100, 'y2': 50
        }

        self.assertEqual(normalize_bbox(poly_bbox), expected)
        self.assertEqual(normalize_bbox(rect_bbox), expected)

    def test_reconstruct_text_keeps_column_gaps(self):
        text = reconstruct_text(self.table_ocr_result)
        lines = text.split("\n")

        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("Item  "))
        self.assertTrue(lines[1].startswith("Apple  "))
        self.assertEqual(
            parse_text_to_rows(text, DelimiterPolicy.SPACES),
            [["Item", "Qty"], ["Apple", "3"]],
        )

    def test_close_boxes_get_one_space(self):
        self.assertEqual(reconstruct_text(self.phrase_ocr_result), "Green apple")

    def test_empty_results(self):
        self.assertEqual(reconstruct_text([]), "")
        self.assertEqual(reconstruct_text([([0, 0, 10, 10], ("  ", 0.5))]), "")


if __name__ == '__main__':
    unittest.main(verbosity=2)
