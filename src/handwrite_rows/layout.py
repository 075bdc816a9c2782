# -*- coding: utf-8 -*-
"""
This module rebuilds plain text lines from OCR boxes.
Wide horizontal gaps between boxes are kept as runs of spaces so that
column boundaries survive into the recognized text.
"""

from typing import Any, Dict, List, Tuple, Union

# A single OCR item: the bounding box plus (text, score).
# Bbox can be List[List[float]] (four points) or List[float] (x1, y1, x2, y2).
OcrItem = Tuple[Union[List[List[float]], List[float]], Tuple[str, float]]
OcrResult = List[OcrItem]

# Fallback character width when no box carries text.
DEFAULT_CHAR_WIDTH = 10


def normalize_bbox(bbox: Union[List[List[float]], List[float]]) -> Dict[str, float]:
    """
    Normalizes a bounding box into a dictionary with edges, center, width and height.

    Args:
        bbox: The bounding box, either as [[x1,y1],[x2,y2],[x3,y3],[x4,y4]] or [x1,y1,x2,y2].

    Returns:
        A dictionary with keys 'x1', 'y1', 'x2', 'y2', 'cx', 'cy', 'w', 'h'.
    """
    if isinstance(bbox[0], (list, tuple)):  # Polygon format [[x1,y1],...]
        x_coords = [p[0] for p in bbox]
        y_coords = [p[1] for p in bbox]
        x1, y1 = min(x_coords), min(y_coords)
        x2, y2 = max(x_coords), max(y_coords)
    else:  # Rectangle format [x1,y1,x2,y2]
        x1, y1, x2, y2 = bbox

    width = x2 - x1
    height = y2 - y1
    return {
        'cx': x1 + width / 2,
        'cy': y1 + height / 2,
        'w': width,
        'h': height,
        'x1': x1,
        'y1': y1,
        'x2': x2,
        'y2': y2,
    }


def _average_char_width(items: List[Dict[str, Any]]) -> float:
    total_text_len = sum(len(it['text']) for it in items)
    total_width = sum(it['box']['w'] for it in items)
    if total_text_len <= 0 or total_width <= 0:
        return DEFAULT_CHAR_WIDTH
    return total_width / total_text_len


def group_lines(items: List[Dict[str, Any]], row_height_ratio: float = 0.5) -> List[List[Dict[str, Any]]]:
    """Clusters items into lines by vertical center, each line sorted left to right."""
    if not items:
        return []

    avg_h = sum(it['box']['h'] for it in items) / len(items)
    tolerance = avg_h * row_height_ratio

    ordered = sorted(items, key=lambda it: it['box']['cy'])
    lines = []
    current = [ordered[0]]
    for item in ordered[1:]:
        line_cy = sum(i['box']['cy'] for i in current) / len(current)
        if abs(item['box']['cy'] - line_cy) < tolerance:
            current.append(item)
        else:
            lines.append(sorted(current, key=lambda it: it['box']['x1']))
            current = [item]
    lines.append(sorted(current, key=lambda it: it['box']['x1']))
    return lines


def reconstruct_text(ocr_result: OcrResult, space_width_ratio: float = 0.5) -> str:
    """
    Reconstructs OCR results into newline separated text.

    The number of spaces between two boxes grows with the gap between them,
    so a column gap of a few characters becomes a run of two or more spaces.

    Args:
        ocr_result: The list of OCR items.
        space_width_ratio: Ratio of average char width that one space stands for.

    Returns:
        The text, one reconstructed line per line of boxes.
    """
    if not ocr_result:
        return ""

    items = [
        {'text': str(text), 'box': normalize_bbox(bbox)}
        for bbox, (text, _score) in ocr_result
        if str(text).strip()
    ]
    if not items:
        return ""

    space_w = _average_char_width(items) * space_width_ratio

    output_lines = []
    for line in group_lines(items):
        parts = [line[0]['text']]
        for prev_item, item in zip(line, line[1:]):
            gap = item['box']['x1'] - prev_item['box']['x2']
            # Overlapping or touching boxes still get one separating space.
            parts.append(" " * max(1, int(gap / space_w)) if gap > 0 else " ")
            parts.append(item['text'])
        output_lines.append("".join(parts))

    return "\n".join(output_lines)
