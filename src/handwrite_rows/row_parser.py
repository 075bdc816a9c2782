# -*- coding: utf-8 -*-
"""
This module turns recognized free text into table rows.
Each non-empty line becomes one row, split into cells by a delimiter policy.
"""

import re
from enum import Enum
from typing import Callable, List, Optional, Sequence

Row = List[str]
Splitter = Callable[[str], List[str]]

# Number of non-empty lines inspected by the auto policy.
AUTO_SAMPLE_LINES = 10

_COMMA_RE = re.compile(r"\s*,\s*")
_PIPE_RE = re.compile(r"\s*\|\s*")
_SPACES_RE = re.compile(r"\s{2,}")


class DelimiterPolicy(str, Enum):
    """Strategy used to split one line of text into cells."""

    AUTO = "auto"
    COMMA = "comma"
    TAB = "tab"
    PIPE = "pipe"
    SPACES = "spaces"
    CUSTOM = "custom"


def parse_policy(value: str) -> DelimiterPolicy:
    """
    Converts a delimiter name (e.g. "Pipe", " tab ") into a DelimiterPolicy.

    Raises:
        ValueError: if the name is not one of the known policies.
    """
    if isinstance(value, DelimiterPolicy):
        return value
    name = (value or "").strip().lower()
    try:
        return DelimiterPolicy(name)
    except ValueError:
        known = ", ".join(p.value for p in DelimiterPolicy)
        raise ValueError(f"Unknown delimiter policy {value!r} (expected one of: {known})") from None


def parse_columns(columns_text: str) -> List[str]:
    """Splits a comma-separated label string, dropping empty labels."""
    if not columns_text:
        return []
    return [label.strip() for label in columns_text.split(",") if label.strip()]


def split_lines(text: str) -> List[str]:
    """Returns the trimmed, non-empty lines of the text in order."""
    if not text:
        return []
    stripped = (line.strip() for line in text.splitlines())
    return [line for line in stripped if line]


def _split_comma(line: str) -> List[str]:
    return _COMMA_RE.split(line)


def _split_tab(line: str) -> List[str]:
    return line.split("\t")


def _split_pipe(line: str) -> List[str]:
    return _PIPE_RE.split(line)


def _split_spaces(line: str) -> List[str]:
    return _SPACES_RE.split(line)


_FIXED_SPLITTERS = {
    DelimiterPolicy.COMMA: _split_comma,
    DelimiterPolicy.TAB: _split_tab,
    DelimiterPolicy.PIPE: _split_pipe,
    DelimiterPolicy.SPACES: _split_spaces,
}


def detect_policy(lines: Sequence[str]) -> DelimiterPolicy:
    """
    Guesses the delimiter from the first lines of text.
    Pipe and comma rarely show up as OCR noise, so they win over tabs and space runs.
    """
    sample = "\n".join(lines[:AUTO_SAMPLE_LINES])
    if "|" in sample:
        return DelimiterPolicy.PIPE
    if "," in sample:
        return DelimiterPolicy.COMMA
    if "\t" in sample:
        return DelimiterPolicy.TAB
    return DelimiterPolicy.SPACES


def _custom_splitter(pattern: Optional[str]) -> Splitter:
    # An empty or broken pattern degrades to the multi-space splitter.
    if not pattern or not isinstance(pattern, str):
        return _split_spaces
    try:
        compiled = re.compile(pattern)
    except (re.error, OverflowError, RecursionError):
        return _split_spaces

    def split(line: str) -> List[str]:
        # Unmatched capture groups come back as None.
        return [cell or "" for cell in compiled.split(line)]

    return split


def make_splitter(
    policy: DelimiterPolicy,
    lines: Sequence[str] = (),
    custom_pattern: Optional[str] = None,
) -> Splitter:
    """Returns the cell-splitting function for a policy."""
    if policy == DelimiterPolicy.CUSTOM:
        return _custom_splitter(custom_pattern)
    if policy == DelimiterPolicy.AUTO:
        policy = detect_policy(lines)
    return _FIXED_SPLITTERS[policy]


def parse_text_to_rows(
    text: str,
    policy: DelimiterPolicy = DelimiterPolicy.AUTO,
    custom_pattern: Optional[str] = None,
) -> List[Row]:
    """
    Converts recognized text into rows of trimmed cells.

    Args:
        text: The recognized text, any line-ending convention.
        policy: The delimiter policy used to split each line.
        custom_pattern: Regular expression used by the custom policy.

    Returns:
        One list of cells per non-empty line. Never raises for bad patterns.
    """
    lines = split_lines(text)
    if not lines:
        return []

    splitter = make_splitter(policy, lines, custom_pattern)
    return [[cell.strip() for cell in splitter(line)] for line in lines]
