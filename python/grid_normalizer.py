"""
Grid normalization for the Trees diagram compiler.

Turns raw source lines into a rectangular Grid of single-column cells so that
a glyph's column index means the same thing on every row, whatever mixture of
half-width and full-width glyphs the lines contain.
"""

from __future__ import annotations

import logging
import unicodedata
from typing import Iterable

from wcwidth import wcwidth

from compile_errors import InvalidCharacter
from diagram_types import BLANK, Cell, CharWidthMode, CompileConfig, Grid

__all__ = ["glyph_width", "normalize_lines"]

logger = logging.getLogger(__name__)


def glyph_width(glyph: str, mode: CharWidthMode) -> int:
    """
    Number of grid columns a glyph occupies under a width mode.

    Returns -1 for glyphs that have no place in a diagram (control characters)
    and 0 for zero-width glyphs such as combining marks.
    """
    if unicodedata.category(glyph) == "Cc":
        return -1

    match mode:
        case CharWidthMode.MONO:
            return 1
        case CharWidthMode.HALF:
            return wcwidth(glyph)
        case CharWidthMode.FULL:
            width = wcwidth(glyph)
            if width == 1 and unicodedata.east_asian_width(glyph) == "A":
                return 2
            return width


def normalize_lines(lines: Iterable[str], config: CompileConfig) -> Grid:
    """
    Build a Grid from source lines.

    Format:
    - A glyph of width 1 fills one cell
    - A glyph of width 2 fills its cell and one continuation cell after it
    - A zero-width glyph (HALF/FULL only) joins the glyph before it
    - Rows are padded with blank cells to the longest row

    Example (FULL):
        ["┌┐", "あb"]
        Creates a 2x4 grid:
        - Row 0: "┌", continuation, "┐", continuation
        - Row 1: "あ", continuation, "b", blank

    Args:
        lines: Decoded source lines, without or with a trailing line break
        config: Compile settings (only char_width is used here)

    Returns:
        The normalized Grid

    Raises:
        InvalidCharacter: If a line holds a glyph the width mode cannot place
    """
    mode = config.char_width
    raw_rows: list[list[tuple[str, bool]]] = []

    for row_idx, line in enumerate(lines):
        line = _strip_line_break(line)
        row: list[tuple[str, bool]] = []

        for char in line:
            width = glyph_width(char, mode)
            if width < 0:
                raise InvalidCharacter(row_idx, len(row), char, mode)
            if width == 0:
                # Combining mark: attach to the glyph it modifies
                base = _last_glyph_index(row)
                if base is None:
                    raise InvalidCharacter(row_idx, len(row), char, mode)
                glyph, _ = row[base]
                row[base] = (glyph + char, False)
                continue

            row.append((char, False))
            row.extend((BLANK, True) for _ in range(width - 1))

        raw_rows.append(row)

    # Pad rows to maximum length with blank cells
    max_cols = max((len(row) for row in raw_rows), default=0)
    cells = tuple(
        tuple(
            Cell(row_idx, col_idx, glyph, continuation)
            for col_idx, (glyph, continuation) in enumerate(row + [(BLANK, False)] * (max_cols - len(row)))
        )
        for row_idx, row in enumerate(raw_rows)
    )

    grid = Grid(cells)
    logger.info("normalize_lines: mode=%s, rows=%d, cols=%d", mode.value, grid.rows, grid.cols)
    return grid


def _strip_line_break(line: str) -> str:
    """Drop a single trailing line break; other control characters stay and are rejected."""
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith(("\n", "\r")):
        return line[:-1]
    return line


def _last_glyph_index(row: list[tuple[str, bool]]) -> int | None:
    for index in range(len(row) - 1, -1, -1):
        if not row[index][1]:
            return index
    return None
