"""
Shared type definitions for the Trees diagram compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class Orientation(Enum):
    """Direction of travel along a connector, or the side a plug faces."""

    UP = "up"  # Decreasing row
    DOWN = "down"  # Increasing row
    LEFT = "left"  # Decreasing col
    RIGHT = "right"  # Increasing col


class CharWidthMode(Enum):
    """How many grid columns a glyph occupies."""

    MONO = "mono"  # Every glyph is one column
    HALF = "half"  # East Asian wide glyphs are two columns, ambiguous ones are one
    FULL = "full"  # Ambiguous glyphs (box drawing included) are two columns as well


class QuoteStyle(Enum):
    """Quoting declared by a block's top plug glyph."""

    NONE = "none"  # ┴
    QUOTE = "quote"  # •
    CLOSURE = "closure"  # /


@dataclass(frozen=True)
class CompileConfig:
    """Settings threaded through every compile stage."""

    char_width: CharWidthMode = CharWidthMode.MONO
    allow_anonymous_blocks: bool = False


DEFAULT_CONFIG = CompileConfig()


# =============================================================================
# Grid Types
# =============================================================================


BLANK = " "


@dataclass(frozen=True)
class Cell:
    """One column of the normalized grid."""

    row: int
    col: int
    glyph: str
    continuation: bool = False  # Second column of a wide glyph

    @property
    def is_blank(self) -> bool:
        return not self.continuation and self.glyph.isspace()


@dataclass(frozen=True)
class Grid:
    """A rectangular grid of cells built from the source lines."""

    cells: tuple[tuple[Cell, ...], ...]

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def glyph_at(self, row: int, col: int) -> str | None:
        """Glyph starting at (row, col); None off-grid or on a continuation cell."""
        if not self.in_bounds(row, col):
            return None
        cell = self.cells[row][col]
        if cell.continuation:
            return None
        return cell.glyph

    def cell_width(self, row: int, col: int) -> int:
        """Number of columns taken by the glyph starting at (row, col)."""
        width = 1
        while self.in_bounds(row, col + width) and self.cells[row][col + width].continuation:
            width += 1
        return width

    def next_col(self, row: int, col: int) -> int:
        """Column of the glyph after the one at (row, col)."""
        return col + self.cell_width(row, col)

    def prev_col(self, row: int, col: int) -> int:
        """Column of the glyph before the one at (row, col); -1 at the left edge."""
        col -= 1
        while col > 0 and self.cells[row][col].continuation:
            col -= 1
        return col

    def text_between(self, row: int, start: int, stop: int) -> str:
        """Glyphs of a row in columns [start, stop), continuation cells skipped."""
        return "".join(
            cell.glyph for cell in self.cells[row][start:stop] if not cell.continuation
        )

    def line(self, row: int) -> str:
        return self.text_between(row, 0, self.cols)


# =============================================================================
# Block Types
# =============================================================================


@dataclass(frozen=True)
class BlockPlug:
    """Top attachment of a block, where an incoming connector arrives."""

    row: int
    col: int
    quote: QuoteStyle = QuoteStyle.NONE


@dataclass(frozen=True)
class ArgPlug:
    """An argument slot on a block's border, where an outgoing connector starts."""

    row: int
    col: int
    orientation: Orientation
    expand: bool = False  # @ plug: the argument is spread into the call


@dataclass(frozen=True)
class Block:
    """A detected box outline."""

    proc_name: str
    row: int
    col: int
    width: int
    height: int
    block_plug: BlockPlug | None = None
    arg_plugs: tuple[ArgPlug, ...] = ()

    @property
    def bottom(self) -> int:
        return self.row + self.height - 1

    @property
    def right(self) -> int:
        return self.col + self.width - 1

    @property
    def top_attachment(self) -> int | None:
        return self.block_plug.col if self.block_plug is not None else None

    @property
    def attachment_columns(self) -> tuple[int, ...]:
        return tuple(plug.col for plug in self.arg_plugs)

    def contains(self, row: int, col: int) -> bool:
        return self.row <= row <= self.bottom and self.col <= col <= self.right


# =============================================================================
# Connection Types
# =============================================================================


@dataclass(frozen=True)
class EdgeFragment:
    """One connector glyph visited by a trace, with the direction leaving it."""

    row: int
    col: int
    orientation: Orientation


@dataclass(frozen=True)
class Edge:
    """A traced connection from an argument plug to a block plug."""

    source: int  # Index of the block owning the argument plug
    plug: ArgPlug
    fragments: tuple[EdgeFragment, ...]
    target: int  # Index of the block whose plug was reached


# =============================================================================
# Compiled Tree
# =============================================================================


@dataclass(frozen=True)
class TreeNode:
    """A procedure call in the compiled tree."""

    proc_name: str
    children: tuple[TreeNode, ...] = ()
    quote: QuoteStyle = QuoteStyle.NONE
    expand: bool = False  # Wired to its parent through an @ plug
    row: int | None = field(default=None, compare=False)  # Top-left corner of the source block
    col: int | None = field(default=None, compare=False)

    @property
    def arity(self) -> int:
        return len(self.children)

    def depth_first(self) -> Iterator[TreeNode]:
        """Yield self, then each subtree in argument order."""
        yield self
        for child in self.children:
            yield from child.depth_first()
