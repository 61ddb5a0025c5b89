"""
Block detection for the Trees diagram compiler.

Scans a normalized Grid for box outlines. Each box is a procedure call: its
interior text is the procedure name, the plug glyph on its top border is where
the connector from its caller arrives, and the plug glyphs on its other
borders are its argument slots.

    ┌──┴──┐      ┴ block plug (• quote, / closure)
    ┤ add ├      ┤ ├ argument plugs on the sides
    └─┬─@─┘      ┬ argument plug, @ expanding argument plug
"""

from __future__ import annotations

import logging

from compile_errors import EmptyBlockName, MalformedBlock, UnterminatedBlock
from diagram_types import ArgPlug, Block, BlockPlug, CompileConfig, Grid, Orientation, QuoteStyle

__all__ = ["find_a_block", "find_blocks"]

logger = logging.getLogger(__name__)

TOP_LEFT = "┌"
TOP_RIGHT = "┐"
BOTTOM_LEFT = "└"
BOTTOM_RIGHT = "┘"
CORNERS = frozenset({TOP_LEFT, TOP_RIGHT, BOTTOM_LEFT, BOTTOM_RIGHT})

HORIZONTAL = "─"
VERTICAL = "│"
EXPAND_PLUG = "@"

BLOCK_PLUGS: dict[str, QuoteStyle] = {
    "┴": QuoteStyle.NONE,
    "•": QuoteStyle.QUOTE,
    "/": QuoteStyle.CLOSURE,
}
RIGHT_PLUGS = {"├": False, EXPAND_PLUG: True}
BOTTOM_PLUGS = {"┬": False, EXPAND_PLUG: True}
LEFT_PLUGS = {"┤": False, EXPAND_PLUG: True}

# Glyphs a connector route can be drawn with
ROUTE_GLYPHS = frozenset({HORIZONTAL, VERTICAL}).union(CORNERS, BLOCK_PLUGS, RIGHT_PLUGS, BOTTOM_PLUGS, LEFT_PLUGS)


def find_blocks(grid: Grid, config: CompileConfig) -> list[Block]:
    """
    Find every box outline in the grid.

    Blocks are returned in order of their top-left corner, rows top to bottom
    and columns left to right.

    Raises:
        UnterminatedBlock: An outline starts but never closes
        MalformedBlock: An outline closes inconsistently or holds a corner glyph
        EmptyBlockName: A block has no name and anonymous blocks are disabled
    """
    blocks: list[Block] = []

    for row in range(grid.rows):
        for col in range(grid.cols):
            block = find_a_block(grid, row, col, config)
            if block is not None:
                blocks.append(block)

    logger.info("find_blocks: found %d blocks", len(blocks))
    return blocks


def find_a_block(grid: Grid, row: int, col: int, config: CompileConfig) -> Block | None:
    """
    Read the box outline whose top-left corner is at (row, col).

    Returns None when (row, col) does not open a box. A ┌ followed by a top
    border that reaches ┐ opens a box once both corners have a side border
    below them; before that the glyphs may just as well be a connector. A
    connector that climbs and arcs back down looks the same, so a side edge
    that runs into a connector or plug glyph before its corner also gives None.
    """
    if grid.glyph_at(row, col) != TOP_LEFT:
        return None

    # Top border: ─ and at most one block plug, up to ┐
    block_plugs: list[BlockPlug] = []
    right = grid.next_col(row, col)
    while (glyph := grid.glyph_at(row, right)) == HORIZONTAL or glyph in BLOCK_PLUGS:
        if glyph in BLOCK_PLUGS:
            block_plugs.append(BlockPlug(row, right, BLOCK_PLUGS[glyph]))
        right = grid.next_col(row, right)
    if grid.glyph_at(row, right) != TOP_RIGHT:
        return None

    if not (
        _is_side(grid.glyph_at(row + 1, col), LEFT_PLUGS, BOTTOM_LEFT)
        and _is_side(grid.glyph_at(row + 1, right), RIGHT_PLUGS, BOTTOM_RIGHT)
    ):
        return None

    if len(block_plugs) > 1:
        columns = ", ".join(str(plug.col) for plug in block_plugs)
        raise MalformedBlock(row, col, f"Top border has {len(block_plugs)} block plugs (columns {columns}); at most one is allowed")

    # Right edge: │ ├ @ down to ┘
    right_plugs: list[ArgPlug] = []
    bottom = row + 1
    while (glyph := grid.glyph_at(bottom, right)) == VERTICAL or glyph in RIGHT_PLUGS:
        if glyph in RIGHT_PLUGS:
            right_plugs.append(ArgPlug(bottom, right, Orientation.RIGHT, RIGHT_PLUGS[glyph]))
        bottom += 1
    if (glyph := grid.glyph_at(bottom, right)) != BOTTOM_RIGHT:
        if glyph in ROUTE_GLYPHS:
            return None
        raise UnterminatedBlock(row, col, bottom, right, "right")

    # Left edge: │ ┤ @ down to └
    left_plugs: list[ArgPlug] = []
    left_bottom = row + 1
    while (glyph := grid.glyph_at(left_bottom, col)) == VERTICAL or glyph in LEFT_PLUGS:
        if glyph in LEFT_PLUGS:
            left_plugs.append(ArgPlug(left_bottom, col, Orientation.LEFT, LEFT_PLUGS[glyph]))
        left_bottom += 1
    if (glyph := grid.glyph_at(left_bottom, col)) != BOTTOM_LEFT:
        if glyph in ROUTE_GLYPHS:
            return None
        raise UnterminatedBlock(row, col, left_bottom, col, "left")
    if left_bottom != bottom:
        raise MalformedBlock(
            row, col, f"Left edge closes at row {left_bottom} but right edge closes at row {bottom}"
        )

    # Bottom edge: ─ ┬ @ from └ to ┘
    bottom_plugs: list[ArgPlug] = []
    under = grid.next_col(bottom, col)
    while (glyph := grid.glyph_at(bottom, under)) == HORIZONTAL or glyph in BOTTOM_PLUGS:
        if glyph in BOTTOM_PLUGS:
            bottom_plugs.append(ArgPlug(bottom, under, Orientation.DOWN, BOTTOM_PLUGS[glyph]))
        under = grid.next_col(bottom, under)
    if under != right:
        if under < right and grid.glyph_at(bottom, under) not in CORNERS:
            raise UnterminatedBlock(row, col, bottom, under, "bottom")
        raise MalformedBlock(
            row, col, f"Bottom edge ends at column {under} but top edge ends at column {right}"
        )

    inner_left = grid.next_col(row, col)
    for inner_row in range(row + 1, bottom):
        for inner_col in range(inner_left, right):
            if grid.glyph_at(inner_row, inner_col) in CORNERS:
                raise MalformedBlock(
                    row, col, f"Corner glyph inside the box at row {inner_row}, column {inner_col}"
                )

    proc_name = "\n".join(
        grid.text_between(inner_row, inner_left, right).strip()
        for inner_row in range(row + 1, bottom)
    ).strip()

    # Arguments run counter-clockwise: left side downwards, bottom edge
    # rightwards, right side upwards
    block = Block(
        proc_name=proc_name,
        row=row,
        col=col,
        width=grid.next_col(row, right) - col,
        height=bottom - row + 1,
        block_plug=block_plugs[0] if block_plugs else None,
        arg_plugs=tuple(left_plugs + bottom_plugs + right_plugs[::-1]),
    )
    if not proc_name and not config.allow_anonymous_blocks:
        raise EmptyBlockName(block)

    logger.debug(
        "find_a_block: %r at (%d, %d) size %dx%d, %d argument plugs",
        proc_name, row, col, block.width, block.height, len(block.arg_plugs),
    )
    return block


def _is_side(glyph: str | None, plugs: dict[str, bool], corner: str) -> bool:
    return glyph == VERTICAL or glyph in plugs or glyph == corner
