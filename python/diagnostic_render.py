"""
Terminal rendering for compile diagnostics.

Provides two renderings:
1. Grid rendering - the normalized diagram with blocks tinted and an error
   location highlighted
2. Tree rendering - an outline of a compiled call tree
"""

from __future__ import annotations

from typing import Callable, Sequence

from simple_chalk import chalk

from compile_errors import CompileError
from diagram_types import Block, Grid, QuoteStyle, TreeNode

__all__ = ["error_location", "render_grid", "render_error", "render_tree"]


QUOTE_MARKERS = {
    QuoteStyle.NONE: "",
    QuoteStyle.QUOTE: "• ",
    QuoteStyle.CLOSURE: "/ ",
}


def _palette() -> list[Callable[[str], str]]:
    return [
        chalk.green,
        chalk.yellow,
        chalk.blue,
        chalk.magenta,
        chalk.cyan,
        chalk.greenBright,
        chalk.yellowBright,
        chalk.blueBright,
    ]


def error_location(error: CompileError) -> tuple[int, int] | None:
    """Grid position an error points at, if it has one."""
    if error.row is None or error.col is None:
        return None
    return (error.row, error.col)


def render_grid(
    grid: Grid,
    highlight: tuple[int, int] | None = None,
    blocks: Sequence[Block] = (),
) -> str:
    """
    Render the normalized grid with a row-number gutter.

    Args:
        grid: The grid to render
        highlight: Optional (row, col) to show on a white background, with a
            caret line under its row
        blocks: Optional blocks whose outlines and names are tinted, one
            palette color per block

    Returns:
        Rendered string with ANSI color codes
    """
    colors = _palette()
    gutter = len(str(max(grid.rows - 1, 0)))

    if highlight is not None:
        row, col = highlight
        # A continuation cell belongs to the wide glyph before it
        while grid.in_bounds(row, col) and col > 0 and grid.cells[row][col].continuation:
            col -= 1
        highlight = (row, col)

    lines: list[str] = []
    for r_idx, row_cells in enumerate(grid.cells):
        line_parts = [f"{r_idx:>{gutter}} │ "]

        for cell in row_cells:
            if cell.continuation:
                continue

            content = cell.glyph
            if (cell.row, cell.col) == highlight:
                content = chalk.bgWhite.black(content)
            else:
                for b_idx, block in enumerate(blocks):
                    if block.contains(cell.row, cell.col):
                        content = colors[b_idx % len(colors)](content)
                        break

            line_parts.append(content)

        lines.append("".join(line_parts).rstrip())

        if highlight is not None and highlight[0] == r_idx:
            lines.append(" " * gutter + " │ " + " " * highlight[1] + chalk.redBright("^"))

    return "\n".join(lines)


def render_error(grid: Grid, error: CompileError, blocks: Sequence[Block] = ()) -> str:
    """Render an error message followed by the diagram pointing at its location."""
    header = chalk.redBright(f"{error.kind.value}: ") + error.message
    return header + "\n\n" + render_grid(grid, error_location(error), blocks)


def render_tree(node: TreeNode) -> str:
    """
    Render a call tree as an indented outline.

    Example:
        print
        └─ *
           ├─ 3
           └@ xs

    "@" marks an argument wired through an expanding plug; "•" and "/" mark
    quoted and closure blocks.
    """
    lines = [QUOTE_MARKERS[node.quote] + _one_line(node.proc_name)]

    def walk(parent: TreeNode, prefix: str) -> None:
        for i, child in enumerate(parent.children):
            last = i == len(parent.children) - 1
            branch = ("└" if last else "├") + ("@" if child.expand else "─")
            lines.append(f"{prefix}{branch} {QUOTE_MARKERS[child.quote]}{_one_line(child.proc_name)}")
            walk(child, prefix + ("   " if last else "│  "))

    walk(node, "")
    return "\n".join(lines)


def _one_line(name: str) -> str:
    return name.replace("\n", " ")
