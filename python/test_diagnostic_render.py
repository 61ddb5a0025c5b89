"""Tests for diagnostic_render module."""

import re

import pytest

from block_detector import find_blocks
from compile_errors import CompileError, NoStartBlock
from diagnostic_render import error_location, render_error, render_grid, render_tree
from diagram_types import DEFAULT_CONFIG, CharWidthMode, CompileConfig, QuoteStyle, TreeNode
from grid_normalizer import normalize_lines
from trees_compiler import compile_diagram

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text: str) -> str:
    return ANSI.sub("", text)


BOX = ["┌─┐", "│a│", "└─┘"]


class TestRenderGrid:
    """Tests for grid rendering."""

    def test_rows_with_gutter(self) -> None:
        """Every row is prefixed with its number."""
        grid = normalize_lines(BOX, DEFAULT_CONFIG)

        assert plain(render_grid(grid)).split("\n") == ["0 │ ┌─┐", "1 │ │a│", "2 │ └─┘"]

    def test_gutter_widens_for_tall_grids(self) -> None:
        """Row numbers are right aligned."""
        grid = normalize_lines(["x"] * 11, DEFAULT_CONFIG)

        lines = plain(render_grid(grid)).split("\n")

        assert lines[0] == " 0 │ x"
        assert lines[10] == "10 │ x"

    def test_highlight_adds_caret(self) -> None:
        """A caret line is inserted under the highlighted row."""
        grid = normalize_lines(BOX, DEFAULT_CONFIG)

        lines = plain(render_grid(grid, highlight=(1, 1))).split("\n")

        assert lines[2] == "  │  ^"
        assert len(lines) == 4

    def test_highlight_on_continuation_cell(self) -> None:
        """Pointing into a wide glyph marks the glyph itself."""
        grid = normalize_lines(["あb"], CompileConfig(char_width=CharWidthMode.HALF))

        lines = plain(render_grid(grid, highlight=(0, 1))).split("\n")

        assert lines == ["0 │ あb", "  │ ^"]

    def test_blocks_do_not_change_text(self) -> None:
        """Tinting blocks only adds color codes."""
        grid = normalize_lines(BOX, DEFAULT_CONFIG)
        blocks = find_blocks(grid, DEFAULT_CONFIG)

        assert plain(render_grid(grid, blocks=blocks)) == plain(render_grid(grid))


class TestRenderError:
    """Tests for error rendering."""

    def test_located_error(self) -> None:
        """The message is followed by the grid pointing at the defect."""
        lines = ["┌───┐", "│ a │", "└─┬─┘", "     "]
        grid = normalize_lines(lines, DEFAULT_CONFIG)

        with pytest.raises(CompileError) as exc_info:
            compile_diagram(lines)

        text = plain(render_error(grid, exc_info.value))

        assert text.startswith("dangling_edge: Argument plug at row 2, column 2")
        assert text.endswith("\n  │   ^")
        assert error_location(exc_info.value) == (3, 2)

    def test_error_without_location(self) -> None:
        """Errors about the whole program have no caret."""
        grid = normalize_lines([""], DEFAULT_CONFIG)
        error = NoStartBlock()

        text = plain(render_error(grid, error))

        assert error_location(error) is None
        assert text.startswith("no_start_block: ")
        assert "^" not in text


class TestRenderTree:
    """Tests for call tree outlines."""

    def test_nested(self) -> None:
        """Children are indented under their parent in argument order."""
        tree = TreeNode("print", (TreeNode("*", (TreeNode("3"), TreeNode("4"))),))

        assert render_tree(tree) == "print\n└─ *\n   ├─ 3\n   └─ 4"

    def test_siblings_keep_rail(self) -> None:
        """A non-last child's descendants stay connected to the rail."""
        tree = TreeNode("f", (TreeNode("g", (TreeNode("x"),)), TreeNode("h")))

        assert render_tree(tree) == "f\n├─ g\n│  └─ x\n└─ h"

    def test_markers(self) -> None:
        """Quote, closure and expanding arguments are marked."""
        tree = TreeNode(
            "map",
            (
                TreeNode("f", quote=QuoteStyle.QUOTE),
                TreeNode("g", quote=QuoteStyle.CLOSURE),
                TreeNode("xs", expand=True),
            ),
        )

        assert render_tree(tree) == "map\n├─ • f\n├─ / g\n└@ xs"

    def test_multi_line_name(self) -> None:
        """Names drawn on several rows are shown on one line."""
        assert render_tree(TreeNode("long\nname")) == "long name"
