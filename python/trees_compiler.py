"""
Trees diagram compiler.
Three-stage pipeline: normalize_lines (Grid) -> find_blocks (Blocks) ->
connect_blocks (TreeNode). Each stage either returns its result or raises a
CompileError, and no stage runs before the previous one has finished.
"""

from __future__ import annotations

import logging
from typing import Iterable

from block_detector import find_a_block, find_blocks
from compile_errors import (
    CompileError,
    CyclicOrSharedBlock,
    DanglingEdge,
    EdgeThroughBlock,
    EmptyBlockName,
    ErrorKind,
    InvalidCharacter,
    MalformedBlock,
    MultipleStartBlocks,
    NoStartBlock,
    UnreachableBlock,
    UnterminatedBlock,
)
from connector_tracer import Trace, TraceOutcome, build_tree, connect_blocks, trace_connector, trace_edges
from diagram_types import (
    DEFAULT_CONFIG,
    ArgPlug,
    Block,
    BlockPlug,
    Cell,
    CharWidthMode,
    CompileConfig,
    Edge,
    EdgeFragment,
    Grid,
    Orientation,
    QuoteStyle,
    TreeNode,
)
from grid_normalizer import glyph_width, normalize_lines

__all__ = [
    "compile_diagram",
    "compile_text",
    # Stages
    "normalize_lines",
    "glyph_width",
    "find_blocks",
    "find_a_block",
    "trace_connector",
    "trace_edges",
    "build_tree",
    "connect_blocks",
    # Types
    "DEFAULT_CONFIG",
    "ArgPlug",
    "Block",
    "BlockPlug",
    "Cell",
    "CharWidthMode",
    "CompileConfig",
    "Edge",
    "EdgeFragment",
    "Grid",
    "Orientation",
    "QuoteStyle",
    "Trace",
    "TraceOutcome",
    "TreeNode",
    # Errors
    "ErrorKind",
    "CompileError",
    "InvalidCharacter",
    "UnterminatedBlock",
    "MalformedBlock",
    "EmptyBlockName",
    "DanglingEdge",
    "EdgeThroughBlock",
    "NoStartBlock",
    "MultipleStartBlocks",
    "CyclicOrSharedBlock",
    "UnreachableBlock",
]

logger = logging.getLogger(__name__)


def compile_diagram(lines: Iterable[str], config: CompileConfig = DEFAULT_CONFIG) -> TreeNode:
    """
    Compile the lines of a Trees diagram into its call tree.

    Example:
        compile_diagram([
            "┌─────┐",
            "│ abc │",
            "└──┬──┘",
            "┌──┴──┐",
            "│ def │",
            "└─────┘",
        ])
        Returns TreeNode("abc", (TreeNode("def"),))

    Args:
        lines: Decoded source lines, top to bottom
        config: Width mode and block naming rules

    Returns:
        The root TreeNode (the start block)

    Raises:
        CompileError: The first defect found; see compile_errors for the kinds
    """
    grid = normalize_lines(lines, config)
    blocks = find_blocks(grid, config)
    tree = connect_blocks(grid, blocks)
    logger.info("compile_diagram: compiled %d blocks, start block %r", len(blocks), tree.proc_name)
    return tree


def compile_text(source: str, config: CompileConfig = DEFAULT_CONFIG) -> TreeNode:
    """Compile a whole decoded source text; lines are split on newlines."""
    return compile_diagram(source.split("\n"), config)
