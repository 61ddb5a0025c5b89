"""
Connector tracing and tree building for the Trees diagram compiler.
Two-phase algorithm: trace_edges (follows every argument connector to the
block it arrives at) -> build_tree (validates the edge graph and converts it
into a TreeNode tree).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum

from compile_errors import (
    CyclicOrSharedBlock,
    DanglingEdge,
    EdgeThroughBlock,
    MultipleStartBlocks,
    NoStartBlock,
    UnreachableBlock,
)
from diagram_types import ArgPlug, Block, Edge, EdgeFragment, Grid, Orientation, QuoteStyle, TreeNode

__all__ = [
    "TraceOutcome",
    "Trace",
    "trace_connector",
    "trace_edges",
    "build_tree",
    "connect_blocks",
]

logger = logging.getLogger(__name__)


# Glyph reached while travelling in a direction -> direction leaving it
TRANSITIONS: dict[Orientation, dict[str, Orientation]] = {
    Orientation.DOWN: {"│": Orientation.DOWN, "└": Orientation.RIGHT, "┘": Orientation.LEFT},
    Orientation.UP: {"│": Orientation.UP, "┌": Orientation.RIGHT, "┐": Orientation.LEFT},
    Orientation.LEFT: {"─": Orientation.LEFT, "└": Orientation.UP, "┌": Orientation.DOWN},
    Orientation.RIGHT: {"─": Orientation.RIGHT, "┘": Orientation.UP, "┐": Orientation.DOWN},
}


class TraceOutcome(Enum):
    """How a connector trace ended."""

    ARRIVED = "arrived"  # Stopped on a block plug while travelling down
    DANGLING = "dangling"  # Stopped anywhere else
    THROUGH_BLOCK = "through_block"  # Walked into another block's outline


@dataclass(frozen=True)
class Trace:
    """Result of following one argument connector."""

    plug: ArgPlug
    fragments: tuple[EdgeFragment, ...]
    stop_row: int  # Cell where the trace stopped
    stop_col: int
    outcome: TraceOutcome
    target: int | None = None  # Block arrived at (ARRIVED)
    crossed: int | None = None  # Block walked into (THROUGH_BLOCK)


def _step(grid: Grid, row: int, col: int, orientation: Orientation) -> tuple[int, int]:
    match orientation:
        case Orientation.UP:
            return (row - 1, col)
        case Orientation.DOWN:
            return (row + 1, col)
        case Orientation.LEFT:
            return (row, grid.prev_col(row, col))
        case Orientation.RIGHT:
            return (row, grid.next_col(row, col))


def trace_connector(grid: Grid, blocks: list[Block], plug: ArgPlug) -> Trace:
    """
    Follow the connector leaving an argument plug.

    The trace starts in the plug's direction and moves one glyph at a time.
    Each connector glyph either continues the line or turns it (see
    TRANSITIONS). The trace stops at the first glyph that is not a connector
    for the current direction, a blank or continuation cell, the grid edge, or
    a cell it has already visited.

    Border glyphs of detected outlines are never connector transitions for
    the direction that would enter them, so a trace into a box stops at its
    border as DANGLING. THROUGH_BLOCK guards that invariant.

    Args:
        grid: The normalized grid
        blocks: All detected blocks, for arrival and crossing checks
        plug: The argument plug to start from

    Returns:
        Trace whose outcome is ARRIVED when it stopped on a block plug while
        travelling down, THROUGH_BLOCK when a connector glyph lies inside a
        block's outline, and DANGLING otherwise
    """
    row, col, orientation = plug.row, plug.col, plug.orientation
    fragments: list[EdgeFragment] = []
    visited: set[tuple[int, int]] = set()

    while True:
        row, col = _step(grid, row, col, orientation)
        glyph = grid.glyph_at(row, col)
        turn = TRANSITIONS[orientation].get(glyph) if glyph is not None else None
        if turn is None or (row, col) in visited:
            break
        visited.add((row, col))

        crossed = _block_containing(blocks, row, col)
        if crossed is not None:
            return Trace(plug, tuple(fragments), row, col, TraceOutcome.THROUGH_BLOCK, crossed=crossed)

        orientation = turn
        fragments.append(EdgeFragment(row, col, orientation))

    if orientation is Orientation.DOWN:
        for index, block in enumerate(blocks):
            block_plug = block.block_plug
            if block_plug is not None and (block_plug.row, block_plug.col) == (row, col):
                return Trace(plug, tuple(fragments), row, col, TraceOutcome.ARRIVED, target=index)

    return Trace(plug, tuple(fragments), row, col, TraceOutcome.DANGLING)


def _block_containing(blocks: list[Block], row: int, col: int) -> int | None:
    for index, block in enumerate(blocks):
        if block.contains(row, col):
            return index
    return None


def trace_edges(grid: Grid, blocks: list[Block]) -> list[Edge]:
    """
    Trace every argument plug of every block.

    Edges are returned in block order, then argument order within a block.

    Raises:
        DanglingEdge: A connector does not arrive at a block plug
        EdgeThroughBlock: A connector runs into another block
    """
    edges: list[Edge] = []

    for index, block in enumerate(blocks):
        for plug in block.arg_plugs:
            trace = trace_connector(grid, blocks, plug)
            logger.debug(
                "trace_connector: %r plug (%d, %d) -> %s at (%d, %d) after %d fragments",
                block.proc_name, plug.row, plug.col, trace.outcome.value,
                trace.stop_row, trace.stop_col, len(trace.fragments),
            )

            match trace.outcome:
                case TraceOutcome.ARRIVED:
                    assert trace.target is not None
                    edges.append(Edge(index, plug, trace.fragments, trace.target))
                case TraceOutcome.DANGLING:
                    raise DanglingEdge(block, plug, trace.stop_row, trace.stop_col)
                case TraceOutcome.THROUGH_BLOCK:
                    assert trace.crossed is not None
                    raise EdgeThroughBlock(block, plug, blocks[trace.crossed], trace.stop_row, trace.stop_col)

    logger.info("trace_edges: traced %d edges", len(edges))
    return edges


def build_tree(blocks: list[Block], edges: list[Edge]) -> TreeNode:
    """
    Convert blocks and the edges between them into a call tree.

    Checks, in order:
    1. Exactly one block has no incoming edge (the start block)
    2. No block has more than one incoming edge
    3. Every block is reached from the start block

    Children keep the order of their parent's argument plugs.

    Raises:
        NoStartBlock: Every block has an incoming edge
        MultipleStartBlocks: More than one block has no incoming edge
        CyclicOrSharedBlock: A block has several incoming edges, or an
            unreached block lies on a cycle
        UnreachableBlock: An unreached block hangs off a cycle
    """
    incoming: dict[int, list[Edge]] = defaultdict(list)
    outgoing: dict[int, list[Edge]] = defaultdict(list)
    for edge in edges:
        incoming[edge.target].append(edge)
        outgoing[edge.source].append(edge)
    for index, out_edges in outgoing.items():
        plug_order = blocks[index].arg_plugs
        out_edges.sort(key=lambda e: plug_order.index(e.plug))

    roots = [index for index in range(len(blocks)) if not incoming[index]]
    if not roots:
        raise NoStartBlock()
    if len(roots) > 1:
        raise MultipleStartBlocks([blocks[index] for index in roots])
    root = roots[0]

    for index in range(len(blocks)):
        if len(incoming[index]) > 1:
            sources = ", ".join(f"'{blocks[e.source].proc_name}'" for e in incoming[index])
            raise CyclicOrSharedBlock(
                blocks[index], f"Reached by {len(incoming[index])} connectors (from {sources})"
            )

    visited: set[int] = set()

    def convert(index: int, expand: bool) -> TreeNode:
        if index in visited:
            raise AssertionError(f"Block {index} visited twice despite a single incoming edge")
        visited.add(index)
        block = blocks[index]
        children = tuple(convert(edge.target, edge.plug.expand) for edge in outgoing[index])
        return TreeNode(
            proc_name=block.proc_name,
            children=children,
            quote=block.block_plug.quote if block.block_plug is not None else QuoteStyle.NONE,
            expand=expand,
            row=block.row,
            col=block.col,
        )

    tree = convert(root, False)

    for index in range(len(blocks)):
        if index in visited:
            continue
        if _on_cycle(index, incoming):
            raise CyclicOrSharedBlock(blocks[index], "Its connectors form a cycle")
        raise UnreachableBlock(blocks[index])

    logger.info("build_tree: start block %r with %d blocks", tree.proc_name, len(visited))
    return tree


def _on_cycle(index: int, incoming: dict[int, list[Edge]]) -> bool:
    """Follow incoming edges back from a block; True if they lead back to it."""
    seen: set[int] = set()
    current = index
    while incoming[current]:
        current = incoming[current][0].source
        if current == index:
            return True
        if current in seen:
            return False
        seen.add(current)
    return False


def connect_blocks(grid: Grid, blocks: list[Block]) -> TreeNode:
    """Trace all connectors and build the call tree rooted at the start block."""
    return build_tree(blocks, trace_edges(grid, blocks))
