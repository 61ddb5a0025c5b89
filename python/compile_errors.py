"""
Compile errors for the Trees diagram compiler.

Every defect the compiler can detect has one ErrorKind member and one
CompileError subclass. Each stage raises on the first defect it finds, so a
compile call reports at most one error.
"""

from __future__ import annotations

from enum import Enum

from diagram_types import ArgPlug, Block, CharWidthMode

__all__ = [
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


class ErrorKind(Enum):
    """Classification of compile errors."""

    INVALID_CHARACTER = "invalid_character"
    UNTERMINATED_BLOCK = "unterminated_block"
    MALFORMED_BLOCK = "malformed_block"
    EMPTY_BLOCK_NAME = "empty_block_name"
    DANGLING_EDGE = "dangling_edge"
    EDGE_THROUGH_BLOCK = "edge_through_block"
    NO_START_BLOCK = "no_start_block"
    MULTIPLE_START_BLOCKS = "multiple_start_blocks"
    CYCLIC_OR_SHARED_BLOCK = "cyclic_or_shared_block"
    UNREACHABLE_BLOCK = "unreachable_block"


def describe_block(block: Block) -> str:
    name = block.proc_name.replace("\n", " ")
    return f"'{name}' at row {block.row}, column {block.col}"


class CompileError(ValueError):
    """Base class for every classified compile error."""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        row: int | None = None,
        col: int | None = None,
        block: Block | None = None,
        plug: ArgPlug | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.row = row
        self.col = col
        self.block = block
        self.plug = plug


class InvalidCharacter(CompileError):
    kind = ErrorKind.INVALID_CHARACTER

    def __init__(self, row: int, col: int, glyph: str, mode: CharWidthMode) -> None:
        self.glyph = glyph
        self.mode = mode
        super().__init__(
            f"Invalid character {glyph!r} (U+{ord(glyph[0]):04X})\n"
            f"  Row {row}, column {col}\n"
            f"  Not allowed in width mode '{mode.value}'\n"
            f"  Control characters (tabs included) must be replaced with spaces",
            row=row,
            col=col,
        )


class UnterminatedBlock(CompileError):
    kind = ErrorKind.UNTERMINATED_BLOCK

    def __init__(self, row: int, col: int, stop_row: int, stop_col: int, edge: str) -> None:
        self.stop_row = stop_row
        self.stop_col = stop_col
        self.edge = edge
        super().__init__(
            f"Box outline opened at row {row}, column {col} never closes\n"
            f"  The {edge} edge breaks off at row {stop_row}, column {stop_col}",
            row=row,
            col=col,
        )


class MalformedBlock(CompileError):
    kind = ErrorKind.MALFORMED_BLOCK

    def __init__(self, row: int, col: int, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Malformed box outline opened at row {row}, column {col}\n"
            f"  {reason}",
            row=row,
            col=col,
        )


class EmptyBlockName(CompileError):
    kind = ErrorKind.EMPTY_BLOCK_NAME

    def __init__(self, block: Block) -> None:
        super().__init__(
            f"Block at row {block.row}, column {block.col} has no procedure name\n"
            f"  Anonymous blocks are disabled (allow_anonymous_blocks=False)",
            row=block.row,
            col=block.col,
            block=block,
        )


class DanglingEdge(CompileError):
    kind = ErrorKind.DANGLING_EDGE

    def __init__(self, block: Block, plug: ArgPlug, row: int, col: int) -> None:
        super().__init__(
            f"Argument plug at row {plug.row}, column {plug.col} is not connected to any block\n"
            f"  Block: {describe_block(block)}\n"
            f"  The connector stops at row {row}, column {col}",
            row=row,
            col=col,
            block=block,
            plug=plug,
        )


class EdgeThroughBlock(CompileError):
    kind = ErrorKind.EDGE_THROUGH_BLOCK

    def __init__(self, block: Block, plug: ArgPlug, crossed: Block, row: int, col: int) -> None:
        self.crossed = crossed
        super().__init__(
            f"Connector from the argument plug at row {plug.row}, column {plug.col} runs through another block\n"
            f"  Block: {describe_block(block)}\n"
            f"  Crossed block: {describe_block(crossed)}\n"
            f"  First crossing at row {row}, column {col}",
            row=row,
            col=col,
            block=block,
            plug=plug,
        )


class NoStartBlock(CompileError):
    kind = ErrorKind.NO_START_BLOCK

    def __init__(self) -> None:
        super().__init__(
            "The code must have exactly one block without an incoming connector\n"
            "  Found: 0"
        )


class MultipleStartBlocks(CompileError):
    kind = ErrorKind.MULTIPLE_START_BLOCKS

    def __init__(self, candidates: list[Block]) -> None:
        self.candidates = candidates
        message = (
            "The code must have exactly one block without an incoming connector\n"
            f"  Found: {len(candidates)}\n"
        )
        for candidate in candidates:
            message += f"    {describe_block(candidate)}\n"
        super().__init__(
            message.rstrip("\n"),
            row=candidates[0].row,
            col=candidates[0].col,
            block=candidates[0],
        )


class CyclicOrSharedBlock(CompileError):
    kind = ErrorKind.CYCLIC_OR_SHARED_BLOCK

    def __init__(self, block: Block, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Block {describe_block(block)} is not part of a single call tree\n"
            f"  {reason}",
            row=block.row,
            col=block.col,
            block=block,
        )


class UnreachableBlock(CompileError):
    kind = ErrorKind.UNREACHABLE_BLOCK

    def __init__(self, block: Block) -> None:
        super().__init__(
            f"Block {describe_block(block)} cannot be reached from the start block",
            row=block.row,
            col=block.col,
            block=block,
        )
