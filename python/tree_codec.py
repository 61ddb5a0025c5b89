"""
Binary encoding of compiled call trees.

Layout (all integers big-endian):
- Version [1 byte]
- Header length [4 bytes] - bytes from the start up to the first node,
  attribute records (currently none) included
- Nodes, depth-first with earlier arguments first:
  * Block type [1 byte]: 0x01 plain, 0x02 quote, 0x03 closure
  * Procedure name length [4 bytes], then the UTF-8 name
  * Child count [1 byte]
  * One byte per child: 0x00 normal argument, 0x01 expanding argument
"""

from __future__ import annotations

import struct

from diagram_types import QuoteStyle, TreeNode

__all__ = ["BYTECODE_VERSION", "TreeCodecError", "encode_tree", "decode_tree"]

BYTECODE_VERSION = 0x01
HEADER_LENGTH = 5
MAX_CHILDREN = 0xFF

BLOCK_TYPES: dict[QuoteStyle, int] = {
    QuoteStyle.NONE: 0x01,
    QuoteStyle.QUOTE: 0x02,
    QuoteStyle.CLOSURE: 0x03,
}
QUOTE_STYLES = {code: style for style, code in BLOCK_TYPES.items()}

ARG_NORMAL = 0x00
ARG_EXPAND = 0x01


class TreeCodecError(ValueError):
    """Raised for trees that cannot be encoded or bytes that cannot be decoded."""


def encode_tree(node: TreeNode) -> bytes:
    """Encode a call tree. Source positions and the root's expand flag are not kept."""
    out = bytearray()
    out.append(BYTECODE_VERSION)
    out += struct.pack(">I", HEADER_LENGTH)

    def write(n: TreeNode) -> None:
        nonlocal out
        if n.arity > MAX_CHILDREN:
            raise TreeCodecError(
                f"Block '{n.proc_name}' has {n.arity} arguments; at most {MAX_CHILDREN} can be encoded"
            )
        name = n.proc_name.encode("utf-8")
        out.append(BLOCK_TYPES[n.quote])
        out += struct.pack(">I", len(name))
        out += name
        out.append(n.arity)
        out.extend(ARG_EXPAND if child.expand else ARG_NORMAL for child in n.children)
        for child in n.children:
            write(child)

    write(node)
    return bytes(out)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, size: int, what: str) -> bytes:
        if self.pos + size > len(self.data):
            raise TreeCodecError(
                f"Unexpected end of data reading {what}\n"
                f"  Offset {self.pos}, needed {size} bytes, {len(self.data) - self.pos} left"
            )
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def byte(self, what: str) -> int:
        return self.take(1, what)[0]

    def u32(self, what: str) -> int:
        return struct.unpack(">I", self.take(4, what))[0]


def decode_tree(data: bytes) -> TreeNode:
    """
    Decode bytes produced by encode_tree.

    Raises:
        TreeCodecError: Unknown version, unknown type codes, truncated or
            trailing data, or a name that is not UTF-8
    """
    reader = _Reader(data)

    version = reader.byte("version")
    if version != BYTECODE_VERSION:
        raise TreeCodecError(f"Unsupported bytecode version {version:#04x}")
    header_length = reader.u32("header length")
    if header_length < HEADER_LENGTH:
        raise TreeCodecError(f"Header length {header_length} is shorter than {HEADER_LENGTH}")
    reader.take(header_length - HEADER_LENGTH, "header attributes")

    def read(expand: bool) -> TreeNode:
        code = reader.byte("block type")
        if code not in QUOTE_STYLES:
            raise TreeCodecError(f"Unknown block type {code:#04x} at offset {reader.pos - 1}")
        name_length = reader.u32("name length")
        try:
            name = reader.take(name_length, "name").decode("utf-8")
        except UnicodeDecodeError as e:
            raise TreeCodecError(f"Procedure name is not valid UTF-8: {e}") from e

        arity = reader.byte("child count")
        flags: list[bool] = []
        for _ in range(arity):
            flag = reader.byte("argument type")
            if flag not in (ARG_NORMAL, ARG_EXPAND):
                raise TreeCodecError(f"Unknown argument type {flag:#04x} at offset {reader.pos - 1}")
            flags.append(flag == ARG_EXPAND)

        children = tuple(read(child_expand) for child_expand in flags)
        return TreeNode(name, children, QUOTE_STYLES[code], expand)

    node = read(False)
    if reader.pos != len(data):
        raise TreeCodecError(f"{len(data) - reader.pos} trailing bytes after the tree")
    return node
