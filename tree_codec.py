"""
Serialized forms of a Huffman tree

Variant A is a bit-level preamble written in front of the compressed data:

    32-bit symbol count, MSB first
    post-order tree description: leaf -> 1 + 8-bit symbol, internal -> 0
    one extra 0 bit marking the end of the description

Variant B is a text file of line pairs, a decimal symbol followed by its
code as '0'/'1' characters. It goes together with the pseudo-EOF symbol, so
no count is stored.
"""

from __future__ import annotations

import io
from typing import IO, Iterator, List, Optional, TextIO, Tuple, Union

from bitstream import BitReader, BitWriter
from errors import InputTooLarge, MalformedDescription, TruncatedStream
from huffman import PSEUDO_EOF, SYMBOL_COUNT, HuffmanNode, HuffmanTree, generate_huffman_codes

COUNT_BITS = 32
SYMBOL_BITS = 8
MAX_COUNT = (1 << COUNT_BITS) - 1


# Variant A: embedded bit preamble

def _post_order(tree: HuffmanTree) -> Iterator[int]:
    stack: List[Tuple[int, bool]] = [(tree.root, False)]
    while stack:
        index, expanded = stack.pop()
        node = tree.node(index)
        if node.is_leaf or expanded:
            yield index
        else:
            stack.append((index, True))
            stack.append((node.right, False))
            stack.append((node.left, False))


def write_tree(tree: HuffmanTree, writer: BitWriter) -> int:
    """
    Writes the post-order description plus the end marker
    Returns the number of bits written
    """
    start = writer.bits_written
    for index in _post_order(tree):
        node = tree.node(index)
        if node.is_leaf:
            if not 0 <= node.symbol < SYMBOL_COUNT:
                raise ValueError(f"symbol {node.symbol} does not fit in an {SYMBOL_BITS}-bit leaf field")
            writer.write_bit(1)
            writer.write_bits(node.symbol, SYMBOL_BITS)
        else:
            writer.write_bit(0)
    writer.write_bit(0) # end-of-description marker
    return writer.bits_written - start


def write_preamble(tree: HuffmanTree, writer: BitWriter, count: Optional[int] = None) -> int:
    if count is None:
        count = tree.total_frequency
    if not 0 <= count <= MAX_COUNT:
        raise InputTooLarge(f"symbol count {count} does not fit in {COUNT_BITS} bits")
    writer.write_bits(count, COUNT_BITS)
    return COUNT_BITS + write_tree(tree, writer)


def read_tree(reader: BitReader) -> HuffmanTree:
    """
    Rebuilds a tree from its post-order description

    bit 1: the next 8 bits are a leaf symbol, push the leaf
    bit 0 with two or more entries: pop right then left, push their parent
    bit 0 with one entry: end marker, that entry is the root
    """
    nodes: List[HuffmanNode] = []
    stack: List[int] = []
    seen = set()
    try:
        while True:
            bit = reader.read_bit()
            if bit == 1:
                symbol = reader.read_bits(SYMBOL_BITS)
                if symbol in seen:
                    raise MalformedDescription(f"symbol {symbol} appears twice in the tree description")
                seen.add(symbol)
                nodes.append(HuffmanNode(symbol, 0))
                stack.append(len(nodes) - 1)
            elif len(stack) >= 2:
                right = stack.pop()
                left = stack.pop()
                nodes.append(HuffmanNode(None, 0, left, right))
                stack.append(len(nodes) - 1)
            else:
                break
    except EOFError as exc:
        raise TruncatedStream(f"bit stream ended inside the tree description ({exc})") from exc

    if not stack:
        raise MalformedDescription("end marker found before any leaf")
    return HuffmanTree(nodes, stack[0])


def read_preamble(reader: BitReader) -> Tuple[int, Optional[HuffmanTree]]:
    """
    Returns (count, tree); an empty input has count 0 and no tree
    """
    try:
        count = reader.read_bits(COUNT_BITS)
    except EOFError as exc:
        raise TruncatedStream(f"bit stream ended inside the symbol count ({exc})") from exc
    if count == 0:
        return 0, None
    return count, read_tree(reader)


def tree_to_bits(tree: HuffmanTree) -> str:
    out = []
    for index in _post_order(tree):
        node = tree.node(index)
        out.append('1' + format(node.symbol, '08b') if node.is_leaf else '0')
    out.append('0')
    return ''.join(out)


# Variant B: textual code description

def write_code_description(tree: HuffmanTree, out: TextIO) -> None:
    codes = generate_huffman_codes(tree)
    for symbol in tree.leaves():
        out.write(f"{symbol}\n")
        out.write(f"{codes[symbol]}\n")


def code_description(tree: HuffmanTree) -> str:
    buf = io.StringIO()
    write_code_description(tree, buf)
    return buf.getvalue()


def read_code_description(src: Union[str, bytes, IO]) -> HuffmanTree:
    """
    Rebuilds a tree from symbol/code line pairs by walking each code from the
    root and creating internal nodes on demand

    Raw bytes must be ASCII
    """
    text = src if isinstance(src, (str, bytes)) else src.read()
    if isinstance(text, bytes):
        try:
            text = text.decode("ascii")
        except UnicodeDecodeError as exc:
            raise MalformedDescription(f"code description is not ASCII text ({exc})") from None
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        raise MalformedDescription("code description is empty")
    if len(lines) % 2 != 0:
        raise MalformedDescription("code description must hold symbol/code line pairs")

    pairs = []
    for i in range(0, len(lines), 2):
        try:
            symbol = int(lines[i].strip())
        except ValueError:
            raise MalformedDescription(f"line {i + 1}: {lines[i]!r} is not a symbol value") from None
        if not 0 <= symbol <= PSEUDO_EOF:
            raise MalformedDescription(f"line {i + 1}: symbol {symbol} out of range")
        code = lines[i + 1].strip()
        if not code or set(code) - {'0', '1'}:
            raise MalformedDescription(f"line {i + 2}: {lines[i + 1]!r} is not a code")
        pairs.append((symbol, code))

    if len(pairs) == 1:
        symbol, code = pairs[0]
        if code != '0':
            raise MalformedDescription(f"single symbol {symbol} must have code '0', got {code!r}")
        return HuffmanTree([HuffmanNode(symbol, 0)], 0)

    # skeleton: symbols[i] is None for internal nodes
    symbols: List[Optional[int]] = [None]
    lefts: List[Optional[int]] = [None]
    rights: List[Optional[int]] = [None]
    placed = set()

    for symbol, code in pairs:
        if symbol in placed:
            raise MalformedDescription(f"symbol {symbol} appears twice")
        placed.add(symbol)
        current = 0
        for depth, ch in enumerate(code):
            branch = lefts if ch == '0' else rights
            child = branch[current]
            last = depth == len(code) - 1
            if child is not None and (last or symbols[child] is not None):
                raise MalformedDescription(f"code {code!r} for symbol {symbol} collides with another code")
            if last:
                symbols.append(symbol)
            elif child is None:
                symbols.append(None)
            else:
                current = child
                continue
            lefts.append(None)
            rights.append(None)
            branch[current] = len(symbols) - 1
            current = len(symbols) - 1

    nodes = []
    for i, symbol in enumerate(symbols):
        if symbol is None and (lefts[i] is None or rights[i] is None):
            raise MalformedDescription("code description leaves a branch without a symbol")
        nodes.append(HuffmanNode(symbol, 0, lefts[i], rights[i]))
    return HuffmanTree(nodes, 0)
