"""
Encoding and decoding of symbol streams, plus the two compression pipelines

compress / decompress            -> count + bit preamble in front of the data
compress_with_eof / decompress_with_eof -> text code description, pseudo-EOF ends the data
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, Union

from bitstream import BitReader, BitWriter
from errors import MalformedDescription, TruncatedStream, UnknownSymbol
from huffman import (
    PSEUDO_EOF,
    SYMBOL_COUNT,
    HuffmanTree,
    average_code_length,
    build_huffman_tree,
    freq_table,
    generate_huffman_codes,
)
from tree_codec import COUNT_BITS, code_description, read_code_description, read_preamble, write_preamble


# Stopping rules

@dataclass(frozen=True)
class ExplicitCount:
    count: int # number of symbols to decode


@dataclass(frozen=True)
class SentinelSymbol:
    symbol: int = PSEUDO_EOF # decoded but never emitted


StoppingRule = Union[ExplicitCount, SentinelSymbol]


def encode_symbols(symbols: Iterable[int], codes: Dict[int, str], writer: BitWriter) -> int:
    """
    Writes the code of every symbol, returns the number of bits written
    """
    start = writer.bits_written
    for s in symbols:
        code = codes.get(s)
        if code is None:
            raise UnknownSymbol(s)
        writer.write_code(code)
    return writer.bits_written - start


def _decode_one(reader: BitReader, tree: HuffmanTree) -> int:
    index = tree.root
    node = tree.node(index)
    if node.is_leaf:
        # a lone leaf still spends one '0' bit per symbol
        if reader.read_bit() != 0:
            raise MalformedDescription("bit 1 has no branch in a single-symbol tree")
        return node.symbol
    while not node.is_leaf:
        node = tree.node(node.right if reader.read_bit() == 1 else node.left)
    return node.symbol


def decode_symbols(reader: BitReader, tree: HuffmanTree, rule: StoppingRule) -> bytes:
    decoded = bytearray()
    try:
        if isinstance(rule, ExplicitCount):
            for _ in range(rule.count):
                decoded.append(_check_byte(_decode_one(reader, tree)))
        elif isinstance(rule, SentinelSymbol):
            symbol = _decode_one(reader, tree)
            while symbol != rule.symbol:
                decoded.append(_check_byte(symbol))
                symbol = _decode_one(reader, tree)
        else:
            raise TypeError(f"unsupported stopping rule {rule!r}")
    except EOFError as exc:
        raise TruncatedStream(f"bit stream ended after {len(decoded)} decoded symbols ({exc})") from exc
    return bytes(decoded)


def _check_byte(symbol: int) -> int:
    if not 0 <= symbol < SYMBOL_COUNT:
        raise MalformedDescription(f"decoded symbol {symbol} is not a byte")
    return symbol


# Encoding pipelines

@dataclass
class EncodedStream:
    """
    Everything one compression pass produced

    'packed' is the bit stream as bytes: preamble + codes for variant A,
    codes + pseudo-EOF for variant B (whose tree travels in 'description')
    """
    tree: Optional[HuffmanTree]  # None for an empty variant A input
    codes: Dict[int, str]
    packed: bytes
    header_bits: int
    payload_bits: int
    pad_bits: int
    description: str = ""


def encode_with_preamble(data: bytes) -> EncodedStream:
    writer = BitWriter()
    if not data:
        writer.write_bits(0, COUNT_BITS)
        packed = writer.getvalue()
        return EncodedStream(None, {}, packed, COUNT_BITS, 0, writer.pad_bits)
    tree = build_huffman_tree(freq_table(data))
    codes = generate_huffman_codes(tree)
    header_bits = write_preamble(tree, writer, count=len(data))
    payload_bits = encode_symbols(data, codes, writer)
    packed = writer.getvalue()
    return EncodedStream(tree, codes, packed, header_bits, payload_bits, writer.pad_bits)


def encode_with_eof(data: bytes) -> EncodedStream:
    tree = build_huffman_tree(freq_table(data), pseudo_eof=True)
    codes = generate_huffman_codes(tree)
    writer = BitWriter()
    payload_bits = encode_symbols(data, codes, writer)
    payload_bits += encode_symbols((PSEUDO_EOF,), codes, writer)
    packed = writer.getvalue()
    description = code_description(tree)
    return EncodedStream(tree, codes, packed, len(description) * 8, payload_bits, writer.pad_bits, description)


# Variant A: count + post-order preamble

def compress(data: bytes) -> bytes:
    return encode_with_preamble(data).packed


def decompress(blob: bytes) -> bytes:
    reader = BitReader(blob)
    count, tree = read_preamble(reader)
    if count == 0:
        return b""
    return decode_symbols(reader, tree, ExplicitCount(count))


# Variant B: text code description + pseudo-EOF

def compress_with_eof(data: bytes) -> Tuple[str, bytes]:
    encoded = encode_with_eof(data)
    return encoded.description, encoded.packed


def decompress_with_eof(description: Union[str, bytes], payload: bytes) -> bytes:
    tree = read_code_description(description)
    return decode_symbols(BitReader(payload), tree, SentinelSymbol(PSEUDO_EOF))


# Statistics

ENCODERS = {
    "preamble": encode_with_preamble,
    "pseudo_eof": encode_with_eof,
}


@dataclass
class CompressionStats:
    variant: str  # "preamble" or "pseudo_eof"
    original_bytes: int
    compressed_bytes: int  # preamble + payload, or description + payload
    header_bits: int
    payload_bits: int
    pad_bits: int
    unique_symbols: int
    avg_code_length: float

    @property
    def compression_ratio(self) -> float:
        return self.compressed_bytes / max(1, self.original_bytes)


def stats_for(data: bytes, variant: str, encoded: EncodedStream) -> CompressionStats:
    ft = freq_table(data)
    return CompressionStats(variant, len(data), len(encoded.description) + len(encoded.packed),
                            encoded.header_bits, encoded.payload_bits, encoded.pad_bits,
                            len(ft), average_code_length(encoded.codes, ft))


def compress_stats(data: bytes, variant: str = "preamble") -> CompressionStats:
    """
    Compresses 'data' with the chosen variant and reports sizes
    """
    if variant not in ENCODERS:
        raise ValueError("variant must be 'preamble' or 'pseudo_eof'")
    return stats_for(data, variant, ENCODERS[variant](data))
