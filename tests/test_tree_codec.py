import io
import random

import pytest

from bitstream import BitReader, BitWriter, bits_to_bytes
from errors import HuffmanError, InputTooLarge, MalformedDescription, TruncatedStream
from huffman import PSEUDO_EOF, build_huffman_tree, freq_table, generate_huffman_codes
from tree_codec import (
    code_description,
    read_code_description,
    read_preamble,
    read_tree,
    tree_to_bits,
    write_code_description,
    write_preamble,
    write_tree,
)


def _bits(s: str) -> bytes:
    return bits_to_bytes(int(c) for c in s)


# Variant A

def test_two_symbol_description_bits():
    tree = build_huffman_tree({97: 2, 98: 2})
    assert tree_to_bits(tree) == "1" + "01100001" + "1" + "01100010" + "0" + "0"


def test_single_leaf_description_bits():
    tree = build_huffman_tree({65: 4})
    assert tree_to_bits(tree) == "1" + "01000001" + "0"


def test_write_tree_matches_tree_to_bits():
    tree = build_huffman_tree(freq_table(b"mississippi river"))
    w = BitWriter()
    n = write_tree(tree, w)
    assert n == len(tree_to_bits(tree))
    assert w.getvalue() == _bits(tree_to_bits(tree))


def test_preamble_layout():
    tree = build_huffman_tree({97: 2, 98: 2})
    w = BitWriter()
    assert write_preamble(tree, w) == 32 + 20
    assert w.getvalue() == b"\x00\x00\x00\x04" + _bits("10110000110110001000")


@pytest.mark.parametrize("data", [
    b"A",
    b"abab",
    b"the quick brown fox jumps over the lazy dog",
    bytes(range(256)),
])
def test_serialization_round_trip(data):
    tree = build_huffman_tree(freq_table(data))
    w = BitWriter()
    write_preamble(tree, w)
    count, rebuilt = read_preamble(BitReader(w.getvalue()))
    assert count == len(data)
    assert rebuilt == tree
    assert rebuilt.leaves() == tree.leaves()
    assert generate_huffman_codes(rebuilt) == generate_huffman_codes(tree)
    assert tree_to_bits(rebuilt) == tree_to_bits(tree)


def test_read_tree_stops_at_end_marker():
    tree = build_huffman_tree({10: 5, 20: 1, 30: 1})
    r = BitReader(_bits(tree_to_bits(tree) + "111"))
    assert read_tree(r) == tree
    assert r.bits_read == len(tree_to_bits(tree))


def test_zero_count_has_no_tree():
    assert read_preamble(BitReader(b"\x00\x00\x00\x00")) == (0, None)


def test_pseudo_eof_cannot_go_in_a_bit_preamble():
    tree = build_huffman_tree({97: 1}, pseudo_eof=True)
    with pytest.raises(ValueError):
        write_tree(tree, BitWriter())


def test_count_must_fit_32_bits():
    tree = build_huffman_tree({97: 1})
    with pytest.raises(ValueError):
        write_preamble(tree, BitWriter(), count=1 << 32)
    with pytest.raises(InputTooLarge):
        write_preamble(tree, BitWriter(), count=-1)


def test_oversized_count_is_a_codec_error():
    tree = build_huffman_tree({97: 1})
    w = BitWriter()
    with pytest.raises(HuffmanError):
        write_preamble(tree, w, count=1 << 32)
    assert w.bits_written == 0


def test_end_marker_before_any_leaf():
    with pytest.raises(MalformedDescription):
        read_tree(BitReader(b"\x00"))


def test_duplicate_leaf_symbol():
    with pytest.raises(MalformedDescription):
        read_tree(BitReader(_bits("101100001" + "101100001" + "00")))


def test_truncated_tree_description():
    with pytest.raises(TruncatedStream):
        read_tree(BitReader(_bits("1011")))
    with pytest.raises(TruncatedStream):
        read_preamble(BitReader(b"\x00\x00"))


# Variant B

def test_code_description_text():
    tree = build_huffman_tree({97: 2, 98: 2}, pseudo_eof=True)
    assert code_description(tree) == "98\n0\n256\n10\n97\n11\n"

    buf = io.StringIO()
    write_code_description(tree, buf)
    assert buf.getvalue() == code_description(tree)


def test_code_description_round_trip():
    rng = random.Random(3)
    data = bytes(rng.randrange(90) for _ in range(1500))
    tree = build_huffman_tree(freq_table(data), pseudo_eof=True)
    rebuilt = read_code_description(io.StringIO(code_description(tree)))
    assert rebuilt == tree
    assert generate_huffman_codes(rebuilt) == generate_huffman_codes(tree)


def test_code_description_order_does_not_matter():
    rebuilt = read_code_description("97\n11\n256\n10\n98\n0\n\n")
    assert rebuilt.shape() == (98, (PSEUDO_EOF, 97))


def test_single_pair_description():
    tree = read_code_description("256\n0\n")
    assert tree.leaves() == [PSEUDO_EOF]
    assert tree.is_leaf(tree.root)


@pytest.mark.parametrize("text", [
    "",
    "97\n",
    "x\n0\n98\n1\n",
    "300\n0\n98\n1\n",
    "97\n012\n98\n1\n",
    "97\n\n98\n1\n",
    "97\n0\n98\n0\n",
    "97\n0\n98\n01\n",
    "97\n00\n98\n0\n",
    "97\n00\n98\n1\n",
    "97\n0\n97\n1\n",
    "97\n1\n",
])
def test_malformed_code_descriptions(text):
    with pytest.raises(MalformedDescription):
        read_code_description(text)


def test_code_description_from_bytes():
    tree = read_code_description(b"98\n0\n256\n10\n97\n11\n")
    assert tree.shape() == (98, (PSEUDO_EOF, 97))


@pytest.mark.parametrize("raw", [b"\xff\xfe\n0\n", b"97\n0\n98\n1\xe9\n"])
def test_non_ascii_code_description(raw):
    with pytest.raises(MalformedDescription):
        read_code_description(raw)
    with pytest.raises(MalformedDescription):
        read_code_description(io.BytesIO(raw))
