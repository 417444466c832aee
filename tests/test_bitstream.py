import io

import pytest

from bitstream import BitReader, BitWriter, bits_to_bytes, bytes_to_bits


def test_bits_packed_msb_first_with_zero_padding():
    w = BitWriter()
    for b in (1, 0, 1):
        w.write_bit(b)
    assert w.getvalue() == b"\xa0"
    assert w.pad_bits == 5
    assert w.bits_written == 3


def test_full_byte_has_no_padding():
    w = BitWriter()
    w.write_bits(0x5A, 8)
    assert w.flush() == 0
    assert w.getvalue() == b"\x5a"


def test_write_bits_fixed_width():
    w = BitWriter()
    w.write_bits(4, 32)
    assert w.getvalue() == b"\x00\x00\x00\x04"


def test_write_bits_rejects_values_that_do_not_fit():
    w = BitWriter()
    with pytest.raises(ValueError):
        w.write_bits(256, 8)
    with pytest.raises(ValueError):
        w.write_bits(-1, 8)


def test_write_code_and_external_stream():
    buf = io.BytesIO()
    with BitWriter(buf) as w:
        w.write_code("0101")
    assert buf.getvalue() == b"\x50"


def test_write_after_flush_fails():
    w = BitWriter()
    w.flush()
    with pytest.raises(ValueError):
        w.write_bit(1)


def test_reader_reads_bits_and_fields():
    r = BitReader(b"\x00\x00\x01\x00\xb0")
    assert r.read_bits(32) == 256
    assert [r.read_bit() for _ in range(4)] == [1, 0, 1, 1]
    assert r.bits_read == 36


def test_reader_raises_eof_when_exhausted():
    r = BitReader(b"\xff")
    assert r.read_bits(8) == 0xFF
    with pytest.raises(EOFError):
        r.read_bit()


def test_reader_iterates_remaining_bits():
    r = BitReader(io.BytesIO(b"\x81"))
    assert list(r) == [1, 0, 0, 0, 0, 0, 0, 1]


def test_helpers():
    assert bits_to_bytes([1, 1, 1, 1, 1, 1, 1, 1, 1]) == b"\xff\x80"
    assert bytes_to_bits(b"\x0f\x80") == "0000111110000000"
