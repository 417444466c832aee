"""
Single-bit channel over a byte stream

Bits are packed most-significant-bit first. The last byte written is padded
with zero bits
"""

from __future__ import annotations

import io
from typing import BinaryIO, Iterable, Optional, Union


class BitWriter:
    def __init__(self, stream: Optional[BinaryIO] = None):
        self.stream = stream if stream is not None else io.BytesIO()
        self.acc = 0        # bits not yet flushed, oldest in the high position
        self.acc_bits = 0
        self.bits_written = 0
        self.pad_bits = 0
        self.closed = False

    def write_bit(self, bit: int) -> None:
        if self.closed:
            raise ValueError("write to a closed BitWriter")
        self.acc = (self.acc << 1) | (1 if bit else 0)
        self.acc_bits += 1
        self.bits_written += 1
        if self.acc_bits == 8:
            self.stream.write(bytes((self.acc & 0xFF,)))
            self.acc = 0
            self.acc_bits = 0

    def write_bits(self, value: int, width: int) -> None:
        """
        Writes 'value' as a fixed-width unsigned field, MSB first
        """
        if value < 0 or value >= (1 << width):
            raise ValueError(f"{value} does not fit in {width} bits")
        for i in range(width - 1, -1, -1):
            self.write_bit((value >> i) & 1)

    def write_code(self, code: str) -> None: # code: string of '0'/'1' characters
        for ch in code:
            self.write_bit(ch == '1')

    def flush(self) -> int:
        """
        Pads the partial byte with zeros and writes it out
        Returns the number of pad bits added
        """
        if self.closed:
            return self.pad_bits
        if self.acc_bits != 0:
            self.pad_bits = 8 - self.acc_bits
            self.stream.write(bytes(((self.acc << self.pad_bits) & 0xFF,)))
            self.acc = 0
            self.acc_bits = 0
        self.closed = True
        return self.pad_bits

    def getvalue(self) -> bytes:
        # only meaningful for the default in-memory stream
        self.flush()
        return self.stream.getvalue()

    def __enter__(self) -> "BitWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()


class BitReader:
    def __init__(self, source: Union[bytes, bytearray, BinaryIO]):
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        self.stream = source
        self.current = 0
        self.bits_left = 0  # unread bits remaining in 'current'
        self.bits_read = 0

    def read_bit(self) -> int:
        if self.bits_left == 0:
            chunk = self.stream.read(1)
            if not chunk:
                raise EOFError(f"bit stream exhausted after {self.bits_read} bits")
            self.current = chunk[0]
            self.bits_left = 8
        self.bits_left -= 1
        self.bits_read += 1
        return (self.current >> self.bits_left) & 1

    def read_bits(self, width: int) -> int:
        value = 0
        for _ in range(width):
            value = (value << 1) | self.read_bit()
        return value

    def __iter__(self):
        # yields the remaining bits, stops quietly at the end of the stream
        while True:
            try:
                yield self.read_bit()
            except EOFError:
                return


def bits_to_bytes(bits: Iterable[int]) -> bytes:
    writer = BitWriter()
    for b in bits:
        writer.write_bit(b)
    return writer.getvalue()


def bytes_to_bits(data: bytes) -> str:
    return "".join(f"{b:08b}" for b in data)
