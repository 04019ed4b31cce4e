"""
A tiny reference encoder used to build test fixtures. It is written
independently of the decoder so that tests never check the decoder against
itself.
"""
import struct
from typing import List


def encode_varint(value: int) -> bytes:
    """Encodes a single varint value, sign-extending negatives to 64 bits."""
    b: List[int] = []

    if value < 0:
        value += 1 << 64

    bits = value & 0x7F
    value >>= 7
    while value:
        b.append(0x80 | bits)
        bits = value & 0x7F
        value >>= 7
    return bytes(b + [bits])


def encode_zigzag(value: int) -> int:
    return value << 1 if value >= 0 else (value << 1) ^ (~0)


def key(number: int, wire_type: int) -> bytes:
    return encode_varint((number << 3) | wire_type)


def varint_field(number: int, value: int) -> bytes:
    return key(number, 0) + encode_varint(value)


def fixed64_field(number: int, value: bytes) -> bytes:
    assert len(value) == 8
    return key(number, 1) + value


def len_field(number: int, value: bytes) -> bytes:
    return key(number, 2) + encode_varint(len(value)) + value


def fixed32_field(number: int, value: bytes) -> bytes:
    assert len(value) == 4
    return key(number, 5) + value


def packed_varints(number: int, values: List[int]) -> bytes:
    return len_field(number, b"".join(encode_varint(v) for v in values))


def packed_fixed(number: int, fmt: str, values: List) -> bytes:
    return len_field(number, b"".join(struct.pack(fmt, v) for v in values))
