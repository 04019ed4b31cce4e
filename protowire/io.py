import logging
from typing import Generator, List, Tuple

from .const import MAX_VARINT_BYTES, UINT64_MASK
from .cursor import Buffer, ByteCursor
from .errors import (
    InvalidFieldNumber,
    InvalidWireType,
    TruncatedMessage,
    UnexpectedEndOfData,
    VarintTooLong,
)
from .fields import (
    FieldValue,
    Fixed32,
    Fixed64,
    LengthDelimited,
    RawField,
    Varint,
    WireType,
)

logger = logging.getLogger(__name__)

_VALID_WIRE_TYPES = frozenset(WireType)


def read_varint(cursor: ByteCursor) -> int:
    """
    Decode a single varint from the cursor and return it as an unsigned 64-bit
    value. Signed interpretations (two's complement, zig-zag) are up to the
    caller.
    """
    start = cursor.position
    result = 0
    for shift in range(0, 7 * MAX_VARINT_BYTES, 7):
        b = cursor.read_byte()
        result |= (b & 0x7F) << shift
        if not (b & 0x80):
            return result & UINT64_MASK
    raise VarintTooLong(start, MAX_VARINT_BYTES)


def decode_zigzag(value: int) -> int:
    """Undo zig-zag encoding as used by the sint32 and sint64 types."""
    return (value >> 1) ^ (-(value & 1))


def read_tag(cursor: ByteCursor) -> Tuple[int, WireType]:
    """Read a field key and split it into field number and wire type."""
    start = cursor.position
    key = read_varint(cursor)
    number = key >> 3
    wire_type = key & 0x7

    if wire_type not in _VALID_WIRE_TYPES:
        raise InvalidWireType(wire_type, start)
    if number < 1:
        raise InvalidFieldNumber(number, start)

    return number, WireType(wire_type)


def read_field(cursor: ByteCursor) -> RawField:
    """
    Read one complete field (key and payload). The cursor ends up exactly at
    the start of the next field.
    """
    number, wire_type = read_tag(cursor)

    value: FieldValue
    if wire_type == WireType.VARINT:
        value = Varint(read_varint(cursor))
    elif wire_type == WireType.FIXED_64:
        value = Fixed64(int.from_bytes(cursor.read_bytes(8), "little"))
    elif wire_type == WireType.LEN_DELIM:
        length = read_varint(cursor)
        value = LengthDelimited(cursor.read_bytes(length))
    else:
        value = Fixed32(int.from_bytes(cursor.read_bytes(4), "little"))

    return RawField(number=number, value=value)


def iter_fields(cursor: ByteCursor) -> Generator[RawField, None, None]:
    """
    Lazily yield fields until the cursor is exhausted. Running out of data in
    the middle of a field raises `TruncatedMessage`.
    """
    while cursor.has_more():
        start = cursor.position
        try:
            field = read_field(cursor)
        except UnexpectedEndOfData as e:
            raise TruncatedMessage(e.position, e.needed, e.available, start) from e
        yield field


def parse_message(cursor: ByteCursor) -> List[RawField]:
    """Read every field left in the cursor, in wire order."""
    return list(iter_fields(cursor))


def decode_raw(data: Buffer) -> List[RawField]:
    """
    Decode a complete message into its raw fields. An empty buffer is a valid
    message with every field at its default and decodes to an empty list.
    """
    return parse_message(ByteCursor(data))


def iter_packed(data: bytes, wire_type: WireType) -> Generator[FieldValue, None, None]:
    """
    Split the payload of a packed repeated field into its elements. Only the
    scalar wire types can be packed.
    """
    if wire_type == WireType.LEN_DELIM:
        raise InvalidWireType(wire_type)

    cursor = ByteCursor(data)
    count = 0
    while cursor.has_more():
        if wire_type == WireType.VARINT:
            yield Varint(read_varint(cursor))
        elif wire_type == WireType.FIXED_32:
            yield Fixed32(int.from_bytes(cursor.read_bytes(4), "little"))
        else:
            yield Fixed64(int.from_bytes(cursor.read_bytes(8), "little"))
        count += 1
    logger.debug("Unpacked %d %s element(s)", count, wire_type.name)
