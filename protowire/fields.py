import dataclasses
import enum
from typing import ClassVar, Union

from .const import WIRE_FIXED_32, WIRE_FIXED_64, WIRE_LEN_DELIM, WIRE_VARINT


class WireType(enum.IntEnum):
    """The four wire types a tag's low 3 bits may carry."""

    VARINT = WIRE_VARINT
    FIXED_64 = WIRE_FIXED_64
    LEN_DELIM = WIRE_LEN_DELIM
    FIXED_32 = WIRE_FIXED_32


@dataclasses.dataclass(frozen=True)
class Varint:
    value: int
    wire_type: ClassVar[WireType] = WireType.VARINT


@dataclasses.dataclass(frozen=True)
class Fixed64:
    value: int
    wire_type: ClassVar[WireType] = WireType.FIXED_64


@dataclasses.dataclass(frozen=True)
class LengthDelimited:
    value: bytes
    wire_type: ClassVar[WireType] = WireType.LEN_DELIM


@dataclasses.dataclass(frozen=True)
class Fixed32:
    value: int
    wire_type: ClassVar[WireType] = WireType.FIXED_32


# Closed set: the wire format defines exactly these four payload shapes.
FieldValue = Union[Varint, Fixed64, LengthDelimited, Fixed32]


@dataclasses.dataclass(frozen=True)
class RawField:
    """A single decoded field: its number and its untyped payload."""

    number: int
    value: FieldValue

    @property
    def wire_type(self) -> WireType:
        return self.value.wire_type
