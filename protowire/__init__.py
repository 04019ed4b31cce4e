from typing import Type

from ._types import T
from .const import *
from .cursor import Buffer, ByteCursor
from .errors import (
    DecodeError,
    FieldTypeMismatch,
    InvalidFieldNumber,
    InvalidStringEncoding,
    InvalidWireType,
    RecursionLimitExceeded,
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
from .io import (
    decode_raw,
    decode_zigzag,
    iter_fields,
    iter_packed,
    parse_message,
    read_field,
    read_tag,
    read_varint,
)
from .message import (
    Casing,
    FieldMetadata,
    Message,
    MessageMapping,
    bool_field,
    bytes_field,
    dataclass_field,
    double_field,
    enum_field,
    fixed32_field,
    fixed64_field,
    float_field,
    int32_field,
    int64_field,
    message_field,
    sfixed32_field,
    sfixed64_field,
    sint32_field,
    sint64_field,
    string_field,
    uint32_field,
    uint64_field,
)

__version__ = "0.1.0"


def decode_typed(
    data: Buffer, cls: Type[T], *, recursion_limit: int = DEFAULT_RECURSION_LIMIT
) -> T:
    """
    Decode a complete message straight into an instance of the `Message`
    subclass `cls`. Raises a `DecodeError` subclass if the data is malformed
    or does not fit the declared fields.
    """
    return cls().parse(data, recursion_limit=recursion_limit)
