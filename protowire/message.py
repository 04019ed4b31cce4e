import dataclasses
import enum
import logging
import math
import struct
from abc import ABC
from base64 import b64encode
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Type,
    Union,
)

import stringcase

from ._types import T
from .const import (
    DEFAULT_RECURSION_LIMIT,
    INT_64_TYPES,
    PACKED_TYPES,
    TYPE_BOOL,
    TYPE_BYTES,
    TYPE_DOUBLE,
    TYPE_ENUM,
    TYPE_FIXED32,
    TYPE_FIXED64,
    TYPE_FLOAT,
    TYPE_INT32,
    TYPE_INT64,
    TYPE_MESSAGE,
    TYPE_SFIXED32,
    TYPE_SFIXED64,
    TYPE_SINT32,
    TYPE_SINT64,
    TYPE_STRING,
    TYPE_UINT32,
    TYPE_UINT64,
    WIRE_FIXED_32_TYPES,
    WIRE_FIXED_64_TYPES,
    WIRE_LEN_DELIM_TYPES,
    WIRE_VARINT_TYPES,
)
from .cursor import Buffer, ByteCursor
from .errors import (
    FieldTypeMismatch,
    InvalidStringEncoding,
    RecursionLimitExceeded,
)
from .fields import FieldValue, LengthDelimited, RawField, Varint, WireType
from .io import decode_zigzag, iter_packed, parse_message

logger = logging.getLogger(__name__)

_KNOWN_TYPES = frozenset(
    WIRE_VARINT_TYPES + WIRE_FIXED_32_TYPES + WIRE_FIXED_64_TYPES + WIRE_LEN_DELIM_TYPES
)


class Casing(enum.Enum):
    """Casing constants for dict conversion."""

    CAMEL = stringcase.camelcase
    SNAKE = stringcase.snakecase


class _PLACEHOLDER:
    pass


PLACEHOLDER: Any = _PLACEHOLDER()

# Either a class, or a zero-argument callable returning one for forward and
# self references, e.g. `message_field(1, lambda: TreeNode)`.
ClassRef = Union[type, Callable[[], type]]


@dataclasses.dataclass(frozen=True)
class FieldMetadata:
    """Stores the mapping entry for one declared field."""

    # Protobuf field number
    number: int
    # Protobuf type name
    proto_type: str
    # Collect every occurrence into a list
    repeated: bool = False
    # Message class for message fields, optional `IntEnum` for enum fields
    cls: Optional[ClassRef] = None

    @staticmethod
    def get(field: dataclasses.Field) -> "FieldMetadata":
        """Returns the field metadata for a dataclass field."""
        return field.metadata["protowire"]

    def resolve_cls(self) -> Optional[type]:
        if self.cls is None or isinstance(self.cls, type):
            return self.cls
        return self.cls()


def dataclass_field(
    number: int,
    proto_type: str,
    *,
    repeated: bool = False,
    cls: Optional[ClassRef] = None,
) -> dataclasses.Field:
    """Creates a dataclass field with attached protobuf metadata."""
    return dataclasses.field(
        default=PLACEHOLDER,
        metadata={"protowire": FieldMetadata(number, proto_type, repeated, cls)},
    )


# Note: the fields below return `Any` so that declarations like
# `value: int = int32_field(1)` type check. The placeholder is swapped out for
# the real default when the instance is created.


def enum_field(
    number: int, cls: Optional[ClassRef] = None, repeated: bool = False
) -> Any:
    return dataclass_field(number, TYPE_ENUM, repeated=repeated, cls=cls)


def bool_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_BOOL, repeated=repeated)


def int32_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_INT32, repeated=repeated)


def int64_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_INT64, repeated=repeated)


def uint32_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_UINT32, repeated=repeated)


def uint64_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_UINT64, repeated=repeated)


def sint32_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_SINT32, repeated=repeated)


def sint64_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_SINT64, repeated=repeated)


def float_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_FLOAT, repeated=repeated)


def double_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_DOUBLE, repeated=repeated)


def fixed32_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_FIXED32, repeated=repeated)


def fixed64_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_FIXED64, repeated=repeated)


def sfixed32_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_SFIXED32, repeated=repeated)


def sfixed64_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_SFIXED64, repeated=repeated)


def string_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_STRING, repeated=repeated)


def bytes_field(number: int, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_BYTES, repeated=repeated)


def message_field(number: int, cls: ClassRef, repeated: bool = False) -> Any:
    return dataclass_field(number, TYPE_MESSAGE, repeated=repeated, cls=cls)


def _pack_fmt(proto_type: str) -> str:
    """Returns a little-endian format string for reading binary."""
    return {
        TYPE_DOUBLE: "<d",
        TYPE_FLOAT: "<f",
        TYPE_FIXED32: "<I",
        TYPE_FIXED64: "<Q",
        TYPE_SFIXED32: "<i",
        TYPE_SFIXED64: "<q",
    }[proto_type]


def _wire_type_for(proto_type: str) -> WireType:
    if proto_type in WIRE_VARINT_TYPES:
        return WireType.VARINT
    elif proto_type in WIRE_FIXED_32_TYPES:
        return WireType.FIXED_32
    elif proto_type in WIRE_FIXED_64_TYPES:
        return WireType.FIXED_64
    elif proto_type in WIRE_LEN_DELIM_TYPES:
        return WireType.LEN_DELIM
    raise NotImplementedError(proto_type)


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    signbit = 1 << (bits - 1)
    return (value ^ signbit) - signbit


def _dump_float(value: float) -> Union[float, str]:
    """Floats that JSON cannot represent are written as strings."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


class MessageMapping:
    """
    The field-number-to-attribute table for one message class. It is built
    once from the declared dataclass fields and cached on the class.
    """

    __slots__ = ("cls", "field_name_by_number", "meta_by_field_name", "default_gen")

    cls: Type["Message"]
    field_name_by_number: Dict[int, str]
    meta_by_field_name: Dict[str, FieldMetadata]
    default_gen: Dict[str, Callable[[], Any]]

    def __init__(self, cls: Type["Message"]):
        by_field_name = {}
        by_field_number: Dict[int, str] = {}

        for field in dataclasses.fields(cls):
            meta = FieldMetadata.get(field)
            if meta.number < 1:
                raise ValueError(
                    f"{cls.__name__}.{field.name} has invalid field number "
                    f"{meta.number}"
                )
            if meta.proto_type not in _KNOWN_TYPES:
                raise ValueError(
                    f"{cls.__name__}.{field.name} has unknown kind {meta.proto_type!r}"
                )
            if meta.proto_type == TYPE_MESSAGE and meta.cls is None:
                raise ValueError(
                    f"{cls.__name__}.{field.name} is a message field without a class"
                )
            if meta.number in by_field_number:
                raise ValueError(
                    f"{cls.__name__} declares field number {meta.number} for both "
                    f"{by_field_number[meta.number]} and {field.name}"
                )
            by_field_name[field.name] = meta
            by_field_number[meta.number] = field.name

        self.cls = cls
        self.field_name_by_number = by_field_number
        self.meta_by_field_name = by_field_name
        self.default_gen = {
            name: self._get_default_gen(meta) for name, meta in by_field_name.items()
        }

    @staticmethod
    def _get_default_gen(meta: FieldMetadata) -> Callable[[], Any]:
        if meta.repeated:
            return list
        elif meta.proto_type == TYPE_MESSAGE:
            # Absent sub-messages stay unset.
            return type(None)
        elif meta.proto_type == TYPE_BOOL:
            return bool
        elif meta.proto_type in (TYPE_FLOAT, TYPE_DOUBLE):
            return float
        elif meta.proto_type == TYPE_STRING:
            return str
        elif meta.proto_type == TYPE_BYTES:
            return bytes
        elif meta.proto_type == TYPE_ENUM and meta.cls is not None:
            return lambda: _enum_value(meta, 0)
        # Every other integer kind defaults to zero.
        return int

    def map_fields(
        self,
        message: "Message",
        fields: Iterable[RawField],
        recursion_limit: int,
        depth: int = 0,
    ) -> "Message":
        """
        Set the attributes of `message` from the raw fields whose numbers are
        declared in this table. Occurrences of the same field are handled all
        at once: repeated fields collect them, singular scalars keep the last
        one and singular messages merge them.
        """
        if depth > recursion_limit:
            raise RecursionLimitExceeded(recursion_limit)

        grouped: Dict[str, List[FieldValue]] = {}
        unknown: List[RawField] = []
        for field in fields:
            field_name = self.field_name_by_number.get(field.number)
            if not field_name:
                unknown.append(field)
                continue
            grouped.setdefault(field_name, []).append(field.value)

        if unknown:
            logger.debug(
                "Skipped %d unknown field(s) while decoding %s: %s",
                len(unknown),
                self.cls.__name__,
                sorted({f.number for f in unknown}),
            )

        for field_name, values in grouped.items():
            meta = self.meta_by_field_name[field_name]
            current = getattr(message, field_name)
            value = self._convert(meta, values, recursion_limit, depth, current)
            if meta.repeated:
                current.extend(value)
            else:
                setattr(message, field_name, value)

        message._unknown_fields.extend(unknown)
        return message

    def _convert(
        self,
        meta: FieldMetadata,
        values: List[FieldValue],
        recursion_limit: int,
        depth: int,
        current: Any = None,
    ) -> Any:
        if meta.proto_type == TYPE_MESSAGE:
            if meta.repeated:
                return [
                    self._parse_nested(meta, [v], recursion_limit, depth)
                    for v in values
                ]
            if len(values) > 1:
                logger.debug(
                    "Merging %d occurrences of message field %d on %s",
                    len(values),
                    meta.number,
                    self.cls.__name__,
                )
            return self._parse_nested(meta, values, recursion_limit, depth, current)

        if meta.repeated:
            output = []
            for value in values:
                if (
                    isinstance(value, LengthDelimited)
                    and meta.proto_type in PACKED_TYPES
                ):
                    packed = iter_packed(value.value, _wire_type_for(meta.proto_type))
                    output.extend(_postprocess_single(meta, item) for item in packed)
                else:
                    output.append(_postprocess_single(meta, value))
            return output

        # Last one wins, but every occurrence must still be well typed.
        for value in values[:-1]:
            _check_wire_type(meta, value)
        return _postprocess_single(meta, values[-1])

    @staticmethod
    def _parse_nested(
        meta: FieldMetadata,
        values: List[FieldValue],
        recursion_limit: int,
        depth: int,
        target: Optional["Message"] = None,
    ) -> "Message":
        # Concatenating the encodings of a message is the same as merging them.
        fields: List[RawField] = []
        for value in values:
            _check_wire_type(meta, value)
            fields.extend(parse_message(ByteCursor(value.value)))

        cls = meta.resolve_cls()
        if target is None:
            target = cls()
        return cls._mapping().map_fields(target, fields, recursion_limit, depth + 1)


def _enum_value(meta: FieldMetadata, value: int) -> Any:
    """Values the enum does not know about are kept as plain ints."""
    enum_cls = meta.resolve_cls()
    if enum_cls is not None and value in enum_cls._value2member_map_:
        return enum_cls(value)
    return value


def _check_wire_type(meta: FieldMetadata, value: FieldValue) -> None:
    if value.wire_type != _wire_type_for(meta.proto_type):
        raise FieldTypeMismatch(meta.number, meta.proto_type, value.wire_type.name)


def _postprocess_single(meta: FieldMetadata, value: FieldValue) -> Any:
    """Converts a single raw payload to the declared scalar kind."""
    _check_wire_type(meta, value)
    proto_type = meta.proto_type
    raw = value.value

    if isinstance(value, Varint):
        if proto_type in (TYPE_INT32, TYPE_ENUM):
            raw = _to_signed(raw, 32)
            if proto_type == TYPE_ENUM:
                raw = _enum_value(meta, raw)
        elif proto_type == TYPE_INT64:
            raw = _to_signed(raw, 64)
        elif proto_type == TYPE_UINT32:
            raw &= 0xFFFFFFFF
        elif proto_type == TYPE_SINT32:
            raw = decode_zigzag(raw & 0xFFFFFFFF)
        elif proto_type == TYPE_SINT64:
            raw = decode_zigzag(raw)
        elif proto_type == TYPE_BOOL:
            # Booleans use a varint encoding, so convert it to true/false.
            raw = raw != 0
        return raw
    elif isinstance(value, LengthDelimited):
        if proto_type == TYPE_STRING:
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidStringEncoding(meta.number, str(e)) from e
        return raw

    size = 4 if value.wire_type == WireType.FIXED_32 else 8
    return struct.unpack(_pack_fmt(proto_type), raw.to_bytes(size, "little"))[0]


class Message(ABC):
    """
    A typed message base class. Subclasses are dataclasses whose fields are
    declared with the `*_field` helpers; those declarations are the mapping
    table raw fields get decoded through.

    Field numbers on the wire that the class does not declare are skipped and
    kept, undecoded, in `_unknown_fields`.
    """

    _unknown_fields: List[RawField]

    def __post_init__(self) -> None:
        for field_name in self._mapping().meta_by_field_name:
            if getattr(self, field_name) is PLACEHOLDER:
                setattr(self, field_name, self._get_field_default(field_name))

        self.__dict__["_unknown_fields"] = []

    @classmethod
    def _mapping(cls) -> MessageMapping:
        """
        Lazy initialize the mapping table for each message class.
        It may be initialized multiple times in a multi-threaded environment,
        but that won't affect the correctness.
        """
        mapping = cls.__dict__.get("_protowire_mapping")
        if mapping is None:
            mapping = MessageMapping(cls)
            cls._protowire_mapping = mapping
        return mapping

    def _get_field_default(self, field_name: str) -> Any:
        return self._mapping().default_gen[field_name]()

    def parse(
        self: T, data: Buffer, *, recursion_limit: int = DEFAULT_RECURSION_LIMIT
    ) -> T:
        """
        Parse the binary encoded Protobuf into this message instance. This
        returns the instance itself and is therefore assignable and chainable.

        Parsing into a message that already holds values merges the two:
        scalars present on the wire overwrite the current values, repeated
        fields are extended and sub-messages that are already set are merged
        into.
        """
        return self.merge_fields(
            parse_message(ByteCursor(data)), recursion_limit=recursion_limit
        )

    def merge_fields(
        self: T,
        fields: Iterable[RawField],
        *,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> T:
        """Map already decoded raw fields onto this message instance."""
        self._mapping().map_fields(self, fields, recursion_limit)
        return self

    @classmethod
    def from_fields(
        cls: Type[T],
        fields: Iterable[RawField],
        *,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> T:
        return cls().merge_fields(fields, recursion_limit=recursion_limit)

    # For compatibility with other libraries.
    @classmethod
    def FromString(
        cls: Type[T], data: Buffer, *, recursion_limit: int = DEFAULT_RECURSION_LIMIT
    ) -> T:
        return cls().parse(data, recursion_limit=recursion_limit)

    def to_dict(
        self, casing: Casing = Casing.CAMEL, include_default_values: bool = False
    ) -> Dict[str, Any]:
        """
        Returns a dict representation of this message instance which can be
        used to serialize to e.g. JSON. Defaults to camel casing for
        compatibility but can be set to other modes.

        `include_default_values` can be set to `True` to include default
        values of fields. E.g. an `int32` type field with `0` value will
        not be in returned dict if `include_default_values` is set to
        `False`.
        """
        output: Dict[str, Any] = {}
        for field_name, meta in self._mapping().meta_by_field_name.items():
            v = getattr(self, field_name)
            cased_name = casing(field_name).rstrip("_")  # type: ignore
            if meta.proto_type == TYPE_MESSAGE:
                if meta.repeated:
                    v = [i.to_dict(casing, include_default_values) for i in v]
                    if v or include_default_values:
                        output[cased_name] = v
                elif v is not None:
                    output[cased_name] = v.to_dict(casing, include_default_values)
                elif include_default_values:
                    output[cased_name] = None
            elif v != self._get_field_default(field_name) or include_default_values:
                items = v if meta.repeated else [v]
                if meta.proto_type in INT_64_TYPES:
                    items = [str(n) for n in items]
                elif meta.proto_type == TYPE_BYTES:
                    items = [b64encode(b).decode("utf8") for b in items]
                elif meta.proto_type == TYPE_ENUM:
                    items = [e.name if isinstance(e, enum.Enum) else e for e in items]
                elif meta.proto_type in (TYPE_FLOAT, TYPE_DOUBLE):
                    items = [_dump_float(n) for n in items]
                output[cased_name] = list(items) if meta.repeated else items[0]
        return output
