from typing import Optional


class DecodeError(ValueError):
    """Base class for everything that can go wrong while decoding a buffer."""


class UnexpectedEndOfData(DecodeError):
    """The buffer ran out before a complete unit could be read."""

    def __init__(
        self,
        position: int,
        needed: int,
        available: int,
        message: Optional[str] = None,
    ):
        self.position = position
        self.needed = needed
        self.available = available
        super().__init__(
            message
            or f"Unexpected end of data at offset {position}: needed {needed} "
            f"byte(s) but only {available} remain."
        )


class TruncatedMessage(UnexpectedEndOfData):
    """
    A message ended in the middle of a field instead of on a field boundary.
    Raised by the message parser in place of the inner `UnexpectedEndOfData`.
    """

    def __init__(self, position: int, needed: int, available: int, field_start: int):
        self.field_start = field_start
        super().__init__(
            position,
            needed,
            available,
            f"Message truncated inside the field starting at offset "
            f"{field_start}: needed {needed} byte(s) at offset {position} "
            f"but only {available} remain.",
        )


class VarintTooLong(DecodeError):
    def __init__(self, position: int, max_bytes: int):
        self.position = position
        self.max_bytes = max_bytes
        super().__init__(
            f"Varint starting at offset {position} is longer than {max_bytes} bytes."
        )


class InvalidWireType(DecodeError):
    def __init__(self, wire_type: int, position: Optional[int] = None):
        self.wire_type = wire_type
        self.position = position
        super().__init__(f"Invalid wire type {wire_type} in tag at offset {position}.")


class InvalidFieldNumber(DecodeError):
    def __init__(self, field_number: int, position: Optional[int] = None):
        self.field_number = field_number
        self.position = position
        super().__init__(
            f"Invalid field number {field_number} in tag at offset {position}."
        )


class FieldTypeMismatch(DecodeError):
    """A payload's wire type cannot be converted to the declared field kind."""

    def __init__(self, field_number: int, expected_kind: str, actual_wire_type: str):
        self.field_number = field_number
        self.expected_kind = expected_kind
        self.actual_wire_type = actual_wire_type
        super().__init__(
            f"Field {field_number} is declared as {expected_kind} but was "
            f"encoded as {actual_wire_type}."
        )


class InvalidStringEncoding(DecodeError):
    def __init__(self, field_number: int, reason: str):
        self.field_number = field_number
        super().__init__(f"Field {field_number} is not valid UTF-8: {reason}")


class RecursionLimitExceeded(DecodeError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Nested messages exceed the recursion limit of {limit}.")
