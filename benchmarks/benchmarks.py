from dataclasses import dataclass
from typing import List

import protowire


@dataclass
class TestMessage(protowire.Message):
    foo: int = protowire.uint32_field(1)
    bar: str = protowire.string_field(2)
    baz: float = protowire.float_field(3)


@dataclass
class TestNestedChildMessage(protowire.Message):
    str_key: str = protowire.string_field(1)
    bytes_key: bytes = protowire.bytes_field(2)
    bool_key: bool = protowire.bool_field(3)
    float_key: float = protowire.float_field(4)
    int_key: int = protowire.uint64_field(5)


@dataclass
class TestNestedMessage(protowire.Message):
    foo: TestNestedChildMessage = protowire.message_field(1, TestNestedChildMessage)
    bar: TestNestedChildMessage = protowire.message_field(2, TestNestedChildMessage)
    baz: TestNestedChildMessage = protowire.message_field(3, TestNestedChildMessage)


@dataclass
class TestRepeatedMessage(protowire.Message):
    foo_repeat: List[str] = protowire.string_field(1, repeated=True)
    bar_repeat: List[int] = protowire.int64_field(2, repeated=True)
    baz_repeat: List[bool] = protowire.bool_field(3, repeated=True)


# foo=150, bar="test", baz=1.5
MESSAGE_BYTES = b"\x08\x96\x01\x12\x04test\x1d\x00\x00\xc0\x3f"

# str_key="foo", bytes_key=b"test1", bool_key=True, int_key=500
CHILD_BYTES = b"\x0a\x03foo\x12\x05test1\x18\x01\x28\xf4\x03"
NESTED_BYTES = b"".join(
    bytes([(number << 3) | 2, len(CHILD_BYTES)]) + CHILD_BYTES for number in (1, 2, 3)
)

REPEATED_BYTES = (
    b"\x0a\x06test42" * 1_000
    # packed: 1_000 x -1, sign extended to ten bytes each
    + b"\x12\x90\x4e"
    + b"\xff\xff\xff\xff\xff\xff\xff\xff\xff\x01" * 1_000
    + b"\x18\x01" * 1_000
)


class BenchMessage:
    """Test decoding a proto message."""

    def time_decode_raw(self):
        """Time splitting a flat message into raw fields"""
        protowire.decode_raw(MESSAGE_BYTES)

    def time_decode_typed(self):
        """Time decoding a flat message into a typed instance"""
        protowire.decode_typed(MESSAGE_BYTES, TestMessage)

    def time_decode_nested(self):
        """Time decoding a message with nested children"""
        protowire.decode_typed(NESTED_BYTES, TestNestedMessage)

    def time_decode_repeated(self):
        """Time decoding packed and unpacked repeated fields"""
        protowire.decode_typed(REPEATED_BYTES, TestRepeatedMessage)


class MemSuite:
    def setup(self):
        self.cls = TestMessage

    def mem_instance(self):
        return self.cls()
