import enum
import math
from dataclasses import dataclass
from typing import List

import pytest
from google.protobuf import (
    descriptor_pb2,
    duration_pb2,
    field_mask_pb2,
    timestamp_pb2,
    wrappers_pb2,
)
from hypothesis import given
from hypothesis import strategies as st

import protowire


@dataclass
class Int32Value(protowire.Message):
    value: int = protowire.int32_field(1)


@dataclass
class Int64Value(protowire.Message):
    value: int = protowire.int64_field(1)


@dataclass
class UInt32Value(protowire.Message):
    value: int = protowire.uint32_field(1)


@dataclass
class BoolValue(protowire.Message):
    value: bool = protowire.bool_field(1)


@dataclass
class FloatValue(protowire.Message):
    value: float = protowire.float_field(1)


@dataclass
class DoubleValue(protowire.Message):
    value: float = protowire.double_field(1)


@dataclass
class StringValue(protowire.Message):
    value: str = protowire.string_field(1)


@dataclass
class BytesValue(protowire.Message):
    value: bytes = protowire.bytes_field(1)


@dataclass
class Timestamp(protowire.Message):
    seconds: int = protowire.int64_field(1)
    nanos: int = protowire.int32_field(2)


@dataclass
class FieldMask(protowire.Message):
    paths: List[str] = protowire.string_field(1, repeated=True)


class Label(enum.IntEnum):
    LABEL_OPTIONAL = 1
    LABEL_REQUIRED = 2
    LABEL_REPEATED = 3


@dataclass
class FieldDescriptorProto(protowire.Message):
    name: str = protowire.string_field(1)
    number: int = protowire.int32_field(3)
    label: Label = protowire.enum_field(4, Label)
    type_name: str = protowire.string_field(6)


@dataclass
class DescriptorProto(protowire.Message):
    name: str = protowire.string_field(1)
    field: List[FieldDescriptorProto] = protowire.message_field(
        2, FieldDescriptorProto, repeated=True
    )
    nested_type: List["DescriptorProto"] = protowire.message_field(
        3, lambda: DescriptorProto, repeated=True
    )


@dataclass
class FileDescriptorProto(protowire.Message):
    name: str = protowire.string_field(1)
    package: str = protowire.string_field(2)
    dependency: List[str] = protowire.string_field(3, repeated=True)
    message_type: List[DescriptorProto] = protowire.message_field(
        4, DescriptorProto, repeated=True
    )
    syntax: str = protowire.string_field(12)


@given(st.integers(min_value=-(2 ** 31), max_value=2 ** 31 - 1))
def test_int32_matches_reference(value):
    data = wrappers_pb2.Int32Value(value=value).SerializeToString()
    assert protowire.decode_typed(data, Int32Value).value == value


@given(st.integers(min_value=-(2 ** 63), max_value=2 ** 63 - 1))
def test_int64_matches_reference(value):
    data = wrappers_pb2.Int64Value(value=value).SerializeToString()
    assert protowire.decode_typed(data, Int64Value).value == value


@given(st.floats(width=32, allow_nan=False))
def test_float_matches_reference(value):
    data = wrappers_pb2.FloatValue(value=value).SerializeToString()
    assert protowire.decode_typed(data, FloatValue).value == value


def test_nan_double():
    data = wrappers_pb2.DoubleValue(value=float("nan")).SerializeToString()
    assert math.isnan(protowire.decode_typed(data, DoubleValue).value)


@pytest.mark.parametrize(
    "reference, cls, value",
    [
        (wrappers_pb2.UInt32Value, UInt32Value, 2 ** 32 - 1),
        (wrappers_pb2.BoolValue, BoolValue, True),
        (wrappers_pb2.DoubleValue, DoubleValue, 3.14159),
        (wrappers_pb2.StringValue, StringValue, "üñíçødé"),
        (wrappers_pb2.BytesValue, BytesValue, b"\x00\x01\xff"),
    ],
)
def test_wrappers_match_reference(reference, cls, value):
    data = reference(value=value).SerializeToString()
    assert protowire.decode_typed(data, cls).value == value


def test_negative_timestamp_and_duration():
    data = timestamp_pb2.Timestamp(seconds=-62135596800, nanos=5).SerializeToString()
    assert protowire.decode_typed(data, Timestamp) == Timestamp(
        seconds=-62135596800, nanos=5
    )

    # Duration shares the Timestamp layout.
    data = duration_pb2.Duration(seconds=-3, nanos=-500).SerializeToString()
    assert protowire.decode_typed(data, Timestamp) == Timestamp(seconds=-3, nanos=-500)


def test_repeated_strings_match_reference():
    paths = ["user.display_name", "photo", ""]
    data = field_mask_pb2.FieldMask(paths=paths).SerializeToString()
    assert protowire.decode_typed(data, FieldMask).paths == paths


def test_nested_repeated_messages_match_reference():
    reference = descriptor_pb2.FileDescriptorProto(
        name="demo.proto",
        package="demo",
        dependency=["a.proto", "b.proto"],
        syntax="proto3",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Outer",
                field=[
                    descriptor_pb2.FieldDescriptorProto(
                        name="id",
                        number=1,
                        label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
                        type=descriptor_pb2.FieldDescriptorProto.TYPE_INT32,
                        json_name="id",
                    ),
                    descriptor_pb2.FieldDescriptorProto(
                        name="inner",
                        number=2,
                        label=descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED,
                        type_name=".demo.Outer.Inner",
                    ),
                ],
                nested_type=[descriptor_pb2.DescriptorProto(name="Inner")],
            )
        ],
    )
    decoded = protowire.decode_typed(reference.SerializeToString(), FileDescriptorProto)

    assert decoded.name == "demo.proto"
    assert decoded.package == "demo"
    assert decoded.dependency == ["a.proto", "b.proto"]
    assert decoded.syntax == "proto3"

    (outer,) = decoded.message_type
    assert outer.name == "Outer"
    assert outer.nested_type == [DescriptorProto(name="Inner")]
    assert outer.field == [
        FieldDescriptorProto(name="id", number=1, label=Label.LABEL_OPTIONAL),
        FieldDescriptorProto(
            name="inner",
            number=2,
            label=Label.LABEL_REPEATED,
            type_name=".demo.Outer.Inner",
        ),
    ]
    # `type` and `json_name` are not declared above and are carried along.
    assert {f.number for f in outer.field[0]._unknown_fields} == {5, 10}


def test_raw_fields_of_reference_message():
    data = descriptor_pb2.FieldDescriptorProto(name="x", number=300).SerializeToString()
    assert protowire.decode_raw(data) == [
        protowire.RawField(1, protowire.LengthDelimited(b"x")),
        protowire.RawField(3, protowire.Varint(300)),
    ]
