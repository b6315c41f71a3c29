import pytest
from google.protobuf import descriptor_pb2

from protoschema.options import (
    EnumOptions,
    FieldOptions,
    FileOptions,
    MessageOptions,
    OptionsReader,
)


def _varint(value: int) -> bytes:
    value &= (1 << 64) - 1
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _key(number: int, wire_type: int) -> bytes:
    return _varint(number << 3 | wire_type)


def _bool(number: int) -> bytes:
    return _key(number, 0) + _varint(1)


def _int(number: int, value: int) -> bytes:
    return _key(number, 0) + _varint(value)


def _text(number: int, value: str) -> bytes:
    raw = value.encode("utf-8")
    return _key(number, 2) + _varint(len(raw)) + raw


def _extension(number: int, payload: bytes) -> bytes:
    return _key(number, 2) + _varint(len(payload)) + payload


READER = OptionsReader()


def test_missing_options_give_defaults():
    assert READER.field_options(descriptor_pb2.FieldDescriptorProto()) == FieldOptions()
    assert READER.file_options(descriptor_pb2.FileDescriptorProto()) == FileOptions()
    assert READER.message_options(descriptor_pb2.DescriptorProto()) == MessageOptions()
    assert READER.enum_options(descriptor_pb2.EnumDescriptorProto()) == EnumOptions()


def test_options_without_extension_give_defaults():
    field = descriptor_pb2.FieldDescriptorProto()
    field.options.deprecated = True
    assert READER.field_options(field) == FieldOptions()


def test_field_options():
    payload = (
        _bool(1) + _bool(2) + _int(3, 2) + _int(4, 10) + _text(5, "^[a-z]+$")
    )
    field = descriptor_pb2.FieldDescriptorProto(name="query")
    field.options.MergeFromString(_extension(READER.field_extension, payload))
    assert READER.field_options(field) == FieldOptions(
        ignore=True, required=True, min_length=2, max_length=10, pattern="^[a-z]+$"
    )


def test_field_options_alongside_standard_options():
    field = descriptor_pb2.FieldDescriptorProto()
    field.options.deprecated = True
    field.options.MergeFromString(_extension(READER.field_extension, _bool(2)))
    options = READER.field_options(field)
    assert options.required is True
    assert options.ignore is False


def test_negative_int32_value():
    field = descriptor_pb2.FieldDescriptorProto()
    field.options.MergeFromString(_extension(READER.field_extension, _int(3, -5)))
    assert READER.field_options(field).min_length == -5


def test_file_options():
    payload = _bool(1) + _text(2, "jsonschema")
    file = descriptor_pb2.FileDescriptorProto(name="OptionFileExtension.proto")
    file.options.MergeFromString(_extension(READER.file_extension, payload))
    assert READER.file_options(file) == FileOptions(ignore=True, extension="jsonschema")


def test_message_options():
    payload = _bool(2) + _bool(3) + _bool(4) + _bool(5)
    message = descriptor_pb2.DescriptorProto(name="M")
    message.options.MergeFromString(_extension(READER.message_extension, payload))
    assert READER.message_options(message) == MessageOptions(
        ignore=False,
        all_fields_required=True,
        allow_null_values=True,
        disallow_additional_properties=True,
        enums_as_constants=True,
    )


def test_message_ignore():
    message = descriptor_pb2.DescriptorProto(name="IgnoredMessage")
    message.options.MergeFromString(_extension(READER.message_extension, _bool(1)))
    assert READER.message_options(message).ignore is True


def test_enum_options():
    payload = _bool(1) + _bool(2) + _bool(3) + _bool(4)
    enum = descriptor_pb2.EnumDescriptorProto(name="E")
    enum.options.MergeFromString(_extension(READER.enum_extension, payload))
    assert READER.enum_options(enum) == EnumOptions(
        enums_as_constants=True,
        enums_as_strings_only=True,
        enums_trim_prefix=True,
        ignore=True,
    )


def test_repeated_extension_occurrences_merge():
    field = descriptor_pb2.FieldDescriptorProto()
    field.options.MergeFromString(
        _extension(READER.field_extension, _bool(1) + _int(4, 3))
        + _extension(READER.field_extension, _int(4, 7))
    )
    options = READER.field_options(field)
    assert options.ignore is True
    assert options.max_length == 7


def test_other_extension_numbers_are_not_read():
    field = descriptor_pb2.FieldDescriptorProto()
    field.options.MergeFromString(_extension(READER.field_extension + 100, _bool(1)))
    assert READER.field_options(field) == FieldOptions()


def test_unknown_inner_fields_are_skipped():
    payload = _int(99, 1) + _text(98, "x") + _bool(1)
    file = descriptor_pb2.FileDescriptorProto()
    file.options.MergeFromString(_extension(READER.file_extension, payload))
    assert READER.file_options(file) == FileOptions(ignore=True)


def test_wrong_wire_type_for_known_field_is_skipped():
    file = descriptor_pb2.FileDescriptorProto()
    file.options.MergeFromString(_extension(READER.file_extension, _int(2, 1)))
    assert READER.file_options(file).extension == ""


def test_custom_extension_number():
    reader = OptionsReader(enum_extension=50001)
    enum = descriptor_pb2.EnumDescriptorProto()
    enum.options.MergeFromString(_extension(50001, _bool(4)))
    assert reader.enum_options(enum).ignore is True
    assert READER.enum_options(enum).ignore is False


def test_malformed_payload_raises():
    file = descriptor_pb2.FileDescriptorProto()
    truncated = _key(2, 2) + _varint(10) + b"abc"
    file.options.MergeFromString(_extension(READER.file_extension, truncated))
    with pytest.raises(ValueError):
        READER.file_options(file)