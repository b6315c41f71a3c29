"""Reading of the generator's custom options from descriptor option messages.

The custom options are carried as extensions on the standard descriptor
option messages. They are read straight from the wire encoding, so the
extension definitions need not be registered with the descriptor pool.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

FIELD_OPTIONS_EXTENSION = 1125
FILE_OPTIONS_EXTENSION = 1126
MESSAGE_OPTIONS_EXTENSION = 1127
ENUM_OPTIONS_EXTENSION = 1128

_VARINT, _FIXED64, _BYTES, _START_GROUP, _END_GROUP, _FIXED32 = 0, 1, 2, 3, 4, 5


@dataclass(frozen=True)
class FileOptions:
    """Per-file options."""

    ignore: bool = False
    extension: str = ""

    _wire: ClassVar[dict[int, tuple[str, str]]] = {
        1: ("ignore", "bool"),
        2: ("extension", "string"),
    }


@dataclass(frozen=True)
class MessageOptions:
    """Per-message options."""

    ignore: bool = False
    all_fields_required: bool = False
    allow_null_values: bool = False
    disallow_additional_properties: bool = False
    enums_as_constants: bool = False

    _wire: ClassVar[dict[int, tuple[str, str]]] = {
        1: ("ignore", "bool"),
        2: ("all_fields_required", "bool"),
        3: ("allow_null_values", "bool"),
        4: ("disallow_additional_properties", "bool"),
        5: ("enums_as_constants", "bool"),
    }


@dataclass(frozen=True)
class FieldOptions:
    """Per-field options."""

    ignore: bool = False
    required: bool = False
    min_length: int = 0
    max_length: int = 0
    pattern: str = ""

    _wire: ClassVar[dict[int, tuple[str, str]]] = {
        1: ("ignore", "bool"),
        2: ("required", "bool"),
        3: ("min_length", "int32"),
        4: ("max_length", "int32"),
        5: ("pattern", "string"),
    }


@dataclass(frozen=True)
class EnumOptions:
    """Per-enum options."""

    enums_as_constants: bool = False
    enums_as_strings_only: bool = False
    enums_trim_prefix: bool = False
    ignore: bool = False

    _wire: ClassVar[dict[int, tuple[str, str]]] = {
        1: ("enums_as_constants", "bool"),
        2: ("enums_as_strings_only", "bool"),
        3: ("enums_trim_prefix", "bool"),
        4: ("ignore", "bool"),
    }


_Options = TypeVar("_Options", FileOptions, MessageOptions, FieldOptions, EnumOptions)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint in options")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift >= 70:
            raise ValueError("varint too long in options")


def _take(data: bytes, pos: int, size: int) -> tuple[bytes, int]:
    end = pos + size
    if end > len(data):
        raise ValueError("truncated field in options")
    return data[pos:end], end


def _iter_fields(data: bytes) -> Iterator[tuple[int, int, Any]]:
    """Yield (field number, wire type, value) for each top-level field."""
    pos = 0
    groups: list[int] = []
    while pos < len(data):
        key, pos = _read_varint(data, pos)
        number, wire_type = key >> 3, key & 7
        if number == 0:
            raise ValueError("invalid field number 0 in options")
        if wire_type == _VARINT:
            value, pos = _read_varint(data, pos)
        elif wire_type == _FIXED64:
            raw, pos = _take(data, pos, 8)
            value = int.from_bytes(raw, "little")
        elif wire_type == _BYTES:
            length, pos = _read_varint(data, pos)
            value, pos = _take(data, pos, length)
        elif wire_type == _FIXED32:
            raw, pos = _take(data, pos, 4)
            value = int.from_bytes(raw, "little")
        elif wire_type == _START_GROUP:
            groups.append(number)
            continue
        elif wire_type == _END_GROUP:
            if not groups or groups.pop() != number:
                raise ValueError("unbalanced group in options")
            continue
        else:
            raise ValueError(f"unknown wire type {wire_type} in options")
        if not groups:
            yield number, wire_type, value
    if groups:
        raise ValueError("unterminated group in options")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def _decode(cls: type[_Options], payload: bytes) -> _Options:
    values: dict[str, Any] = {}
    for number, wire_type, value in _iter_fields(payload):
        spec = cls._wire.get(number)
        if spec is None:
            continue
        name, kind = spec
        if kind == "bool" and wire_type == _VARINT:
            values[name] = value != 0
        elif kind == "int32" and wire_type == _VARINT:
            values[name] = _to_int32(value)
        elif kind == "string" and wire_type == _BYTES:
            values[name] = value.decode("utf-8")
    return cls(**values)


@dataclass(frozen=True)
class OptionsReader:
    """Reads the custom options from file, message, field and enum descriptors."""

    file_extension: int = FILE_OPTIONS_EXTENSION
    message_extension: int = MESSAGE_OPTIONS_EXTENSION
    field_extension: int = FIELD_OPTIONS_EXTENSION
    enum_extension: int = ENUM_OPTIONS_EXTENSION

    def file_options(self, descriptor) -> FileOptions:
        """Options of a FileDescriptorProto (defaults when absent)."""
        return self._read(descriptor, self.file_extension, FileOptions)

    def message_options(self, descriptor) -> MessageOptions:
        """Options of a DescriptorProto (defaults when absent)."""
        return self._read(descriptor, self.message_extension, MessageOptions)

    def field_options(self, descriptor) -> FieldOptions:
        """Options of a FieldDescriptorProto (defaults when absent)."""
        return self._read(descriptor, self.field_extension, FieldOptions)

    def enum_options(self, descriptor) -> EnumOptions:
        """Options of an EnumDescriptorProto (defaults when absent)."""
        return self._read(descriptor, self.enum_extension, EnumOptions)

    @staticmethod
    def _read(descriptor, extension: int, cls: type[_Options]) -> _Options:
        if not descriptor.HasField("options"):
            return cls()
        encoded = descriptor.options.SerializeToString()
        # Repeated occurrences of an embedded message merge, which for
        # scalar fields is the same as decoding their concatenation.
        payload = b"".join(
            value
            for number, wire_type, value in _iter_fields(encoded)
            if number == extension and wire_type == _BYTES
        )
        return _decode(cls, payload)