"""Converter switches and parsing of the generator parameter string."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

MESSAGE_DELIMITER = "+"

_MESSAGES = re.compile(r"messages=\[([^\]]+)\]")
_FILE_EXTENSION = "file_extension="

_PARAMETER_FLAGS = {
    "all_fields_required": "all_fields_required",
    "allow_null_values": "allow_null_values",
    "disallow_additional_properties": "disallow_additional_properties",
    "disallow_bigints_as_strings": "disallow_bigints_as_strings",
    "enforce_oneof": "enforce_oneof",
    "enums_as_strings_only": "enums_as_strings_only",
    "enums_trim_prefix": "enums_trim_prefix",
    "json_fieldnames": "use_json_fieldnames_only",
    "prefix_schema_files_with_package": "prefix_schema_files_with_package",
    "proto_and_json_fieldnames": "use_proto_and_json_field_names",
}


@dataclass(frozen=True)
class ConverterFlags:
    """Switches that control how protos are turned into schemas."""

    all_fields_required: bool = False
    allow_null_values: bool = False
    disallow_additional_properties: bool = False
    disallow_bigints_as_strings: bool = False
    enforce_oneof: bool = False
    enums_as_constants: bool = False
    enums_as_strings_only: bool = False
    enums_trim_prefix: bool = False
    keep_new_lines_in_description: bool = False
    prefix_schema_files_with_package: bool = False
    use_json_fieldnames_only: bool = False
    use_proto_and_json_field_names: bool = False


@dataclass(frozen=True)
class GeneratorParameters:
    """What a generator parameter string asks for.

    ``enabled`` holds the names of the ConverterFlags fields to switch on.
    """

    enabled: frozenset[str] = frozenset()
    debug: bool = False
    message_targets: list[str] = field(default_factory=list)
    file_extension: str | None = None


def parse_parameters(parameters: str) -> GeneratorParameters:
    """Parse a comma separated generator parameter string."""
    enabled: set[str] = set()
    debug = False
    targets: list[str] = []
    extension: str | None = None

    for parameter in parameters.split(","):
        if parameter == "debug":
            debug = True
        elif parameter in _PARAMETER_FLAGS:
            enabled.add(_PARAMETER_FLAGS[parameter])

        match = _MESSAGES.search(parameter)
        if match:
            targets = match.group(1).split(MESSAGE_DELIMITER)

        parts = parameter.split(_FILE_EXTENSION)
        if len(parts) == 2:
            extension = parts[1]

    return GeneratorParameters(
        enabled=frozenset(enabled),
        debug=debug,
        message_targets=targets,
        file_extension=extension,
    )