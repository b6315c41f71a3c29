"""Conversion of proto messages, fields and enums into JSON-Schema nodes."""

from __future__ import annotations

import dataclasses
import logging

from google.protobuf import descriptor_pb2

from protoschema.flags import ConverterFlags
from protoschema.options import OptionsReader
from protoschema.registry import PackageRegistry, ProtoPackage
from protoschema.schema import (
    REF_PREFIX,
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_INTEGER,
    TYPE_NULL,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
    VERSION_DRAFT_04,
    VERSION_DRAFT_06,
    Schema,
    SchemaType,
    dedupe,
)
from protoschema.sourceinfo import (
    IgnoredError,
    SourceCodeInfo,
    format_title_and_description,
)

logger = logging.getLogger(__name__)

_Field = descriptor_pb2.FieldDescriptorProto
Message = descriptor_pb2.DescriptorProto
Enum = descriptor_pb2.EnumDescriptorProto

# Messages keyed by identity: id(message) -> (message, definition name).
Duplicated = dict[int, tuple[Message, str]]

_FLOATS = {_Field.TYPE_DOUBLE, _Field.TYPE_FLOAT}
_INT32S = {
    _Field.TYPE_INT32,
    _Field.TYPE_UINT32,
    _Field.TYPE_FIXED32,
    _Field.TYPE_SFIXED32,
    _Field.TYPE_SINT32,
}
_INT64S = {
    _Field.TYPE_INT64,
    _Field.TYPE_UINT64,
    _Field.TYPE_FIXED64,
    _Field.TYPE_SFIXED64,
    _Field.TYPE_SINT64,
}
_OBJECTS = {_Field.TYPE_GROUP, _Field.TYPE_MESSAGE}

_WELL_KNOWN = {
    "DoubleValue": TYPE_NUMBER,
    "FloatValue": TYPE_NUMBER,
    "Int32Value": TYPE_INTEGER,
    "UInt32Value": TYPE_INTEGER,
    "Int64Value": TYPE_INTEGER,
    "UInt64Value": TYPE_INTEGER,
    "BoolValue": TYPE_BOOLEAN,
    "BytesValue": TYPE_STRING,
    "StringValue": TYPE_STRING,
    "Value": "",
    "Duration": TYPE_STRING,
    "Struct": TYPE_OBJECT,
}

DURATION_PATTERN = r"^([0-9]+\.?[0-9]*|\.[0-9]+)s$"


def _nullable(type_name: str) -> list[SchemaType]:
    return [SchemaType(type=TYPE_NULL), SchemaType(type=type_name)]


class SchemaBuilder:
    """Builds JSON-Schema nodes for the definitions held in a registry."""

    def __init__(
        self,
        registry: PackageRegistry,
        source_info: SourceCodeInfo,
        flags: ConverterFlags | None = None,
        options: OptionsReader | None = None,
    ) -> None:
        self.registry = registry
        self.source_info = source_info
        self.flags = flags or ConverterFlags()
        self.options = options or OptionsReader()
        self.schema_version = VERSION_DRAFT_04
        self.comment_delimiter = "  "

    def _describe(self, name: str | None, definition) -> tuple[str, str] | None:
        location = self.source_info.location(definition)
        if location is None:
            return None
        return format_title_and_description(
            name,
            location,
            self.comment_delimiter,
            self.flags.keep_new_lines_in_description,
        )

    def convert_enum(self, enum: Enum, flags: ConverterFlags) -> SchemaType:
        """Convert an enum; raises IgnoredError if it is marked ignored."""
        schema = SchemaType()
        flags = dataclasses.replace(
            flags, enums_as_strings_only=self.flags.enums_as_strings_only
        )
        opts = self.options.enum_options(enum)
        if opts.enums_as_constants:
            flags = dataclasses.replace(flags, enums_as_constants=True)
        if opts.enums_as_strings_only:
            flags = dataclasses.replace(flags, enums_as_strings_only=True)
        if opts.enums_trim_prefix:
            flags = dataclasses.replace(flags, enums_trim_prefix=True)
        if opts.ignore:
            logger.debug("skipping ignored enum %s", enum.name)
            raise IgnoredError()

        described = self._describe(enum.name, enum)
        if described:
            schema.title, schema.description = described

        if not flags.enums_as_constants:
            schema.one_of.append(SchemaType(type=TYPE_STRING))
            if not flags.enums_as_strings_only:
                schema.one_of.append(SchemaType(type=TYPE_INTEGER))
        if flags.allow_null_values:
            schema.one_of.append(SchemaType(type=TYPE_NULL))
        if len(schema.one_of) == 1:
            schema.type = schema.one_of[0].type
            schema.one_of = []

        from protoschema.naming import to_screaming_snake

        prefix = f"{to_screaming_snake(enum.name)}_"
        for value in enum.value:
            value_description = ""
            described = self._describe(None, value)
            if described:
                value_description = described[1]
            value_name = value.name
            if flags.enums_trim_prefix and value_name.startswith(prefix):
                value_name = value_name[len(prefix):]
            if flags.enums_as_constants:
                self.schema_version = VERSION_DRAFT_06
                schema.one_of.append(
                    SchemaType(extras={"const": value_name}, description=value_description)
                )
                if not flags.enums_as_strings_only:
                    schema.one_of.append(
                        SchemaType(
                            extras={"const": value.number},
                            description=value_description,
                        )
                    )
            schema.enum.append(value_name)
            if not flags.enums_as_strings_only:
                schema.enum.append(value.number)
        return schema

    def convert_field(
        self,
        package: ProtoPackage,
        field: _Field,
        message: Message,
        duplicated: Duplicated,
        flags: ConverterFlags,
    ) -> SchemaType:
        """Convert one field of a message into a schema node."""
        schema = SchemaType()
        described = self._describe(None, field)
        if described:
            schema.title, schema.description = described

        kind = field.type
        if kind in _FLOATS:
            self._scalar(schema, TYPE_NUMBER, flags)
        elif kind in _INT32S:
            self._scalar(schema, TYPE_INTEGER, flags)
        elif kind in _INT64S:
            big = TYPE_INTEGER if self.flags.disallow_bigints_as_strings else TYPE_STRING
            if flags.allow_null_values:
                schema.one_of = [SchemaType(type=big), SchemaType(type=TYPE_NULL)]
            else:
                schema.type = big
        elif kind == _Field.TYPE_STRING:
            opts = self.options.field_options(field)
            string_def = SchemaType(type=TYPE_STRING)
            if opts.min_length > 0:
                string_def.min_length = opts.min_length
            if opts.max_length > 0:
                string_def.max_length = opts.max_length
            if opts.pattern:
                string_def.pattern = opts.pattern
            if flags.allow_null_values:
                schema.one_of = [SchemaType(type=TYPE_NULL), string_def]
            else:
                schema.type = string_def.type
                schema.min_length = string_def.min_length
                schema.max_length = string_def.max_length
                schema.pattern = string_def.pattern
        elif kind == _Field.TYPE_BYTES:
            if flags.allow_null_values:
                schema.one_of = [
                    SchemaType(type=TYPE_NULL),
                    SchemaType(type=TYPE_STRING, format="binary", binary_encoding="base64"),
                ]
            else:
                schema.type = TYPE_STRING
                schema.format = "binary"
                schema.binary_encoding = "base64"
        elif kind == _Field.TYPE_ENUM:
            found = self.registry.lookup_enum(package, field.type_name.lstrip("."))
            if found is None:
                raise ValueError(
                    f"unable to resolve enum type: {_Field.Type.Name(kind)}"
                )
            try:
                schema = self.convert_enum(found[0], flags)
            except IgnoredError:
                schema = SchemaType()
        elif kind == _Field.TYPE_BOOL:
            self._scalar(schema, TYPE_BOOLEAN, flags)
        elif kind in _OBJECTS:
            if field.type_name == ".google.protobuf.Duration":
                schema.type = TYPE_STRING
                schema.format = "regex"
                schema.pattern = DURATION_PATTERN
            elif field.type_name == ".google.protobuf.Timestamp":
                schema.type = TYPE_STRING
                schema.format = "date-time"
            else:
                schema.type = TYPE_OBJECT
                if field.label == _Field.LABEL_OPTIONAL:
                    schema.additional_properties = True
                if field.label == _Field.LABEL_REQUIRED:
                    schema.additional_properties = False
                if flags.disallow_additional_properties:
                    schema.additional_properties = False
        else:
            raise ValueError(f"unrecognized field type: {_Field.Type.Name(kind)}")

        if field.label == _Field.LABEL_REPEATED and schema.type != TYPE_OBJECT:
            items = SchemaType()
            if schema.enum:
                items.enum = schema.enum
                schema.enum = []
            else:
                items.type = schema.type
                items.one_of = schema.one_of
            schema.items = items
            if flags.allow_null_values:
                schema.one_of = _nullable(TYPE_ARRAY)
            else:
                schema.type = TYPE_ARRAY
                schema.one_of = []
            return schema

        if schema.type == TYPE_OBJECT:
            found = self.registry.lookup_type(package, field.type_name)
            if found is None:
                raise ValueError(f"no such message type named {field.type_name}")
            record, package_name = found
            recursed = self._convert_message_type(
                package, record, package_name, duplicated, False
            )

            if record.options.map_entry:
                if recursed.properties is None:
                    raise ValueError("Unable to find properties of MAP type")
                value = recursed.properties.get("value")
                if value is None:
                    raise ValueError("Unable to find 'value' property of MAP type")
                schema.additional_properties = value
            elif field.label == _Field.LABEL_REPEATED:
                schema.items = recursed
                schema.type = TYPE_ARRAY
                if (
                    flags.all_fields_required
                    and not recursed.one_of
                    and recursed.properties is not None
                ):
                    recursed.required.extend(recursed.properties)
                recursed.required = dedupe(recursed.required)
            else:
                if recursed.one_of:
                    return recursed
                if recursed.type != TYPE_OBJECT:
                    schema.type = recursed.type
                schema.properties = recursed.properties
                schema.ref = recursed.ref
                schema.required = list(recursed.required)
                if (
                    flags.all_fields_required
                    and not recursed.one_of
                    and recursed.properties is not None
                ):
                    schema.required.extend(recursed.properties)

            if flags.allow_null_values:
                schema.one_of = _nullable(schema.type)
                schema.type = ""

        schema.required = dedupe(schema.required)
        return schema

    @staticmethod
    def _scalar(schema: SchemaType, type_name: str, flags: ConverterFlags) -> None:
        if flags.allow_null_values:
            schema.one_of = _nullable(type_name)
        else:
            schema.type = type_name

    def convert_message(self, package: ProtoPackage, message: Message) -> Schema:
        """Convert a top-level message into a schema document with definitions."""
        duplicated = self.find_nested_messages(package, message)
        definitions = {
            name: self._convert_message_type(package, nested, "", duplicated, True)
            for nested, name in duplicated.values()
        }
        root = SchemaType(
            ref=f"{REF_PREFIX}{message.name}", version=self.schema_version
        )
        return Schema(root=root, definitions=definitions)

    def find_nested_messages(self, package: ProtoPackage, message: Message) -> Duplicated:
        """Find every message reachable from this one, keyed by identity."""
        found: Duplicated = {}
        self._collect(package, message, message.name, found)
        return {
            key: (nested, name.lstrip("."))
            for key, (nested, name) in found.items()
            if not nested.options.map_entry
            and not name.startswith(".google.protobuf.")
        }

    def _collect(
        self, package: ProtoPackage, message: Message, type_name: str, found: Duplicated
    ) -> None:
        if id(message) in found:
            return
        found[id(message)] = (message, type_name)
        for field in message.field:
            if field.type not in _OBJECTS:
                continue
            record = self.registry.lookup_type(package, field.type_name)
            if record is None:
                raise ValueError(f"no such message type named {field.type_name}")
            self._collect(package, record[0], field.type_name, found)

    def _message_flags(self, message: Message) -> ConverterFlags:
        opts = self.options.message_options(message)
        changes = {
            name: True
            for name in (
                "all_fields_required",
                "allow_null_values",
                "disallow_additional_properties",
                "enums_as_constants",
            )
            if getattr(opts, name)
        }
        return dataclasses.replace(self.flags, **changes)

    def _convert_message_type(
        self,
        package: ProtoPackage,
        message: Message,
        package_name: str,
        duplicated: Duplicated,
        ignore_duplicated: bool,
    ) -> SchemaType:
        schema = SchemaType()
        flags = self._message_flags(message)

        described = self._describe(message.name, message)
        if described:
            schema.title, schema.description = described

        if message.name in _WELL_KNOWN and package_name == ".google.protobuf":
            if message.name == "Value":
                schema.one_of = [
                    SchemaType(type=t)
                    for t in (TYPE_ARRAY, TYPE_BOOLEAN, TYPE_NUMBER, TYPE_OBJECT, TYPE_STRING)
                ]
            else:
                schema.type = _WELL_KNOWN[message.name]
            if flags.allow_null_values:
                schema.one_of.extend(_nullable(schema.type))
            return schema

        schema.properties = {}

        entry = duplicated.get(id(message))
        if entry is not None and entry[0] is message and not ignore_duplicated:
            return SchemaType(ref=f"{REF_PREFIX}{entry[1]}")

        if flags.allow_null_values:
            schema.one_of = _nullable(TYPE_OBJECT)
        else:
            schema.type = TYPE_OBJECT
        schema.additional_properties = not flags.disallow_additional_properties

        json_only = self.flags.use_json_fieldnames_only
        for field in message.field:
            opts = self.options.field_options(field)
            if opts.ignore:
                logger.debug("skipping ignored field %s.%s", message.name, field.name)
                continue
            if opts.required:
                schema.required.append(field.json_name if json_only else field.name)

            converted = self.convert_field(package, field, message, duplicated, flags)

            in_oneof = field.HasField("oneof_index")
            if self.flags.enforce_oneof and in_oneof:
                schema.one_of.append(SchemaType(required=[field.name]))

            if json_only:
                schema.properties[field.json_name] = converted
            elif self.flags.use_proto_and_json_field_names:
                schema.properties[field.name] = converted
                schema.properties[field.json_name] = converted
            else:
                schema.properties[field.name] = converted

            if flags.all_fields_required and not schema.one_of:
                schema.required.extend(schema.properties)

            if field.label == _Field.LABEL_REQUIRED and not in_oneof:
                schema.required.append(field.json_name if json_only else field.name)

        if not schema.properties:
            schema.properties = None
        schema.required = dedupe(schema.required)
        return schema