# protoschema

`protoschema` builds JSON Schema documents from Protocol Buffers descriptors
(`google.protobuf.descriptor_pb2` messages). Give it a top-level message and
it returns a schema document. The document has a `$ref` to the message and a
`definitions` map that holds every message the root message reaches. Recursive
and cyclic messages therefore become references and are never expanded
without end. Enums can be converted on their own as well.

## Installation

```
pip install protoschema
```

Add the `test` extra to install `pytest` and `jsonschema` for the test suite.

## Usage

The input is a `FileDescriptorSet`. You can produce one with `protoc`, using
`--include_source_info` to keep comments and `--include_imports` to keep the
files that are imported:

```python
from google.protobuf import descriptor_pb2

from protoschema.flags import ConverterFlags
from protoschema.messages import SchemaBuilder
from protoschema.registry import PackageRegistry
from protoschema.sourceinfo import SourceCodeInfo

with open("descriptors.bin", "rb") as stream:
    descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(stream.read())

registry = PackageRegistry()
for file in descriptor_set.file:
    for message in file.message_type:
        registry.register_message(file.package, message)
    for enum in file.enum_type:
        registry.register_enum(file.package, enum)

builder = SchemaBuilder(
    registry,
    SourceCodeInfo(descriptor_set.file),
    ConverterFlags(allow_null_values=True),
)

target = descriptor_set.file[-1]
package = registry.lookup_package(target.package)
for message in target.message_type:
    print(builder.convert_message(package, message).to_json())
```

`registry.lookup_package` works only for a file that declares a package. Give
files that do not declare one a package name of your own when you register
them.

`SchemaBuilder.convert_enum(enum, flags)` returns a `SchemaType` for one enum.
It raises `IgnoredError` if the enum is marked as ignored. To make a
standalone enum document, set the node's `version` to
`builder.schema_version` and call `to_dict()`. Message documents use draft-04.
`builder.schema_version` switches to draft-06 once an enum has been rendered
as `const` values.

## Flags

`ConverterFlags` is a frozen dataclass that holds these switches:

- `all_fields_required`
- `allow_null_values`
- `disallow_additional_properties`
- `disallow_bigints_as_strings`
- `enforce_oneof`
- `enums_as_constants`
- `enums_as_strings_only`
- `enums_trim_prefix`
- `keep_new_lines_in_description`
- `prefix_schema_files_with_package`
- `use_json_fieldnames_only`
- `use_proto_and_json_field_names`

`protoschema.flags.parse_parameters` reads a comma separated parameter string
such as `allow_null_values,json_fieldnames,file_extension=schema,messages=[A+B]`.
It returns a `GeneratorParameters` object with these attributes:

- `enabled`: the names of the flags that are switched on
- `debug`
- `message_targets`
- `file_extension`

The parameter names are `all_fields_required`, `allow_null_values`, `debug`,
`disallow_additional_properties`, `disallow_bigints_as_strings`,
`enforce_oneof`, `enums_as_strings_only`, `enums_trim_prefix`,
`json_fieldnames`, `prefix_schema_files_with_package` and
`proto_and_json_fieldnames`.

## Custom options

`protoschema.options.OptionsReader` reads the generator's custom options from
descriptor option messages. It reads them straight from the wire encoding, so
the extensions do not need to be registered. The extension field numbers are:

| Options | Extension number | Fields |
|---------|------------------|--------|
| field | 1125 | `ignore`, `required`, `min_length`, `max_length`, `pattern` |
| file | 1126 | `ignore`, `extension` |
| message | 1127 | `ignore`, `all_fields_required`, `allow_null_values`, `disallow_additional_properties`, `enums_as_constants` |
| enum | 1128 | `enums_as_constants`, `enums_as_strings_only`, `enums_trim_prefix`, `ignore` |

## Type mapping

- 64-bit integers become strings, or integers when `disallow_bigints_as_strings` is set.
- Bytes become base64 `binary` strings.
- Maps become objects whose `additionalProperties` is the schema of the map's value.
- `google.protobuf.Timestamp` becomes a `date-time` string.
- `google.protobuf.Duration` becomes a string that matches `^([0-9]+\.?[0-9]*|\.[0-9]+)s$`.
- The wrapper types become their scalar types.
- `Value` accepts any JSON value except null.

## What it does not do

This package is a library only. It has no `protoc` plugin executable and no
command-line entry point. It does not read a `CodeGeneratorRequest` or write
a `CodeGeneratorResponse`. It does not skip files marked as ignored, choose
output file names or filter by `messages=[...]` on its own. Your code does the
registration, selects the files and messages, and writes the schemas out, as
in the example above.