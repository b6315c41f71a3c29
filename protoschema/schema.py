"""JSON-Schema document model and its serialisation."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

TYPE_NULL = "null"
TYPE_BOOLEAN = "boolean"
TYPE_INTEGER = "integer"
TYPE_NUMBER = "number"
TYPE_STRING = "string"
TYPE_ARRAY = "array"
TYPE_OBJECT = "object"

VERSION_DRAFT_04 = "http://json-schema.org/draft-04/schema#"
VERSION_DRAFT_06 = "http://json-schema.org/draft-06/schema#"
REF_PREFIX = "#/definitions/"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@dataclass
class SchemaType:
    """One JSON-Schema node; empty values are left out when serialised."""

    version: str = ""
    ref: str = ""
    max_length: int = 0
    min_length: int = 0
    pattern: str = ""
    items: SchemaType | None = None
    required: list[str] = field(default_factory=list)
    properties: dict[str, SchemaType] | None = None
    additional_properties: bool | SchemaType | None = None
    enum: list[Any] = field(default_factory=list)
    type: str = ""
    one_of: list[SchemaType] = field(default_factory=list)
    title: str = ""
    description: str = ""
    format: str = ""
    binary_encoding: str = ""
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the node as plain JSON data in schema keyword order."""
        return self._as_dict(None)

    def _as_dict(self, definitions: dict[str, SchemaType] | None) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.version:
            out["$schema"] = self.version
        if self.ref:
            out["$ref"] = self.ref
        if self.max_length:
            out["maxLength"] = self.max_length
        if self.min_length:
            out["minLength"] = self.min_length
        if self.pattern:
            out["pattern"] = self.pattern
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.required:
            out["required"] = list(self.required)
        if self.properties is not None:
            out["properties"] = {
                name: prop.to_dict() for name, prop in self.properties.items()
            }
        if self.additional_properties is not None:
            extra = self.additional_properties
            out["additionalProperties"] = (
                extra.to_dict() if isinstance(extra, SchemaType) else bool(extra)
            )
        if self.enum:
            out["enum"] = list(self.enum)
        if self.type:
            out["type"] = self.type
        if self.one_of:
            out["oneOf"] = [option.to_dict() for option in self.one_of]
        if definitions:
            out["definitions"] = {
                name: definitions[name].to_dict() for name in sorted(definitions)
            }
        if self.title:
            out["title"] = self.title
        if self.description:
            out["description"] = self.description
        if self.format:
            out["format"] = self.format
        if self.binary_encoding:
            out["binaryEncoding"] = self.binary_encoding
        for key in sorted(self.extras):
            out[key] = self.extras[key]
        return out


@dataclass
class Schema:
    """A schema document: a root node plus named, referenceable definitions."""

    root: SchemaType
    definitions: dict[str, SchemaType] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the whole document as plain JSON data."""
        return self.root._as_dict(self.definitions)

    def to_json(self) -> str:
        """Serialise the document with four-space indentation."""
        text = json.dumps(self.to_dict(), indent=4, ensure_ascii=False)
        for raw, escaped in _HTML_ESCAPES.items():
            text = text.replace(raw, escaped)
        return text


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop repeated values, keeping the first occurrence of each."""
    return list(dict.fromkeys(values))