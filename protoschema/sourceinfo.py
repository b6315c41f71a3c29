"""Mapping of proto source comments onto the definitions they describe."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from google.protobuf import descriptor_pb2

from protoschema.naming import title_from_name

_CHILDREN = {
    descriptor_pb2.FileDescriptorProto: {4: "message_type", 5: "enum_type"},
    descriptor_pb2.DescriptorProto: {
        2: "field",
        3: "nested_type",
        4: "enum_type",
        8: "oneof_decl",
    },
    descriptor_pb2.EnumDescriptorProto: {2: "value"},
}


class IgnoredError(Exception):
    """Raised when a definition is marked to be ignored."""

    def __init__(self, message: str = "Ignored") -> None:
        super().__init__(message)


def definition_at_path(file, path: Sequence[int]):
    """Resolve a source-location path to the definition it points at.

    Returns None for paths that point at something finer than a definition
    (a name, a type, a field number) or at an unsupported element.
    """
    position = file
    steps = iter(path)
    for tag in steps:
        attribute = _CHILDREN.get(type(position), {}).get(tag)
        if attribute is None:
            return None
        index = next(steps, None)
        if index is None:
            return None
        position = getattr(position, attribute)[index]
    return position


class SourceCodeInfo:
    """Source locations indexed by the definitions they belong to."""

    def __init__(self, files: Iterable) -> None:
        self._lookup: dict[int, tuple[object, object]] = {}
        for file in files:
            for location in file.source_code_info.location:
                definition = definition_at_path(file, location.path)
                if definition is not None:
                    self._lookup[id(definition)] = (definition, location)

    def location(self, definition):
        """Return the source location of this exact definition, or None."""
        entry = self._lookup.get(id(definition))
        if entry is None or entry[0] is not definition:
            return None
        return entry[1]


def format_title_and_description(
    name: str | None,
    location,
    delimiter: str = "  ",
    keep_newlines: bool = False,
) -> tuple[str, str]:
    """Build a (title, description) pair from a name and its comments."""
    title = title_from_name(name) if name is not None else ""
    comments: list[str] = []

    for detached in location.leading_detached_comments:
        stripped = detached.strip()
        if stripped:
            comments.append(stripped)
            title = stripped

    for comment in (location.leading_comments, location.trailing_comments):
        stripped = comment.strip()
        if stripped:
            comments.append(stripped)

    description = delimiter.join(comments)
    if not keep_newlines:
        description = description.replace("\n", "")
    return title, description