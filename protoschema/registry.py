"""Registry of proto packages and the messages and enums they declare."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from google.protobuf import descriptor_pb2

logger = logging.getLogger(__name__)

Message = descriptor_pb2.DescriptorProto
Enum = descriptor_pb2.EnumDescriptorProto


class ProtoPackage:
    """A node in the package tree holding message and enum declarations."""

    def __init__(self, name: str, parent: ProtoPackage | None = None) -> None:
        self.name = name if parent is None else f"{parent.name}.{name}"
        self.parent = parent
        self.children: dict[str, ProtoPackage] = {}
        self.types: dict[str, Message] = {}
        self.enums: dict[str, Enum] = {}

    def ancestry(self) -> Iterator[ProtoPackage]:
        """Yield this package and then each of its parents."""
        package: ProtoPackage | None = self
        while package is not None:
            yield package
            package = package.parent

    def __repr__(self) -> str:
        return f"ProtoPackage({self.name!r})"


def _nested_type(message: Message, name: str) -> Message | None:
    for component in name.split("."):
        found = next((n for n in message.nested_type if n.name == component), None)
        if found is None:
            logger.debug("no nested message %s in %s", component, message.name)
            return None
        message = found
    return message


def _nested_enum(message: Message, name: str) -> Enum | None:
    *path, enum_name = name.split(".")
    parent: Message | None = message
    if path:
        parent = _nested_type(message, ".".join(path))
        if parent is None:
            return None
    return next((e for e in parent.enum_type if e.name == enum_name), None)


class PackageRegistry:
    """The package tree built from every file in a generator request."""

    def __init__(self) -> None:
        self.root = ProtoPackage("")

    def _package_for(self, package_name: str) -> ProtoPackage:
        package = self.root
        if package_name:
            for node in package_name.split("."):
                if package is self.root and node == "":
                    continue
                child = package.children.get(node)
                if child is None:
                    child = ProtoPackage(node, package)
                    package.children[node] = child
                package = child
        return package

    def register_message(self, package_name: str, message: Message) -> None:
        """Record a top-level message under the given dotted package."""
        self._package_for(package_name).types[message.name] = message

    def register_enum(self, package_name: str, enum: Enum) -> None:
        """Record a top-level enum under the given dotted package."""
        self._package_for(package_name).enums[enum.name] = enum

    def _relative(
        self,
        package: ProtoPackage,
        name: str,
        table: Callable[[ProtoPackage], dict],
        nested: Callable[[Message, str], object],
    ):
        head, separator, rest = name.partition(".")
        if not separator:
            found = table(package).get(head)
            return None if found is None else (found, package.name)
        child = package.children.get(head)
        if child is not None:
            return self._relative(child, rest, table, nested)
        message = package.types.get(head)
        if message is not None:
            found = nested(message, rest)
            return None if found is None else (found, package.name)
        logger.debug("no package or message %s in %r", head, package.name)
        return None

    def _lookup(self, package, name, table, nested):
        if name.startswith("."):
            return self._relative(self.root, name[1:], table, nested)
        if package is None:
            return None
        for candidate in package.ancestry():
            found = self._relative(candidate, name, table, nested)
            if found is not None:
                return found
        return None

    def lookup_type(
        self, package: ProtoPackage | None, name: str
    ) -> tuple[Message, str] | None:
        """Resolve a message name from a package scope.

        Returns (message, package name) or None when nothing matches.
        """
        return self._lookup(package, name, lambda p: p.types, _nested_type)

    def lookup_enum(
        self, package: ProtoPackage | None, name: str
    ) -> tuple[Enum, str] | None:
        """Resolve an enum name from a package scope.

        Returns (enum, package name) or None when nothing matches.
        """
        return self._lookup(package, name, lambda p: p.enums, _nested_enum)

    def lookup_package(self, name: str) -> ProtoPackage | None:
        """Find a registered package by its dotted name."""
        package = self.root
        for component in name.split("."):
            package = package.children.get(component)
            if package is None:
                return None
        return package