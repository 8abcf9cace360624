"""Core data models used across catalog, parser, executor, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

QUERY_MARKER = "?"


class AccessMode(str, Enum):
    READ_ONLY = "read"
    READ_WRITE = "readwrite"


@dataclass(frozen=True)
class CatalogEntry:
    """One declarative catalog line, before channel expansion."""

    path: str
    mode: AccessMode
    domain: tuple[str, ...] | None = None
    comment: str = ""


@dataclass(frozen=True)
class ParameterDefinition:
    path: str
    short_id: str
    camel_id: str
    mode: AccessMode
    domain: tuple[str, ...] | None = None
    comment: str = ""


@dataclass(frozen=True)
class Request:
    definition: ParameterDefinition
    arguments: tuple[str, ...] = ()
    query: bool = False

    def command_text(self) -> str:
        """Text written to the device link for this request."""
        if self.query:
            return f"{self.definition.path}{QUERY_MARKER}"
        return f"{self.definition.path} {self.arguments[0]}"


@dataclass(frozen=True)
class CacheEntry:
    value: bytes
    timestamp: float


@dataclass(frozen=True)
class Catalog:
    definitions: tuple[ParameterDefinition, ...]
    by_id: Mapping[str, ParameterDefinition] = field(default_factory=lambda: MappingProxyType({}))
    by_path: Mapping[str, ParameterDefinition] = field(default_factory=lambda: MappingProxyType({}))
    by_folded_path: Mapping[str, ParameterDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def lookup_by_path(self, name: str) -> ParameterDefinition | None:
        key = name.strip()
        if key.endswith(QUERY_MARKER):
            key = key[: -len(QUERY_MARKER)]
        definition = self.by_path.get(key)
        if definition is None:
            definition = self.by_folded_path.get(key.upper())
        return definition

    def lookup_by_id(self, identifier: str) -> ParameterDefinition | None:
        # str() of an enum member is its qualified name, not its value.
        return self.by_id.get(str(getattr(identifier, "value", identifier)))

    def __iter__(self):
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)
