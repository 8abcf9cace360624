"""Command catalog construction: channel expansion and identifier derivation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from types import MappingProxyType

from hdsctl.core.errors import CatalogValidationError
from hdsctl.core.model import Catalog, CatalogEntry, ParameterDefinition

CHANNEL_PLACEHOLDER = "<n>"
_SKIPPED_SEPARATORS = {":", "*"}


def scpi_to_camel(path: str) -> str:
    """Derive the camel-case field identifier of a mnemonic.

    Lowercase letters and separators are dropped. A retained character that
    directly follows a ``:`` starts a new segment and is uppercased, except at
    position 1 (the first segment after a leading separator); every other
    retained character is lowercased. ``:CH1:DISPlay`` becomes ``ch1Disp``.
    """
    result = []
    for i, char in enumerate(path):
        if char.islower() or char in _SKIPPED_SEPARATORS:
            continue
        if i > 1 and path[i - 1] == ":":
            result.append(char.upper())
        else:
            result.append(char.lower())
    return "".join(result)


def scpi_to_short(path: str) -> str:
    """Abbreviated mnemonic form: ``:CH1:DISPlay`` becomes ``:CH1:DISP``."""
    return "".join(char for char in path if not char.islower())


def expand_entry(entry: CatalogEntry, channels: Sequence[int]) -> list[ParameterDefinition]:
    definitions: list[ParameterDefinition] = []
    for channel in channels:
        path = entry.path.replace(CHANNEL_PLACEHOLDER, str(channel))
        definitions.append(
            ParameterDefinition(
                path=path,
                short_id=scpi_to_short(path),
                camel_id=scpi_to_camel(path),
                mode=entry.mode,
                domain=entry.domain,
                comment=entry.comment.replace(CHANNEL_PLACEHOLDER, str(channel)),
            )
        )
        if path == entry.path:
            break
    return definitions


def build_catalog(entries: Iterable[CatalogEntry], channels: Sequence[int] = (1, 2)) -> Catalog:
    """Build an immutable catalog from declarative entries.

    Paths, short forms and camel identifiers must be unique across the
    expanded catalog. Case-folded paths and short forms are indexed as a
    fallback for mnemonics typed in a different case.
    """
    if not channels:
        raise CatalogValidationError("At least one channel index is required")

    definitions: list[ParameterDefinition] = []
    by_id: dict[str, ParameterDefinition] = {}
    by_path: dict[str, ParameterDefinition] = {}
    by_folded_path: dict[str, ParameterDefinition] = {}

    for entry in entries:
        for definition in expand_entry(entry, channels):
            if definition.camel_id in by_id:
                other = by_id[definition.camel_id]
                raise CatalogValidationError(
                    f"Identifier '{definition.camel_id}' of {definition.path} collides with {other.path}"
                )
            for key in {definition.path, definition.short_id}:
                other = by_path.get(key)
                if other is not None:
                    raise CatalogValidationError(
                        f"Mnemonic '{key}' of {definition.path} collides with {other.path}"
                    )
            by_id[definition.camel_id] = definition
            by_path[definition.path] = definition
            by_path[definition.short_id] = definition
            for key in (definition.path, definition.short_id):
                by_folded_path.setdefault(key.upper(), definition)
            definitions.append(definition)

    return Catalog(
        definitions=tuple(definitions),
        by_id=MappingProxyType(by_id),
        by_path=MappingProxyType(by_path),
        by_folded_path=MappingProxyType(by_folded_path),
    )
