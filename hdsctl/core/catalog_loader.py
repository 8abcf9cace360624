"""Catalog loading and validation for YAML command catalogs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from hdsctl.core.catalog import build_catalog
from hdsctl.core.config import Settings
from hdsctl.core.documents import config_home, read_yaml, validate_document
from hdsctl.core.errors import CatalogLoadError, CatalogValidationError
from hdsctl.core.fields import Field
from hdsctl.core.model import AccessMode, Catalog, CatalogEntry

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedCatalog:
    catalog: Catalog
    warnings: tuple[str, ...]


def _user_catalog_dir() -> Path:
    return config_home() / "catalogs"


def _build_entries(doc: dict[str, Any], source: Path | Traversable) -> list[CatalogEntry]:
    validate_document(doc, "catalog.schema.json", source, validation_error=CatalogValidationError)
    entries: list[CatalogEntry] = []
    for command in doc["commands"]:
        domain = command.get("domain")
        entries.append(
            CatalogEntry(
                path=command["path"],
                mode=AccessMode(command["mode"]),
                domain=tuple(domain) if domain is not None else None,
                comment=command.get("comment", ""),
            )
        )
    return entries


def _iter_packaged_catalog_paths() -> list[Traversable]:
    catalog_root = resources.files("hdsctl.catalogs")
    return [item for item in catalog_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_catalog_paths() -> list[Path]:
    directory = _user_catalog_dir()
    if not directory.exists() or not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"})


def _read_entries(path: Path | Traversable) -> list[CatalogEntry]:
    doc = read_yaml(path, load_error=CatalogLoadError, validation_error=CatalogValidationError)
    return _build_entries(doc, path)


def load_catalog_entries() -> tuple[list[CatalogEntry], tuple[str, ...]]:
    """Packaged entries followed by user entries; a user path replaces a packaged one."""
    entries: dict[str, CatalogEntry] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_catalog_paths(), key=lambda p: p.name):
        for entry in _read_entries(path):
            if entry.path in entries:
                raise CatalogValidationError(f"Duplicate command '{entry.path}' in packaged catalog {path.name}")
            entries[entry.path] = entry

    for path in _iter_user_catalog_paths():
        for entry in _read_entries(path):
            if entry.path in entries:
                warning = f"User catalog {path.name} overrides packaged command '{entry.path}'"
                LOGGER.warning(warning)
                warnings.append(warning)
            entries[entry.path] = entry

    return list(entries.values()), tuple(warnings)


def load_catalog(settings: Settings | None = None) -> LoadedCatalog:
    settings = settings or Settings()
    entries, warnings = load_catalog_entries()
    catalog = build_catalog(entries, settings.channels)

    missing = [field.value for field in Field if catalog.lookup_by_id(field) is None]
    if missing:
        raise CatalogValidationError(f"Catalog does not define required fields: {', '.join(missing)}")

    return LoadedCatalog(catalog=catalog, warnings=warnings)
