"""Runtime settings with an optional YAML override file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from hdsctl.core.documents import config_home, read_yaml, validate_document
from hdsctl.core.errors import ConfigError

LOGGER = logging.getLogger(__name__)
CONFIG_ENV = "HDSCTL_CONFIG"


@dataclass(frozen=True)
class Settings:
    channels: tuple[int, ...] = (1, 2)
    cache_ttl_s: float = 0.5
    throttle_s: float = 0.01
    vendor_id: int = 0x5345
    product_id: int = 0x1234
    out_endpoint: int = 0x01
    in_endpoint: int = 0x81
    timeout_s: float = 1.0
    read_size: int = 10000
    identity_prefix: str = "OWON,HDS2"
    status_head_path: str = ":DATa:WAVe:SCReen:HEAD"
    bulk_data_prefix: str = ":DATa:WAVe:SCReen:"
    bulk_data_min_length: int = 100
    frame_prefix_length: int = 4
    # screen pixels per vertical division
    offset_divisor: float = 25.0
    poll_interval_s: float = 0.15


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    return config_home() / "config.yaml"


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from `path` (or the default location); missing file means defaults."""
    source = path or config_path()
    if not source.exists():
        LOGGER.debug("No settings file at %s, using defaults", source)
        return Settings()

    doc = read_yaml(source, load_error=ConfigError, validation_error=ConfigError)
    validate_document(doc, "config.schema.json", source, validation_error=ConfigError)

    overrides = dict(doc)
    if "channels" in overrides:
        overrides["channels"] = tuple(overrides["channels"])
    LOGGER.debug("Loaded settings overrides from %s: %s", source, sorted(overrides))
    return replace(Settings(), **overrides)
