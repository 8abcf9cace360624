from __future__ import annotations

from pathlib import Path

import pytest

from hdsctl.core.config import Settings, load_settings
from hdsctl.core.errors import ConfigError


def test_missing_file_gives_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("HDSCTL_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    settings = load_settings()
    assert settings == Settings()
    assert settings.cache_ttl_s == 0.5
    assert settings.channels == (1, 2)


def test_file_overrides_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config = tmp_path / "hdsctl.yaml"
    config.write_text(
        """
channels: [1, 2, 3, 4]
throttle_s: 0.02
identity_prefix: "OWON,HDS3"
""",
        encoding="utf-8",
    )
    monkeypatch.setenv("HDSCTL_CONFIG", str(config))

    settings = load_settings()
    assert settings.channels == (1, 2, 3, 4)
    assert settings.throttle_s == 0.02
    assert settings.identity_prefix == "OWON,HDS3"
    assert settings.cache_ttl_s == 0.5


def test_unknown_key_rejected(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("cache_ttl: 1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(config)


def test_non_mapping_rejected(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(config)
