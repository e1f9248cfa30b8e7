"""Tests for ahrefs_cli.config -- XDG paths, atomic writes, key storage and precedence."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from ahrefs_cli.config import (
    _atomic_write,
    clear_api_key,
    config_path,
    get_config_dir,
    get_data_dir,
    load_api_key,
    load_config,
    mask_api_key,
    resolve_api_key,
    resolve_base_url,
    save_api_key,
    save_config,
)
from ahrefs_cli.exceptions import ConfigError
from ahrefs_cli.models import DEFAULT_BASE_URL, StoredConfig


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------


class TestDirectories:
    def test_config_dir_under_xdg(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "ahrefs"
        assert get_config_dir().is_dir()

    def test_data_dir_under_xdg(self, isolated_config: Path) -> None:
        assert get_data_dir() == isolated_config / "data" / "ahrefs"
        assert get_data_dir().is_dir()

    def test_fallback_on_other_platforms(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ahrefs_cli.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".ahrefs"
        assert get_data_dir() == tmp_path / ".ahrefs" / "logs"

    def test_config_path(self, isolated_config: Path) -> None:
        assert config_path() == isolated_config / "config" / "ahrefs" / "config.json"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_with_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, "data")
        assert target.read_text() == "data"
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600

    def test_replaces_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_text("old")
        _atomic_write(target, "new")
        assert target.read_text() == "new"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        _atomic_write(tmp_path / "file.json", "x")
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]

    def test_temp_file_removed_on_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("ahrefs_cli.config.os.replace", _boom)
        with pytest.raises(OSError):
            _atomic_write(tmp_path / "file.json", "x")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Stored config
# ---------------------------------------------------------------------------


class TestStoredConfig:
    def test_missing_file_is_empty(self, isolated_config: Path) -> None:
        assert load_config() == StoredConfig()
        assert load_api_key() == ""

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        path = save_api_key("  sk_live_123456789  ")
        assert path == config_path()
        assert json.loads(path.read_text()) == {"api_key": "sk_live_123456789"}
        assert load_api_key() == "sk_live_123456789"

    def test_file_is_owner_only(self, isolated_config: Path) -> None:
        path = save_api_key("sk_live_123456789")
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_unknown_keys_preserved(self, isolated_config: Path) -> None:
        config_path().write_text(json.dumps({"api_key": "old", "team": "seo"}))
        save_api_key("new-key-value")
        assert json.loads(config_path().read_text()) == {"api_key": "new-key-value", "team": "seo"}

    def test_empty_key_rejected(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="must not be empty"):
            save_api_key("   ")

    def test_invalid_json(self, isolated_config: Path) -> None:
        config_path().write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid config") as exc_info:
            load_config()
        assert exc_info.value.suggestion

    def test_invalid_shape(self, isolated_config: Path) -> None:
        config_path().write_text(json.dumps({"api_key": ["a"]}))
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_clear_key(self, isolated_config: Path) -> None:
        save_api_key("sk_live_123456789")
        assert clear_api_key() is True
        assert load_api_key() == ""
        assert clear_api_key() is False

    def test_save_config_unwritable(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _boom(*args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr("ahrefs_cli.config._atomic_write", _boom)
        with pytest.raises(ConfigError, match="Cannot write config"):
            save_config(StoredConfig(api_key="x"))


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveAPIKey:
    def test_flag_wins(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_api_key("from-file")
        monkeypatch.setenv("AHREFS_API_KEY", "from-env")
        assert resolve_api_key("from-flag") == "from-flag"

    def test_env_over_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_api_key("from-file")
        monkeypatch.setenv("AHREFS_API_KEY", "from-env")
        assert resolve_api_key() == "from-env"

    def test_file_fallback(self, isolated_config: Path) -> None:
        save_api_key("from-file")
        assert resolve_api_key(None) == "from-file"

    def test_nothing_configured(self, isolated_config: Path) -> None:
        assert resolve_api_key() == ""

    def test_empty_env_ignored(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_api_key("from-file")
        monkeypatch.setenv("AHREFS_API_KEY", "")
        assert resolve_api_key() == "from-file"


class TestResolveBaseURL:
    def test_default(self, isolated_config: Path) -> None:
        assert resolve_base_url() == DEFAULT_BASE_URL

    def test_env_override(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AHREFS_BASE_URL", "http://localhost:8080/v3")
        assert resolve_base_url() == "http://localhost:8080/v3"


class TestMaskAPIKey:
    def test_long_key(self) -> None:
        assert mask_api_key("sk_live_abcdef123456") == "sk_l****3456"

    def test_short_key(self) -> None:
        assert mask_api_key("12345678") == "****"
        assert mask_api_key("") == "****"
