"""Unit tests for settings loading (fstree.config)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from fstree.config import ModeConfig, Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.walk.threads == 1
        assert settings.modes.file == 0o666
        assert settings.modes.dir == 0o777
        assert settings.json_io.indent is None
        assert settings.json_io.ensure_ascii is False
        assert settings.move.cross_device_fallback is True

    def test_yaml_file_in_working_directory(self, tmp_path):
        (tmp_path / "fstree.yaml").write_text("walk:\n  threads: 4\nmodes:\n  dir: '750'\n")
        settings = get_settings()
        assert settings.walk.threads == 4
        assert settings.modes.dir == 0o750

    def test_config_file_from_environment(self, tmp_path, monkeypatch):
        config = tmp_path / "elsewhere.yaml"
        config.write_text("json_io:\n  indent: 2\n")
        monkeypatch.setenv("FSTREE_CONFIG_FILE", str(config))
        assert get_settings().json_io.indent == 2

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "fstree.yaml").write_text("walk:\n  threads: 4\n")
        monkeypatch.setenv("FSTREE_WALK__THREADS", "8")
        assert get_settings().walk.threads == 8

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_threads_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(walk={"threads": 0})

    @pytest.mark.parametrize(("raw", "expected"), [("0o640", 0o640), ("0640", 0o640), (0o600, 0o600)])
    def test_mode_accepts_octal(self, raw, expected):
        assert ModeConfig(file=raw).file == expected

    def test_mode_out_of_range(self):
        with pytest.raises(ValidationError):
            ModeConfig(dir=0o17777)

    def test_yaml_integer_modes_are_octal(self, tmp_path):
        (tmp_path / "fstree.yaml").write_text("modes:\n  file: 644\n  dir: 0750\nwalk:\n  threads: 2\n")
        settings = get_settings()
        assert settings.modes.file == 0o644
        assert settings.modes.dir == 0o750
        assert settings.walk.threads == 2

    def test_environment_modes_are_octal(self, monkeypatch):
        monkeypatch.setenv("FSTREE_MODES__FILE", "600")
        assert get_settings().modes.file == 0o600

    @pytest.mark.parametrize("raw", ["rwx", "9", True])
    def test_mode_rejects_invalid(self, raw):
        with pytest.raises(ValidationError):
            ModeConfig(file=raw)


def test_configure_logging_accepts_level_names():
    import structlog

    from fstree.log import configure_logging

    configure_logging("warning")
    try:
        structlog.get_logger().info("filtered.out")
        structlog.get_logger().warning("shown", key="value")
    finally:
        structlog.reset_defaults()
