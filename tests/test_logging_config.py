"""
Tests for logging setup: log trimming, file format and silent mode.
"""

import logging
import re

import pytest
from rich.logging import RichHandler

from nfs_mount.config import Settings
from nfs_mount.logging_config import START_MARKER, log_success, setup_logging, trim_log_file


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(config_dir=tmp_path / "nfs-mount")


class TestTrimLogFile:
    def test_keeps_last_lines(self, tmp_path):
        log_file = tmp_path / "nfs-mount.log"
        log_file.write_text("".join(f"line {i}\n" for i in range(250)), encoding="utf-8")

        trim_log_file(log_file, 100)

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 100
        assert lines[0] == "line 150"
        assert lines[-1] == "line 249"

    def test_short_file_untouched(self, tmp_path):
        log_file = tmp_path / "nfs-mount.log"
        log_file.write_text("a\nb\n", encoding="utf-8")

        trim_log_file(log_file, 100)

        assert log_file.read_text(encoding="utf-8") == "a\nb\n"

    def test_missing_file(self, tmp_path):
        trim_log_file(tmp_path / "missing.log", 100)

        assert not (tmp_path / "missing.log").exists()


class TestSetupLogging:
    def test_file_format_and_start_marker(self, settings):
        setup_logging(settings, silent=True)
        logging.warning("Already mounted: nas")
        log_success("Mounted: nas")

        lines = settings.log_file_path.read_text(encoding="utf-8").splitlines()
        pattern = r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] "
        assert re.match(pattern + re.escape(f"INFO: {START_MARKER}") + "$", lines[0])
        assert re.match(pattern + "WARNING: Already mounted: nas$", lines[1])
        assert re.match(pattern + "SUCCESS: Mounted: nas$", lines[2])

    def test_silent_mode_has_no_console_handler(self, settings):
        setup_logging(settings, silent=True)

        assert not any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)

    def test_interactive_mode_has_console_handler(self, settings):
        setup_logging(settings, silent=False)

        assert any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)

    def test_log_trimmed_on_startup(self, settings):
        settings.log_file_path.parent.mkdir(parents=True)
        settings.log_file_path.write_text("old\n" * 500, encoding="utf-8")

        setup_logging(settings, silent=True)

        lines = settings.log_file_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 101
        assert lines[-1].endswith(START_MARKER)


class TestSettingsPaths:
    def test_derived_paths(self, tmp_path):
        settings = Settings(config_dir=tmp_path / "cfg")

        assert settings.config_file == tmp_path / "cfg" / "config.yaml"
        assert settings.log_file_path == tmp_path / "cfg" / "nfs-mount.log"
        assert settings.log_directory == tmp_path / "cfg"

    def test_environment_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NFS_MOUNT_CONFIG_FILE", str(tmp_path / "other.yaml"))

        settings = Settings(config_dir=tmp_path / "cfg")

        assert settings.config_file == tmp_path / "other.yaml"
