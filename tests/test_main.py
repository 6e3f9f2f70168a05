"""
End-to-end tests for the command line flow with a fake mount system.
"""

import asyncio
from pathlib import Path
from textwrap import dedent

import pytest

from nfs_mount import dependencies
from nfs_mount.config import Settings
from nfs_mount.main import (
    ACTION_MOUNT,
    ACTION_REMOVE_AUTOMOUNT,
    ACTION_SETUP_AUTOMOUNT,
    ACTION_UNMOUNT_ALL,
    main,
    run,
)
from nfs_mount.services.network_mount.macos_mounter import MacOSMounter


@pytest.fixture
def settings(tmp_path) -> Settings:
    fstab = tmp_path / "etc" / "fstab"
    fstab.parent.mkdir()
    fstab.write_text("LABEL=Data /Volumes/Data apfs rw 0 2\n", encoding="utf-8")
    return Settings(config_dir=tmp_path / "nfs-mount", fstab_path=fstab)


@pytest.fixture
def wired(fake_system):
    """Route every service through the fake system and the macOS option builder."""
    dependencies._singletons["command_runner"] = fake_system
    dependencies._singletons["mounter"] = MacOSMounter()
    return fake_system


def write_config(settings: Settings, base_mount_dir: Path, retries: int = 3) -> None:
    settings.config_file.parent.mkdir(parents=True, exist_ok=True)
    settings.config_file.write_text(dedent(f"""\
        settings:
          base_mount_dir: "{base_mount_dir}"
          max_retries: {retries}
          retry_delay: 0
        mounts:
          - server: "10.0.0.5"
            share: "/export/x"
            nfs_version: "3"
            mount_name: "nas"
            enabled: true
          - server: "10.0.0.6"
            share: "/export/old"
            nfs_version: "4"
            mount_name: "old"
            enabled: false
    """), encoding="utf-8")


class TestRunMount:
    def test_mounts_enabled_entries(self, settings, wired, base_mount_dir):
        write_config(settings, base_mount_dir)

        exit_code = asyncio.run(run(ACTION_MOUNT, settings, silent=True))

        assert exit_code == 0
        assert str(base_mount_dir / "nas") in wired.mounted
        assert str(base_mount_dir / "old") not in wired.mounted
        assert (base_mount_dir / "nas").is_dir()

    def test_failed_mount_gives_non_zero_exit(self, settings, wired, base_mount_dir):
        write_config(settings, base_mount_dir, retries=1)
        wired.mount_failures = 1000

        exit_code = asyncio.run(run(ACTION_MOUNT, settings, silent=True))

        assert exit_code == 1
        log = settings.log_file_path.read_text(encoding="utf-8")
        assert "ERROR: Failed to mount: 1" in log

    def test_uncreatable_base_dir_gives_non_zero_exit(self, settings, wired, base_mount_dir):
        base_mount_dir.parent.mkdir(parents=True, exist_ok=True)
        base_mount_dir.write_text("not a directory", encoding="utf-8")
        write_config(settings, base_mount_dir)

        exit_code = asyncio.run(run(ACTION_MOUNT, settings, silent=True))

        assert exit_code == 1
        assert wired.mount_calls == []
        log = settings.log_file_path.read_text(encoding="utf-8")
        assert f"ERROR: Cannot create base directory {base_mount_dir}" in log

    def test_first_run_bootstraps_config(self, settings, wired):
        exit_code = asyncio.run(run(ACTION_MOUNT, settings, silent=True))

        assert exit_code == 1
        assert settings.config_file.exists()
        assert wired.mount_calls == []
        assert "CONFIGURATION REQUIRED" in settings.log_file_path.read_text(encoding="utf-8")

    def test_missing_sudo_is_only_a_warning(self, settings, wired, base_mount_dir, monkeypatch):
        monkeypatch.setattr("nfs_mount.services.privilege_checker.needs_elevation", lambda: True)
        write_config(settings, base_mount_dir)
        wired.sudo_available = False

        exit_code = asyncio.run(run(ACTION_MOUNT, settings, silent=True))

        assert exit_code == 0
        assert "WARNING: Passwordless sudo is not configured" in settings.log_file_path.read_text(
            encoding="utf-8"
        )


class TestRunOtherActions:
    def test_unmount_all(self, settings, wired, base_mount_dir):
        write_config(settings, base_mount_dir)
        (base_mount_dir / "nas").mkdir(parents=True)
        wired.add_mount(base_mount_dir / "nas")

        exit_code = asyncio.run(run(ACTION_UNMOUNT_ALL, settings, silent=True))

        assert exit_code == 0
        assert wired.mounted == {}

    def test_setup_then_remove_automount(self, settings, wired, base_mount_dir):
        write_config(settings, base_mount_dir)
        original = settings.fstab_path.read_text(encoding="utf-8")

        assert asyncio.run(run(ACTION_SETUP_AUTOMOUNT, settings, silent=True)) == 0
        content = settings.fstab_path.read_text(encoding="utf-8")
        assert f"10.0.0.5:/export/x {base_mount_dir / 'nas'} nfs" in content
        assert "10.0.0.6:/export/old" not in content

        assert asyncio.run(run(ACTION_REMOVE_AUTOMOUNT, settings, silent=True)) == 0
        assert settings.fstab_path.read_text(encoding="utf-8") == original
        backups = sorted(settings.fstab_path.parent.glob("fstab.backup.*"))
        assert len(backups) == 2


class TestArgumentParsing:
    def test_help_shows_resolved_paths(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("NFS_MOUNT_CONFIG_DIR", str(tmp_path / "cfg"))

        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert str(tmp_path / "cfg" / "config.yaml") in out
        assert str(tmp_path / "cfg" / "nfs-mount.log") in out
        assert "--unmount-all" in out

    def test_actions_are_mutually_exclusive(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NFS_MOUNT_CONFIG_DIR", str(tmp_path / "cfg"))

        with pytest.raises(SystemExit) as exc_info:
            main(["--unmount-all", "--setup-automount"])

        assert exc_info.value.code == 2

    def test_silent_run_with_config_override(self, tmp_path, monkeypatch, wired, base_mount_dir, capsys):
        monkeypatch.setenv("NFS_MOUNT_CONFIG_DIR", str(tmp_path / "cfg"))
        config_file = tmp_path / "elsewhere.yaml"
        write_config(Settings(config_dir=tmp_path / "cfg", config_file=config_file), base_mount_dir)

        exit_code = main(["--silent", "--config", str(config_file)])

        assert exit_code == 0
        assert str(base_mount_dir / "nas") in wired.mounted
        assert capsys.readouterr().out == ""
