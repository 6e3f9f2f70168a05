"""
Config Loader - reads and validates the YAML mount document.

On first run no config file exists; a template full of placeholder values
is written and loading fails, so nothing is ever mounted from example data.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from ..core.exceptions import ConfigError
from ..logging_config import log_success
from ..models import MountConfig, MountSettings, MountSpec

CONFIG_TEMPLATE = """\
# NFS Mount Configuration
# Please replace the example values with your actual NFS server details

mounts:
  - server: "example.local"
    share: "/mnt/tank/example"
    nfs_version: "4"
    mount_name: "example-share"
    enabled: true
"""

EXAMPLE_ENTRY = """\
    mounts:
      - server: "192.168.1.100"
        share: "/mnt/pool/myshare"
        nfs_version: "4"
        mount_name: "my-nas-share"
        enabled: true"""

PLACEHOLDER_SERVERS = {"example.local", "{nfs_server}"}
PLACEHOLDER_SHARES = {"{nfs_share}"}
PLACEHOLDER_MOUNT_NAMES = {"{mount_name}"}
EXAMPLE_MOUNT_NAME = "example-share"

MOUNT_NAME_HINT = "Mount names should only contain letters, numbers, hyphens, and underscores"


def is_placeholder_entry(entry: Dict[str, Any]) -> bool:
    """True if a raw mount entry still carries template/example values."""
    server = str(entry.get("server") or "")
    share = str(entry.get("share") or "")
    mount_name = str(entry.get("mount_name") or "")
    return (
        server in PLACEHOLDER_SERVERS
        or share in PLACEHOLDER_SHARES
        or mount_name in PLACEHOLDER_MOUNT_NAMES
        or ("example" in share and mount_name == EXAMPLE_MOUNT_NAME)
    )


def _format_validation_error(index: int, error: ValidationError) -> List[str]:
    messages = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "entry"
        if detail["type"] == "missing":
            messages.append(f"Mount entry {index}: missing '{field}' field")
        elif detail["type"] in ("nfs_version", "mount_name"):
            messages.append(f"Mount entry {index}: {detail['msg']}")
        else:
            messages.append(f"Mount entry {index}: {field}: {detail['msg']}")
    return messages


class ConfigLoader:
    """Loads the mount document from a YAML file."""

    def __init__(self, config_file: Union[str, Path]):
        self.config_file = Path(config_file)

    def ensure_config_exists(self) -> None:
        """Write the placeholder template on first run and stop with instructions."""
        if self.config_file.exists():
            return

        config_dir = self.config_file.parent
        if not config_dir.is_dir():
            logging.info(f"Creating config directory: {config_dir}")
            config_dir.mkdir(parents=True, exist_ok=True)

        logging.warning("Configuration file not found!")
        logging.info(f"Creating default configuration at: {self.config_file}")
        self.config_file.write_text(CONFIG_TEMPLATE, encoding="utf-8")

        raise ConfigError(
            f"CONFIGURATION REQUIRED: a default configuration has been created at {self.config_file}",
            hint=(
                "Please edit this file and replace the example values with your actual "
                f"NFS server details. Example configuration format:\n\n{EXAMPLE_ENTRY}"
            ),
        )

    def _read_document(self) -> Dict[str, Any]:
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Configuration file is not valid YAML: {self.config_file}", errors=[str(e)]) from e
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file: {self.config_file}", errors=[str(e)]) from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigError(f"Configuration file is not valid YAML: {self.config_file}",
                              errors=["top level must be a mapping"])
        return document

    def _load_settings(self, document: Dict[str, Any]) -> MountSettings:
        raw_settings = document.get("settings") or {}
        if not isinstance(raw_settings, dict):
            raise ConfigError("Invalid 'settings' section", errors=["'settings' must be a mapping"])
        try:
            return MountSettings.model_validate(raw_settings)
        except ValidationError as e:
            errors = [
                f"settings.{'.'.join(str(part) for part in d['loc'])}: {d['msg']}" for d in e.errors()
            ]
            raise ConfigError("Invalid 'settings' section", errors=errors) from e

    def _load_mounts(self, raw_mounts: List[Any]) -> List[MountSpec]:
        specs: List[MountSpec] = []
        errors: List[str] = []
        bad_mount_name = False
        for index, entry in enumerate(raw_mounts):
            if not isinstance(entry, dict):
                errors.append(f"Mount entry {index}: must be a mapping")
                continue
            try:
                specs.append(MountSpec.model_validate(entry))
            except ValidationError as e:
                errors.extend(_format_validation_error(index, e))
                bad_mount_name = bad_mount_name or any(
                    detail["type"] == "mount_name" for detail in e.errors()
                )

        if errors:
            raise ConfigError(
                f"Configuration validation failed with {len(errors)} error(s)",
                errors=errors,
                hint=MOUNT_NAME_HINT if bad_mount_name else None,
            )

        seen: Dict[str, int] = {}
        duplicates = []
        for index, spec in enumerate(specs):
            if spec.mount_name in seen:
                duplicates.append(
                    f"Mount entry {index}: mount_name '{spec.mount_name}' already used by entry {seen[spec.mount_name]}"
                )
            else:
                seen[spec.mount_name] = index
        if duplicates:
            raise ConfigError("Duplicate mount names in configuration", errors=duplicates)

        return specs

    def load_settings(self) -> MountSettings:
        """Read only the settings block, e.g. to show resolved paths in --help."""
        return self._load_settings(self._read_document())

    def load(self) -> MountConfig:
        """Load, validate and return the mount document. Raises ConfigError."""
        self.ensure_config_exists()
        logging.info("Validating configuration...")

        document = self._read_document()
        settings = self._load_settings(document)

        raw_mounts = document.get("mounts")
        if raw_mounts is None:
            raise ConfigError("Configuration file missing 'mounts' section")
        if not isinstance(raw_mounts, list):
            raise ConfigError("Configuration 'mounts' section must be a list")
        if not raw_mounts:
            raise ConfigError("No mounts defined in configuration")

        if any(isinstance(entry, dict) and is_placeholder_entry(entry) for entry in raw_mounts):
            raise ConfigError(
                "EXAMPLE DATA DETECTED: your configuration file still contains example/placeholder values!",
                hint=f"Please edit the configuration file and replace with actual values: {self.config_file}",
            )

        config = MountConfig(settings=settings, mounts=self._load_mounts(raw_mounts))
        log_success("Configuration validated successfully")
        return config


def load_config(config_file: Union[str, Path]) -> MountConfig:
    return ConfigLoader(config_file).load()
