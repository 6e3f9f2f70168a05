"""
NFS Mount Manager

Mounts NFS shares from a YAML configuration file, unmounts them again and
can persist them in /etc/fstab for mounting on boot. Use --silent for
unattended runs (launchd, Keyboard Maestro, cron): nothing is printed but
everything still goes to the log file.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .config import Settings
from .core.exceptions import ConfigError, FstabError, PrivilegeError
from .dependencies import (
    get_config_loader,
    get_fstab_editor,
    get_mount_executor,
    get_privilege_checker,
    get_settings,
    get_unmount_executor,
)
from .logging_config import setup_logging
from .models import DEFAULT_BASE_MOUNT_DIR, MountSettings
from .services.network_mount import UnsupportedPlatformError

ACTION_MOUNT = "mount"
ACTION_UNMOUNT_ALL = "unmount_all"
ACTION_SETUP_AUTOMOUNT = "setup_automount"
ACTION_REMOVE_AUTOMOUNT = "remove_automount"

HEADERS = {
    ACTION_MOUNT: "NFS Mount Manager",
    ACTION_UNMOUNT_ALL: "Unmounting All NFS Shares",
    ACTION_SETUP_AUTOMOUNT: "Setting Up Auto-Mount on Boot",
    ACTION_REMOVE_AUTOMOUNT: "Removing Auto-Mount Configuration",
}


def _mount_base_for_help(settings: Settings) -> str:
    if settings.config_file.exists():
        try:
            return str(get_config_loader(settings).load_settings().base_mount_dir)
        except ConfigError:
            pass
    return str(MountSettings().base_mount_dir)


def argument_parser(settings: Settings) -> argparse.ArgumentParser:
    epilog = (
        "configuration:\n"
        f"  Config file: {settings.config_file}\n"
        f"  Mount base:  {_mount_base_for_help(settings)} (default {DEFAULT_BASE_MOUNT_DIR})\n"
        f"  Log file:    {settings.log_file_path}\n"
        "\n"
        "examples:\n"
        "  nfs-mount                     mount all enabled shares\n"
        "  nfs-mount --silent            mount silently (for automation)\n"
        "  nfs-mount --setup-automount   add entries to /etc/fstab\n"
        "  nfs-mount --remove-automount  remove them again\n"
        "  nfs-mount --unmount-all       unmount all shares\n"
    )
    parser = argparse.ArgumentParser(
        prog="nfs-mount",
        description=__doc__,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--unmount-all", dest="action", action="store_const",
                         const=ACTION_UNMOUNT_ALL,
                         help="Unmount all NFS shares from config")
    actions.add_argument("--setup-automount", dest="action", action="store_const",
                         const=ACTION_SETUP_AUTOMOUNT,
                         help="Add entries to /etc/fstab for auto-mount on boot")
    actions.add_argument("--remove-automount", dest="action", action="store_const",
                         const=ACTION_REMOVE_AUTOMOUNT,
                         help="Remove auto-mount entries from /etc/fstab")
    parser.set_defaults(action=ACTION_MOUNT)
    parser.add_argument("--silent", action="store_true",
                        help="Run in silent mode (no output, logs only)")
    parser.add_argument("--config", type=Path, default=None,
                        help=f"Configuration file. Default: '{settings.config_file}'")
    return parser


async def run(action: str, settings: Settings, silent: bool = False) -> int:
    """Run one action and return the process exit code."""
    console = Console()
    setup_logging(settings, silent=silent)

    if not silent:
        console.rule(f"[bold cyan]{HEADERS[action]}")
        logging.info("Note: Mounting NFS shares requires sudo privileges")

    try:
        await get_privilege_checker().check()
    except PrivilegeError as e:
        logging.warning(str(e))

    try:
        config = get_config_loader(settings).load()
    except ConfigError as e:
        logging.error(str(e))
        if e.hint:
            logging.info(e.hint)
        return 1

    exit_code = 0
    try:
        if action == ACTION_UNMOUNT_ALL:
            result = await get_unmount_executor(config.settings).unmount_all(config.mounts)
            exit_code = result.exit_code
        elif action == ACTION_SETUP_AUTOMOUNT:
            await get_mount_executor(config.settings).ensure_base_dir()
            await get_fstab_editor(settings, config.settings).setup_automount(config.mounts)
            logging.warning("To mount now, run this command without the --setup-automount flag")
        elif action == ACTION_REMOVE_AUTOMOUNT:
            await get_fstab_editor(settings, config.settings).remove_automount(config.mounts)
        else:
            executor = get_mount_executor(config.settings)
            await executor.ensure_base_dir()
            result = await executor.mount_all(config.mounts)
            exit_code = result.exit_code
    except (FstabError, UnsupportedPlatformError) as e:
        logging.error(str(e))
        exit_code = 1
    except OSError as e:
        logging.error(f"Cannot create base directory {config.settings.base_mount_dir}: {e}")
        exit_code = 1

    if exit_code == 0 and not silent:
        console.print("\n[bold green]✓ Done![/]\n")
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    args = argument_parser(settings).parse_args(argv)
    if args.config is not None:
        settings = settings.model_copy(update={"config_file": args.config.expanduser()})
    return asyncio.run(run(args.action, settings, silent=args.silent))


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
