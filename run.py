"""Command-line entry point for filesystem permission backup and restore.

Usage:
    python run.py --mode backup --target ~/project --backup-file perms.json
    python run.py -m restore -t ~/project -b perms.json
    python run.py backup ~/project perms.json
    python run.py restore ~/project perms.json --dry-run --policy fail-fast
"""

import argparse
import logging
import sys

from src.backup.backup_manager import backup_permissions
from src.core.config import LOG_LEVELS, RESTORE_POLICIES, load_config
from src.core.errors import PermissionBackupError
from src.core.permission_codec import format_mode
from src.restore.restore_manager import restore_permissions

logger = logging.getLogger("fs_perm_backup")

MODES = ("backup", "restore")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Back up and restore file permission bits of a directory tree",
    )
    parser.add_argument(
        "-m", "--mode",
        help="Operation mode: 'backup' or 'restore'",
    )
    parser.add_argument(
        "-t", "--target",
        help="Target directory for permissions backup or restore",
    )
    parser.add_argument(
        "-b", "--backup-file",
        help="Record file to write (backup) or read (restore)",
    )
    parser.add_argument(
        "positional",
        nargs="*",
        metavar="MODE TARGET BACKUP_FILE",
        help="Positional form, used only when --mode is not given",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to config.json (default: config/config.json if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=LOG_LEVELS,
        help="Logging level (overrides config)",
    )
    parser.add_argument(
        "--policy",
        default=None,
        choices=RESTORE_POLICIES,
        help="Restore failure policy (overrides config)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Restore: report what would change without changing anything",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Restore: require r/w/x in their own positions",
    )
    return parser


def resolve_arguments(parser: argparse.ArgumentParser, args: argparse.Namespace):
    """Fill mode/target/backup-file from positionals and validate them."""
    mode, target, backup_file = args.mode, args.target, args.backup_file

    if mode and args.positional:
        parser.error("unexpected positional arguments with --mode: "
                     + " ".join(args.positional))
    if not mode and len(args.positional) >= 3:
        mode = args.positional[0]
        target = target or args.positional[1]
        backup_file = backup_file or args.positional[2]

    if not mode:
        parser.error("'mode' is required. Specify it as a flag (--mode or -m) "
                     "or as the first argument.")
    if not target:
        parser.error("'target' is required. Specify it as a flag (--target or -t) "
                     "or as the second argument.")
    if not backup_file:
        parser.error("'backup-file' is required. Specify it as a flag "
                     "(--backup-file or -b) or as the third argument.")
    if mode not in MODES:
        parser.error("Invalid mode. Use 'backup' or 'restore' as the mode value.")

    return mode, target, backup_file


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    mode, target, backup_file = resolve_arguments(parser, args)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        parser.error(f"could not load config: {exc}")

    logging.basicConfig(
        level=getattr(logging, args.log_level or config["logging"]["level"]),
        format=config["logging"]["format"],
    )

    if mode == "backup" and (args.dry_run or args.strict or args.policy):
        logger.warning("--dry-run, --strict and --policy only apply to restore; ignored")

    try:
        if mode == "backup":
            result = backup_permissions(
                target,
                backup_file,
                indent=config["backup"]["indent"],
                file_mode=config["backup"]["file_mode"],
            )
            logger.debug("Backup of %s: %d records", result.directory, result.record_count)
            print("Permissions backup successful")
        else:
            report = restore_permissions(
                target,
                backup_file,
                policy=args.policy or config["restore"]["policy"],
                dry_run=args.dry_run,
                strict=args.strict,
            )
            if report.dry_run:
                for change in report.changes:
                    if change.changed:
                        print(f"would change {change.path}: "
                              f"{format_mode(change.old_mode)} -> "
                              f"{format_mode(change.new_mode)}")
                print(f"Dry run: {report.changed_count} of "
                      f"{report.record_count} entries would change")
            else:
                print("Permissions restored successfully")
    except PermissionBackupError as exc:
        print(f"Error during {mode}: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
