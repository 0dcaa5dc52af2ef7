"""Backup orchestration.

Validates the destination, walks the target directory and writes the
resulting snapshot as a new record file.
"""

import logging
from dataclasses import dataclass

from src.backup.record_store import write_records
from src.backup.tree_walker import walk
from src.core import path_resolver
from src.core.config import BACKUP_FILE_MODE, RECORD_INDENT

logger = logging.getLogger(__name__)


@dataclass
class BackupResult:
    directory: str
    output_path: str
    record_count: int


def backup_permissions(
    directory: str,
    output_file: str,
    indent: int = RECORD_INDENT,
    file_mode: int = BACKUP_FILE_MODE,
) -> BackupResult:
    """Save the permissions of every entry under ``directory``.

    The destination is checked before anything is walked or written, so a
    failed backup leaves no output file behind.
    """
    path_resolver.validate_output_path(output_file)

    dir_path = path_resolver.resolve(directory)
    output_path = path_resolver.resolve(output_file, must_exist=False)
    path_resolver.is_directory(dir_path)

    logger.info("Backing up permissions from directory '%s' to file '%s'",
                dir_path, output_path)

    records = walk(dir_path)
    write_records(output_path, records, indent=indent, file_mode=file_mode)

    return BackupResult(
        directory=dir_path,
        output_path=output_path,
        record_count=len(records),
    )
