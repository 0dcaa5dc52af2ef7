"""Restore orchestration.

Loads a complete record file before touching anything, then hands the
records to the applier.
"""

import logging
import os
from dataclasses import dataclass, field

from src.backup.record_store import read_records
from src.core import path_resolver
from src.core.config import POLICY_ATOMIC
from src.core.models import PermissionChange
from src.restore.applier import apply

logger = logging.getLogger(__name__)


@dataclass
class RestoreReport:
    directory: str
    input_path: str
    policy: str
    dry_run: bool
    record_count: int = 0
    changes: list[PermissionChange] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return sum(1 for c in self.changes if c.changed)


def _is_within(path: str, directory: str) -> bool:
    return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)


def restore_permissions(
    directory: str,
    input_file: str,
    policy: str = POLICY_ATOMIC,
    dry_run: bool = False,
    strict: bool = False,
) -> RestoreReport:
    """Restore the permissions recorded in ``input_file``.

    Record paths are absolute and applied as-is; records outside
    ``directory`` are still applied but logged as a warning.
    """
    input_path = path_resolver.resolve(input_file)
    dir_path = path_resolver.resolve(directory)
    path_resolver.is_regular_file(input_path)

    records = read_records(input_path)
    path_resolver.is_directory(dir_path)

    logger.info("Restoring permissions from '%s' into directory '%s'",
                input_path, dir_path)

    for record in records:
        if not _is_within(record.path, dir_path):
            logger.warning("Record outside target directory: %s", record.path)

    changes = apply(records, policy=policy, dry_run=dry_run, strict=strict)
    return RestoreReport(
        directory=dir_path,
        input_path=input_path,
        policy=policy,
        dry_run=dry_run,
        record_count=len(records),
        changes=changes,
    )
