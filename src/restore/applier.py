"""Reapply recorded permission bits to the filesystem.

Two restore policies are supported:

    atomic     Every record is validated (permission strings and target
               existence) before anything is changed. If a chmod then fails
               part way, the records already applied in this pass are put
               back to the mode they had before and the error is raised.
    fail-fast  Records are validated and applied one at a time. Processing
               stops at the first failure; earlier records stay applied.

Under either policy a record whose path no longer exists raises
TargetMissingError and no later record is touched. Records are applied by
path, so their order only matters for duplicate paths (last one wins).
"""

import logging
import os
import stat

from src.core.config import POLICY_ATOMIC, POLICY_FAIL_FAST, RESTORE_POLICIES
from src.core.errors import (
    AccessError,
    InvalidPermissionFormat,
    PermissionBackupError,
    TargetMissingError,
)
from src.core.models import PermissionChange, PermissionRecord, PermissionSet
from src.core.permission_codec import encode_mode, format_mode

logger = logging.getLogger(__name__)


def plan_change(record: PermissionRecord, strict: bool = False) -> PermissionChange:
    """Validate one record and work out the mode it should restore."""
    try:
        new_mode = encode_mode(record.owner, record.group, record.other, strict=strict)
    except InvalidPermissionFormat as exc:
        raise InvalidPermissionFormat(
            f"error converting permissions for file '{record.path}': {exc}"
        ) from exc

    try:
        st = os.stat(record.path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise TargetMissingError(
            f"file or directory '{record.path}' does not exist", path=record.path
        ) from exc
    except OSError as exc:
        raise AccessError(f"error accessing '{record.path}': {exc}") from exc

    return PermissionChange(
        path=record.path,
        old_mode=stat.S_IMODE(st.st_mode),
        new_mode=new_mode,
    )


def _chmod(change: PermissionChange) -> None:
    try:
        os.chmod(change.path, change.new_mode)
    except FileNotFoundError as exc:
        raise TargetMissingError(
            f"file or directory '{change.path}' does not exist", path=change.path
        ) from exc
    except OSError as exc:
        raise AccessError(
            f"error restoring permissions for '{change.path}': {exc}"
        ) from exc
    change.applied = True
    logger.debug("Restored %s -> %s on %s", format_mode(change.old_mode),
                 format_mode(change.new_mode), change.path)


def _rollback(applied: list[PermissionChange]) -> None:
    logger.warning("Rolling back %d applied permission change(s)", len(applied))
    for change in reversed(applied):
        try:
            os.chmod(change.path, change.old_mode)
        except OSError as exc:
            logger.error("Rollback failed for %s: %s", change.path, exc)
            continue
        change.applied = False


def _apply_atomic(records, dry_run, strict) -> list[PermissionChange]:
    changes = [plan_change(r, strict=strict) for r in records]
    if dry_run:
        return changes

    applied: list[PermissionChange] = []
    for change in changes:
        try:
            _chmod(change)
        except PermissionBackupError:
            _rollback(applied)
            raise
        applied.append(change)
    return changes


def _apply_fail_fast(records, dry_run, strict) -> list[PermissionChange]:
    changes: list[PermissionChange] = []
    for record in records:
        change = plan_change(record, strict=strict)
        if not dry_run:
            _chmod(change)
        changes.append(change)
    return changes


def apply(
    records: PermissionSet,
    policy: str = POLICY_ATOMIC,
    dry_run: bool = False,
    strict: bool = False,
) -> list[PermissionChange]:
    """Restore ``records`` and return one PermissionChange per record.

    With ``dry_run`` nothing is changed; the returned changes describe what
    a real run would do.
    """
    if policy == POLICY_ATOMIC:
        changes = _apply_atomic(records, dry_run, strict)
    elif policy == POLICY_FAIL_FAST:
        changes = _apply_fail_fast(records, dry_run, strict)
    else:
        raise ValueError(
            f"unknown restore policy {policy!r}; expected one of "
            f"{', '.join(RESTORE_POLICIES)}"
        )

    logger.info("%s %d records (%d changed, policy=%s)",
                "Checked" if dry_run else "Applied", len(changes),
                sum(1 for c in changes if c.changed), policy)
    return changes
