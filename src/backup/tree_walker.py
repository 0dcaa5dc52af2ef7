"""Depth-first permission walk over a directory tree.

Children are visited in lexical name order so an unchanged tree always
produces the same record order. Symbolic links below the root are not
followed and not recorded.
"""

import logging
import os
import stat

from src.core.errors import WalkError
from src.core.models import PermissionRecord, PermissionSet, RecordKind
from src.core.permission_codec import decode_mode

logger = logging.getLogger(__name__)


def make_record(path: str, st: os.stat_result) -> PermissionRecord:
    """Build the record for one node from its stat result."""
    kind = RecordKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else RecordKind.FILE
    owner, group, other = decode_mode(st.st_mode)
    return PermissionRecord(path=path, kind=kind, owner=owner, group=group, other=other)


def _list_children(path: str) -> list[str]:
    try:
        return sorted(os.listdir(path))
    except OSError as exc:
        raise WalkError(f"error accessing path '{path}': {exc}", path=path) from exc


def walk(root: str) -> PermissionSet:
    """Record the root and every file and directory beneath it.

    Raises WalkError if any node cannot be stat'ed or listed; nothing is
    returned for a walk that did not complete.
    """
    try:
        root_stat = os.stat(root)
    except OSError as exc:
        raise WalkError(f"error accessing path '{root}': {exc}", path=root) from exc

    records: PermissionSet = []
    stack: list[tuple[str, os.stat_result]] = [(root, root_stat)]

    while stack:
        path, st = stack.pop()
        record = make_record(path, st)
        records.append(record)
        logger.debug("%s %s%s%s %s", record.kind.value, record.owner,
                     record.group, record.other, path)

        if not record.is_directory:
            continue

        children = []
        for name in _list_children(path):
            child = os.path.join(path, name)
            try:
                child_stat = os.lstat(child)
            except OSError as exc:
                raise WalkError(
                    f"error accessing path '{child}': {exc}", path=child
                ) from exc
            if stat.S_ISLNK(child_stat.st_mode):
                logger.debug("Skipping symbolic link %s", child)
                continue
            children.append((child, child_stat))

        # Reversed so the lexically first child is popped next
        stack.extend(reversed(children))

    logger.info("Walked %s: %d entries", root, len(records))
    return records
