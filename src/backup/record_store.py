"""JSON record file reading and writing.

Record file layout::

    [
      {
        "path": "/abs/path",
        "type": "file",
        "user": "rw-",
        "group": "r--",
        "other": "r--",
        "isDirectory": false
      }
    ]

Permission strings are carried through verbatim; they are validated when
a restore applies them, not when the file is loaded.
"""

import json
import logging
import os

from src.core.config import BACKUP_FILE_MODE, RECORD_ENCODING, RECORD_INDENT
from src.core.errors import (
    AccessError,
    AlreadyExistsError,
    SerializationError,
    WriteError,
)
from src.core.models import PermissionRecord, PermissionSet, RecordKind

logger = logging.getLogger(__name__)

_STRING_FIELDS = ("path", "user", "group", "other")


def dump_records(records: PermissionSet, indent: int = RECORD_INDENT) -> str:
    return json.dumps([r.to_dict() for r in records], indent=indent)


def _record_from_dict(entry, index: int) -> PermissionRecord:
    if not isinstance(entry, dict):
        raise SerializationError(f"record {index} is not a JSON object")

    for key in _STRING_FIELDS:
        if not isinstance(entry.get(key), str):
            raise SerializationError(
                f"record {index}: field '{key}' is missing or not a string"
            )

    # "type" wins; "isDirectory" alone is enough for older files
    if "type" in entry:
        try:
            kind = RecordKind(entry["type"])
        except ValueError as exc:
            raise SerializationError(
                f"record {index}: unknown type {entry['type']!r}"
            ) from exc
    elif isinstance(entry.get("isDirectory"), bool):
        kind = RecordKind.DIRECTORY if entry["isDirectory"] else RecordKind.FILE
    else:
        raise SerializationError(f"record {index}: missing 'type'")

    return PermissionRecord(
        path=entry["path"],
        kind=kind,
        owner=entry["user"],
        group=entry["group"],
        other=entry["other"],
    )


def load_records(text: str) -> PermissionSet:
    """Parse record file content into a PermissionSet."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"error unmarshaling JSON data: {exc}") from exc

    if not isinstance(data, list):
        raise SerializationError("record file must contain a JSON array")
    return [_record_from_dict(entry, i) for i, entry in enumerate(data)]


def read_records(path: str) -> PermissionSet:
    """Read and parse a whole record file."""
    try:
        with open(path, encoding=RECORD_ENCODING) as f:
            text = f.read()
    except UnicodeDecodeError as exc:
        raise SerializationError(f"error reading file '{path}': {exc}") from exc
    except OSError as exc:
        raise AccessError(f"error reading file '{path}': {exc}") from exc

    try:
        records = load_records(text)
    except SerializationError as exc:
        raise SerializationError(f"error reading file '{path}': {exc}") from exc
    logger.info("Loaded %d records from %s", len(records), path)
    return records


def write_records(
    path: str,
    records: PermissionSet,
    indent: int = RECORD_INDENT,
    file_mode: int = BACKUP_FILE_MODE,
) -> None:
    """Write a new record file; an existing file is never replaced.

    On a failed write the partial file is removed.
    """
    payload = dump_records(records, indent=indent)

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, file_mode)
    except FileExistsError as exc:
        raise AlreadyExistsError(f"file '{path}' already exists") from exc
    except OSError as exc:
        raise WriteError(f"error writing permissions to file: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding=RECORD_ENCODING) as f:
            f.write(payload)
            f.write("\n")
    except OSError as exc:
        try:
            os.remove(path)
        except OSError:
            logger.debug("Could not remove partial record file %s", path)
        raise WriteError(f"error writing permissions to file: {exc}") from exc

    logger.info("Wrote %d records to %s", len(records), path)
