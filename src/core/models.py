"""Record types shared by the backup and restore paths."""

from dataclasses import dataclass
from enum import Enum


class RecordKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class PermissionRecord:
    """Permissions of one filesystem node at snapshot time."""
    path: str
    kind: RecordKind
    owner: str
    group: str
    other: str

    @property
    def is_directory(self) -> bool:
        return self.kind is RecordKind.DIRECTORY

    def to_dict(self) -> dict:
        # Key names and order are the on-disk record file format
        return {
            "path": self.path,
            "type": self.kind.value,
            "user": self.owner,
            "group": self.group,
            "other": self.other,
            "isDirectory": self.is_directory,
        }


# One snapshot, in traversal order
PermissionSet = list[PermissionRecord]


@dataclass
class PermissionChange:
    """A permission update made (or planned) by a restore."""
    path: str
    old_mode: int
    new_mode: int
    applied: bool = False

    @property
    def changed(self) -> bool:
        return self.old_mode != self.new_mode
