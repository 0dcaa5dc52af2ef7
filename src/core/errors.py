"""Exception hierarchy for permission backup and restore."""


class PermissionBackupError(Exception):
    """Base exception for all backup/restore failures."""


class HomeResolutionError(PermissionBackupError):
    """Raised when ``~`` cannot be expanded to a home directory."""


class NotFoundError(PermissionBackupError):
    """Raised when a required path does not exist."""


class AccessError(PermissionBackupError):
    """Raised when a path exists but cannot be stat'ed, read or changed."""


class InvalidTargetError(PermissionBackupError):
    """Raised when a path exists but is the wrong type (file vs directory)."""


class InvalidParentError(PermissionBackupError):
    """Raised when the parent of an output path is missing or not a directory."""


class AlreadyExistsError(PermissionBackupError):
    """Raised when the backup destination already exists."""


class InvalidPermissionFormat(PermissionBackupError):
    """Raised for a symbolic permission string that is not ``[rwx-]{3}``."""


class WalkError(PermissionBackupError):
    """Raised when a node becomes inaccessible during a tree walk."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class TargetMissingError(PermissionBackupError):
    """Raised when a restore record points at a path that no longer exists."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class SerializationError(PermissionBackupError):
    """Raised for a malformed record file."""


class WriteError(PermissionBackupError):
    """Raised when the backup record file cannot be written."""
