"""Resolution and validation of user-supplied paths.

Every check here is a single ``os.stat`` at most; nothing is created or
modified.
"""

import logging
import os
import pwd
import stat

from src.core.errors import (
    AccessError,
    AlreadyExistsError,
    HomeResolutionError,
    InvalidParentError,
    InvalidTargetError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_MISSING = (FileNotFoundError, NotADirectoryError)


def _home_directory() -> str:
    # $HOME wins when set, even if empty; the password database is the fallback
    home = os.environ.get("HOME")
    if home is None:
        try:
            home = pwd.getpwuid(os.getuid()).pw_dir
        except KeyError as exc:
            raise HomeResolutionError("unable to determine home directory") from exc
    if not home:
        raise HomeResolutionError("unable to determine home directory: HOME is empty")
    return home


def expand_home(path: str) -> str:
    """Expand a leading ``~`` or ``~user``.

    Raises HomeResolutionError when the home directory is unknown or empty.
    """
    if not path.startswith("~"):
        return path

    user, _, rest = path[1:].partition("/")
    if user:
        try:
            home = pwd.getpwnam(user).pw_dir
        except KeyError as exc:
            raise HomeResolutionError(
                f"unknown user '{user}' in path '{path}'"
            ) from exc
        if not home:
            raise HomeResolutionError(f"user '{user}' has no home directory")
    else:
        home = _home_directory()

    return os.path.join(home, rest) if rest else home


def resolve(path: str, must_exist: bool = True) -> str:
    """Return the absolute, normalised form of ``path``.

    With ``must_exist`` the resolved path is stat'ed once: a missing entry
    raises NotFoundError, any other failure AccessError.
    """
    abs_path = os.path.abspath(expand_home(path))
    if must_exist:
        try:
            os.stat(abs_path)
        except _MISSING as exc:
            raise NotFoundError(
                f"file or directory does not exist: {abs_path}"
            ) from exc
        except OSError as exc:
            raise AccessError(f"error accessing '{abs_path}': {exc}") from exc
    return abs_path


def _stat_existing(path: str, what: str) -> os.stat_result:
    try:
        return os.stat(path)
    except _MISSING as exc:
        raise NotFoundError(f"{what} '{path}' does not exist") from exc
    except OSError as exc:
        raise AccessError(f"error accessing {what} '{path}': {exc}") from exc


def is_directory(path: str) -> None:
    """Raise unless ``path`` is an existing directory."""
    st = _stat_existing(path, "directory")
    if not stat.S_ISDIR(st.st_mode):
        raise InvalidTargetError(f"'{path}' is not a directory")


def is_regular_file(path: str) -> None:
    """Raise unless ``path`` is an existing regular file."""
    st = _stat_existing(path, "file")
    if not stat.S_ISREG(st.st_mode):
        raise InvalidTargetError(f"'{path}' is not a regular file")


def validate_output_path(path: str) -> None:
    """Check that a backup can be written to ``path``.

    The parent directory must already exist and nothing may exist at
    ``path`` itself; backups never overwrite.
    """
    abs_path = os.path.abspath(expand_home(path))
    parent = os.path.dirname(abs_path)

    try:
        is_directory(parent)
    except (NotFoundError, InvalidTargetError) as exc:
        raise InvalidParentError(f"invalid parent directory path: {exc}") from exc

    try:
        os.lstat(abs_path)
    except FileNotFoundError:
        logger.debug("Output path is free: %s", abs_path)
        return
    except OSError as exc:
        raise AccessError(
            f"error checking if file '{abs_path}' exists: {exc}"
        ) from exc
    raise AlreadyExistsError(f"file '{abs_path}' already exists")
