"""Tests for path resolution and output-path validation."""

import os
import pwd

import pytest

from src.core import path_resolver
from src.core.errors import (
    AccessError,
    AlreadyExistsError,
    HomeResolutionError,
    InvalidParentError,
    InvalidTargetError,
    NotFoundError,
)

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------

class TestResolve:
    def test_current_directory(self):
        assert path_resolver.resolve(".") == os.getcwd()

    def test_relative_path_made_absolute(self, tmp_path, monkeypatch):
        (tmp_path / "rel.txt").write_text("x")
        monkeypatch.chdir(tmp_path)
        assert path_resolver.resolve("rel.txt") == str(tmp_path / "rel.txt")

    def test_normalises_dot_segments(self, tmp_path):
        (tmp_path / "a").mkdir()
        resolved = path_resolver.resolve(str(tmp_path / "a" / ".." / "a" / "."))
        assert resolved == str(tmp_path / "a")

    def test_missing_path_raises(self):
        with pytest.raises(NotFoundError, match="does not exist"):
            path_resolver.resolve("/path/that/does/not/exist")

    def test_missing_path_allowed_without_check(self, tmp_path):
        missing = tmp_path / "later.json"
        assert path_resolver.resolve(str(missing), must_exist=False) == str(missing)

    def test_home_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "docs").mkdir()
        assert path_resolver.resolve("~") == str(tmp_path)
        assert path_resolver.resolve("~/docs") == str(tmp_path / "docs")

    def test_home_unresolvable(self, monkeypatch):
        def no_such_uid(uid):
            raise KeyError(uid)

        monkeypatch.delenv("HOME", raising=False)
        monkeypatch.setattr(path_resolver.pwd, "getpwuid", no_such_uid)
        with pytest.raises(HomeResolutionError):
            path_resolver.resolve("~/anything", must_exist=False)

    @pytest.mark.parametrize("path", ["~", "~/x"])
    def test_empty_home_rejected(self, path, monkeypatch):
        monkeypatch.setenv("HOME", "")
        with pytest.raises(HomeResolutionError, match="HOME is empty"):
            path_resolver.resolve(path, must_exist=False)

    def test_home_from_password_database(self, tmp_path, monkeypatch):
        class Entry:
            pw_dir = str(tmp_path)

        monkeypatch.delenv("HOME", raising=False)
        monkeypatch.setattr(path_resolver.pwd, "getpwuid", lambda uid: Entry)
        assert path_resolver.resolve("~/x", must_exist=False) == str(tmp_path / "x")

    def test_named_user_home(self):
        home = pwd.getpwuid(os.getuid())
        expected = os.path.join(home.pw_dir, "x")
        assert path_resolver.expand_home(f"~{home.pw_name}/x") == expected

    def test_unknown_user_named_in_error(self):
        with pytest.raises(HomeResolutionError, match="no_such_user_zz"):
            path_resolver.resolve("~no_such_user_zz/x", must_exist=False)

    @pytest.mark.skipif(running_as_root, reason="root bypasses directory permissions")
    def test_stat_failure_is_access_error(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "inner").write_text("x")
        locked.chmod(0)
        try:
            with pytest.raises(AccessError):
                path_resolver.resolve(str(locked / "inner"))
        finally:
            locked.chmod(0o700)


# ---------------------------------------------------------------------------
# Type checks
# ---------------------------------------------------------------------------

class TestTypeChecks:
    def test_is_directory(self, tmp_path):
        path_resolver.is_directory(str(tmp_path))

    def test_is_directory_on_file(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        with pytest.raises(InvalidTargetError, match="not a directory"):
            path_resolver.is_directory(str(f))

    def test_is_directory_missing(self, tmp_path):
        with pytest.raises(NotFoundError):
            path_resolver.is_directory(str(tmp_path / "nope"))

    def test_is_regular_file(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        path_resolver.is_regular_file(str(f))

    def test_is_regular_file_on_directory(self, tmp_path):
        with pytest.raises(InvalidTargetError, match="not a regular file"):
            path_resolver.is_regular_file(str(tmp_path))


# ---------------------------------------------------------------------------
# validate_output_path
# ---------------------------------------------------------------------------

class TestValidateOutputPath:
    def test_fresh_path_ok(self, tmp_path):
        path_resolver.validate_output_path(str(tmp_path / "perms.json"))

    def test_existing_file_rejected(self, tmp_path):
        existing = tmp_path / "perms.json"
        existing.write_text("keep me")
        with pytest.raises(AlreadyExistsError):
            path_resolver.validate_output_path(str(existing))
        assert existing.read_text() == "keep me"

    def test_existing_directory_rejected(self, tmp_path):
        with pytest.raises(AlreadyExistsError):
            path_resolver.validate_output_path(str(tmp_path))

    def test_missing_parent(self, tmp_path):
        with pytest.raises(InvalidParentError):
            path_resolver.validate_output_path(str(tmp_path / "no" / "perms.json"))

    def test_parent_is_a_file(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(InvalidParentError):
            path_resolver.validate_output_path(str(f / "perms.json"))

    def test_home_relative_output(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        path_resolver.validate_output_path("~/perms.json")
        (tmp_path / "perms.json").write_text("[]")
        with pytest.raises(AlreadyExistsError):
            path_resolver.validate_output_path("~/perms.json")

    def test_empty_home_output_path(self, monkeypatch):
        monkeypatch.setenv("HOME", "")
        with pytest.raises(HomeResolutionError):
            path_resolver.validate_output_path("~/perms.json")
