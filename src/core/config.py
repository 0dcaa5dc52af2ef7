"""Backup/restore configuration and defaults."""

import copy
import json
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG = PROJECT_ROOT / "config" / "config.json"

# Record file layout
RECORD_INDENT = 2
RECORD_ENCODING = "utf-8"

# Mode given to a freshly written record file
BACKUP_FILE_MODE = 0o644

# Restore policies
POLICY_ATOMIC = "atomic"
POLICY_FAIL_FAST = "fail-fast"
RESTORE_POLICIES = (POLICY_ATOMIC, POLICY_FAIL_FAST)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

DEFAULTS = {
    "logging": {
        "level": "INFO",
        "format": LOG_FORMAT,
    },
    "backup": {
        "indent": RECORD_INDENT,
        "file_mode": BACKUP_FILE_MODE,
    },
    "restore": {
        "policy": POLICY_ATOMIC,
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str | None = None) -> dict:
    """Load a JSON config file and merge it over :data:`DEFAULTS`.

    An explicit ``config_path`` must exist. Without one, the project's
    ``config/config.json`` is used when present, otherwise the defaults.
    """
    if config_path is None:
        path = DEFAULT_CONFIG
        if not path.exists():
            return copy.deepcopy(DEFAULTS)
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, encoding="utf-8") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    config = _merge(copy.deepcopy(DEFAULTS), loaded)

    for section in DEFAULTS:
        if not isinstance(config[section], dict):
            raise ValueError(f"Config section '{section}' must be a JSON object in {path}")

    policy = config["restore"]["policy"]
    if policy not in RESTORE_POLICIES:
        raise ValueError(
            f"Unknown restore policy {policy!r} in {path}; "
            f"expected one of {', '.join(RESTORE_POLICIES)}"
        )
    indent = config["backup"]["indent"]
    if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
        raise ValueError(f"backup.indent must be a non-negative integer in {path}")

    # Strings are octal ("0644"); JSON integers are taken as-is (420 == 0o644)
    file_mode = config["backup"]["file_mode"]
    if isinstance(file_mode, str):
        file_mode = int(file_mode, 8)
    if isinstance(file_mode, bool) or not isinstance(file_mode, int) \
            or not 0 <= file_mode <= 0o777:
        raise ValueError(
            f"backup.file_mode must be an octal string or integer up to 0o777 in {path}"
        )
    config["backup"]["file_mode"] = file_mode

    level = str(config["logging"]["level"]).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r} in {path}")
    config["logging"]["level"] = level
    return config
