"""Conversion between numeric permission triads and ``rwx`` strings.

A triad is the three low bits of one permission class::

    bit 2 = read   -> 'r'
    bit 1 = write  -> 'w'
    bit 0 = execute -> 'x'

A full mode packs the user, group and other triads as ``ugo`` octal digits.
"""

import re
import stat

from src.core.errors import InvalidPermissionFormat

READ = 4
WRITE = 2
EXECUTE = 1

# Value contributed by each symbol, independent of its position
SYMBOL_VALUES = {"r": READ, "w": WRITE, "x": EXECUTE, "-": 0}

_LOOSE = re.compile(r"[rwx-]{3}")
_STRICT = re.compile(r"[r-][w-][x-]")


def to_symbolic(bits: int) -> str:
    """Render a 0-7 triad as a 3-character string, e.g. ``5 -> 'r-x'``."""
    if not 0 <= bits <= 7:
        raise ValueError(f"permission triad out of range: {bits}")
    return (
        ("r" if bits & READ else "-")
        + ("w" if bits & WRITE else "-")
        + ("x" if bits & EXECUTE else "-")
    )


def validate(sym: str, strict: bool = False) -> None:
    """Raise InvalidPermissionFormat unless ``sym`` matches ``[rwx-]{3}``.

    Any of the four symbols is accepted in any position. ``strict``
    additionally requires ``r``/``w``/``x`` to sit in their own slot.
    """
    if not isinstance(sym, str) or len(sym) != 3:
        raise InvalidPermissionFormat(
            "permission string must be exactly 3 characters long"
        )
    pattern = _STRICT if strict else _LOOSE
    if not pattern.fullmatch(sym):
        raise InvalidPermissionFormat(f"invalid permission string: {sym}")


def to_numeric(sym: str, strict: bool = False) -> int:
    """Parse a symbolic triad back into 0-7.

    Symbols are summed by value, so a loosely valid string such as ``'xr-'``
    yields 5.
    """
    validate(sym, strict=strict)
    return sum(SYMBOL_VALUES[c] for c in sym)


def encode_mode(user: str, group: str, other: str, strict: bool = False) -> int:
    """Combine three symbolic triads into the low 9 permission bits."""
    return (
        (to_numeric(user, strict) << 6)
        | (to_numeric(group, strict) << 3)
        | to_numeric(other, strict)
    )


def decode_mode(mode: int) -> tuple[str, str, str]:
    """Split any ``st_mode`` into (user, group, other) symbolic triads.

    File type and setuid/setgid/sticky bits are ignored.
    """
    perm = stat.S_IMODE(mode) & 0o777
    return (
        to_symbolic((perm >> 6) & 7),
        to_symbolic((perm >> 3) & 7),
        to_symbolic(perm & 7),
    )


def format_mode(mode: int) -> str:
    """Nine-character ``rwxr-xr-x`` rendering of a mode, for log output."""
    return "".join(decode_mode(mode))
