"""Tests for the permission codec: rwx strings <-> numeric triads and modes."""

import stat

import pytest

from src.core.errors import InvalidPermissionFormat
from src.core.permission_codec import (
    decode_mode,
    encode_mode,
    format_mode,
    to_numeric,
    to_symbolic,
    validate,
)


class TestToSymbolic:
    @pytest.mark.parametrize("bits, expected", [
        (0, "---"), (1, "--x"), (2, "-w-"), (3, "-wx"),
        (4, "r--"), (5, "r-x"), (6, "rw-"), (7, "rwx"),
    ])
    def test_all_triads(self, bits, expected):
        assert to_symbolic(bits) == expected

    @pytest.mark.parametrize("bits", [-1, 8, 0o755])
    def test_out_of_range(self, bits):
        with pytest.raises(ValueError):
            to_symbolic(bits)


class TestToNumeric:
    def test_inverse_of_to_symbolic(self):
        for n in range(8):
            assert to_numeric(to_symbolic(n)) == n

    def test_loose_order_sums_symbols(self):
        # Position is not enforced unless strict
        assert to_numeric("xr-") == 5
        assert to_numeric("---") == 0

    def test_strict_rejects_misplaced_symbol(self):
        with pytest.raises(InvalidPermissionFormat):
            to_numeric("xr-", strict=True)


class TestValidate:
    @pytest.mark.parametrize("sym", ["rwx", "---", "r-x", "xwr", "rrr", "-w-"])
    def test_accepts_loose_strings(self, sym):
        validate(sym)

    @pytest.mark.parametrize("sym", ["", "rw", "rwxr", "rwx ", "r-xr-xr-x"])
    def test_rejects_wrong_length(self, sym):
        with pytest.raises(InvalidPermissionFormat, match="exactly 3"):
            validate(sym)

    @pytest.mark.parametrize("sym", ["rwX", "r+x", "abc", "rw7", "r x"])
    def test_rejects_foreign_characters(self, sym):
        with pytest.raises(InvalidPermissionFormat, match="invalid permission string"):
            validate(sym)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidPermissionFormat):
            validate(None)

    @pytest.mark.parametrize("sym", ["rwx", "r--", "-w-", "--x", "---"])
    def test_strict_accepts_positional(self, sym):
        validate(sym, strict=True)

    @pytest.mark.parametrize("sym", ["xwr", "w--", "r-r"])
    def test_strict_rejects_out_of_position(self, sym):
        with pytest.raises(InvalidPermissionFormat):
            validate(sym, strict=True)


class TestModes:
    def test_encode_mode(self):
        assert encode_mode("rwx", "r-x", "r-x") == 0o755
        assert encode_mode("rw-", "r--", "r--") == 0o644
        assert encode_mode("---", "---", "---") == 0

    def test_encode_mode_propagates_format_error(self):
        with pytest.raises(InvalidPermissionFormat):
            encode_mode("rwx", "rwq", "r--")

    def test_decode_mode_ignores_type_bits(self):
        assert decode_mode(stat.S_IFDIR | 0o750) == ("rwx", "r-x", "---")
        assert decode_mode(stat.S_IFREG | 0o600) == ("rw-", "---", "---")

    def test_decode_mode_ignores_special_bits(self):
        assert decode_mode(stat.S_IFREG | stat.S_ISUID | 0o4755) == ("rwx", "r-x", "r-x")

    def test_every_mode_round_trips(self):
        for mode in range(0o1000):
            assert encode_mode(*decode_mode(mode)) == mode

    def test_format_mode(self):
        assert format_mode(0o754) == "rwxr-xr--"
