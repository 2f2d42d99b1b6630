"""Tests for the save-archive mod-list decoder."""

import pytest

from modportal.exceptions import ArchiveError, MalformedRecordError
from modportal.models import Version
from modportal.services import SaveArchiveDecoder, decode_mod_list

from conftest import make_level_init, make_zip


class TestDecodeModList:
    """Fixed binary layout decoding."""

    def test_single_mod(self):
        buffer = make_level_init([("abc", (0, 14, 22))], reserved=b"\x01\x02\x03\x04")

        mods = decode_mod_list(buffer)

        assert len(buffer) == 63
        assert len(mods) == 1
        assert mods[0].name == "abc"
        assert mods[0].version == Version(0, 14, 22)
        assert str(mods[0].version) == "0.14.22"
        assert mods[0].reserved == b"\x01\x02\x03\x04"

    def test_multiple_mods_preserve_order_and_duplicates(self):
        buffer = make_level_init(
            [("base", (0, 15, 40)), ("Foreman", (1, 1, 5)), ("base", (0, 15, 40))]
        )

        mods = decode_mod_list(buffer)

        assert [(m.name, str(m.version)) for m in mods] == [
            ("base", "0.15.40"),
            ("Foreman", "1.1.5"),
            ("base", "0.15.40"),
        ]

    def test_utf8_name(self):
        mods = decode_mod_list(make_level_init([("модуль", (1, 0, 0))]))
        assert mods[0].name == "модуль"

    def test_zero_mods(self):
        assert decode_mod_list(make_level_init([])) == []

    def test_trailing_bytes_are_ignored(self):
        buffer = make_level_init([("abc", (1, 2, 3))]) + b"\xff" * 10
        assert len(decode_mod_list(buffer)) == 1

    def test_truncated_name(self):
        buffer = make_level_init([("abcdef", (1, 0, 0))])[:56]

        with pytest.raises(MalformedRecordError):
            decode_mod_list(buffer)

    def test_truncated_reserved_bytes(self):
        buffer = make_level_init([("abc", (0, 14, 22))])[:-1]

        with pytest.raises(MalformedRecordError):
            decode_mod_list(buffer)

    def test_declared_count_exceeds_entries(self):
        buffer = bytearray(make_level_init([("abc", (0, 14, 22))]))
        buffer[48] = 2

        with pytest.raises(MalformedRecordError):
            decode_mod_list(bytes(buffer))

    def test_buffer_shorter_than_header(self):
        with pytest.raises(MalformedRecordError):
            decode_mod_list(b"\x00" * 10)

    def test_invalid_utf8_name(self):
        buffer = bytearray(make_level_init([("ab", (1, 0, 0))]))
        buffer[53] = 0xFF

        with pytest.raises(MalformedRecordError):
            decode_mod_list(bytes(buffer))


class TestSaveArchiveDecoder:
    """Reading level-init.dat from a save zip."""

    def test_read_save(self):
        raw = make_zip(
            {
                "new game/control.lua": b"-- lua",
                "new game/level-init.dat": make_level_init([("abc", (0, 14, 22))]),
            }
        )

        mods = SaveArchiveDecoder().read_save(raw)

        assert [(m.name, str(m.version)) for m in mods] == [("abc", "0.14.22")]

    def test_missing_record(self):
        raw = make_zip({"new game/control.lua": b"-- lua"})

        with pytest.raises(ArchiveError):
            SaveArchiveDecoder().read_save(raw)

    def test_not_a_zip(self):
        with pytest.raises(ArchiveError):
            SaveArchiveDecoder().read_save(b"not a zip")
