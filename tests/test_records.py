import struct

import pytest

from wadkit.container.records import (
    LumpAdd,
    LumpInfo,
    LumpState,
    Placement,
    WadInfo,
    WadKind,
    ascii_filter,
)
from wadkit.errors import E_INVALID_LUMP, InvalidLumpError


def test_header_roundtrip():
    raw = struct.pack("<4sii", b"IWAD", 3, 1234)
    info = WadInfo.from_bytes(raw)
    assert info.kind is WadKind.IWAD
    assert (info.num_lumps, info.dir_pos) == (3, 1234)
    assert info.to_bytes() == raw


def test_unknown_magic_maps_to_unknown_kind():
    info = WadInfo.from_bytes(b"ZWAD" + b"\x00" * 8)
    assert info.kind is WadKind.UNKNOWN
    assert WadKind.UNKNOWN.magic == b"\x00" * 4


def test_entry_parse_pads_and_filters_name():
    raw = struct.pack("<ii8s", 28, 4, b"TEST")
    info = LumpInfo.from_bytes(raw)
    assert info.name == b"TEST\x00\x00\x00\x00"
    assert info.name_ascii() == "TEST"
    assert info.state is LumpState.DEFAULT
    assert info.to_bytes() == raw
    assert info.to_bytes(pos=0) == struct.pack("<ii8s", 0, 4, b"TEST")


def test_set_id_truncates_to_twelve_bytes():
    info = LumpInfo.new(0, 0, "ABCDEFGH")
    info.set_id("ABCDEFGH12345")
    assert info.id_ascii() == "ABCDEFGH1234"


def test_ascii_filter_drops_spaces_and_control_bytes():
    assert ascii_filter(b"A B\x01C\x00\x00") == "ABC"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("F_START", True),
        ("SS_END", True),
        ("P1_START", True),
        ("F1_END", True),
        ("S_END", True),
        ("PLAYPAL", False),
        ("FLOOR4_8", False),
    ],
)
def test_virtual_marker_names(name, expected):
    assert LumpInfo.new(0, 0, name).is_virtual() is expected


def test_copy_is_independent():
    info = LumpInfo.new(5, 6, "X")
    clone = info.copy()
    clone.state = LumpState.DELETED
    assert info.state is LumpState.DEFAULT


def test_placement_parse():
    assert Placement.parse(" after ") is Placement.AFTER
    with pytest.raises(KeyError):
        Placement.parse("middle")


@pytest.mark.parametrize("name", ["", "TOOLONGNAME", "D\u00c9MO"])
def test_lump_add_rejects_bad_names(name):
    with pytest.raises(InvalidLumpError) as exc:
        LumpAdd(name=name).name_bytes()
    assert exc.value.code == E_INVALID_LUMP
