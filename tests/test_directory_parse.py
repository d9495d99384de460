import struct

import pytest

from wadkit.container.records import LumpKind, LumpState
from wadkit.errors import E_LOAD, E_TYPE, WadLoadError, WadReadError, WadTypeError
from wadkit.wad import Wad
from wad_helper import build_wad, flat_bytes, lump, palette_bytes, patch_bytes


def _scenario_bytes() -> bytes:
    header = struct.pack("<4sii", b"PWAD", 1, 12)
    entry = struct.pack("<ii8s", 28, 4, b"TEST")
    return header + entry + bytes([1, 2, 3, 4])


def test_single_lump_scenario():
    wad = Wad()
    wad.load(_scenario_bytes())
    assert len(wad.lumps) == 1
    only = wad.lumps[0]
    assert only.id == "TEST"
    assert only.data.kind is LumpKind.UNKNOWN
    out = wad.dest()
    assert len(out) == 32
    assert struct.unpack_from("<4sii", out, 0) == (b"PWAD", 1, 12)
    assert struct.unpack_from("<ii8s", out, 12) == (28, 4, b"TEST\x00\x00\x00\x00")
    assert out[28:] == bytes([1, 2, 3, 4])


def test_parse_classifies_namespaces():
    data = build_wad(
        [
            lump("PLAYPAL", palette_bytes()),
            lump("F_START"),
            lump("FLOOR0_1", flat_bytes()),
            lump("F_END"),
            lump("S_START"),
            lump("TROOA1", patch_bytes(2, 2)),
            lump("S_END"),
            lump("DEMO1", b"demo"),
        ]
    )
    wad = Wad()
    wad.load(data)
    kinds = {l.id: l.data.kind for l in wad.lumps}
    assert kinds == {
        "PLAYPAL": LumpKind.PALETTE,
        "F_START": LumpKind.UNKNOWN,
        "FLOOR0_1": LumpKind.FLAT,
        "F_END": LumpKind.UNKNOWN,
        "S_START": LumpKind.UNKNOWN,
        "TROOA1": LumpKind.PATCH,
        "S_END": LumpKind.UNKNOWN,
        "DEMO1": LumpKind.UNKNOWN,
    }
    assert all(l.error is None for l in wad.lumps)


def test_duplicate_names_are_addressable():
    data = build_wad([lump("FLOOR", b"a"), lump("FLOOR", b"bb")])
    wad = Wad()
    wad.load(data)
    assert [l.id for l in wad.lumps] == ["FLOOR", "FLOOR1"]
    assert wad.lump("FLOOR").data.buffer == b"a"
    assert wad.lump("FLOOR1").data.buffer == b"bb"
    assert wad.lump("FLOOR2") is None


def test_reload_resets_marker_state_and_ids():
    data = build_wad([lump("F_START"), lump("X", flat_bytes()), lump("X", b"1")])
    wad = Wad()
    wad.load(data)
    first = [(l.id, l.data.kind) for l in wad.lumps]
    wad.reload()
    assert [(l.id, l.data.kind) for l in wad.lumps] == first


def test_decode_failure_is_recorded_on_the_lump():
    # Flat without any PLAYPAL, and a truncated one
    data = build_wad([lump("F_START"), lump("SHORT", b"\x01" * 10), lump("F_END")])
    wad = Wad()
    wad.load(data)
    bad = wad.lump("SHORT")
    assert bad.data.kind is LumpKind.FLAT
    assert bad.error is not None
    assert "Error:" in bad.describe()
    with pytest.raises(type(bad.error)):
        bad.decoded


def test_too_small_buffer_is_a_load_error():
    with pytest.raises(WadLoadError) as exc:
        Wad().load(b"PWAD")
    assert exc.value.code == E_LOAD


def test_unknown_magic_is_a_type_error():
    with pytest.raises(WadTypeError) as exc:
        Wad().load(b"ZWAD" + b"\x00" * 8)
    assert exc.value.code == E_TYPE


def test_directory_out_of_range_is_a_load_error():
    data = struct.pack("<4sii", b"PWAD", 5, 12)
    with pytest.raises(WadLoadError):
        Wad().load(data)


def test_payload_out_of_range_keeps_previous_directory():
    wad = Wad()
    wad.load(build_wad([lump("GOOD", b"ok")]))
    header = struct.pack("<4sii", b"PWAD", 1, 12)
    bad = header + struct.pack("<ii8s", 20, 100, b"BAD")
    with pytest.raises(WadLoadError):
        wad.load(bad)
    assert [l.id for l in wad.lumps] == ["GOOD"]


def test_missing_file_is_a_read_error(tmp_path):
    with pytest.raises(WadReadError):
        Wad().load_from_file(tmp_path / "missing.wad")


def test_stats_and_alive_count():
    wad = Wad()
    wad.load(build_wad([lump("A", b"1"), lump("B", b"2"), lump("C", b"3")]))
    wad.remove_by_name("B")
    stats = wad.dir.stats()
    assert stats[LumpState.DEFAULT] == 2
    assert stats[LumpState.DELETED] == 1
    assert stats[LumpState.UPDATED] == 0
    assert wad.dir.alive_count() == 2
