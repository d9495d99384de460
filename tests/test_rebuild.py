import struct

import pytest

from wadkit.container.planner import compute_rebuild_plan, to_plan_dict
from wadkit.container.writer import write_wad
from wadkit.errors import RebuildError
from wadkit.wad import Wad
from wad_helper import (
    build_wad,
    flat_bytes,
    lump,
    mus_bytes,
    palette_bytes,
    patch_bytes,
    read_directory,
)


def _sample() -> bytes:
    return build_wad(
        [
            lump("PLAYPAL", palette_bytes()),
            lump("F_START"),
            lump("FLOOR", flat_bytes(2)),
            lump("FLOOR", flat_bytes(3)),
            lump("F_END"),
            lump("S_START"),
            lump("TROOA1", patch_bytes(3, 4)),
            lump("S_END"),
            lump("D_E1M1", mus_bytes(b"\x60")),
            lump("DEMO1", b"demo"),
        ]
    )


def _load(data: bytes) -> Wad:
    wad = Wad()
    wad.load(data)
    return wad


def _signature(wad: Wad):
    return [(l.id, l.data.kind, l.metadata.size) for l in wad.lumps]


def test_roundtrip_without_edits_keeps_ids_kinds_and_sizes():
    wad = _load(_sample())
    again = _load(wad.dest())
    assert _signature(again) == _signature(wad)
    assert [l.data.buffer for l in again.lumps] == [l.data.buffer for l in wad.lumps]


def test_rebuilt_layout_is_compact():
    wad = _load(_sample())
    out = wad.dest()
    magic, count, dir_pos = struct.unpack_from("<4sii", out, 0)
    assert (magic, count, dir_pos) == (b"PWAD", 10, 12)
    payload = sum(l.metadata.size for l in wad.lumps)
    assert len(out) == 12 + 16 * 10 + payload


def test_virtual_markers_are_written_with_zero_offset():
    out = _load(_sample()).dest()
    entries = {name: pos for pos, _, name in read_directory(out)}
    for marker in ("F_START", "F_END", "S_START", "S_END"):
        assert entries[marker] == 0
    assert entries["PLAYPAL"] == 12 + 16 * 10


def test_payload_offsets_are_unique_and_in_range():
    out = _load(_sample()).dest()
    seen = set()
    for pos, size, name in read_directory(out):
        if size == 0:
            continue
        assert pos not in seen, name
        seen.add(pos)
        assert pos + size <= len(out)


def test_tombstone_keeps_indices_and_drops_entries():
    wad = _load(_sample())
    before = [l.id for l in wad.lumps]
    index = wad.dir.indices("DEMO1")
    removed = wad.remove_by_name("FLOOR.*")
    assert removed == 2
    assert [l.id for l in wad.lumps] == before
    assert wad.dir.indices("DEMO1") == index
    # already deleted entries are not counted twice
    assert wad.remove_by_name("FLOOR1") == 0
    out = wad.dest()
    names = [name for _, _, name in read_directory(out)]
    assert "FLOOR" not in names
    assert struct.unpack_from("<i", out, 4)[0] == 8
    assert len(out) == 12 + 16 * 8 + sum(
        l.metadata.size for l in wad.lumps if l.metadata.state.is_alive()
    )


def test_source_buffer_is_not_mutated():
    data = _sample()
    wad = _load(data)
    wad.remove_by_name("DEMO1")
    wad.dest()
    assert wad.src == data


def test_aliased_lumps_share_one_slot():
    data = build_wad([lump("A", b"abcd"), lump("B", alias_of=0), lump("C", b"xy")])
    wad = _load(data)
    plan = compute_rebuild_plan(wad.info, wad.dir)
    assert plan.aliased == 1
    out = write_wad(plan)
    entries = read_directory(out)
    assert entries[0][0] == entries[1][0] == 12 + 16 * 3
    assert entries[2][0] == entries[0][0] + 4
    assert len(out) == 12 + 16 * 3 + 4 + 2


def test_updated_alias_gets_a_fresh_slot():
    data = build_wad([lump("A", b"abcd"), lump("B", alias_of=0)])
    wad = _load(data)
    wad.select("B")
    assert wad.update_lumps_raw(b"zz") == 1
    out = wad.dest()
    (pos_a, size_a, _), (pos_b, size_b, _) = read_directory(out)
    assert (size_a, size_b) == (4, 2)
    assert pos_b == pos_a + 4
    assert out[pos_a : pos_a + 4] == b"abcd"
    assert out[pos_b : pos_b + 2] == b"zz"


def test_updated_aliases_with_equal_bytes_share_the_new_slot():
    data = build_wad([lump("A", b"abcd"), lump("B", alias_of=0), lump("C", alias_of=0)])
    wad = _load(data)
    wad.select("B|C")
    assert wad.update_lumps_raw(b"zz") == 2
    plan = compute_rebuild_plan(wad.info, wad.dir)
    assert plan.aliased == 1
    assert [e.owner for e in plan.entries] == [True, True, False]
    out = write_wad(plan)
    (pos_a, _, _), (pos_b, _, _), (pos_c, _, _) = read_directory(out)
    assert pos_a == 12 + 16 * 3
    assert pos_b == pos_c == pos_a + 4
    assert len(out) == pos_a + 4 + 2


def test_zero_size_lumps_never_claim_a_slot():
    # the marker shares its source offset with the lump that follows it
    data = build_wad([lump("MARK"), lump("DATA", b"1234")])
    wad = _load(data)
    assert wad.lumps[0].metadata.pos == wad.lumps[1].metadata.pos
    plan = compute_rebuild_plan(wad.info, wad.dir)
    assert plan.aliased == 0
    assert [e.owner for e in plan.entries] == [False, True]
    out = write_wad(plan)
    assert out[-4:] == b"1234"


def test_plan_dict_is_serialisable():
    wad = _load(_sample())
    plan = to_plan_dict(compute_rebuild_plan(wad.info, wad.dir))
    assert plan["num_lumps"] == 10
    assert plan["entries"][1]["virtual"] is True


def test_writer_rejects_a_diverging_plan():
    wad = _load(_sample())
    plan = compute_rebuild_plan(wad.info, wad.dir)
    plan.payload_size += 1
    plan.file_size += 1
    with pytest.raises(RebuildError):
        write_wad(plan)


def test_iwad_kind_is_preserved(tmp_path):
    wad = _load(build_wad([lump("A", b"1")], magic=b"IWAD"))
    path = tmp_path / "out.wad"
    size = wad.save(path)
    data = path.read_bytes()
    assert size == len(data)
    assert data[:4] == b"IWAD"
