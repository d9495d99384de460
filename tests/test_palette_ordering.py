from wadkit.wad import Wad
from wad_helper import build_wad, flat_bytes, lump, palette_bytes


def _wad_bytes() -> bytes:
    return build_wad(
        [
            lump("PLAYPAL", palette_bytes(count=2)),
            lump("F_START"),
            lump("FLOOR", flat_bytes(index=1)),
            lump("F_END"),
        ]
    )


def _first_pixel(wad: Wad) -> bytes:
    return wad.lump("FLOOR").decoded[:4]


def test_default_palette_is_zero():
    wad = Wad()
    wad.load(_wad_bytes())
    # color 1 of palette 0 is (1, 1, 254)
    assert _first_pixel(wad) == bytes((1, 1, 254, 255))


def test_palette_selected_before_load():
    wad = Wad()
    wad.set_palette(1)
    wad.load(_wad_bytes())
    assert _first_pixel(wad) == bytes((2, 1, 254, 255))


def test_palette_change_needs_reparse():
    wad = Wad()
    wad.load(_wad_bytes())
    wad.set_palette(1)
    # already classified lumps keep their captured palette
    assert _first_pixel(wad) == bytes((1, 1, 254, 255))
    wad.reload()
    assert _first_pixel(wad) == bytes((2, 1, 254, 255))


def test_palette_index_wraps_on_known_count():
    wad = Wad()
    wad.load(_wad_bytes())
    wad.set_palette(3)
    assert wad.dir.pal.index == 1
    fresh = Wad()
    fresh.set_palette(15)
    assert fresh.dir.pal.index == 1


def test_flat_holds_a_palette_copy():
    wad = Wad()
    wad.load(_wad_bytes())
    floor = wad.lump("FLOOR")
    wad.dir.pal.index = 1
    assert floor.palettes.index == 0
    assert floor.palettes is not wad.dir.pal


def test_decode_is_idempotent():
    wad = Wad()
    wad.load(_wad_bytes())
    floor = wad.lump("FLOOR")
    before = floor.decoded
    floor.decode()
    assert floor.decoded == before
    pal = wad.lump("PLAYPAL")
    pal.decode()
    pal.decode()
    assert len(pal.palettes) == 2


def test_dump_reports_the_active_palette():
    wad = Wad()
    wad.load(_wad_bytes())
    wad.set_palette(1)
    wad.select("PLAYPAL")
    assert wad.dump()[0].endswith("Palettes: 2, Active: 1")
    assert wad.lump("FLOOR").palettes.index == 0
