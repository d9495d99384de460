from wadkit.container.classifier import ParseState, assign_id, classify, is_marker
from wadkit.container.records import LumpKind


def _kinds(entries):
    state = ParseState()
    return [classify(name, size, state) for name, size in entries], state


def test_flat_namespace_boundaries():
    kinds, state = _kinds(
        [
            ("FLOOR0", 4096),
            ("F_START", 0),
            ("FLOOR1", 4096),
            ("F_END", 0),
            ("FLOOR2", 4096),
        ]
    )
    assert kinds == [
        LumpKind.UNKNOWN,
        LumpKind.UNKNOWN,
        LumpKind.FLAT,
        LumpKind.UNKNOWN,
        LumpKind.UNKNOWN,
    ]
    assert state.markers == []


def test_sprite_namespaces_and_nesting():
    kinds, _ = _kinds(
        [
            ("SS_START", 0),
            ("TROOA1", 100),
            ("F_START", 0),
            ("FLAT1", 4096),
            ("F_END", 0),
            ("TROOB1", 100),
            ("SS_END", 0),
        ]
    )
    assert kinds[1] is LumpKind.PATCH
    assert kinds[3] is LumpKind.FLAT
    assert kinds[5] is LumpKind.PATCH


def test_numbered_markers_push_and_pop():
    kinds, state = _kinds(
        [("F_START", 0), ("F1_START", 0), ("A", 10), ("F1_END", 0), ("S2_START", 0), ("B", 10)]
    )
    assert kinds[2] is LumpKind.FLAT
    assert kinds[5] is LumpKind.PATCH
    assert state.markers == [LumpKind.FLAT, LumpKind.PATCH]


def test_markers_are_unknown_and_zero_size_lumps_stay_unknown():
    kinds, _ = _kinds([("S_START", 0), ("EMPTY", 0), ("S_END", 0)])
    assert kinds == [LumpKind.UNKNOWN] * 3


def test_end_marker_on_empty_stack_is_lenient():
    kinds, state = _kinds([("F_END", 0), ("S_END", 0), ("DATA", 5)])
    assert kinds == [LumpKind.UNKNOWN] * 3
    assert state.markers == []


def test_special_names_ignore_the_stack():
    kinds, _ = _kinds(
        [("PLAYPAL", 768), ("F_START", 0), ("TITLEPIC", 100), ("D_E1M1", 50), ("F_END", 0)]
    )
    assert kinds == [
        LumpKind.PALETTE,
        LumpKind.UNKNOWN,
        LumpKind.PATCH,
        LumpKind.SOUND,
        LumpKind.UNKNOWN,
    ]


def test_music_prefix_is_case_sensitive():
    kinds, _ = _kinds([("d_e1m1", 50)])
    assert kinds == [LumpKind.UNKNOWN]


def test_is_marker():
    assert is_marker("F_START")
    assert is_marker("S12_END")
    assert not is_marker("FOO_START")


def test_duplicate_ids():
    state = ParseState()
    assert assign_id("FLOOR", state) == "FLOOR"
    assert assign_id("FLOOR", state) == "FLOOR1"
    assert assign_id("FLOOR", state) == "FLOOR2"


def test_duplicate_suffix_skips_taken_ids():
    state = ParseState()
    assert assign_id("FLOOR1", state) == "FLOOR1"
    assert assign_id("FLOOR", state) == "FLOOR"
    assert assign_id("FLOOR", state) == "FLOOR2"
    # a later real FLOOR1 cannot reuse the id either
    assert assign_id("FLOOR1", state) == "FLOOR11"


def test_duplicate_ids_grow_multi_digit_suffixes():
    state = ParseState()
    assert assign_id("ABCDEFGH", state) == "ABCDEFGH"
    for _ in range(9):
        assign_id("ABCDEFGH", state)
    assert assign_id("ABCDEFGH", state) == "ABCDEFGH10"
