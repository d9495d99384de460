import struct

from wadkit.api import inspect_wad, validate_wad
from wadkit.container.inspector import inspect_wad_bytes, validate_wad as validate_info
from wadkit.wad import Wad
from wad_helper import build_wad, lump


def test_inspect_rebuilt_container_has_no_issues(tmp_path):
    wad = Wad()
    wad.load(build_wad([lump("S_START"), lump("A", b"abc"), lump("S_END")]))
    path = tmp_path / "out.wad"
    wad.save(path)
    info = inspect_wad(path)
    assert info["file_size"] == 12 + 48 + 3
    assert info["header"] == {
        "magic": "PWAD",
        "magic_ok": True,
        "kind": "PWAD",
        "num_lumps": 3,
        "dir_pos": 12,
    }
    assert info["directory_entries"][0] == {"name": "S_START", "pos": 0, "size": 0}
    assert validate_wad(path) == []


def test_validation_flags_bad_magic_and_ranges():
    data = struct.pack("<4sii", b"XXXX", 1, 12) + struct.pack("<ii8s", 40, 10, b"BAD")
    issues = validate_info(inspect_wad_bytes(data))
    assert "Unknown magic 'XXXX'" in issues
    assert any("exceeds file size" in i for i in issues)


def test_validation_flags_truncated_directory():
    data = struct.pack("<4sii", b"IWAD", 4, 12)
    assert validate_info(inspect_wad_bytes(data)) == ["Directory exceeds file size"]


def test_validation_of_a_tiny_file():
    assert validate_info(inspect_wad_bytes(b"PW")) == ["File too small for a WAD header"]
