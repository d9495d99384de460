"""Binary layout constants for WAD containers."""

from __future__ import annotations

import re

MAGIC_IWAD = b"IWAD"
MAGIC_PWAD = b"PWAD"

HEADER_SIZE = 12
DIRECTORY_ENTRY_SIZE = 16
LUMP_NAME_SIZE = 8
LUMP_ID_SIZE = 12

HEADER_STRUCT = "<4sii"
ENTRY_STRUCT = "<ii8s"

DEFAULT_RE_NAME = r".*"

# DOOM ships 14 palettes in PLAYPAL
MAX_PALETTES = 14
PALETTE_SIZE = 768
PALETTE_COLORS = 256

FLAT_WIDTH = 64
FLAT_HEIGHT = 64
FLAT_SIZE = FLAT_WIDTH * FLAT_HEIGHT

PATCH_HEADER_SIZE = 8
PATCH_POST_END = 0xFF

PALETTE_LUMP = "PLAYPAL"
TITLE_LUMP = "TITLEPIC"
MUSIC_PREFIX = "D_"

FLAT_START_MARKERS = frozenset({"F_START"})
PATCH_START_MARKERS = frozenset({"S_START", "SS_START"})
END_MARKERS = frozenset({"F_END", "S_END", "SS_END"})

RE_F_START = re.compile(r"F[0-9]+_START")
RE_F_END = re.compile(r"F[0-9]+_END")
RE_S_START = re.compile(r"S[0-9]+_START")
RE_S_END = re.compile(r"S[0-9]+_END")

# Zero-payload lumps written back with pos == 0
RE_VIRTUAL_MARKER = re.compile(
    r"^([FPS]{1,2}_(?:START|END))|([FPS]{1}_?\d{0,2}_(?:START|END))$"
)

__all__ = [
    "MAGIC_IWAD",
    "MAGIC_PWAD",
    "HEADER_SIZE",
    "DIRECTORY_ENTRY_SIZE",
    "LUMP_NAME_SIZE",
    "LUMP_ID_SIZE",
    "HEADER_STRUCT",
    "ENTRY_STRUCT",
    "DEFAULT_RE_NAME",
    "MAX_PALETTES",
    "PALETTE_SIZE",
    "PALETTE_COLORS",
    "FLAT_WIDTH",
    "FLAT_HEIGHT",
    "FLAT_SIZE",
    "PATCH_HEADER_SIZE",
    "PATCH_POST_END",
    "PALETTE_LUMP",
    "TITLE_LUMP",
    "MUSIC_PREFIX",
    "FLAT_START_MARKERS",
    "PATCH_START_MARKERS",
    "END_MARKERS",
    "RE_F_START",
    "RE_F_END",
    "RE_S_START",
    "RE_S_END",
    "RE_VIRTUAL_MARKER",
]
