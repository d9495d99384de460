"""MUS to Standard MIDI File (format 0, single track) transcoding."""

from __future__ import annotations

import struct
from typing import Dict

from ..errors import invalid_lump
from .mus import (
    EV_CONTROLLER,
    EV_MEASURE_END,
    EV_PITCH_WHEEL,
    EV_PLAY_NOTE,
    EV_RELEASE_NOTE,
    EV_SCORE_END,
    EV_SYSTEM,
    Mus,
    controller_as_midi,
)

__all__ = ["MIDI_MAGIC", "MIDI_DIVISION", "mus_to_midi", "write_varlen"]

MIDI_MAGIC = b"MThd"
MIDI_DIVISION = 560
# 1 000 000 us per quarter note -> 560 ticks/s, four times the 140 Hz MUS clock
_TEMPO_EVENT = b"\x00\xff\x51\x03\x0f\x42\x40"
_END_OF_TRACK = b"\xff\x2f\x00"
_TICK_SCALE = 4
_PERCUSSION_MUS = 15
_PERCUSSION_MIDI = 9
_DEFAULT_VOLUME = 100


def write_varlen(value: int) -> bytes:
    out = [value & 0x7F]
    value >>= 7
    while value:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(out))


def _midi_file(track: bytes) -> bytes:
    header = MIDI_MAGIC + struct.pack(">IHHH", 6, 0, 1, MIDI_DIVISION)
    return header + b"MTrk" + struct.pack(">I", len(track)) + track


def mus_to_midi(mus: Mus, lump_id: str = "") -> bytes:
    events = mus.events
    size = len(events)
    ctx = {"lump": lump_id}
    volumes: Dict[int, int] = {}
    track = bytearray(_TEMPO_EVENT)
    pending = 0
    i = 0

    def byte_at(index: int) -> int:
        if index >= size:
            raise invalid_lump("MUS event stream truncated", ctx)
        return events[index]

    def emit(*data: int) -> None:
        nonlocal pending
        track.extend(write_varlen(pending * _TICK_SCALE))
        track.extend(data)
        pending = 0

    while i < size:
        desc = events[i]
        i += 1
        last = desc & 0x80
        event_type = (desc >> 4) & 0x07
        channel = desc & 0x0F
        if channel == _PERCUSSION_MUS:
            channel = _PERCUSSION_MIDI

        if event_type == EV_RELEASE_NOTE:
            note = byte_at(i) & 0x7F
            i += 1
            emit(0x80 | channel, note, volumes.get(channel, _DEFAULT_VOLUME))
        elif event_type == EV_PLAY_NOTE:
            note = byte_at(i)
            i += 1
            if note & 0x80:
                volumes[channel] = byte_at(i) & 0x7F
                i += 1
            emit(
                0x90 | channel,
                note & 0x7F,
                volumes.get(channel, _DEFAULT_VOLUME),
            )
        elif event_type == EV_PITCH_WHEEL:
            bend = byte_at(i)
            i += 1
            emit(0xE0 | channel, (bend & 0x01) << 6, bend >> 1)
        elif event_type == EV_SYSTEM:
            controller = controller_as_midi(byte_at(i) & 0x7F)
            i += 1
            emit(0xB0 | channel, controller, 0)
        elif event_type == EV_CONTROLLER:
            number = byte_at(i) & 0x7F
            value = byte_at(i + 1) & 0x7F
            i += 2
            if number == 0:
                emit(0xC0 | channel, value)
            else:
                emit(0xB0 | channel, controller_as_midi(number), value)
        elif event_type == EV_MEASURE_END:
            pass
        elif event_type == EV_SCORE_END:
            emit(*_END_OF_TRACK)
            return _midi_file(bytes(track))
        else:
            raise invalid_lump(f"unknown MUS event type {event_type}", ctx)

        if last:
            delay = 0
            while True:
                byte = byte_at(i)
                i += 1
                delay = delay * 128 + (byte & 0x7F)
                if not byte & 0x80:
                    break
            pending += delay

    # Score without an explicit end event
    emit(*_END_OF_TRACK)
    return _midi_file(bytes(track))
