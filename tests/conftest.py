"""Shared builders for synthetic .osr buffers."""

import lzma
import struct

import pytest


def encode_uleb128(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_string(text: str | None) -> bytes:
    if text is None:
        return b"\x00"
    raw = text.encode("utf-8")
    return b"\x0b" + encode_uleb128(len(raw)) + raw


def compress_frames(text: str) -> bytes:
    return lzma.compress(text.encode("utf-8"), format=lzma.FORMAT_ALONE)


def build_osr(
    frames: str = "-1|256|-500|0,10|100.5|200.25|5,16|101|201|1,-12345|0|0|7777",
    *,
    mode: int = 0,
    version: int = 20240101,
    map_hash: str | None = "a" * 32,
    player: str | None = "player",
    replay_hash: str | None = "b" * 32,
    counts: tuple[int, ...] = (300, 20, 3, 40, 10, 1),
    score: int = 1_234_567,
    max_combo: int = 512,
    perfect: int = 0,
    mods: int = 0,
    life_bar: str | None = "0|1,4000|0.75,",
    timestamp: int = 638_000_000_000_000_000,
    payload: bytes | None = None,
    online_score_id: int = 42,
    accuracy: float | None = None,
) -> bytes:
    """Assemble a replay buffer field by field in file order."""
    if payload is None:
        payload = compress_frames(frames)
    data = bytearray()
    data += struct.pack("<BI", mode, version)
    data += encode_string(map_hash)
    data += encode_string(player)
    data += encode_string(replay_hash)
    data += struct.pack("<6H", *counts)
    data += struct.pack("<IHBI", score, max_combo, perfect, mods)
    data += encode_string(life_bar)
    data += struct.pack("<QI", timestamp, len(payload))
    data += payload
    data += struct.pack("<Q", online_score_id)
    if accuracy is not None:
        data += struct.pack("<d", accuracy)
    return bytes(data)


@pytest.fixture
def osr_builder():
    return build_osr
