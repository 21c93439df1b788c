"""Decode .osr replay files.

Layout (little-endian throughout):

    mode u8, version u32, map md5 string, player string, replay md5 string,
    300/100/50/geki/katu/miss u16 x6, score u32, max combo u16,
    perfect u8, mods u32, life bar string, timestamp u64,
    payload length u32, LZMA payload, online score id u64,
    [total accuracy f64 if Target Practice]

The LZMA payload decompresses to ``delta|x|y|keys`` records separated by
commas. A record with delta -12345 is the seed record and ends the stream.
"""

import logging
import lzma
import struct
from pathlib import Path

from osu_decode.config import DecodeConfig
from osu_decode.errors import (
    InvalidEncodingError,
    StructuralError,
    TruncatedInputError,
)
from osu_decode.parsers.binary_reader import BinaryReader
from osu_decode.parsers.tokens import parse_float, parse_int, parse_uint
from osu_decode.schemas.enums import GameMode, InputKeys, Mods, decode_code, decode_flags
from osu_decode.schemas.replay import SEED_FRAME_DELTA, Replay, ReplayFrame

logger = logging.getLogger(__name__)


def _to_unsigned_delta(delta: int) -> int:
    """Reinterpret a signed 64-bit delta's bit pattern as unsigned."""
    return struct.unpack("<Q", struct.pack("<q", delta))[0]


def parse_life_bar_graph(text: str) -> dict[int, float]:
    """Parse ``time|life,time|life,...`` into a bucket -> life mapping."""
    graph: dict[int, float] = {}
    for pair in text.split(","):
        pair = pair.strip()
        if not pair:
            continue
        parts = pair.split("|")
        if len(parts) < 2:
            raise StructuralError("life_bar_graph", f"expected 'key|value', got {pair!r}")
        key = parse_uint(parts[0], "life_bar_graph")
        graph[key] = parse_float(parts[1], "life_bar_graph")
    return graph


def decompress_frame_stream(payload: bytes, max_bytes: int) -> str:
    """Decompress the LZMA frame payload into text, bounded by *max_bytes*."""
    decompressor = lzma.LZMADecompressor(format=lzma.FORMAT_ALONE)
    try:
        raw = decompressor.decompress(payload, max_length=max_bytes)
    except lzma.LZMAError as e:
        raise InvalidEncodingError("replay_data", f"corrupt LZMA payload: {e}") from None

    if not decompressor.eof:
        if len(raw) >= max_bytes:
            raise InvalidEncodingError(
                "replay_data", f"decompressed frame stream exceeds {max_bytes} bytes"
            )
        raise TruncatedInputError("replay_data", "LZMA payload ended before end of stream")

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError("replay_data", f"invalid UTF-8: {e}") from None


def parse_frames(text: str) -> tuple[list[ReplayFrame], int | None]:
    """Split the decompressed stream into frames.

    Returns the frames and the RNG seed carried by the seed record, if one
    was reached. The seed record is never appended and its key field is not
    checked against ``InputKeys``.
    """
    frames: list[ReplayFrame] = []

    for index, record in enumerate(text.split(",")):
        if not record:
            # trailing comma
            continue
        field = f"frame[{index}]"
        parts = record.split("|")
        if len(parts) < 4:
            raise TruncatedInputError(field, f"expected 4 '|' fields, got {len(parts)}")

        delta = parse_int(parts[0], f"{field}.time_delta")
        x = parse_float(parts[1], f"{field}.x")
        y = parse_float(parts[2], f"{field}.y")
        raw_keys = parse_uint(parts[3], f"{field}.keys")

        if delta == SEED_FRAME_DELTA:
            logger.debug("Seed record at frame %d, stopping", index)
            return frames, raw_keys

        frames.append(ReplayFrame(
            time_delta=_to_unsigned_delta(delta),
            x=x,
            y=y,
            keys=decode_flags(InputKeys, raw_keys, f"{field}.keys"),
        ))

    return frames, None


def parse_replay(data: bytes, config: DecodeConfig | None = None) -> Replay:
    """Decode a complete .osr buffer.

    Raises:
        DecodeError: on truncation, invalid encoding, malformed numbers or
            structural problems. There is no partial result.
    """
    config = config or DecodeConfig()
    reader = BinaryReader(data)

    mode = decode_code(GameMode, reader.read_u8("mode"), "mode")
    game_version = reader.read_u32("game_version")
    map_md5_hash = reader.read_string("map_md5_hash")
    player_name = reader.read_string("player_name")
    replay_md5_hash = reader.read_string("replay_md5_hash")
    n_300 = reader.read_u16("n_300")
    n_100 = reader.read_u16("n_100")
    n_50 = reader.read_u16("n_50")
    n_geki = reader.read_u16("n_geki")
    n_katu = reader.read_u16("n_katu")
    n_miss = reader.read_u16("n_miss")
    total_score = reader.read_u32("total_score")
    max_combo = reader.read_u16("max_combo")
    perfect_combo = reader.read_u8("perfect_combo") == 1
    mods = reader.read_flags(Mods, 4, "mods")
    life_bar_graph = parse_life_bar_graph(reader.read_string("life_bar_graph"))
    timestamp = reader.read_u64("timestamp")

    compressed_data_length = reader.read_u32("compressed_data_length")
    payload = reader.read_bytes(compressed_data_length, "replay_data")
    text = decompress_frame_stream(payload, config.max_frame_stream_bytes)
    frames, seed = parse_frames(text)
    logger.debug("Decoded %d frames for %s", len(frames), player_name)

    online_score_id = reader.read_u64("online_score_id")
    total_hit_accuracy = 0.0
    if mods & Mods.TARGET_PRACTICE:
        total_hit_accuracy = reader.read_f64("total_hit_accuracy")

    return Replay(
        mode=mode,
        game_version=game_version,
        map_md5_hash=map_md5_hash,
        player_name=player_name,
        replay_md5_hash=replay_md5_hash,
        n_300=n_300,
        n_100=n_100,
        n_50=n_50,
        n_geki=n_geki,
        n_katu=n_katu,
        n_miss=n_miss,
        total_score=total_score,
        max_combo=max_combo,
        perfect_combo=perfect_combo,
        mods=mods,
        life_bar_graph=life_bar_graph,
        timestamp=timestamp,
        compressed_data_length=compressed_data_length,
        frames=tuple(frames),
        online_score_id=online_score_id,
        total_hit_accuracy=total_hit_accuracy,
        rng_seed=seed,
    )


def read_replay_file(filepath: Path, config: DecodeConfig | None = None) -> Replay:
    """Read and decode a .osr file."""
    return parse_replay(Path(filepath).read_bytes(), config)
