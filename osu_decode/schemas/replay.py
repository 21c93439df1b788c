"""Typed model of a decoded .osr replay."""

import struct
from dataclasses import dataclass, field

from osu_decode.schemas.enums import GameMode, InputKeys, Mods

# Time delta of the trailing metadata record; its key field carries the RNG seed.
SEED_FRAME_DELTA = -12345


@dataclass(frozen=True)
class ReplayFrame:
    """One cursor/key sample.

    ``time_delta`` holds the unsigned 64-bit reinterpretation of the delta as
    written in the file, so a first frame of ``-1`` is stored as
    ``0xFFFFFFFFFFFFFFFF``. Use ``signed_time_delta`` for arithmetic.
    """

    time_delta: int
    x: float  # 0 - 512
    y: float  # 0 - 384
    keys: InputKeys

    @property
    def signed_time_delta(self) -> int:
        return struct.unpack("<q", struct.pack("<Q", self.time_delta))[0]


@dataclass(frozen=True)
class Replay:
    mode: GameMode
    game_version: int
    map_md5_hash: str
    player_name: str
    replay_md5_hash: str
    n_300: int
    n_100: int
    n_50: int
    n_geki: int
    n_katu: int
    n_miss: int
    total_score: int
    max_combo: int
    perfect_combo: bool
    mods: Mods
    life_bar_graph: dict[int, float]  # elapsed-time percent bucket -> life fraction
    timestamp: int  # .NET ticks
    compressed_data_length: int
    frames: tuple[ReplayFrame, ...] = ()
    online_score_id: int = 0
    total_hit_accuracy: float = 0.0  # target practice only
    rng_seed: int | None = field(default=None, compare=False)

    def absolute_times(self) -> list[int]:
        """Running sum of the signed frame deltas, in ms."""
        times = []
        current = 0
        for frame in self.frames:
            current += frame.signed_time_delta
            times.append(current)
        return times
