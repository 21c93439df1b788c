"""Locate replays and beatmaps on disk and pair them by map hash.

Replays reference their beatmap only through the MD5 of the .osu file, so
the maps directory is indexed by content hash:

    <maps_dir>/<set folder>/<difficulty>.osu
    <replays_dir>/<name>.osr
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from osu_decode.config import DecodeConfig
from osu_decode.parsers.beatmap_parser import read_beatmap_file
from osu_decode.parsers.replay_parser import read_replay_file
from osu_decode.schemas.beatmap import Beatmap
from osu_decode.schemas.replay import Replay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """A replay together with the beatmap it was played on."""

    replay: Replay
    beatmap: Beatmap
    replay_path: Path
    beatmap_path: Path


def compute_map_hash(path: Path) -> str:
    """MD5 hex digest of a .osu file, as stored in replay headers."""
    return hashlib.md5(Path(path).read_bytes()).hexdigest()


def index_beatmaps(maps_dir: Path) -> dict[str, Path]:
    """Map MD5 hash -> .osu path for every difficulty one level below *maps_dir*."""
    maps_dir = Path(maps_dir)
    if not maps_dir.is_dir():
        raise FileNotFoundError(f"Maps directory not found: {maps_dir}")

    index: dict[str, Path] = {}
    for osu_file in sorted(maps_dir.glob("*/*.osu")):
        digest = compute_map_hash(osu_file)
        if digest in index:
            logger.warning("Duplicate map %s (same hash as %s)", osu_file, index[digest])
            continue
        index[digest] = osu_file
    logger.info("Indexed %d beatmaps in %s", len(index), maps_dir)
    return index


def list_replays(replays_dir: Path) -> list[Path]:
    replays_dir = Path(replays_dir)
    if not replays_dir.is_dir():
        raise FileNotFoundError(f"Replays directory not found: {replays_dir}")
    return sorted(p for p in replays_dir.glob("*.osr") if p.is_file())


def find_beatmap(replay: Replay, index: dict[str, Path]) -> Path:
    """Return the indexed .osu path for *replay*'s map hash."""
    path = index.get(replay.map_md5_hash)
    if path is None:
        raise LookupError(
            f"Map for this replay is unavailable (MD5 hash: {replay.map_md5_hash})"
        )
    return path


def load_session(
    replay_path: Path, index: dict[str, Path], config: DecodeConfig | None = None,
) -> Session:
    """Decode a replay and the beatmap it references."""
    replay = read_replay_file(replay_path, config)
    beatmap_path = find_beatmap(replay, index)
    beatmap = read_beatmap_file(beatmap_path)
    return Session(
        replay=replay,
        beatmap=beatmap,
        replay_path=Path(replay_path),
        beatmap_path=beatmap_path,
    )
