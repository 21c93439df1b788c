"""Decode every replay in the library and export the matched sessions."""

import logging
from dataclasses import dataclass, field

from osu_decode.config import DecodeConfig, LibraryConfig
from osu_decode.pipeline.library import Session, index_beatmaps, list_replays
from osu_decode.pipeline.processor import process_replay
from osu_decode.storage.writer import write_parquet

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    total_replays: int = 0
    total_sessions: int = 0
    total_frames: int = 0
    total_hit_objects: int = 0
    skipped: list[str] = field(default_factory=list)


def run_pipeline(config: LibraryConfig) -> PipelineResult:
    """Index maps, decode all replays, pair them, write Parquet output."""
    result = PipelineResult()
    decode = config.decode or DecodeConfig()

    index = index_beatmaps(config.maps_dir)
    replays = list_replays(config.replays_dir)
    result.total_replays = len(replays)
    logger.info("Processing %d replays from %s...", len(replays), config.replays_dir)

    sessions: list[Session] = []
    for replay_path in replays:
        session = process_replay(replay_path, index, decode)
        if session is None:
            result.skipped.append(replay_path.name)
            continue
        sessions.append(session)
        result.total_frames += len(session.replay.frames)
        result.total_hit_objects += len(session.beatmap.hit_objects)

    result.total_sessions = len(sessions)
    write_parquet(sessions, config.output_dir, decode.path_samples_per_segment)

    logger.info(
        "Pipeline complete: %d/%d replays matched, %d frames, %d hit objects",
        result.total_sessions,
        result.total_replays,
        result.total_frames,
        result.total_hit_objects,
    )
    return result
