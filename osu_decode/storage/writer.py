"""Write decoded sessions to Parquet files and JSON metadata."""

import json
import logging
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from osu_decode.geometry.slider_path import DEFAULT_SAMPLES_PER_SEGMENT, SliderPath
from osu_decode.pipeline.library import Session
from osu_decode.schemas.beatmap import Beatmap, Slider, Spinner
from osu_decode.schemas.replay import Replay

logger = logging.getLogger(__name__)

# --- Arrow schemas -----------------------------------------------------------

FRAMES_SCHEMA = pa.schema(
    [
        pa.field("replay_hash", pa.string()),
        pa.field("map_hash", pa.string()),
        pa.field("player_name", pa.string()),
        pa.field("frame_index", pa.int32()),
        pa.field("time_delta", pa.int64()),  # signed
        pa.field("time_ms", pa.int64()),  # running sum of deltas
        pa.field("x", pa.float32()),
        pa.field("y", pa.float32()),
        pa.field("keys", pa.uint8()),
    ]
)

HIT_OBJECTS_SCHEMA = pa.schema(
    [
        pa.field("map_hash", pa.string()),
        pa.field("object_index", pa.int32()),
        pa.field("kind", pa.string()),
        pa.field("x", pa.int32()),
        pa.field("y", pa.int32()),
        pa.field("time", pa.int64()),
        pa.field("new_combo", pa.bool_()),
        pa.field("combo_skip_count", pa.int8()),
        pa.field("hit_sound", pa.uint8()),
        pa.field("curve_type", pa.string()),  # sliders only
        pa.field("slides", pa.int32()),
        pa.field("length", pa.float32()),
        pa.field("end_x", pa.float32()),  # tail after all slides
        pa.field("end_y", pa.float32()),
        pa.field("end_duration", pa.int64()),  # spinners only
    ]
)


def _frame_columns(replay: Replay) -> dict[str, list]:
    cols: dict[str, list] = {k: [] for k in FRAMES_SCHEMA.names}
    for i, (frame, time_ms) in enumerate(zip(replay.frames, replay.absolute_times())):
        cols["replay_hash"].append(replay.replay_md5_hash)
        cols["map_hash"].append(replay.map_md5_hash)
        cols["player_name"].append(replay.player_name)
        cols["frame_index"].append(i)
        cols["time_delta"].append(frame.signed_time_delta)
        cols["time_ms"].append(time_ms)
        cols["x"].append(frame.x)
        cols["y"].append(frame.y)
        cols["keys"].append(int(frame.keys))
    return cols


def _hit_object_columns(
    map_hash: str, beatmap: Beatmap, samples_per_segment: int,
) -> dict[str, list]:
    cols: dict[str, list] = {k: [] for k in HIT_OBJECTS_SCHEMA.names}
    for i, obj in enumerate(beatmap.hit_objects):
        cols["map_hash"].append(map_hash)
        cols["object_index"].append(i)
        cols["kind"].append(obj.kind)
        cols["x"].append(obj.x)
        cols["y"].append(obj.y)
        cols["time"].append(obj.time)
        cols["new_combo"].append(obj.meta.new_combo)
        cols["combo_skip_count"].append(obj.meta.combo_skip_count)
        cols["hit_sound"].append(int(obj.hit_sound))

        slider = obj.data.slider if isinstance(obj.data, Slider) else None
        cols["curve_type"].append(slider.curve_type.value if slider else None)
        cols["slides"].append(slider.slides if slider else None)
        cols["length"].append(slider.length if slider else None)
        end = None
        if slider:
            end = SliderPath.from_hit_object(obj, samples_per_segment).position_at(1.0)
        cols["end_x"].append(end[0] if end else None)
        cols["end_y"].append(end[1] if end else None)
        cols["end_duration"].append(
            obj.data.end_duration if isinstance(obj.data, Spinner) else None
        )
    return cols


def _write_row_groups(tables: list[pa.Table], path: Path, schema: pa.Schema) -> Path | None:
    """Write each non-empty table as its own row group in one file.

    With nothing to write, any file left at *path* by an earlier run is removed.
    """
    tables = [t for t in tables if t.num_rows > 0]
    if not tables:
        path.unlink(missing_ok=True)
        return None
    with pq.ParquetWriter(path, schema, compression="snappy") as writer:
        for table in tables:
            writer.write_table(table)
    return path


def write_parquet(
    sessions: list[Session],
    output_dir: Path,
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> None:
    """Write decoded sessions to Parquet files and JSON metadata.

    Produces inside *output_dir*:
      - frames.parquet       (one row group per replay)
      - hit_objects.parquet  (one row group per distinct map hash)
      - metadata.json
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    frame_tables: list[pa.Table] = []
    map_tables: dict[str, pa.Table] = {}
    metadata: list[dict] = []

    for session in sessions:
        replay = session.replay
        beatmap = session.beatmap
        map_hash = replay.map_md5_hash

        frame_tables.append(pa.table(_frame_columns(replay), schema=FRAMES_SCHEMA))
        if map_hash not in map_tables:
            map_tables[map_hash] = pa.table(
                _hit_object_columns(map_hash, beatmap, samples_per_segment),
                schema=HIT_OBJECTS_SCHEMA,
            )

        metadata.append({
            "replay_file": session.replay_path.name,
            "beatmap_file": session.beatmap_path.name,
            "replay_hash": replay.replay_md5_hash,
            "map_hash": map_hash,
            "player_name": replay.player_name,
            "mode": replay.mode.name,
            "mods": int(replay.mods),
            "total_score": replay.total_score,
            "max_combo": replay.max_combo,
            "perfect_combo": replay.perfect_combo,
            "frame_count": len(replay.frames),
            "title": beatmap.metadata.title,
            "artist": beatmap.metadata.artist,
            "version": beatmap.metadata.version,
        })

    frames_file = _write_row_groups(frame_tables, output_dir / "frames.parquet", FRAMES_SCHEMA)
    objects_file = _write_row_groups(
        [map_tables[h] for h in sorted(map_tables)],
        output_dir / "hit_objects.parquet",
        HIT_OBJECTS_SCHEMA,
    )
    logger.info(
        "Wrote %d replays (%s) and %d maps (%s) to %s",
        len(frame_tables), frames_file, len(map_tables), objects_file, output_dir,
    )

    with open(output_dir / "metadata.json", "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2)


def read_frames_parquet(path: Path) -> pa.Table:
    """Read frames from a ``frames.parquet`` file or a directory holding one."""
    path = Path(path)
    if path.is_dir():
        path = path / "frames.parquet"
    if not path.exists():
        raise FileNotFoundError(f"No frames Parquet file at {path}")
    return pq.read_table(path)
