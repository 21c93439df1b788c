"""Tests for Parquet writer: row groups, nullable columns, and reader."""

import json
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from osu_decode.parsers.beatmap_parser import read_beatmap_file
from osu_decode.parsers.replay_parser import parse_replay
from osu_decode.pipeline.library import Session
from osu_decode.storage.writer import (
    FRAMES_SCHEMA,
    HIT_OBJECTS_SCHEMA,
    read_frames_parquet,
    write_parquet,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def make_session(osr_builder):
    beatmap = read_beatmap_file(FIXTURES / "sample.osu")

    def _make(map_hash: str, replay_hash: str, frames: str | None = None) -> Session:
        kwargs = {"map_hash": map_hash, "replay_hash": replay_hash}
        if frames is not None:
            kwargs["frames"] = frames
        return Session(
            replay=parse_replay(osr_builder(**kwargs)),
            beatmap=beatmap,
            replay_path=Path(f"{replay_hash}.osr"),
            beatmap_path=Path("insane.osu"),
        )

    return _make


class TestWriteParquet:
    def test_creates_files(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1")], tmp_path)
        assert (tmp_path / "frames.parquet").exists()
        assert (tmp_path / "hit_objects.parquet").exists()
        assert (tmp_path / "metadata.json").exists()

    def test_frames_content(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1")], tmp_path)
        table = pq.read_table(tmp_path / "frames.parquet")
        assert table.schema.equals(FRAMES_SCHEMA)
        assert table.column("time_delta").to_pylist() == [-1, 10, 16]
        assert table.column("time_ms").to_pylist() == [-1, 9, 25]
        assert table.column("keys").to_pylist() == [0, 5, 1]
        assert set(table.column("replay_hash").to_pylist()) == {"r1"}

    def test_one_row_group_per_replay(self, tmp_path, make_session):
        sessions = [make_session("m1", "r1"), make_session("m1", "r2")]
        write_parquet(sessions, tmp_path)
        pf = pq.ParquetFile(tmp_path / "frames.parquet")
        assert pf.metadata.num_row_groups == 2
        assert pf.metadata.num_rows == 6

    def test_hit_objects_deduplicated_per_map(self, tmp_path, make_session):
        sessions = [make_session("m2", "r1"), make_session("m1", "r2"), make_session("m2", "r3")]
        write_parquet(sessions, tmp_path)
        pf = pq.ParquetFile(tmp_path / "hit_objects.parquet")
        assert pf.metadata.num_row_groups == 2
        table = pf.read()
        assert table.schema.equals(HIT_OBJECTS_SCHEMA)
        assert table.num_rows == 10
        # sorted by map hash
        assert table.column("map_hash").to_pylist()[0] == "m1"

    def test_nullable_variant_columns(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1")], tmp_path)
        rows = pq.read_table(tmp_path / "hit_objects.parquet").to_pylist()
        circle, slider, repeat, _, spinner = rows
        assert circle["kind"] == "circle"
        assert circle["curve_type"] is None
        assert circle["end_duration"] is None
        assert circle["end_x"] is None
        assert circle["new_combo"] is True
        assert slider["curve_type"] == "L"
        assert slider["slides"] == 1
        assert slider["length"] == pytest.approx(100.0)
        assert (slider["end_x"], slider["end_y"]) == pytest.approx((200.0, 100.0))
        # two slides come back to the head
        assert (repeat["end_x"], repeat["end_y"]) == pytest.approx((300.0, 200.0))
        assert spinner["end_duration"] == 4000
        assert spinner["slides"] is None

    def test_empty_frames_skipped(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1", frames="-12345|0|0|1")], tmp_path)
        assert not (tmp_path / "frames.parquet").exists()
        assert (tmp_path / "hit_objects.parquet").exists()

    def test_rerun_without_frames_removes_old_file(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1")], tmp_path)
        assert (tmp_path / "frames.parquet").exists()
        write_parquet([make_session("m1", "r1", frames="-12345|0|0|1")], tmp_path)
        assert not (tmp_path / "frames.parquet").exists()
        with pytest.raises(FileNotFoundError):
            read_frames_parquet(tmp_path)

    def test_metadata_json(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1")], tmp_path)
        metadata = json.loads((tmp_path / "metadata.json").read_text())
        assert metadata == [
            {
                "replay_file": "r1.osr",
                "beatmap_file": "insane.osu",
                "replay_hash": "r1",
                "map_hash": "m1",
                "player_name": "player",
                "mode": "STANDARD",
                "mods": 0,
                "total_score": 1_234_567,
                "max_combo": 512,
                "perfect_combo": False,
                "frame_count": 3,
                "title": "Test Song",
                "artist": "Test Artist",
                "version": "Insane",
            }
        ]


class TestReadFramesParquet:
    def test_read_directory(self, tmp_path, make_session):
        write_parquet([make_session("m1", "r1")], tmp_path)
        table = read_frames_parquet(tmp_path)
        assert table.num_rows == 3

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_frames_parquet(tmp_path)
