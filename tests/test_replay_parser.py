"""Tests for the binary reader and the .osr replay decoder."""

import lzma
import struct

import pytest

from osu_decode.config import DecodeConfig
from osu_decode.errors import (
    DecodeError,
    InvalidEncodingError,
    MalformedNumberError,
    StructuralError,
    TruncatedInputError,
)
from osu_decode.parsers.binary_reader import BinaryReader
from osu_decode.parsers.replay_parser import (
    parse_frames,
    parse_life_bar_graph,
    parse_replay,
    read_replay_file,
)
from osu_decode.schemas.enums import GameMode, InputKeys, Mods


def compress_frames(text: str) -> bytes:
    return lzma.compress(text.encode("utf-8"), format=lzma.FORMAT_ALONE)


class TestBinaryReader:
    def test_fixed_width_little_endian(self):
        reader = BinaryReader(struct.pack("<BHIQd", 7, 0x1234, 0xDEADBEEF, 2**40, 0.5))
        assert reader.read_u8("a") == 7
        assert reader.read_u16("b") == 0x1234
        assert reader.read_u32("c") == 0xDEADBEEF
        assert reader.read_u64("d") == 2**40
        assert reader.read_f64("e") == 0.5
        assert reader.remaining == 0

    def test_uleb128_multi_byte(self):
        reader = BinaryReader(b"\xe5\x8e\x26\x7f")
        assert reader.read_uleb128("n") == 624485
        assert reader.read_uleb128("n") == 127

    def test_uleb128_truncated(self):
        reader = BinaryReader(b"\x80\x80")
        with pytest.raises(TruncatedInputError):
            reader.read_uleb128("n")

    def test_string_present(self):
        reader = BinaryReader(b"\x0b\x05hello")
        assert reader.read_string("s") == "hello"
        assert reader.remaining == 0

    def test_string_absent_marker_is_empty(self):
        reader = BinaryReader(b"\x00\x01")
        assert reader.read_string("s") == ""
        assert reader.offset == 1

    def test_string_invalid_utf8(self):
        reader = BinaryReader(b"\x0b\x02\xff\xfe")
        with pytest.raises(InvalidEncodingError) as exc:
            reader.read_string("player_name")
        assert exc.value.field == "player_name"

    def test_short_read_names_field(self):
        reader = BinaryReader(b"\x01")
        with pytest.raises(TruncatedInputError) as exc:
            reader.read_u32("total_score")
        assert exc.value.field == "total_score"
        # nothing consumed on failure
        assert reader.offset == 0

    def test_read_flags_rejects_unknown_bits(self):
        reader = BinaryReader(bytes([0x20]))
        with pytest.raises(InvalidEncodingError):
            reader.read_flags(InputKeys, 1, "keys")


class TestLifeBarGraph:
    def test_pairs_and_trailing_comma(self):
        assert parse_life_bar_graph("0|1,4000|0.75,") == {0: 1.0, 4000: 0.75}

    def test_empty(self):
        assert parse_life_bar_graph("") == {}

    def test_missing_separator(self):
        with pytest.raises(StructuralError):
            parse_life_bar_graph("0|1,4000")

    @pytest.mark.parametrize("value", ["1_0", " 1", "nan", "0.5x"])
    def test_strict_life_value(self, value):
        with pytest.raises(MalformedNumberError):
            parse_life_bar_graph(f"0|{value}")


class TestParseFrames:
    def test_stops_at_seed_record(self):
        frames, seed = parse_frames("5|1|2|0,-12345|0|0|42,7|3|4|0")
        assert len(frames) == 1
        assert seed == 42

    def test_seed_first_gives_no_frames(self):
        frames, seed = parse_frames("-12345|0|0|99,10|1|1|0")
        assert frames == []
        assert seed == 99

    def test_seed_keys_not_validated(self):
        _, seed = parse_frames("-12345|0|0|123456789")
        assert seed == 123456789

    def test_no_seed(self):
        frames, seed = parse_frames("1|0|0|0,2|0|0|0,")
        assert len(frames) == 2
        assert seed is None

    def test_negative_delta_bit_reinterpreted(self):
        frames, _ = parse_frames("-1|0|0|0")
        assert frames[0].time_delta == 0xFFFF_FFFF_FFFF_FFFF
        assert frames[0].signed_time_delta == -1

    def test_keys_decoded(self):
        frames, _ = parse_frames("16|1|1|21")
        assert frames[0].keys == InputKeys.M1 | InputKeys.K1 | InputKeys.SMOKE

    def test_too_few_fields(self):
        with pytest.raises(TruncatedInputError) as exc:
            parse_frames("1|2|3|0,4|5|6")
        assert exc.value.field == "frame[1]"

    def test_malformed_delta(self):
        with pytest.raises(MalformedNumberError) as exc:
            parse_frames("x|1|2|0")
        assert exc.value.field == "frame[0].time_delta"

    @pytest.mark.parametrize(
        "record, field",
        [
            ("1|1_0|2|0", "frame[0].x"),
            ("1|1| 2|0", "frame[0].y"),
            ("1|inf|2|0", "frame[0].x"),
        ],
    )
    def test_malformed_coordinate(self, record, field):
        with pytest.raises(MalformedNumberError) as exc:
            parse_frames(record)
        assert exc.value.field == field

    def test_coordinate_forms(self):
        frames, _ = parse_frames("1|-0.5|1e2|0,1|.25|3.|0")
        assert (frames[0].x, frames[0].y) == (-0.5, 100.0)
        assert (frames[1].x, frames[1].y) == (0.25, 3.0)

    def test_unknown_key_bit(self):
        with pytest.raises(InvalidEncodingError) as exc:
            parse_frames("1|1|2|32")
        assert exc.value.field == "frame[0].keys"


class TestParseReplay:
    def test_header_fields(self, osr_builder):
        replay = parse_replay(osr_builder(mods=int(Mods.HIDDEN | Mods.HARD_ROCK)))
        assert replay.mode is GameMode.STANDARD
        assert replay.game_version == 20240101
        assert replay.map_md5_hash == "a" * 32
        assert replay.player_name == "player"
        assert replay.replay_md5_hash == "b" * 32
        assert (replay.n_300, replay.n_100, replay.n_50) == (300, 20, 3)
        assert (replay.n_geki, replay.n_katu, replay.n_miss) == (40, 10, 1)
        assert replay.total_score == 1_234_567
        assert replay.max_combo == 512
        assert replay.perfect_combo is False
        assert replay.mods == Mods.HIDDEN | Mods.HARD_ROCK
        assert replay.life_bar_graph == {0: 1.0, 4000: 0.75}
        assert replay.timestamp == 638_000_000_000_000_000
        assert replay.online_score_id == 42
        assert replay.total_hit_accuracy == 0.0

    def test_frames_and_seed(self, osr_builder):
        replay = parse_replay(osr_builder())
        assert len(replay.frames) == 3
        assert replay.frames[1].x == pytest.approx(100.5)
        assert replay.frames[1].y == pytest.approx(200.25)
        assert replay.frames[1].keys == InputKeys.M1 | InputKeys.K1
        assert replay.rng_seed == 7777
        assert replay.absolute_times() == [-1, 9, 25]

    def test_seed_first_frame_stream(self, osr_builder):
        replay = parse_replay(osr_builder(frames="-12345|0|0|5"))
        assert replay.frames == ()
        assert replay.rng_seed == 5

    def test_absent_strings(self, osr_builder):
        replay = parse_replay(osr_builder(player=None, life_bar=None))
        assert replay.player_name == ""
        assert replay.life_bar_graph == {}

    def test_compressed_length_recorded(self, osr_builder):
        payload = compress_frames("1|2|3|0")
        replay = parse_replay(osr_builder(payload=payload))
        assert replay.compressed_data_length == len(payload)

    def test_target_practice_reads_accuracy(self, osr_builder):
        data = osr_builder(mods=int(Mods.TARGET_PRACTICE), accuracy=0.875)
        replay = parse_replay(data)
        assert replay.total_hit_accuracy == 0.875

    def test_target_practice_missing_accuracy(self, osr_builder):
        with pytest.raises(TruncatedInputError) as exc:
            parse_replay(osr_builder(mods=int(Mods.TARGET_PRACTICE)))
        assert exc.value.field == "total_hit_accuracy"

    def test_accuracy_not_read_without_target_practice(self, osr_builder):
        replay = parse_replay(osr_builder(accuracy=0.5))
        assert replay.total_hit_accuracy == 0.0

    def test_unknown_mode(self, osr_builder):
        with pytest.raises(InvalidEncodingError) as exc:
            parse_replay(osr_builder(mode=9))
        assert exc.value.field == "mode"

    def test_unknown_mod_bit(self, osr_builder):
        with pytest.raises(InvalidEncodingError) as exc:
            parse_replay(osr_builder(mods=1 << 31))
        assert exc.value.field == "mods"

    @pytest.mark.parametrize(
        "cut, field",
        [
            (0, "mode"),
            (1, "game_version"),
            (5, "map_md5_hash"),
            (40, "player_name"),
            (82, "n_300"),
            (100, "mods"),
        ],
    )
    def test_truncated_header(self, osr_builder, cut, field):
        with pytest.raises(TruncatedInputError) as exc:
            parse_replay(osr_builder()[:cut])
        assert exc.value.field == field

    def test_payload_longer_than_buffer(self, osr_builder):
        data = osr_builder()
        payload = compress_frames("-1|256|-500|0,10|100.5|200.25|5,16|101|201|1,-12345|0|0|7777")
        # cut inside the compressed payload
        cut = data.index(payload) + len(payload) // 2
        with pytest.raises(TruncatedInputError) as exc:
            parse_replay(data[:cut])
        assert exc.value.field == "replay_data"

    def test_missing_online_score_id(self, osr_builder):
        data = osr_builder()
        with pytest.raises(TruncatedInputError) as exc:
            parse_replay(data[:-4])
        assert exc.value.field == "online_score_id"

    def test_corrupt_lzma(self, osr_builder):
        with pytest.raises(InvalidEncodingError) as exc:
            parse_replay(osr_builder(payload=b"\xff" * 32))
        assert exc.value.field == "replay_data"

    def test_truncated_lzma_stream(self, osr_builder):
        payload = compress_frames("1|2|3|0," * 200)
        with pytest.raises(TruncatedInputError):
            parse_replay(osr_builder(payload=payload[:-8]))

    def test_decompressed_size_bounded(self, osr_builder):
        config = DecodeConfig(max_frame_stream_bytes=64)
        data = osr_builder(frames="1|256|192|0," * 100)
        with pytest.raises(InvalidEncodingError):
            parse_replay(data, config)

    def test_bad_frame_fails_whole_replay(self, osr_builder):
        with pytest.raises(DecodeError):
            parse_replay(osr_builder(frames="1|2|3|0,oops"))

    def test_read_replay_file(self, osr_builder, tmp_path):
        path = tmp_path / "play.osr"
        path.write_bytes(osr_builder())
        replay = read_replay_file(path)
        assert replay.player_name == "player"
        assert len(replay.frames) == 3
