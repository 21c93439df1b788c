"""Parse [TimingPoints] lines.

``time,beatLength,meter,sampleSet,sampleIndex,volume,uninherited,effects``

Files older than v6 stop after ``beatLength`` or part way through; the
missing fields take the format defaults.
"""

from osu_decode.errors import TruncatedInputError
from osu_decode.parsers.tokens import U8_MAX, parse_float, parse_int, parse_uint
from osu_decode.schemas.beatmap import TimingPoint
from osu_decode.schemas.enums import Effects, SampleSet, decode_code, decode_flags


def parse_timing_point(line: str) -> TimingPoint:
    tokens = line.strip().split(",")
    if len(tokens) < 2:
        raise TruncatedInputError(
            "timing_point", f"expected at least time and beat length in {line!r}"
        )

    kwargs = {
        "time": parse_int(tokens[0], "time"),
        # negative for inherited points, kept as-is
        "beat_length": parse_float(tokens[1], "beat_length"),
    }
    if len(tokens) > 2:
        kwargs["meter"] = parse_uint(tokens[2], "meter", U8_MAX)
    if len(tokens) > 3:
        kwargs["sample_set"] = decode_code(
            SampleSet, parse_uint(tokens[3], "sample_set", U8_MAX), "sample_set"
        )
    if len(tokens) > 4:
        kwargs["sample_index"] = parse_uint(tokens[4], "sample_index", U8_MAX)
    if len(tokens) > 5:
        kwargs["volume"] = parse_uint(tokens[5], "volume", U8_MAX)
    if len(tokens) > 6:
        kwargs["uninherited"] = parse_uint(tokens[6], "uninherited", U8_MAX) == 1
    if len(tokens) > 7:
        kwargs["effects"] = decode_flags(
            Effects, parse_uint(tokens[7], "effects", U8_MAX), "effects"
        )

    return TimingPoint(**kwargs)
