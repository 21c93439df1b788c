"""Parse [HitObjects] lines into typed hit objects.

A line is ``x,y,time,type,hitSound[,objectParams...][,hitSample]``. The
variant is not tagged explicitly; it is inferred from the shape of the
trailing tokens:

    no params left          -> Circle
    first param unsigned int -> Spinner (end duration)
    anything else            -> Slider (curve|points,slides,length[,edgeSounds[,edgeSets]])
"""

from osu_decode.errors import StructuralError, TruncatedInputError
from osu_decode.parsers.tokens import (
    I16_MAX,
    I16_MIN,
    I64_MAX,
    U16_MAX,
    U8_MAX,
    is_uint,
    parse_float,
    parse_int,
    parse_uint,
)
from osu_decode.schemas.beatmap import (
    Circle,
    CustomHitSample,
    HitObject,
    HitObjectData,
    HitSampleData,
    Slider,
    SliderData,
    Spinner,
)
from osu_decode.schemas.enums import (
    HitObjectMeta,
    Hitsound,
    SampleSet,
    SliderCurveType,
    decode_code,
    decode_flags,
)


def parse_hit_sample_data(token: str, field: str = "edge_sets") -> HitSampleData:
    """Parse ``normalSet:additionSet``; missing sub-fields default to 0."""
    values = [0, 0]
    for i, part in enumerate(token.split(":")[:2]):
        values[i] = parse_uint(part, field, U8_MAX)
    return HitSampleData(
        normal_set=decode_code(SampleSet, values[0], field),
        addition_set=decode_code(SampleSet, values[1], field),
    )


def parse_custom_hit_sample(token: str) -> CustomHitSample:
    """Parse ``normalSet:additionSet:index:volume[:filename]``."""
    parts = token.split(":")
    values = [0, 0, 0, 0]
    for i, part in enumerate(parts[:4]):
        values[i] = parse_uint(part, "hit_sample", U8_MAX)
    filename = parts[4].strip() if len(parts) > 4 else ""
    return CustomHitSample(
        normal_set=decode_code(SampleSet, values[0], "hit_sample"),
        addition_set=decode_code(SampleSet, values[1], "hit_sample"),
        index=values[2],
        volume=values[3],
        filename=filename,
    )


def split_hit_sample(tokens: list[str]) -> tuple[list[str], CustomHitSample | None]:
    """Pop the trailing hit-sample override if the last token has a colon."""
    if tokens and ":" in tokens[-1]:
        return tokens[:-1], parse_custom_hit_sample(tokens[-1])
    return tokens, None


def _parse_curve_point(pair: str) -> tuple[int, int]:
    parts = pair.split(":")
    if len(parts) != 2:
        raise StructuralError("curve_points", f"expected 'x:y', got {pair!r}")
    return (
        parse_int(parts[0], "curve_points", I16_MIN, I16_MAX),
        parse_int(parts[1], "curve_points", I16_MIN, I16_MAX),
    )


def parse_slider_params(tokens: list[str]) -> SliderData:
    """Parse the slider-specific tokens that follow the hit sound field."""
    if len(tokens) < 3:
        raise TruncatedInputError(
            "slider", f"expected curve, slides and length tokens, got {len(tokens)}"
        )

    curve = tokens[0].split("|")
    curve_type = decode_code(SliderCurveType, curve[0], "curve_type")
    curve_points = tuple(_parse_curve_point(pair) for pair in curve[1:])
    if not curve_points:
        raise StructuralError("curve_points", "slider has no control points")

    slides = parse_uint(tokens[1], "slides")
    length = parse_float(tokens[2], "length")

    edge_sounds: tuple[Hitsound, ...] = ()
    if len(tokens) > 3:
        edge_sounds = tuple(
            decode_flags(Hitsound, parse_uint(code, "edge_sounds", U8_MAX), "edge_sounds")
            for code in tokens[3].split("|")
            if code
        )

    edge_sets: tuple[HitSampleData, ...] = ()
    if len(tokens) > 4:
        edge_sets = tuple(
            parse_hit_sample_data(pair) for pair in tokens[4].split("|") if pair
        )

    return SliderData(
        curve_type=curve_type,
        curve_points=curve_points,
        slides=slides,
        length=length,
        edge_sounds=edge_sounds,
        edge_sets=edge_sets,
    )


def classify_object_params(tokens: list[str]) -> HitObjectData:
    """Resolve the Circle/Spinner/Slider ambiguity from the remaining tokens.

    *tokens* must already have the hit-sample override removed.
    """
    if not tokens:
        return Circle()
    if is_uint(tokens[0]):
        return Spinner(end_duration=int(tokens[0]))
    return Slider(parse_slider_params(tokens))


def parse_hit_object(line: str) -> HitObject:
    """Parse one comma-separated [HitObjects] line."""
    tokens = line.strip().split(",")
    if len(tokens) < 5:
        raise TruncatedInputError(
            "hit_object", f"expected at least 5 fields, got {len(tokens)} in {line!r}"
        )

    x = parse_uint(tokens[0], "x", U16_MAX)
    y = parse_uint(tokens[1], "y", U16_MAX)
    time = parse_int(tokens[2], "time", 0, I64_MAX)
    meta = HitObjectMeta.from_bits(parse_uint(tokens[3], "type", U8_MAX))
    hit_sound = decode_flags(Hitsound, parse_uint(tokens[4], "hit_sound", U8_MAX), "hit_sound")

    params, hit_sample = split_hit_sample(tokens[5:])
    data = classify_object_params(params)

    return HitObject(
        x=x,
        y=y,
        time=time,
        meta=meta,
        hit_sound=hit_sound,
        data=data,
        hit_sample=hit_sample,
    )
