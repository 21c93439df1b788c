"""Section extraction and key/value folding for the .osu text format.

[General], [Metadata] and [Difficulty] are folded through data-driven key
tables mapping a file key to ``(attribute, converter)``. Unknown keys are
skipped; a known key whose value does not convert fails the parse.
"""

import logging
from typing import Callable

from osu_decode.errors import StructuralError
from osu_decode.parsers.tokens import (
    U8_MAX,
    parse_bool,
    parse_float,
    parse_int,
    parse_uint,
)
from osu_decode.schemas.beatmap import Color, ColorData, Difficulty, General, Metadata
from osu_decode.schemas.enums import (
    Countdown,
    GameMode,
    OverlayPosition,
    SampleSet,
    decode_code,
)

logger = logging.getLogger(__name__)

Converter = Callable[[str, str], object]


def get_section(lines: list[str], name: str) -> list[str]:
    """Return the trimmed, non-blank lines of section *name*.

    Collection starts after the line ``[name]`` and stops at the next
    bracketed header. A missing section yields an empty list.
    """
    header = f"[{name}]"
    collected: list[str] = []
    inside = False
    for raw in lines:
        line = raw.strip()
        if not inside:
            inside = line == header
            continue
        if line.startswith("[") and line.endswith("]"):
            break
        if not line or line.startswith("//"):
            continue
        collected.append(line)
    return collected


def split_key_value(line: str, section: str) -> tuple[str, str]:
    """Split ``Key: Value`` on the first colon, trimming both halves."""
    key, sep, value = line.partition(":")
    if not sep:
        raise StructuralError(section, f"expected 'Key: Value', got {line!r}")
    return key.strip(), value.strip()


def _fold(lines: list[str], section: str, table: dict[str, tuple[str, Converter]]) -> dict:
    values: dict[str, object] = {}
    for line in lines:
        key, value = split_key_value(line, section)
        entry = table.get(key)
        if entry is None:
            logger.debug("Ignoring unknown key %s in [%s]", key, section)
            continue
        attr, convert = entry
        values[attr] = convert(value, f"{section}.{key}")
    return values


# --- converters -------------------------------------------------------------

def _text(value: str, field: str) -> str:
    return value


def _preview_time(value: str, field: str) -> int | None:
    time = parse_int(value, field)
    return None if time == -1 else time


def _countdown(value: str, field: str) -> Countdown:
    return decode_code(Countdown, parse_uint(value, field, U8_MAX), field)


def _game_mode(value: str, field: str) -> GameMode:
    return decode_code(GameMode, parse_uint(value, field, U8_MAX), field)


def _sample_set_name(value: str, field: str) -> SampleSet:
    return SampleSet.from_name(value)


def _overlay_position(value: str, field: str) -> OverlayPosition:
    return decode_code(OverlayPosition, value, field)


def _tags(value: str, field: str) -> tuple[str, ...]:
    return tuple(value.split())


GENERAL_KEYS: dict[str, tuple[str, Converter]] = {
    "AudioFilename": ("audio_file", _text),
    "AudioLeadIn": ("audio_lead_in", parse_uint),
    "PreviewTime": ("preview_time", _preview_time),
    "Countdown": ("countdown", _countdown),
    "SampleSet": ("sample_set", _sample_set_name),
    "StackLeniency": ("stack_leniency", parse_float),
    "Mode": ("mode", _game_mode),
    "LetterboxInBreaks": ("letterbox_in_breaks", parse_bool),
    "UseSkinSprites": ("use_skin_sprites", parse_bool),
    "AlwaysShowPlayfield": ("always_show_playfield", parse_bool),
    "OverlayPosition": ("overlay_position", _overlay_position),
    "SkinPreference": ("skin_preference", _text),
    "EpilepsyWarning": ("epilepsy_warning", parse_bool),
    "CountdownOffset": ("countdown_offset", parse_uint),
    "SpecialStyle": ("special_style", parse_bool),
    "WidescreenStoryboard": ("widescreen_storyboard", parse_bool),
    "SamplesMatchPlaybackRate": ("samples_match_playback_rate", parse_bool),
}

METADATA_KEYS: dict[str, tuple[str, Converter]] = {
    "Title": ("title", _text),
    "TitleUnicode": ("title_unicode", _text),
    "Artist": ("artist", _text),
    "ArtistUnicode": ("artist_unicode", _text),
    "Creator": ("creator", _text),
    "Version": ("version", _text),
    "Source": ("source", _text),
    "Tags": ("tags", _tags),
    # -1 for unsubmitted maps
    "BeatmapID": ("beatmap_id", parse_int),
    "BeatmapSetID": ("beatmap_set_id", parse_int),
}

DIFFICULTY_KEYS: dict[str, tuple[str, Converter]] = {
    "HPDrainRate": ("hp_drain_rate", parse_float),
    "CircleSize": ("circle_size", parse_float),
    "OverallDifficulty": ("overall_difficulty", parse_float),
    "ApproachRate": ("approach_rate", parse_float),
    "SliderMultiplier": ("slider_multiplier", parse_float),
    "SliderTickRate": ("slider_tick_rate", parse_float),
}


def parse_general(lines: list[str]) -> General:
    return General(**_fold(lines, "General", GENERAL_KEYS))


def parse_metadata(lines: list[str]) -> Metadata:
    return Metadata(**_fold(lines, "Metadata", METADATA_KEYS))


def parse_difficulty(lines: list[str]) -> Difficulty:
    return Difficulty(**_fold(lines, "Difficulty", DIFFICULTY_KEYS))


def parse_color(value: str, field: str) -> Color:
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 3:
        raise StructuralError(field, f"expected 'r,g,b', got {value!r}")
    r, g, b = (parse_uint(p, field, U8_MAX) for p in parts)
    return Color(r, g, b)


def parse_colours(lines: list[str]) -> ColorData:
    """Fold [Colours] into combo colours plus slider overrides.

    Combo colours are read as Color1, Color2, ... and stop at the first
    missing index, even if later indices are present. Each index may also
    be spelled ComboN, as the game client writes it.
    """
    table: dict[str, Color] = {}
    for line in lines:
        key, value = split_key_value(line, "Colours")
        table[key] = parse_color(value, f"Colours.{key}")

    combo: list[Color] = []
    i = 1
    while True:
        color = table.get(f"Color{i}", table.get(f"Combo{i}"))
        if color is None:
            break
        combo.append(color)
        i += 1

    return ColorData(
        combo_colors=tuple(combo),
        slider_track=table.get("SliderTrackOverride"),
        slider_border=table.get("SliderBorder"),
    )
