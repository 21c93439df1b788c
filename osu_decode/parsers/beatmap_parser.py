"""Top-level orchestrator: parse a whole .osu file into a Beatmap."""

import logging
import re
from pathlib import Path

from osu_decode.errors import DecodeError
from osu_decode.parsers.hit_object_parser import parse_hit_object
from osu_decode.parsers.section_parser import (
    get_section,
    parse_colours,
    parse_difficulty,
    parse_general,
    parse_metadata,
)
from osu_decode.parsers.timing_point_parser import parse_timing_point
from osu_decode.schemas.beatmap import Beatmap

logger = logging.getLogger(__name__)

SECTION_NAMES = ("General", "Metadata", "Difficulty", "TimingPoints", "HitObjects", "Colours")

_FORMAT_VERSION_RE = re.compile(r"osu file format v(\d+)")


def _parse_format_version(lines: list[str]) -> int | None:
    for line in lines:
        stripped = line.strip().lstrip("\ufeff")
        if not stripped:
            continue
        match = _FORMAT_VERSION_RE.fullmatch(stripped)
        return int(match.group(1)) if match else None
    return None


def _parse_records(lines: list[str], section: str, parse_line) -> tuple:
    records = []
    for number, line in enumerate(lines, start=1):
        try:
            records.append(parse_line(line))
        except DecodeError:
            logger.debug("Failed on [%s] record %d: %r", section, number, line)
            raise
    return tuple(records)


def parse_beatmap(text: str) -> Beatmap:
    """Parse the full text of a .osu file.

    Missing sections fall back to defaults; any undecodable line inside a
    known section fails the whole parse.
    """
    lines = text.splitlines()
    sections = {name: get_section(lines, name) for name in SECTION_NAMES}

    timing_points = _parse_records(
        sections["TimingPoints"], "TimingPoints", parse_timing_point
    )
    hit_objects = _parse_records(
        sections["HitObjects"], "HitObjects", parse_hit_object
    )

    beatmap = Beatmap(
        general=parse_general(sections["General"]),
        metadata=parse_metadata(sections["Metadata"]),
        difficulty=parse_difficulty(sections["Difficulty"]),
        timing_points=timing_points,
        hit_objects=hit_objects,
        colors=parse_colours(sections["Colours"]),
        format_version=_parse_format_version(lines),
    )
    logger.debug(
        "Parsed beatmap %r: %d timing points, %d hit objects",
        beatmap.metadata.version,
        len(timing_points),
        len(hit_objects),
    )
    return beatmap


def read_beatmap_file(filepath: Path) -> Beatmap:
    """Read a .osu file (UTF-8, optional BOM) and parse it."""
    return parse_beatmap(Path(filepath).read_text(encoding="utf-8-sig"))
