"""Typed model of a parsed .osu beatmap.

All records are frozen dataclasses built in one pass by
``osu_decode.parsers.beatmap_parser.parse_beatmap``. Sequences are tuples and
keep file order.
"""

from dataclasses import dataclass, field

from osu_decode.schemas.enums import (
    Countdown,
    Effects,
    GameMode,
    HitObjectMeta,
    Hitsound,
    OverlayPosition,
    SampleSet,
    SliderCurveType,
)


@dataclass(frozen=True)
class General:
    audio_file: str = ""
    audio_lead_in: int = 0
    preview_time: int | None = None  # -1 in the file
    countdown: Countdown = Countdown.NORMAL
    sample_set: SampleSet = SampleSet.NORMAL
    stack_leniency: float = 0.7
    mode: GameMode = GameMode.STANDARD
    letterbox_in_breaks: bool = False
    use_skin_sprites: bool = False
    always_show_playfield: bool = False
    overlay_position: OverlayPosition = OverlayPosition.NO_CHANGE
    skin_preference: str | None = None
    epilepsy_warning: bool = False
    countdown_offset: int = 0
    special_style: bool = False
    widescreen_storyboard: bool = False
    samples_match_playback_rate: bool = False


@dataclass(frozen=True)
class Metadata:
    title: str = ""
    title_unicode: str = ""
    artist: str = ""
    artist_unicode: str = ""
    creator: str = ""
    version: str = ""  # difficulty name
    source: str = ""
    tags: tuple[str, ...] = ()
    beatmap_id: int = 0
    beatmap_set_id: int = 0


@dataclass(frozen=True)
class Difficulty:
    hp_drain_rate: float = 5.0
    circle_size: float = 5.0
    overall_difficulty: float = 5.0
    approach_rate: float | None = None  # absent in old maps, follows OD
    slider_multiplier: float = 1.4
    slider_tick_rate: float = 1.0

    @property
    def effective_approach_rate(self) -> float:
        if self.approach_rate is None:
            return self.overall_difficulty
        return self.approach_rate


@dataclass(frozen=True)
class TimingPoint:
    """One line of [TimingPoints].

    ``beat_length`` is kept exactly as written: a negative value marks an
    inherited point whose slider velocity is ``-100 / beat_length``.
    """

    time: int
    beat_length: float
    meter: int = 4
    sample_set: SampleSet = SampleSet.NORMAL
    sample_index: int = 0
    volume: int = 100
    uninherited: bool = True
    effects: Effects = Effects.NONE

    @property
    def kiai(self) -> bool:
        return bool(self.effects & Effects.KIAI)


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class ColorData:
    combo_colors: tuple[Color, ...] = ()
    slider_track: Color | None = None
    slider_border: Color | None = None


@dataclass(frozen=True)
class HitSampleData:
    """Normal/addition sample bank pair, as used by slider edges."""

    normal_set: SampleSet = SampleSet.NONE
    addition_set: SampleSet = SampleSet.NONE


@dataclass(frozen=True)
class CustomHitSample:
    """Trailing ``normalSet:additionSet:index:volume:filename`` override."""

    normal_set: SampleSet = SampleSet.NONE
    addition_set: SampleSet = SampleSet.NONE
    index: int = 0
    volume: int = 0
    filename: str = ""

    @property
    def file_name(self) -> str:
        if self.filename:
            return self.filename
        # index 0 and 1 both mean the default sample
        suffix = str(self.index) if self.index > 1 else ""
        return (
            f"{self.normal_set.file_prefix}-hit"
            f"{self.addition_set.file_prefix}{suffix}.wav"
        )


@dataclass(frozen=True)
class SliderData:
    curve_type: SliderCurveType
    curve_points: tuple[tuple[int, int], ...]  # excludes the object's own x,y
    slides: int
    length: float
    # May hold fewer entries than slides + 1; missing edges are left to the consumer.
    edge_sounds: tuple[Hitsound, ...] = ()
    edge_sets: tuple[HitSampleData, ...] = ()


@dataclass(frozen=True)
class Circle:
    pass


@dataclass(frozen=True)
class Slider:
    slider: SliderData


@dataclass(frozen=True)
class Spinner:
    end_duration: int


HitObjectData = Circle | Slider | Spinner


@dataclass(frozen=True)
class HitObject:
    x: int
    y: int
    time: int  # ms
    meta: HitObjectMeta
    hit_sound: Hitsound
    data: HitObjectData
    hit_sample: CustomHitSample | None = None

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    @property
    def kind(self) -> str:
        if isinstance(self.data, Slider):
            return "slider"
        if isinstance(self.data, Spinner):
            return "spinner"
        return "circle"


@dataclass(frozen=True)
class Beatmap:
    """Complete parsed .osu file."""

    general: General = field(default_factory=General)
    metadata: Metadata = field(default_factory=Metadata)
    difficulty: Difficulty = field(default_factory=Difficulty)
    timing_points: tuple[TimingPoint, ...] = ()
    hit_objects: tuple[HitObject, ...] = ()
    colors: ColorData = field(default_factory=ColorData)
    format_version: int | None = None
