"""Coded enums and bit-set flags shared by the replay and beatmap models.

Coded fields (game mode, sample set, countdown, overlay position, curve type)
reject unknown codes. Bit-set fields reject any bit outside the set of known
flags: an unrecognized combination is a decode error, not a value to ignore.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag

from osu_decode.errors import InvalidEncodingError


class GameMode(IntEnum):
    STANDARD = 0
    TAIKO = 1
    CATCH_THE_BEAT = 2
    MANIA = 3


class Countdown(IntEnum):
    NO_COUNTDOWN = 0
    NORMAL = 1
    HALF = 2
    DOUBLE = 3


class SampleSet(IntEnum):
    """Sample bank. Numeric codes in hit objects/timing points, names in [General]."""

    NONE = 0
    NORMAL = 1
    SOFT = 2
    DRUM = 3

    @classmethod
    def from_name(cls, name: str) -> "SampleSet":
        try:
            return _SAMPLE_SET_NAMES[name]
        except KeyError:
            raise InvalidEncodingError(
                "SampleSet", f"unknown sample set name {name!r}"
            ) from None

    @property
    def file_prefix(self) -> str:
        # NONE falls back to the normal bank when building sample filenames
        if self is SampleSet.NONE:
            return "normal"
        return self.name.lower()


_SAMPLE_SET_NAMES = {
    "None": SampleSet.NONE,
    "Normal": SampleSet.NORMAL,
    "Soft": SampleSet.SOFT,
    "Drum": SampleSet.DRUM,
}


class OverlayPosition(Enum):
    NO_CHANGE = "NoChange"
    BELOW = "Below"
    ABOVE = "Above"


class SliderCurveType(Enum):
    BEZIER = "B"
    CENTRIPETAL_CATMULL_ROM = "C"
    LINEAR = "L"
    PERFECT_CIRCLE = "P"


class Hitsound(IntFlag):
    NONE = 0
    NORMAL = 1
    WHISTLE = 1 << 1
    FINISH = 1 << 2
    CLAP = 1 << 3


class Effects(IntFlag):
    NONE = 0
    KIAI = 1
    OMIT_BARLINE_LEGACY = 1 << 2
    OMIT_BARLINE = 1 << 3

    @property
    def omits_barline(self) -> bool:
        return bool(self & (Effects.OMIT_BARLINE | Effects.OMIT_BARLINE_LEGACY))


class InputKeys(IntFlag):
    NONE = 0
    M1 = 1
    M2 = 1 << 1
    K1 = 1 << 2
    K2 = 1 << 3
    SMOKE = 1 << 4


class Mods(IntFlag):
    NONE = 0
    NO_FAIL = 1
    EASY = 1 << 1
    TOUCH_DEVICE = 1 << 2
    HIDDEN = 1 << 3
    HARD_ROCK = 1 << 4
    SUDDEN_DEATH = 1 << 5
    DOUBLE_TIME = 1 << 6
    RELAX = 1 << 7
    HALF_TIME = 1 << 8
    NIGHTCORE = 1 << 9
    FLASHLIGHT = 1 << 10
    AUTOPLAY = 1 << 11
    SPUN_OUT = 1 << 12
    RELAX2 = 1 << 13
    PERFECT = 1 << 14
    KEY4 = 1 << 15
    KEY5 = 1 << 16
    KEY6 = 1 << 17
    KEY7 = 1 << 18
    KEY8 = 1 << 19
    FADE_IN = 1 << 20
    RANDOM = 1 << 21
    LAST_MOD = 1 << 22
    TARGET_PRACTICE = 1 << 23
    KEY9 = 1 << 24
    COOP = 1 << 25
    KEY1 = 1 << 26
    KEY3 = 1 << 27
    KEY2 = 1 << 28
    SCORE_V2 = 1 << 29
    MIRROR = 1 << 30
    KEY_MOD = KEY4 | KEY5 | KEY6 | KEY7 | KEY8


def flag_mask(flag_type: type[IntFlag]) -> int:
    """OR of every declared flag value."""
    mask = 0
    for member in flag_type.__members__.values():
        mask |= int(member)
    return mask


def decode_flags(flag_type: type[IntFlag], value: int, field: str) -> IntFlag:
    """Build *flag_type* from *value*, rejecting bits outside the known mask."""
    mask = flag_mask(flag_type)
    if value < 0 or value & ~mask:
        raise InvalidEncodingError(
            field,
            f"bit pattern {value:#x} outside valid mask {mask:#x} for {flag_type.__name__}",
        )
    return flag_type(value)


def flag_names(flags: IntFlag) -> str:
    """``A|B`` label of the single-bit members set in *flags*, ``NONE`` if empty."""
    names = [
        member.name
        for member in type(flags).__members__.values()
        if member and not member & (member - 1) and flags & member == member
    ]
    return "|".join(names) or "NONE"


def decode_code(enum_type, value, field: str):
    """Look up an enum member by its code, rejecting unknown codes."""
    try:
        return enum_type(value)
    except ValueError:
        raise InvalidEncodingError(
            field, f"unknown {enum_type.__name__} code {value!r}"
        ) from None


# Hit-object meta byte layout
_META_CIRCLE = 1
_META_SLIDER = 1 << 1
_META_NEW_COMBO = 1 << 2
_META_SPINNER = 1 << 3
_META_COMBO_SKIP_MASK = 0b0111_0000
_META_COMBO_SKIP_SHIFT = 4
_META_MANIA_HOLD = 1 << 7


@dataclass(frozen=True)
class HitObjectMeta:
    """Packed hit-object type byte.

    Bits 0-3 and 7 are independent flags; bits 4-6 together hold the number
    of combo colours to skip, so they are read with a mask and shift rather
    than as booleans.
    """

    bits: int

    @classmethod
    def from_bits(cls, value: int, field: str = "type") -> "HitObjectMeta":
        if not 0 <= value <= 0xFF:
            raise InvalidEncodingError(field, f"meta value {value} does not fit in one byte")
        return cls(value)

    @property
    def is_circle(self) -> bool:
        return bool(self.bits & _META_CIRCLE)

    @property
    def is_slider(self) -> bool:
        return bool(self.bits & _META_SLIDER)

    @property
    def new_combo(self) -> bool:
        return bool(self.bits & _META_NEW_COMBO)

    @property
    def is_spinner(self) -> bool:
        return bool(self.bits & _META_SPINNER)

    @property
    def combo_skip_count(self) -> int:
        return (self.bits & _META_COMBO_SKIP_MASK) >> _META_COMBO_SKIP_SHIFT

    @property
    def is_mania_hold(self) -> bool:
        return bool(self.bits & _META_MANIA_HOLD)
