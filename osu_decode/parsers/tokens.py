"""Numeric token parsing for the text formats.

Python's ``int()`` and ``float()`` accept surrounding whitespace and ``_``
separators, and ``float()`` also takes ``nan``/``inf``. The file formats allow
none of these, so tokens are matched against a strict pattern first.
"""

import re

from osu_decode.errors import MalformedNumberError

_INT_RE = re.compile(r"[+-]?\d+")
_UINT_RE = re.compile(r"\+?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

U8_MAX = 0xFF
U16_MAX = 0xFFFF
U32_MAX = 0xFFFF_FFFF
U64_MAX = 0xFFFF_FFFF_FFFF_FFFF
I16_MIN, I16_MAX = -0x8000, 0x7FFF
I64_MIN, I64_MAX = -0x8000_0000_0000_0000, 0x7FFF_FFFF_FFFF_FFFF


def is_uint(token: str) -> bool:
    return _UINT_RE.fullmatch(token) is not None and int(token) <= U64_MAX


def parse_int(token: str, field: str, lo: int = I64_MIN, hi: int = I64_MAX) -> int:
    if _INT_RE.fullmatch(token) is None:
        raise MalformedNumberError(field, f"{token!r} is not an integer")
    value = int(token)
    if not lo <= value <= hi:
        raise MalformedNumberError(field, f"{value} outside range [{lo}, {hi}]")
    return value


def parse_uint(token: str, field: str, hi: int = U64_MAX) -> int:
    if _UINT_RE.fullmatch(token) is None:
        raise MalformedNumberError(field, f"{token!r} is not an unsigned integer")
    return parse_int(token, field, 0, hi)


def parse_float(token: str, field: str) -> float:
    if _FLOAT_RE.fullmatch(token) is None:
        raise MalformedNumberError(field, f"{token!r} is not a number")
    return float(token)


def parse_bool(token: str, field: str) -> bool:
    """0/1 style flag: any non-zero integer is true."""
    return parse_uint(token, field, U8_MAX) != 0
