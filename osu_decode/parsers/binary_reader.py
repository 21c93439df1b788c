"""Little-endian primitive reader for the .osr replay format."""

import struct
from enum import IntFlag

from osu_decode.errors import InvalidEncodingError, TruncatedInputError
from osu_decode.schemas.enums import decode_flags

STRING_PRESENT = 0x0B

_INT_FORMATS = {1: "<B", 2: "<H", 4: "<I", 8: "<Q"}


class BinaryReader:
    """Consumes a byte buffer strictly left to right.

    Every read takes the name of the field being decoded so that a short
    buffer reports exactly which field it ran out on.
    """

    def __init__(self, data: bytes):
        self._view = memoryview(data)
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self.offset

    def read_bytes(self, n: int, field: str) -> bytes:
        if n < 0 or n > self.remaining:
            raise TruncatedInputError(
                field,
                f"needed {n} bytes at offset {self.offset}, {self.remaining} available",
            )
        chunk = bytes(self._view[self.offset:self.offset + n])
        self.offset += n
        return chunk

    def _read_uint(self, width: int, field: str) -> int:
        return struct.unpack(_INT_FORMATS[width], self.read_bytes(width, field))[0]

    def read_u8(self, field: str) -> int:
        return self._read_uint(1, field)

    def read_u16(self, field: str) -> int:
        return self._read_uint(2, field)

    def read_u32(self, field: str) -> int:
        return self._read_uint(4, field)

    def read_u64(self, field: str) -> int:
        return self._read_uint(8, field)

    def read_f64(self, field: str) -> float:
        # Bit reinterpretation of the raw 8 bytes, not an integer conversion
        return struct.unpack("<d", self.read_bytes(8, field))[0]

    def read_uleb128(self, field: str) -> int:
        """Unsigned base-128 varint, least-significant group first."""
        result = 0
        shift = 0
        while True:
            byte = self.read_u8(field)
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7

    def read_string(self, field: str) -> str:
        """Marker byte (0x0b = present), ULEB128 length, UTF-8 bytes.

        Any other marker means the string is absent and decodes as "".
        """
        if self.read_u8(field) != STRING_PRESENT:
            return ""
        length = self.read_uleb128(field)
        raw = self.read_bytes(length, field)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(field, f"invalid UTF-8: {e}") from None

    def read_flags(self, flag_type: type[IntFlag], width: int, field: str) -> IntFlag:
        """Read a *width*-byte bit-set and validate it against *flag_type*'s mask."""
        return decode_flags(flag_type, self._read_uint(width, field), field)
