"""Binary I/O utilities shared by every scenario section."""

import struct
from enum import Enum
from typing import BinaryIO, Optional
from io import BytesIO

from ..errors import InvalidString, StringTooLong, TruncatedInput, ValueOutOfRange

# The engine stores all text in the Windows western code page.
TEXT_ENCODING = "cp1252"

_UNSIGNED = {1: "B", 2: "H", 4: "I", 8: "Q"}
_SIGNED = {1: "b", 2: "h", 4: "i", 8: "q"}


class ByteOrder(Enum):
    """Byte order enum for struct packing/unpacking."""
    BIG_ENDIAN = ">"
    LITTLE_ENDIAN = "<"


class IoBuffer:
    """
    Binary reader/writer with endian support and bounds checking.

    Reads never return short data: a field that runs past the end of the
    stream raises TruncatedInput. Writes are range checked against the
    declared width instead of letting struct wrap or fail with a bare error.
    `section` is attached to every error raised so callers can tell which
    part of the file was being processed.
    """

    def __init__(self, stream: BinaryIO, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN):
        self.stream = stream
        self.byte_order = byte_order
        self.section: Optional[str] = None

    @classmethod
    def from_bytes(cls, data: bytes, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN) -> 'IoBuffer':
        """Create from bytes."""
        return cls(BytesIO(data), byte_order)

    @classmethod
    def from_stream(cls, stream: BinaryIO, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN) -> 'IoBuffer':
        """Wrap an already open binary stream."""
        return cls(stream, byte_order)

    @classmethod
    def writer(cls, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN) -> 'IoBuffer':
        """Create an empty in-memory buffer for writing."""
        return cls(BytesIO(), byte_order)

    def getvalue(self) -> bytes:
        """Everything written so far (in-memory buffers only)."""
        return self.stream.getvalue()

    @property
    def position(self) -> int:
        """Current position in stream."""
        return self.stream.tell()

    @position.setter
    def position(self, value: int):
        """Seek to position."""
        self.stream.seek(value)

    @property
    def remaining(self) -> int:
        """Number of bytes between the position and the end of the stream."""
        current = self.stream.tell()
        end = self.stream.seek(0, 2)
        self.stream.seek(current)
        return end - current

    @property
    def has_more(self) -> bool:
        """Check if there are more bytes to read."""
        return self.remaining > 0

    def require(self, num_bytes: int, field: Optional[str] = None):
        """Fail with TruncatedInput unless num_bytes can still be read."""
        available = self.remaining
        if available < num_bytes:
            raise TruncatedInput(num_bytes, available, section=self.section,
                                 field=field, offset=self.position)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_bytes(self, count: int, field: Optional[str] = None) -> bytes:
        """Read exactly `count` raw bytes."""
        if count < 0:
            raise ValueOutOfRange(count, "byte count must be >= 0", section=self.section,
                                  field=field, offset=self.position)
        offset = self.position
        data = self.stream.read(count)
        if len(data) != count:
            raise TruncatedInput(count, len(data), section=self.section,
                                 field=field, offset=offset)
        return data

    def _unpack(self, code: str, size: int, field: Optional[str]):
        data = self.read_bytes(size, field)
        return struct.unpack(f"{self.byte_order.value}{code}", data)[0]

    def read_uint(self, width: int, field: Optional[str] = None) -> int:
        """Read an unsigned integer of `width` bytes."""
        return self._unpack(_UNSIGNED[width], width, field)

    def read_int(self, width: int, field: Optional[str] = None) -> int:
        """Read a signed integer of `width` bytes."""
        return self._unpack(_SIGNED[width], width, field)

    def read_byte(self, field: Optional[str] = None) -> int:
        """Read single byte (0-255)."""
        return self.read_uint(1, field)

    def read_uint8(self, field: Optional[str] = None) -> int:
        return self.read_uint(1, field)

    def read_sbyte(self, field: Optional[str] = None) -> int:
        """Read signed byte (-128 to 127)."""
        return self.read_int(1, field)

    def read_uint16(self, field: Optional[str] = None) -> int:
        return self.read_uint(2, field)

    def read_int16(self, field: Optional[str] = None) -> int:
        return self.read_int(2, field)

    def read_uint32(self, field: Optional[str] = None) -> int:
        return self.read_uint(4, field)

    def read_int32(self, field: Optional[str] = None) -> int:
        return self.read_int(4, field)

    def read_bool32(self, field: Optional[str] = None) -> bool:
        """Read a 32-bit flag; any non-zero value is true."""
        return self.read_uint32(field) != 0

    def read_float(self, field: Optional[str] = None) -> float:
        """Read 32-bit float."""
        return self._unpack("f", 4, field)

    def read_double(self, field: Optional[str] = None) -> float:
        """Read 64-bit double."""
        return self._unpack("d", 8, field)

    def _decode_text(self, data: bytes, field: Optional[str], offset: int) -> str:
        null_idx = data.find(b"\0")
        if null_idx != -1:
            data = data[:null_idx]
        try:
            return data.decode(TEXT_ENCODING)
        except UnicodeDecodeError as e:
            raise InvalidString(str(e), section=self.section, field=field,
                                offset=offset) from e

    def read_cstring(self, length: int, field: Optional[str] = None) -> str:
        """Read a fixed-length, NUL padded character buffer."""
        offset = self.position
        return self._decode_text(self.read_bytes(length, field), field, offset)

    def read_prefixed_string(self, prefix_width: int, field: Optional[str] = None) -> str:
        """Read a string preceded by its byte length (which counts the NUL)."""
        length = self.read_uint(prefix_width, field)
        return self.read_cstring(length, field)

    def read_pascal_string(self, field: Optional[str] = None) -> str:
        """Read length-prefixed string (2 byte length)."""
        return self.read_prefixed_string(2, field)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write_bytes(self, data: bytes):
        """Write raw bytes."""
        self.stream.write(data)

    def _pack(self, code: str, value, field: Optional[str] = None, index: Optional[int] = None):
        try:
            data = struct.pack(f"{self.byte_order.value}{code}", value)
        except (OverflowError, struct.error) as e:
            raise ValueOutOfRange(value, str(e), section=self.section, field=field,
                                  index=index, offset=self.position) from e
        self.stream.write(data)

    def write_uint(self, value: int, width: int, field: Optional[str] = None, index: Optional[int] = None):
        """Write an unsigned integer, refusing values wider than `width` bytes."""
        limit = (1 << (8 * width)) - 1
        if not 0 <= value <= limit:
            raise ValueOutOfRange(value, f"0..{limit}", section=self.section,
                                  field=field, index=index, offset=self.position)
        self._pack(_UNSIGNED[width], value)

    def write_int(self, value: int, width: int, field: Optional[str] = None, index: Optional[int] = None):
        """Write a signed integer, refusing values wider than `width` bytes."""
        low = -(1 << (8 * width - 1))
        high = (1 << (8 * width - 1)) - 1
        if not low <= value <= high:
            raise ValueOutOfRange(value, f"{low}..{high}", section=self.section,
                                  field=field, index=index, offset=self.position)
        self._pack(_SIGNED[width], value)

    def write_byte(self, value: int, field: Optional[str] = None):
        """Write single byte."""
        self.write_uint(value, 1, field)

    def write_sbyte(self, value: int, field: Optional[str] = None):
        self.write_int(value, 1, field)

    def write_uint16(self, value: int, field: Optional[str] = None):
        """Write unsigned 16-bit integer."""
        self.write_uint(value, 2, field)

    def write_uint32(self, value: int, field: Optional[str] = None):
        """Write unsigned 32-bit integer."""
        self.write_uint(value, 4, field)

    def write_int32(self, value: int, field: Optional[str] = None):
        self.write_int(value, 4, field)

    def write_bool32(self, value: bool):
        self.write_uint32(1 if value else 0)

    def write_float(self, value: float, field: Optional[str] = None, index: Optional[int] = None):
        """Write 32-bit float. Finite values beyond the f32 range are refused."""
        self._pack("f", value, field, index)

    def write_double(self, value: float, field: Optional[str] = None):
        self._pack("d", value, field)

    def _encode_text(self, text: str, field: Optional[str]) -> bytes:
        # Readers stop at the first NUL, so it cannot appear inside the text.
        if "\0" in text:
            raise InvalidString(f"embedded NUL at index {text.index(chr(0))}",
                                section=self.section, field=field, offset=self.position)
        try:
            return text.encode(TEXT_ENCODING)
        except UnicodeEncodeError as e:
            raise InvalidString(str(e), section=self.section, field=field,
                                offset=self.position) from e

    def write_cstring(self, text: str, length: int, field: Optional[str] = None):
        """Write text into a fixed buffer of `length` bytes, NUL padded."""
        data = self._encode_text(text, field)
        # One byte is kept for the terminator.
        if len(data) >= length:
            raise StringTooLong(len(data), length - 1, section=self.section,
                                field=field, offset=self.position)
        self.stream.write(data.ljust(length, b"\0"))

    def write_prefixed_string(self, text: str, prefix_width: int, field: Optional[str] = None):
        """Write a length-prefixed, NUL terminated string. Empty text is prefix 0."""
        data = self._encode_text(text, field)
        if not data:
            self.write_uint(0, prefix_width, field)
            return
        limit = (1 << (8 * prefix_width)) - 1
        if len(data) + 1 > limit:
            raise StringTooLong(len(data) + 1, limit, section=self.section,
                                field=field, offset=self.position)
        self.write_uint(len(data) + 1, prefix_width, field)
        self.stream.write(data + b"\0")

    def write_pascal_string(self, text: str, field: Optional[str] = None):
        self.write_prefixed_string(text, 2, field)


def prefix_limit(prefix_width: int) -> int:
    """Largest byte count a length prefix of `prefix_width` bytes can hold."""
    return (1 << (8 * prefix_width)) - 1
