"""Low-level value encodings used by the FTDC format."""

from __future__ import annotations

import datetime as _dt
import struct
import zlib
from collections.abc import Sequence
from typing import Any, BinaryIO, Optional

_UINT64_MASK = (1 << 64) - 1
_MAX_VARINT_LEN = 10
_EPOCH = _dt.datetime(1970, 1, 1, tzinfo=_dt.timezone.utc)


def undelta(value: int, deltas: Sequence[int]) -> list[int]:
    """Rebuild a series from its starting value and successive deltas."""
    out = [value]
    for delta in deltas:
        out.append(out[-1] + delta)
    return out


def encode_size_value(value: int) -> bytes:
    """Encode ``value`` as a little-endian unsigned 32-bit integer."""
    return struct.pack("<I", value)


def encode_value(value: int) -> bytes:
    """Encode ``value`` as an unsigned varint of its 64-bit two's complement."""
    remaining = value & _UINT64_MASK
    out = bytearray()
    while remaining >= 0x80:
        out.append((remaining & 0x7F) | 0x80)
        remaining >>= 7
    out.append(remaining)
    return bytes(out)


def read_uvarint(stream: BinaryIO) -> int:
    """Read one unsigned varint from ``stream``.

    Raises EOFError when the stream ends before the value is complete and
    ValueError when the value does not fit in 64 bits.
    """
    result = 0
    shift = 0
    for index in range(_MAX_VARINT_LEN):
        chunk = stream.read(1)
        if not chunk:
            if index == 0:
                raise EOFError("end of stream")
            raise EOFError("unexpected end of encoded integer")
        byte = chunk[0]
        if byte < 0x80:
            if index == _MAX_VARINT_LEN - 1 and byte > 1:
                raise ValueError("varint overflows a 64-bit integer")
            return result | (byte << shift)
        result |= (byte & 0x7F) << shift
        shift += 7
    raise ValueError("varint overflows a 64-bit integer")


def compress_buffer(data: bytes) -> bytes:
    """Return the uncompressed length of ``data`` followed by its zlib stream."""
    return encode_size_value(len(data)) + zlib.compress(data)


def normalize_float(value: float) -> int:
    """Return the IEEE-754 bits of ``value`` as a signed 64-bit integer."""
    return struct.unpack("<q", struct.pack("<d", value))[0]


def restore_float(value: int) -> float:
    """Inverse of :func:`normalize_float`."""
    return struct.unpack("<d", struct.pack("<q", value))[0]


def epoch_ms(moment: _dt.datetime) -> int:
    """Milliseconds since the Unix epoch, truncated toward zero.

    Naive datetimes are taken to be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=_dt.timezone.utc)
    delta = moment - _EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis


def time_from_epoch_ms(ms: int) -> _dt.datetime:
    """Return the UTC datetime ``ms`` milliseconds after the Unix epoch."""
    return _EPOCH + _dt.timedelta(milliseconds=ms)


def is_num(num: int, value: Optional[Any]) -> bool:
    """Return True if ``value`` is an integer or double equal to ``num``."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == num
    if isinstance(value, float):
        return value == float(num)
    return False