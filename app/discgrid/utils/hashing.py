from __future__ import annotations

from typing import Any

_MASK32 = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def string_hash(value: Any) -> int:
    """Hash a string to a signed 32-bit integer.

    Classic polynomial hash ``h = 31*h + code`` with 32-bit wraparound,
    accumulated over UTF-16 code units so results match a browser's
    ``charCodeAt`` walk bit for bit (astral characters count as two units).

    Args:
        value: Usually an album id. ``None`` hashes to 0; anything else that
            is not a string is passed through ``str()`` first.

    Returns:
        Signed 32-bit integer.
    """
    if value is None:
        return 0
    if not isinstance(value, str):
        value = str(value)

    data = value.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = (31 * h + code) & _MASK32
    return _to_int32(h)


def spacer_roll(value: Any) -> float:
    """Map an id to a stable value in [0, 1] using the low byte of its hash."""
    return (string_hash(value) & 0xFF) / 255


def should_insert_spacer(value: Any, rate: float) -> bool:
    return spacer_roll(value) < rate
