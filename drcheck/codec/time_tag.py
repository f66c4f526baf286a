"""
Time tag decoding and absolute timestamp reconstruction.

A time tag carries only the offset into the current hour. Two formats are
accepted:

    (a) 4 octets, a big-endian signed 32-bit count of 2^-31 hour units
        shifted left by one; the offset is trunc(trunc(v / 2) * 1.676) µs.
    (b) 8 ASCII hexadecimal digits giving the offset in µs directly.

Format (a) is tried first. Either way the result must fall inside one hour.

The absolute time of an update is rebuilt from the hour of the previous
update of the same object, or from the wall clock for the first update.
"""

import struct
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from drcheck.errors import TimeTagError

MICROS_PER_HOUR = 3_600_000_000
TICK_MICROS = 1.676

TagLike = Union[bytes, bytearray, memoryview, str]


def _from_binary(raw: bytes) -> Optional[int]:
    if len(raw) != 4:
        return None
    (value,) = struct.unpack(">i", raw)
    return int(int(value / 2) * TICK_MICROS)


def _from_hex(raw: bytes) -> Optional[int]:
    if len(raw) != 8:
        return None
    try:
        text = raw.decode("ascii")
        return int(text, 16) if all(c in "0123456789abcdefABCDEF" for c in text) else None
    except UnicodeDecodeError:
        return None


def _in_hour(micros: Optional[int]) -> bool:
    return micros is not None and 0 <= micros < MICROS_PER_HOUR


def decode_time_tag(tag: TagLike) -> int:
    """
    Decode a time tag to microseconds past the hour.

    Args:
        tag: Raw tag octets (a str is taken as its ASCII octets).

    Returns:
        Offset in microseconds, in [0, 3_600_000_000).

    Raises:
        TimeTagError: If the tag is in neither format or overflows the hour.

    Example:
        >>> decode_time_tag(b"00003E80")
        16000
        >>> decode_time_tag(bytes([0, 0, 0, 100]))
        83
    """
    if tag is None:
        raise TimeTagError("No time tag supplied")
    raw = tag.encode("ascii", errors="replace") if isinstance(tag, str) else bytes(tag)

    micros = _from_binary(raw)
    if _in_hour(micros):
        return micros

    micros = _from_hex(raw)
    if _in_hour(micros):
        return micros

    raise TimeTagError(f"Unrecognised time tag: {raw!r}")


def _hour_of(moment: datetime) -> datetime:
    return moment.replace(minute=0, second=0, microsecond=0)


def offset_in_hour(moment: datetime) -> int:
    """Microseconds elapsed since the start of the hour containing moment."""
    return (moment.minute * 60 + moment.second) * 1_000_000 + moment.microsecond


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimeReconstructor:
    """
    Rebuild absolute timestamps from offsets into the hour.

    The first update of an object is placed in the hour of the current wall
    clock. Later updates reuse the hour of the previous update and move to
    the next hour when the offset goes backwards. A late update whose tag
    is smaller than the previous one is therefore also placed an hour
    ahead; this is the rollover behaviour and is kept as is.

    Example:
        >>> start = datetime(2024, 5, 1, 12, 59, 0, tzinfo=timezone.utc)
        >>> rec = TimeReconstructor(clock=lambda: start)
        >>> first = rec.reconstruct(3_599_000_000, None)
        >>> rec.reconstruct(1_000_000, first).hour
        13
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def reconstruct(
        self,
        offset_us: int,
        previous: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> datetime:
        """
        Absolute timestamp of an update.

        Args:
            offset_us: Decoded time tag, microseconds past the hour.
            previous: Timestamp of the previous update of the same object,
                      or None for its first update.
            now: Wall clock time of reception; defaults to the clock.

        Returns:
            Timestamp with the same tzinfo as its base.
        """
        if previous is None:
            base = _hour_of(now if now is not None else self.clock())
        else:
            base = _hour_of(previous)
            if offset_us < offset_in_hour(previous):
                base += timedelta(hours=1)
        return base + timedelta(microseconds=offset_us)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
