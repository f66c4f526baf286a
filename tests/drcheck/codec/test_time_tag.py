"""Unit tests for time tag decoding and timestamp reconstruction."""

import struct
import unittest
from datetime import datetime, timedelta, timezone

import pytest

from drcheck.codec.time_tag import (
    MICROS_PER_HOUR,
    TimeReconstructor,
    as_utc,
    decode_time_tag,
    offset_in_hour,
)
from drcheck.errors import TimeTagError


class TestDecodeTimeTag(unittest.TestCase):
    """Test cases for decode_time_tag()."""

    def test_hex_format(self) -> None:
        """Test 8 character hexadecimal tags in either case."""
        self.assertEqual(decode_time_tag(b"00003E80"), 16000)
        self.assertEqual(decode_time_tag(b"00003e80"), 16000)
        self.assertEqual(decode_time_tag("00003E80"), 16000)

    def test_binary_format(self) -> None:
        """Test 4 octet DIS tags scaled to microseconds."""
        self.assertEqual(decode_time_tag(bytes([0, 0, 0, 100])), 83)
        self.assertEqual(decode_time_tag(bytes(4)), 0)

    def test_binary_format_large_value(self) -> None:
        """Test a large DIS tag against the time unit scale."""
        raw = struct.pack(">i", 2_000_000)
        self.assertEqual(decode_time_tag(raw), int(1_000_000 * 1.676))

    def test_binary_result_stays_inside_hour(self) -> None:
        """Test that the largest DIS tag still falls inside the hour."""
        raw = struct.pack(">i", 2 ** 31 - 1)
        micros = decode_time_tag(raw)
        self.assertGreaterEqual(micros, 0)
        self.assertLess(micros, MICROS_PER_HOUR)

    def test_hex_last_microsecond_of_hour(self) -> None:
        """Test the last microsecond of the hour as a hexadecimal tag."""
        tag = format(MICROS_PER_HOUR - 1, "08X").encode("ascii")
        self.assertEqual(decode_time_tag(tag), MICROS_PER_HOUR - 1)

    def test_negative_binary_rejected(self) -> None:
        """Test that a negative DIS tag is rejected."""
        with pytest.raises(TimeTagError):
            decode_time_tag(struct.pack(">i", -(2 ** 31)))

    def test_hex_beyond_hour_rejected(self) -> None:
        """Test that hexadecimal tags past the hour are rejected."""
        with pytest.raises(TimeTagError):
            decode_time_tag(b"FFFFFFFF")
        with pytest.raises(TimeTagError):
            decode_time_tag(format(MICROS_PER_HOUR, "08X"))

    def test_wrong_length_rejected(self) -> None:
        """Test that tags other than 4 or 8 octets are rejected."""
        for tag in (b"", b"\x00\x01\x02", b"00003E8", b"00003E800"):
            with pytest.raises(TimeTagError):
                decode_time_tag(tag)

    def test_non_hex_rejected(self) -> None:
        """Test that 8 octet tags with non hexadecimal digits are rejected."""
        with pytest.raises(TimeTagError):
            decode_time_tag(b"00003G80")
        with pytest.raises(TimeTagError):
            decode_time_tag(b"\xff\xfe\xfd\xfc\xfb\xfa\xf9\xf8")

    def test_missing_tag_rejected(self) -> None:
        """Test that a missing tag is rejected."""
        with pytest.raises(TimeTagError):
            decode_time_tag(None)


class TestTimeReconstructor(unittest.TestCase):
    """Test cases for TimeReconstructor.reconstruct()."""

    def setUp(self) -> None:
        self.now = datetime(2024, 5, 1, 12, 34, 56, 789000, tzinfo=timezone.utc)
        self.reconstructor = TimeReconstructor(clock=lambda: self.now)

    def test_first_update_uses_wall_clock_hour(self) -> None:
        """Test that the first update is placed in the current hour."""
        stamp = self.reconstructor.reconstruct(16000, None)
        self.assertEqual(stamp, datetime(2024, 5, 1, 12, 0, 0, 16000, tzinfo=timezone.utc))

    def test_explicit_reception_time_overrides_clock(self) -> None:
        """Test that an explicit reception time replaces the clock."""
        received = datetime(2024, 5, 1, 7, 15, tzinfo=timezone.utc)
        stamp = self.reconstructor.reconstruct(1_000_000, None, now=received)
        self.assertEqual(stamp, datetime(2024, 5, 1, 7, 0, 1, tzinfo=timezone.utc))

    def test_later_update_same_hour(self) -> None:
        """Test that a larger offset stays in the previous update's hour."""
        previous = datetime(2024, 5, 1, 12, 10, tzinfo=timezone.utc)
        stamp = self.reconstructor.reconstruct(11 * 60 * 1_000_000, previous)
        self.assertEqual(stamp, datetime(2024, 5, 1, 12, 11, tzinfo=timezone.utc))

    def test_equal_offset_stays_in_hour(self) -> None:
        """Test that an equal offset does not roll over."""
        previous = datetime(2024, 5, 1, 12, 10, tzinfo=timezone.utc)
        stamp = self.reconstructor.reconstruct(offset_in_hour(previous), previous)
        self.assertEqual(stamp, previous)

    def test_hour_rollover(self) -> None:
        """Test that a smaller offset moves to the next hour."""
        previous = datetime(2024, 5, 1, 12, 59, 59, tzinfo=timezone.utc)
        stamp = self.reconstructor.reconstruct(500_000, previous)
        self.assertEqual(stamp, datetime(2024, 5, 1, 13, 0, 0, 500000, tzinfo=timezone.utc))

    def test_rollover_across_midnight(self) -> None:
        """Test rollover from 23:59 to the next day."""
        previous = datetime(2024, 5, 1, 23, 59, 30, tzinfo=timezone.utc)
        stamp = self.reconstructor.reconstruct(0, previous)
        self.assertEqual(stamp, datetime(2024, 5, 2, 0, 0, tzinfo=timezone.utc))

    def test_late_update_is_placed_an_hour_ahead(self) -> None:
        """A reordered update with a smaller tag is treated as a rollover."""
        previous = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        late = self.reconstructor.reconstruct(29 * 60 * 1_000_000, previous)
        self.assertEqual(late - previous, timedelta(minutes=59))

    def test_offset_in_hour(self) -> None:
        """Test microseconds past the hour of a datetime."""
        moment = datetime(2024, 5, 1, 12, 2, 3, 4, tzinfo=timezone.utc)
        self.assertEqual(offset_in_hour(moment), 123_000_004)


class TestAsUtc(unittest.TestCase):
    """Test cases for as_utc()."""

    def test_naive_is_taken_as_utc(self) -> None:
        """Test that a naive datetime is taken as UTC."""
        self.assertEqual(as_utc(datetime(2024, 1, 1, 10)).tzinfo, timezone.utc)

    def test_aware_is_converted(self) -> None:
        """Test that an aware datetime is converted to UTC."""
        plus_two = timezone(timedelta(hours=2))
        moment = as_utc(datetime(2024, 1, 1, 10, tzinfo=plus_two))
        self.assertEqual(moment, datetime(2024, 1, 1, 8, tzinfo=timezone.utc))
        self.assertEqual(moment.hour, 8)


if __name__ == "__main__":
    unittest.main()
