"""Unit tests for the capture file format."""

import os
import tempfile
import unittest
from datetime import datetime, timezone

import pytest

from drcheck.errors import CaptureError
from drcheck.harness.capture import CapturedUpdate, iter_capture, read_capture, write_capture

RECEIVED = datetime(2024, 5, 1, 12, 0, 1, tzinfo=timezone.utc)


class TestCapturedUpdate(unittest.TestCase):
    """Test cases for one captured update line."""

    def test_line_format(self) -> None:
        """Test the JSON line layout of a captured update."""
        update = CapturedUpdate("tank-1", bytes([4, 0, 255]), b"00003E80", RECEIVED)
        line = update.to_json()
        self.assertIn('"payload": "0400ff"', line)
        self.assertIn('"tag": "3030303033453830"', line)
        self.assertEqual(CapturedUpdate.from_json(line), update)

    def test_optional_fields(self) -> None:
        """Test that tag and receive time may be missing."""
        update = CapturedUpdate.from_json('{"object": "tank-1", "payload": "00", "tag": null}')
        self.assertIsNone(update.tag)
        self.assertIsNone(update.received_at)
        self.assertEqual(update.payload, b"\x00")

    def test_naive_received_at_is_utc(self) -> None:
        """Test that a naive receive time is read as UTC."""
        update = CapturedUpdate.from_json(
            '{"object": "a", "payload": "00", "received_at": "2024-05-01T12:00:01"}')
        self.assertEqual(update.received_at, RECEIVED)

    def test_invalid_records(self) -> None:
        """Test that malformed lines raise CaptureError."""
        lines = [
            "not json",
            "[1, 2]",
            '{"payload": "00"}',
            '{"object": "", "payload": "00"}',
            '{"object": "a", "payload": "zz"}',
            '{"object": "a", "payload": "00", "tag": 5}',
            '{"object": "a", "payload": "00", "received_at": "yesterday"}',
        ]
        for line in lines:
            with pytest.raises(CaptureError):
                CapturedUpdate.from_json(line)


class TestCaptureFiles(unittest.TestCase):
    """Test cases for reading and writing capture files."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_write_and_read(self) -> None:
        """Test that a written capture reads back unchanged."""
        updates = [
            CapturedUpdate("tank-1", b"\x02" + bytes(59), b"00000000", RECEIVED),
            CapturedUpdate("jeep", b"\x01" + bytes(47)),
        ]
        path = write_capture(os.path.join(self.tmp, "runs", "capture.jsonl"), updates)
        self.assertTrue(path.exists())
        self.assertEqual(read_capture(path), updates)

    def test_blank_lines_skipped(self) -> None:
        """Test that blank lines are skipped."""
        path = os.path.join(self.tmp, "capture.jsonl")
        with open(path, "w") as f:
            f.write('{"object": "a", "payload": "00"}\n\n   \n{"object": "b", "payload": "01"}\n')
        self.assertEqual([u.object_id for u in iter_capture(path)], ["a", "b"])

    def test_error_names_line(self) -> None:
        """Test that errors name the file and line number."""
        path = os.path.join(self.tmp, "capture.jsonl")
        with open(path, "w") as f:
            f.write('{"object": "a", "payload": "00"}\n{"object": "b"\n')
        with pytest.raises(CaptureError, match="capture.jsonl:2"):
            read_capture(path)

    def test_missing_file(self) -> None:
        """Test that a missing capture file is rejected."""
        with pytest.raises(CaptureError, match="Unable to read"):
            read_capture(os.path.join(self.tmp, "missing.jsonl"))


if __name__ == "__main__":
    unittest.main()
