"""Tests for the drcheck command line entry point and the capture generator.

The generator is run as a script, the way it is used; its output is then
checked with drcheck.cli.main().
"""

import contextlib
import io
import json
import os
import subprocess
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from drcheck.cli import EXIT_BAD_INPUT, EXIT_CODES, build_parser, main
from drcheck.codec.spatial import SpatialEncoder
from drcheck.codec.types import SpatialSample
from drcheck.harness.capture import CapturedUpdate, write_capture
from drcheck.harness.test_case import Verdict

START = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
PARAMS = {
    "positionThresholdMin": 0.0,
    "positionThresholdMax": 0.5,
    "orientationThresholdMin": 0.0,
    "orientationThresholdMax": 0.1,
    "timestampRequired": False,
    "positionAndOrientationRequired": False,
}


def run_main(argv):
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        code = main(argv)
    return code, out.getvalue()


class TestCommandLine(unittest.TestCase):
    """Test cases for drcheck.cli.main()."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.params = self.tmp / "params.json"
        self.params.write_text(json.dumps(PARAMS))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write_updates(self, xs) -> str:
        encoder = SpatialEncoder()
        updates = [
            CapturedUpdate(
                "tank",
                encoder.encode(SpatialSample(2, position=[x, 0.0, 0.0], velocity=[10.0, 0.0, 0.0])),
                format(i * 1_000_000, "08X").encode("ascii"),
                START + timedelta(seconds=i),
            )
            for i, x in enumerate(xs)
        ]
        return str(write_capture(self.tmp / "capture.jsonl", updates))

    def test_exit_codes(self) -> None:
        """Test the exit code of each verdict and of bad input."""
        self.assertEqual(EXIT_CODES[Verdict.PASSED], 0)
        self.assertEqual(EXIT_CODES[Verdict.FAILED], 1)
        self.assertEqual(EXIT_CODES[Verdict.INCONCLUSIVE], 2)
        self.assertEqual(EXIT_BAD_INPUT, 3)

    def test_passed(self) -> None:
        """Test that a conforming capture exits with 0."""
        code, out = run_main([str(self.params), self.write_updates([0.0, 10.0, 20.0])])
        self.assertEqual(code, 0)
        self.assertIn("Dead Reckoning test PASSED", out)

    def test_failed(self) -> None:
        """Test that a failing capture exits with 1."""
        code, out = run_main([str(self.params), self.write_updates([0.0, 10.0, 40.0])])
        self.assertEqual(code, 1)
        self.assertIn("FAILED", out)

    def test_inconclusive(self) -> None:
        """Test that a too short capture exits with 2."""
        code, out = run_main([str(self.params), self.write_updates([0.0])])
        self.assertEqual(code, 2)
        self.assertIn("INCONCLUSIVE", out)

    def test_bad_params(self) -> None:
        """Test that invalid parameters exit with 3 and print nothing."""
        self.params.write_text(json.dumps({"positionThresholdMin": 0.0}))
        code, out = run_main([str(self.params), self.write_updates([0.0, 10.0, 20.0])])
        self.assertEqual(code, EXIT_BAD_INPUT)
        self.assertEqual(out, "")

    def test_missing_capture(self) -> None:
        """Test that a missing capture exits with 3."""
        code, _ = run_main([str(self.params), str(self.tmp / "missing.jsonl")])
        self.assertEqual(code, EXIT_BAD_INPUT)

    def test_plots_saved(self) -> None:
        """Test that --plot writes both figures."""
        figs = self.tmp / "figs"
        code, _ = run_main([str(self.params), self.write_updates([0.0, 10.0, 20.0]),
                            "--plot", str(figs), "--log-level", "warning"])
        self.assertEqual(code, 0)
        self.assertTrue((figs / "deviation_vs_time.png").exists())
        self.assertTrue((figs / "success_rates.png").exists())

    def test_log_level_is_case_insensitive(self) -> None:
        """Test that --log-level accepts lower case names."""
        args = build_parser().parse_args(["p.json", "c.jsonl", "--log-level", "debug"])
        self.assertEqual(args.log_level, "DEBUG")
        self.assertIsNone(args.plot)


class TestGeneratedCaptures(unittest.TestCase):
    """Run the generator script and check its captures end to end."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.workspace_root = Path(__file__).parent.parent.parent.parent
        self.script_path = self.workspace_root / "scripts" / "generate_dr_capture.py"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def generate(self, preset: str) -> Path:
        output = self.tmp / preset
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(self.workspace_root),
                                                          env.get("PYTHONPATH")]))
        result = subprocess.run(
            [sys.executable, str(self.script_path), "--preset", preset, "--output", str(output)],
            capture_output=True,
            text=True,
            timeout=120,
            env=env,
        )
        self.assertEqual(result.returncode, 0, msg=result.stderr)
        return output

    def check(self, preset: str) -> int:
        output = self.generate(preset)
        code, _ = run_main([str(output / "params.json"), str(output / "capture.jsonl"),
                            "--log-level", "ERROR"])
        return code

    def test_conforming_passes(self) -> None:
        """Test that the conforming preset passes."""
        self.assertEqual(self.check("conforming"), 0)

    def test_dis_tags_pass(self) -> None:
        """Test that the DIS tag preset passes."""
        self.assertEqual(self.check("dis_tags"), 0)

    def test_untagged_passes_without_timestamp_requirement(self) -> None:
        """Test that the untagged preset passes when time tags are optional."""
        self.assertEqual(self.check("untagged"), 0)

    def test_faulty_fails(self) -> None:
        """Test that the faulty preset fails."""
        self.assertEqual(self.check("faulty"), 1)


if __name__ == "__main__":
    unittest.main()
