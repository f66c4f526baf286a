"""Command-line entry point: run a dead reckoning test over a capture file.

Usage:
    drcheck PARAMS.json CAPTURE.jsonl [--plot DIR] [--log-level LEVEL]

Exit status:
    0  PASSED
    1  FAILED
    2  INCONCLUSIVE
    3  the parameters or the capture could not be read
"""

import argparse
import logging
import sys
from typing import List, Optional

from drcheck.errors import CaptureError, ConfigError
from drcheck.harness.capture import iter_capture
from drcheck.harness.config import DeadReckoningParams
from drcheck.harness.test_case import DeadReckoningTestCase, Verdict
from drcheck.utils.diagnostics import default_logger

EXIT_CODES = {
    Verdict.PASSED: 0,
    Verdict.FAILED: 1,
    Verdict.INCONCLUSIVE: 2,
}
EXIT_BAD_INPUT = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drcheck",
        description="Check recorded Spatial updates against their dead reckoning models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the test and log at INFO level
  drcheck params.json capture.jsonl

  # Also save deviation plots
  drcheck params.json capture.jsonl --plot figs/

  # Only report the verdict and errors
  drcheck params.json capture.jsonl --log-level WARNING
""",
    )
    parser.add_argument("params", type=str, help="Test parameters (JSON)")
    parser.add_argument("capture", type=str, help="Recorded updates (JSON lines)")
    parser.add_argument(
        "--plot",
        type=str,
        default=None,
        metavar="DIR",
        help="Save deviation and success-rate figures to DIR",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics level (default: INFO)",
    )
    return parser


def save_plots(report, params: DeadReckoningParams, out_dir: str, logger: logging.Logger) -> None:
    import matplotlib

    matplotlib.use("Agg")

    from drcheck.eval.plots import plot_deviation_time, plot_success_rates, save_figure

    outcome = report.outcome
    if outcome is None:
        logger.info("No evaluation took place; no figures saved")
        return

    fig = plot_deviation_time(outcome.pairs, params.tolerances)
    paths = save_figure(fig, out_dir, "deviation_vs_time")
    paths += save_figure(plot_success_rates(outcome), out_dir, "success_rates")

    for path in paths:
        logger.info("Saved: %s", path)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    args = build_parser().parse_args(argv)

    logger = default_logger(getattr(logging, args.log_level))
    logger.setLevel(getattr(logging, args.log_level))

    try:
        params = DeadReckoningParams.load(args.params)
        report = DeadReckoningTestCase(params, logger).run(iter_capture(args.capture))
    except (ConfigError, CaptureError) as exc:
        logger.error("%s", exc)
        return EXIT_BAD_INPUT

    if args.plot:
        save_plots(report, params, args.plot, logger)

    print(report.summary())
    return EXIT_CODES[report.verdict]


if __name__ == "__main__":
    sys.exit(main())
