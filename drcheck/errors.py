"""
Exception types raised by the dead reckoning checker.

Per-sample problems (a payload that cannot be decoded, a time tag in an
unknown format) are raised by the codec and absorbed by the model. Run-level
outcomes (failed comparisons, not enough data) are raised by the model and
turned into a verdict by the test case.
"""

from typing import Optional


class DrCheckError(Exception):
    """Base class for all drcheck errors."""


class DecodeError(DrCheckError):
    """A Spatial attribute payload could not be decoded."""


class TimeTagError(DrCheckError):
    """A time tag is in neither of the supported formats."""


class ConfigError(DrCheckError):
    """Test parameters are missing or malformed."""


class EvaluationInconclusive(DrCheckError):
    """No comparison could be attempted (e.g. insufficient data)."""


class EvaluationFailed(DrCheckError):
    """The evaluation ran and the system under test did not conform.

    Attributes:
        outcome: The EvaluationOutcome gathered before failing, if any.
    """

    def __init__(self, message: str, outcome: Optional[object] = None):
        super().__init__(message)
        self.outcome = outcome


class CaptureError(DrCheckError):
    """A recorded capture file could not be read."""
