"""
Test harness around the evaluator.

- config: test parameters read from JSON
- model: update ingestion and evaluation queries
- capture: recorded updates as JSON lines
- test_case: verdict flow of a test run
"""

from .capture import CapturedUpdate, iter_capture, read_capture, write_capture
from .config import DeadReckoningParams
from .model import DeadReckoningModel
from .test_case import DeadReckoningTestCase, TestReport, Verdict

__all__ = [
    "CapturedUpdate",
    "iter_capture",
    "read_capture",
    "write_capture",
    "DeadReckoningParams",
    "DeadReckoningModel",
    "DeadReckoningTestCase",
    "TestReport",
    "Verdict",
]
