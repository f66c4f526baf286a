"""Unit tests for update ingestion and evaluation queries."""

import logging
import unittest
from datetime import datetime, timedelta, timezone

import pytest

from drcheck.codec.spatial import SpatialEncoder
from drcheck.codec.types import SpatialSample
from drcheck.errors import EvaluationFailed, EvaluationInconclusive
from drcheck.eval.types import ToleranceConfig
from drcheck.harness.config import DeadReckoningParams
from drcheck.harness.model import DeadReckoningModel

LOGGER = logging.getLogger("drcheck.test.model")
NOW = datetime(2024, 5, 1, 12, 34, 56, tzinfo=timezone.utc)
HOUR = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
ENCODER = SpatialEncoder()


def payload(x: float, model: int = 2) -> bytes:
    return ENCODER.encode(SpatialSample(model, position=[x, 0.0, 0.0], velocity=[10.0, 0.0, 0.0]))


def hex_tag(seconds: float) -> bytes:
    return format(round(seconds * 1_000_000), "08X").encode("ascii")


def make_model(**tolerances) -> DeadReckoningModel:
    tolerances.setdefault("position_min", 0.0)
    tolerances.setdefault("position_max", 0.5)
    params = DeadReckoningParams(tolerances=ToleranceConfig(**tolerances))
    return DeadReckoningModel(params, LOGGER, clock=lambda: NOW)


class TestIngestion(unittest.TestCase):
    """Test cases for DeadReckoningModel.on_update()."""

    def test_tagged_updates_use_reconstructed_time(self) -> None:
        """Test that tagged updates are stored at their reconstructed time."""
        model = make_model()
        self.assertTrue(model.on_update("tank", payload(0.0), b"00003E80"))
        self.assertTrue(model.on_update("tank", payload(10.0), hex_tag(1.016)))

        history = model.histories["tank"]
        self.assertEqual(history.start_time, HOUR + timedelta(microseconds=16000))
        self.assertEqual(history.last_time, HOUR + timedelta(seconds=1, microseconds=16000))
        self.assertEqual(model.get_non_timestamped_objects(), set())

    def test_binary_tags(self) -> None:
        """Test that DIS tags are scaled to microseconds."""
        model = make_model()
        model.on_update("tank", payload(0.0), bytes([0, 0, 0, 100]))
        self.assertEqual(model.histories["tank"].start_time, HOUR + timedelta(microseconds=83))

    def test_tag_rollover_moves_to_next_hour(self) -> None:
        """Test that a smaller tag after a larger one moves to the next hour."""
        model = make_model()
        model.on_update("tank", payload(0.0), hex_tag(3599.5))
        model.on_update("tank", payload(10.0), hex_tag(0.5))
        times = [t for t, _ in model.histories["tank"].items()]
        self.assertEqual(times[1] - times[0], timedelta(seconds=1))

    def test_untagged_update_uses_receive_time(self) -> None:
        """Test that missing or bad tags fall back to the receive time."""
        model = make_model()
        received = datetime(2024, 5, 1, 12, 40, tzinfo=timezone.utc)
        with self.assertLogs(LOGGER, level="WARNING"):
            self.assertTrue(model.on_update("jeep", payload(0.0), None, received_at=received))
        self.assertTrue(model.on_update("jeep", payload(10.0), b"bogus", received_at=received + timedelta(seconds=1)))

        history = model.histories["jeep"]
        self.assertEqual(len(history), 2)
        self.assertEqual(history.start_time, received)
        self.assertEqual(model.get_non_timestamped_objects(), {"jeep"})

    def test_object_stays_flagged_after_tagged_updates(self) -> None:
        """Test that an object stays flagged once it sent an untagged update."""
        model = make_model()
        model.on_update("jeep", payload(0.0), None)
        model.on_update("jeep", payload(10.0), hex_tag(3000.0))
        self.assertEqual(model.get_non_timestamped_objects(), {"jeep"})

    def test_naive_receive_time_is_utc(self) -> None:
        """Test that a naive receive time is taken as UTC."""
        model = make_model()
        model.on_update("jeep", payload(0.0), None, received_at=datetime(2024, 5, 1, 12, 40))
        self.assertEqual(model.histories["jeep"].start_time.tzinfo, timezone.utc)

    def test_undecodable_update_dropped(self) -> None:
        """Test that an undecodable update is logged and dropped."""
        model = make_model()
        with self.assertLogs(LOGGER, level="ERROR") as logs:
            self.assertFalse(model.on_update("tank", bytes([10]) + bytes(40), b"00003E80"))
        self.assertIn("Failed to decode", logs.output[0])
        self.assertEqual(model.decode_failures, 1)
        self.assertNotIn("tank", model.histories)
        self.assertEqual(model.get_non_timestamped_objects(), set())

    def test_updates_after_stop_ignored(self) -> None:
        """Test that updates after stop_ingestion() are ignored."""
        model = make_model()
        model.stop_ingestion()
        self.assertFalse(model.ingesting)
        self.assertFalse(model.on_update("tank", payload(0.0), b"00003E80"))
        self.assertEqual(model.histories, {})


class TestEvaluation(unittest.TestCase):
    """Test cases for DeadReckoningModel.run_evaluation()."""

    def feed(self, model: DeadReckoningModel, object_id: str, xs) -> None:
        for i, x in enumerate(xs):
            model.on_update(object_id, payload(x), hex_tag(60.0 + i))

    def test_sufficient_data_needs_three_updates(self) -> None:
        """Test that some object needs three updates."""
        model = make_model()
        self.feed(model, "tank", [0.0, 10.0])
        self.assertFalse(model.is_sufficient_data_received())
        self.feed(model, "jeep", [0.0, 10.0, 20.0])
        self.assertTrue(model.is_sufficient_data_received())

    def test_insufficient_data_is_inconclusive(self) -> None:
        """Test that too few updates raise EvaluationInconclusive."""
        model = make_model()
        self.feed(model, "tank", [0.0, 10.0])
        model.stop_ingestion()
        with pytest.raises(EvaluationInconclusive, match="Insufficient data"):
            model.run_evaluation()

    def test_conforming_run(self) -> None:
        """Test a run where every pair is in band."""
        model = make_model()
        self.feed(model, "tank", [0.0, 10.0, 20.0, 30.0])
        model.stop_ingestion()
        outcome = model.run_evaluation()
        self.assertTrue(outcome.success)
        self.assertEqual(outcome.total_successes, 3)

    def test_failed_pairs_raise_with_outcome(self) -> None:
        """Test that failed pairs raise EvaluationFailed carrying the outcome."""
        model = make_model()
        self.feed(model, "tank", [0.0, 10.0, 25.0])
        model.stop_ingestion()
        with pytest.raises(EvaluationFailed, match="1 Dead Reckoning calculations failed") as info:
            model.run_evaluation()
        self.assertEqual(info.value.outcome.total_failures, 1)

    def test_timestamp_required(self) -> None:
        """Test that an untagged object fails a run that requires time tags."""
        model = make_model(timestamp_required=True)
        self.feed(model, "tank", [0.0, 10.0, 20.0])
        model.on_update("jeep", payload(0.0), None)
        model.stop_ingestion()
        with self.assertLogs(LOGGER, level="ERROR") as logs:
            with pytest.raises(EvaluationFailed, match="timestampRequired") as info:
                model.run_evaluation()
        self.assertTrue(info.value.outcome.success is False)
        self.assertEqual(info.value.outcome.total_failures, 0)
        self.assertIn("jeep", logs.output[-1])

    def test_untagged_updates_allowed_by_default(self) -> None:
        """Test that untagged objects do not fail the run by default."""
        model = make_model()
        self.feed(model, "tank", [0.0, 10.0, 20.0])
        model.on_update("jeep", payload(0.0), None)
        model.stop_ingestion()
        self.assertTrue(model.run_evaluation().success)


if __name__ == "__main__":
    unittest.main()
