"""
Ingestion and query interface of a dead reckoning test run.

DeadReckoningModel receives Spatial attribute updates one at a time,
decodes them, assigns each a timestamp and stores it in the history of its
object. Once ingestion is stopped the collected data can be evaluated.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, Optional, Set

from drcheck.codec.spatial import SpatialDecoder
from drcheck.codec.time_tag import TagLike, TimeReconstructor, as_utc, decode_time_tag, utc_now
from drcheck.errors import DecodeError, EvaluationFailed, EvaluationInconclusive, TimeTagError
from drcheck.eval.evaluator import Evaluator
from drcheck.eval.history import SampleHistory
from drcheck.eval.types import EvaluationOutcome
from drcheck.harness.config import DeadReckoningParams
from drcheck.utils.diagnostics import resolve_logger

MIN_UPDATES = 3


class DeadReckoningModel:
    """
    Collects Spatial updates per object and evaluates them on request.

    on_update() may be called from several threads; the object registry is
    guarded by a lock. Evaluation must only start after stop_ingestion().

    Args:
        params: Test parameters (tolerances and Spatial schema).
        logger: Diagnostics channel.
        clock: Wall clock used when an update carries no receive time.
    """

    def __init__(
        self,
        params: DeadReckoningParams,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.params = params
        self.logger = resolve_logger(logger)
        self.decoder = SpatialDecoder(params.spatial_schema, self.logger)
        self.reconstructor = TimeReconstructor(clock)
        self._histories: Dict[str, SampleHistory] = {}
        self._non_timestamped: Set[str] = set()
        self._lock = threading.Lock()
        self._ingesting = True
        self.decode_failures = 0

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def on_update(
        self,
        object_id: str,
        payload: bytes,
        tag: Optional[TagLike],
        received_at: Optional[datetime] = None,
    ) -> bool:
        """
        Ingest one Spatial attribute update.

        An update whose payload cannot be decoded is dropped. An update whose
        time tag cannot be decoded is stored under its receive time and its
        object is flagged as having sent non-timestamped updates.

        Args:
            object_id: Name of the updated object.
            payload: Raw Spatial attribute value.
            tag: Time tag sent with the update, if any.
            received_at: Time of reception; defaults to the clock.

        Returns:
            True if the update was stored.
        """
        now = as_utc(received_at) if received_at is not None else as_utc(self.reconstructor.clock())

        with self._lock:
            if not self._ingesting:
                self.logger.info("Received spatial update for %s after collection ended. Ignoring", object_id)
                return False

            try:
                sample = self.decoder.decode(payload)
            except DecodeError as exc:
                self.decode_failures += 1
                self.logger.error("Failed to decode incoming attribute for %s: %s", object_id, exc)
                return False

            history = self._histories.setdefault(object_id, SampleHistory())
            try:
                offset = decode_time_tag(tag)
            except TimeTagError as exc:
                if object_id not in self._non_timestamped:
                    self.logger.warning("Non timestamped spatial update from %s (%s); using receive time",
                                        object_id, exc)
                self._non_timestamped.add(object_id)
                history.add(now, sample)
                return True

            timestamp = self.reconstructor.reconstruct(offset, history.last_time, now)
            history.add(timestamp, sample)
            return True

    def stop_ingestion(self) -> None:
        """Stop accepting updates; later calls to on_update() are ignored."""
        with self._lock:
            self._ingesting = False

    @property
    def ingesting(self) -> bool:
        return self._ingesting

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def histories(self) -> Dict[str, SampleHistory]:
        with self._lock:
            return dict(self._histories)

    def get_non_timestamped_objects(self) -> Set[str]:
        with self._lock:
            return set(self._non_timestamped)

    def is_sufficient_data_received(self) -> bool:
        """True if at least one object has more than two stored updates."""
        with self._lock:
            return any(len(h) >= MIN_UPDATES for h in self._histories.values())

    def run_evaluation(self) -> EvaluationOutcome:
        """
        Compare the collected updates against their DR models.

        Returns:
            EvaluationOutcome of a conforming run.

        Raises:
            EvaluationInconclusive: If no object sent more than two updates.
            EvaluationFailed: If any pair failed, or timestamps are required
                              and some object sent non-timestamped updates.
                              The exception carries the outcome.
        """
        if not self.is_sufficient_data_received():
            msg = "Insufficient data was received."
            self.logger.error(msg)
            raise EvaluationInconclusive(msg)

        evaluator = Evaluator(self.params.tolerances, self.logger)
        outcome = evaluator.evaluate(self.histories, self.get_non_timestamped_objects())

        if outcome.total_failures > 0:
            msg = f"{outcome.total_failures} Dead Reckoning calculations failed."
            self.logger.error(msg)
            raise EvaluationFailed(msg, outcome)

        non_timestamped = outcome.non_timestamped_objects
        if self.params.tolerances.timestamp_required and non_timestamped:
            msg = ("Configuration item 'timestampRequired' is set to 'true' but non timestamped "
                   "spatial information was received")
            self.logger.error("%s from the following %d object(s)", msg, len(non_timestamped))
            for object_id in sorted(non_timestamped):
                self.logger.error(object_id)
            raise EvaluationFailed(msg, outcome)

        return outcome
