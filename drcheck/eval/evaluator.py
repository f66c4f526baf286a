"""
Dead reckoning conformance evaluator.

Every object's history is walked in timestamp order. Each consecutive pair
(previous, current) is judged as follows:

    1. previous uses DR model 1 (static)       -> success, not extrapolated
    2. previous uses a DR model above 9        -> failure
    3. current reports itself frozen           -> success, not extrapolated
    4. otherwise previous is dead reckoned over the elapsed time and the
       result is compared with current against the tolerance bands. DR
       model 0 and negative values have no algorithm and fail here.

When require_both is set a pair passes only if the position and (where the
model computes it) the orientation are in band. Otherwise a pair passes if
either one is.

Counts are kept per object and for the whole run. The run fails when any
pair failed, or when timestamps are required and some object sent an
update without a usable time tag.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from drcheck.codec.types import SpatialSample
from drcheck.eval.history import SampleHistory
from drcheck.eval.metrics import orientation_axis_deviation, position_deviation
from drcheck.eval.types import (
    EvaluationOutcome,
    ObjectCounts,
    PairEvaluation,
    PairStatus,
    ToleranceConfig,
)
from drcheck.models.dead_reckoning import MAX_MODEL, STATIC_MODEL, create_dead_reckoner
from drcheck.utils.diagnostics import fmt, fmt_euler, fmt_xyz, resolve_logger


def elapsed_seconds(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds()


class Evaluator:
    """Score consecutive samples of each object against its DR model."""

    def __init__(self, tolerances: ToleranceConfig, logger: Optional[logging.Logger] = None):
        self.tolerances = tolerances
        self.logger = resolve_logger(logger)

    # ------------------------------------------------------------------
    # Single pair
    # ------------------------------------------------------------------

    def evaluate_pair(
        self,
        object_id: str,
        time0: datetime,
        sample0: SpatialSample,
        time1: datetime,
        sample1: SpatialSample,
    ) -> PairEvaluation:
        """
        Judge one consecutive pair of samples.

        Args:
            object_id: Name of the object, used in log messages.
            time0: Timestamp of the earlier sample.
            sample0: Earlier sample; its DR model and state are extrapolated.
            time1: Timestamp of the later sample.
            sample1: Later sample, compared with the extrapolation.

        Returns:
            PairEvaluation describing the verdict.
        """
        log = self.logger
        model = sample0.discriminant
        dt = elapsed_seconds(time0, time1)
        record = dict(object_id=object_id, previous_time=time0, current_time=time1,
                      model=model, elapsed=dt)

        if model == STATIC_MODEL:
            log.info("Skipping DR test for %s because it is using algorithm 1", object_id)
            return PairEvaluation(status=PairStatus.SKIPPED_STATIC, reason="static model", **record)

        if model > MAX_MODEL:
            log.error("Invalid algorithm for %s .Algorithm= %d", object_id, model)
            return PairEvaluation(status=PairStatus.INVALID_MODEL,
                                  reason=f"Incorrect algorithm provided: {model}", **record)

        if sample1.is_frozen:
            log.info("Skipping DR test for %s because its spatial record is indicating that it is frozen",
                     object_id)
            return PairEvaluation(status=PairStatus.SKIPPED_FROZEN, reason="entity frozen", **record)

        try:
            reckoner = create_dead_reckoner(model, log)
        except ValueError as exc:
            log.error("Invalid algorithm for %s .Algorithm= %d", object_id, model)
            return PairEvaluation(status=PairStatus.INVALID_MODEL, reason=str(exc), **record)

        log.info("Calculating Dead Reckoned values for object %s using algorithm %d", object_id, model)
        log.info("Dead Reckoning inputs from spatial update at time= %s ...", time1.isoformat())
        self._log_spatial_values(sample0)

        result = reckoner.dead_reckon(
            sample0.position,
            sample0.velocity,
            sample0.acceleration,
            sample0.orientation,
            sample0.angular_velocity,
            dt,
        )
        if result is None:
            log.error("Exception occurred during Dead Reckoning calculation for object %s", object_id)
            return PairEvaluation(status=PairStatus.COMPUTATION_FAILED,
                                  reason="malformed input vector", **record)

        log.info("Dead Reckoned outputs for delta time=%ss...", fmt(dt))
        log.info("Dead Reckoned Position: %s", fmt_xyz(result.position))
        log.info("Dead Reckoned Orientation: %s", fmt_euler(result.orientation))

        log.info("Actual spatial values from update at time= %s ...", time1.isoformat())
        self._log_spatial_values(sample1)
        if sample0.position.shape == sample1.position.shape:
            travelled = position_deviation(sample0.position, sample1.position)
            log.info("Distance travelled in %s seconds =  %s metres", fmt(dt), fmt(travelled))

        log.info("Evaluating Dead Reckoned position for object %s using algorithm %d", object_id, model)
        try:
            pos_dev = position_deviation(result.position, sample1.position)
        except ValueError:
            log.error("Exception occurred during Dead Reckoning calculation for object %s", object_id)
            return PairEvaluation(status=PairStatus.COMPUTATION_FAILED,
                                  reason="malformed received position", **record)
        position_ok = self._check_position(result.position, sample1.position, pos_dev)

        orient_dev = None
        orientation_ok = True
        if result.orientation_calculated:
            log.info("Evaluating Dead Reckoned orientation for object %s using algorithm %d", object_id, model)
            try:
                axes = orientation_axis_deviation(result.orientation, sample1.orientation)
            except ValueError:
                log.error("Exception occurred during Dead Reckoning calculation for object %s", object_id)
                return PairEvaluation(status=PairStatus.COMPUTATION_FAILED,
                                      reason="malformed received orientation", **record)
            orient_dev = float(np.linalg.norm(axes))
            orientation_ok = self._check_orientation(axes, orient_dev)
        else:
            log.info("Skipping evaluation of Dead Reckoned orientation for object %s "
                     "because algorithm %d does not calculate orientation", object_id, model)

        if self.tolerances.require_both:
            success = position_ok and orientation_ok
        else:
            success = position_ok or (result.orientation_calculated and orientation_ok)

        reasons: List[str] = []
        if not position_ok:
            reasons.append("position out of band")
        if result.orientation_calculated and not orientation_ok:
            reasons.append("orientation out of band")

        return PairEvaluation(
            status=PairStatus.PASSED if success else PairStatus.FAILED,
            predicted_position=result.position,
            actual_position=sample1.position,
            predicted_orientation=result.orientation if result.orientation_calculated else None,
            actual_orientation=sample1.orientation if result.orientation_calculated else None,
            position_deviation=pos_dev,
            orientation_deviation=orient_dev,
            reason="" if success else ", ".join(reasons),
            **record,
        )

    # ------------------------------------------------------------------
    # Whole run
    # ------------------------------------------------------------------

    def evaluate_history(self, object_id: str, history: SampleHistory) -> List[PairEvaluation]:
        return [
            self.evaluate_pair(object_id, time0, sample0, time1, sample1)
            for (time0, sample0), (time1, sample1) in history.pairs()
        ]

    def evaluate(
        self,
        histories: Mapping[str, SampleHistory],
        non_timestamped: Iterable[str] = (),
    ) -> EvaluationOutcome:
        """
        Evaluate every object and aggregate the counts.

        Args:
            histories: SampleHistory per object id.
            non_timestamped: Ids of objects that sent updates without a
                             usable time tag.

        Returns:
            EvaluationOutcome. Objects with fewer than two samples are not
            listed in per_object_counts.
        """
        log = self.logger
        outcome = EvaluationOutcome(success=True, non_timestamped_objects=set(non_timestamped))
        counts: Dict[str, ObjectCounts] = outcome.per_object_counts

        for object_id, history in histories.items():
            if len(history) < 2:
                log.info("Object %s sent %d update(s), nothing to compare", object_id, len(history))
                continue

            log.info("Processing updates received from object %s", object_id)
            object_counts = ObjectCounts()
            records = []
            for pair in self.evaluate_history(object_id, history):
                if pair.success:
                    log.info("Successful Dead Reckoning calculation for object %s", object_id)
                else:
                    log.error("Unsuccessful Dead Reckoning calculation for object %s", object_id)
                object_counts.record(pair.success)
                outcome.totals.record(pair.success)
                records.append(pair)

            log.info("Finished processing updates received from object %s", object_id)
            self._log_success_rate(object_id, object_counts)
            counts[object_id] = object_counts
            outcome.pairs[object_id] = records

        self._log_success_rate("Total", outcome.totals)

        if outcome.totals.failures > 0:
            outcome.success = False
        if self.tolerances.timestamp_required and outcome.non_timestamped_objects:
            outcome.success = False
        return outcome

    # ------------------------------------------------------------------
    # Logging helpers
    # ------------------------------------------------------------------

    def _check_position(self, predicted, actual, deviation: float) -> bool:
        tol = self.tolerances
        ok = tol.position_in_band(deviation)
        dx, dy, dz = np.asarray(predicted) - np.asarray(actual)
        self.logger.info(
            "Position Dead Reckoning %s dx= %s dy= %s dz= %s Deviation= %s Min= %s Max= %s",
            "passed" if ok else "failed", fmt(dx), fmt(dy), fmt(dz), fmt(deviation),
            fmt(tol.position_min), fmt(tol.position_max),
        )
        return ok

    def _check_orientation(self, axes, deviation: float) -> bool:
        tol = self.tolerances
        ok = tol.orientation_in_band(deviation)
        d_phi, d_theta, d_psi = axes
        self.logger.info(
            "Orientation Dead Reckoning %s dPhi= %s dTheta= %s dPsi= %s dMAG= %s Min= %s Max= %s",
            "passed" if ok else "failed", fmt(d_phi), fmt(d_theta), fmt(d_psi), fmt(deviation),
            fmt(tol.orientation_min), fmt(tol.orientation_max),
        )
        return ok

    def _log_spatial_values(self, sample: SpatialSample) -> None:
        log = self.logger
        log.info("Position: %s", fmt_xyz(sample.position))
        log.info("Orientation: %s", fmt_euler(sample.orientation))
        log.info("Velocity: %s", fmt_xyz(sample.velocity))
        log.info("Acceleration: %s", fmt_xyz(sample.acceleration))
        log.info("AngularVelocity: %s", fmt_xyz(sample.angular_velocity))

    def _log_success_rate(self, label: str, counts: ObjectCounts) -> None:
        self.logger.info("%s Successes=%d Failures=%d Success rate=%s",
                         label, counts.successes, counts.failures, fmt(counts.success_rate))
