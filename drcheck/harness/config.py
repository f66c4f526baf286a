"""Test case parameters.

Parameters are read from the JSON document that configures a dead
reckoning test run. Keys use the camelCase names of that document:

    {
        "sutFederateName": "SuT",
        "testTimeout": 30.0,
        "positionThresholdMin": 0.0,
        "positionThresholdMax": 1.0,
        "orientationThresholdMin": 0.0,
        "orientationThresholdMax": 1.0,
        "timestampRequired": false,
        "positionAndOrientationRequired": true,
        "spatialEncoding": {"location": "HLAfloat64BE"}
    }

Session keys (rtiHost, federationName, urls, ...) are accepted and ignored.
"""

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from drcheck.codec.spatial import SpatialSchema
from drcheck.errors import ConfigError, DecodeError
from drcheck.eval.types import ToleranceConfig

REQUIRED_FLOATS = (
    "positionThresholdMin",
    "positionThresholdMax",
    "orientationThresholdMin",
    "orientationThresholdMax",
)
REQUIRED_BOOLS = ("timestampRequired", "positionAndOrientationRequired")

DEFAULT_TEST_TIMEOUT = 30.0


def _number(doc: Mapping[str, Any], key: str) -> float:
    if key not in doc:
        raise ConfigError(f"Missing parameter: {key}")
    value = doc[key]
    # bool is an int subclass and is never a valid threshold
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Parameter {key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigError(f"Parameter {key} must be finite, got {value!r}")
    return float(value)


def _flag(doc: Mapping[str, Any], key: str) -> bool:
    if key not in doc:
        raise ConfigError(f"Missing parameter: {key}")
    value = doc[key]
    if not isinstance(value, bool):
        raise ConfigError(f"Parameter {key} must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class DeadReckoningParams:
    """Parameters of one dead reckoning test run.

    Attributes:
        tolerances: Tolerance bands and the require-both / timestamp flags.
        test_timeout: Length of the collection window in seconds.
        sut_federate_name: Name of the system under test, for reporting.
        spatial_schema: Field representations of the Spatial record.
    """

    tolerances: ToleranceConfig
    test_timeout: float = DEFAULT_TEST_TIMEOUT
    sut_federate_name: Optional[str] = None
    spatial_schema: SpatialSchema = field(default_factory=SpatialSchema)

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> "DeadReckoningParams":
        """
        Build parameters from a parsed JSON document.

        Raises:
            ConfigError: If a required key is missing, has the wrong type, or
                         the thresholds do not form valid bands.
        """
        if not isinstance(doc, Mapping):
            raise ConfigError("Test parameters must be a JSON object")

        values = {key: _number(doc, key) for key in REQUIRED_FLOATS}
        flags = {key: _flag(doc, key) for key in REQUIRED_BOOLS}

        try:
            tolerances = ToleranceConfig(
                position_min=values["positionThresholdMin"],
                position_max=values["positionThresholdMax"],
                orientation_min=values["orientationThresholdMin"],
                orientation_max=values["orientationThresholdMax"],
                require_both=flags["positionAndOrientationRequired"],
                timestamp_required=flags["timestampRequired"],
            )
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        test_timeout = _number(doc, "testTimeout") if "testTimeout" in doc else DEFAULT_TEST_TIMEOUT
        if test_timeout < 0:
            raise ConfigError(f"Parameter testTimeout must be non-negative, got {test_timeout}")

        sut_name = doc.get("sutFederateName")
        if sut_name is not None and not isinstance(sut_name, str):
            raise ConfigError(f"Parameter sutFederateName must be a string, got {sut_name!r}")

        encoding = doc.get("spatialEncoding") or {}
        if not isinstance(encoding, Mapping):
            raise ConfigError("Parameter spatialEncoding must be an object")
        try:
            schema = SpatialSchema.from_mapping(encoding)
        except DecodeError as exc:
            raise ConfigError(f"Parameter spatialEncoding: {exc}") from exc

        return cls(
            tolerances=tolerances,
            test_timeout=test_timeout,
            sut_federate_name=sut_name,
            spatial_schema=schema,
        )

    @classmethod
    def from_json(cls, text: str) -> "DeadReckoningParams":
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Unable to parse test parameters JSON: {exc}") from exc
        return cls.from_dict(doc)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "DeadReckoningParams":
        """Read parameters from a JSON file."""
        path = Path(path)
        try:
            with open(path) as f:
                text = f.read()
        except OSError as exc:
            raise ConfigError(f"Unable to read test parameters from {path}: {exc}") from exc
        return cls.from_json(text)

    def to_dict(self) -> Dict[str, Any]:
        tol = self.tolerances
        doc: Dict[str, Any] = {
            "positionThresholdMin": tol.position_min,
            "positionThresholdMax": tol.position_max,
            "orientationThresholdMin": tol.orientation_min,
            "orientationThresholdMax": tol.orientation_max,
            "timestampRequired": tol.timestamp_required,
            "positionAndOrientationRequired": tol.require_both,
            "testTimeout": self.test_timeout,
        }
        if self.sut_federate_name is not None:
            doc["sutFederateName"] = self.sut_federate_name
        schema = self.spatial_schema
        doc["spatialEncoding"] = {
            "location": schema.location.hla_name,
            "orientation": schema.orientation.hla_name,
            "velocity": schema.velocity.hla_name,
            "acceleration": schema.acceleration.hla_name,
            "angular_velocity": schema.angular_velocity.hla_name,
            "aligned": schema.aligned,
        }
        return doc
