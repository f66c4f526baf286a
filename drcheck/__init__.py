"""Dead reckoning conformance checking for distributed simulation entities.

This package verifies that the spatial updates an entity publishes are
consistent with the dead reckoning model it declares:
- coords: Vector helpers and Euler angle / rotation matrix conversions
- models: Dead reckoning algorithms (DR models 2-9)
- codec: Spatial variant record and time tag decoding
- eval: Sample history, deviation metrics and pairwise evaluation
- harness: Test parameters, update ingestion and verdicts
"""

__version__ = "0.1.0"
