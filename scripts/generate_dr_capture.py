"""Generate a synthetic Spatial update capture for the drcheck command.

Simulates entities that publish Spatial updates at a fixed rate:
    - Each update carries the state the entity reported, encoded as the
      Spatial variant record of its DR model
    - The true motion between updates follows the DR model itself, so a
      conforming entity shows only the configured position noise
    - Time tags in DIS (4 octet) or hexadecimal (8 character) format
    - Optional faulty entity whose reports drift away from its model

Saves to: data/sim/dr_capture/ (capture.jsonl and params.json)

References: IEEE 1278.1 Annex E - Dead reckoning
"""

import argparse
import json
import struct
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np

from drcheck.codec.spatial import SpatialEncoder
from drcheck.codec.time_tag import TICK_MICROS, offset_in_hour
from drcheck.codec.types import SpatialSample
from drcheck.harness.capture import CapturedUpdate, write_capture
from drcheck.models.dead_reckoning import create_dead_reckoner


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

ENTITIES = {
    'ground_vehicle': {
        'model': 4,
        'position': [0.0, 0.0, 0.0],
        'velocity': [10.0, 0.0, 0.0],
        'acceleration': [0.0, 0.0, 0.0],
        'orientation': [0.02, 0.01, 0.3],
        'angular_velocity': [0.0, 0.0, 0.05],
    },
    'aircraft': {
        'model': 7,
        'position': [0.0, 0.0, -1000.0],
        'velocity': [120.0, 0.0, 0.0],
        'acceleration': [0.0, 0.0, 0.0],
        'orientation': [0.02, 0.05, 0.3],
        'angular_velocity': [0.0, 0.0, 0.02],
    },
    'walker': {
        'model': 2,
        'position': [50.0, 20.0, 0.0],
        'velocity': [1.2, 0.4, 0.0],
        'acceleration': [0.0, 0.0, 0.0],
        'orientation': [0.0, 0.0, 0.0],
        'angular_velocity': [0.0, 0.0, 0.0],
    },
    'building': {
        'model': 1,
        'position': [100.0, 100.0, 0.0],
        'velocity': [0.0, 0.0, 0.0],
        'acceleration': [0.0, 0.0, 0.0],
        'orientation': [0.0, 0.0, 0.0],
        'angular_velocity': [0.0, 0.0, 0.0],
    },
}

PRESETS = {
    'conforming': {
        'description': 'All entities follow their DR model (expected verdict: PASSED)',
        'position_noise_std': 0.05,
        'drift_std': 0.0,
        'tag_format': 'hex',
    },
    'dis_tags': {
        'description': 'Conforming entities with DIS binary time tags',
        'position_noise_std': 0.05,
        'drift_std': 0.0,
        'tag_format': 'dis',
    },
    'faulty': {
        'description': 'Reports drift away from the DR model (expected verdict: FAILED)',
        'position_noise_std': 0.05,
        'drift_std': 2.0,
        'tag_format': 'hex',
    },
    'untagged': {
        'description': 'No time tags; fails only when timestampRequired is set',
        'position_noise_std': 0.05,
        'drift_std': 0.0,
        'tag_format': 'none',
    },
}


# ============================================================================
# TIME TAGS
# ============================================================================

def encode_time_tag(offset_us: int, tag_format: str) -> bytes:
    """Encode microseconds past the hour as a time tag.

    Args:
        offset_us: Offset into the hour (µs).
        tag_format: 'hex' (8 ASCII digits), 'dis' (4 octets) or 'none'.

    Returns:
        Tag octets; empty for 'none'.

    Raises:
        ValueError: For a 'dis' tag past the first half hour, which the
                    signed 4 octet decoding cannot represent.
    """
    if tag_format == 'hex':
        return f"{offset_us:08X}".encode("ascii")
    if tag_format == 'dis':
        units = int(round(offset_us / TICK_MICROS))
        if units * 2 > 2**31 - 1:
            raise ValueError(f"Offset {offset_us} us does not fit a DIS time tag")
        return struct.pack(">i", units * 2)
    return b""


# ============================================================================
# ENTITY SIMULATION
# ============================================================================

def simulate_entity(
    entity: Dict,
    rate_hz: float,
    duration: float,
    position_noise_std: float,
    drift_std: float,
    rng: np.random.Generator,
) -> List[Tuple[float, SpatialSample]]:
    """Simulate the reports of one entity.

    The state reported at each update is the DR extrapolation of the
    previous report plus Gaussian position noise. drift_std adds a random
    walk to the velocity that is not reported, so the receiver cannot
    predict it.

    Args:
        entity: Entry of ENTITIES.
        rate_hz: Update rate (Hz).
        duration: Simulated time (seconds).
        position_noise_std: Position noise std (m).
        drift_std: Velocity random walk std per update (m/s).
        rng: Random generator.

    Returns:
        List of (t, SpatialSample).
    """
    model = entity['model']
    dt = 1.0 / rate_hz
    reckoner = create_dead_reckoner(model) if model != 1 else None

    position = np.array(entity['position'], dtype=float)
    velocity = np.array(entity['velocity'], dtype=float)
    acceleration = np.array(entity['acceleration'], dtype=float)
    orientation = np.array(entity['orientation'], dtype=float)
    omega = np.array(entity['angular_velocity'], dtype=float)
    hidden_velocity = np.zeros(3)

    reports = []
    for k in range(int(duration * rate_hz) + 1):
        t = k * dt
        reports.append((t, SpatialSample(
            model,
            position=position,
            orientation=orientation,
            velocity=velocity,
            acceleration=acceleration,
            angular_velocity=omega,
        )))
        if reckoner is None:
            continue

        result = reckoner.dead_reckon(position, velocity, acceleration, orientation, omega, dt)
        if drift_std > 0:
            hidden_velocity = hidden_velocity + rng.normal(0.0, drift_std, 3)
        position = result.position + hidden_velocity * dt + rng.normal(0.0, position_noise_std, 3)
        if result.orientation_calculated:
            orientation = result.orientation

    return reports


# ============================================================================
# DATASET GENERATION
# ============================================================================

def generate_dr_capture(
    output_dir: str = "data/sim/dr_capture",
    seed: int = 42,
    rate_hz: float = 1.0,
    duration: float = 20.0,
    position_noise_std: float = 0.05,
    drift_std: float = 0.0,
    tag_format: str = 'hex',
    start: datetime = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
) -> Path:
    """Generate and save a capture and matching test parameters.

    Args:
        output_dir: Output directory path.
        seed: Random seed for reproducibility.
        rate_hz: Update rate per entity (Hz).
        duration: Capture duration (seconds).
        position_noise_std: Position noise std (m).
        drift_std: Unreported velocity drift std per update (m/s).
        tag_format: Time tag format ('hex', 'dis' or 'none').
        start: Receive time of the first update.

    Returns:
        Path of the capture file.
    """
    rng = np.random.default_rng(seed)
    encoder = SpatialEncoder()

    print(f"\n{'='*70}")
    print(f"Generating Dead Reckoning Capture")
    print(f"{'='*70}")

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    updates = []
    for name, entity in ENTITIES.items():
        reports = simulate_entity(entity, rate_hz, duration, position_noise_std, drift_std, rng)
        print(f"   {name:<15}: DRM {entity['model']}, {len(reports)} updates")
        for t, sample in reports:
            received_at = start + timedelta(seconds=t)
            tag = encode_time_tag(offset_in_hour(received_at), tag_format) if tag_format != 'none' else None
            updates.append(CapturedUpdate(name, encoder.encode(sample), tag, received_at))

    updates.sort(key=lambda u: u.received_at)
    capture_path = write_capture(output_path / "capture.jsonl", updates)
    print(f"   Saved: capture.jsonl ({len(updates)} updates)")

    params = {
        "sutFederateName": "simulated",
        "testTimeout": duration + 1.0,
        "positionThresholdMin": 0.0,
        "positionThresholdMax": max(1.0, 10 * position_noise_std),
        "orientationThresholdMin": 0.0,
        "orientationThresholdMax": 0.1,
        "timestampRequired": False,
        "positionAndOrientationRequired": False,
    }
    with open(output_path / "params.json", "w") as f:
        json.dump(params, f, indent=2)
    print(f"   Saved: params.json")

    print(f"\nRun: drcheck {output_path / 'params.json'} {capture_path}\n")
    return capture_path


# ============================================================================
# COMMAND-LINE INTERFACE
# ============================================================================

def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Generate a synthetic Spatial update capture",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Conforming entities (default)
  python scripts/generate_dr_capture.py

  # Entities drifting away from their DR model
  python scripts/generate_dr_capture.py --preset faulty --output data/sim/dr_faulty

Available presets: """ + ", ".join(PRESETS.keys())
    )
    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (overrides individual parameters)'
    )
    parser.add_argument('--output', type=str, default='data/sim/dr_capture',
                        help='Output directory')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--rate', type=float, default=1.0, help='Update rate (Hz)')
    parser.add_argument('--duration', type=float, default=20.0, help='Duration (s)')
    parser.add_argument('--position-noise-std', type=float, default=0.05,
                        help='Position noise std (m)')
    parser.add_argument('--drift-std', type=float, default=0.0,
                        help='Unreported velocity drift std per update (m/s)')
    parser.add_argument('--tag-format', type=str, default='hex', choices=['hex', 'dis', 'none'],
                        help='Time tag format')

    args = parser.parse_args()

    if args.preset:
        preset_config = PRESETS[args.preset]
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {preset_config['description']}\n")
        for key, value in preset_config.items():
            if key != 'description' and hasattr(args, key):
                setattr(args, key, value)

    if args.duration <= 0:
        parser.error("Duration must be positive")
    if args.rate <= 0:
        parser.error("Rate must be positive")
    if args.position_noise_std < 0 or args.drift_std < 0:
        parser.error("Noise parameters must be non-negative")

    generate_dr_capture(
        output_dir=args.output,
        seed=args.seed,
        rate_hz=args.rate,
        duration=args.duration,
        position_noise_std=args.position_noise_std,
        drift_std=args.drift_std,
        tag_format=args.tag_format,
    )


if __name__ == "__main__":
    main()
