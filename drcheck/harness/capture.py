"""
Recorded Spatial updates.

A capture file holds one JSON object per line:

    {"object": "tank-1", "payload": "04000000...", "tag": "3030303033453830",
     "received_at": "2024-05-01T12:00:01.000000+00:00"}

payload and tag are hexadecimal renderings of the raw octets. tag and
received_at may be null.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from drcheck.codec.time_tag import as_utc
from drcheck.errors import CaptureError


@dataclass(frozen=True)
class CapturedUpdate:
    """One recorded attribute update."""

    object_id: str
    payload: bytes
    tag: Optional[bytes] = None
    received_at: Optional[datetime] = None

    def to_json(self) -> str:
        return json.dumps({
            "object": self.object_id,
            "payload": self.payload.hex(),
            "tag": self.tag.hex() if self.tag is not None else None,
            "received_at": self.received_at.isoformat() if self.received_at is not None else None,
        })

    @classmethod
    def from_json(cls, line: str) -> "CapturedUpdate":
        """
        Parse one capture line.

        Raises:
            CaptureError: If the line is not a valid capture record.
        """
        try:
            doc = json.loads(line)
        except json.JSONDecodeError as exc:
            raise CaptureError(f"Invalid JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise CaptureError("Capture record must be a JSON object")

        object_id = doc.get("object")
        if not isinstance(object_id, str) or not object_id:
            raise CaptureError("Capture record has no object name")

        try:
            payload = bytes.fromhex(doc.get("payload") or "")
            tag = bytes.fromhex(doc["tag"]) if doc.get("tag") is not None else None
        except (TypeError, ValueError) as exc:
            raise CaptureError(f"Invalid hexadecimal field for {object_id}: {exc}") from exc

        received_at = None
        if doc.get("received_at") is not None:
            try:
                received_at = as_utc(datetime.fromisoformat(doc["received_at"]))
            except (TypeError, ValueError) as exc:
                raise CaptureError(f"Invalid received_at for {object_id}: {exc}") from exc

        return cls(object_id=object_id, payload=payload, tag=tag, received_at=received_at)


def iter_capture(path: Union[str, Path]) -> Iterator[CapturedUpdate]:
    """Yield the updates of a capture file, skipping blank lines."""
    path = Path(path)
    try:
        with open(path) as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield CapturedUpdate.from_json(line)
                except CaptureError as exc:
                    raise CaptureError(f"{path}:{lineno}: {exc}") from exc
    except OSError as exc:
        raise CaptureError(f"Unable to read capture {path}: {exc}") from exc


def read_capture(path: Union[str, Path]) -> List[CapturedUpdate]:
    return list(iter_capture(path))


def write_capture(path: Union[str, Path], updates: Iterable[CapturedUpdate]) -> Path:
    """Write updates as JSON lines, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for update in updates:
            f.write(update.to_json())
            f.write("\n")
    return path
