"""Per-object store of samples keyed by absolute timestamp."""

from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from drcheck.codec.types import SpatialSample


class SampleHistory:
    """
    Time-ordered samples of one object.

    A sample added with an existing timestamp replaces the earlier one.

    Example:
        >>> history = SampleHistory()
        >>> history.is_empty()
        True
    """

    def __init__(self) -> None:
        self._samples: Dict[datetime, SpatialSample] = {}

    def add(self, timestamp: datetime, sample: SpatialSample) -> None:
        self._samples[timestamp] = sample

    def items(self) -> List[Tuple[datetime, SpatialSample]]:
        """All (timestamp, sample) pairs in ascending timestamp order."""
        return sorted(self._samples.items(), key=lambda item: item[0])

    def pairs(self) -> Iterator[Tuple[Tuple[datetime, SpatialSample], Tuple[datetime, SpatialSample]]]:
        """Consecutive (previous, current) entries in ascending timestamp order."""
        ordered = self.items()
        return zip(ordered[:-1], ordered[1:])

    @property
    def start_time(self) -> Optional[datetime]:
        """Smallest timestamp held."""
        return min(self._samples) if self._samples else None

    @property
    def last_time(self) -> Optional[datetime]:
        """Greatest timestamp held."""
        return max(self._samples) if self._samples else None

    def is_empty(self) -> bool:
        return not self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return f"SampleHistory(n={len(self)}, start={self.start_time}, last={self.last_time})"
