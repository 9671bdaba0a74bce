"""
IngestStats - Statistics for one upload batch.
"""

import time
from dataclasses import dataclass, field


@dataclass
class IngestStats:
    """
    Statistics for one upload batch.

    Attributes:
        total_files: Files received in the batch
        accepted: Files stored and registered
        failed: Files rejected
        bytes_stored: Total bytes of accepted originals
        start_time: Start timestamp
        end_time: Set when the batch finishes
    """
    total_files: int = 0
    accepted: int = 0
    failed: int = 0
    bytes_stored: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0

    def finish(self) -> None:
        self.end_time = time.time()

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return (self.end_time or time.time()) - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Accepted files per second."""
        if self.elapsed_seconds > 0:
            return self.accepted / self.elapsed_seconds
        return 0.0

    def to_dict(self) -> dict:
        return {
            'totalFiles': self.total_files,
            'accepted': self.accepted,
            'failed': self.failed,
            'bytesStored': self.bytes_stored,
            'elapsedSeconds': round(self.elapsed_seconds, 3),
        }
