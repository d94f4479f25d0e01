"""
GenerationStats - Counters for one derivative stage.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class GenerationStats:
    """
    Counters for one derivative stage of a run.

    Attributes:
        stage: Stage name ('main', 'thumbs', 'tiles')
        total_to_process: Artifacts (or views, for tiles) handed to the stage
        processed: Derivatives written
        skipped: Artifacts without the required pose
        errors: Derivatives that failed
        start_time: Start timestamp
        end_time: End timestamp, 0 while running
        error_details: Error messages
    """
    stage: str = ''
    total_to_process: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0
    error_details: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_processed(self) -> None:
        with self._lock:
            self.processed += 1

    def record_skipped(self) -> None:
        with self._lock:
            self.skipped += 1

    def record_error(self, message: str) -> None:
        with self._lock:
            self.errors += 1
            self.error_details.append(message)

    def finish(self) -> None:
        """Freeze the elapsed time."""
        self.end_time = time.time()

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Derivatives written per minute."""
        elapsed = self.elapsed_seconds
        if elapsed > 0:
            return self.processed / elapsed * 60
        return 0.0

    @property
    def completed_count(self) -> int:
        """Total completed (processed + skipped + errors)."""
        return self.processed + self.skipped + self.errors
