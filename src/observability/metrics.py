import threading
import time


class ShippingMetrics:
    """Collects delivery counters over a rolling window."""

    def __init__(self, window_seconds: float = 300):
        self._window_seconds = window_seconds
        self._delivered: list[tuple[float, int]] = []  # (timestamp, records)
        self._dropped: list[tuple[float, int]] = []
        self._requeued: list[tuple[float, int]] = []
        self._lock = threading.Lock()

    def _record(self, attr: str, records: int) -> None:
        with self._lock:
            now = time.monotonic()
            entries = self._prune(getattr(self, attr), now)
            entries.append((now, records))
            setattr(self, attr, entries)

    def record_delivered(self, records: int) -> None:
        self._record("_delivered", records)

    def record_dropped(self, records: int) -> None:
        self._record("_dropped", records)

    def record_requeued(self, records: int) -> None:
        self._record("_requeued", records)

    def _prune(self, data: list[tuple[float, int]], now: float) -> list[tuple[float, int]]:
        cutoff = now - self._window_seconds
        return [entry for entry in data if entry[0] >= cutoff]

    def _sum(self, attr: str) -> int:
        with self._lock:
            pruned = self._prune(getattr(self, attr), time.monotonic())
            setattr(self, attr, pruned)
            return sum(count for _, count in pruned)

    def delivered_count(self) -> int:
        return self._sum("_delivered")

    def dropped_count(self) -> int:
        return self._sum("_dropped")

    def requeued_count(self) -> int:
        return self._sum("_requeued")

    def failure_rate(self) -> float:
        """Share of batches in the window that had to be re-queued (0.0 to 1.0)."""
        with self._lock:
            now = time.monotonic()
            self._delivered = self._prune(self._delivered, now)
            self._requeued = self._prune(self._requeued, now)
            ok = len(self._delivered)
            failed = len(self._requeued)
            total = ok + failed
            if total == 0:
                return 0.0
            return failed / total

    def reset(self) -> None:
        with self._lock:
            self._delivered.clear()
            self._dropped.clear()
            self._requeued.clear()
