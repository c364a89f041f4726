import shutil
from pathlib import Path

from src.log_shipper.reporter import StatusReporter


class DiskSpaceGuard:
    """Admission check: refuse new records once the queue's filesystem is too full."""

    DISABLED = -1

    def __init__(self, directory: str | Path, threshold_percent: int, reporter: StatusReporter, disk_usage=shutil.disk_usage):
        self.directory = Path(directory)
        self.threshold_percent = threshold_percent
        self.reporter = reporter
        self._disk_usage = disk_usage

    @property
    def enabled(self) -> bool:
        return self.threshold_percent != self.DISABLED

    def used_percent(self) -> int | None:
        """Used space as a whole percentage, or None if the filesystem reports no capacity."""
        usage = self._disk_usage(self.directory)
        if usage.total <= 0:
            return None
        # 1 - free/total
        return (usage.total - usage.free) * 100 // usage.total

    def should_accept(self) -> bool:
        if not self.enabled:
            return True

        try:
            used = self.used_percent()
        except OSError as e:
            self.reporter.warning(f"Could not read filesystem usage for {self.directory.resolve()}", e)
            return True

        if used is None:
            self.reporter.warning(f"Filesystem for {self.directory.resolve()} reports no capacity, accepting logs")
            return True

        if used >= self.threshold_percent:
            self.reporter.warning(
                f"Dropping logs, as FS used space on {self.directory.resolve()} is {used} percent, "
                f"and the drop threshold is {self.threshold_percent} percent"
            )
            return False
        return True
