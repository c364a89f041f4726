import logging
import threading
from dataclasses import dataclass
from typing import Protocol


class StatusReporter(Protocol):
    """Sink for the shipper's own diagnostics."""

    def info(self, message: str, exc: BaseException | None = None) -> None: ...

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...


class LoggingReporter:
    """Forwards diagnostics to the standard logging module.

    ShippingHandler drops records from this module's logger, so a handler on the
    root logger does not ship the shipper's own diagnostics.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def info(self, message: str, exc: BaseException | None = None) -> None:
        self.logger.info(message, exc_info=exc)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.logger.warning(message, exc_info=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.logger.error(message, exc_info=exc)


@dataclass
class ReportedMessage:
    level: str
    message: str
    exc: BaseException | None = None


class RecordingReporter:
    """Thread-safe reporter that keeps every message in memory."""

    def __init__(self):
        self._messages: list[ReportedMessage] = []
        self._lock = threading.Lock()

    def _record(self, level: str, message: str, exc: BaseException | None) -> None:
        with self._lock:
            self._messages.append(ReportedMessage(level, message, exc))

    def info(self, message: str, exc: BaseException | None = None) -> None:
        self._record("info", message, exc)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._record("warning", message, exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._record("error", message, exc)

    def get_messages(self, level: str | None = None) -> list[ReportedMessage]:
        with self._lock:
            if level is None:
                return list(self._messages)
            return [m for m in self._messages if m.level == level]

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()
