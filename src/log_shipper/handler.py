import logging

from src.log_shipper.formatter import JsonLineFormatter
from src.log_shipper.sender import LogShipper


class ExcludeLoggersFilter(logging.Filter):
    """Rejects records from the named loggers and their children."""

    def __init__(self, *names: str):
        super().__init__()
        self.names = names

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(record.name == n or record.name.startswith(n + ".") for n in self.names)


class ShippingHandler(logging.Handler):
    """logging.Handler that queues every record on a LogShipper.

    Records from the shipper's own loggers, and any record logged by a thread
    that is draining the queue (HTTP client logs included), are never queued.
    """

    def __init__(self, shipper: LogShipper, level: int = logging.NOTSET):
        super().__init__(level)
        self.shipper = shipper
        self.setFormatter(JsonLineFormatter())

        excluded = [__package__]
        reporter_logger = getattr(shipper.reporter, "logger", None)
        if isinstance(reporter_logger, logging.Logger) and reporter_logger is not logging.getLogger():
            excluded.append(reporter_logger.name)
        self.addFilter(ExcludeLoggersFilter(*excluded))

    def emit(self, record: logging.LogRecord) -> None:
        if self.shipper.scheduler.in_drain():
            return
        try:
            self.shipper.send(self.format(record).encode("utf-8"))
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self.shipper.stop()
        finally:
            super().close()
