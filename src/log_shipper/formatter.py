import json
import logging
from datetime import datetime, timezone


class JsonLineFormatter(logging.Formatter):
    """Renders a LogRecord as one newline-terminated JSON object."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}+0000"

    def format(self, record: logging.LogRecord) -> str:
        doc = {
            "@timestamp": self.formatTime(record),
            "loglevel": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "thread": record.threadName,
        }
        if record.exc_info:
            doc["exception"] = self.formatException(record.exc_info)
        return json.dumps(doc) + "\n"
