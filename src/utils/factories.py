import json
import uuid
from datetime import datetime, timezone


class RecordFactory:
    """Factory for creating formatted log records with sensible defaults."""

    @staticmethod
    def create(message: str | None = None, level: str = "INFO", **overrides) -> bytes:
        doc = {
            "@timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "+0000",
            "loglevel": level,
            "message": message or f"log line {uuid.uuid4().hex[:16]}",
            "logger": "tests",
            "thread": "MainThread",
        }
        doc.update(overrides)
        return (json.dumps(doc) + "\n").encode("utf-8")

    @staticmethod
    def create_sized(size: int, fill: bytes = b"x") -> bytes:
        """A record of exactly `size` bytes, newline-terminated."""
        if size < 1:
            raise ValueError("size must be at least 1")
        return fill * (size - 1) + b"\n"

    @staticmethod
    def create_many(count: int, size: int | None = None) -> list[bytes]:
        if size is None:
            return [RecordFactory.create(message=f"record {i}") for i in range(count)]
        return [
            RecordFactory.create_sized(size, fill=str(i % 10).encode()) for i in range(count)
        ]
