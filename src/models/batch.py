from dataclasses import dataclass, field


@dataclass
class Batch:
    """Ordered group of records pulled from the queue for one delivery."""

    records: list[bytes] = field(default_factory=list)
    size_bytes: int = 0

    def add(self, record: bytes) -> None:
        self.records.append(record)
        self.size_bytes += len(record)

    def to_payload(self) -> bytes:
        """Newline-terminated concatenation of the records, in pop order."""
        parts = []
        for record in self.records:
            parts.append(record)
            if not record.endswith(b"\n"):
                parts.append(b"\n")
        return b"".join(parts)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)
