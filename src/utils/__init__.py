from .factories import RecordFactory

__all__ = [
    "RecordFactory",
]
