from .batch import Batch
from .delivery import DeliveryAttempt, DeliveryOutcome, DeliveryResult

__all__ = [
    "Batch",
    "DeliveryAttempt", "DeliveryOutcome", "DeliveryResult",
]
