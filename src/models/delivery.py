from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DeliveryOutcome(Enum):
    SUCCESS = "SUCCESS"
    MALFORMED = "MALFORMED"  # 400
    UNAUTHORIZED = "UNAUTHORIZED"  # 401
    RETRYABLE = "RETRYABLE"
    EXHAUSTED = "EXHAUSTED"
    INTERRUPTED = "INTERRUPTED"


@dataclass
class DeliveryAttempt:
    attempt: int
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    outcome: DeliveryOutcome
    backoff_ms: int = 0
    error: str | None = None


@dataclass
class DeliveryResult:
    outcome: DeliveryOutcome
    attempts: list[DeliveryAttempt] = field(default_factory=list)
    status_code: int | None = None
    message: str = ""
    exception: Exception | None = None

    @property
    def accepted(self) -> bool:
        """True when the collector took the batch off our hands (sent or dropped)."""
        return self.outcome in (
            DeliveryOutcome.SUCCESS,
            DeliveryOutcome.MALFORMED,
            DeliveryOutcome.UNAUTHORIZED,
        )

    @property
    def dropped(self) -> bool:
        return self.outcome in (DeliveryOutcome.MALFORMED, DeliveryOutcome.UNAUTHORIZED)

    def raise_for_outcome(self) -> None:
        """Raise DeliveryExhaustedError if every attempt failed; otherwise do nothing."""
        # src.log_shipper imports this module, so the error is resolved at call time
        from src.log_shipper.errors import DeliveryExhaustedError

        if self.outcome is DeliveryOutcome.EXHAUSTED:
            raise DeliveryExhaustedError(self.status_code, self.message)
