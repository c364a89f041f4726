from src.models.delivery import DeliveryOutcome


class RetryPolicy:
    """Classifies listener responses and schedules exponential backoff."""

    MAX_ATTEMPTS = 3
    INITIAL_BACKOFF_MS = 2000

    # Status codes that end delivery without a retry
    NO_RETRY_CODES = {
        200: DeliveryOutcome.SUCCESS,
        400: DeliveryOutcome.MALFORMED,
        401: DeliveryOutcome.UNAUTHORIZED,
    }

    def __init__(self, max_attempts: int | None = None, initial_backoff_ms: int | None = None):
        self.max_attempts = max_attempts if max_attempts is not None else self.MAX_ATTEMPTS
        self.initial_backoff_ms = (
            initial_backoff_ms if initial_backoff_ms is not None else self.INITIAL_BACKOFF_MS
        )

    def classify(self, status_code: int | None) -> DeliveryOutcome:
        """Map an HTTP status (None for a transport failure) to an outcome.

        Only 200, 400 and 401 are final; everything else, including other
        2xx codes, is retried.
        """
        if status_code is None:
            return DeliveryOutcome.RETRYABLE
        return self.NO_RETRY_CODES.get(status_code, DeliveryOutcome.RETRYABLE)

    def should_retry(self, status_code: int | None) -> bool:
        return self.classify(status_code) is DeliveryOutcome.RETRYABLE

    def next_delay_ms(self, retry: int) -> int:
        """Backoff before retry number `retry` (0-indexed): 2000, 4000, 8000..."""
        return self.initial_backoff_ms * (2 ** retry)

    def has_attempts_remaining(self, attempt: int) -> bool:
        """Check if another attempt may follow attempt number `attempt` (1-indexed)."""
        return attempt < self.max_attempts
