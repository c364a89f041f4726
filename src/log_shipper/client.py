import threading
import time
from datetime import datetime, timezone

import requests

from src.log_shipper.reporter import StatusReporter
from src.log_shipper.retry import RetryPolicy
from src.models.batch import Batch
from src.models.delivery import DeliveryAttempt, DeliveryOutcome, DeliveryResult


class DeliveryClient:
    """Ships one batch to the listener, retrying transient failures with backoff."""

    def __init__(
        self,
        listener_url: str,
        token: str,
        log_type: str,
        reporter: StatusReporter,
        retry_policy: RetryPolicy | None = None,
        socket_timeout_ms: int = 10000,
        connect_timeout_ms: int = 10000,
        debug: bool = False,
        delay_factor: float = 1.0,
    ):
        self.url = listener_url.rstrip("/") + "/"
        self.params = {"token": token, "type": log_type}
        self.reporter = reporter
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = (connect_timeout_ms / 1000, socket_timeout_ms / 1000)
        self.debug = debug
        self.delay_factor = delay_factor

    def _debug(self, message: str, exc: BaseException | None = None) -> None:
        if self.debug:
            self.reporter.info("DEBUG: " + message, exc)

    def _post(self, payload: bytes, attempt: int, backoff_ms: int) -> tuple[DeliveryAttempt, str, Exception | None]:
        """Perform a single POST. Returns the attempt, the response message and any transport error."""
        headers = {
            "Content-Length": str(len(payload)),
            "Content-Type": "text/plain",
        }

        start = time.monotonic()
        status_code = None
        message = ""
        error = None
        exc = None

        try:
            resp = requests.post(
                self.url,
                params=self.params,
                data=payload,
                headers=headers,
                timeout=self.timeout,
            )
            status_code = resp.status_code
            message = resp.text or resp.reason or ""
        except requests.exceptions.Timeout as e:
            error, exc = "timeout", e
        except requests.exceptions.ConnectionError as e:
            error, exc = "connection_error", e
        except requests.exceptions.RequestException as e:
            error, exc = str(e), e

        if exc is not None:
            self._debug(f"Got IO exception - {exc}")

        elapsed_ms = (time.monotonic() - start) * 1000
        outcome = self.retry_policy.classify(status_code)

        if outcome is DeliveryOutcome.MALFORMED:
            self.reporter.warning(f"Got 400 from the listener, here is the output: \n {message}")
        elif outcome is DeliveryOutcome.UNAUTHORIZED:
            self.reporter.error(
                f"Got forbidden! Your token is not right. Unfortunately, dropping logs. Message: {message}"
            )

        attempt_record = DeliveryAttempt(
            attempt=attempt,
            status_code=status_code,
            timestamp=datetime.now(timezone.utc),
            response_time_ms=elapsed_ms,
            outcome=outcome,
            backoff_ms=backoff_ms,
            error=error,
        )
        return attempt_record, message, exc

    def _wait(self, delay_s: float, interrupt: threading.Event | None) -> bool:
        """Sleep for delay_s. Returns False if the wait was interrupted."""
        if interrupt is None:
            if delay_s > 0:
                time.sleep(delay_s)
            return True
        return not interrupt.wait(delay_s)

    def send(self, batch: Batch, interrupt: threading.Event | None = None) -> DeliveryResult:
        """Deliver a batch with retries.

        Args:
            batch: The records to ship, joined into one newline-delimited body.
            interrupt: When set during a backoff wait, delivery stops and an
                INTERRUPTED result is returned.

        Returns:
            A DeliveryResult tagged with the final outcome and every attempt made.
        """
        payload = batch.to_payload()
        attempts: list[DeliveryAttempt] = []
        backoff_ms = 0
        retry = 0

        while True:
            attempt, message, exc = self._post(payload, len(attempts) + 1, backoff_ms)
            attempts.append(attempt)

            if attempt.outcome is not DeliveryOutcome.RETRYABLE:
                if attempt.outcome is DeliveryOutcome.SUCCESS:
                    self._debug(f"Successfully sent bulk to the listener, size: {len(payload)}")
                return DeliveryResult(
                    outcome=attempt.outcome,
                    attempts=attempts,
                    status_code=attempt.status_code,
                    message=message,
                )

            if not self.retry_policy.has_attempts_remaining(attempt.attempt):
                if exc is not None:
                    self.reporter.error("Got IO exception on the last bulk try to the listener", exc)
                return DeliveryResult(
                    outcome=DeliveryOutcome.EXHAUSTED,
                    attempts=attempts,
                    status_code=attempt.status_code,
                    message=message or (attempt.error or ""),
                    exception=exc,
                )

            backoff_ms = self.retry_policy.next_delay_ms(retry)
            self._debug(
                f"Could not send log to the listener, retry ({attempt.attempt}/{self.retry_policy.max_attempts})"
            )
            self._debug(f"Sleeping for {backoff_ms} ms and will try again.")
            if not self._wait(backoff_ms / 1000 * self.delay_factor, interrupt):
                self._debug("Got interrupted while waiting to retry")
                return DeliveryResult(
                    outcome=DeliveryOutcome.INTERRUPTED,
                    attempts=attempts,
                    status_code=attempt.status_code,
                    message=message,
                    exception=exc,
                )
            retry += 1
