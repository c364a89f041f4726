"""Integration tests for batch delivery retry behavior."""

import threading
import time

import pytest

from src.log_shipper.client import DeliveryClient
from src.log_shipper.retry import RetryPolicy
from src.models.batch import Batch
from src.models.delivery import DeliveryOutcome


pytestmark = pytest.mark.integration


def one_record_batch():
    batch = Batch()
    batch.add(b"retry me\n")
    return batch


class TestDeliveryRetry:
    """Test retry behavior with real HTTP delivery."""

    @pytest.mark.parametrize("status_code", [500, 502, 503, 404, 429])
    def test_retryable_status_exhausts_three_attempts(self, client, collector, status_code):
        """Any status other than 200/400/401 is retried up to 3 attempts."""
        collector.set_response_code(status_code)

        result = client.send(one_record_batch())

        assert result.outcome is DeliveryOutcome.EXHAUSTED
        assert len(result.attempts) == 3
        assert all(a.status_code == status_code for a in result.attempts)
        assert result.status_code == status_code
        assert collector.get_request_count() == 3

    def test_exhausted_result_carries_last_message(self, client, collector):
        collector.set_response_code(503).set_error_body("listener overloaded")

        result = client.send(one_record_batch())

        assert result.message == "listener overloaded"

    def test_backoff_doubles_from_2000ms(self, client, collector):
        """Attempts record the scheduled backoff: 0, 2000, 4000."""
        collector.set_response_code(500)

        result = client.send(one_record_batch())

        assert [a.backoff_ms for a in result.attempts] == [0, 2000, 4000]
        assert [a.attempt for a in result.attempts] == [1, 2, 3]

    def test_actual_sleep_follows_backoff(self, reporter, collector):
        """With a scaled-down clock the gaps between attempts still double."""
        collector.set_response_code(500)
        eng = DeliveryClient(
            listener_url=collector.url,
            token="t",
            log_type="t",
            reporter=reporter,
            retry_policy=RetryPolicy(initial_backoff_ms=2000),
            delay_factor=0.1,  # 200 ms, 400 ms
        )

        start = time.monotonic()
        result = eng.send(one_record_batch())
        elapsed = time.monotonic() - start

        assert len(result.attempts) == 3
        assert elapsed >= 0.6
        gap_1 = (result.attempts[1].timestamp - result.attempts[0].timestamp).total_seconds()
        gap_2 = (result.attempts[2].timestamp - result.attempts[1].timestamp).total_seconds()
        assert gap_1 >= 0.2
        assert gap_2 >= 0.4

    def test_connection_refused_is_retried(self, reporter):
        """Delivery to a closed port is a retryable I/O failure."""
        eng = DeliveryClient(
            listener_url="http://127.0.0.1:19999",
            token="t",
            log_type="t",
            reporter=reporter,
            connect_timeout_ms=500,
            delay_factor=0,
        )

        result = eng.send(one_record_batch())

        assert result.outcome is DeliveryOutcome.EXHAUSTED
        assert len(result.attempts) == 3
        assert all(a.status_code is None for a in result.attempts)
        assert all(a.error == "connection_error" for a in result.attempts)
        assert result.exception is not None

    def test_last_io_exception_reported_as_error(self, reporter):
        eng = DeliveryClient(
            listener_url="http://127.0.0.1:19999",
            token="t",
            log_type="t",
            reporter=reporter,
            connect_timeout_ms=500,
            delay_factor=0,
        )

        eng.send(one_record_batch())

        errors = reporter.get_messages("error")
        assert len(errors) == 1
        assert "last bulk try" in errors[0].message
        assert errors[0].exc is not None

    def test_http_failures_report_no_io_exception(self, client, collector, reporter):
        collector.set_response_code(500)
        client.send(one_record_batch())
        assert reporter.get_messages("error") == []

    def test_transient_recovery_500_500_200(self, client, collector):
        """500 -> 500 -> 200: listener recovers on the last attempt."""
        collector.set_response_sequence([500, 500])

        result = client.send(one_record_batch())

        assert result.outcome is DeliveryOutcome.SUCCESS
        assert [a.status_code for a in result.attempts] == [500, 500, 200]

    def test_interrupt_during_backoff(self, reporter, collector):
        """Setting the interrupt event ends the backoff wait without retrying."""
        collector.set_response_code(500)
        eng = DeliveryClient(
            listener_url=collector.url,
            token="t",
            log_type="t",
            reporter=reporter,
        )
        interrupt = threading.Event()
        results = []

        t = threading.Thread(target=lambda: results.append(eng.send(one_record_batch(), interrupt)))
        t.start()

        deadline = time.monotonic() + 5
        while time.monotonic() < deadline and collector.get_request_count() < 1:
            time.sleep(0.02)
        interrupt.set()
        t.join(timeout=5)

        assert not t.is_alive()
        assert results[0].outcome is DeliveryOutcome.INTERRUPTED
        assert len(results[0].attempts) == 1
        assert collector.get_request_count() == 1

    def test_debug_reports_retry_progress(self, client, collector, reporter):
        client.debug = True
        collector.set_response_code(500)

        client.send(one_record_batch())

        infos = [m.message for m in reporter.get_messages("info")]
        assert "DEBUG: Could not send log to the listener, retry (1/3)" in infos
        assert "DEBUG: Sleeping for 2000 ms and will try again." in infos
        assert "DEBUG: Sleeping for 4000 ms and will try again." in infos
