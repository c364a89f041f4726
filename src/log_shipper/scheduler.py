import threading

from src.log_shipper.batcher import BatchAssembler
from src.log_shipper.client import DeliveryClient
from src.log_shipper.durable_queue import DurableQueue
from src.log_shipper.errors import DeliveryExhaustedError
from src.log_shipper.reporter import StatusReporter
from src.models.batch import Batch
from src.models.delivery import DeliveryOutcome
from src.observability.metrics import ShippingMetrics


class DrainScheduler:
    """Drains the queue on a single background worker at a fixed delay.

    The first drain runs as soon as the scheduler starts; later drains start
    `interval` seconds after the previous one finished. A batch that cannot be
    delivered goes back on the queue and draining pauses until the next tick.
    """

    SHUTDOWN_TIMEOUT_SECONDS = 20

    def __init__(
        self,
        queue: DurableQueue,
        assembler: BatchAssembler,
        client: DeliveryClient,
        reporter: StatusReporter,
        interval: float,
        metrics: ShippingMetrics | None = None,
        debug: bool = False,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT_SECONDS,
    ):
        self.queue = queue
        self.assembler = assembler
        self.client = client
        self.reporter = reporter
        self.interval = interval
        self.metrics = metrics
        self.debug = debug
        self.shutdown_timeout = shutdown_timeout
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._local = threading.local()

    def _debug(self, message: str, exc: BaseException | None = None) -> None:
        if self.debug:
            self.reporter.info("DEBUG: " + message, exc)

    def in_drain(self) -> bool:
        """True while the calling thread is inside a drain."""
        return getattr(self._local, "draining", False)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="log-shipper-drain", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker, then flush whatever is left with one synchronous drain."""
        self._stop_event.set()
        interrupted = False
        if self._thread is not None:
            try:
                self._thread.join(timeout=self.shutdown_timeout)
            except KeyboardInterrupt:
                interrupted = True
            if self._thread.is_alive():
                self.reporter.warning(
                    f"Drain worker did not finish within {self.shutdown_timeout} seconds, abandoning it"
                )
            self._thread = None

        # Make sure nothing is left behind
        self.drain_now()

        # The caller still gets its interrupt, after the flush
        if interrupted:
            raise KeyboardInterrupt

    def _run(self) -> None:
        while True:
            self._trigger()
            if self._stop_event.wait(self.interval):
                break

    def _trigger(self) -> None:
        try:
            self._drain(self._stop_event)
        except Exception as e:
            # A trigger must never take the worker down with it
            self.reporter.error("Uncaught error from the log shipper drain", e)

    def drain_now(self) -> None:
        """Run one drain on the calling thread, without interruptible backoff."""
        try:
            self._drain(None)
        except Exception as e:
            self.reporter.error("Uncaught error from the log shipper drain", e)

    def _drain(self, interrupt: threading.Event | None) -> None:
        self._local.draining = True
        try:
            self._drain_batches(interrupt)
        finally:
            self._local.draining = False

    def _drain_batches(self, interrupt: threading.Event | None) -> None:
        while not self.queue.is_empty():
            batch = self.assembler.pull_batch()
            if not batch:
                break

            try:
                self._deliver(batch, interrupt)
            except DeliveryExhaustedError as e:
                self._debug("Could not send log to the listener: ", e)
                self._debug("Will retry in the next interval")
                self._requeue(batch)
                break
            except Exception:
                # The batch is ours alone once pulled; hand it back before reporting
                self._requeue(batch)
                raise

            if interrupt is not None and interrupt.is_set():
                break

    def _deliver(self, batch: Batch, interrupt: threading.Event | None) -> None:
        result = self.client.send(batch, interrupt)
        result.raise_for_outcome()

        if result.outcome is DeliveryOutcome.INTERRUPTED:
            self._debug("Delivery interrupted by shutdown, returning batch to the queue")
            self._requeue(batch)
            return

        if self.metrics is not None:
            if result.dropped:
                self.metrics.record_dropped(len(batch))
            else:
                self.metrics.record_delivered(len(batch))

    def _requeue(self, batch: Batch) -> None:
        # Back at the tail, one record at a time; global FIFO order is not restored
        for record in batch.records:
            self.queue.append(record)
        if self.metrics is not None:
            self.metrics.record_requeued(len(batch))
