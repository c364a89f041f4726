from src.log_shipper.batcher import BatchAssembler
from src.log_shipper.client import DeliveryClient
from src.log_shipper.config import ShipperConfig
from src.log_shipper.disk_guard import DiskSpaceGuard
from src.log_shipper.durable_queue import DurableQueue
from src.log_shipper.reporter import LoggingReporter, StatusReporter
from src.log_shipper.scheduler import DrainScheduler
from src.observability.metrics import ShippingMetrics


class LogShipper:
    """Buffers formatted records on disk and ships them to the listener in the background.

    `send` only ever touches the local queue, so callers never wait on the
    network. Usable as a context manager: entering starts the drain worker,
    leaving stops it and flushes what is left.
    """

    def __init__(
        self,
        config: ShipperConfig,
        reporter: StatusReporter | None = None,
        metrics: ShippingMetrics | None = None,
        delay_factor: float = 1.0,
    ):
        self.config = config.validate()
        self.reporter = reporter or LoggingReporter()
        self.metrics = metrics
        self.queue = DurableQueue(config.queue_dir)
        self.guard = DiskSpaceGuard(config.queue_dir, config.fs_percent_threshold, self.reporter)
        self.assembler = BatchAssembler(self.queue)
        self.client = DeliveryClient(
            listener_url=config.listener_url,
            token=config.token,
            log_type=config.log_type,
            reporter=self.reporter,
            socket_timeout_ms=config.socket_timeout_ms,
            connect_timeout_ms=config.connect_timeout_ms,
            debug=config.debug,
            delay_factor=delay_factor,
        )
        self.scheduler = DrainScheduler(
            queue=self.queue,
            assembler=self.assembler,
            client=self.client,
            reporter=self.reporter,
            interval=config.drain_interval,
            metrics=metrics,
            debug=config.debug,
        )

    def send(self, record: bytes | str) -> bool:
        """Queue a record for shipping. Returns False if it was dropped for lack of disk space."""
        if isinstance(record, str):
            record = record.encode("utf-8")

        if not self.guard.should_accept():
            if self.metrics is not None:
                self.metrics.record_dropped(1)
            return False

        self.queue.append(record)
        return True

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def flush(self) -> None:
        """Drain the queue synchronously on the calling thread."""
        self.scheduler.drain_now()

    def close(self) -> None:
        self.stop()
        self.queue.close()

    def __enter__(self) -> "LogShipper":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
