import pytest

from src.collector_receiver.server import CollectorServer
from src.log_shipper.batcher import BatchAssembler
from src.log_shipper.client import DeliveryClient
from src.log_shipper.config import ShipperConfig
from src.log_shipper.durable_queue import DurableQueue
from src.log_shipper.reporter import RecordingReporter
from src.log_shipper.retry import RetryPolicy
from src.log_shipper.scheduler import DrainScheduler
from src.observability.metrics import ShippingMetrics


TOKEN = "test-token"
LOG_TYPE = "test-type"


@pytest.fixture
def token():
    return TOKEN


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def queue(tmp_path):
    q = DurableQueue(tmp_path / "buffer")
    yield q
    q.close()


@pytest.fixture
def assembler(queue):
    return BatchAssembler(queue)


@pytest.fixture
def retry_policy():
    return RetryPolicy()


@pytest.fixture
def collector():
    server = CollectorServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def client(collector, reporter, retry_policy):
    """Client pointed at the local collector; backoff waits are skipped."""
    return DeliveryClient(
        listener_url=collector.url,
        token=TOKEN,
        log_type=LOG_TYPE,
        reporter=reporter,
        retry_policy=retry_policy,
        socket_timeout_ms=5000,
        connect_timeout_ms=5000,
        delay_factor=0,
    )


@pytest.fixture
def metrics():
    return ShippingMetrics(window_seconds=300)


@pytest.fixture
def scheduler(queue, assembler, client, reporter, metrics):
    s = DrainScheduler(
        queue=queue,
        assembler=assembler,
        client=client,
        reporter=reporter,
        interval=0.2,
        metrics=metrics,
        shutdown_timeout=5,
    )
    yield s
    if s.running:
        s.stop()


@pytest.fixture
def shipper_config(tmp_path, collector):
    return ShipperConfig(
        token=TOKEN,
        log_type=LOG_TYPE,
        listener_url=collector.url,
        drain_interval=1,
        fs_percent_threshold=-1,
        queue_dir=str(tmp_path / "shipper-buffer"),
        socket_timeout_ms=5000,
        connect_timeout_ms=5000,
    )
