from .batcher import BatchAssembler
from .client import DeliveryClient
from .config import ShipperConfig, load_config
from .disk_guard import DiskSpaceGuard
from .durable_queue import DurableQueue
from .errors import DeliveryExhaustedError, ShipperError
from .handler import ExcludeLoggersFilter, ShippingHandler
from .reporter import LoggingReporter, RecordingReporter
from .retry import RetryPolicy
from .scheduler import DrainScheduler
from .sender import LogShipper

__all__ = [
    "BatchAssembler",
    "DeliveryClient",
    "ShipperConfig", "load_config",
    "DiskSpaceGuard",
    "DurableQueue",
    "DeliveryExhaustedError", "ShipperError",
    "ExcludeLoggersFilter",
    "ShippingHandler",
    "LoggingReporter", "RecordingReporter",
    "RetryPolicy",
    "DrainScheduler",
    "LogShipper",
]
