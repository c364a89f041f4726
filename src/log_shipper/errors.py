class ShipperError(Exception):
    """Base class for log shipper errors."""


class DeliveryExhaustedError(ShipperError):
    """Every delivery attempt for a batch failed with a retryable condition."""

    def __init__(self, status_code: int | None, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Got HTTP {status_code} from the listener, with message: {message}")
