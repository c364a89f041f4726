"""Shipper configuration: frozen dataclass built from defaults, env vars and overrides."""

import os
import tempfile
from dataclasses import dataclass, fields, replace
from urllib.parse import urlparse

from src.log_shipper.disk_guard import DiskSpaceGuard


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class ShipperConfig:
    token: str = ""
    log_type: str = "python"
    listener_url: str = "http://localhost:8070"
    drain_interval: float = 5
    fs_percent_threshold: int = 98
    queue_dir: str = os.path.join(tempfile.gettempdir(), "log-shipper-buffer")
    socket_timeout_ms: int = 10000
    connect_timeout_ms: int = 10000
    debug: bool = False

    def validate(self) -> "ShipperConfig":
        if not self.token:
            raise ValueError("token is required")

        parsed = urlparse(self.listener_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"listener_url is not a valid http(s) URL: {self.listener_url!r}")

        if self.drain_interval <= 0:
            raise ValueError("drain_interval must be positive")

        if self.fs_percent_threshold != DiskSpaceGuard.DISABLED and not 0 <= self.fs_percent_threshold <= 100:
            raise ValueError(
                f"fs_percent_threshold must be between 0 and 100, or {DiskSpaceGuard.DISABLED} to disable"
            )

        if self.socket_timeout_ms <= 0 or self.connect_timeout_ms <= 0:
            raise ValueError("timeouts must be positive")

        return self


_ENV_VARS = {
    "token": "LOG_SHIPPER_TOKEN",
    "log_type": "LOG_SHIPPER_TYPE",
    "listener_url": "LOG_SHIPPER_URL",
    "drain_interval": "LOG_SHIPPER_DRAIN_INTERVAL",
    "fs_percent_threshold": "LOG_SHIPPER_FS_PERCENT_THRESHOLD",
    "queue_dir": "LOG_SHIPPER_QUEUE_DIR",
    "socket_timeout_ms": "LOG_SHIPPER_SOCKET_TIMEOUT_MS",
    "connect_timeout_ms": "LOG_SHIPPER_CONNECT_TIMEOUT_MS",
    "debug": "LOG_SHIPPER_DEBUG",
}

_CONVERTERS = {
    "drain_interval": float,
    "fs_percent_threshold": int,
    "socket_timeout_ms": int,
    "connect_timeout_ms": int,
    "debug": _parse_bool,
}


def load_config(env: dict[str, str] | None = None, **overrides) -> ShipperConfig:
    """Build ShipperConfig from defaults <- env vars <- keyword overrides (highest priority)."""
    if env is None:
        env = dict(os.environ)

    known = {f.name for f in fields(ShipperConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown config options: {sorted(unknown)}")

    kwargs: dict = {}
    for name, var in _ENV_VARS.items():
        if var in env:
            convert = _CONVERTERS.get(name, str)
            try:
                kwargs[name] = convert(env[var])
            except ValueError as e:
                raise ValueError(f"Invalid value for {var}: {env[var]!r}") from e

    kwargs.update(overrides)
    config = replace(ShipperConfig(), **kwargs)
    return config.validate()
