import threading
import time
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Self
from urllib.parse import parse_qs, urlparse


class _CollectorHandler(BaseHTTPRequestHandler):
    """HTTP request handler for receiving log bulks."""

    def do_POST(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length)

        server_config = self.server.config  # type: ignore[attr-defined]

        with server_config["lock"]:
            if server_config["response_sequence"]:
                code = server_config["response_sequence"].pop(0)
            else:
                code = server_config["response_code"]
            delay = server_config["response_delay"]
            server_config["requests"].append({
                "body": body,
                "query": parse_qs(urlparse(self.path).query),
                "headers": dict(self.headers),
                "response_code": code,
            })

        # Simulate slow response
        if delay > 0:
            time.sleep(delay)

        self.send_response(code)
        self.send_header("Content-Type", "text/plain")
        self.end_headers()
        if code == 200:
            self.wfile.write(b"ok")
        else:
            self.wfile.write(server_config["error_body"].encode())

    def log_message(self, format, *args):
        """Suppress default request logging."""
        pass


class CollectorServer:
    """Configurable HTTP server that simulates a log listener."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self._host = host
        self._port = port
        self._config = {
            "response_code": 200,
            "response_sequence": [],
            "response_delay": 0,
            "error_body": "error",
            "requests": [],
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def set_response_code(self, code: int) -> Self:
        self._config["response_code"] = code
        return self

    def set_response_sequence(self, codes: list[int]) -> Self:
        """Answer the next requests with these codes, then fall back to response_code."""
        with self._config["lock"]:
            self._config["response_sequence"] = list(codes)
        return self

    def set_response_delay(self, seconds: float) -> Self:
        self._config["response_delay"] = seconds
        return self

    def set_error_body(self, body: str) -> Self:
        self._config["error_body"] = body
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _CollectorHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}"

    @property
    def port(self) -> int:
        return self._port

    def get_requests(self) -> list[dict]:
        with self._config["lock"]:
            return list(self._config["requests"])

    def get_request_count(self) -> int:
        with self._config["lock"]:
            return len(self._config["requests"])

    def get_received_records(self) -> list[bytes]:
        """Every record from requests that were answered with 200, in arrival order."""
        with self._config["lock"]:
            records = []
            for req in self._config["requests"]:
                if req["response_code"] == 200:
                    records.extend(req["body"].splitlines())
            return records

    def clear(self) -> None:
        with self._config["lock"]:
            self._config["requests"].clear()
