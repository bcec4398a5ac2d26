"""HTTP endpoint serving the metrics page, a health check and an index page."""

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger("HTTP")


class MetricsHandler(BaseHTTPRequestHandler):
    """HTTP handler for the Prometheus metrics endpoint."""

    registry: CollectorRegistry | None = None
    metrics_path = "/metrics"

    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self):
        path = urlparse(self.path).path

        if path == self.metrics_path:
            self._serve_metrics()
        elif path == "/healthz":
            self._serve_health()
        elif path == "/":
            self._serve_index()
        else:
            self.send_error(404, "Not Found")

    def _serve_metrics(self):
        try:
            output = generate_latest(self.registry)
        except Exception as e:
            log.error(f"Error generating metrics: {e}")
            self.send_error(500, str(e))
            return
        self._write(200, CONTENT_TYPE_LATEST, output)

    def _serve_index(self):
        html = f"""<html>
<head><title>Mikrotik Exporter</title></head>
<body>
<h1>Mikrotik Exporter</h1>
<p><a href="{self.metrics_path}">Metrics</a></p>
</body>
</html>""".encode()
        self._write(200, "text/html; charset=utf-8", html)

    def _serve_health(self):
        self._write(200, "text/plain; charset=utf-8", b"ok")

    def _write(self, status: int, content_type: str, body: bytes):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def parse_listen_address(address: str) -> tuple[str, int]:
    """":9436" -> ("", 9436), "127.0.0.1:9436" -> ("127.0.0.1", 9436)."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {address!r}")
    return host.strip("[]"), int(port)


def run_server(host: str, port: int, registry: CollectorRegistry, path: str = "/metrics") -> None:
    MetricsHandler.registry = registry
    MetricsHandler.metrics_path = path
    server = ThreadingHTTPServer((host, port), MetricsHandler)
    log.info(f"Listening on {host or '0.0.0.0'}:{port}, metrics at {path}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        server.server_close()
