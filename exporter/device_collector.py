"""
Device Collector – one RouterOS device, its cached API connection and the
collectors enabled for it.

The connection is kept between scrapes. Before re-use it is probed with
/system/identity/print; a dead connection is closed and dialed again.
"""

import logging
import threading
from typing import Optional

from collectors import CollectError, CollectorContext, MetricSink, RouterOSCollector
from config import Device
from routeros import (
    API_PORT,
    API_PORT_TLS,
    Client,
    ConnectionClosedError,
    DeviceError,
    ProtocolError,
    RouterOSError,
    UnknownReplyError,
    dial,
    dial_tls,
)

log = logging.getLogger("DeviceCollector")

# errors after which the cached connection can't be trusted anymore;
# an unknown reply word leaves the rest of that reply unread in the stream
CONNECTION_ERRORS = (OSError, EOFError, ProtocolError, ConnectionClosedError, UnknownReplyError)


class DeviceCollector:

    def __init__(self, device: Device, collectors: list[tuple[str, RouterOSCollector]]):
        self.device = device
        self.collectors = collectors
        if self.device.port is None:
            self.device.port = API_PORT_TLS if device.tls else API_PORT
        self.errors = 0
        self._client: Optional[Client] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.device.name

    # ─── Connection ───────────────────────────────────────────────────────────

    def connect(self) -> Client:
        """Return a live client, re-using the cached one when it still answers."""
        if self._client is not None:
            try:
                if self._client.run("/system/identity/print").re:
                    return self._client
                log.info(f"[{self.name}] empty identity reply, reconnecting")
            except (*CONNECTION_ERRORS, RouterOSError) as e:
                log.info(f"[{self.name}] cached connection is stale ({e}), reconnecting")
            self._drop_client()

        d = self.device
        log.debug(f"[{self.name}] connecting to {d.address}:{d.port} (tls={d.tls})")
        if d.tls:
            self._client = dial_tls(d.address, d.port, d.user, d.password,
                                    timeout=d.timeout, insecure=d.insecure)
        else:
            self._client = dial(d.address, d.port, d.user, d.password, timeout=d.timeout)
        log.info(f"[{self.name}] connected to {d.address}:{d.port}")
        return self._client

    def _drop_client(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def close(self) -> None:
        with self._lock:
            self._drop_client()

    # ─── Scrape ───────────────────────────────────────────────────────────────

    def collect(self, sink: MetricSink) -> bool:
        """
        Run every enabled collector against the device.
        Returns True only when the connection and all collectors succeeded.
        """
        with self._lock:
            try:
                return self._collect(sink)
            except Exception as e:
                log.exception(f"[{self.name}] unexpected scrape error: {e}")
                self.errors += 1
                return False

    def _collect(self, sink: MetricSink) -> bool:
        try:
            client = self.connect()
        except (*CONNECTION_ERRORS, RouterOSError) as e:
            log.error(f"[{self.name}] connection to {self.device.address} failed: {e}")
            self.errors += 1
            return False

        ok = True
        for name, collector in self.collectors:
            ctx = CollectorContext(sink=sink, device=self.device, client=client, collector=name)
            try:
                collector.collect(ctx)
            except CONNECTION_ERRORS as e:
                log.error(f"[{self.name}] collector {name}: connection lost: {e}")
                self.errors += 1
                self._drop_client()
                return False
            except DeviceError as e:
                log.error(f"[{self.name}] collector {name}: {e}")
                self.errors += 1
                ok = False
                if e.fatal:
                    # device closes the session after !fatal
                    self._drop_client()
                    return False
            except (RouterOSError, CollectError) as e:
                log.error(f"[{self.name}] collector {name}: {e}")
                self.errors += 1
                ok = False
        return ok
