"""
Prometheus custom collector scraping all configured devices.

Devices are scraped in parallel, one worker thread per device. Every
metric family is shared between devices, so samples of all devices with
the same metric name end up in one family.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator

from prometheus_client.core import Metric

from collectors import MetricSink, create_collector
from collectors.base import COUNTER, description
from config import Config

from .device_collector import DeviceCollector

log = logging.getLogger("MikrotikCollector")

SCRAPE_DURATION = description(
    "scrape", "device_duration_seconds",
    "mikrotik_exporter: duration of a device scrape", ["device"],
)
SCRAPE_SUCCESS = description(
    "scrape", "device_success",
    "mikrotik_exporter: whether a device scrape succeeded", ["device"],
)
SCRAPE_ERRORS = description(
    "scrape", "device_errors",
    "mikrotik_exporter: number of failed device scrapes", ["dev_name", "dev_address"], COUNTER,
)


class MikrotikCollector:

    def __init__(self, config: Config):
        self.devices: list[DeviceCollector] = []
        for device in config.devices:
            names = config.device_features(device.name).feature_names()
            collectors = [(name, create_collector(name)) for name in names]
            self.devices.append(DeviceCollector(device, collectors))
            log.info(f"Device {device.name} ({device.address}): collectors {', '.join(names)}")

    def describe(self) -> Iterator[Metric]:
        seen = set()
        descs = [SCRAPE_DURATION, SCRAPE_SUCCESS, SCRAPE_ERRORS]
        for dc in self.devices:
            for _, collector in dc.collectors:
                descs.extend(collector.describe())
        for desc in descs:
            if desc.name in seen:
                continue
            seen.add(desc.name)
            yield desc.family()

    def collect(self) -> Iterator[Metric]:
        sink = MetricSink()
        if self.devices:
            with ThreadPoolExecutor(max_workers=len(self.devices)) as pool:
                list(pool.map(lambda dc: self._scrape(dc, sink), self.devices))
        yield from sink.families()

    def _scrape(self, dc: DeviceCollector, sink: MetricSink) -> None:
        start = time.monotonic()
        ok = dc.collect(sink)
        duration = time.monotonic() - start
        log.debug(f"[{dc.name}] scrape finished in {duration:.3f}s (success={ok})")

        sink.add(SCRAPE_DURATION, duration, [dc.name])
        sink.add(SCRAPE_SUCCESS, 1.0 if ok else 0.0, [dc.name])
        sink.add(SCRAPE_ERRORS, float(dc.errors), [dc.name, dc.device.address])

    def close(self) -> None:
        for dc in self.devices:
            dc.close()
