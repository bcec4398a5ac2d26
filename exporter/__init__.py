"""Scrape orchestration and HTTP exposition."""

from .device_collector import DeviceCollector
from .mikrotik_collector import MikrotikCollector
from .server import MetricsHandler, parse_listen_address, run_server

__all__ = [
    "DeviceCollector",
    "MetricsHandler",
    "MikrotikCollector",
    "parse_listen_address",
    "run_server",
]
