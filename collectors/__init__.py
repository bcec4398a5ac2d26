"""
Collector registry.

Each entry maps a feature name (as used in the configuration file and the
--with-<name> flags) to a collector factory.
"""

from dataclasses import dataclass
from typing import Callable

from .base import CollectError, CollectorContext, MetricDesc, MetricSink, RouterOSCollector
from .conntrack import ConntrackCollector
from .dhcp import DHCPCollector
from .dhcp_lease import DHCPLeaseCollector
from .firmware import FirmwareCollector
from .health import HealthCollector
from .interface import InterfaceCollector
from .monitor import MonitorCollector
from .netwatch import NetwatchCollector
from .optics import OpticsCollector
from .poe import POECollector
from .pool import PoolCollector
from .queue import QueueCollector
from .resource import ResourceCollector
from .routes import RoutesCollector
from .wlanif import WlanIFCollector
from .wlansta import WlanSTACollector


class UnknownCollectorError(KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown collector: {self.name}"


@dataclass(frozen=True)
class RegisteredCollector:
    name: str
    description: str
    factory: Callable[[], RouterOSCollector]


_REGISTRY: tuple[RegisteredCollector, ...] = (
    RegisteredCollector("resource", "system resources and RouterOS version", ResourceCollector),
    RegisteredCollector("interface", "interface traffic and state", InterfaceCollector),
    RegisteredCollector("health", "board voltage and temperatures", HealthCollector),
    RegisteredCollector("dhcpl", "bound DHCP leases", DHCPLeaseCollector),
    RegisteredCollector("pools", "IPv4/IPv6 address pool usage", PoolCollector),
    RegisteredCollector("conntrack", "connection tracking entries", ConntrackCollector),
    RegisteredCollector("netwatch", "netwatch host status", NetwatchCollector),
    RegisteredCollector("firmware", "installed package versions", FirmwareCollector),
    RegisteredCollector("wlansta", "wireless station signal and traffic", WlanSTACollector),
    RegisteredCollector("dhcp", "active leases per DHCP server", DHCPCollector),
    RegisteredCollector("routes", "IPv4/IPv6 route counts per protocol", RoutesCollector),
    RegisteredCollector("queue", "queue monitor and simple queue traffic", QueueCollector),
    RegisteredCollector("monitor", "ethernet link status, rate and duplex", MonitorCollector),
    RegisteredCollector("wlanif", "wireless interface clients, noise and channel", WlanIFCollector),
    RegisteredCollector("optics", "SFP module diagnostics", OpticsCollector),
    RegisteredCollector("poe", "PoE output current, voltage and power", POECollector),
)


def available_collectors() -> list[RegisteredCollector]:
    return list(_REGISTRY)


def available_collector_names() -> list[str]:
    return [c.name for c in _REGISTRY]


def create_collector(name: str) -> RouterOSCollector:
    for c in _REGISTRY:
        if c.name == name.lower():
            return c.factory()
    raise UnknownCollectorError(name)


__all__ = [
    "CollectError",
    "CollectorContext",
    "MetricDesc",
    "MetricSink",
    "RegisteredCollector",
    "RouterOSCollector",
    "UnknownCollectorError",
    "available_collector_names",
    "available_collectors",
    "create_collector",
]
