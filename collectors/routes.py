"""Routing table size, total and per protocol."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    ret_metric,
)

PROTOCOLS = ["bgp", "static", "ospf", "dynamic", "connect", "rip"]


class RoutesCollector(RouterOSCollector):

    def __init__(self):
        self.count = ret_metric("", "routes", [*DEVICE_LABELS, "ip_version"],
                                help="number of routes in RIB")
        self.count_protocol = ret_metric("routes", "protocol", [*DEVICE_LABELS, "ip_version", "protocol"],
                                         help="number of routes per protocol in RIB")

    def describe(self):
        return PropertyMetricList([self.count, self.count_protocol]).describe()

    def collect(self, ctx: CollectorContext) -> None:
        self._collect_for("4", "ip", ctx)
        if not ctx.device.ipv6_disabled:
            self._collect_for("6", "ipv6", ctx)

    def _collect_for(self, ip_version: str, topic: str, ctx: CollectorContext) -> None:
        command = f"/{topic}/route/print"

        reply = ctx.client.run(command, "?disabled=false", "=count-only=")
        self.count.collect(reply.done.attrs, ctx.with_labels(ip_version))

        for protocol in PROTOCOLS:
            reply = ctx.client.run(command, "?disabled=false", f"?{protocol}", "=count-only=")
            self.count_protocol.collect(reply.done.attrs, ctx.with_labels(ip_version, protocol))
