"""IPv4 and IPv6 address pool usage."""

from collections import Counter

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    description,
    gauge_metric,
)

PREFIX = "ip_pool"
LABELS = [*DEVICE_LABELS, "ip_version", "pool"]


class PoolCollector(RouterOSCollector):

    def __init__(self):
        self.used = gauge_metric(PREFIX, "used", LABELS, name="pool_used", help="number of used IP/prefixes in a pool")
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "total", LABELS, name="pool_size", help="number of IP/prefixes in a pool"),
            self.used,
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        self._collect_ipv4(ctx)
        if not ctx.device.ipv6_disabled:
            self._collect_ipv6(ctx)

    def _collect_ipv4(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/ip/pool/print", "=.proplist=name,total,used")
        collect_each(
            reply.re,
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels("v4", re.get("name", ""))),
        )

    def _collect_ipv6(self, ctx: CollectorContext) -> None:
        # IPv6 pools have no usage summary; count the allocated prefixes
        reply = ctx.client.run("/ipv6/pool/used/print", "=.proplist=pool")
        used = Counter(re.get("pool", "") for re in reply.re)
        for pool, count in used.items():
            ctx.with_labels("v6", pool).emit(self.used.desc, float(count))
