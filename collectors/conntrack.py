"""Connection tracking table size."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    gauge_metric,
)

PREFIX = "ip_firewall_connection_tracking"


class ConntrackCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "total-entries", DEVICE_LABELS, name="entries",
                         help="Number of tracked connections"),
            gauge_metric(PREFIX, "max-entries", DEVICE_LABELS, name="max_entries",
                         help="Conntrack table capacity"),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run(
            "/ip/firewall/connection/tracking/print", "=.proplist=total-entries,max-entries",
        )
        if not reply.re:
            return
        self.metrics.collect(reply.re[0].attrs, ctx)
