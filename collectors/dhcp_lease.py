"""Bound DHCP leases, one series per lease."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
)
from .converters import clean_host_name, metric_constant_value

LABELS = [
    *DEVICE_LABELS, "activemacaddress", "server", "status", "activeaddress", "hostname", "comment",
]


class DHCPLeaseCollector(RouterOSCollector):

    def __init__(self):
        self.props = ["active-mac-address", "server", "status", "active-address", "host-name", "comment"]
        self.metrics = PropertyMetricList([
            gauge_metric("dhcp", "status", LABELS, name="leases_metrics",
                         help="number of metrics", converter=metric_constant_value),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run(
            "/ip/dhcp-server/lease/print", "?status=bound", "=.proplist=" + ",".join(self.props),
        )

        def collect_one(re):
            labelled = ctx.with_labels(
                re.get("active-mac-address", ""),
                re.get("server", ""),
                re.get("status", ""),
                re.get("active-address", ""),
                clean_host_name(re.get("host-name", "")),
                re.get("comment", ""),
            )
            self.metrics.collect(re.attrs, labelled)

        collect_each(reply.re, collect_one)
