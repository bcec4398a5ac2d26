"""Wireless registration table: per-station signal and traffic."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
    rxtx_metric,
)

PREFIX = "wlan_station"
LABELS = [*DEVICE_LABELS, "interface", "mac_address"]


class WlanSTACollector(RouterOSCollector):

    def __init__(self):
        self.props = ["interface", "mac-address", "signal-to-noise", "signal-strength", "packets", "bytes", "frames"]
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "signal-to-noise", LABELS),
            gauge_metric(PREFIX, "signal-strength", LABELS),
            rxtx_metric(PREFIX, "packets", LABELS),
            rxtx_metric(PREFIX, "bytes", LABELS),
            rxtx_metric(PREFIX, "frames", LABELS),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run(
            "/interface/wireless/registration-table/print", "=.proplist=" + ",".join(self.props),
        )
        collect_each(
            reply.re,
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels_from(re.attrs, "interface", "mac-address")),
        )
