"""Netwatch host status."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    status_metric,
)

LABELS = [*DEVICE_LABELS, "host", "comment"]


class NetwatchCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            status_metric("netwatch", "status", LABELS, ["up", "down", "unknown"]),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/tool/netwatch/print", "?disabled=false", "=.proplist=host,comment,status")
        collect_each(
            reply.re,
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels_from(re.attrs, "host", "comment")),
        )
