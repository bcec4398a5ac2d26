"""Queue monitor totals and per simple queue traffic."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
    rxtx_metric,
)
from .converters import split_string_to_floats

PREFIX = "simple_queue"
LABELS = [*DEVICE_LABELS, "simple_queue_name", "queue", "comment"]


def metric_from_queue_tx_rx(value: str) -> tuple[float, float]:
    # simple queue counters are "upload/download"
    return split_string_to_floats(value, "/")


class QueueCollector(RouterOSCollector):

    def __init__(self):
        self.monitor = PropertyMetricList([
            gauge_metric("queue", "queued-bytes", DEVICE_LABELS),
            gauge_metric("queue", "queued-packets", DEVICE_LABELS),
        ])
        self.metrics = PropertyMetricList([
            rxtx_metric(PREFIX, "packets", LABELS, converter=metric_from_queue_tx_rx),
            rxtx_metric(PREFIX, "bytes", LABELS, converter=metric_from_queue_tx_rx),
            rxtx_metric(PREFIX, "queued-packets", LABELS, converter=metric_from_queue_tx_rx),
            rxtx_metric(PREFIX, "queued-bytes", LABELS, converter=metric_from_queue_tx_rx),
        ])

    def describe(self):
        yield from self.metrics.describe()
        yield from self.monitor.describe()

    def collect(self, ctx: CollectorContext) -> None:
        collect_each([self._collect_monitor, self._collect_simple_queues], lambda fn: fn(ctx))

    def _collect_monitor(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/queue/monitor", "=once=", "=.proplist=queued-packets,queued-bytes")
        if reply.re:
            self.monitor.collect(reply.re[0].attrs, ctx)

    def _collect_simple_queues(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run(
            "/queue/simple/print", "?disabled=false",
            "=.proplist=name,queue,comment,bytes,packets,queued-bytes,queued-packets",
        )
        collect_each(
            reply.re,
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels_from(re.attrs, "name", "queue", "comment")),
        )
