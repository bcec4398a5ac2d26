"""Per-interface traffic, error and state counters."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    counter_metric,
    gauge_metric,
)
from .converters import metric_from_bool

PREFIX = "interface"
LABELS = [*DEVICE_LABELS, "interface", "type", "comment", "slave"]


class InterfaceCollector(RouterOSCollector):

    def __init__(self):
        self.props = [
            "name", "type", "disabled", "comment", "slave", "actual-mtu", "running",
            "rx-byte", "tx-byte", "rx-packet", "tx-packet", "rx-error", "tx-error",
            "rx-drop", "tx-drop", "link-downs", "tx-queue-drop",
        ]
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "actual-mtu", LABELS),
            gauge_metric(PREFIX, "running", LABELS, converter=metric_from_bool),
            gauge_metric(PREFIX, "disabled", LABELS, converter=metric_from_bool),
            counter_metric(PREFIX, "rx-byte", LABELS),
            counter_metric(PREFIX, "tx-byte", LABELS),
            counter_metric(PREFIX, "rx-packet", LABELS),
            counter_metric(PREFIX, "tx-packet", LABELS),
            counter_metric(PREFIX, "rx-error", LABELS),
            counter_metric(PREFIX, "tx-error", LABELS),
            counter_metric(PREFIX, "rx-drop", LABELS),
            counter_metric(PREFIX, "tx-drop", LABELS),
            counter_metric(PREFIX, "link-downs", LABELS),
            counter_metric(PREFIX, "tx-queue-drop", LABELS),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run(
            "/interface/print", "?disabled=false", "=.proplist=" + ",".join(self.props),
        )

        def collect_one(re):
            # loopback appeared in 7.x and carries nothing useful
            if re.get("name") == "lo":
                return
            labelled = ctx.with_labels_from(re.attrs, "name", "type", "comment", "slave")
            self.metrics.collect(re.attrs, labelled)

        collect_each(reply.re, collect_one)
