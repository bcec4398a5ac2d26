"""System resources (CPU, memory, disk, uptime) and RouterOS version."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    MetricDesc,
    PropertyMetricList,
    RouterOSCollector,
    counter_metric,
    description,
    gauge_metric,
)
from .converters import metric_from_duration

PREFIX = "system"


class ResourceCollector(RouterOSCollector):

    def __init__(self):
        self.props = [
            "free-memory", "total-memory", "cpu-load", "free-hdd-space", "total-hdd-space",
            "cpu-frequency", "bad-blocks", "uptime", "cpu-count", "board-name", "version",
        ]
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "free-memory", DEVICE_LABELS),
            gauge_metric(PREFIX, "total-memory", DEVICE_LABELS),
            gauge_metric(PREFIX, "cpu-load", DEVICE_LABELS),
            gauge_metric(PREFIX, "free-hdd-space", DEVICE_LABELS),
            gauge_metric(PREFIX, "total-hdd-space", DEVICE_LABELS),
            gauge_metric(PREFIX, "cpu-frequency", DEVICE_LABELS),
            gauge_metric(PREFIX, "bad-blocks", DEVICE_LABELS),
            gauge_metric(PREFIX, "cpu-count", DEVICE_LABELS),
            counter_metric(PREFIX, "uptime", DEVICE_LABELS, name="uptime_seconds",
                           converter=metric_from_duration),
        ])
        self.version_desc = description(
            PREFIX, "routeros", "Board and system version",
            [*DEVICE_LABELS, "board_name", "version"],
        )

    def describe(self):
        yield from self.metrics.describe()
        yield self.version_desc

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/system/resource/print", "=.proplist=" + ",".join(self.props))
        for re in reply.re:
            ctx.emit(self.version_desc, 1.0, re.get("board-name", ""), re.get("version", ""))
            self.metrics.collect(re.attrs, ctx)
