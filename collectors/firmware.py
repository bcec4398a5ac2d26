"""Installed system packages and their versions."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    const_metric,
)

LABELS = [*DEVICE_LABELS, "devicename", "package", "disabled", "version", "build_time"]


class FirmwareCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            const_metric("system", "version", LABELS, name="package", help="system packages version"),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/system/package/getall")

        def collect_one(re):
            labelled = ctx.with_labels(
                ctx.device.name,
                re.get("name", ""),
                re.get("disabled", ""),
                re.get("version", ""),
                re.get("build-time", ""),
            )
            self.metrics.collect(re.attrs, labelled)

        collect_each(reply.re, collect_one)
