"""Hardware health: voltage and temperatures."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
)

PREFIX = "health"


class HealthCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "voltage", DEVICE_LABELS, help="Input voltage to the RouterOS board, in volts"),
            gauge_metric(PREFIX, "temperature", DEVICE_LABELS, help="Temperature of RouterOS board, in degrees Celsius"),
            gauge_metric(PREFIX, "cpu-temperature", DEVICE_LABELS, help="Temperature of RouterOS CPU, in degrees Celsius"),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/system/health/print")

        def collect_one(re):
            # RouterOS 7 returns one row per sensor: name=temperature value=41
            if "name" in re.attrs and "value" in re.attrs:
                attrs = {re.get("name"): re.get("value")}
            else:
                attrs = re.attrs
            self.metrics.collect(attrs, ctx)

        collect_each(reply.re, collect_one)
