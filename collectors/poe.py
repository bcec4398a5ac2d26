"""PoE output current, voltage and power."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
)

LABELS = [*DEVICE_LABELS, "interface"]


class POECollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            gauge_metric("poe", "poe-out-current", LABELS, name="current", help="current in mA"),
            gauge_metric("poe", "poe-out-power", LABELS, name="wattage", help="power in W"),
            gauge_metric("poe", "poe-out-voltage", LABELS, name="voltage", help="voltage in V"),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/interface/ethernet/poe/print", "=.proplist=name")
        names = [re.get("name") for re in reply.re if re.get("name")]
        if not names:
            return

        reply = ctx.client.run(
            "/interface/ethernet/poe/monitor", "=numbers=" + ",".join(names), "=once=",
            "=.proplist=name,poe-out-current,poe-out-voltage,poe-out-power",
        )
        collect_each(
            [re for re in reply.re if "name" in re.attrs],
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels(re.get("name"))),
        )
