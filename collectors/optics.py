"""SFP module diagnostics."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
)
from .converters import metric_from_bool

PREFIX = "optics"
LABELS = [*DEVICE_LABELS, "interface"]


class OpticsCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "sfp-rx-loss", LABELS, help="RX status", converter=metric_from_bool),
            gauge_metric(PREFIX, "sfp-tx-fault", LABELS, help="TX status", converter=metric_from_bool),
            gauge_metric(PREFIX, "sfp-rx-power", LABELS, help="RX power in dBM"),
            gauge_metric(PREFIX, "sfp-tx-power", LABELS, help="TX power in dBM"),
            gauge_metric(PREFIX, "sfp-temperature", LABELS, help="temperature in degree celsius"),
            gauge_metric(PREFIX, "sfp-tx-bias-current", LABELS, help="bias is milliamps"),
            gauge_metric(PREFIX, "sfp-supply-voltage", LABELS),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/interface/ethernet/print", "?disabled=false", "=.proplist=name,default-name")
        names = [
            re.get("name") for re in reply.re
            if re.get("name", "").startswith("sfp") or re.get("default-name", "").startswith("sfp")
        ]
        if not names:
            return

        reply = ctx.client.run(
            "/interface/ethernet/monitor", "=numbers=" + ",".join(names), "=once=",
            "=.proplist=name,sfp-rx-loss,sfp-tx-fault,sfp-temperature,sfp-supply-voltage,"
            "sfp-rx-power,sfp-tx-power,sfp-tx-bias-current",
        )
        collect_each(
            [re for re in reply.re if "name" in re.attrs],
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels(re.get("name"))),
        )
