"""Ethernet link state, rate and duplex."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    gauge_metric,
)
from .converters import metric_from_bool

LABELS = [*DEVICE_LABELS, "interface"]

# link rate in Mbps
RATES = {
    "10Mbps": 10,
    "100Mbps": 100,
    "1Gbps": 1000,
    "2.5Gbps": 2500,
    "5Gbps": 5000,
    "10Gbps": 10000,
    "25Gbps": 25000,
    "40Gbps": 40000,
    "50Gbps": 50000,
    "100Gbps": 100000,
}


def metric_from_link_status(value: str) -> float:
    return 1.0 if value == "link-ok" else 0.0


def metric_from_rate(value: str) -> float:
    return float(RATES.get(value, 0))


class MonitorCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            gauge_metric("monitor", "status", LABELS, converter=metric_from_link_status),
            gauge_metric("monitor", "rate", LABELS, converter=metric_from_rate),
            gauge_metric("monitor", "full-duplex", LABELS, converter=metric_from_bool),
        ])

    def describe(self):
        return self.metrics.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/interface/ethernet/print", "?disabled=false", "=.proplist=name")
        names = [re.get("name") for re in reply.re if re.get("name")]
        if not names:
            return

        reply = ctx.client.run(
            "/interface/ethernet/monitor", "=numbers=" + ",".join(names), "=once=",
            "=.proplist=name,status,rate,full-duplex",
        )
        collect_each(
            reply.re,
            lambda re: self.metrics.collect(re.attrs, ctx.with_labels(re.get("name", ""))),
        )
