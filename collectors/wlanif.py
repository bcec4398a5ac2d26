"""Wireless interface clients, noise floor, CCQ and channel."""

from .base import (
    DEVICE_LABELS,
    CollectError,
    CollectorContext,
    PropertyMetricList,
    RouterOSCollector,
    collect_each,
    description,
    gauge_metric,
)

PREFIX = "wlan_interface"
LABELS = [*DEVICE_LABELS, "interface"]


class WlanIFCollector(RouterOSCollector):

    def __init__(self):
        self.metrics = PropertyMetricList([
            gauge_metric(PREFIX, "registered-clients", LABELS),
            gauge_metric(PREFIX, "noise-floor", LABELS),
            gauge_metric(PREFIX, "overall-tx-ccq", LABELS),
        ])
        self.frequency_desc = description(PREFIX, "frequency", "WiFi frequency", [*LABELS, "freqidx"])
        self.channel_desc = description(PREFIX, "channel", "WiFi channel", [*LABELS, "channel"])

    def describe(self):
        yield self.frequency_desc
        yield from self.metrics.describe()
        yield self.channel_desc

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/interface/wireless/print", "=.proplist=name,disabled,frequency")
        # a disabled interface with a frequency is managed by CAPsMAN
        names = [
            re.get("name") for re in reply.re
            if not (re.get("disabled") == "true" and not re.get("frequency"))
        ]
        collect_each(names, lambda name: self._collect_interface(name, ctx))

    def _collect_interface(self, name: str, ctx: CollectorContext) -> None:
        reply = ctx.client.run(
            "/interface/wireless/monitor", f"=numbers={name}", "=once=",
            "=.proplist=registered-clients,noise-floor,overall-tx-ccq,channel",
        )
        if not reply.re:
            return

        re = reply.re[0]
        ictx = ctx.with_labels(name)
        self.metrics.collect(re.attrs, ictx)

        # e.g. "5180/20-Ceee/ac/DP(17dBm)+5775"
        channel = re.get("channel", "")
        ictx.emit(self.channel_desc, 1.0, channel)
        for idx, part in enumerate(channel.split("+"), start=1):
            freq = part.split("/", 1)[0]
            if not freq:
                continue
            try:
                value = float(freq)
            except ValueError as e:
                raise CollectError(f"collect channel for {name}", [e]) from e
            ictx.emit(self.frequency_desc, value, str(idx))
