"""
Building blocks shared by all collectors.

A collector issues one or more API queries and maps reply attributes to
metrics. Most of the mapping is declarative: a property metric reads one
attribute from a sentence, converts it to a float and records a sample with
the labels of the current CollectorContext.

  metrics = PropertyMetricList([
      gauge_metric("system", "cpu-load", ["name", "address"]),
      counter_metric("system", "uptime", ["name", "address"],
                     name="uptime_seconds", converter=metric_from_duration),
  ])
  for re in reply.re:
      metrics.collect(re, ctx)
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Mapping, Optional

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from config import NAMESPACE, Device
from routeros import Client

from .converters import metric_from_string, split_string_to_floats

log = logging.getLogger("Collectors")

ValueConverter = Callable[[str], float]
RxTxValueConverter = Callable[[str], tuple[float, float]]

GAUGE = "gauge"
COUNTER = "counter"

DEVICE_LABELS = ["name", "address"]


class CollectError(Exception):
    """One or more metrics of a collector could not be collected."""

    def __init__(self, message: str, errors: list[Exception] | None = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message}: " + "; ".join(str(e) for e in self.errors)
        super().__init__(message)


def metric_name(prefix: str, name: str) -> str:
    parts = [NAMESPACE, prefix, name]
    return "_".join(p for p in parts if p).replace("-", "_")


# ─── Descriptors & Sink ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class MetricDesc:
    name: str
    help: str
    labels: tuple[str, ...]
    kind: str = GAUGE

    def family(self) -> Metric:
        if self.kind == COUNTER:
            return CounterMetricFamily(self.name, self.help, labels=list(self.labels))
        return GaugeMetricFamily(self.name, self.help, labels=list(self.labels))


def description(prefix: str, name: str, help_text: str, labels: Iterable[str],
                kind: str = GAUGE) -> MetricDesc:
    return MetricDesc(metric_name(prefix, name), help_text, tuple(labels), kind)


class MetricSink:
    """
    Collects samples for one scrape. Families are keyed by metric name so
    that every device adds samples to the same family. Safe to share between
    device worker threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._families: dict[str, Metric] = {}

    def add(self, desc: MetricDesc, value: float, labels: list[str]) -> None:
        if len(labels) != len(desc.labels):
            raise ValueError(
                f"{desc.name}: got {len(labels)} label values for {len(desc.labels)} labels"
            )
        with self._lock:
            family = self._families.get(desc.name)
            if family is None:
                family = self._families[desc.name] = desc.family()
            family.add_metric(labels, value)

    def families(self) -> list[Metric]:
        with self._lock:
            return list(self._families.values())


# ─── Context ──────────────────────────────────────────────────────────────────

@dataclass
class CollectorContext:
    sink: MetricSink
    device: Device
    client: Client
    collector: str
    labels: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.labels:
            self.labels = [self.device.name, self.device.address]

    def with_labels(self, *values: str) -> "CollectorContext":
        """Device labels followed by `values`."""
        return CollectorContext(
            self.sink, self.device, self.client, self.collector,
            [self.device.name, self.device.address, *values],
        )

    def with_labels_from(self, attrs: Mapping[str, str], *names: str) -> "CollectorContext":
        return self.with_labels(*(attrs.get(n, "") for n in names))

    def emit(self, desc: MetricDesc, value: float, *extra_labels: str) -> None:
        self.sink.add(desc, value, [*self.labels, *extra_labels])


# ─── Property Metrics ─────────────────────────────────────────────────────────

class PropertyMetric:
    """Reads `property` from a sentence and emits metric(s)."""

    def __init__(self, prefix: str, property: str):
        self.prefix = prefix
        self.property = property

    def describe(self) -> Iterator[MetricDesc]:
        raise NotImplementedError

    def collect(self, attrs: Mapping[str, str], ctx: CollectorContext) -> None:
        raise NotImplementedError

    def _value(self, attrs: Mapping[str, str], ctx: CollectorContext) -> Optional[str]:
        value = attrs.get(self.property)
        if value is None:
            log.debug(f"[{ctx.device.name}/{ctx.collector}] property {self.property} value not found, "
                      f"labels={ctx.labels}")
            return None
        if value == "":
            return None
        return value


class SimplePropertyMetric(PropertyMetric):

    def __init__(self, prefix: str, property: str, desc: MetricDesc, converter: ValueConverter):
        super().__init__(prefix, property)
        self.desc = desc
        self.converter = converter

    def describe(self) -> Iterator[MetricDesc]:
        yield self.desc

    def collect(self, attrs: Mapping[str, str], ctx: CollectorContext) -> None:
        value = self._value(attrs, ctx)
        if value is None:
            return
        # e.g. "5@1000" – keep the part before '@'
        value = value.split("@", 1)[0]
        try:
            number = self.converter(value)
        except ValueError as e:
            raise ValueError(f"parse {value!r} for property {self.property} error: {e}") from e
        ctx.emit(self.desc, number)


class RxTxPropertyMetric(PropertyMetric):
    """Property holding "tx,rx" – split into tx_ and rx_ counters."""

    def __init__(self, prefix: str, property: str, rx_desc: MetricDesc, tx_desc: MetricDesc,
                 converter: RxTxValueConverter):
        super().__init__(prefix, property)
        self.rx_desc = rx_desc
        self.tx_desc = tx_desc
        self.converter = converter

    def describe(self) -> Iterator[MetricDesc]:
        yield self.rx_desc
        yield self.tx_desc

    def collect(self, attrs: Mapping[str, str], ctx: CollectorContext) -> None:
        value = self._value(attrs, ctx)
        if value is None:
            return
        try:
            tx, rx = self.converter(value)
        except ValueError as e:
            raise ValueError(f"collect {value!r} for property {self.property} error: {e}") from e
        ctx.emit(self.tx_desc, tx)
        ctx.emit(self.rx_desc, rx)


class StatusPropertyMetric(PropertyMetric):
    """One gauge per known value; the matching one is 1, the rest 0."""

    def __init__(self, prefix: str, property: str, descs: dict[str, MetricDesc]):
        super().__init__(prefix, property)
        self.descs = descs

    def describe(self) -> Iterator[MetricDesc]:
        yield from self.descs.values()

    def collect(self, attrs: Mapping[str, str], ctx: CollectorContext) -> None:
        value = self._value(attrs, ctx)
        if value is None:
            return
        if value not in self.descs:
            log.debug(f"[{ctx.device.name}/{ctx.collector}] unknown {self.property} value {value!r}")
        for expected, desc in self.descs.items():
            ctx.emit(desc, 1.0 if expected == value else 0.0)


class ConstPropertyMetric(PropertyMetric):
    """Always 1 when the property is present in the reply."""

    def __init__(self, prefix: str, property: str, desc: MetricDesc):
        super().__init__(prefix, property)
        self.desc = desc

    def describe(self) -> Iterator[MetricDesc]:
        yield self.desc

    def collect(self, attrs: Mapping[str, str], ctx: CollectorContext) -> None:
        if self.property not in attrs:
            log.debug(f"[{ctx.device.name}/{ctx.collector}] property {self.property} value not found")
            return
        ctx.emit(self.desc, 1.0)


# ─── Builders ─────────────────────────────────────────────────────────────────

def _help(prefix: str, property: str, help: Optional[str]) -> str:
    return help or f"{property} for {prefix}"


def gauge_metric(prefix: str, property: str, labels: list[str], name: Optional[str] = None,
                 help: Optional[str] = None, converter: ValueConverter = metric_from_string) -> PropertyMetric:
    desc = description(prefix, name or property, _help(prefix, property, help), labels)
    return SimplePropertyMetric(prefix, property, desc, converter)


def counter_metric(prefix: str, property: str, labels: list[str], name: Optional[str] = None,
                   help: Optional[str] = None, converter: ValueConverter = metric_from_string) -> PropertyMetric:
    # prometheus_client appends "_total" to counter samples
    desc = description(prefix, name or property, _help(prefix, property, help), labels, COUNTER)
    return SimplePropertyMetric(prefix, property, desc, converter)


def rxtx_metric(prefix: str, property: str, labels: list[str], name: Optional[str] = None,
                help: Optional[str] = None,
                converter: RxTxValueConverter = split_string_to_floats) -> PropertyMetric:
    name = name or property
    help = _help(prefix, property, help)
    return RxTxPropertyMetric(
        prefix, property,
        description(prefix, f"rx_{name}", f"{help} (RX)", labels, COUNTER),
        description(prefix, f"tx_{name}", f"{help} (TX)", labels, COUNTER),
        converter,
    )


def status_metric(prefix: str, property: str, labels: list[str], values: list[str],
                  name: Optional[str] = None, help: Optional[str] = None) -> PropertyMetric:
    name = name or property
    help = _help(prefix, property, help)
    return StatusPropertyMetric(prefix, property, {
        v: description(prefix, f"{name}_{v}", help, labels) for v in values
    })


def const_metric(prefix: str, property: str, labels: list[str], name: Optional[str] = None,
                 help: Optional[str] = None) -> PropertyMetric:
    desc = description(prefix, name or property, _help(prefix, property, help), labels)
    return ConstPropertyMetric(prefix, property, desc)


def ret_metric(prefix: str, name: str, labels: list[str], help: Optional[str] = None,
               converter: ValueConverter = metric_from_string) -> PropertyMetric:
    """Gauge from the `ret` attribute of `!done` (=count-only= queries)."""
    desc = description(prefix, name, help or f"{name} for {prefix}", labels)
    return SimplePropertyMetric(prefix, "ret", desc, converter)


class PropertyMetricList(list):
    """Metrics read from the same sentence."""

    def describe(self) -> Iterator[MetricDesc]:
        for m in self:
            yield from m.describe()

    def collect(self, attrs: Mapping[str, str], ctx: CollectorContext) -> None:
        errors = []
        for m in self:
            try:
                m.collect(attrs, ctx)
            except ValueError as e:
                errors.append(e)
        if errors:
            raise CollectError("collect error", errors)


def collect_each(items: Iterable, fn: Callable) -> None:
    """Call `fn` for every item; failures are gathered and raised together at the end."""
    errors = []
    for item in items:
        try:
            fn(item)
        except (CollectError, ValueError) as e:
            errors.append(e)
    if errors:
        raise CollectError("collect error", errors)


# ─── Collector ────────────────────────────────────────────────────────────────

class RouterOSCollector:
    """Base class: `describe()` lists every descriptor, `collect(ctx)` queries the device."""

    def describe(self) -> Iterator[MetricDesc]:
        raise NotImplementedError

    def collect(self, ctx: CollectorContext) -> None:
        raise NotImplementedError
