"""Shared doubles for collector and exporter tests."""

from types import MappingProxyType
from unittest.mock import Mock

from collectors import MetricSink
from config import Device
from routeros import Reply, Sentence


def sentence(word: str = "!re", **attrs) -> Sentence:
    return Sentence(word, "", MappingProxyType(attrs))


def reply(*rows: dict) -> Reply:
    return Reply(re=[Sentence("!re", "", MappingProxyType(r)) for r in rows], done=sentence("!done"))


def count_reply(ret: str) -> Reply:
    """Answer to a =count-only= query."""
    return Reply(re=[], done=sentence("!done", ret=ret))


def device(**kwargs) -> Device:
    defaults = dict(name="gw1", address="10.0.0.1", user="prometheus", password="secret")
    defaults.update(kwargs)
    return Device(**defaults)


def fake_client(replies: dict) -> Mock:
    """Client double answering by command word; a callable answer gets the remaining words."""
    def run(command, *args):
        answer = replies[command]
        return answer(*args) if callable(answer) else answer

    client = Mock()
    client.run.side_effect = run
    return client


def samples(sink: MetricSink, metric: str, /) -> list:
    return [s for family in sink.families() for s in family.samples if s.name == metric]


def value(sink: MetricSink, metric: str, /, **labels) -> float:
    for s in samples(sink, metric):
        if all(s.labels.get(k) == v for k, v in labels.items()):
            return s.value
    raise AssertionError(f"no sample {metric} with {labels}")
