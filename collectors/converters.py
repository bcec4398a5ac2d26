"""
Converters from RouterOS attribute strings to metric values.
"""

import re

_DURATION_RE = re.compile(
    r"^(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m(?!s))?(?:(\d+)s)?(?:(\d+)ms)?$"
)
# seconds per week, day, hour, minute, second, millisecond
_DURATION_PARTS = (604800, 86400, 3600, 60, 1, 0.001)


def metric_from_string(value: str) -> float:
    return float(value)


def metric_from_bool(value: str) -> float:
    """1.0 for "true"/"yes", 0.0 for anything else."""
    return 1.0 if value in ("true", "yes") else 0.0


def metric_constant_value(value: str) -> float:
    return 1.0


def metric_from_duration(duration: str) -> float:
    """RouterOS duration (e.g. "1w2d3h4m5s6ms") to seconds."""
    match = _DURATION_RE.match(duration)
    if not duration or match is None:
        raise ValueError(f"invalid duration value: {duration!r}")

    total = 0.0
    for part, multiplier in zip(match.groups(), _DURATION_PARTS):
        if part:
            total += int(part) * multiplier
    return total


def split_string_to_floats(metric: str, separator: str = ",") -> tuple[float, float]:
    """Split "a,b" into two floats."""
    if not metric:
        raise ValueError("empty value")

    parts = metric.split(separator)
    if len(parts) < 2:
        raise ValueError(f"can't split {metric!r} to floats")

    try:
        return float(parts[0]), float(parts[1])
    except ValueError as e:
        raise ValueError(f"parse {metric!r} error: {e}") from e


def clean_host_name(hostname: str) -> str:
    """Strip surrounding quotes and escape non-ASCII (broken DHCP clients send garbage)."""
    if not hostname:
        return hostname
    if hostname[0] == '"' and hostname[-1] == '"' and len(hostname) > 1:
        hostname = hostname[1:-1]
    return hostname.encode("ascii", errors="backslashreplace").decode("ascii")
