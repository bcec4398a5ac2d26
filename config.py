"""
Configuration – devices and enabled collectors.

Multiple devices are described in a YAML file:

  devices:
    - name: gw1
      address: 192.168.88.1
      user: prometheus
      password: secret
      profile: edge          # optional, selects a feature set
      tls: false
      insecure: false
      timeout: 5
      ipv6_disabled: false
      disabled: false
  features:
    interface: true
    health: true
  profiles:
    edge:
      interface: true
      pools: true

A single device can be given on the command line instead. Values may also
come from environment variables or a .env file:

  MIKROTIK_USER      – Router API username (single device mode)
  MIKROTIK_PASSWORD  – Router API password (single device mode)
  LOG_LEVEL          – Logging level: DEBUG | INFO | WARNING | ERROR (default: INFO)
  LISTEN_ADDRESS     – host:port for the metrics HTTP server (default: :9436)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import IO, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger("Config")

NAMESPACE = "mikrotik"
DEFAULT_TIMEOUT = 5
DEFAULT_LISTEN_ADDRESS = ":9436"

# Collector that every device runs regardless of configuration.
ALWAYS_ENABLED = "resource"


# ─── Errors ───────────────────────────────────────────────────────────────────

class ConfigError(Exception):
    """Invalid configuration. `problems` lists every issue found."""

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = problems or []
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class UnknownDeviceError(ConfigError):
    def __init__(self, name: str):
        super().__init__(f"unknown device: {name}")


class UnknownProfileError(ConfigError):
    def __init__(self, name: str):
        super().__init__(f"unknown profile: {name}")


# ─── Model ────────────────────────────────────────────────────────────────────

class Features(dict):
    """Collector name -> enabled."""

    def feature_names(self) -> list[str]:
        return [name.lower() for name, enabled in self.items() if enabled]

    def validate(self, collectors: list[str]) -> list[str]:
        # an empty collector list disables the check
        if not collectors:
            return []
        return [f"unknown feature: {key}" for key in self if key.lower() not in collectors]


@dataclass
class Device:
    name: str = ""
    address: str = ""
    user: str = ""
    password: str = ""
    port: Optional[int] = None
    profile: str = ""
    tls: bool = False
    insecure: bool = False
    timeout: int = DEFAULT_TIMEOUT
    disabled: bool = False
    ipv6_disabled: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> "Device":
        port = d.get("port")
        return cls(
            name=str(d.get("name") or ""),
            address=str(d.get("address") or ""),
            user=str(d.get("user") or ""),
            password=str(d.get("password") or ""),
            port=int(port) if port not in (None, "") else None,
            profile=str(d.get("profile") or ""),
            tls=bool(d.get("tls", False)),
            insecure=bool(d.get("insecure", False)),
            timeout=int(d.get("timeout") or DEFAULT_TIMEOUT),
            disabled=bool(d.get("disabled", False)),
            ipv6_disabled=bool(d.get("ipv6_disabled", False)),
        )

    def validate(self, profiles: dict[str, Features]) -> list[str]:
        problems = []
        for attr in ("name", "address", "user", "password"):
            if not getattr(self, attr):
                problems.append(f"missing `{attr}`")
        if self.profile and self.profile not in profiles:
            problems.append(f"unknown profile: {self.profile}")
        return problems


@dataclass
class Config:
    devices: list[Device] = field(default_factory=list)
    features: Features = field(default_factory=Features)
    profiles: dict[str, Features] = field(default_factory=dict)

    def find_device(self, name: str) -> Device:
        for d in self.devices:
            if d.name == name:
                return d
        raise UnknownDeviceError(name)

    def device_features(self, name: str) -> Features:
        device = self.find_device(name)
        if not device.profile:
            return self.features
        try:
            return self.profiles[device.profile]
        except KeyError:
            raise UnknownProfileError(device.profile) from None

    def enable(self, *names: str) -> None:
        """Turn features on globally and in every profile (CLI --with-* flags)."""
        for features in (self.features, *self.profiles.values()):
            for name in names:
                features[name] = True


# ─── Loading ──────────────────────────────────────────────────────────────────

def load(stream: IO | str, collectors: list[str]) -> Config:
    """Parse and validate YAML configuration."""
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ConfigError(f"unmarshal error: {e}") from e

    if data is None:
        raise ConfigError("configuration is empty")
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")

    features = Features(data.get("features") or {})
    problems = features.validate(collectors)
    if problems:
        raise ConfigError("validate features error", problems)
    features[ALWAYS_ENABLED] = True

    profiles: dict[str, Features] = {}
    for name, raw in (data.get("profiles") or {}).items():
        profile = Features(raw or {})
        problems = profile.validate(collectors)
        if problems:
            raise ConfigError(f"invalid profile '{name}'", problems)
        profile[ALWAYS_ENABLED] = True
        profiles[name] = profile

    raw_devices = data.get("devices") or []
    bad = [idx for idx, d in enumerate(raw_devices) if not isinstance(d, dict)]
    if bad:
        raise ConfigError("invalid configuration", [f"device {idx} is not a mapping" for idx in bad])

    devices = [Device.from_dict(d) for d in raw_devices]
    devices = [d for d in devices if not d.disabled]

    problems = []
    for idx, d in enumerate(devices):
        problems.extend(
            f"invalid device {idx} ({d.name}) configuration: {p}" for p in d.validate(profiles)
        )
    if problems:
        raise ConfigError("invalid configuration", problems)

    return Config(devices=devices, features=features, profiles=profiles)


def load_file(path: str, collectors: list[str]) -> Config:
    log.info(f"Loading config file {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return load(f, collectors)
    except OSError as e:
        raise ConfigError(f"read file error: {e}") from e


def single_device(
    name: str,
    address: str,
    user: str = "",
    password: str = "",
    port: Optional[int] = None,
    tls: bool = False,
    insecure: bool = False,
    timeout: int = DEFAULT_TIMEOUT,
) -> Config:
    """Config for one device given on the command line; credentials fall back to the environment."""
    user = user or _optional_str("MIKROTIK_USER")
    password = password or _optional_str("MIKROTIK_PASSWORD")

    missing = [
        flag for flag, value in (
            ("device", name), ("address", address), ("user", user), ("password", password),
        ) if not value
    ]
    if missing:
        raise ConfigError("missing required param for single device configuration", missing)

    device = Device(
        name=name, address=address, user=user, password=password,
        port=port, tls=tls, insecure=insecure, timeout=timeout,
    )
    return Config(devices=[device], features=Features({ALWAYS_ENABLED: True}))


# ─── Environment ──────────────────────────────────────────────────────────────

def _optional_str(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip() or default


def valid_log_level(level: str) -> str:
    if level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        log.warning(f"Config: LOG_LEVEL='{level}' is invalid, defaulting to INFO")
        return "INFO"
    return level.upper()


LOG_LEVEL: str = valid_log_level(_optional_str("LOG_LEVEL", "INFO"))
LISTEN_ADDRESS: str = _optional_str("LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS)
