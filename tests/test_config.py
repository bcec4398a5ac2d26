"""Tests for configuration loading and validation."""

import os
import tempfile
import unittest
from unittest.mock import patch

import config
from config import ConfigError, UnknownDeviceError, UnknownProfileError

COLLECTORS = ["resource", "interface", "health", "pools"]

VALID = """
devices:
  - name: gw1
    address: 192.168.88.1
    user: prometheus
    password: secret
  - name: edge
    address: 10.0.0.1
    user: prometheus
    password: secret
    profile: minimal
    tls: true
    port: 8730
  - name: old
    address: 10.0.0.2
    disabled: true
features:
  interface: true
  health: false
profiles:
  minimal:
    Pools: true
"""


class TestLoad(unittest.TestCase):

    def test_valid(self):
        cfg = config.load(VALID, COLLECTORS)

        self.assertEqual([d.name for d in cfg.devices], ["gw1", "edge"])
        edge = cfg.find_device("edge")
        self.assertTrue(edge.tls)
        self.assertEqual(edge.port, 8730)
        self.assertEqual(edge.timeout, config.DEFAULT_TIMEOUT)
        self.assertIsNone(cfg.find_device("gw1").port)

    def test_features(self):
        cfg = config.load(VALID, COLLECTORS)
        self.assertEqual(sorted(cfg.device_features("gw1").feature_names()), ["interface", "resource"])
        self.assertEqual(sorted(cfg.device_features("edge").feature_names()), ["pools", "resource"])

    def test_unknown_feature(self):
        with self.assertRaises(ConfigError) as cm:
            config.load("devices: []\nfeatures:\n  bgp: true\n", COLLECTORS)
        self.assertEqual(cm.exception.problems, ["unknown feature: bgp"])

    def test_missing_device_fields(self):
        with self.assertRaises(ConfigError) as cm:
            config.load("devices:\n  - name: gw1\n    address: 10.0.0.1\n", COLLECTORS)
        self.assertEqual(cm.exception.problems, [
            "invalid device 0 (gw1) configuration: missing `user`",
            "invalid device 0 (gw1) configuration: missing `password`",
        ])

    def test_unknown_profile(self):
        data = "devices:\n  - {name: a, address: b, user: c, password: d, profile: nope}\n"
        with self.assertRaises(ConfigError) as cm:
            config.load(data, COLLECTORS)
        self.assertIn("unknown profile: nope", str(cm.exception))

    def test_empty(self):
        with self.assertRaises(ConfigError):
            config.load("", COLLECTORS)

    def test_not_a_mapping(self):
        with self.assertRaises(ConfigError):
            config.load("- a\n- b\n", COLLECTORS)

    def test_invalid_yaml(self):
        with self.assertRaises(ConfigError) as cm:
            config.load("devices: [", COLLECTORS)
        self.assertIn("unmarshal error", str(cm.exception))

    def test_no_collector_check(self):
        cfg = config.load("devices: []\nfeatures:\n  anything: true\n", [])
        self.assertIn("anything", cfg.features.feature_names())


class TestLookup(unittest.TestCase):

    def setUp(self):
        self.cfg = config.load(VALID, COLLECTORS)

    def test_unknown_device(self):
        with self.assertRaises(UnknownDeviceError):
            self.cfg.find_device("nope")

    def test_profile_removed_after_load(self):
        del self.cfg.profiles["minimal"]
        with self.assertRaises(UnknownProfileError):
            self.cfg.device_features("edge")

    def test_enable(self):
        self.cfg.enable("health")
        self.assertIn("health", self.cfg.device_features("gw1").feature_names())
        self.assertIn("health", self.cfg.device_features("edge").feature_names())


class TestLoadFile(unittest.TestCase):

    def test_load_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yml", delete=False) as f:
            f.write(VALID)
        self.addCleanup(os.unlink, f.name)
        self.assertEqual(len(config.load_file(f.name, COLLECTORS).devices), 2)

    def test_missing_file(self):
        with self.assertRaises(ConfigError) as cm:
            config.load_file("/nonexistent/config.yml", COLLECTORS)
        self.assertIn("read file error", str(cm.exception))


class TestSingleDevice(unittest.TestCase):

    def test_from_flags(self):
        cfg = config.single_device("gw1", "10.0.0.1", "admin", "pw", port=8728)
        self.assertEqual(cfg.find_device("gw1").user, "admin")
        self.assertEqual(cfg.device_features("gw1").feature_names(), ["resource"])

    @patch.dict(os.environ, {"MIKROTIK_USER": "envuser", "MIKROTIK_PASSWORD": "envpw"})
    def test_credentials_from_environment(self):
        d = config.single_device("gw1", "10.0.0.1").find_device("gw1")
        self.assertEqual((d.user, d.password), ("envuser", "envpw"))

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_params(self):
        with self.assertRaises(ConfigError) as cm:
            config.single_device("gw1", "")
        self.assertEqual(cm.exception.problems, ["address", "user", "password"])


class TestLogLevel(unittest.TestCase):

    def test_valid(self):
        self.assertEqual(config.valid_log_level("debug"), "DEBUG")

    def test_invalid_falls_back(self):
        with self.assertLogs("Config", level="WARNING"):
            self.assertEqual(config.valid_log_level("loud"), "INFO")


if __name__ == "__main__":
    unittest.main()
