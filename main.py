"""
Mikrotik Exporter – Prometheus metrics for MikroTik RouterOS devices.

Entry point. Run with:
  python main.py --config-file config.yml
  python main.py --device gw1 --address 192.168.88.1 --user prometheus --password secret
"""

import argparse
import logging
import sys

from prometheus_client import CollectorRegistry

import config
from collectors import available_collector_names, available_collectors
from exporter import MikrotikCollector, parse_listen_address, run_server
from routeros import API_PORT

log = logging.getLogger("MikrotikExporter")

EXIT_CONFIG_ERROR = 3


# ─── Command Line ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Prometheus exporter for MikroTik RouterOS devices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --config-file config.yml
  %(prog)s --device gw1 --address 192.168.88.1 --user prometheus --password secret --with-interface
        """,
    )
    parser.add_argument("--config-file", default="", help="config file to load")
    parser.add_argument("--device", default="", help="single device to monitor")
    parser.add_argument("--address", default="", help="address of the device to monitor")
    parser.add_argument("--user", default="", help="user for authentication with single device")
    parser.add_argument("--password", default="", help="password for authentication for single device")
    parser.add_argument("--deviceport", type=int, default=API_PORT,
                        help=f"port for single device (default: {API_PORT})")
    parser.add_argument("--tls", action="store_true", help="use tls to connect to routers")
    parser.add_argument("--insecure", action="store_true", help="skips verification of server certificate when using TLS")
    parser.add_argument("--timeout", type=int, default=config.DEFAULT_TIMEOUT,
                        help=f"timeout when connecting to devices in seconds (default: {config.DEFAULT_TIMEOUT})")
    parser.add_argument("--listen-address", default=config.LISTEN_ADDRESS,
                        help=f"address on which to expose metrics (default: {config.LISTEN_ADDRESS})")
    parser.add_argument("--path", default="/metrics", help="path to answer requests on (default: /metrics)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        help=f"log level: DEBUG, INFO, WARNING, ERROR (default: {config.LOG_LEVEL})")
    parser.add_argument("--list-collectors", action="store_true", help="list available collectors and exit")
    parser.add_argument("--with-all", action="store_true", help="enable all collectors")

    for c in available_collectors():
        parser.add_argument(f"--with-{c.name}", dest=f"with_{c.name}", action="store_true",
                            help=f"enable {c.description}")
    return parser


def load_config(args: argparse.Namespace) -> config.Config:
    if args.config_file:
        cfg = config.load_file(args.config_file, available_collector_names())
    elif args.device:
        cfg = config.single_device(
            args.device, args.address, args.user, args.password,
            port=args.deviceport, tls=args.tls, insecure=args.insecure, timeout=args.timeout,
        )
    else:
        raise config.ConfigError("either --config-file or --device must be specified")

    enabled = [
        name for name in available_collector_names()
        if args.with_all or getattr(args, f"with_{name}")
    ]
    cfg.enable(*enabled)
    return cfg


def list_collectors() -> None:
    for c in sorted(available_collectors(), key=lambda c: c.name):
        print(f"{c.name:<12} {c.description}")


# ─── Main ─────────────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.valid_log_level(args.log_level), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.list_collectors:
        list_collectors()
        return 0

    try:
        cfg = load_config(args)
        host, port = parse_listen_address(args.listen_address)
    except (config.ConfigError, ValueError) as e:
        log.error(f"Could not load configuration: {e}")
        return EXIT_CONFIG_ERROR

    log.info(f"Starting Mikrotik exporter with {len(cfg.devices)} device(s)")
    collector = MikrotikCollector(cfg)
    registry = CollectorRegistry()
    registry.register(collector)

    try:
        run_server(host, port, registry, args.path)
    finally:
        collector.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
