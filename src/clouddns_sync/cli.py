"""Command-line entry point for clouddns-sync."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from .clouddns import CloudDnsClient
from .config import AppConfig, load_config
from .controller import SyncController, configure_logging
from .exporter import records_to_json, records_to_yaml, records_to_zonefile, write_zone_state
from .metrics import MetricsSink, NullMetrics, PrometheusMetrics
from .models import CloudDnsSyncError, ConfigError
from .nomad import NomadClient


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Synchronise Google Cloud DNS with a zonefile or Nomad.")
    parser.add_argument("--log-level", help="Override log level (default from config).")
    parser.add_argument("--json-keyfile", help="JSON credentials file for Cloud DNS.")
    parser.add_argument("--cloud-project", help="Google Cloud project.")
    parser.add_argument("--cloud-dns-zone", help="Cloud DNS managed zone to operate on.")
    parser.add_argument("--domain", help="DNS name of the zone (default: looked up from the managed zone).")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("listzones", help="List managed zones in the project.")

    get_parser = subparsers.add_parser("getzonefile", help="Dump the zone as currently held by Cloud DNS.")
    get_parser.add_argument("--output", help="Path to write the exported state (default stdout).")
    get_parser.add_argument(
        "--format",
        choices=["zonefile", "yaml", "json"],
        default="zonefile",
        help="Serialization format for the exported state.",
    )

    put_parser = subparsers.add_parser("putzonefile", help="Upload a zonefile or desired-state YAML.")
    source = put_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--zonefile", help="Path to a BIND zonefile.")
    source.add_argument("--desired", help="Path to a desired-state YAML file.")
    put_parser.add_argument(
        "-e",
        "--var",
        action="append",
        help="Template variable in KEY=VALUE form for --desired. Can be repeated.",
    )
    _register_sync_arguments(put_parser)

    nomad_parser = subparsers.add_parser("nomad_sync", help="Publish running Nomad jobs as A records.")
    nomad_parser.add_argument("--nomad-uri", help="Nomad agent address.")
    nomad_parser.add_argument("--nomad-token", help="Nomad ACL token.")
    nomad_parser.add_argument(
        "--interval",
        type=int,
        help="Seconds between passes; a negative value runs a single pass.",
    )
    _register_sync_arguments(nomad_parser)

    return parser


def _register_sync_arguments(subparser: argparse.ArgumentParser) -> None:
    """Register arguments shared by putzonefile/nomad_sync."""
    subparser.add_argument("--default-ttl", type=int, help="TTL for records that do not carry one.")
    subparser.add_argument(
        "--prune-missing",
        action="store_true",
        default=None,
        help="Delete record-sets that are absent from the desired state.",
    )
    subparser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Report the change without sending it.",
    )


def _parse_template_vars(values: list[str] | None) -> dict[str, str]:
    """Convert KEY=VALUE pairs into a dict."""
    result: dict[str, str] = {}
    if not values:
        return result
    for value in values:
        if "=" not in value:
            raise ConfigError(f"Invalid template var '{value}', expected KEY=VALUE.")
        key, val = value.split("=", 1)
        result[key] = val
    return result


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return ``config`` with any command-line values applied."""
    overrides = {
        "log_level": args.log_level,
        "json_keyfile": Path(args.json_keyfile) if args.json_keyfile else None,
        "cloud_project": args.cloud_project,
        "cloud_dns_zone": args.cloud_dns_zone,
        "dns_domain": args.domain if not args.domain or args.domain.endswith(".") else f"{args.domain}.",
        "default_ttl": getattr(args, "default_ttl", None),
        "prune_missing": getattr(args, "prune_missing", None),
        "dry_run": getattr(args, "dry_run", None),
        "nomad_addr": getattr(args, "nomad_uri", None),
        "nomad_token": getattr(args, "nomad_token", None),
        "sync_interval": getattr(args, "interval", None),
    }
    changes = {key: value for key, value in overrides.items() if value is not None}
    if changes.get("default_ttl", 0) < 0:
        raise ConfigError("--default-ttl must not be negative.")
    return dataclasses.replace(config, **changes)


def _build_metrics(config: AppConfig) -> MetricsSink:
    """Return the metrics sink for this process."""
    if config.metrics_port is None:
        return NullMetrics()
    metrics = PrometheusMetrics()
    metrics.serve(config.metrics_port)
    return metrics


def _run_listzones(client: CloudDnsClient) -> None:
    """Execute the listzones command."""
    for zone in client.list_managed_zones():
        print(f"{zone.name}: {zone.dnsName}")


def _run_getzonefile(controller: SyncController, args: argparse.Namespace) -> None:
    """Execute the getzonefile command."""
    zone_domain, records = controller.dump()
    if args.format == "json":
        content = records_to_json(zone_domain, records)
    elif args.format == "yaml":
        content = records_to_yaml(zone_domain, records)
    else:
        content = records_to_zonefile(records)
    if args.output:
        write_zone_state(Path(args.output), content + "\n")
        print(f"Wrote zone state to {args.output}")
    else:
        print(content)


def _run_putzonefile(controller: SyncController, args: argparse.Namespace) -> None:
    """Execute the putzonefile command."""
    if args.zonefile:
        plan = controller.plan_zonefile(Path(args.zonefile))
    else:
        plan = controller.plan_desired(Path(args.desired), template_vars=_parse_template_vars(args.var))
    controller.apply(plan)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = apply_overrides(load_config(), args)
        configure_logging(config.log_level)
        client = CloudDnsClient.from_config(config)
        if args.command == "listzones":
            _run_listzones(client)
            return
        if args.command == "nomad_sync":
            controller = SyncController(
                config,
                client,
                tasks=NomadClient.from_config(config),
                metrics=_build_metrics(config),
            )
            controller.run_periodic(config.sync_interval)
            return
        controller = SyncController(config, client)
        if args.command == "getzonefile":
            _run_getzonefile(controller, args)
        elif args.command == "putzonefile":
            _run_putzonefile(controller, args)
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except CloudDnsSyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
