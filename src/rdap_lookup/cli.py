"""
Command-line interface for the RDAP lookup system.

Commands:
- lookup: Look up a single domain
- lookup-list: Look up domains from a file concurrently
- bootstrap refresh: Download the IANA bootstrap snapshot
- bootstrap resolve: Show which RDAP server a domain resolves to
- config: Configuration management
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .bootstrap import (
    VERISIGN_SNAPSHOT,
    BootstrapIndex,
    FileSnapshotSource,
    HttpSnapshotSource,
    StaticSnapshotSource,
    refresh_snapshot,
)
from .config import (
    DEFAULT_CONFIG_PATH,
    LookupConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from .exceptions import RdapLookupError
from .lookup_service import LookupOutcome, LookupService
from .models import LookupResult


def load_config(args: argparse.Namespace) -> LookupConfig:
    """Config file if given, else environment; command line flags override."""
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
    else:
        config = load_config_from_env()

    if getattr(args, "bootstrap", None):
        config.bootstrap_path = Path(args.bootstrap)
    if getattr(args, "timeout", None) is not None:
        config.timeout_seconds = args.timeout
    if getattr(args, "verbose", False):
        config.logging.level = "debug"
    config.validate()
    return config


def create_logger(config: LookupConfig, verbose: bool) -> Optional[AuditLogger]:
    if not verbose:
        return None
    return AuditLogger.from_config(config.logging)


def build_index(
    config: LookupConfig,
    builtin: bool = False,
    logger: Optional[AuditLogger] = None,
) -> BootstrapIndex:
    if builtin:
        source = StaticSnapshotSource(VERISIGN_SNAPSHOT)
    else:
        source = FileSnapshotSource(config.bootstrap_path)
    return BootstrapIndex.from_source(source, logger=logger)


def format_result_text(outcome: LookupOutcome) -> str:
    """Render an outcome for the terminal."""
    if not isinstance(outcome, LookupResult):
        lines = [f"Error ({outcome.error_kind.value}): {outcome.message}"]
        if outcome.query_time_ms is not None:
            lines.append(f"  Query time: {outcome.query_time_ms}ms")
        return "\n".join(lines)

    def show(value: Optional[str]) -> str:
        return value if value is not None else "-"

    lines = [
        f"Domain: {outcome.domain_name}",
        f"  Handle: {show(outcome.registry_handle)}",
        f"  Status: {', '.join(outcome.status_codes) or '-'}",
        f"  Registrar: {show(outcome.registrar_name)}",
        f"  IANA ID: {show(outcome.registrar_iana_id)}",
        f"  Registered: {show(outcome.registration_date)}",
        f"  Expires: {show(outcome.expiration_date)}",
        f"  Last changed: {show(outcome.last_changed_date)}",
        f"  RDAP database updated: {show(outcome.rdap_database_updated_date)}",
        f"  DNSSEC: {'signed' if outcome.dnssec.signed else 'unsigned'}",
    ]
    for record in outcome.dnssec.ds_records:
        lines.append(
            f"    DS {record.get('keyTag')} {record.get('algorithm')} "
            f"{record.get('digestType')} {record.get('digest')}"
        )
    lines.append("  Nameservers:")
    for ns in outcome.nameservers:
        addresses = ", ".join(ns.ipv4 + ns.ipv6)
        lines.append(f"    {show(ns.name)}" + (f" ({addresses})" if addresses else ""))
    for warning in outcome.warnings:
        lines.append(f"  Warning: {warning}")
    lines.append(f"  RDAP server: {outcome.rdap_server}")
    lines.append(f"  Query time: {outcome.query_time_ms}ms")
    return "\n".join(lines)


async def lookup_single_domain(
    domain: str,
    config: LookupConfig,
    builtin: bool = False,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """
    Look up a single domain and print the result.

    Returns:
        Exit code (0 on success, 1 on any failure)
    """
    logger = create_logger(config, verbose)
    index = build_index(config, builtin=builtin, logger=logger)

    async with LookupService(index, config=config, logger=logger) as service:
        outcome = await service.lookup(domain)

    if as_json:
        print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_result_text(outcome))

    return 0 if outcome.success else 1


async def lookup_domain_list(
    domains_file: Path,
    config: LookupConfig,
    output_file: Optional[Path] = None,
    builtin: bool = False,
    verbose: bool = False,
) -> int:
    """
    Look up every domain listed in a file (one per line, '#' comments).

    Returns:
        Exit code (0 if every lookup succeeded, 1 otherwise)
    """
    try:
        with open(domains_file, "r", encoding="utf-8") as f:
            domains = [line.strip() for line in f if line.strip() and not line.strip().startswith("#")]
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    if not domains:
        print("Error: No domains found in file", file=sys.stderr)
        return 1

    logger = create_logger(config, verbose)
    index = build_index(config, builtin=builtin, logger=logger)

    print(f"Looking up {len(domains)} domain(s)...")
    async with LookupService(index, config=config, logger=logger) as service:
        outcomes = await service.lookup_many(domains)

    success_count = 0
    for domain, outcome in zip(domains, outcomes):
        if outcome.success:
            success_count += 1
            print(f"  {domain}: registered ({outcome.registrar_name or 'unknown registrar'})")
        else:
            print(f"  {domain}: {outcome.error_kind.value} - {outcome.message}")

    print(f"\nSummary: {success_count}/{len(domains)} lookup(s) succeeded")

    if output_file:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, "w", encoding="utf-8") as f:
                json.dump(
                    [{"query": d, **o.to_dict()} for d, o in zip(domains, outcomes)],
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
            print(f"Results written to: {output_file}")
        except OSError as e:
            print(f"Error writing results: {e}", file=sys.stderr)
            return 1

    return 0 if success_count == len(domains) else 1


def cmd_lookup(args: argparse.Namespace) -> int:
    """Handle the 'lookup' command."""
    config = load_config(args)
    return asyncio.run(lookup_single_domain(
        domain=args.domain,
        config=config,
        builtin=args.builtin,
        as_json=args.json,
        verbose=args.verbose,
    ))


def cmd_lookup_list(args: argparse.Namespace) -> int:
    """Handle the 'lookup-list' command."""
    config = load_config(args)
    return asyncio.run(lookup_domain_list(
        domains_file=Path(args.file),
        config=config,
        output_file=Path(args.output) if args.output else None,
        builtin=args.builtin,
        verbose=args.verbose,
    ))


def cmd_bootstrap(args: argparse.Namespace) -> int:
    """Handle the 'bootstrap' command."""
    config = load_config(args)

    if args.action == "refresh":
        destination = Path(args.output) if args.output else config.bootstrap_path
        url = args.url or config.bootstrap_url
        print(f"Fetching {url}...")
        index = refresh_snapshot(
            HttpSnapshotSource(
                url=url,
                timeout=config.timeout_seconds,
                user_agent=config.user_agent,
            ),
            destination,
            logger=create_logger(config, args.verbose),
        )
        print(f"Saved {len(index)} TLDs to {destination}")
        return 0

    if not args.domain:
        print("Error: 'bootstrap resolve' needs a domain", file=sys.stderr)
        return 1
    index = build_index(config, builtin=args.builtin)
    match = index.resolve(args.domain.strip().lower())
    if match is None:
        print(f"No RDAP server for: {args.domain}")
        return 1
    print(f"{match.tld}: {match.base_url}")
    others = [u for u in index.candidates(match.tld) if u != match.base_url]
    if others:
        print(f"  Other candidates: {', '.join(others)}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        print(f"Configuration from: {config_path}")
        print(f"  Bootstrap snapshot: {config.bootstrap_path}")
        print(f"  Bootstrap URL: {config.bootstrap_url}")
        print(f"  Timeout: {config.timeout_seconds}s")
        print(f"  User-Agent: {config.user_agent}")
        print(f"  Log level: {config.logging.level}")
        print(f"  Log format: {config.logging.output_format}")
        return 0

    if config_path.exists() and not args.force:
        print(f"Configuration already exists at: {config_path}")
        print("Use --force to overwrite.")
        return 1

    save_config_to_file(LookupConfig(), config_path)
    print(f"Configuration created at: {config_path}")
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file (default: environment / .env)",
    )
    parser.add_argument(
        "--bootstrap", "-b",
        help="Path to the bootstrap snapshot (dns.json)",
    )
    parser.add_argument(
        "--builtin",
        action="store_true",
        help="Use the built-in com/net snapshot instead of a snapshot file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable log output on stderr",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="rdap-lookup",
        description="Look up domain registration data over RDAP",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'lookup' command
    lookup_parser = subparsers.add_parser("lookup", help="Look up a single domain")
    lookup_parser.add_argument("domain", help="Domain to look up (e.g., example.com)")
    lookup_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON",
    )
    lookup_parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Request timeout in seconds (default: 10)",
    )
    _add_common_arguments(lookup_parser)
    lookup_parser.set_defaults(func=cmd_lookup)

    # 'lookup-list' command
    list_parser = subparsers.add_parser(
        "lookup-list",
        help="Look up multiple domains from a file",
    )
    list_parser.add_argument("file", help="Path to file containing domains (one per line)")
    list_parser.add_argument("--output", "-o", help="Path to write results as JSON")
    list_parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Request timeout in seconds (default: 10)",
    )
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=cmd_lookup_list)

    # 'bootstrap' command
    bootstrap_parser = subparsers.add_parser(
        "bootstrap",
        help="Manage the IANA bootstrap snapshot",
    )
    bootstrap_parser.add_argument(
        "action",
        choices=["refresh", "resolve"],
        help="Bootstrap action",
    )
    bootstrap_parser.add_argument("domain", nargs="?", help="Domain for 'resolve'")
    bootstrap_parser.add_argument("--output", "-o", help="Where 'refresh' writes the snapshot")
    bootstrap_parser.add_argument("--url", help="Bootstrap document URL for 'refresh'")
    bootstrap_parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Download timeout in seconds for 'refresh' (default: 10)",
    )
    _add_common_arguments(bootstrap_parser)
    bootstrap_parser.set_defaults(func=cmd_bootstrap)

    # 'config' command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "action",
        choices=["show", "init"],
        help="Configuration action",
    )
    config_parser.add_argument("--path", "-p", help="Path to configuration file")
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except RdapLookupError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.code == "snapshot_not_found":
            print("Run 'rdap-lookup bootstrap refresh' first, or pass --builtin.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
