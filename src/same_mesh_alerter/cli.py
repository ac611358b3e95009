"""
Command-line interface for SAME Mesh Alerter.
"""

import argparse
import asyncio
import logging
import sys
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .core.config import AppConfig, ConfigurationError
from .core.application import AlerterApplication
from .notifications.chunking import byte_length, chunk_message
from .processing.classifier import AlertClassifier
from .processing.composer import MessageComposer
from .processing.locations import LocationDataError, LocationResolver, load_location_table
from .same.header import SameHeaderError, parse_header
from .same.source import HeaderFileSource

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def setup_basic_logging(level=logging.WARNING):
    """Setup basic logging for one-shot commands."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(args) -> AppConfig:
    """
    Load configuration from YAML and apply command-line overrides.

    Raises:
        ValidationError: If an override is out of range (e.g. channel 9)
    """
    config = AppConfig.from_yaml(args.config)
    data = config.model_dump()
    mesh = data["mesh"]

    if getattr(args, "port", None):
        mesh["port"], mesh["host"] = args.port, None
    if getattr(args, "host", None):
        mesh["host"], mesh["port"] = args.host, None
    if getattr(args, "alert_channel", None) is not None:
        mesh["alert_channel"] = args.alert_channel
    if getattr(args, "test_channel", None) is not None:
        mesh["test_channel"] = args.test_channel
    if getattr(args, "backend", None):
        mesh["backend"] = args.backend
    if getattr(args, "rate", None) is not None:
        data["decoder"]["sample_rate"] = args.rate
    if getattr(args, "location", None):
        data["filtering"]["locations"] = args.location
    if getattr(args, "locations_file", None):
        data["locations_file"] = args.locations_file
    if getattr(args, "log_level", None):
        data["logging"]["level"] = args.log_level

    return AppConfig(**data)


async def run_application(config: AppConfig, headers=None):
    """Run the main application with specified config."""
    console.print("[bold green]Starting SAME Mesh Alerter[/bold green]")

    source = HeaderFileSource(headers) if headers else None
    app = AlerterApplication(config, source=source)

    try:
        await app.run()
    finally:
        status = app.get_status()
        delivery = status["delivery"]
        if delivery:
            console.print(
                f"[dim]Sent {delivery['fragments_sent']} fragments, "
                f"{delivery['fragments_failed']} failed[/dim]"
            )


def lookup_codes(config: AppConfig, codes) -> int:
    """Print the county for each location code."""
    resolver = LocationResolver(load_location_table(config.locations_file))

    table = Table(title="SAME location codes")
    table.add_column("Code")
    table.add_column("Location")
    table.add_column("State")

    missing = 0
    for code in codes:
        location = resolver.resolve(code)
        if location is None:
            table.add_row(code, "[red]not found[/red]", "")
            missing += 1
        else:
            table.add_row(code, location.label, location.state)

    Console().print(table)
    return 1 if missing else 0


def compose_header(config: AppConfig, header: str) -> int:
    """Print the mesh message and fragments for a SAME header without sending."""
    alert = parse_header(header)
    resolver = LocationResolver(load_location_table(config.locations_file))
    classifier = AlertClassifier(
        alert_channel=config.mesh.alert_channel,
        test_channel=config.mesh.test_channel,
        icons=config.icons,
    )
    composer = MessageComposer(
        resolver,
        locations_of_interest=config.filtering.locations,
        overflow_policy=config.delivery.overflow_policy,
        max_message_bytes=config.delivery.max_message_bytes,
    )

    classification = classifier.classify(alert.significance)
    if classification.suppressed:
        console.print("[yellow]Test alert would be ignored (no test channel configured)[/yellow]")
        return 0

    message = composer.compose(alert, classification)
    if message is None:
        console.print("[yellow]Alert does not match the configured locations[/yellow]")
        return 0

    out = Console()
    out.print(f"[bold]Channel {classification.channel}[/bold] ({alert.significance.value})")
    out.print(message)
    for i, fragment in enumerate(chunk_message(message, config.delivery.fragment_bytes), start=1):
        out.print(f"[dim]{i}: ({byte_length(fragment)} bytes)[/dim] {fragment}")
    return 0


def create_parser():
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Relay SAME/EAS alerts onto a Meshtastic mesh",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rtl_fm -f 162.55M -s 48000 | %(prog)s run --port /dev/ttyUSB0
  %(prog)s run --host 192.168.1.20 --test-channel 1 --headers decoded.txt
  %(prog)s lookup 039035 139035
  %(prog)s compose "ZCZC-WXR-TOR-039035+0030-1051700-KCLE/NWS-"
        """
    )
    parser.add_argument('--config', '-c',
                        help='Configuration file path (default: config/default.yaml)',
                        default='config/default.yaml')
    parser.add_argument('--locations-file', help='Location dataset (code,county,state per line)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser('run', help='Monitor decoded alerts and relay them to the mesh')
    connection = run_parser.add_mutually_exclusive_group()
    connection.add_argument('--port', '-p', help='Serial port of device to connect to')
    connection.add_argument('--host', help='Network address with port of device to connect to')
    run_parser.add_argument('--alert-channel', '-a', type=int,
                            help='Channel to which alerts are sent (default 0)')
    run_parser.add_argument('--test-channel', '-t', type=int,
                            help='Channel to which tests are sent; tests are ignored if not provided')
    run_parser.add_argument('--rate', '-r', type=int, help='Audio sample rate (default 48000)')
    run_parser.add_argument('--location', '-l', action='append',
                            help='Only relay alerts for this SAME location code (repeatable)')
    run_parser.add_argument('--backend', choices=['cli', 'api'],
                            help='Use the meshtastic CLI or the Python library')
    run_parser.add_argument('--headers',
                            help="Read decoded header lines from a file ('-' for stdin) instead of the decoder")
    run_parser.add_argument('--log-level', help='Log level (default INFO)')

    lookup_parser = subparsers.add_parser('lookup', help='Resolve SAME location codes')
    lookup_parser.add_argument('codes', nargs='+', help='PSSCCC location codes')

    compose_parser = subparsers.add_parser('compose', help='Show the mesh message for a SAME header')
    compose_parser.add_argument('header', help='ZCZC header string')
    compose_parser.add_argument('--test-channel', '-t', type=int, help='Treat test alerts as enabled')

    return parser


def main():
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command != 'run':
        setup_basic_logging()

    try:
        config = load_config(args)
        if args.command == 'run':
            asyncio.run(run_application(config, args.headers))
        elif args.command == 'lookup':
            sys.exit(lookup_codes(config, args.codes))
        elif args.command == 'compose':
            sys.exit(compose_header(config, args.header))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red]\n{e}")
        sys.exit(1)
    except (ConfigurationError, LocationDataError, SameHeaderError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        logger.exception("Unhandled exception")
        sys.exit(1)


if __name__ == "__main__":
    main()
