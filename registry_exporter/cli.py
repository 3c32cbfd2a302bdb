"""Command line entry point for the metrics exporter."""

import argparse
import logging
import sys
from typing import NoReturn

from dotenv import load_dotenv

from registry_exporter import create_app
from registry_exporter.config import Settings
from registry_exporter.exceptions import ConfigurationError, StartupFailure
from registry_exporter.server import run_server
from registry_exporter.utils.tls import write_self_signed_pair

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Image registry operator metrics exporter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve /metrics over HTTPS",
    )
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    cert_parser = subparsers.add_parser(
        "generate-cert",
        help="Write a self-signed TLS certificate and key",
    )
    cert_parser.add_argument("--cert-file", required=True)
    cert_parser.add_argument("--key-file", required=True)
    cert_parser.add_argument("--hostname", default="localhost")
    cert_parser.add_argument("--days", type=int, default=365)

    return parser


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def handle_serve(
    settings: Settings, host: str | None = None, port: int | None = None
) -> None:
    overrides: dict[str, object] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        app = create_app(settings)
        run_server(app, settings)
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except StartupFailure as e:
        logger.error(
            "Metrics server failed to start",
            extra={"error_code": e.error_code, "error": e.message},
        )
        print(e.message, file=sys.stderr)
        sys.exit(1)


def handle_generate_cert(
    cert_file: str, key_file: str, hostname: str = "localhost", days: int = 365
) -> None:
    try:
        write_self_signed_pair(cert_file, key_file, hostname=hostname, days=days)
    except OSError as e:
        print(f"Failed to write certificate: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Wrote certificate to {cert_file} and key to {key_file}")


def main() -> NoReturn:
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        settings = Settings.load()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)

    if args.command == "serve":
        handle_serve(settings, host=args.host, port=args.port)
    elif args.command == "generate-cert":
        handle_generate_cert(
            cert_file=args.cert_file,
            key_file=args.key_file,
            hostname=args.hostname,
            days=args.days,
        )
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
