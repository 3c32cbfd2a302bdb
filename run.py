"""Development server entry point."""

import sys

from dotenv import load_dotenv

from registry_exporter.cli import configure_logging, handle_serve
from registry_exporter.config import Settings


def main() -> None:
    load_dotenv()

    try:
        settings = Settings.load()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)
    handle_serve(settings)


if __name__ == "__main__":
    main()
