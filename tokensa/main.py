"""Main entry point for the Tokensa local server."""

import logging
import sys

from tokensa.config import get_settings


def setup_logging():
    """Configure logging based on settings."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every request at INFO, too chatty while streaming
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main():
    """Main entry point - runs CLI."""
    setup_logging()

    from tokensa.cli.commands import app

    app()


if __name__ == "__main__":
    main()
