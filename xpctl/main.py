#!/usr/bin/env python3
"""xpctl - terminal browser for XPipe connections.

Entry point for the CLI application.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from textual.logging import TextualHandler

from .catalogue import fetch_catalogue
from .client import AuthError, FetchError, XPipeClient, XPipeError
from .config import ConfigError, Settings, load_settings
from .models import Catalogue, CatalogueFilters

logger = logging.getLogger(__name__)


def configure_logging(level: str = "WARNING"):
    """Route log records through Textual so they never draw over the UI."""
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        handlers=[TextualHandler()],
        format="%(name)s: %(message)s",
        force=True,
    )


def bootstrap(client: XPipeClient, settings: Settings) -> tuple[Catalogue, Optional[XPipeError]]:
    """Authenticate and fetch the first catalogue.

    Failures are not fatal: the browser starts with an empty catalogue and
    the error is returned for display.
    """
    try:
        client.authenticate(settings.api_key)
    except AuthError as e:
        logger.error(f"Error during handshake: {e}")
        return Catalogue(), e

    try:
        catalogue = fetch_catalogue(client, CatalogueFilters(type=settings.type_filters[0]))
    except FetchError as e:
        logger.error(f"Error fetching connections: {e}")
        return Catalogue(), e

    return catalogue, None


def cmd_browse(settings: Settings, console: Console) -> int:
    """Launch the TUI browser."""
    from .app import ConnectionBrowser

    with XPipeClient(
        base_url=settings.api_url,
        timeout=settings.timeout,
        client_name=settings.client_name,
    ) as client:
        with console.status(f"Connecting to XPipe at {settings.api_url}..."):
            catalogue, error = bootstrap(client, settings)

        if error is not None:
            console.print(f"[yellow]XPipe unavailable:[/] {error}", highlight=False)

        app = ConnectionBrowser(client, settings, catalogue=catalogue, startup_error=error)
        app.run()
    return 0


def main() -> int:
    """Main entry point for the xpctl CLI."""
    err_console = Console(stderr=True)

    try:
        settings = load_settings()
    except ConfigError as e:
        err_console.print(f"[bold red]Configuration error:[/] {e}", highlight=False)
        return 1

    configure_logging(settings.log_level)
    return cmd_browse(settings, Console(stderr=True))


if __name__ == "__main__":
    sys.exit(main())
