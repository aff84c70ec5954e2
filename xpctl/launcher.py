"""Hand the terminal over to an XPipe terminal session and wait for the user."""

import logging
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console
from rich.text import Text

from .client import LaunchError, XPipeClient

logger = logging.getLogger(__name__)


@dataclass
class LaunchOutcome:
    """Result of one launch attempt, shown to the user before resuming."""

    identifier: str
    success: bool
    message: str


def wait_for_key() -> None:
    """Block until a single key is pressed (or a line is read without a tty)."""
    stream = sys.stdin
    if not stream.isatty():
        stream.readline()
        return

    import termios
    import tty

    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        stream.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class SessionLauncher:
    """Opens terminal sessions through XPipe.

    Callers must have released the terminal (``App.suspend()``) first: the
    screen is cleared and ``launch`` only returns after a key press, so
    output from the session never races with the next redraw.
    """

    def __init__(
        self,
        client: XPipeClient,
        directory: str = "/",
        console: Optional[Console] = None,
        acknowledge: Callable[[], None] = wait_for_key,
    ):
        self.client = client
        self.directory = directory
        self.console = console or Console()
        self.acknowledge = acknowledge

    def launch(self, identifier: str, label: Optional[str] = None) -> LaunchOutcome:
        label = label or identifier
        self.console.clear()

        try:
            self.client.open_terminal(identifier, self.directory)
        except LaunchError as e:
            logger.warning(f"Launch of {identifier} failed: {e}")
            outcome = LaunchOutcome(identifier=identifier, success=False, message=e.detail)
            self.console.print(Text(f"\nCould not open terminal session for: {label}", style="bold red"))
            self.console.print(Text(e.detail))
        else:
            outcome = LaunchOutcome(
                identifier=identifier,
                success=True,
                message=f"Opening terminal session for: {label}",
            )
            self.console.print(Text(f"\n{outcome.message}", style="bold green"))

        self.console.print(Text("Press any key to return...", style="dim"))
        self.acknowledge()
        return outcome
