"""Bridge to an external fuzzy matcher such as fzf."""

import logging
import subprocess
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_COMMAND = ["fzf"]


class FilterError(Exception):
    """The matcher could not be run or ended without a selection."""


def run_matcher(names: Sequence[str], command: Sequence[str] = DEFAULT_FUZZY_COMMAND) -> str:
    """Pipe names through the matcher and return its trimmed output.

    stdin and stdout are piped while the matcher draws its UI on the tty.
    Writing the input and draining the output both happen inside
    ``subprocess.run`` so a large list cannot fill a pipe and block.

    Raises:
        FilterError: spawn failure, non-zero exit or empty output.
    """
    try:
        result = subprocess.run(
            list(command),
            input="\n".join(names),
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise FilterError(f"Could not run {command[0]}: {e}") from e

    if result.returncode != 0:
        raise FilterError(f"{command[0]} exited with status {result.returncode}")

    selection = result.stdout.strip()
    if not selection:
        raise FilterError(f"{command[0]} returned no selection")
    # fzf prints one line per selection; only the first one counts
    return selection.splitlines()[0].strip()


def fuzzy_filter(names: Sequence[str], command: Sequence[str] = DEFAULT_FUZZY_COMMAND) -> Optional[str]:
    """Let the user pick one of names. Returns None on any kind of no-match."""
    if not names:
        return None
    try:
        return run_matcher(names, command)
    except FilterError as e:
        logger.info(f"Fuzzy filter gave no match: {e}")
        return None
