"""Runtime settings loaded from the environment and an optional .env file."""

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:21721"
DEFAULT_CLIENT_NAME = "xpctl"
DEFAULT_TIMEOUT = 10.0

# Confirm policies
CONFIRM_DRILL = "drill"  # servers with nested resources open a drill-down first
CONFIRM_LAUNCH = "launch"  # Enter always opens the server's primary identifier
CONFIRM_MODES = (CONFIRM_DRILL, CONFIRM_LAUNCH)

API_KEY_VARS = ("XPIPE_API_KEY", "XPCTL_API_KEY")


class ConfigError(Exception):
    """Configuration is missing or invalid; nothing can start."""


@dataclass
class Settings:
    """Everything the browser needs to talk to XPipe."""

    api_key: str
    api_url: str = DEFAULT_API_URL
    client_name: str = DEFAULT_CLIENT_NAME
    confirm_mode: str = CONFIRM_DRILL
    type_filters: list[str] = field(default_factory=lambda: ["*"])
    fuzzy_command: list[str] = field(default_factory=lambda: ["fzf"])
    terminal_directory: str = "/"
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"


def _parse_type_filters(raw: str) -> list[str]:
    filters = [part.strip() for part in raw.split(",") if part.strip()]
    return filters or ["*"]


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> Settings:
    """Build Settings from the process environment.

    A ``.env`` file (``dotenv_path`` or the nearest one found from the current
    directory) is loaded first; variables already set in the environment win.
    Passing ``env`` skips the dotenv step entirely.

    Raises:
        ConfigError: the API key is missing or a value cannot be parsed.
    """
    if env is None:
        load_dotenv(dotenv_path, override=False)
        env = os.environ

    api_key = ""
    for var in API_KEY_VARS:
        api_key = (env.get(var) or "").strip()
        if api_key:
            break
    if not api_key:
        raise ConfigError(f"{API_KEY_VARS[0]} environment variable not set")

    confirm_mode = (env.get("XPCTL_CONFIRM_MODE") or CONFIRM_DRILL).strip().lower()
    if confirm_mode not in CONFIRM_MODES:
        raise ConfigError(
            f"XPCTL_CONFIRM_MODE must be one of {', '.join(CONFIRM_MODES)}, got {confirm_mode!r}"
        )

    raw_timeout = env.get("XPCTL_TIMEOUT")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ConfigError(f"XPCTL_TIMEOUT must be a number of seconds, got {raw_timeout!r}")
    if timeout <= 0:
        raise ConfigError(f"XPCTL_TIMEOUT must be positive, got {raw_timeout!r}")

    fuzzy_command = shlex.split(env.get("XPCTL_FUZZY_COMMAND") or "fzf")
    if not fuzzy_command:
        fuzzy_command = ["fzf"]

    settings = Settings(
        api_key=api_key,
        api_url=(env.get("XPIPE_API_URL") or DEFAULT_API_URL).rstrip("/"),
        client_name=env.get("XPCTL_CLIENT_NAME") or DEFAULT_CLIENT_NAME,
        confirm_mode=confirm_mode,
        type_filters=_parse_type_filters(env.get("XPCTL_TYPE_FILTERS") or "*"),
        fuzzy_command=fuzzy_command,
        terminal_directory=env.get("XPCTL_TERMINAL_DIRECTORY") or "/",
        timeout=timeout,
        log_level=(env.get("XPCTL_LOG_LEVEL") or "WARNING").upper(),
    )
    logger.debug(f"Loaded settings for {settings.api_url} (confirm mode: {settings.confirm_mode})")
    return settings
