"""UI components for xpctl."""

from .widgets import (
    ResourceItem,
    TargetDetailPanel,
    TargetItem,
)
from .styles import APP_CSS

__all__ = [
    "TargetItem",
    "ResourceItem",
    "TargetDetailPanel",
    "APP_CSS",
]
