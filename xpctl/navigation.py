"""Navigation state for the connection browser.

The browser shows one of two views: the flat list of server names, or a
drill-down into the identifiers collected for a single server. Key handlers
in the app call the transitions below; anything that needs I/O (launching a
terminal, running the fuzzy matcher) is returned to the caller as an
identifier instead of being performed here.
"""

from enum import Enum
from typing import Optional

from .config import CONFIRM_DRILL, CONFIRM_LAUNCH
from .models import Catalogue


class ViewMode(Enum):
    FLAT = "flat"
    DRILL_DOWN = "drill-down"
    EXITING = "exiting"


class NavigationState:
    """View mode plus a cursor clamped to the visible items."""

    def __init__(self, catalogue: Optional[Catalogue] = None, confirm_mode: str = CONFIRM_DRILL):
        if confirm_mode not in (CONFIRM_DRILL, CONFIRM_LAUNCH):
            raise ValueError(f"Unknown confirm mode: {confirm_mode}")
        self.catalogue = catalogue or Catalogue()
        self.confirm_mode = confirm_mode
        self.mode = ViewMode.FLAT
        self.cursor = 0
        self.server: Optional[str] = None
        self._server_index = 0

    @property
    def is_exiting(self) -> bool:
        return self.mode is ViewMode.EXITING

    def visible_items(self) -> list[str]:
        """Names in the flat view, identifiers in a drill-down."""
        if self.mode is ViewMode.DRILL_DOWN and self.server is not None:
            return self.catalogue.identifiers(self.server)
        if self.mode is ViewMode.FLAT:
            return list(self.catalogue.names)
        return []

    def selected_item(self) -> Optional[str]:
        items = self.visible_items()
        if not items:
            return None
        return items[self.cursor]

    def selected_server(self) -> Optional[str]:
        """Server name the cursor belongs to in either view."""
        if self.mode is ViewMode.DRILL_DOWN:
            return self.server
        return self.selected_item()

    def _clamp(self, index: int) -> int:
        count = len(self.visible_items())
        if count == 0:
            return 0
        return max(0, min(index, count - 1))

    def move_down(self):
        self.cursor = self._clamp(self.cursor + 1)

    def move_up(self):
        self.cursor = self._clamp(self.cursor - 1)

    def select(self, index: int):
        """Put the cursor on an index (clamped), e.g. after a mouse click."""
        self.cursor = self._clamp(index)

    def confirm(self) -> Optional[str]:
        """Apply Enter to the highlighted item.

        Returns the identifier to launch, or None when nothing should be
        launched (empty view, or a drill-down was entered instead).
        """
        item = self.selected_item()
        if item is None:
            return None

        if self.mode is ViewMode.DRILL_DOWN:
            return item

        if self.confirm_mode == CONFIRM_DRILL and self.catalogue.has_resources(item):
            self._server_index = self.cursor
            self.server = item
            self.mode = ViewMode.DRILL_DOWN
            self.cursor = 0
            return None

        return self.catalogue.primary(item)

    def back(self) -> bool:
        """Leave a drill-down. Returns False when not in one."""
        if self.mode is not ViewMode.DRILL_DOWN:
            return False
        self.mode = ViewMode.FLAT
        self.server = None
        self.cursor = self._clamp(self._server_index)
        return True

    def resolve_match(self, line: str) -> Optional[str]:
        """Map a fuzzy-filter result to an identifier in the current view.

        The cursor moves onto the matched item. An unknown line leaves the
        state untouched and returns None.
        """
        items = self.visible_items()
        if line not in items:
            return None
        self.cursor = items.index(line)
        if self.mode is ViewMode.DRILL_DOWN:
            return line
        return self.catalogue.primary(line)

    def replace_catalogue(self, catalogue: Catalogue):
        """Swap in a freshly fetched catalogue and return to the flat view."""
        self.catalogue = catalogue
        if self.mode is not ViewMode.EXITING:
            self.mode = ViewMode.FLAT
        self.server = None
        self._server_index = 0
        self.cursor = self._clamp(self.cursor)

    def quit(self):
        self.mode = ViewMode.EXITING
