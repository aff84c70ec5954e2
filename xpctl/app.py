"""xpctl connection browser TUI application."""

import logging
from typing import Optional

from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, ListView, Static

from .catalogue import fetch_catalogue
from .client import FetchError, LaunchError, XPipeClient, XPipeError
from .config import CONFIRM_DRILL, Settings
from .fuzzy import fuzzy_filter
from .launcher import SessionLauncher
from .models import Catalogue, CatalogueFilters
from .navigation import NavigationState, ViewMode
from .ui import APP_CSS, ResourceItem, TargetDetailPanel, TargetItem

logger = logging.getLogger(__name__)


class ConnectionBrowser(App):
    """TUI for browsing XPipe connections and opening terminal sessions."""

    CSS = APP_CSS

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("enter", "confirm", "Open", priority=True),
        Binding("escape", "back", "Back", priority=True),
        Binding("backspace", "back", "Back", show=False),
        Binding("slash", "fuzzy_filter", "Fuzzy"),
        Binding("f", "cycle_type_filter", "Type"),
        Binding("r", "refresh", "Refresh"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("down", "cursor_down", "Down", show=False, priority=True),
        Binding("up", "cursor_up", "Up", show=False, priority=True),
    ]

    def __init__(
        self,
        client: XPipeClient,
        settings: Settings,
        catalogue: Optional[Catalogue] = None,
        startup_error: Optional[XPipeError] = None,
        launcher: Optional[SessionLauncher] = None,
    ):
        super().__init__()
        self.client = client
        self.settings = settings
        self.state = NavigationState(catalogue, confirm_mode=settings.confirm_mode)
        self.startup_error = startup_error
        self.launcher = launcher or SessionLauncher(client, directory=settings.terminal_directory)

        self.type_filters = settings.type_filters
        self.active_type_filter = self.type_filters[0]
        self._fetching = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="left-container"):
                yield Static("", id="filter-bar")
                with Vertical(id="list-container"):
                    yield Static("[bold]Connections[/]", id="list-header", classes="list-header")
                    yield ListView(id="target-list")
            with Vertical(id="detail-container"):
                yield TargetDetailPanel(id="detail-panel")
        yield Footer()

    async def on_mount(self):
        self.title = "XPipe Connections"
        self.sub_title = self.settings.api_url

        await self._render_view()
        self.query_one("#target-list", ListView).focus()

        if self.startup_error is not None:
            self.notify(f"{self.startup_error}", title="XPipe unavailable", severity="warning", timeout=5)

    # -- rendering --

    def _update_filter_bar(self):
        """Update the filter bar display."""
        text = Text()
        text.append("Type: ", style="dim")
        for type_filter in self.type_filters:
            label = "All" if type_filter == "*" else type_filter
            if type_filter == self.active_type_filter:
                text.append(f"[●{label}] ", style="bold cyan")
            else:
                text.append(f"[○{label}] ", style="dim")
        text.append(f" | {len(self.state.catalogue)} connections", style="dim")
        self.query_one("#filter-bar", Static).update(text)

    def _update_header(self):
        header = self.query_one("#list-header", Static)
        container = self.query_one("#list-container")
        if self.state.mode is ViewMode.DRILL_DOWN:
            container.add_class("drill-down")
            count = len(self.state.visible_items())
            header.update(f"[bold]{self.state.server}[/] [dim]({count} resources, Esc to go back)[/]")
        else:
            container.remove_class("drill-down")
            header.update(f"[bold]Connections[/] [dim]({len(self.state.catalogue)})[/]")

    async def _render_view(self):
        """Rebuild the list for the current view and restore the cursor."""
        target_list = self.query_one("#target-list", ListView)
        await target_list.clear()

        if self.state.mode is ViewMode.DRILL_DOWN:
            primary = self.state.catalogue.primary(self.state.server)
            items = [
                ResourceItem(identifier, is_primary=identifier == primary)
                for identifier in self.state.visible_items()
            ]
        else:
            items = [TargetItem(target) for target in self.state.catalogue.targets()]
        await target_list.extend(items)

        self._update_filter_bar()
        self._update_header()
        self._sync_cursor()
        self._update_detail()

    def _sync_cursor(self):
        target_list = self.query_one("#target-list", ListView)
        if not self.state.visible_items():
            return
        target_list.index = self.state.cursor
        if target_list.highlighted_child:
            target_list.scroll_to_widget(target_list.highlighted_child, animate=False)

    def _update_detail(self):
        detail = self.query_one("#detail-panel", TargetDetailPanel)
        server = self.state.selected_server()

        if server is None:
            if self.startup_error is not None:
                detail.show_message(
                    "Could not load connections!",
                    [str(self.startup_error), f"API: {self.settings.api_url}"],
                )
            else:
                detail.show_message(
                    "No connections found!",
                    [f"API: {self.settings.api_url}", f"Type filter: {self.active_type_filter}"],
                )
            return

        target = self.state.catalogue.target(server)
        if self.state.mode is ViewMode.DRILL_DOWN:
            detail.show_target(target, resource=self.state.selected_item())
        else:
            drills_down = self.settings.confirm_mode == CONFIRM_DRILL and target.has_resources
            detail.show_target(target, drills_down=drills_down)

    @on(ListView.Highlighted, "#target-list")
    def on_target_highlighted(self, event: ListView.Highlighted):
        """Keep the cursor in sync with mouse-driven highlights."""
        index = event.list_view.index
        if index is None or not self.state.visible_items():
            return
        self.state.select(index)
        self._update_detail()

    @on(ListView.Selected, "#target-list")
    async def on_target_selected(self, event: ListView.Selected):
        """Clicking an item acts like Enter."""
        if event.list_view.index is not None:
            self.state.select(event.list_view.index)
        await self.action_confirm()

    # -- navigation --

    def action_cursor_down(self):
        self.state.move_down()
        self._sync_cursor()

    def action_cursor_up(self):
        self.state.move_up()
        self._sync_cursor()

    async def action_confirm(self):
        """Open the highlighted target, or drill into its resources."""
        if self._busy_fetching():
            return
        was_flat = self.state.mode is ViewMode.FLAT
        server = self.state.selected_server()
        identifier = self.state.confirm()

        if identifier is not None:
            self._launch(identifier, self._label_for(server, identifier))
        elif was_flat and self.state.mode is ViewMode.DRILL_DOWN:
            await self._render_view()

    async def action_back(self):
        """Return from a drill-down to the flat list."""
        if self.state.back():
            await self._render_view()

    def action_quit(self):
        self.state.quit()
        self.exit()

    def _label_for(self, server: Optional[str], identifier: str) -> str:
        if server is None:
            return identifier
        if self.state.mode is ViewMode.DRILL_DOWN:
            return f"{server} / {identifier}"
        return server

    # -- handoffs --

    def _busy_fetching(self) -> bool:
        if self._fetching:
            self.notify("Still fetching connections", severity="warning")
        return self._fetching

    def _launch(self, identifier: str, label: str):
        """Suspend the UI while XPipe opens the terminal session."""
        if self._busy_fetching():
            return
        try:
            with self.suspend():
                outcome = self.launcher.launch(identifier, label)
        except SuspendNotSupported:
            try:
                self.client.open_terminal(identifier, self.settings.terminal_directory)
            except LaunchError as e:
                logger.warning(f"Launch of {identifier} failed: {e}")
                self.notify(e.detail, title=f"Could not open {label}", severity="error")
            else:
                self.notify(f"Opening terminal session for: {label}")
            return

        if not outcome.success:
            self.notify(outcome.message, title=f"Could not open {label}", severity="error", timeout=3)

    def action_fuzzy_filter(self):
        """Pick an item from the visible list with the external matcher."""
        if self._busy_fetching():
            return
        items = self.state.visible_items()
        if not items:
            return

        try:
            with self.suspend():
                match = fuzzy_filter(items, self.settings.fuzzy_command)
        except SuspendNotSupported:
            self.notify("Fuzzy filtering needs a real terminal", severity="warning")
            return

        if match is None:
            return

        server = self.state.selected_server() if self.state.mode is ViewMode.DRILL_DOWN else match
        identifier = self.state.resolve_match(match)
        if identifier is None:
            logger.info(f"Fuzzy match {match!r} is not in the current view")
            return

        self._sync_cursor()
        self._update_detail()
        self._launch(identifier, self._label_for(server, identifier))

    # -- refetching --

    def action_cycle_type_filter(self):
        """Cycle through configured type filters and refetch."""
        if len(self.type_filters) <= 1:
            return
        try:
            current_idx = self.type_filters.index(self.active_type_filter)
        except ValueError:
            current_idx = 0
        self.active_type_filter = self.type_filters[(current_idx + 1) % len(self.type_filters)]
        self._update_filter_bar()
        self.action_refresh()

    def action_refresh(self):
        if self._fetching:
            self.notify("Already fetching connections", severity="warning")
            return
        self._fetching = True
        self.notify("Fetching connections...")
        self._refetch_catalogue(CatalogueFilters(type=self.active_type_filter))

    @work(exclusive=True, thread=True)
    def _refetch_catalogue(self, filters: CatalogueFilters):
        """Background worker for refetching connections."""
        try:
            catalogue = fetch_catalogue(self.client, filters)
        except FetchError as e:
            logger.error(f"Fetching connections failed: {e}")
            self.call_from_thread(self._fetch_failed, e)
            return
        self.call_from_thread(self._apply_catalogue, catalogue)

    def _fetch_failed(self, error: FetchError):
        self._fetching = False
        self.notify(f"Fetching connections failed: {error}", severity="error")

    async def _apply_catalogue(self, catalogue: Catalogue):
        self._fetching = False
        self.startup_error = None
        self.state.replace_catalogue(catalogue)
        await self._render_view()
