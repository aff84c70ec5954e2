"""Tests for the browser app, driven headlessly through Textual's pilot."""

import asyncio
import contextlib
import io
import threading
from unittest.mock import patch

import httpx
import pytest
from rich.console import Console
from textual.widgets import ListView

from xpctl.app import ConnectionBrowser
from xpctl.catalogue import fetch_catalogue
from xpctl.client import XPipeClient
from xpctl.config import CONFIRM_LAUNCH, Settings
from xpctl.launcher import SessionLauncher
from xpctl.models import Catalogue
from xpctl.navigation import ViewMode


@pytest.fixture
def browser(xpipe_client, settings):
    xpipe_client.authenticate("secret")
    catalogue = fetch_catalogue(xpipe_client)
    return ConnectionBrowser(xpipe_client, settings, catalogue=catalogue)


def run(app, *keys):
    """Press keys in a headless app and return it once they are handled."""

    async def scenario():
        async with app.run_test() as pilot:
            for key in keys:
                await pilot.press(key)
            await pilot.pause()
            return len(app.query_one("#target-list", ListView).children)

    return asyncio.run(scenario())


class TestBrowser:
    """Tests for key handling in the running app."""

    def test_flat_view_lists_unique_names(self, browser):
        assert run(browser) == 2
        assert browser.state.visible_items() == ["db", "web1"]

    def test_cursor_clamps(self, browser):
        run(browser, "down", "down", "down", "j")
        assert browser.state.cursor == 1
        run_up = ConnectionBrowser(browser.client, browser.settings, catalogue=browser.state.catalogue)
        run(run_up, "up", "k")
        assert run_up.state.cursor == 0

    def test_drill_down_and_back(self, browser):
        items = run(browser, "enter")
        assert browser.state.mode is ViewMode.DRILL_DOWN
        assert browser.state.server == "db"
        assert items == 2

    def test_back_restores_flat_view(self, browser):
        items = run(browser, "down", "enter", "escape")
        assert browser.state.mode is ViewMode.FLAT
        assert browser.state.cursor == 1
        assert items == 2

    def test_launch_from_drill_down(self, browser, fake_xpipe):
        run(browser, "enter", "down", "enter")
        assert fake_xpipe.bodies("/connection/terminal") == [{"connection": "postgres", "directory": "/"}]
        assert not browser.state.is_exiting

    def test_launch_failure_keeps_running(self, browser, fake_xpipe):
        fake_xpipe.overrides["/connection/terminal"] = httpx.Response(500, text="connection refused")
        run(browser, "enter", "enter")
        assert len(fake_xpipe.bodies("/connection/terminal")) == 1
        assert not browser.state.is_exiting

    def test_refresh_replaces_catalogue(self, browser, fake_xpipe):
        """Test r refetches and rebuilds the flat view."""
        fake_xpipe.found = ["c1"]
        fake_xpipe.infos = [{"name": ["cache"]}]

        async def scenario():
            async with browser.run_test() as pilot:
                await pilot.press("down", "r")
                await browser.workers.wait_for_complete()
                await pilot.pause()

        asyncio.run(scenario())
        assert browser.state.visible_items() == ["cache"]
        assert browser.state.cursor == 0

    def test_quit(self, browser):
        run(browser, "q")
        assert browser.state.is_exiting


class TestEmptyBrowser:
    """Tests for the degraded, empty catalogue."""

    def test_keys_are_noops(self, xpipe_client, settings, fake_xpipe):
        app = ConnectionBrowser(xpipe_client, settings, catalogue=Catalogue())
        assert run(app, "down", "up", "enter", "escape") == 0
        assert app.state.cursor == 0
        assert app.state.mode is ViewMode.FLAT
        assert fake_xpipe.requests == []


class GatedXPipe:
    """Holds connection queries open until the gate is set."""

    def __init__(self, fake_xpipe):
        self.fake_xpipe = fake_xpipe
        self.gate = threading.Event()
        self.hold = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.hold and request.url.path == "/connection/query":
            self.gate.wait(5)
        return self.fake_xpipe(request)


class TestWhileFetching:
    """Tests that nothing launches while a refetch is in flight."""

    def test_enter_is_refused(self, fake_xpipe):
        gated = GatedXPipe(fake_xpipe)
        client = XPipeClient(base_url="http://xpipe.test", transport=httpx.MockTransport(gated))
        client.authenticate("secret")
        catalogue = fetch_catalogue(client)
        settings = Settings(api_key="secret", api_url="http://xpipe.test", confirm_mode=CONFIRM_LAUNCH)
        app = ConnectionBrowser(client, settings, catalogue=catalogue)
        gated.hold = True

        async def scenario():
            async with app.run_test() as pilot:
                await pilot.press("r")
                await pilot.pause()
                await pilot.press("enter")
                await pilot.pause()
                gated.gate.set()
                await app.workers.wait_for_complete()
                await pilot.pause()

        try:
            asyncio.run(scenario())
        finally:
            client.close()
        assert fake_xpipe.bodies("/connection/terminal") == []
        assert app.state.mode is ViewMode.FLAT


@pytest.fixture
def handoff_browser(xpipe_client, settings):
    """Browser whose terminal handoffs run inline instead of suspending."""
    xpipe_client.authenticate("secret")
    catalogue = fetch_catalogue(xpipe_client)
    launcher = SessionLauncher(
        xpipe_client,
        directory=settings.terminal_directory,
        console=Console(file=io.StringIO()),
        acknowledge=lambda: None,
    )
    app = ConnectionBrowser(xpipe_client, settings, catalogue=catalogue, launcher=launcher)
    with patch.object(ConnectionBrowser, "suspend", lambda self: contextlib.nullcontext()):
        yield app


class TestFuzzyFilter:
    """Tests for picking a target with the external matcher."""

    def test_match_launches_primary(self, handoff_browser, fake_xpipe):
        with patch("xpctl.app.fuzzy_filter", return_value="web1") as matcher:
            run(handoff_browser, "slash")

        assert matcher.call_args[0][0] == ["db", "web1"]
        assert fake_xpipe.bodies("/connection/terminal") == [{"connection": "a1", "directory": "/"}]
        assert handoff_browser.state.cursor == 1
        assert handoff_browser.state.mode is ViewMode.FLAT

    def test_match_in_drill_down_launches_resource(self, handoff_browser, fake_xpipe):
        with patch("xpctl.app.fuzzy_filter", return_value="postgres") as matcher:
            run(handoff_browser, "enter", "slash")

        assert matcher.call_args[0][0] == ["b1", "postgres"]
        assert fake_xpipe.bodies("/connection/terminal") == [{"connection": "postgres", "directory": "/"}]
        assert handoff_browser.state.mode is ViewMode.DRILL_DOWN

    def test_no_match_changes_nothing(self, handoff_browser, fake_xpipe):
        with patch("xpctl.app.fuzzy_filter", return_value=None):
            run(handoff_browser, "down", "slash")

        assert handoff_browser.state.mode is ViewMode.FLAT
        assert handoff_browser.state.cursor == 1
        assert fake_xpipe.bodies("/connection/terminal") == []
