"""UI widgets for the xpctl TUI."""

from typing import Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import ScrollableContainer
from textual.widgets import ListItem, Static

from ..models import Target


def truncate(text: str, max_len: int = 100) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


class TargetItem(ListItem):
    """List item for a server in the flat view."""

    def __init__(self, target: Target):
        super().__init__()
        self.target = target
        self._static: Optional[Static] = None

    def compose(self) -> ComposeResult:
        self._static = Static(self._build_text(100))
        yield self._static

    def on_resize(self, event) -> None:
        """Update text when resized."""
        if self._static:
            self._static.update(self._build_text(self.size.width))

    def _build_text(self, width: int) -> Text:
        text = Text()
        prefix_width = 4  # padding
        count = len(self.target.identifiers)
        if count > 1:
            count_str = f"({count}) "
            text.append(count_str, style="yellow bold")
            prefix_width += len(count_str)
        text.append(truncate(self.target.name, max(20, width - prefix_width)), style="bold white")
        return text


class ResourceItem(ListItem):
    """List item for one identifier of a server in the drill-down view."""

    def __init__(self, identifier: str, is_primary: bool = False):
        super().__init__()
        self.identifier = identifier
        self.is_primary = is_primary

    def compose(self) -> ComposeResult:
        text = Text()
        if self.is_primary:
            text.append("★ ", style="yellow bold")
        else:
            text.append("  ", style="dim")
        text.append(self.identifier, style="cyan")
        yield Static(text)


class TargetDetailPanel(ScrollableContainer):
    """Panel showing the highlighted target and the keys that act on it."""

    def update(self, text: Text) -> None:
        """Replace the panel content."""
        for child in list(self.children):
            child.remove()
        self.mount(Static(text, markup=False))

    def show_target(self, target: Target, drills_down: bool = False, resource: Optional[str] = None):
        """Update display with target info."""
        text = Text()

        text.append("━━━ Connection ━━━\n", style="bold cyan")
        text.append("\n")
        text.append("Name: ", style="bold")
        text.append(f"{truncate(target.name, 60)}\n", style="green bold")
        text.append("Identifiers: ", style="bold")
        text.append(f"{len(target.identifiers)}\n", style="yellow")
        text.append("\n")

        for identifier in target.identifiers:
            marker = "▶ " if identifier == resource else "  "
            text.append(marker, style="yellow bold")
            text.append(f"{identifier}", style="cyan" if identifier == resource else "dim")
            if identifier == target.primary:
                text.append("  (primary)", style="dim")
            text.append("\n")
        text.append("\n")

        text.append("Press ", style="dim")
        text.append("Enter", style="bold")
        if resource is not None:
            text.append(" to open this resource | ", style="dim")
            text.append("Esc", style="bold")
            text.append(" back", style="dim")
        elif drills_down:
            text.append(" to browse resources | ", style="dim")
        else:
            text.append(" to open terminal | ", style="dim")
        if resource is None:
            text.append("/", style="bold")
            text.append(" fuzzy filter", style="dim")

        self.update(text)

    def show_message(self, title: str, lines: list[str], style: str = "bold red"):
        """Show a status message instead of a target."""
        text = Text()
        text.append(f"{title}\n", style=style)
        if lines:
            text.append("\n")
        for line in lines:
            text.append(f"  {line}\n")
        self.update(text)
