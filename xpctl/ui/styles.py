"""CSS styles for the xpctl TUI."""

APP_CSS = """
Screen {
    layout: horizontal;
}

#left-container {
    width: 60%;
    height: 100%;
}

#list-container {
    height: 1fr;
    border: solid $primary;
}

#list-container.drill-down {
    border: solid $warning;
}

#detail-container {
    width: 40%;
    height: 100%;
    border: solid $secondary;
    padding: 1;
}

#target-list {
    height: 1fr;
}

.list-header {
    height: auto;
    background: $surface;
    padding: 0 1;
    text-style: bold;
}

#list-header {
    color: $primary;
}

#list-container.drill-down #list-header {
    color: $warning;
}

#filter-bar {
    height: 1;
    padding: 0 1;
    background: $surface;
}

#detail-panel {
    height: 100%;
    overflow-y: auto;
    scrollbar-gutter: stable;
}

TargetItem, ResourceItem {
    height: 1;
    padding: 0 1;
}

TargetItem:hover, ResourceItem:hover {
    background: $surface-lighten-1;
}

ListView > ListItem.-highlight {
    background: $primary;
}

Footer {
    background: $surface;
}
"""
