"""Interactive read-only viewer over a reconciliation plan.

A list view of secrets colored by status and a details view for the
selected secret. Quitting asks for confirmation. The viewer only reads
from the manager.
"""

from enum import Enum
from typing import Callable, NamedTuple

import click
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from secretsync.cli.output import STATUS_LABELS, STATUS_STYLES
from secretsync.manager import SecretsManager

KEY_UP = ("\x1b[A", "\xe0H", "k")
KEY_DOWN = ("\x1b[B", "\xe0P", "j")
KEY_ENTER = ("\r", "\n")
KEY_QUIT = ("q",)
KEY_YES = ("y", "Y")
KEY_NO = ("n", "N")
KEY_REVEAL = ("r",)


class ViewState(Enum):
    LIST = "list"
    DETAILS = "details"


class StatusMessage(NamedTuple):
    content: str
    style: str


class SecretsViewer:
    """Terminal browser for the secrets in a SecretsManager.

    Args:
        manager: Source of secrets and details.
        console: Rich console to draw on.
    """

    def __init__(
        self,
        manager: SecretsManager,
        console: Console | None = None,
    ) -> None:
        self.manager = manager
        self.console = console or Console()
        self.selected_index = 0
        self.state = ViewState.LIST
        self.confirming_quit = False
        self.reveal = False
        self.status_message: StatusMessage | None = None

    def handle_key(self, key: str) -> bool:
        """Process one key press.

        Args:
            key: Key as returned by click.getchar().

        Returns:
            True when the user confirmed quitting.
        """
        # Status messages last until the next key press.
        self.status_message = None

        if self.confirming_quit:
            if key in KEY_YES:
                self.confirming_quit = False
                return True
            if key in KEY_NO:
                self.confirming_quit = False
            return False

        if key in KEY_QUIT:
            self.confirming_quit = True
        elif key in KEY_ENTER:
            self.toggle_view()
        elif self.state is ViewState.LIST and key in KEY_UP:
            self.move_selection(-1)
        elif self.state is ViewState.LIST and key in KEY_DOWN:
            self.move_selection(1)
        elif self.state is ViewState.DETAILS and key in KEY_REVEAL:
            self.reveal = not self.reveal
        return False

    def move_selection(self, delta: int) -> None:
        """Move the cursor, wrapping at both ends."""
        count = len(self.manager.list_secrets())
        if count == 0:
            return
        self.selected_index = (self.selected_index + delta) % count

    def toggle_view(self) -> None:
        if self.state is ViewState.LIST:
            self.state = ViewState.DETAILS
        else:
            self.state = ViewState.LIST
            self.reveal = False
        self.set_status_message("View toggled", "yellow")

    def set_status_message(self, content: str, style: str) -> None:
        self.status_message = StatusMessage(content, style)

    def _render_list(self) -> RenderableType:
        lines = Text()
        for i, action in enumerate(self.manager.list_secrets()):
            style = f"bold {STATUS_STYLES[action.kind]}"
            if i == self.selected_index:
                style += " on green"
            lines.append(f"{action.name}\n", style=style)
        if not lines:
            lines.append("No secrets", style="dim")
        return Panel(lines, title="Secrets")

    def _render_details(self) -> RenderableType:
        details = self.manager.get_details_by_index(self.selected_index, reveal=self.reveal)
        if details is None:
            return Panel(Text("Secret details not available", style="red"), title="Error")

        def field(label: str, value: str, style: str = "") -> Text:
            return Text.assemble((f"{label}: ", "bold"), (value, style))

        created = details.created_at.isoformat() if details.created_at else "-"
        updated = details.updated_at.isoformat() if details.updated_at else "-"
        body = Group(
            field("Name", details.name),
            field("Value", details.value),
            field("Status", STATUS_LABELS[details.status], STATUS_STYLES[details.status]),
            field("Created At", created),
            field("Updated At", updated),
        )
        return Panel(body, title="Secret Details")

    def render(self) -> RenderableType:
        """Build the full screen for the current state."""
        title = Panel(Text("GitHub Secrets Manager", style="cyan"))
        if self.state is ViewState.LIST:
            body = self._render_list()
            footer_text = "↑↓: Navigate | Enter: View Details | q: Quit"
        else:
            body = self._render_details()
            footer_text = "Enter: Back to List | r: Reveal value | q: Quit"
        parts: list[RenderableType] = [title, body, Panel(Text(footer_text, style="bright_cyan"))]

        if self.status_message is not None:
            parts.append(Text(self.status_message.content, style=self.status_message.style))
        if self.confirming_quit:
            parts.append(
                Panel(
                    Text.assemble(
                        "Are you sure you want to quit?\n",
                        ("(Y) Yes", "bold green"),
                        "   ",
                        ("(N) No", "bold red"),
                    ),
                    border_style="bright_black",
                )
            )
        return Group(*parts)

    def run(self, read_key: Callable[[], str] = click.getchar) -> None:
        """Draw and read keys until the user confirms quitting."""
        with self.console.screen():
            while True:
                self.console.clear()
                self.console.print(self.render())
                if self.handle_key(read_key()):
                    return
