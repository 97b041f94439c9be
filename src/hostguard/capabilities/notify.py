"""Console notifier: prints notifications with Rich."""

from rich.console import Console
from rich.markup import escape

from hostguard.capabilities.base import Notifier
from hostguard.schema import NotificationLevel

_LEVEL_STYLE = {
    NotificationLevel.INFO: ("cyan", "ℹ"),
    NotificationLevel.SUCCESS: ("green", "✓"),
    NotificationLevel.WARNING: ("yellow", "⚠"),
    NotificationLevel.ERROR: ("red", "✗"),
}


class ConsoleNotifier(Notifier):
    """Render notifications as a single styled line."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def notify(self, title: str, body: str, level: NotificationLevel) -> None:
        style, icon = _LEVEL_STYLE[level]
        self.console.print(f"[{style}]{icon} {escape(title)}[/{style}] [dim]│[/dim] {escape(body)}")
