"""Rich Console that degrades to ASCII icons on non-UTF-8 terminals."""
from typing import Any

from rich.console import Console

from .logger import is_utf8_capable, sanitize_for_terminal


class SafeConsole(Console):
    """Console wrapper that sanitizes string output when the terminal needs it."""

    def __init__(self, *args, **kwargs):
        """All arguments are passed through to Rich's Console."""
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization:
            kwargs.setdefault('legacy_windows', True)
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj, utf8=False) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)

    def error(self, message: str) -> None:
        """Print a red error line."""
        self.print(f"[bold red]Error:[/bold red] {message}")
