"""Console output abstraction.

Services print through ``ConsoleProtocol`` so the workflow never depends on
a terminal. ``RichConsole`` is the production backend; ``MockConsole``
records everything for tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

from rich.markup import escape

if TYPE_CHECKING:
    from rich.console import Console
    from rich.status import Status

__all__ = [
    "Style",
    "ProgressProtocol",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "MockProgress",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()  # Green checkmark, positive message
    ERROR = auto()  # Red X, error message
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()
    VALUE = auto()  # Highlighted value in a summary

    def __str__(self) -> str:
        return self.name.lower()


class ProgressProtocol(Protocol):
    """A running step shown to the user until it completes or fails."""

    def complete(self) -> None: ...

    def fail(self, message: str) -> None: ...


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...

    def progress(self, label: str) -> ProgressProtocol:
        """Start a labelled progress indicator.

        The caller must end it with exactly one of ``complete()`` or
        ``fail(message)``.
        """
        ...


class RichProgress:
    def __init__(self, console: Console, label: str, status: Status) -> None:
        self._console = console
        self._label = label
        self._status = status
        self._status.start()

    def complete(self) -> None:
        self._status.stop()
        self._console.print(f"[green]✓[/green] {escape(self._label)}")

    def fail(self, message: str) -> None:
        self._status.stop()
        self._console.print(f"[red]✗[/red] {escape(self._label)}: {escape(message)}")


class RichConsole:
    """Console implementation using Rich library.

    Messages are plain text: square brackets in them are printed literally.
    """

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console()
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "green bold",
            Style.VALUE: "bright_cyan",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]OK[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[red bold]error:[/red bold] {escape(message)}")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]warning:[/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]info:[/cyan] {escape(message)}")

    def header(self, message: str) -> None:
        self._console.print(f"\n[green bold]{escape(message)}[/green bold]")

    def newline(self) -> None:
        self._console.print()

    def progress(self, label: str) -> RichProgress:
        return RichProgress(self._console, label, self._console.status(escape(label)))


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    """Factory for empty outputs list (helps type inference)."""
    return []


def _empty_progress() -> list[MockProgress]:
    return []


@dataclass
class MockProgress:
    """Recorded progress indicator; ``state`` is running, complete or failed."""

    label: str
    owner: MockConsole = field(repr=False, compare=False)
    state: str = "running"
    message: str | None = None

    def complete(self) -> None:
        self.state = "complete"
        self.owner.outputs.append(OutputRecord(f"OK {self.label}", Style.SUCCESS))

    def fail(self, message: str) -> None:
        self.state = "failed"
        self.message = message
        self.owner.outputs.append(OutputRecord(f"failed: {self.label}: {message}", Style.ERROR))


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    progresses: list[MockProgress] = field(default_factory=_empty_progress)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    def progress(self, label: str) -> MockProgress:
        p = MockProgress(label=label, owner=self)
        self.progresses.append(p)
        return p

    # Test helper methods

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """Get all output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def progress_labels(self) -> list[str]:
        return [p.label for p in self.progresses]

    def failed_progress(self) -> MockProgress | None:
        """Return the progress marked failed, if any."""
        for p in self.progresses:
            if p.state == "failed":
                return p
        return None
