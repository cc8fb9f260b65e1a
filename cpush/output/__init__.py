"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    ProgressProtocol,
    RichConsole,
    Style,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "ProgressProtocol",
    "RichConsole",
    "Style",
]
