"""Output abstraction layer."""

from .advice import ADVICE, Advice, print_advice
from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)

__all__ = [
    "ADVICE",
    "Advice",
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "print_advice",
]
