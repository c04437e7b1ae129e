"""UI components for terminal output and prompts."""

from flowboost.ui.output import (
    BLUE,
    GRAY,
    GREEN,
    MAGENTA,
    NC,
    RED,
    YELLOW,
    bullet_list,
    error,
    hyperlink,
    log,
    success,
    trace,
    warn,
)
from flowboost.ui.prompts import Prompter, TerminalPrompter

__all__ = [
    # Colors
    "RED",
    "GREEN",
    "YELLOW",
    "BLUE",
    "GRAY",
    "MAGENTA",
    "NC",
    # Functions
    "hyperlink",
    "log",
    "success",
    "warn",
    "error",
    "trace",
    "bullet_list",
    # Prompts
    "Prompter",
    "TerminalPrompter",
]
