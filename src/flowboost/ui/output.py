"""Terminal output helpers with colors and hyperlinks."""

# Colors
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
GRAY = "\033[90m"
MAGENTA = "\033[0;35m"
NC = "\033[0m"

TAG = "[flowboost]"


def hyperlink(url: str, text: str) -> str:
    """OSC 8 hyperlink - clickable in modern terminals."""
    return f"\033]8;;{url}\007{text}\033]8;;\007"


def log(msg: str) -> None:
    print(f"\r\033[K{BLUE}{TAG}{NC} {msg}")


def success(msg: str) -> None:
    print(f"\r\033[K{GREEN}{TAG}{NC} {msg}")


def warn(msg: str) -> None:
    print(f"\r\033[K{YELLOW}{TAG}{NC} {msg}")


def error(msg: str) -> None:
    print(f"\r\033[K{RED}{TAG}{NC} {msg}")


def trace(msg: str) -> None:
    """Dimmed line for verbose command echo."""
    print(f"\r\033[K{GRAY}{TAG} {msg}{NC}")


def bullet_list(items: list[str], color: str = GRAY) -> None:
    """Print items indented under the previous log line."""
    for item in items:
        print(f"    {color}-{NC} {item}")
