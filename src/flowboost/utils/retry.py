"""Bounded retry helper."""

from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def retry_until_present(
    fetch: Callable[[], Optional[T]],
    max_attempts: int,
    between: Optional[Callable[[int], None]] = None,
) -> Optional[T]:
    """Call fetch until it returns a value, at most max_attempts times.

    between(attempt) runs after each miss except the last, e.g. to prompt the
    user for the missing value before trying again.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    for attempt in range(1, max_attempts + 1):
        value = fetch()
        if value is not None:
            return value
        if between is not None and attempt < max_attempts:
            between(attempt)
    return None
