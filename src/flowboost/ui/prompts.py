"""Interactive decision prompts.

A Prompter presents a finite set of labeled choices and blocks until the user
picks one. Flows only talk to this interface, so tests can swap in a scripted
prompter.
"""

import getpass
import re
from typing import Optional, TypeVar

from flowboost.errors import UserAborted
from flowboost.models.choices import Choice, ConfirmChoice
from flowboost.ui.output import BLUE, GRAY, NC, warn

C = TypeVar("C", bound=Choice)

DEFAULT_MESSAGE = "Select an action:"


class Prompter:
    """Base interface. Subclasses implement choose and ask_text."""

    def choose(self, options: dict[C, str], message: str = DEFAULT_MESSAGE) -> C:
        raise NotImplementedError

    def ask_text(
        self, message: str, pattern: Optional[str] = None, secret: bool = False
    ) -> str:
        raise NotImplementedError

    def pick(self, items: list[str], message: str) -> str:
        """Pick one of several free-form strings (e.g. a branch type)."""
        raise NotImplementedError

    def confirm(self, message: str, yes_label: str = "yes", no_label: str = "no") -> bool:
        answer = self.choose({ConfirmChoice.YES: yes_label, ConfirmChoice.NO: no_label}, message)
        return answer is ConfirmChoice.YES


class TerminalPrompter(Prompter):
    """Numbered-list prompts on stdin/stdout."""

    def choose(self, options: dict[C, str], message: str = DEFAULT_MESSAGE) -> C:
        keys = list(options)
        if not keys:
            raise ValueError("choose() needs at least one option")
        print(f"\n{BLUE}?{NC} {message}")
        for i, key in enumerate(keys, 1):
            print(f"  {i}. {options[key]}  {GRAY}({key.value}){NC}")

        while True:
            try:
                answer = input(f"  Choice [1-{len(keys)}]: ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                return type(keys[0]).safe_default()  # type: ignore[return-value]
            picked = _parse_choice(answer, keys)
            if picked is not None:
                return picked
            warn(f"Enter a number between 1 and {len(keys)}")

    def pick(self, items: list[str], message: str) -> str:
        if not items:
            raise ValueError("pick() needs at least one item")
        print(f"\n{BLUE}?{NC} {message}")
        for i, item in enumerate(items, 1):
            print(f"  {i}. {item}")
        while True:
            try:
                answer = input(f"  Choice [1-{len(items)}]: ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                raise UserAborted()
            if answer.isdigit() and 1 <= int(answer) <= len(items):
                return items[int(answer) - 1]
            if answer in items:
                return answer
            warn(f"Enter a number between 1 and {len(items)}")

    def ask_text(
        self, message: str, pattern: Optional[str] = None, secret: bool = False
    ) -> str:
        read = getpass.getpass if secret else input
        while True:
            try:
                answer = read(f"{BLUE}?{NC} {message} ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                raise UserAborted()
            if not answer:
                warn("A value is required.")
                continue
            if pattern and not re.search(pattern, answer):
                shown = "The value" if secret else f"'{answer}'"
                warn(f"{shown} does not match the required format ({pattern}). Try again.")
                continue
            return answer


def _parse_choice(answer: str, keys: list[C]) -> Optional[C]:
    """Accept a 1-based index or the stable key itself."""
    if answer.isdigit():
        idx = int(answer) - 1
        if 0 <= idx < len(keys):
            return keys[idx]
        return None
    for key in keys:
        if key.value == answer:
            return key
    return None
