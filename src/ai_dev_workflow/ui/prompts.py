"""Interactive prompts backed by ``input()``.

Commands receive a prompter object so tests can script the answers; this
module holds the console implementation used by the real CLI.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Final

_YES: Final[frozenset[str]] = frozenset({"y", "yes"})
_NO: Final[frozenset[str]] = frozenset({"n", "no"})


class ConsolePrompter:
    """Line-based prompts; end of input selects the default answer."""

    def __init__(self, *, input_fn: Callable[[str], str] = input) -> None:
        self._input = input_fn

    def ask(self, message: str, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        answer = self._read(f"{message}{suffix} ")
        if answer is None or not answer.strip():
            return default
        return answer.strip()

    def confirm(self, message: str, *, default: bool = True) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            answer = self._read(f"{message} ({hint}) ")
            if answer is None or not answer.strip():
                return default
            lowered = answer.strip().lower()
            if lowered in _YES:
                return True
            if lowered in _NO:
                return False

    def choose(self, message: str, choices: Sequence[str], *, default: str | None = None) -> str:
        if not choices:
            raise ValueError("choices must not be empty")
        options = ", ".join(choices)
        suffix = f" [{default}]" if default else ""
        while True:
            raw = self._read(f"{message} ({options}){suffix} ")
            if raw is None:
                if default is None:
                    raise ValueError(f"no answer given for: {message}")
                return default
            answer = raw.strip() or (default or "")
            if answer in choices:
                return answer
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1]

    def _read(self, prompt: str) -> str | None:
        try:
            return self._input(prompt)
        except EOFError:
            return None


__all__ = ["ConsolePrompter"]
