"""Parsing of the project ``TODO.md`` for ``ai-dev status``."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

NEXT_UP_HEADING: Final[str] = "Next Up"
BLOCKERS_HEADING: Final[str] = "Blockers"

_HEADING = re.compile(r"^##\s+(?P<title>.+?)\s*$")
_UNCHECKED = re.compile(r"\[ \]\s*(?P<item>.*)$")


def section_items(text: str, heading: str) -> list[str]:
    """Unchecked ``- [ ]`` items of the first ``## <heading>`` section.

    The heading matches by prefix so decorated titles (``## Next Up 🎯``) work.
    """

    items: list[str] = []
    inside = False
    for line in text.splitlines():
        heading_match = _HEADING.match(line)
        if heading_match is not None:
            if inside:
                break
            inside = heading_match.group("title").startswith(heading)
            continue
        if not inside:
            continue
        item_match = _UNCHECKED.search(line)
        if item_match is not None and item_match.group("item").strip():
            items.append(item_match.group("item").strip())
    return items


def read_todo(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


__all__ = ["BLOCKERS_HEADING", "NEXT_UP_HEADING", "read_todo", "section_items"]
