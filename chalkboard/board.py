"""Board-line grammar and the typing animation.

A board line is a raw string whose first two characters pick how it is drawn::

    "# "  heading
    "> "  code (whitespace and embedded newlines are kept verbatim)
    "$ "  formula
    "- "  list item
    other plain text (a bare "#" with no space is plain text too)

The same grammar is used by the server when it asks the model for fallback
board notes and by the client when it renders them.
"""
import asyncio
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
from enum import Enum


class LineKind(str, Enum):
    HEADING = "heading"
    CODE = "code"
    MATH = "math"
    LIST = "list"
    TEXT = "text"


MARKERS: dict[str, LineKind] = {
    "# ": LineKind.HEADING,
    "> ": LineKind.CODE,
    "$ ": LineKind.MATH,
    "- ": LineKind.LIST,
}

BULLET = "• "

# Seconds per revealed character.  Code is typed faster than prose.
TYPING_DELAYS: dict[LineKind, float] = {
    LineKind.HEADING: 0.02,
    LineKind.CODE: 0.005,
    LineKind.MATH: 0.02,
    LineKind.LIST: 0.02,
    LineKind.TEXT: 0.02,
}


@dataclass(frozen=True)
class BoardLine:
    raw: str
    kind: LineKind
    content: str  # raw minus the two-character marker

    @property
    def display(self) -> str:
        """Text as it appears on the board once fully revealed."""
        if self.kind is LineKind.LIST:
            return BULLET + self.content
        return self.content


@dataclass(frozen=True)
class RevealState:
    line: BoardLine
    visible: str

    @property
    def done(self) -> bool:
        return len(self.visible) == len(self.line.display)


def parse_line(raw: str) -> BoardLine:
    kind = MARKERS.get(raw[:2])
    if kind is None:
        return BoardLine(raw=raw, kind=LineKind.TEXT, content=raw)
    return BoardLine(raw=raw, kind=kind, content=raw[2:])


async def reveal(
    line: BoardLine, delay: float | None = None
) -> AsyncIterator[RevealState]:
    """Yield the line one character at a time, sleeping *delay* before each tick.

    The first state is the empty prefix and the last is the full display text,
    so a line of n characters yields n + 1 states.
    """
    if delay is None:
        delay = TYPING_DELAYS[line.kind]
    text = line.display
    for i in range(len(text) + 1):
        await asyncio.sleep(delay)
        yield RevealState(line=line, visible=text[:i])


def render_static(lines: Iterable[str]) -> list[RevealState]:
    """Fully revealed state of every line, with no animation."""
    states = []
    for raw in lines:
        line = parse_line(raw)
        states.append(RevealState(line=line, visible=line.display))
    return states
