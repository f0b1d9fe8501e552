import asyncio
import sys
from collections.abc import Iterable
from typing import TextIO

from chalkboard.board import LineKind, RevealState, render_static
from chalkboard.client.sessions import ChatMessage

RESET = "\033[0m"

# Chalk colours per line kind.
COLOURS = {
    LineKind.HEADING: "\033[1;33m",  # bold yellow
    LineKind.CODE: "\033[34m",  # blue
    LineKind.MATH: "\033[35m",  # pink
    LineKind.LIST: "\033[32m",  # green
    LineKind.TEXT: "\033[37m",  # white
}

SPEAKERS = {"student": "You", "teacher": "Teacher"}


class ConsoleBoard:
    """Draws the chalkboard on a terminal stream.

    Typing states arrive one character at a time; only the newly revealed
    suffix is written, so the terminal shows the line growing.
    """

    def __init__(self, stream: TextIO | None = None, colour: bool = True) -> None:
        self.stream = stream or sys.stdout
        self.colour = colour
        self._written = 0

    def _paint(self, kind: LineKind, text: str) -> str:
        if not self.colour or not text:
            return text
        return f"{COLOURS[kind]}{text}{RESET}"

    def on_reveal(self, state: RevealState) -> None:
        new = state.visible[self._written:]
        self._written = len(state.visible)
        if new:
            self.stream.write(self._paint(state.line.kind, new))
        if state.done:
            self.stream.write("\n")
            self._written = 0
        self.stream.flush()

    def redraw(self, lines: Iterable[str]) -> None:
        """Draw a stored board instantly, markers applied, no typing."""
        for state in render_static(lines):
            self.stream.write(self._paint(state.line.kind, state.visible) + "\n")
        self.stream.flush()


class ConsoleTranscript:
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    def on_message(self, message: ChatMessage) -> None:
        self.stream.write(f"{SPEAKERS.get(message.role, message.role)}: {message.text}\n")
        self.stream.flush()

    def redraw(self, messages: Iterable[ChatMessage]) -> None:
        for message in messages:
            self.on_message(message)


class StatusLine:
    """Transient one-line status ("Teacher is thinking...", errors)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stderr
        self.text = ""

    def show(self, text: str) -> None:
        self.text = text
        self.stream.write(f"\r\033[K[{text}]")
        self.stream.flush()

    def clear(self) -> None:
        if self.text:
            self.stream.write("\r\033[K")
            self.stream.flush()
        self.text = ""

    async def flash(self, text: str, seconds: float = 2.0) -> None:
        """Show *text* briefly, then clear the line."""
        self.show(text)
        await asyncio.sleep(seconds)
        self.clear()
