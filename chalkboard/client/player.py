"""Step playback: narration audio and board typing, joined per step.

For every step the player

1. appends the narration to the chat's message log,
2. starts two channels at once, audio playback and board typing,
3. waits for *both* before moving on to the next step.

Within a step the channels run freely, so long board text may keep typing
after short audio has ended (and the other way round).  Synchronization only
happens at step boundaries.  A channel that fails is logged and counts as
finished, so the join can never hang.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from chalkboard.board import TYPING_DELAYS, LineKind, RevealState, parse_line, reveal
from chalkboard.client.sessions import ChatMessage, SessionStore
from chalkboard.models import Step

logger = logging.getLogger(__name__)


class AudioOutput(Protocol):
    async def play(self, handle: str) -> None:
        """Play *handle* and return when playback has ended.

        Raises if playback cannot start.
        """


RevealCallback = Callable[[RevealState], None]
MessageCallback = Callable[[ChatMessage], None]


def _ignore(_arg) -> None:
    pass


class StepPlayer:
    """Plays step lists against a :class:`SessionStore`.

    Rendering is left to the caller: ``on_reveal`` receives every typing
    state and ``on_message`` every narration appended to the log.

    Calls to :meth:`play` are queued: a second call waits until the first has
    played all of its steps.
    """

    def __init__(
        self,
        sessions: SessionStore,
        audio: AudioOutput,
        on_reveal: RevealCallback = _ignore,
        on_message: MessageCallback = _ignore,
        typing_delays: dict[LineKind, float] | None = None,
    ) -> None:
        self.sessions = sessions
        self.audio = audio
        self.on_reveal = on_reveal
        self.on_message = on_message
        self.typing_delays = typing_delays or TYPING_DELAYS
        self._lock = asyncio.Lock()

    async def play(self, steps: Sequence[Step]) -> None:
        async with self._lock:
            # The board belongs to the chat that asked, even if the student
            # switches chats while the steps are still playing.
            chat_id = self.sessions.active().id
            for step in steps:
                await self._play_step(step, chat_id)

    async def _play_step(self, step: Step, chat_id: str) -> None:
        if step.spoken_text:
            async with self.sessions.transaction(chat_id) as chat:
                chat.add_message("teacher", step.spoken_text)
            self.on_message(chat.messages[-1])

        await asyncio.gather(
            self._settled("audio", self._play_audio(step)),
            self._settled("board", self._write_board(step, chat_id)),
        )

    async def _settled(self, channel: str, work: Awaitable[None]) -> None:
        """Join-barrier member: a failing channel is logged and resolves."""
        try:
            await work
        except Exception as e:
            logger.warning("%s channel failed, continuing: %s", channel, e)

    async def _play_audio(self, step: Step) -> None:
        if step.audio:
            await self.audio.play(step.audio)

    async def _write_board(self, step: Step, chat_id: str) -> None:
        for raw in step.board_lines:
            # Persist before animating so the line survives a reload mid-typing.
            async with self.sessions.transaction(chat_id) as chat:
                chat.board.append(raw)
            line = parse_line(raw)
            async for state in reveal(line, self.typing_delays[line.kind]):
                self.on_reveal(state)
