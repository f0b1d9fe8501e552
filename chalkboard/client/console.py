"""Terminal front end: type to the tutor, watch the board, hear the narration.

Commands::

    /image <path> [question]   explain an image
    /new                       start a new chat
    /chats                     list chats
    /switch <n>                open chat number n
    /rename <title>            rename the current chat
    /delete [n]                delete chat n (default: current)
    /voice <profile>           english | hinglish | hindi | gujarati
    /quit
"""
import argparse
import asyncio
import logging
import mimetypes
import os

import aiofiles

from chalkboard.client.api import TutorAPI, TutorClientError
from chalkboard.client.audio import SoundDeviceAudio
from chalkboard.client.player import AudioOutput, StepPlayer
from chalkboard.client.render import ConsoleBoard, ConsoleTranscript, StatusLine
from chalkboard.client.sessions import SessionStore
from chalkboard.config import settings
from chalkboard.services.prompts import VOICE_PROFILES


class TutorConsole:
    def __init__(
        self,
        sessions: SessionStore,
        api: TutorAPI,
        audio: AudioOutput,
        voice_profile: str = "english",
    ) -> None:
        self.sessions = sessions
        self.api = api
        self.voice_profile = voice_profile
        self.board = ConsoleBoard()
        self.transcript = ConsoleTranscript()
        self.status = StatusLine()
        self.player = StepPlayer(
            sessions,
            audio,
            on_reveal=self.board.on_reveal,
            on_message=self.transcript.on_message,
        )

    def show_chat(self) -> None:
        chat = self.sessions.active()
        print(f"=== {chat.title} ===")
        self.transcript.redraw(chat.messages)
        print("--- board ---")
        self.board.redraw(chat.board)

    async def _student_says(self, text: str) -> None:
        async with self.sessions.transaction() as chat:
            chat.add_message("student", text)

    async def teach_text(self, text: str) -> None:
        await self._student_says(text)
        self.status.show("Teacher is thinking...")
        try:
            steps = await self.api.submit_utterance(
                text, self.voice_profile, self.sessions.active_id
            )
        except TutorClientError as e:
            await self.status.flash(str(e))
            return
        self.status.clear()
        await self.player.play(steps)

    async def teach_image(self, path: str, question: str) -> None:
        if not os.path.isfile(path):
            await self.status.flash(f"No such image: {path}")
            return
        question = question or "Explain this"
        async with aiofiles.open(path, "rb") as f:
            image = await f.read()
        content_type = mimetypes.guess_type(path)[0] or "image/jpeg"

        await self._student_says(f"[Image] {question}")
        self.status.show("Analyzing image...")
        try:
            steps = await self.api.submit_image(
                question,
                self.voice_profile,
                self.sessions.active_id,
                image,
                filename=os.path.basename(path),
                content_type=content_type,
            )
        except TutorClientError as e:
            await self.status.flash(str(e))
            return
        self.status.clear()
        await self.player.play(steps)

    async def command(self, line: str) -> bool:
        """Run a slash command. Returns False when the console should exit."""
        name, _, arg = line[1:].partition(" ")
        arg = arg.strip()

        if name == "quit":
            return False
        if name == "image":
            path, _, question = arg.partition(" ")
            await self.teach_image(path, question.strip())
        elif name == "new":
            await self.sessions.create_chat()
            self.show_chat()
        elif name == "chats":
            for i, chat in enumerate(self.sessions.chats, 1):
                mark = "*" if chat.id == self.sessions.active_id else " "
                print(f"{mark}{i:>3}  {chat.title}")
        elif name == "switch":
            chat = self._chat_at(arg)
            if chat:
                self.sessions.activate(chat.id)
                self.show_chat()
        elif name == "rename":
            await self.sessions.rename(self.sessions.active_id, arg)
        elif name == "delete":
            chat = self._chat_at(arg) if arg else self.sessions.active()
            if chat:
                await self.sessions.delete(chat.id)
                self.show_chat()
        elif name == "voice":
            if arg in VOICE_PROFILES:
                self.voice_profile = arg
            else:
                print(f"Voices: {', '.join(VOICE_PROFILES)}")
        else:
            print(__doc__)
        return True

    def _chat_at(self, arg: str):
        try:
            return self.sessions.chats[int(arg) - 1]
        except (ValueError, IndexError):
            print(f"No chat number {arg!r}")
            return None

    async def run(self) -> None:
        self.show_chat()
        while True:
            try:
                line = (await asyncio.to_thread(input, "> ")).strip()
            except EOFError:
                break
            if not line:
                continue
            if line.startswith("/"):
                if not await self.command(line):
                    break
            else:
                await self.teach_text(line)


async def _main(args: argparse.Namespace) -> None:
    sessions = SessionStore(args.sessions)
    await sessions.load()
    api = TutorAPI(base_url=args.server)
    try:
        await TutorConsole(sessions, api, SoundDeviceAudio(), args.voice).run()
    finally:
        await api.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chalkboard tutor console")
    parser.add_argument("--server", default=settings.server_url)
    parser.add_argument("--sessions", default=settings.sessions_path)
    parser.add_argument("--voice", default="english", choices=sorted(VOICE_PROFILES))
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(_main(args))


if __name__ == "__main__":
    main()
