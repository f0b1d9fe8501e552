import json
import logging
import os
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass, field

import aiofiles

logger = logging.getLogger(__name__)

NEW_CHAT_TITLE = "New chat"
TITLE_LENGTH = 28


@dataclass
class ChatMessage:
    role: str  # student | teacher
    text: str


@dataclass
class ChatSession:
    id: str
    title: str = NEW_CHAT_TITLE
    messages: list[ChatMessage] = field(default_factory=list)
    board: list[str] = field(default_factory=list)  # raw board lines, append-only

    @classmethod
    def from_dict(cls, data: dict) -> "ChatSession":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or NEW_CHAT_TITLE,
            messages=[ChatMessage(**m) for m in data.get("messages", [])],
            board=list(data.get("board", [])),
        )

    def add_message(self, role: str, text: str) -> None:
        self.messages.append(ChatMessage(role=role, text=text))
        if self.title == NEW_CHAT_TITLE and role == "student":
            self.title = text[:TITLE_LENGTH]


class SessionStore:
    """All chat sessions of the local student, persisted to one JSON file.

    Mutations happen inside :meth:`transaction`, which always writes the file
    back when the block exits::

        async with store.transaction() as chat:
            chat.board.append("# Photosynthesis")
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.chats: list[ChatSession] = []
        self.active_id: str | None = None

    # ------------------------------------------------------------------
    # Persistence boundary
    # ------------------------------------------------------------------
    async def load(self) -> None:
        """Read the file (if any) and make the most recent chat active."""
        if os.path.exists(self.path):
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                data = json.loads(await f.read() or "[]")
            self.chats = [ChatSession.from_dict(c) for c in data]
        if self.chats:
            self.active_id = self.chats[0].id
        else:
            await self.create_chat()

    async def save(self) -> None:
        payload = json.dumps([asdict(c) for c in self.chats], indent=2, ensure_ascii=False)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(payload)

    @asynccontextmanager
    async def transaction(self, chat_id: str | None = None) -> AsyncIterator[ChatSession]:
        """Yield a chat (the active one by default) and flush the store on exit."""
        try:
            yield self.get(chat_id) if chat_id else self.active()
        finally:
            await self.save()

    # ------------------------------------------------------------------
    # Chat list
    # ------------------------------------------------------------------
    def active(self) -> ChatSession:
        for chat in self.chats:
            if chat.id == self.active_id:
                return chat
        raise LookupError("No active chat")

    def get(self, chat_id: str) -> ChatSession:
        for chat in self.chats:
            if chat.id == chat_id:
                return chat
        raise LookupError(f"Chat {chat_id} not found")

    async def create_chat(self) -> ChatSession:
        chat = ChatSession(id=uuid.uuid4().hex)
        self.chats.insert(0, chat)
        self.active_id = chat.id
        await self.save()
        return chat

    def activate(self, chat_id: str) -> ChatSession:
        chat = self.get(chat_id)
        self.active_id = chat.id
        return chat

    async def rename(self, chat_id: str, title: str) -> None:
        if not title:
            return
        self.get(chat_id).title = title
        await self.save()

    async def delete(self, chat_id: str) -> None:
        """Drop a chat with its board and messages.

        Deleting the active chat activates the most recent remaining one, or a
        fresh chat when none is left.
        """
        chat = self.get(chat_id)
        self.chats.remove(chat)
        if self.active_id == chat_id:
            if self.chats:
                self.active_id = self.chats[0].id
            else:
                await self.create_chat()
                return
        await self.save()
        logger.info("Deleted chat %s", chat_id)
