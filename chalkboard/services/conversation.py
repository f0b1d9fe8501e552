from chalkboard.config import settings
from chalkboard.database import get_async_conn

# Stored role -> role understood by the language model.
_MODEL_ROLES = {"student": "user", "teacher": "assistant"}


class ConversationStore:
    """Per-chat message log kept in SQLite.

    No locking is done: two concurrent turns on the same chat may interleave
    their inserts.
    """

    async def insert(self, chat_id: str, role: str, text: str) -> None:
        """Append a message.  Empty text is ignored."""
        if not text:
            return
        conn = await get_async_conn()
        try:
            await conn.execute(
                "INSERT INTO messages (chat_id, role, text) VALUES (?, ?, ?)",
                (chat_id, role, text),
            )
            await conn.commit()
        finally:
            await conn.close()

    async def query(self, chat_id: str, limit: int) -> list[dict]:
        """Most recent *limit* messages for *chat_id*, newest first."""
        conn = await get_async_conn()
        try:
            rows = await conn.execute(
                "SELECT * FROM messages WHERE chat_id = ? ORDER BY id DESC LIMIT ?",
                (chat_id, limit),
            )
            return [dict(row) for row in await rows.fetchall()]
        finally:
            await conn.close()

    async def history(self, chat_id: str, limit: int | None = None) -> list[dict]:
        """Recent dialogue in chronological order, in chat-completion format."""
        rows = await self.query(chat_id, limit or settings.history_limit)
        return [
            {"role": _MODEL_ROLES.get(row["role"], "user"), "content": row["text"]}
            for row in reversed(rows)
        ]
