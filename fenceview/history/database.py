"""SQLite-backed chat store.

Schema:
  chats    - one row per conversation
  messages - one row per user/assistant message, FK to chats

Messages are append-only; nothing here updates message content.
"""

import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..models import ROLES, Chat, Message


_DEFAULT_DB_PATH = "~/.config/fenceview/chats.db"


class HistoryDB:
    """Persistent chats and messages stored in SQLite."""

    def __init__(self, db_path: Optional[str] = None):
        path = Path(db_path or _DEFAULT_DB_PATH).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS chats (
                id          TEXT PRIMARY KEY,
                title       TEXT NOT NULL DEFAULT '',
                model       TEXT NOT NULL DEFAULT '',
                created_at  TEXT NOT NULL,
                updated_at  TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS messages (
                seq         INTEGER PRIMARY KEY AUTOINCREMENT,
                id          TEXT NOT NULL UNIQUE,
                chat_id     TEXT NOT NULL REFERENCES chats(id) ON DELETE CASCADE,
                role        TEXT NOT NULL,
                content     TEXT NOT NULL,
                created_at  TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_messages_chat
                ON messages(chat_id, seq);
            CREATE INDEX IF NOT EXISTS idx_chats_updated
                ON chats(updated_at DESC);
        """)

    # -- chats --

    def create_chat(self, title: str = "", model: str = "") -> Chat:
        """Create a new, empty chat."""
        now = datetime.now(timezone.utc).isoformat()
        chat_id = uuid.uuid4().hex[:12]
        self._conn.execute(
            "INSERT INTO chats (id, title, model, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (chat_id, title, model, now, now),
        )
        self._conn.commit()
        return Chat(id=chat_id, title=title, model=model, created_at=now, updated_at=now)

    def get_chat(self, chat_id: str) -> Optional[Chat]:
        """Get a chat with all of its messages, or None."""
        row = self._conn.execute(
            "SELECT * FROM chats WHERE id = ?", (chat_id,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_chat(row, self.get_messages(chat_id))

    def list_chats(self, limit: int = 20, offset: int = 0) -> list[Chat]:
        """Return recent chats (without messages), most recently updated first."""
        rows = self._conn.execute(
            "SELECT * FROM chats ORDER BY updated_at DESC, rowid DESC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
        return [self._row_to_chat(r) for r in rows]

    def search_chats(self, query: str, limit: int = 20) -> list[Chat]:
        """Search chats by title or message content."""
        rows = self._conn.execute(
            "SELECT DISTINCT c.* FROM chats c "
            "LEFT JOIN messages m ON m.chat_id = c.id "
            "WHERE c.title LIKE ? OR m.content LIKE ? "
            "ORDER BY c.updated_at DESC LIMIT ?",
            (f"%{query}%", f"%{query}%", limit),
        ).fetchall()
        return [self._row_to_chat(r) for r in rows]

    def delete_chat(self, chat_id: str) -> bool:
        """Delete a chat and its messages. Returns True if found."""
        cur = self._conn.execute("DELETE FROM chats WHERE id = ?", (chat_id,))
        self._conn.commit()
        return cur.rowcount > 0

    # -- messages --

    def append_message(self, chat_id: str, content: str, role: str) -> Message:
        """Append a message to a chat and return it.

        Raises ValueError for an unknown role and KeyError for an unknown chat.
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role {role!r}; expected one of {ROLES}")
        exists = self._conn.execute(
            "SELECT 1 FROM chats WHERE id = ?", (chat_id,)
        ).fetchone()
        if exists is None:
            raise KeyError(chat_id)

        now = datetime.now(timezone.utc).isoformat()
        message = Message(
            id=uuid.uuid4().hex[:12],
            chat_id=chat_id,
            role=role,
            content=content,
            created_at=now,
        )
        self._conn.execute(
            "INSERT INTO messages (id, chat_id, role, content, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (message.id, message.chat_id, message.role, message.content, message.created_at),
        )
        # Touch the chat's updated_at
        self._conn.execute(
            "UPDATE chats SET updated_at = ? WHERE id = ?", (now, chat_id)
        )
        self._conn.commit()
        return message

    def get_messages(self, chat_id: str) -> list[Message]:
        """Get all messages for a chat in creation order."""
        rows = self._conn.execute(
            "SELECT * FROM messages WHERE chat_id = ? ORDER BY seq ASC",
            (chat_id,),
        ).fetchall()
        return [self._row_to_message(r) for r in rows]

    # -- helpers --

    @staticmethod
    def _row_to_chat(row: sqlite3.Row, messages: Optional[list[Message]] = None) -> Chat:
        return Chat(
            id=row["id"],
            title=row["title"],
            model=row["model"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            messages=tuple(messages or ()),
        )

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            chat_id=row["chat_id"],
            role=row["role"],
            content=row["content"],
            created_at=row["created_at"],
        )

    def close(self) -> None:
        self._conn.close()

    def __del__(self):
        try:
            self._conn.close()
        except Exception:
            pass
