# papertrove/database/chat_repository.py

"""
Chat Repository - saved assistant conversations

功能：
- 列出/获取/创建/删除会话
- 整体替换会话消息
"""

from __future__ import annotations

from typing import List, Optional, Sequence
from datetime import datetime

from sqlalchemy import select, desc, delete
from sqlalchemy.orm import Session

from papertrove.model.chat import ChatSession, ChatMessage, ChatMessageInput
from papertrove.database.db.models import ChatSessionRow, ChatMessageRow


class ChatRepository:
    """聊天数据仓库"""

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # Session CRUD
    # =====================================================

    def create_session(self, user_id: int, title: str) -> ChatSessionRow:
        now = datetime.utcnow()
        row = ChatSessionRow(
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_owned(self, user_id: int, session_id: int) -> Optional[ChatSessionRow]:
        """Session by id, only when it belongs to user_id"""
        return self.db.execute(
            select(ChatSessionRow)
            .where(ChatSessionRow.id == session_id)
            .where(ChatSessionRow.user_id == user_id)
        ).scalar_one_or_none()

    def list_by_user(self, user_id: int) -> List[ChatSession]:
        """获取用户的所有会话（不包含消息内容，用于列表显示）"""
        rows = self.db.execute(
            select(ChatSessionRow)
            .where(ChatSessionRow.user_id == user_id)
            .order_by(desc(ChatSessionRow.updated_at), desc(ChatSessionRow.id))
        ).scalars().all()

        return [self._row_to_session(row, include_messages=False) for row in rows]

    def delete_session(self, row: ChatSessionRow) -> None:
        """删除会话（级联删除所有消息）"""
        self.db.delete(row)
        self.db.flush()

    def delete_by_user(self, user_id: int) -> None:
        rows = self.db.execute(
            select(ChatSessionRow).where(ChatSessionRow.user_id == user_id)
        ).scalars().all()
        for row in rows:
            self.db.delete(row)
        self.db.flush()

    def touch(self, row: ChatSessionRow, title: Optional[str] = None) -> None:
        if title:
            row.title = title
        row.updated_at = datetime.utcnow()
        self.db.flush()

    # =====================================================
    # Message CRUD
    # =====================================================

    def add_messages(self, session_id: int, messages: Sequence[ChatMessageInput]) -> None:
        """Insert messages in the given order"""
        now = datetime.utcnow()
        for message in messages:
            self.db.add(ChatMessageRow(
                session_id=session_id,
                role=message.role,
                content=message.content,
                sources_used=message.sources_used,
                created_at=now,
            ))
        self.db.flush()

    def replace_messages(self, row: ChatSessionRow, messages: Sequence[ChatMessageInput]) -> None:
        """Delete every message of the session, then insert the new list"""
        self.db.execute(delete(ChatMessageRow).where(ChatMessageRow.session_id == row.id))
        self.db.expire(row, ["messages"])
        self.add_messages(row.id, messages)

    def get_messages(self, session_id: int) -> List[ChatMessage]:
        """获取会话的所有消息"""
        rows = self.db.execute(
            select(ChatMessageRow)
            .where(ChatMessageRow.session_id == session_id)
            .order_by(ChatMessageRow.created_at, ChatMessageRow.id)
        ).scalars().all()

        return [self._row_to_message(row) for row in rows]

    # =====================================================
    # Helper Methods
    # =====================================================

    def _row_to_message(self, row: ChatMessageRow) -> ChatMessage:
        return ChatMessage(
            id=row.id,
            session_id=row.session_id,
            role=row.role,
            content=row.content,
            sources_used=row.sources_used,
            created_at=row.created_at,
        )

    def _row_to_session(
        self,
        row: ChatSessionRow,
        include_messages: bool = True,
    ) -> ChatSession:
        """将数据库行转换为 Pydantic 模型"""
        messages = self.get_messages(row.id) if include_messages else []

        return ChatSession(
            id=row.id,
            user_id=row.user_id,
            title=row.title,
            created_at=row.created_at,
            updated_at=row.updated_at,
            messages=messages,
        )

    def to_session(self, row: ChatSessionRow) -> ChatSession:
        return self._row_to_session(row, include_messages=True)
