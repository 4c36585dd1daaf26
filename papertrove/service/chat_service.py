# papertrove/service/chat_service.py

"""
Chat Service - saved assistant conversations

功能：
- 列出用户的会话（按更新时间倒序）
- 获取会话及其消息
- 创建 / 更新（整体替换消息）/ 删除会话
"""

from typing import List, Optional

from papertrove.database.chat_repository import ChatRepository
from papertrove.database.db.session import Database
from papertrove.errors import NotFoundError
from papertrove.model.chat import ChatMessageInput, ChatSession

DEFAULT_TITLE = "New Chat"


class ChatService:
    """聊天会话服务"""

    def __init__(self, database: Database):
        self.database = database

    def list_sessions(self, user_id: int) -> List[ChatSession]:
        """会话列表，不含消息"""
        with self.database.session() as db:
            return ChatRepository(db).list_by_user(user_id)

    def get_session(self, user_id: int, session_id: int) -> ChatSession:
        with self.database.session() as db:
            repo = ChatRepository(db)
            row = repo.get_owned(user_id, session_id)
            if not row:
                raise NotFoundError("Chat session not found")
            return repo.to_session(row)

    def create_session(
        self,
        user_id: int,
        title: Optional[str] = None,
        messages: Optional[List[ChatMessageInput]] = None,
    ) -> ChatSession:
        """
        创建新的聊天会话

        Args:
            title: 会话标题，默认 "New Chat"
            messages: 初始消息，按顺序写入
        """
        with self.database.transaction() as db:
            repo = ChatRepository(db)
            row = repo.create_session(user_id, (title or "").strip() or DEFAULT_TITLE)
            if messages:
                repo.add_messages(row.id, messages)
            return repo.to_session(row)

    def update_session(
        self,
        user_id: int,
        session_id: int,
        title: Optional[str] = None,
        messages: Optional[List[ChatMessageInput]] = None,
    ) -> ChatSession:
        """
        更新标题和/或消息

        ``messages`` replaces the whole list (an empty list clears it);
        ``None`` leaves the messages untouched.
        """
        with self.database.transaction() as db:
            repo = ChatRepository(db)
            row = repo.get_owned(user_id, session_id)
            if not row:
                raise NotFoundError("Chat session not found")

            title = (title or "").strip() or None
            if messages is not None:
                repo.replace_messages(row, messages)
            if title or messages is not None:
                repo.touch(row, title)

            return repo.to_session(row)

    def delete_session(self, user_id: int, session_id: int) -> None:
        """删除会话（级联删除所有消息）"""
        with self.database.transaction() as db:
            repo = ChatRepository(db)
            row = repo.get_owned(user_id, session_id)
            if not row:
                raise NotFoundError("Chat session not found")
            repo.delete_session(row)
