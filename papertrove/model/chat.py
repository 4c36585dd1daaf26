# papertrove/model/chat.py

"""
Chat 数据模型

Saved assistant conversations: a session owns an ordered list of messages.
"""

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ChatMessageInput(BaseModel):
    role: str  # user | assistant
    content: str
    sources_used: Optional[int] = None


class ChatMessage(BaseModel):
    """聊天消息"""
    id: Optional[int] = None
    session_id: int
    role: str
    content: str
    sources_used: Optional[int] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ChatSession(BaseModel):
    """聊天会话"""
    id: int
    user_id: int
    title: str = "New Chat"

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    messages: List[ChatMessage] = Field(default_factory=list)

    model_config = {
        "str_strip_whitespace": True,
    }
