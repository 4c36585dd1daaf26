from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from papertrove.model.chat import ChatMessageInput


class SessionCreateRequest(BaseModel):
    title: Optional[str] = None
    messages: Optional[List[ChatMessageInput]] = None


class SessionUpdateRequest(BaseModel):
    title: Optional[str] = None
    messages: Optional[List[ChatMessageInput]] = None  # replaces the whole list
