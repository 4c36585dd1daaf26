from fastapi import APIRouter, Depends

from api.deps import get_chat_service, get_current_user
from api.responses import created, ok
from api.schemas.chat import SessionCreateRequest, SessionUpdateRequest
from papertrove.model.user import TokenClaims
from papertrove.service.chat_service import ChatService

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/sessions")
def list_sessions(
    user: TokenClaims = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """获取当前用户的所有会话（不含消息）"""
    sessions = service.list_sessions(user.user_id)
    return ok("Chat sessions retrieved", {"sessions": sessions})


@router.get("/sessions/{session_id}")
def get_session(
    session_id: int,
    user: TokenClaims = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """获取会话及其消息"""
    return ok("Chat session retrieved", service.get_session(user.user_id, session_id))


@router.post("/sessions", status_code=201)
def create_session(
    body: SessionCreateRequest,
    user: TokenClaims = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    session = service.create_session(user.user_id, body.title, body.messages)
    return created("Chat session created", {"id": session.id, "title": session.title})


@router.put("/sessions/{session_id}")
def update_session(
    session_id: int,
    body: SessionUpdateRequest,
    user: TokenClaims = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """更新标题，或整体替换消息列表"""
    session = service.update_session(user.user_id, session_id, body.title, body.messages)
    return ok("Chat session updated", session)


@router.delete("/sessions/{session_id}")
def delete_session(
    session_id: int,
    user: TokenClaims = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    service.delete_session(user.user_id, session_id)
    return ok("Chat session deleted", {"id": session_id})
