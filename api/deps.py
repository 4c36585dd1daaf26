from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from papertrove.config import Settings
from papertrove.database.db.session import Database
from papertrove.errors import AppError, AuthError, ForbiddenError
from papertrove.model.user import TokenClaims
from papertrove.service.admin_service import AdminService
from papertrove.service.author_service import AuthorService
from papertrove.service.chat_service import ChatService
from papertrove.service.field_service import FieldService
from papertrove.service.identity_service import IdentityService
from papertrove.service.interaction_service import InteractionService
from papertrove.service.llm_service import LLMClient
from papertrove.service.paper_service import PaperService
from papertrove.service.recommendation_service import RecommendationService
from papertrove.service.security import decode_access_token
from papertrove.service.statistics_service import StatisticsService
from papertrove.service.storage_service import PaperStorage

bearer_scheme = HTTPBearer(auto_error=False)


# =====================================================
# Process-wide handles (created in the app lifespan)
# =====================================================

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Database opened at startup, see main.lifespan"""
    return request.app.state.database


def get_storage(settings: Settings = Depends(get_settings)) -> PaperStorage:
    return PaperStorage(settings.upload)


# =====================================================
# Services (stateless, safe to create per-request)
# =====================================================

def get_identity_service(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
    storage: PaperStorage = Depends(get_storage),
) -> IdentityService:
    return IdentityService(database, settings.auth, storage)


def get_paper_service(
    database: Database = Depends(get_database),
    storage: PaperStorage = Depends(get_storage),
) -> PaperService:
    return PaperService(database, storage)


def get_statistics_service(database: Database = Depends(get_database)) -> StatisticsService:
    return StatisticsService(database)


def get_admin_service(
    identity: IdentityService = Depends(get_identity_service),
    papers: PaperService = Depends(get_paper_service),
    statistics: StatisticsService = Depends(get_statistics_service),
) -> AdminService:
    return AdminService(identity, papers, statistics)


def get_field_service(database: Database = Depends(get_database)) -> FieldService:
    return FieldService(database)


def get_author_service(database: Database = Depends(get_database)) -> AuthorService:
    return AuthorService(database)


def get_interaction_service(database: Database = Depends(get_database)) -> InteractionService:
    return InteractionService(database)


def get_chat_service(database: Database = Depends(get_database)) -> ChatService:
    return ChatService(database)


def get_recommendation_service(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> RecommendationService:
    return RecommendationService(database, LLMClient(settings.llm))


# =====================================================
# Auth guards
# =====================================================

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    identity: IdentityService = Depends(get_identity_service),
) -> TokenClaims:
    """
    Missing token -> 401, invalid/expired token -> 403, deleted user -> 404.

    Role, name and email come from the database, not from the token.
    """
    if not credentials or not credentials.credentials:
        raise AuthError("Access token required")
    claims = decode_access_token(credentials.credentials, settings.auth)
    return identity.current_claims(claims)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    identity: IdentityService = Depends(get_identity_service),
) -> Optional[TokenClaims]:
    if not credentials or not credentials.credentials:
        return None
    try:
        return identity.current_claims(decode_access_token(credentials.credentials, settings.auth))
    except AppError:
        return None


def require_admin(user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user


# =====================================================
# Pagination
# =====================================================

@dataclass
class Pagination:
    page: int
    limit: int


def get_pagination(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    settings: Settings = Depends(get_settings),
) -> Pagination:
    return Pagination(page=page, limit=limit or settings.default_page_size)
