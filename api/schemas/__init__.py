from .auth import LoginRequest, ProfileUpdateRequest, RegisterRequest
from .admin import CreateUserRequest, PaperUpdateRequest, RoleUpdateRequest
from .chat import SessionCreateRequest, SessionUpdateRequest
from .catalog import FieldRequest, RecommendRequest, ReviewRequest

__all__ = [
    "LoginRequest",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "CreateUserRequest",
    "PaperUpdateRequest",
    "RoleUpdateRequest",
    "SessionCreateRequest",
    "SessionUpdateRequest",
    "FieldRequest",
    "RecommendRequest",
    "ReviewRequest",
]
