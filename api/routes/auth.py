from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_identity_service
from api.responses import created, ok
from api.schemas.auth import LoginRequest, RegisterRequest
from papertrove.model.user import TokenClaims
from papertrove.service.identity_service import IdentityService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    identity: IdentityService = Depends(get_identity_service),
):
    """Create an account (Researcher unless a role is given)."""
    user = identity.register(
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        affiliation=body.affiliation,
        specialization=body.specialization,
    )
    return created(
        "User registered successfully",
        {"user_id": user.id, "email": user.email, "name": user.name, "role": user.role},
    )


@router.post("/login")
def login(
    body: LoginRequest,
    identity: IdentityService = Depends(get_identity_service),
):
    """Exchange email + password for a bearer token."""
    result = identity.login(body.email, body.password)
    return ok(
        "Login successful",
        {
            "token": result.token,
            "user": {
                "user_id": result.user.id,
                "name": result.user.name,
                "email": result.user.email,
                "role": result.user.role,
            },
        },
    )


@router.get("/me")
def me(
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
):
    """Profile of the token holder."""
    return ok("User profile retrieved", identity.get_profile(user))
