from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_identity_service
from api.responses import ok
from api.schemas.auth import ProfileUpdateRequest
from papertrove.model.user import TokenClaims
from papertrove.service.identity_service import IdentityService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile")
def get_profile(
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
):
    return ok("Profile retrieved successfully", identity.get_profile(user))


@router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest,
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
):
    """Update name and researcher affiliation/specialization."""
    profile = identity.update_profile(
        user,
        name=body.name,
        affiliation=body.affiliation,
        specialization=body.specialization,
    )
    return ok("Profile updated successfully", profile)
