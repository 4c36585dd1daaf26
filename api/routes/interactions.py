from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_interaction_service
from api.responses import created, ok
from api.schemas.catalog import ReviewRequest
from papertrove.model.user import TokenClaims
from papertrove.service.interaction_service import InteractionService

router = APIRouter(prefix="/api/interactions", tags=["interactions"])


@router.post("/download/{paper_id}")
def download_paper(
    paper_id: int,
    user: TokenClaims = Depends(get_current_user),
    service: InteractionService = Depends(get_interaction_service),
):
    """记录下载并返回 PDF 路径"""
    return ok("Download recorded", service.record_download(user, paper_id))


@router.post("/review", status_code=201)
def add_review(
    body: ReviewRequest,
    user: TokenClaims = Depends(get_current_user),
    service: InteractionService = Depends(get_interaction_service),
):
    review = service.add_review(user, body.paper_id, body.rating, body.comment)
    return created("Review submitted successfully", review)


@router.get("/reviews/{paper_id}")
def list_reviews(
    paper_id: int,
    service: InteractionService = Depends(get_interaction_service),
):
    reviews = service.list_reviews(paper_id)
    return ok("Reviews retrieved successfully", {"paper_id": paper_id, "reviews": reviews})
