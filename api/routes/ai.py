from fastapi import APIRouter, Depends, Query

from api.deps import get_current_user, get_recommendation_service
from api.responses import ok
from api.schemas.catalog import RecommendRequest
from papertrove.model.user import TokenClaims
from papertrove.service.recommendation_service import RecommendationService

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/recommend")
def recommend(
    body: RecommendRequest,
    service: RecommendationService = Depends(get_recommendation_service),
):
    """根据描述推荐论文"""
    return ok("Recommendations generated", service.recommend(body.query, body.limit))


@router.get("/for-you")
def for_you(
    limit: int = Query(default=5, ge=1, le=50),
    user: TokenClaims = Depends(get_current_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """基于下载和评论历史的个性化推荐"""
    return ok("Personalized recommendations generated", service.for_you(user, limit))
