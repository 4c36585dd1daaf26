from fastapi import APIRouter, Depends

from api.deps import get_statistics_service
from api.responses import ok
from papertrove.service.statistics_service import StatisticsService

router = APIRouter(prefix="/api/statistics", tags=["statistics"])


@router.get("/overview")
def overview(service: StatisticsService = Depends(get_statistics_service)):
    return ok("Overview statistics retrieved", service.overview())


@router.get("/papers")
def paper_statistics(service: StatisticsService = Depends(get_statistics_service)):
    return ok("Paper statistics retrieved", service.papers())


@router.get("/users")
def user_statistics(service: StatisticsService = Depends(get_statistics_service)):
    return ok("User statistics retrieved", service.users())
