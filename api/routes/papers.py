from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import Pagination, get_optional_user, get_pagination, get_paper_service
from api.responses import ok, paged
from papertrove.model.user import TokenClaims
from papertrove.service.paper_service import PaperService

router = APIRouter(prefix="/api/papers", tags=["papers"])


@router.get("")
def list_papers(
    field_id: Optional[int] = Query(default=None, ge=1),
    pagination: Pagination = Depends(get_pagination),
    service: PaperService = Depends(get_paper_service),
):
    """论文列表（按发表日期倒序，可按领域过滤）"""
    page = service.list(pagination.page, pagination.limit, field_id=field_id)
    return ok("Papers retrieved successfully", paged("papers", page))


@router.get("/search/{query}")
def search_papers(
    query: str,
    pagination: Pagination = Depends(get_pagination),
    user: Optional[TokenClaims] = Depends(get_optional_user),
    service: PaperService = Depends(get_paper_service),
):
    """在标题、摘要和关键词中搜索"""
    page = service.search(query, pagination.page, pagination.limit, claims=user)
    return ok("Search completed", paged("papers", page, query=query))


@router.get("/{paper_id}")
def get_paper(
    paper_id: int,
    service: PaperService = Depends(get_paper_service),
):
    """论文详情：作者、关键词、下载/评论数和平均评分"""
    detail = service.get(paper_id)
    data = detail.model_dump()
    data["keyword_string"] = detail.keyword_string
    return ok("Paper retrieved successfully", data)
