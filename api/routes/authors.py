from fastapi import APIRouter, Depends

from api.deps import Pagination, get_author_service, get_pagination
from api.responses import ok, paged
from papertrove.service.author_service import AuthorService

router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.get("")
def list_authors(
    pagination: Pagination = Depends(get_pagination),
    service: AuthorService = Depends(get_author_service),
):
    page = service.list(pagination.page, pagination.limit)
    return ok("Authors retrieved successfully", paged("authors", page))


@router.get("/{author_id}")
def get_author(
    author_id: int,
    service: AuthorService = Depends(get_author_service),
):
    """作者信息及其论文"""
    return ok("Author retrieved successfully", service.get(author_id))
