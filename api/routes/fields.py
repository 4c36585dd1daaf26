from fastapi import APIRouter, Depends

from api.deps import Pagination, get_field_service, get_pagination, require_admin
from api.responses import created, ok, paged
from api.schemas.catalog import FieldRequest
from papertrove.service.field_service import FieldService

router = APIRouter(prefix="/api/fields", tags=["fields"])


@router.get("")
def list_fields(
    pagination: Pagination = Depends(get_pagination),
    service: FieldService = Depends(get_field_service),
):
    page = service.list(pagination.page, pagination.limit)
    return ok("Fields retrieved successfully", paged("fields", page))


@router.get("/{field_id}")
def get_field(
    field_id: int,
    service: FieldService = Depends(get_field_service),
):
    return ok("Field retrieved successfully", service.get(field_id))


# =====================================================
# Admin only
# =====================================================

@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_field(
    body: FieldRequest,
    service: FieldService = Depends(get_field_service),
):
    return created("Field created successfully", service.create(body.name, body.description))


@router.put("/{field_id}", dependencies=[Depends(require_admin)])
def update_field(
    field_id: int,
    body: FieldRequest,
    service: FieldService = Depends(get_field_service),
):
    return ok("Field updated successfully", service.update(field_id, body.name, body.description))


@router.delete("/{field_id}", dependencies=[Depends(require_admin)])
def delete_field(
    field_id: int,
    service: FieldService = Depends(get_field_service),
):
    """删除领域（仍有论文引用时返回 409）"""
    service.delete(field_id)
    return ok("Field deleted successfully", {"field_id": field_id})
