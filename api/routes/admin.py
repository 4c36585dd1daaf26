import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError as PydanticValidationError

from api.deps import Pagination, get_admin_service, get_pagination, require_admin
from api.responses import created, ok, paged
from api.schemas.admin import CreateUserRequest, PaperUpdateRequest, RoleUpdateRequest
from papertrove.errors import ValidationError
from papertrove.model.paper import PaperSubmission, PaperUpdate
from papertrove.model.user import TokenClaims
from papertrove.service.admin_service import AdminService
from papertrove.service.paper_service import IncomingFile

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _json_list(raw: Optional[str], name: str) -> List:
    """Parse a JSON array sent as a multipart form field"""
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(f"Invalid {name} format")
    if not isinstance(value, list):
        raise ValidationError(f"Invalid {name} format")
    return value


# =====================================================
# Statistics
# =====================================================

@router.get("/statistics")
def statistics(
    _: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return ok("Statistics retrieved successfully", service.statistics_dashboard())


# =====================================================
# Papers
# =====================================================

@router.post("/papers", status_code=201)
def upload_paper(
    title: Optional[str] = Form(default=None),
    abstract: Optional[str] = Form(default=None),
    publication_date: Optional[str] = Form(default=None),
    field_id: Optional[str] = Form(default=None),
    authors: Optional[str] = Form(default=None),
    keywords: Optional[str] = Form(default=None),
    pdf_file: Optional[UploadFile] = File(default=None),
    user: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """
    上传论文（multipart）

    authors: JSON 列表 [{firstName, lastName, email, country}]
    keywords: JSON 字符串列表
    """
    # 1. 解析表单（此时还没有写文件）
    try:
        submission = PaperSubmission(
            title=title,
            abstract=abstract,
            publication_date=publication_date or None,
            field_id=field_id or None,
            authors=_json_list(authors, "authors"),
            keywords=[str(k) for k in _json_list(keywords, "keywords") if k is not None],
        )
    except PydanticValidationError as e:
        raise ValidationError("Invalid paper data", detail=str(e))

    # 2. 文件
    pdf = None
    if pdf_file is not None and pdf_file.filename:
        pdf = IncomingFile(
            filename=pdf_file.filename,
            content_type=pdf_file.content_type,
            stream=pdf_file.file,
        )

    # 3. 存储
    paper = service.upload_paper(user, submission, pdf)
    return created("Paper uploaded successfully", paper)


@router.get("/papers")
def list_papers(
    _: TokenClaims = Depends(require_admin),
    pagination: Pagination = Depends(get_pagination),
    service: AdminService = Depends(get_admin_service),
):
    page = service.list_papers(pagination.page, pagination.limit)
    return ok("Papers retrieved successfully", paged("papers", page))


@router.put("/papers/{paper_id}")
def update_paper(
    paper_id: int,
    body: PaperUpdateRequest,
    _: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    service.update_paper(paper_id, PaperUpdate(**body.model_dump()))
    return ok("Paper updated successfully", {"paper_id": paper_id})


@router.delete("/papers/{paper_id}")
def delete_paper(
    paper_id: int,
    _: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    service.delete_paper(paper_id)
    return ok("Paper deleted successfully", {"paper_id": paper_id})


# =====================================================
# Users
# =====================================================

@router.get("/users")
def list_users(
    _: TokenClaims = Depends(require_admin),
    pagination: Pagination = Depends(get_pagination),
    service: AdminService = Depends(get_admin_service),
):
    """用户列表 + 各角色人数"""
    page, role_counts = service.list_users(pagination.page, pagination.limit)
    return ok("Users retrieved successfully", paged("users", page, role_counts=role_counts))


@router.post("/users", status_code=201)
def create_user(
    body: CreateUserRequest,
    _: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    user = service.create_user(body.name, body.email, body.password, body.role)
    return created(
        "User created successfully",
        {"user_id": user.id, "name": user.name, "email": user.email, "role": user.role},
    )


@router.put("/users/{user_id}/role")
def change_role(
    user_id: int,
    body: RoleUpdateRequest,
    user: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    result = service.change_role(user, user_id, body.role)
    message = "User role updated successfully" if result["changed"] else "User already has this role"
    return ok(message, result)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    user: TokenClaims = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    service.delete_user(user, user_id)
    return ok("User deleted successfully", {"user_id": user_id})
