"""
Uniform JSON envelope:

    {"success": bool, "message": str, "data": <payload|null>, "error"?: str}
"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from papertrove.model.page import Page


def envelope(
    message: str,
    data: Any = None,
    status_code: int = 200,
    success: bool = True,
    error: Optional[str] = None,
) -> JSONResponse:
    body = {
        "success": success,
        "message": message,
        "data": jsonable_encoder(data),
    }
    if error is not None:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def ok(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return envelope(message, data, status_code=status_code)


def created(message: str, data: Any = None) -> JSONResponse:
    return envelope(message, data, status_code=201)


def fail(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    return envelope(message, None, status_code=status_code, success=False, error=error)


def pagination_meta(page: Page) -> dict:
    return {
        "page": page.page,
        "limit": page.limit,
        "total": page.total,
        "totalPages": page.total_pages,
    }


def paged(key: str, page: Page, **extra) -> dict:
    """``{key: [...], "pagination": {...}, **extra}``"""
    return {key: page.items, "pagination": pagination_meta(page), **extra}
