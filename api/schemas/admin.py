from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel


class CreateUserRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    role: Optional[str] = None


class PaperUpdateRequest(BaseModel):
    title: str
    abstract: str
    publication_date: date
    field_id: int
