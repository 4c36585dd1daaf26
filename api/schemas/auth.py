from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    affiliation: Optional[str] = None
    specialization: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    affiliation: Optional[str] = None
    specialization: Optional[str] = None
