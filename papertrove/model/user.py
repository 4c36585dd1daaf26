# papertrove/model/user.py

"""
User domain model

A user carries exactly one role profile, matching its role:
- Admin       -> AdminProfile
- Researcher  -> ResearcherProfile
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

Role = Literal["Admin", "Researcher"]


class AdminProfile(BaseModel):
    kind: Literal["Admin"] = "Admin"


class ResearcherProfile(BaseModel):
    kind: Literal["Researcher"] = "Researcher"
    affiliation: Optional[str] = None
    specialization: Optional[str] = None
    join_date: Optional[date] = None


RoleProfile = Union[AdminProfile, ResearcherProfile]


class User(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    created_at: Optional[datetime] = None
    profile: Optional[RoleProfile] = Field(default=None, discriminator="kind")


class TokenClaims(BaseModel):
    """Identity carried by a bearer token"""
    user_id: int
    email: str
    name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"
