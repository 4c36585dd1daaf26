from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class FieldRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ReviewRequest(BaseModel):
    paper_id: Optional[int] = None
    rating: Optional[int] = None
    comment: Optional[str] = None


class RecommendRequest(BaseModel):
    query: Optional[str] = None
    limit: int = Field(default=5, ge=1, le=50)
