from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import date, datetime


class AuthorInput(BaseModel):
    """
    Author entry of a paper submission

    Accepts both ``firstName`` (upload form JSON) and ``first_name``.
    """
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    country: Optional[str] = None

    model_config = {
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
    }

    def is_well_formed(self) -> bool:
        return bool(self.email and self.first_name and self.last_name)


class PaperSubmission(BaseModel):
    title: Optional[str] = None
    abstract: Optional[str] = None
    publication_date: Optional[date] = None
    field_id: Optional[int] = None
    authors: List[AuthorInput] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    model_config = {
        "str_strip_whitespace": True,
    }


class SubmittedPaper(BaseModel):
    paper_id: int
    title: str
    path: str


class PaperUpdate(BaseModel):
    title: str
    abstract: str
    publication_date: date
    field_id: int


class PaperSummary(BaseModel):
    """Row of a paper listing"""
    id: int
    title: str
    abstract: str
    publication_date: Optional[date] = None
    path: Optional[str] = None
    field_id: Optional[int] = None
    field_name: Optional[str] = None
    admin_name: Optional[str] = None
    download_count: int = 0
    review_count: int = 0


class Author(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    country: Optional[str] = None
    paper_count: int = 0


class PaperDetail(PaperSummary):
    authors: List[Author] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    average_rating: Optional[float] = None

    @property
    def keyword_string(self) -> str:
        return ", ".join(self.keywords)


class AuthorDetail(Author):
    papers: List[PaperSummary] = Field(default_factory=list)


class ResearchField(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    paper_count: int = 0


class Review(BaseModel):
    id: int
    paper_id: int
    researcher_id: int
    researcher_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    review_date: Optional[datetime] = None
