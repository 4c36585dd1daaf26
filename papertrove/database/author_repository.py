from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from papertrove.model.page import page_offset
from papertrove.model.paper import Author
from papertrove.database.db.models import AuthorPaperRow, AuthorRow


class AuthorRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, author_id: int) -> Optional[AuthorRow]:
        return self.db.get(AuthorRow, author_id)

    def get_by_email(self, email: str) -> Optional[AuthorRow]:
        """Exact, case-sensitive email match"""
        return self.db.execute(
            select(AuthorRow).where(AuthorRow.email == email)
        ).scalar_one_or_none()

    def get_or_create(
        self,
        email: str,
        first_name: str,
        last_name: str,
        country: Optional[str] = None,
    ) -> Tuple[AuthorRow, bool]:
        """
        Upsert by email.

        Returns:
            (author row, created flag). An existing author is reused as is.
        """
        row = self.get_by_email(email)
        if row:
            return row, False

        row = AuthorRow(
            email=email,
            first_name=first_name,
            last_name=last_name,
            country=country or None,
        )
        self.db.add(row)
        self.db.flush()
        return row, True

    def list(self, page: int = 1, limit: int = 20) -> Tuple[List[Author], int]:
        paper_count = (
            select(func.count())
            .select_from(AuthorPaperRow)
            .where(AuthorPaperRow.author_id == AuthorRow.id)
            .correlate(AuthorRow)
            .scalar_subquery()
        )
        total = self.db.execute(select(func.count(AuthorRow.id))).scalar() or 0
        records = self.db.execute(
            select(AuthorRow, paper_count.label("paper_count"))
            .order_by(AuthorRow.last_name, AuthorRow.first_name, AuthorRow.id)
            .offset(page_offset(page, limit))
            .limit(limit)
        ).all()
        return [self.to_model(r[0], r.paper_count or 0) for r in records], total

    @staticmethod
    def to_model(row: AuthorRow, paper_count: int = 0) -> Author:
        return Author(
            id=row.id,
            email=row.email,
            first_name=row.first_name,
            last_name=row.last_name,
            country=row.country,
            paper_count=paper_count,
        )
