from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from papertrove.model.paper import Review
from papertrove.database.db.models import (
    DownloadRow,
    PaperRow,
    ReviewRow,
    SearchRow,
    UserRow,
)


class InteractionRepository:
    """
    Researcher interactions with papers: downloads, reviews, searches
    """

    def __init__(self, db: Session):
        self.db = db

    def add_download(self, researcher_id: int, paper_id: int) -> DownloadRow:
        row = DownloadRow(
            researcher_id=researcher_id,
            paper_id=paper_id,
            download_date=datetime.utcnow(),
        )
        self.db.add(row)
        self.db.flush()
        return row

    def upsert_review(
        self,
        researcher_id: int,
        paper_id: int,
        rating: int,
        comment: Optional[str],
    ) -> ReviewRow:
        """One review per researcher and paper; a second review replaces the first"""
        row = self.db.execute(
            select(ReviewRow).where(
                ReviewRow.researcher_id == researcher_id,
                ReviewRow.paper_id == paper_id,
            )
        ).scalar_one_or_none()

        if not row:
            row = ReviewRow(researcher_id=researcher_id, paper_id=paper_id)
            self.db.add(row)

        row.rating = rating
        row.comment = comment
        row.review_date = datetime.utcnow()
        self.db.flush()
        return row

    def list_reviews(self, paper_id: int) -> List[Review]:
        records = self.db.execute(
            select(ReviewRow, UserRow.name)
            .outerjoin(UserRow, UserRow.id == ReviewRow.researcher_id)
            .where(ReviewRow.paper_id == paper_id)
            .order_by(ReviewRow.review_date.desc(), ReviewRow.id.desc())
        ).all()
        return [self.to_review(row, name) for row, name in records]

    def add_search(self, researcher_id: int, query: str) -> None:
        self.db.add(SearchRow(researcher_id=researcher_id, query=query, searched_at=datetime.utcnow()))
        self.db.flush()

    def seen_paper_ids(self, researcher_id: int) -> Set[int]:
        downloaded = self.db.execute(
            select(DownloadRow.paper_id).where(DownloadRow.researcher_id == researcher_id)
        ).scalars().all()
        reviewed = self.db.execute(
            select(ReviewRow.paper_id).where(ReviewRow.researcher_id == researcher_id)
        ).scalars().all()
        return set(downloaded) | set(reviewed)

    def seen_field_ids(self, researcher_id: int) -> Set[int]:
        seen = self.seen_paper_ids(researcher_id)
        if not seen:
            return set()
        rows = self.db.execute(
            select(PaperRow.field_id).where(PaperRow.id.in_(seen))
        ).scalars().all()
        return set(rows)

    @staticmethod
    def to_review(row: ReviewRow, researcher_name: Optional[str] = None) -> Review:
        return Review(
            id=row.id,
            paper_id=row.paper_id,
            researcher_id=row.researcher_id,
            researcher_name=researcher_name,
            rating=row.rating,
            comment=row.comment,
            review_date=row.review_date,
        )
