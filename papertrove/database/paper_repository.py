from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from papertrove.model.page import page_offset
from papertrove.model.paper import Author, PaperDetail, PaperSummary
from papertrove.database.db.models import (
    AuthorPaperRow,
    AuthorRow,
    DownloadRow,
    FieldRow,
    PaperKeywordRow,
    PaperRow,
    ReviewRow,
    UserRow,
)


class PaperRepository:
    """
    Papers, their keywords and the paper side of author links.

    Works inside the caller's session; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # Basic CRUD
    # =====================================================

    def get(self, paper_id: int) -> Optional[PaperRow]:
        return self.db.get(PaperRow, paper_id)

    def add(
        self,
        title: str,
        abstract: str,
        publication_date: date,
        path: str,
        field_id: int,
        admin_id: int,
    ) -> PaperRow:
        row = PaperRow(
            title=title,
            abstract=abstract,
            publication_date=publication_date,
            path=path,
            field_id=field_id,
            admin_id=admin_id,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def update(
        self,
        row: PaperRow,
        title: str,
        abstract: str,
        publication_date: date,
        field_id: int,
    ) -> None:
        """Full overwrite of the editable metadata"""
        row.title = title
        row.abstract = abstract
        row.publication_date = publication_date
        row.field_id = field_id
        self.db.flush()

    def add_keywords(self, paper_id: int, keywords: Sequence[str]) -> None:
        for position, keyword in enumerate(keywords):
            self.db.add(PaperKeywordRow(paper_id=paper_id, position=position, keyword=keyword))
        self.db.flush()

    def link_author(self, author_id: int, paper_id: int, write_date: date) -> None:
        self.db.add(AuthorPaperRow(author_id=author_id, paper_id=paper_id, write_date=write_date))
        self.db.flush()

    def delete_cascade(self, paper_id: int) -> None:
        """
        Delete a paper and every row that references it.

        Order: keywords, author links, downloads, reviews, then the paper.
        """
        self.db.execute(delete(PaperKeywordRow).where(PaperKeywordRow.paper_id == paper_id))
        self.db.execute(delete(AuthorPaperRow).where(AuthorPaperRow.paper_id == paper_id))
        self.db.execute(delete(DownloadRow).where(DownloadRow.paper_id == paper_id))
        self.db.execute(delete(ReviewRow).where(ReviewRow.paper_id == paper_id))
        self.db.execute(delete(PaperRow).where(PaperRow.id == paper_id))

    def list_by_admin(self, admin_id: int) -> List[PaperRow]:
        rows = self.db.execute(
            select(PaperRow).where(PaperRow.admin_id == admin_id)
        ).scalars().all()
        return list(rows)

    # =====================================================
    # Pagination & search (UI / API)
    # =====================================================

    def _summary_query(self):
        download_count = (
            select(func.count(DownloadRow.id))
            .where(DownloadRow.paper_id == PaperRow.id)
            .correlate(PaperRow)
            .scalar_subquery()
        )
        review_count = (
            select(func.count(ReviewRow.id))
            .where(ReviewRow.paper_id == PaperRow.id)
            .correlate(PaperRow)
            .scalar_subquery()
        )
        return (
            select(
                PaperRow,
                FieldRow.name.label("field_name"),
                UserRow.name.label("admin_name"),
                download_count.label("download_count"),
                review_count.label("review_count"),
            )
            .outerjoin(FieldRow, PaperRow.field_id == FieldRow.id)
            .outerjoin(UserRow, PaperRow.admin_id == UserRow.id)
        )

    @staticmethod
    def _to_summary(record) -> PaperSummary:
        row = record[0]
        return PaperSummary(
            id=row.id,
            title=row.title,
            abstract=row.abstract,
            publication_date=row.publication_date,
            path=row.path,
            field_id=row.field_id,
            field_name=record.field_name,
            admin_name=record.admin_name,
            download_count=record.download_count or 0,
            review_count=record.review_count or 0,
        )

    def list(
        self,
        page: int = 1,
        limit: int = 20,
        field_id: Optional[int] = None,
    ) -> Tuple[List[PaperSummary], int]:
        """Papers ordered by publication date, newest first"""
        count_query = select(func.count(PaperRow.id))
        query = self._summary_query()
        if field_id is not None:
            count_query = count_query.where(PaperRow.field_id == field_id)
            query = query.where(PaperRow.field_id == field_id)

        total = self.db.execute(count_query).scalar() or 0
        records = self.db.execute(
            query
            .order_by(PaperRow.publication_date.desc(), PaperRow.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit)
        ).all()
        return [self._to_summary(r) for r in records], total

    def search(self, text: str, page: int = 1, limit: int = 20) -> Tuple[List[PaperSummary], int]:
        """Case-insensitive match on title, abstract or any keyword"""
        pattern = f"%{text}%"
        keyword_match = select(PaperKeywordRow.paper_id).where(PaperKeywordRow.keyword.ilike(pattern))
        condition = or_(
            PaperRow.title.ilike(pattern),
            PaperRow.abstract.ilike(pattern),
            PaperRow.id.in_(keyword_match),
        )

        total = self.db.execute(select(func.count(PaperRow.id)).where(condition)).scalar() or 0
        records = self.db.execute(
            self._summary_query()
            .where(condition)
            .order_by(PaperRow.publication_date.desc(), PaperRow.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit)
        ).all()
        return [self._to_summary(r) for r in records], total

    def list_by_author(self, author_id: int) -> List[PaperSummary]:
        records = self.db.execute(
            self._summary_query()
            .join(AuthorPaperRow, AuthorPaperRow.paper_id == PaperRow.id)
            .where(AuthorPaperRow.author_id == author_id)
            .order_by(PaperRow.publication_date.desc(), PaperRow.id.desc())
        ).all()
        return [self._to_summary(r) for r in records]

    def get_detail(self, paper_id: int) -> Optional[PaperDetail]:
        record = self.db.execute(
            self._summary_query().where(PaperRow.id == paper_id)
        ).first()
        if not record:
            return None

        summary = self._to_summary(record)
        authors = self.db.execute(
            select(AuthorRow)
            .join(AuthorPaperRow, AuthorPaperRow.author_id == AuthorRow.id)
            .where(AuthorPaperRow.paper_id == paper_id)
            .order_by(AuthorRow.last_name, AuthorRow.first_name)
        ).scalars().all()
        average_rating = self.db.execute(
            select(func.avg(ReviewRow.rating)).where(ReviewRow.paper_id == paper_id)
        ).scalar()

        return PaperDetail(
            **summary.model_dump(),
            authors=[
                Author(
                    id=a.id,
                    email=a.email,
                    first_name=a.first_name,
                    last_name=a.last_name,
                    country=a.country,
                )
                for a in authors
            ],
            keywords=self.get_keywords(paper_id),
            average_rating=round(float(average_rating), 2) if average_rating is not None else None,
        )

    def get_keywords(self, paper_id: int) -> List[str]:
        rows = self.db.execute(
            select(PaperKeywordRow.keyword)
            .where(PaperKeywordRow.paper_id == paper_id)
            .order_by(PaperKeywordRow.position)
        ).scalars().all()
        return list(rows)

    def all_with_keywords(self) -> List[Tuple[PaperRow, List[str]]]:
        """All papers with their keywords (recommendation scoring)"""
        rows = self.db.execute(select(PaperRow).order_by(PaperRow.publication_date.desc())).scalars().all()
        return [(row, [k.keyword for k in row.keywords]) for row in rows]
