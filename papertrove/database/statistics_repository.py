from __future__ import annotations

from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from papertrove.database.db.models import (
    AuthorRow,
    DownloadRow,
    FieldRow,
    PaperRow,
    ReviewRow,
    UserRow,
)


class StatisticsRepository:
    """Aggregate counts for dashboards"""

    def __init__(self, db: Session):
        self.db = db

    def _count(self, column) -> int:
        return self.db.execute(select(func.count(column))).scalar() or 0

    def overview(self) -> Dict[str, int]:
        return {
            "total_papers": self._count(PaperRow.id),
            "total_fields": self._count(FieldRow.id),
            "total_authors": self._count(AuthorRow.id),
            "total_downloads": self._count(DownloadRow.id),
            "total_reviews": self._count(ReviewRow.id),
        }

    def papers_by_field(self) -> List[Dict]:
        rows = self.db.execute(
            select(FieldRow.name, func.count(PaperRow.id).label("count"))
            .outerjoin(PaperRow, PaperRow.field_id == FieldRow.id)
            .group_by(FieldRow.id, FieldRow.name)
            .order_by(func.count(PaperRow.id).desc(), FieldRow.name)
        ).all()
        return [{"field_name": name, "count": count} for name, count in rows]

    def recent_papers(self, limit: int = 5) -> List[Dict]:
        rows = self.db.execute(
            select(PaperRow.id, PaperRow.title, PaperRow.publication_date)
            .order_by(PaperRow.publication_date.desc(), PaperRow.id.desc())
            .limit(limit)
        ).all()
        return [
            {"paper_id": pid, "title": title, "publication_date": pub}
            for pid, title, pub in rows
        ]

    def total_users(self) -> int:
        return self._count(UserRow.id)
