from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from papertrove.model.page import page_offset
from papertrove.model.paper import ResearchField
from papertrove.database.db.models import FieldRow, PaperRow


class FieldRepository:
    """Research fields used to categorize papers"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, field_id: int) -> Optional[FieldRow]:
        return self.db.get(FieldRow, field_id)

    def get_by_name(self, name: str) -> Optional[FieldRow]:
        return self.db.execute(
            select(FieldRow).where(FieldRow.name == name)
        ).scalar_one_or_none()

    def add(self, name: str, description: Optional[str] = None) -> FieldRow:
        row = FieldRow(name=name, description=description)
        self.db.add(row)
        self.db.flush()
        return row

    def delete(self, field_id: int) -> None:
        self.db.execute(delete(FieldRow).where(FieldRow.id == field_id))

    def paper_count(self, field_id: int) -> int:
        return self.db.execute(
            select(func.count(PaperRow.id)).where(PaperRow.field_id == field_id)
        ).scalar() or 0

    def list(self, page: int = 1, limit: int = 20) -> Tuple[List[ResearchField], int]:
        paper_count = (
            select(func.count(PaperRow.id))
            .where(PaperRow.field_id == FieldRow.id)
            .correlate(FieldRow)
            .scalar_subquery()
        )
        total = self.db.execute(select(func.count(FieldRow.id))).scalar() or 0
        records = self.db.execute(
            select(FieldRow, paper_count.label("paper_count"))
            .order_by(FieldRow.name)
            .offset(page_offset(page, limit))
            .limit(limit)
        ).all()
        return [self.to_model(r[0], r.paper_count or 0) for r in records], total

    def to_model(self, row: FieldRow, paper_count: Optional[int] = None) -> ResearchField:
        if paper_count is None:
            paper_count = self.paper_count(row.id)
        return ResearchField(
            id=row.id,
            name=row.name,
            description=row.description,
            paper_count=paper_count,
        )
