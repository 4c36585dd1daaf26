from __future__ import annotations

import logging
from typing import Optional

from papertrove.database.db.session import Database
from papertrove.database.field_repository import FieldRepository
from papertrove.errors import ConflictError, NotFoundError, ValidationError
from papertrove.model.page import Page
from papertrove.model.paper import ResearchField

logger = logging.getLogger(__name__)


class FieldService:
    """Research field taxonomy"""

    def __init__(self, database: Database):
        self.database = database

    def list(self, page: int, limit: int) -> Page[ResearchField]:
        with self.database.session() as db:
            items, total = FieldRepository(db).list(page, limit)
        return Page[ResearchField](items=items, page=page, limit=limit, total=total)

    def get(self, field_id: int) -> ResearchField:
        with self.database.session() as db:
            fields = FieldRepository(db)
            row = fields.get(field_id)
            if not row:
                raise NotFoundError("Field not found")
            return fields.to_model(row)

    def create(self, name: Optional[str], description: Optional[str] = None) -> ResearchField:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Field name is required")

        with self.database.transaction() as db:
            fields = FieldRepository(db)
            if fields.get_by_name(name):
                raise ConflictError("Field already exists")
            row = fields.add(name, description or None)
            field = fields.to_model(row, paper_count=0)

        logger.info(f"Field created: {field.name}")
        return field

    def update(self, field_id: int, name: Optional[str], description: Optional[str] = None) -> ResearchField:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Field name is required")

        with self.database.transaction() as db:
            fields = FieldRepository(db)
            row = fields.get(field_id)
            if not row:
                raise NotFoundError("Field not found")

            existing = fields.get_by_name(name)
            if existing and existing.id != field_id:
                raise ConflictError("A field with this name already exists")

            row.name = name
            row.description = description or None
            db.flush()
            return fields.to_model(row)

    def delete(self, field_id: int) -> None:
        with self.database.transaction() as db:
            fields = FieldRepository(db)
            if not fields.get(field_id):
                raise NotFoundError("Field not found")
            if fields.paper_count(field_id):
                raise ConflictError("Field is still used by papers")
            fields.delete(field_id)

        logger.info(f"Field deleted: #{field_id}")
