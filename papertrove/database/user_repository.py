from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from papertrove.model.page import page_offset
from papertrove.model.user import AdminProfile, ResearcherProfile, User
from papertrove.database.db.models import (
    AdminRow,
    DownloadRow,
    ResearcherRow,
    ReviewRow,
    SearchRow,
    UserRow,
)


class UserRepository:
    """
    Users and their role extension rows (admins / researchers).

    Works inside the caller's session; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # User
    # =====================================================

    def get(self, user_id: int) -> Optional[UserRow]:
        return self.db.get(UserRow, user_id)

    def get_by_email(self, email: str) -> Optional[UserRow]:
        return self.db.execute(
            select(UserRow).where(UserRow.email == email)
        ).scalar_one_or_none()

    def email_exists(self, email: str) -> bool:
        return self.db.execute(
            select(UserRow.id).where(UserRow.email == email)
        ).first() is not None

    def add(self, name: str, email: str, password_hash: str, role: str) -> UserRow:
        row = UserRow(name=name, email=email, password=password_hash, role=role)
        self.db.add(row)
        self.db.flush()
        return row

    def delete(self, user_id: int) -> None:
        self.db.execute(delete(UserRow).where(UserRow.id == user_id))

    def list(self, page: int, limit: int) -> Tuple[List[UserRow], int]:
        total = self.db.execute(select(func.count(UserRow.id))).scalar() or 0
        rows = self.db.execute(
            select(UserRow)
            .order_by(UserRow.name, UserRow.id)
            .offset(page_offset(page, limit))
            .limit(limit)
        ).scalars().all()
        return list(rows), total

    def role_counts(self) -> Dict[str, int]:
        rows = self.db.execute(
            select(UserRow.role, func.count(UserRow.id)).group_by(UserRow.role)
        ).all()
        return {role: count for role, count in rows}

    # =====================================================
    # Role extension rows
    # =====================================================

    def get_admin(self, user_id: int) -> Optional[AdminRow]:
        return self.db.get(AdminRow, user_id)

    def add_admin(self, user_id: int) -> AdminRow:
        row = AdminRow(admin_id=user_id)
        self.db.add(row)
        self.db.flush()
        return row

    def delete_admin(self, user_id: int) -> None:
        self.db.execute(delete(AdminRow).where(AdminRow.admin_id == user_id))

    def get_researcher(self, user_id: int) -> Optional[ResearcherRow]:
        return self.db.get(ResearcherRow, user_id)

    def add_researcher(
        self,
        user_id: int,
        affiliation: Optional[str] = None,
        specialization: Optional[str] = None,
    ) -> ResearcherRow:
        row = ResearcherRow(
            researcher_id=user_id,
            affiliation=affiliation,
            specialization=specialization,
            join_date=date.today(),
        )
        self.db.add(row)
        self.db.flush()
        return row

    def delete_researcher(self, user_id: int) -> None:
        self.db.execute(delete(ResearcherRow).where(ResearcherRow.researcher_id == user_id))

    def delete_researcher_activity(self, user_id: int) -> None:
        """Remove search history, reviews and downloads of a researcher"""
        self.db.execute(delete(SearchRow).where(SearchRow.researcher_id == user_id))
        self.db.execute(delete(ReviewRow).where(ReviewRow.researcher_id == user_id))
        self.db.execute(delete(DownloadRow).where(DownloadRow.researcher_id == user_id))

    # =====================================================
    # Helper Methods
    # =====================================================

    def to_model(self, row: UserRow, include_profile: bool = True) -> User:
        profile = None
        if include_profile:
            if row.role == "Admin" and self.get_admin(row.id):
                profile = AdminProfile()
            elif row.role == "Researcher":
                researcher = self.get_researcher(row.id)
                if researcher:
                    profile = ResearcherProfile(
                        affiliation=researcher.affiliation,
                        specialization=researcher.specialization,
                        join_date=researcher.join_date,
                    )

        return User(
            id=row.id,
            name=row.name,
            email=row.email,
            role=row.role,
            created_at=row.created_at,
            profile=profile,
        )
