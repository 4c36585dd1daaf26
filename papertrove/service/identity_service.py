# papertrove/service/identity_service.py

"""
Identity Service

功能：
- 注册 / 登录 / 个人资料
- 角色变更与用户删除（管理员操作）

Role invariant: every user owns exactly one extension row matching its role
(admins / researchers). ``reconcile_role_rows`` is the only place that
creates or removes those rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from papertrove.config import AuthConfig
from papertrove.database.chat_repository import ChatRepository
from papertrove.database.db.models import ROLE_ADMIN, ROLE_RESEARCHER, ROLES
from papertrove.database.db.session import Database
from papertrove.database.paper_repository import PaperRepository
from papertrove.database.user_repository import UserRepository
from papertrove.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from papertrove.model.page import Page
from papertrove.model.user import TokenClaims, User
from papertrove.service.security import (
    MAX_PASSWORD_BYTES,
    create_access_token,
    hash_password,
    verify_password,
)
from papertrove.service.storage_service import PaperStorage

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    token: str
    user: User


def validate_role(role: Optional[str]) -> str:
    if role not in ROLES:
        raise ValidationError("Invalid role. Must be Admin or Researcher")
    return role


def reconcile_role_rows(
    users: UserRepository,
    user_id: int,
    role: str,
    affiliation: Optional[str] = None,
    specialization: Optional[str] = None,
) -> None:
    """
    Make the extension rows of ``user_id`` match ``role``.

    The row for the new role is created first, the other role's row is
    removed afterwards, so the user never has zero extension rows.
    """
    if role == ROLE_ADMIN:
        if not users.get_admin(user_id):
            users.add_admin(user_id)
        # searches, reviews and downloads reference the researcher row
        users.delete_researcher_activity(user_id)
        users.delete_researcher(user_id)
    else:
        if not users.get_researcher(user_id):
            users.add_researcher(user_id, affiliation, specialization)
        users.delete_admin(user_id)


class IdentityService:

    def __init__(self, database: Database, auth: AuthConfig, storage: PaperStorage):
        self.database = database
        self.auth = auth
        self.storage = storage

    # =====================================================
    # Register / Login
    # =====================================================

    def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Optional[str] = None,
        affiliation: Optional[str] = None,
        specialization: Optional[str] = None,
    ) -> User:
        """
        Create a user and its role extension row.

        Args:
            role: Admin | Researcher, defaults to Researcher

        Raises:
            ValidationError: missing fields, short password or unknown role
            ConflictError: email already registered
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")

        if len(password) < self.auth.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.auth.password_min_length} characters"
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        role = validate_role(role or ROLE_RESEARCHER)

        with self.database.transaction() as db:
            users = UserRepository(db)
            if users.email_exists(email):
                raise ConflictError("Email already registered")

            row = users.add(
                name=name,
                email=email,
                password_hash=hash_password(password, self.auth.bcrypt_rounds),
                role=role,
            )
            reconcile_role_rows(users, row.id, role, affiliation, specialization)
            user = users.to_model(row)

        logger.info(f"User registered: {user.email} ({user.role})")
        return user

    def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        with self.database.session() as db:
            users = UserRepository(db)
            row = users.get_by_email(email.strip())
            if not row:
                raise NotFoundError("User not found. Please check your email or sign up.")

            if not verify_password(password, row.password):
                raise AuthError("Incorrect password. Please try again.")

            user = users.to_model(row, include_profile=False)

        token = create_access_token(
            TokenClaims(user_id=user.id, email=user.email, name=user.name, role=user.role),
            self.auth,
        )
        logger.info(f"User logged in: {user.email}")
        return LoginResult(token=token, user=user)

    # =====================================================
    # Profile
    # =====================================================

    def current_claims(self, claims: TokenClaims) -> TokenClaims:
        """
        Token claims refreshed from the stored user, so a role change or
        deletion takes effect before the token expires.

        Raises:
            NotFoundError: the user no longer exists
        """
        with self.database.session() as db:
            row = UserRepository(db).get(claims.user_id)
            if not row:
                raise NotFoundError("User not found")
            return TokenClaims(user_id=row.id, email=row.email, name=row.name, role=row.role)

    def get_profile(self, claims: TokenClaims) -> User:
        with self.database.session() as db:
            users = UserRepository(db)
            row = users.get(claims.user_id)
            if not row:
                raise NotFoundError("User not found")
            return users.to_model(row)

    def update_profile(
        self,
        claims: TokenClaims,
        name: Optional[str] = None,
        affiliation: Optional[str] = None,
        specialization: Optional[str] = None,
    ) -> User:
        """Update display name and, for researchers, affiliation/specialization"""
        with self.database.transaction() as db:
            users = UserRepository(db)
            row = users.get(claims.user_id)
            if not row:
                raise NotFoundError("User not found")

            if name is not None:
                if not name.strip():
                    raise ValidationError("Name cannot be empty")
                row.name = name.strip()

            researcher = users.get_researcher(row.id)
            if researcher:
                if affiliation is not None:
                    researcher.affiliation = affiliation or None
                if specialization is not None:
                    researcher.specialization = specialization or None

            db.flush()
            return users.to_model(row)

    # =====================================================
    # Admin operations
    # =====================================================

    def list_users(self, page: int, limit: int) -> Tuple[Page[User], Dict[str, int]]:
        with self.database.session() as db:
            users = UserRepository(db)
            rows, total = users.list(page, limit)
            items: List[User] = [users.to_model(r, include_profile=False) for r in rows]
            return Page[User](items=items, page=page, limit=limit, total=total), users.role_counts()

    def create_user(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Optional[str],
    ) -> User:
        """Admin-created account; the role must be given explicitly"""
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        if len(password) < self.auth.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.auth.password_min_length} characters"
            )
        validate_role(role)
        return self.register(name, email, password, role=role)

    def change_role(self, acting: TokenClaims, target_user_id: int, new_role: Optional[str]) -> Dict:
        """
        Returns:
            {"user_id", "previous_role", "new_role", "changed"}
        """
        validate_role(new_role)

        if target_user_id == acting.user_id:
            raise ForbiddenError("Cannot change your own role")

        with self.database.transaction() as db:
            users = UserRepository(db)
            row = users.get(target_user_id)
            if not row:
                raise NotFoundError("User not found")

            previous_role = row.role
            if previous_role == new_role:
                return {
                    "user_id": row.id,
                    "previous_role": previous_role,
                    "new_role": new_role,
                    "changed": False,
                }

            if previous_role == ROLE_ADMIN and PaperRepository(db).list_by_admin(row.id):
                raise ConflictError("Admin still owns uploaded papers")

            row.role = new_role
            db.flush()
            reconcile_role_rows(users, row.id, new_role)

        logger.info(
            f"Role changed by {acting.email}: user {target_user_id} {previous_role} -> {new_role}"
        )
        return {
            "user_id": target_user_id,
            "previous_role": previous_role,
            "new_role": new_role,
            "changed": True,
        }

    def delete_user(self, acting: TokenClaims, target_user_id: int) -> None:
        """
        Delete a user and everything that depends on it.

        Researcher: searches, reviews, downloads, researcher row.
        Admin: every uploaded paper (with its dependents and file), admin row.
        Both: chat sessions, then the user row.
        """
        if target_user_id < 1:
            raise ValidationError("Invalid user ID")

        if target_user_id == acting.user_id:
            raise ForbiddenError("Cannot delete your own account")

        removed_files: List[str] = []
        with self.database.transaction() as db:
            users = UserRepository(db)
            row = users.get(target_user_id)
            if not row:
                raise NotFoundError("User not found")

            # extension rows are removed whatever the role says
            users.delete_researcher_activity(row.id)
            users.delete_researcher(row.id)

            papers = PaperRepository(db)
            for paper in papers.list_by_admin(row.id):
                if paper.path:
                    removed_files.append(paper.path)
                papers.delete_cascade(paper.id)
            users.delete_admin(row.id)

            ChatRepository(db).delete_by_user(row.id)
            users.delete(row.id)

        for path in removed_files:
            self.storage.remove_public(path)

        logger.info(
            f"User {target_user_id} deleted by {acting.email} ({len(removed_files)} papers removed)"
        )
