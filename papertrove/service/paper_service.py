# papertrove/service/paper_service.py

"""
Paper Service

功能：
- 上传论文（PDF + 元数据 + 作者 + 关键词），单事务写入
- 管理员分页列表 / 修改 / 级联删除
- 公共浏览、详情、搜索
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import BinaryIO, List, Optional

from papertrove.database.author_repository import AuthorRepository
from papertrove.database.db.models import ROLE_ADMIN, ROLE_RESEARCHER
from papertrove.database.db.session import Database
from papertrove.database.field_repository import FieldRepository
from papertrove.database.interaction_repository import InteractionRepository
from papertrove.database.paper_repository import PaperRepository
from papertrove.database.user_repository import UserRepository
from papertrove.errors import (
    AppError,
    ForbiddenError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from papertrove.model.page import Page
from papertrove.model.paper import (
    PaperDetail,
    PaperSubmission,
    PaperSummary,
    PaperUpdate,
    SubmittedPaper,
)
from papertrove.model.user import TokenClaims
from papertrove.service.identity_service import reconcile_role_rows
from papertrove.service.storage_service import PaperStorage

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """An uploaded file as received at the HTTP boundary"""
    filename: Optional[str]
    content_type: Optional[str]
    stream: BinaryIO


def clean_keywords(keywords: List[str]) -> List[str]:
    return [k.strip() for k in keywords if k and k.strip()]


class PaperService:

    def __init__(self, database: Database, storage: PaperStorage):
        self.database = database
        self.storage = storage

    # =====================================================
    # Submit
    # =====================================================

    def submit(
        self,
        acting: TokenClaims,
        submission: PaperSubmission,
        pdf: Optional[IncomingFile],
    ) -> SubmittedPaper:
        """
        Store the PDF and create the paper with its authors and keywords.

        Database writes happen in one transaction. If anything fails after
        the file was written, the transaction is rolled back and the file
        removed.

        Raises:
            ValidationError: missing title/abstract/field/PDF, non-PDF upload,
                oversized file or unknown field
            ForbiddenError: acting user is no longer an admin
            UnexpectedError: store failure
        """
        if pdf is not None:
            self.storage.check_content_type(pdf.content_type)

        if not submission.title or not submission.abstract or not submission.field_id:
            raise ValidationError("Title, abstract, and field are required")

        if pdf is None:
            raise ValidationError("PDF file is required")

        stored = self.storage.save(pdf.stream, pdf.filename)

        try:
            paper_id = self._insert(acting, submission, stored.public_path)
        except AppError:
            self.storage.remove(stored.disk_path)
            raise
        except Exception as e:
            self.storage.remove(stored.disk_path)
            logger.exception(f"Paper upload failed: {submission.title}")
            raise UnexpectedError("Failed to upload paper", detail=str(e))

        logger.info(f"Paper uploaded: #{paper_id} {submission.title!r} by {acting.email}")
        return SubmittedPaper(paper_id=paper_id, title=submission.title, path=stored.public_path)

    def _insert(self, acting: TokenClaims, submission: PaperSubmission, path: str) -> int:
        publication_date = submission.publication_date or date.today()

        with self.database.transaction() as db:
            users = UserRepository(db)
            user = users.get(acting.user_id)
            if not user:
                raise NotFoundError("User not found")
            if user.role != ROLE_ADMIN:
                raise ForbiddenError("Admin access required")
            # self-heal admins created before their extension row existed
            reconcile_role_rows(users, user.id, ROLE_ADMIN)

            if not FieldRepository(db).get(submission.field_id):
                raise ValidationError("Field not found")

            papers = PaperRepository(db)
            paper = papers.add(
                title=submission.title,
                abstract=submission.abstract,
                publication_date=publication_date,
                path=path,
                field_id=submission.field_id,
                admin_id=user.id,
            )

            authors = AuthorRepository(db)
            linked = set()
            for entry in submission.authors:
                if not entry.is_well_formed():
                    logger.warning(f"Skipping incomplete author entry on paper #{paper.id}: {entry.email!r}")
                    continue
                if entry.email in linked:
                    continue
                author, created = authors.get_or_create(
                    email=entry.email,
                    first_name=entry.first_name,
                    last_name=entry.last_name,
                    country=entry.country,
                )
                papers.link_author(author.id, paper.id, publication_date)
                linked.add(entry.email)
                if created:
                    logger.info(f"Author created: {author.email}")

            keywords = clean_keywords(submission.keywords)
            if keywords:
                papers.add_keywords(paper.id, keywords)

            return paper.id

    # =====================================================
    # Admin list / update / delete
    # =====================================================

    def list(self, page: int, limit: int, field_id: Optional[int] = None) -> Page[PaperSummary]:
        with self.database.session() as db:
            items, total = PaperRepository(db).list(page=page, limit=limit, field_id=field_id)
        return Page[PaperSummary](items=items, page=page, limit=limit, total=total)

    def update(self, paper_id: int, update: PaperUpdate) -> int:
        """Overwrite title, abstract, publication date and field"""
        with self.database.transaction() as db:
            papers = PaperRepository(db)
            row = papers.get(paper_id)
            if not row:
                raise NotFoundError("Paper not found")
            if not FieldRepository(db).get(update.field_id):
                raise ValidationError("Field not found")

            papers.update(
                row,
                title=update.title,
                abstract=update.abstract,
                publication_date=update.publication_date,
                field_id=update.field_id,
            )

        logger.info(f"Paper updated: #{paper_id}")
        return paper_id

    def delete(self, paper_id: int) -> None:
        """
        Delete keywords, author links, downloads, reviews and the paper,
        then the stored file (a missing file is tolerated).
        """
        with self.database.transaction() as db:
            papers = PaperRepository(db)
            row = papers.get(paper_id)
            if not row:
                raise NotFoundError("Paper not found")
            path = row.path
            papers.delete_cascade(paper_id)

        self.storage.remove_public(path)
        logger.info(f"Paper deleted: #{paper_id}")

    # =====================================================
    # Public browsing
    # =====================================================

    def get(self, paper_id: int) -> PaperDetail:
        with self.database.session() as db:
            detail = PaperRepository(db).get_detail(paper_id)
        if not detail:
            raise NotFoundError("Paper not found")
        return detail

    def search(
        self,
        query: str,
        page: int,
        limit: int,
        claims: Optional[TokenClaims] = None,
    ) -> Page[PaperSummary]:
        """Search papers; searches by researchers are kept as history"""
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query is required")

        with self.database.transaction() as db:
            items, total = PaperRepository(db).search(query, page=page, limit=limit)
            if claims and claims.role == ROLE_RESEARCHER:
                if UserRepository(db).get_researcher(claims.user_id):
                    InteractionRepository(db).add_search(claims.user_id, query)

        return Page[PaperSummary](items=items, page=page, limit=limit, total=total)
