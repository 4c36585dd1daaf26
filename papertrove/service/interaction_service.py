from __future__ import annotations

import logging
from typing import Dict, List, Optional

from papertrove.database.db.models import ROLE_RESEARCHER
from papertrove.database.db.session import Database
from papertrove.database.interaction_repository import InteractionRepository
from papertrove.database.paper_repository import PaperRepository
from papertrove.database.user_repository import UserRepository
from papertrove.errors import ForbiddenError, NotFoundError, ValidationError
from papertrove.model.paper import Review
from papertrove.model.user import TokenClaims

logger = logging.getLogger(__name__)


class InteractionService:
    """Downloads and reviews"""

    def __init__(self, database: Database):
        self.database = database

    def record_download(self, claims: TokenClaims, paper_id: int) -> Dict:
        """
        Returns the stored path of the paper. Downloads by researchers are
        recorded; admins download without a record.
        """
        with self.database.transaction() as db:
            paper = PaperRepository(db).get(paper_id)
            if not paper:
                raise NotFoundError("Paper not found")

            recorded = False
            if claims.role == ROLE_RESEARCHER and UserRepository(db).get_researcher(claims.user_id):
                InteractionRepository(db).add_download(claims.user_id, paper_id)
                recorded = True

            return {"paper_id": paper.id, "title": paper.title, "path": paper.path, "recorded": recorded}

    def add_review(
        self,
        claims: TokenClaims,
        paper_id: Optional[int],
        rating: Optional[int],
        comment: Optional[str] = None,
    ) -> Review:
        if not paper_id or rating is None:
            raise ValidationError("Paper and rating are required")
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        if claims.role != ROLE_RESEARCHER:
            raise ForbiddenError("Only researchers can review papers")

        with self.database.transaction() as db:
            if not UserRepository(db).get_researcher(claims.user_id):
                raise ForbiddenError("Only researchers can review papers")
            if not PaperRepository(db).get(paper_id):
                raise NotFoundError("Paper not found")

            row = InteractionRepository(db).upsert_review(
                claims.user_id, paper_id, rating, (comment or "").strip() or None
            )
            review = InteractionRepository.to_review(row, claims.name)

        logger.info(f"Review saved: paper #{paper_id} by {claims.email} ({rating}/5)")
        return review

    def list_reviews(self, paper_id: int) -> List[Review]:
        with self.database.session() as db:
            if not PaperRepository(db).get(paper_id):
                raise NotFoundError("Paper not found")
            return InteractionRepository(db).list_reviews(paper_id)
