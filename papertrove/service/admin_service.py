from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from papertrove.errors import AppError, UnexpectedError
from papertrove.model.page import Page
from papertrove.model.paper import PaperSubmission, PaperSummary, PaperUpdate, SubmittedPaper
from papertrove.model.user import TokenClaims, User
from papertrove.service.identity_service import IdentityService
from papertrove.service.paper_service import IncomingFile, PaperService
from papertrove.service.statistics_service import StatisticsService

logger = logging.getLogger(__name__)


@contextmanager
def reported_failure(message: str) -> Iterator[None]:
    """
    Re-raise store failures as ``UnexpectedError(message)`` carrying the
    underlying error text; application errors pass through unchanged.
    """
    try:
        yield
    except AppError:
        raise
    except Exception as e:
        logger.exception(message)
        raise UnexpectedError(message, detail=str(e))


class AdminService:
    """
    Admin dashboard operations, delegating to the identity, paper and
    statistics services.
    """

    def __init__(
        self,
        identity: IdentityService,
        papers: PaperService,
        statistics: StatisticsService,
    ):
        self.identity = identity
        self.papers = papers
        self.statistics = statistics

    # --- Papers ---

    def upload_paper(
        self,
        acting: TokenClaims,
        submission: PaperSubmission,
        pdf: Optional[IncomingFile],
    ) -> SubmittedPaper:
        return self.papers.submit(acting, submission, pdf)

    def list_papers(self, page: int, limit: int) -> Page[PaperSummary]:
        return self.papers.list(page, limit)

    def update_paper(self, paper_id: int, update: PaperUpdate) -> int:
        with reported_failure("Failed to update paper"):
            return self.papers.update(paper_id, update)

    def delete_paper(self, paper_id: int) -> None:
        with reported_failure("Failed to delete paper"):
            self.papers.delete(paper_id)

    # --- Users ---

    def list_users(self, page: int, limit: int) -> Tuple[Page[User], Dict[str, int]]:
        return self.identity.list_users(page, limit)

    def create_user(self, name, email, password, role) -> User:
        with reported_failure("Failed to create user"):
            return self.identity.create_user(name, email, password, role)

    def change_role(self, acting: TokenClaims, user_id: int, role: Optional[str]) -> Dict:
        with reported_failure("Failed to update user role"):
            return self.identity.change_role(acting, user_id, role)

    def delete_user(self, acting: TokenClaims, user_id: int) -> None:
        with reported_failure("Failed to delete user"):
            self.identity.delete_user(acting, user_id)

    # --- Statistics ---

    def statistics_dashboard(self) -> Dict:
        return self.statistics.dashboard()
