from __future__ import annotations

from typing import Dict

from papertrove.database.db.session import Database
from papertrove.database.statistics_repository import StatisticsRepository
from papertrove.database.user_repository import UserRepository


class StatisticsService:

    def __init__(self, database: Database):
        self.database = database

    def overview(self) -> Dict:
        with self.database.session() as db:
            return StatisticsRepository(db).overview()

    def papers(self, recent: int = 5) -> Dict:
        with self.database.session() as db:
            stats = StatisticsRepository(db)
            return {
                "total_papers": stats.overview()["total_papers"],
                "papers_by_field": stats.papers_by_field(),
                "recent_papers": stats.recent_papers(recent),
            }

    def users(self) -> Dict:
        with self.database.session() as db:
            return {
                "total_users": StatisticsRepository(db).total_users(),
                "role_counts": UserRepository(db).role_counts(),
            }

    def dashboard(self) -> Dict:
        """Everything the admin dashboard shows"""
        return {
            "overview": self.overview(),
            "papers": self.papers(),
            "users": self.users(),
        }
