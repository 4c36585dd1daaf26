from __future__ import annotations

from papertrove.database.author_repository import AuthorRepository
from papertrove.database.db.session import Database
from papertrove.database.paper_repository import PaperRepository
from papertrove.errors import NotFoundError
from papertrove.model.page import Page
from papertrove.model.paper import Author, AuthorDetail


class AuthorService:

    def __init__(self, database: Database):
        self.database = database

    def list(self, page: int, limit: int) -> Page[Author]:
        with self.database.session() as db:
            items, total = AuthorRepository(db).list(page, limit)
        return Page[Author](items=items, page=page, limit=limit, total=total)

    def get(self, author_id: int) -> AuthorDetail:
        """Author with the papers they are credited on"""
        with self.database.session() as db:
            authors = AuthorRepository(db)
            row = authors.get(author_id)
            if not row:
                raise NotFoundError("Author not found")

            papers = PaperRepository(db).list_by_author(author_id)
            return AuthorDetail(
                **authors.to_model(row, paper_count=len(papers)).model_dump(),
                papers=papers,
            )
