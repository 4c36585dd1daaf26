from sqlalchemy import (
    Column,
    Text,
    String,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import date, datetime


Base = declarative_base()

ROLE_ADMIN = "Admin"
ROLE_RESEARCHER = "Researcher"
ROLES = (ROLE_ADMIN, ROLE_RESEARCHER)


# =====================================================
# Identity
# =====================================================

class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(String(32), nullable=False, default=ROLE_RESEARCHER)

    created_at = Column(DateTime, default=datetime.utcnow)


class AdminRow(Base):
    """Role extension row, exists iff users.role == Admin"""
    __tablename__ = "admins"

    admin_id = Column(Integer, ForeignKey("users.id"), primary_key=True)


class ResearcherRow(Base):
    """Role extension row, exists iff users.role == Researcher"""
    __tablename__ = "researchers"

    researcher_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    affiliation = Column(String(255), nullable=True)
    specialization = Column(String(255), nullable=True)
    join_date = Column(Date, default=date.today)


# =====================================================
# Catalog
# =====================================================

class FieldRow(Base):
    __tablename__ = "fields"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)


class PaperRow(Base):
    __tablename__ = "papers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    abstract = Column(Text, nullable=False)
    publication_date = Column(Date, nullable=False, default=date.today, index=True)
    path = Column(Text, nullable=True)

    field_id = Column(Integer, ForeignKey("fields.id"), nullable=False, index=True)
    admin_id = Column(Integer, ForeignKey("admins.admin_id"), nullable=False, index=True)

    keywords = relationship(
        "PaperKeywordRow",
        order_by="PaperKeywordRow.position",
        viewonly=True,
    )


class AuthorRow(Base):
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    country = Column(String(255), nullable=True)


class AuthorPaperRow(Base):
    __tablename__ = "author_paper"

    author_id = Column(Integer, ForeignKey("authors.id"), primary_key=True)
    paper_id = Column(Integer, ForeignKey("papers.id"), primary_key=True)
    write_date = Column(Date, nullable=True)


class PaperKeywordRow(Base):
    __tablename__ = "paper_keywords"

    paper_id = Column(Integer, ForeignKey("papers.id"), primary_key=True)
    position = Column(Integer, primary_key=True)
    keyword = Column(String(255), nullable=False)


# =====================================================
# Interactions
# =====================================================

class DownloadRow(Base):
    __tablename__ = "downloads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    researcher_id = Column(Integer, ForeignKey("researchers.researcher_id"), nullable=False, index=True)
    paper_id = Column(Integer, ForeignKey("papers.id"), nullable=False, index=True)
    download_date = Column(DateTime, default=datetime.utcnow)


class ReviewRow(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("researcher_id", "paper_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    researcher_id = Column(Integer, ForeignKey("researchers.researcher_id"), nullable=False, index=True)
    paper_id = Column(Integer, ForeignKey("papers.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    review_date = Column(DateTime, default=datetime.utcnow)


class SearchRow(Base):
    """Search history of a researcher"""
    __tablename__ = "searches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    researcher_id = Column(Integer, ForeignKey("researchers.researcher_id"), nullable=False, index=True)
    query = Column(Text, nullable=False)
    searched_at = Column(DateTime, default=datetime.utcnow)


# =====================================================
# Assistant chat
# =====================================================

class ChatSessionRow(Base):
    """Saved assistant conversation"""
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(Text, nullable=False, default="New Chat")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    messages = relationship(
        "ChatMessageRow",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessageRow.id",
    )


class ChatMessageRow(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)

    role = Column(Text, nullable=False)  # user | assistant
    content = Column(Text, nullable=False)
    sources_used = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("ChatSessionRow", back_populates="messages")
