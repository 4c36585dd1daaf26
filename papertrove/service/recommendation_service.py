# papertrove/service/recommendation_service.py

"""
Paper recommendations

- recommend: rank papers by term overlap with a free-text request
- for_you:   papers from the fields a researcher already downloaded/reviewed

Scoring is lexical; an LLM (if configured) only adds a short explanation.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from papertrove.database.db.session import Database
from papertrove.database.interaction_repository import InteractionRepository
from papertrove.database.paper_repository import PaperRepository
from papertrove.errors import ValidationError
from papertrove.model.user import TokenClaims
from papertrove.service.llm_service import LLMClient

_TOKEN = re.compile(r"[a-z0-9]+")

STOPWORDS = {
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in",
    "into", "is", "it", "of", "on", "or", "that", "the", "to", "with",
}

# title hits count more than keyword hits, keyword hits more than abstract hits
TITLE_WEIGHT = 3.0
KEYWORD_WEIGHT = 2.0
ABSTRACT_WEIGHT = 1.0


def tokenize(text: Optional[str]) -> List[str]:
    return [t for t in _TOKEN.findall((text or "").lower()) if t not in STOPWORDS and len(t) > 1]


def score_paper(terms: List[str], title: str, abstract: str, keywords: List[str]) -> float:
    if not terms:
        return 0.0
    title_tokens = set(tokenize(title))
    abstract_tokens = set(tokenize(abstract))
    keyword_tokens = set(tokenize(" ".join(keywords)))

    score = 0.0
    for term in set(terms):
        if term in title_tokens:
            score += TITLE_WEIGHT
        if term in keyword_tokens:
            score += KEYWORD_WEIGHT
        if term in abstract_tokens:
            score += ABSTRACT_WEIGHT
    return score


class RecommendationService:

    def __init__(self, database: Database, llm: LLMClient):
        self.database = database
        self.llm = llm

    def recommend(self, query: Optional[str], limit: int = 5) -> Dict:
        terms = tokenize(query)
        if not terms:
            raise ValidationError("A descriptive query is required")

        with self.database.session() as db:
            scored = []
            for row, keywords in PaperRepository(db).all_with_keywords():
                score = score_paper(terms, row.title, row.abstract, keywords)
                if score > 0:
                    scored.append((score, row, keywords))

        scored.sort(key=lambda item: (-item[0], -item[1].id))
        top = scored[:limit]

        recommendations = [
            {
                "paper_id": row.id,
                "title": row.title,
                "publication_date": row.publication_date,
                "path": row.path,
                "keywords": keywords,
                "score": round(score, 2),
            }
            for score, row, keywords in top
        ]
        return {
            "query": query,
            "recommendations": recommendations,
            "explanation": self.llm.explain_recommendations(query, [r["title"] for r in recommendations]),
        }

    def for_you(self, claims: TokenClaims, limit: int = 5) -> Dict:
        """
        Unseen papers from fields the user interacted with; most recent
        papers when there is no history.
        """
        with self.database.session() as db:
            interactions = InteractionRepository(db)
            seen = interactions.seen_paper_ids(claims.user_id)
            fields = interactions.seen_field_ids(claims.user_id)

            candidates = [
                row for row, _ in PaperRepository(db).all_with_keywords()
                if row.id not in seen
            ]

        based_on_history = bool(fields)
        if based_on_history:
            preferred = [row for row in candidates if row.field_id in fields]
            candidates = preferred or candidates

        return {
            "based_on_history": based_on_history,
            "recommendations": [
                {
                    "paper_id": row.id,
                    "title": row.title,
                    "publication_date": row.publication_date,
                    "field_id": row.field_id,
                    "path": row.path,
                }
                for row in candidates[:limit]
            ],
        }
