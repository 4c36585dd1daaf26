"""
llm_service.py

提供：
- 单轮 LLM 调用 (LiteLLM)
- 推荐理由生成

依赖：
    pip install litellm
"""

from __future__ import annotations

import logging
from typing import List, Optional

from litellm import completion

from papertrove.config import LLMConfig

logger = logging.getLogger(__name__)


class LLMClient:

    def __init__(self, config: LLMConfig):
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _params(self) -> dict:
        params = {
            "model": self.config.model,
            "timeout": self.config.timeout,
        }
        if self.config.api_key:
            params["api_key"] = self.config.api_key
        if self.config.api_base:
            params["api_base"] = self.config.api_base
        return params

    def completion(self, prompt: str) -> str:
        """单轮对话"""
        resp = completion(
            messages=[{"role": "user", "content": prompt}],
            **self._params(),
        )
        return resp.choices[0].message.content

    def explain_recommendations(self, query: str, titles: List[str]) -> Optional[str]:
        """
        One or two sentences on why these papers match the query.

        Returns None when disabled or when the call fails.
        """
        if not self.enabled or not titles:
            return None

        listing = "\n".join(f"- {t}" for t in titles)
        prompt = f"""
You are a research librarian. In at most two sentences, explain why the
following papers are relevant to the request. Do not invent content.

Request:
{query}

Papers:
{listing}
"""
        try:
            return self.completion(prompt.strip()).strip()
        except Exception as e:
            logger.warning(f"LLM explanation failed: {e}")
            return None
