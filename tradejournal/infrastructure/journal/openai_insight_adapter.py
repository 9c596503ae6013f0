"""
Adapter: OpenAI chat completions for trading insights.

Implements InsightModelPort.
Renders the ``trading_insights`` prompt and returns the raw model text;
parsing and merging happen in the domain layer.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from tradejournal.domain.journal.errors import InsightGenerationError
from tradejournal.domain.journal.ports import InsightModelPort
from tradejournal.infrastructure.journal.prompt_loader import PromptLoader, get_prompt_loader

logger = logging.getLogger(__name__)

PROMPT_NAME = "trading_insights"


class OpenAIInsightAdapter(InsightModelPort):
    """Insight model backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        temperature: float = 0.4,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        prompts: Optional[PromptLoader] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._prompts = prompts or get_prompt_loader()
        self._client = client

    def _get_client(self) -> OpenAI:
        # Created on first use so the app starts without a key.
        if self._client is None:
            if not self._api_key:
                raise InsightGenerationError("OPENAI_API_KEY is not configured")
            self._client = OpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    def generate(self, variables: dict[str, str]) -> str:
        client = self._get_client()
        messages = [
            {"role": "system", "content": self._prompts.get_system_prompt(PROMPT_NAME)},
            {"role": "user", "content": self._prompts.render_user_prompt(PROMPT_NAME, variables)},
        ]
        try:
            completion = client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except OpenAIError as exc:
            logger.error("Insight generation failed: %s", exc)
            raise InsightGenerationError("Failed to generate AI insights") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise InsightGenerationError("No response from AI")
        logger.info("Insight model returned %d chars", len(content))
        return content
