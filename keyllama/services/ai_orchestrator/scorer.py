"""
Scorer contract and its LLM-backed implementation.

A scorer is any async callable taking prompt text and returning the raw reply.
The tracker treats it as an opaque, possibly-failing remote call.
"""

import json
import logging
import re
from typing import Awaitable, Callable, Optional

from ..session_engine.models import HumanLikelihoodAnalysis
from .llm_client import LLMClient, DEFAULT_MODEL, DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

Scorer = Callable[[str], Awaitable[str]]

# Greedy: first "{" to last "}" in the reply
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_analysis(reply: str) -> HumanLikelihoodAnalysis:
    """
    Extract and validate the analysis object from a free-form reply.

    Raises:
        ValueError: If the reply holds no JSON object
        json.JSONDecodeError: If the extracted text is not valid JSON
        pydantic.ValidationError: If the object does not match the contract
    """
    match = _JSON_OBJECT.search(reply or "")
    if not match:
        raise ValueError("No JSON found in LLM response")
    return HumanLikelihoodAnalysis.model_validate(json.loads(match.group(0)))


class LLMScorer:
    """
    Scorer backed by LLMClient.

    The client is built on first use, so a missing API key fails inside the
    scoring call (where the tracker recovers it) rather than at startup.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        llm_client: Optional[LLMClient] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._llm = llm_client

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = LLMClient(api_key=self._api_key, model=self._model, base_url=self._base_url)
        return self._llm

    async def __call__(self, prompt: str) -> str:
        return await self.llm.complete(user_prompt=prompt)
