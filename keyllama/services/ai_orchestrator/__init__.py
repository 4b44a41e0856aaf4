"""
AI Orchestrator Module - remote scoring and chat relay.

Wraps the language-model endpoint behind the Scorer contract used by the
session engine.
"""

from .llm_client import LLMClient
from .scorer import LLMScorer, Scorer, parse_analysis

__all__ = ["LLMClient", "LLMScorer", "Scorer", "parse_analysis"]
