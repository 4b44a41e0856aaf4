"""
Async client for OpenAI-compatible chat completion APIs.
Defaults to Gemini through its OpenAI compatibility layer.
"""

import os
import logging
from typing import Optional
from openai import AsyncOpenAI
from openai import APIError, RateLimitError, APITimeoutError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class LLMClient:
    """
    Async wrapper for an OpenAI-compatible endpoint with token budget management.

    Design principles:
    - Fast: Async so edit ingestion keeps running while a request is in flight
    - Resilient: Basic retry logic for transient failures
    - Bounded: Every request carries its own timeout
    - Observable: Comprehensive logging
    """

    # Token limits (conservative for cost management)
    MAX_INPUT_TOKENS = 1000   # Session summaries are small
    MAX_OUTPUT_TOKENS = 500   # Score + up to 5 reasons, or a chat reply
    REQUEST_TIMEOUT = 30.0    # seconds

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
    ):
        """
        Initialize client.

        Args:
            api_key: API key (defaults to GEMINI_API_KEY env var)
            model: Model to use
            base_url: OpenAI-compatible endpoint

        Raises:
            ValueError: If no API key is available
        """
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "API key required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.client = AsyncOpenAI(base_url=base_url, api_key=self.api_key)
        self.model = model

        logger.info(f"LLMClient initialized with model: {model}")

    async def complete(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_retries: int = 2,
    ) -> str:
        """
        Generate completion with token management and retry logic.

        Args:
            user_prompt: Prompt text sent as the user message
            system_prompt: Optional system instructions
            temperature: Sampling temperature (low, replies should be parseable)
            max_retries: Number of retry attempts on transient failure

        Returns:
            Generated response text

        Raises:
            RuntimeError: If the request fails or all retries are exhausted
        """
        # Validate token budget (rough estimation: ~4 chars per token)
        estimated_input_tokens = (len(system_prompt or "") + len(user_prompt)) // 4
        if estimated_input_tokens > self.MAX_INPUT_TOKENS:
            logger.warning(
                f"Input may exceed token budget: ~{estimated_input_tokens} tokens "
                f"(limit: {self.MAX_INPUT_TOKENS})"
            )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        for attempt in range(max_retries + 1):
            try:
                logger.debug(f"Requesting completion (attempt {attempt + 1}/{max_retries + 1})")

                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=self.MAX_OUTPUT_TOKENS,
                    timeout=self.REQUEST_TIMEOUT,
                )

                content = response.choices[0].message.content
                if not content:
                    raise RuntimeError("Empty completion returned")

                # Log token usage for monitoring
                usage = response.usage
                if usage is not None:
                    logger.info(
                        f"Completion successful - Tokens: {usage.prompt_tokens} in, "
                        f"{usage.completion_tokens} out, {usage.total_tokens} total"
                    )

                return content

            except RateLimitError as e:
                logger.warning(f"Rate limit hit (attempt {attempt + 1}): {e}")
                if attempt == max_retries:
                    raise RuntimeError("Rate limit exceeded. Try again later.")

            except APITimeoutError as e:
                logger.warning(f"Timeout (attempt {attempt + 1}): {e}")
                if attempt == max_retries:
                    raise RuntimeError("Request timed out. Try again later.")

            except APIError as e:
                logger.error(f"API error: {e}")
                raise RuntimeError(f"AI service error: {str(e)}")

            except RuntimeError:
                raise

            except Exception as e:
                logger.error(f"Unexpected error in LLM completion: {e}")
                raise RuntimeError(f"Failed to generate response: {str(e)}")

        raise RuntimeError("Failed to get completion after all retries")
