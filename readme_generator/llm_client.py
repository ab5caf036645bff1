"""
Gemini LLM client.

Uses the OpenAI-compatible SDK against Gemini's OpenAI endpoint.
Returns the generated Markdown untouched.
"""

from __future__ import annotations

import logging

from openai import APIStatusError, AsyncOpenAI

from readme_generator.settings import settings

logger = logging.getLogger("readme_generator.llm_client")


class GenerationError(Exception):
    """Base for failures after the inference API answered."""


class NoResponseError(GenerationError):
    """The API answered without any candidate."""

    def __init__(self) -> None:
        super().__init__("AI generation failed: No response received.")


class ContentBlockedError(GenerationError):
    """A candidate came back but its text is unavailable."""

    def __init__(self, block_reason: str | None, finish_reason: str | None) -> None:
        self.block_reason = block_reason
        self.finish_reason = finish_reason
        details = []
        if block_reason:
            details.append(f"block reason: {block_reason}")
        if finish_reason:
            details.append(f"finish reason: {finish_reason}")
        suffix = f" ({'; '.join(details)})" if details else ""
        super().__init__(f"AI response error: Failed to extract content{suffix}.")


def describe_api_error(exc: APIStatusError) -> str:
    """Status code plus the API's short message; never the raw body."""
    body = exc.body
    # Gemini sometimes wraps the error object in a one-element list
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        body = body["error"]
    message = body.get("message") if isinstance(body, dict) else None
    if isinstance(message, str) and message:
        return f"Inference API returned {exc.status_code}: {message}"
    return f"Inference API returned {exc.status_code}."


class LLMClient:
    """Async wrapper around the chat completions API."""

    def __init__(self) -> None:
        self._client = AsyncOpenAI(
            base_url=settings.llm_base_url,
            api_key=settings.google_api_key,
            max_retries=0,
        )
        self._model = settings.llm_model

    async def generate_readme(self, prompt: str) -> str:
        """Send the prompt as a single user message and return the text.

        Raises ``NoResponseError`` or ``ContentBlockedError``; errors from the
        SDK itself (auth, HTTP status, connection) propagate unchanged.
        """
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        return self.extract_text(response)

    @staticmethod
    def extract_text(response) -> str:
        if response is None or not getattr(response, "choices", None):
            logger.error("AI generation failed - no response object")
            raise NoResponseError()

        choice = response.choices[0]
        message = choice.message
        content = message.content if message is not None else None
        if not content:
            refusal = getattr(message, "refusal", None) if message is not None else None
            logger.error(
                "Failed extracting text from AI response (refusal=%s, finish_reason=%s)",
                refusal, choice.finish_reason,
            )
            raise ContentBlockedError(refusal, choice.finish_reason)

        logger.debug("LLM response (first 500 chars): %s", content[:500])
        return content

    async def aclose(self) -> None:
        await self._client.close()
