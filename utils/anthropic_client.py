"""
Anthropic API client utilities for Responsive Tester.

Wraps the Claude Messages API as a plain text-completion call. Each
user-triggered action makes exactly one attempt: SDK retries are disabled
and failures are surfaced with their error kind.
"""

import logging
from typing import Optional

import anthropic

from errors import ResponseParseError, UpstreamFailure, UpstreamUnavailable

logger = logging.getLogger(__name__)


class CompletionClient:
    """Text completion against the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Get or create the Anthropic client instance."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: int,
    ) -> str:
        """
        Send one system + user prompt pair and return the response text.

        Raises:
            UpstreamUnavailable: no API key configured
            UpstreamFailure: the API call failed
            ResponseParseError: the response carried no text
        """
        if not self.configured:
            raise UpstreamUnavailable(
                "AI analysis is currently unavailable. Anthropic API key is not configured."
            )

        client = self._get_client()
        logger.info(f"🤖 Sending completion request ({self.model}, max_tokens={max_tokens})")

        try:
            message = await client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=self.temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            logger.error(f"❌ Anthropic API error ({e.status_code}): {str(e)}")
            raise UpstreamFailure(
                f"Completion service error: {str(e)}",
                details={"status": e.status_code},
            )
        except anthropic.APIError as e:
            logger.error(f"❌ Anthropic API failure: {str(e)}")
            raise UpstreamFailure(f"Completion service error: {str(e)}")

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise ResponseParseError("Completion service returned an empty response")
        return text

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
