"""HTTP client for the OpenAI-compatible chat completions endpoint."""

import json
import logging
from typing import AsyncIterator, Dict, List, Optional
import httpx

from app.config.llm import LLMSettings
from app.exceptions import GenerationError

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin wrapper over httpx for streamed and single-shot completions."""

    def __init__(self, settings: LLMSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)

    async def close(self) -> None:
        """Close HTTP client"""
        await self.http_client.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.settings.api_key:
            raise GenerationError("OPEN_ROUTER_API_KEY environment variable is not set")
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "HTTP-Referer": self.settings.site_url,
            "X-Title": self.settings.site_name,
            "Content-Type": "application/json",
        }

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Request a single, non-streamed completion.

        Args:
            messages: Ordered role/content dicts
            model: Model id, defaults to the chat model
            temperature: Sampling temperature
            max_tokens: Completion token budget

        Returns:
            str: Content of the first choice

        Raises:
            GenerationError: On transport errors, non-2xx status or a malformed body
        """
        payload = {"model": model or self.settings.chat_model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        logger.debug(f"Requesting completion from model: {payload['model']}")
        try:
            response = await self.http_client.post(
                self.settings.api_url, headers=self._headers(), json=payload
            )
            response.raise_for_status()
            response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Completion API returned {e.response.status_code}")
            raise GenerationError(f"Completion API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Completion API HTTP error: {str(e)}")
            raise GenerationError(f"Failed to reach completion API: {str(e)}") from e
        except ValueError as e:
            raise GenerationError("Completion API returned invalid JSON") from e

        try:
            return response_data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Invalid response format from completion API: {response_data}")
            raise GenerationError("Invalid response format from completion API") from e

    async def stream(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """
        Stream a completion as text chunks.

        Parses the server-sent events of the completions API and yields the
        delta content of each event until ``[DONE]``.

        Raises:
            GenerationError: On transport errors or non-2xx status
        """
        payload = {
            "model": model or self.settings.chat_model,
            "messages": messages,
            "stream": True,
        }
        logger.info(f"Streaming completion from model: {payload['model']} ({len(messages)} messages)")
        try:
            async with self.http_client.stream(
                "POST", self.settings.api_url, headers=self._headers(), json=payload
            ) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == "[DONE]":
                        break
                    try:
                        event = json.loads(data)
                        chunk = event["choices"][0].get("delta", {}).get("content")
                    except (ValueError, KeyError, IndexError, AttributeError):
                        logger.debug(f"Skipping unparseable stream event: {data[:100]}")
                        continue
                    if chunk:
                        yield chunk
        except httpx.HTTPStatusError as e:
            logger.warning(f"Completion API returned {e.response.status_code} while streaming")
            raise GenerationError(f"Completion API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Completion stream HTTP error: {str(e)}")
            raise GenerationError(f"Failed to stream from completion API: {str(e)}") from e
