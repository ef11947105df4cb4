"""
Completion Client
Chat-completion calls against an OpenAI-compatible endpoint
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from webcraft.config.settings import Settings
from webcraft.errors import ConfigurationError, RemoteCallFailure
from webcraft.llm.prompts import SYSTEM_PROMPT
from webcraft.tools.utils import mask_secret

logger = logging.getLogger(__name__)


class CompletionClient:
    """
    Sends one prompt (plus prior turns) to the completion service

    The credential comes from the injected settings, so a missing key is
    reported when the client is built rather than on the first call.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not settings.is_configured:
            raise ConfigurationError("OpenAI API key is not configured (set OPENAI_API_KEY)")

        self.settings = settings
        self.transport = transport
        logger.info(f"Completion client ready: model={settings.model}, key={mask_secret(settings.openai_api_key)}")

    def build_payload(self, prompt: str, history: Sequence[Dict[str, str]] = ()) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = [{"role": "system", "content": SYSTEM_PROMPT}]
        for message in history:
            messages.append({"role": message["role"], "content": message["content"]})
        messages.append({"role": "user", "content": prompt})

        return {
            "model": self.settings.model,
            "messages": messages,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
        }

    async def complete(self, prompt: str, history: Sequence[Dict[str, str]] = ()) -> str:
        """
        Run one completion

        Args:
            prompt: The user prompt
            history: Earlier ``{role, content}`` messages, oldest first

        Returns:
            The text of the first choice

        Raises:
            RemoteCallFailure: network error, non-2xx status or malformed body
        """
        headers = {
            'Authorization': f'Bearer {self.settings.openai_api_key}',
            'Content-Type': 'application/json',
        }
        payload = self.build_payload(prompt, history)
        logger.info(f"Requesting completion ({len(prompt)} chars, {len(history)} previous messages)")

        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout, transport=self.transport) as client:
                response = await client.post(self.settings.api_url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Completion request timed out: {e}")
            raise RemoteCallFailure("The completion request timed out", code="timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Completion connection error: {type(e).__name__}: {e}")
            raise RemoteCallFailure(f"Could not reach the completion service: {e}", code="network_error") from e

        if response.status_code < 200 or response.status_code >= 300:
            message, code = _provider_error(response)
            logger.error(f"Completion API error: {response.status_code} - {message}")
            raise RemoteCallFailure(message, code=code, status_code=response.status_code)

        try:
            data = response.json()
            content = data['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Malformed completion response: {response.text[:200]}")
            raise RemoteCallFailure("The completion service returned a malformed response", code="malformed_response") from e

        return content or ""


def _provider_error(response: httpx.Response):
    """Pull ``error.message`` and ``error.code`` out of a failed response"""
    fallback = f"OpenAI API error: {response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except ValueError:
        return (f"OpenAI API error: {response.text}" if response.text else fallback), None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        code = error.get("code") or error.get("type")
        return error.get("message") or fallback, (str(code) if code else None)
    if isinstance(error, str):
        return error, None
    return fallback, None
