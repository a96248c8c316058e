"""OpenAI chat completion and text-to-speech over aiohttp."""

import logging
from typing import List, Optional

import aiohttp

from .base import Message
from ..errors import AIBackendError

logger = logging.getLogger(__name__)


class OpenAIBackend:
    """Minimal OpenAI REST client. No retries: callers log and skip failures."""

    def __init__(self,
                 api_key: str,
                 base_url: str = "https://api.openai.com/v1",
                 model: str = "gpt-4o-mini",
                 tts_model: str = "tts-1",
                 voice: str = "onyx",
                 timeout: float = 60.0):
        """Initialize the backend.

        Args:
            api_key: OpenAI API key
            base_url: API root, without a trailing slash
            model: Default chat model when a call does not pass one
            tts_model: Text-to-speech model
            voice: Text-to-speech voice
            timeout: Total timeout per request in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.tts_model = tts_model
        self.voice = voice
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        logger.info(f"OpenAIBackend initialized with model: {model}")

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    async def complete(self, messages: List[Message], model: Optional[str] = None,
                       max_tokens: int = 500, **options) -> str:
        """Send a chat completion request and return the stripped response.

        Args:
            messages: Role-tagged messages
            model: Chat model; defaults to the backend's model
            max_tokens: Maximum tokens in the response
            **options: Extra request fields such as temperature

        Returns:
            Completion text

        Raises:
            AIBackendError: If the API answers with a non-200 status
        """
        data = {
            "model": model or self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            **options,
        }

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(f"{self.base_url}/chat/completions",
                                    headers=self._headers(), json=data) as response:
                if response.status != 200:
                    raise AIBackendError(response.status, await response.text())

                result = await response.json()
                return (result["choices"][0]["message"]["content"] or "").strip()

    async def speech(self, text: str, voice: Optional[str] = None,
                     response_format: str = "mp3", speed: float = 1.0) -> bytes:
        """Convert text to speech and return the encoded audio."""
        data = {
            "model": self.tts_model,
            "input": text,
            "voice": voice or self.voice,
            "response_format": response_format,
            "speed": speed,
        }

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(f"{self.base_url}/audio/speech",
                                    headers=self._headers(), json=data) as response:
                if response.status != 200:
                    raise AIBackendError(response.status, await response.text())
                return await response.read()
