"""Shared plumbing for HTTP-based image providers"""
import logging
import os
from typing import Any, Dict, Optional

import httpx

from config.settings import settings
from services.image_generation.types import (
    ImageGenerationProvider,
    ProviderError,
    ProviderNotConfiguredError,
)
from utils.retry import async_retry


def resolve_api_key(env_key: str) -> str:
    """
    Look up an API key by its environment variable name.

    The live environment wins so keys exported after startup are picked up;
    otherwise the settings field of the same (lower-cased) name is used,
    which covers keys that only live in the .env file.
    """
    value = os.environ.get(env_key, "").strip()
    if value:
        return value
    return str(getattr(settings, env_key.lower(), "") or "").strip()


class HTTPImageProvider(ImageGenerationProvider):
    """Provider that talks JSON over HTTP with a lazily created httpx client"""

    base_url: str = ""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self._explicit_api_key = api_key
        self.base_url = base_url or self.base_url
        self.logger = logging.getLogger(self.__class__.__module__)
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def api_key(self) -> str:
        return self._explicit_api_key or resolve_api_key(self.info.env_key)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json"},
                timeout=settings.provider_timeout
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _require_key(self) -> None:
        if not self.api_key:
            raise ProviderNotConfiguredError(self.info.id, self.info.env_key)

    @async_retry(
        max_attempts=settings.provider_max_attempts,
        backoff_factor=settings.provider_backoff_factor,
        exceptions=(httpx.TransportError,)
    )
    async def _post_json(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``payload`` and return the decoded JSON body"""
        self._require_key()
        self.logger.debug(f"POST {self.base_url}/{path.lstrip('/')} | provider={self.info.id}")

        response = await self.client.post(path, json=payload, headers=self._auth_headers())

        if response.status_code >= 400:
            self.logger.error(
                f"{self.info.id} request failed: {response.status_code} {response.text[:500]}"
            )
            raise ProviderError(
                f"{self.info.provider} request failed with status {response.status_code}",
                provider=self.info.id,
                status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Invalid JSON response from {self.info.provider}",
                provider=self.info.id,
                status_code=response.status_code,
                original_error=e
            ) from e

        if not isinstance(body, dict):
            raise ProviderError(
                f"Unexpected response from {self.info.provider}: expected a JSON object",
                provider=self.info.id,
                status_code=response.status_code
            )
        return body
