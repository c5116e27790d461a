from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx

from warroom.app.core.http_client import create_http_client, peek_http_client


class BaseProvider:
    """Base class for external API providers.

    Subclasses can accept an external httpx.AsyncClient for connection pooling.
    Without one they use the shared lifespan client, and outside the lifespan
    (scripts, tests) a short-lived client per request.
    """

    user_agent = "WarRoom/1.0"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        """Initialize the provider.

        Args:
            base_url: The API base URL
            api_key: The API credential
            http_client: Optional HTTP client to use for every request
            timeout: Default per-attempt timeout in seconds
        """
        self._http_client = http_client
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.headers = self._build_headers()

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def is_configured(self) -> bool:
        """True iff a non-empty API credential is present."""
        return bool(self.api_key and self.api_key.strip())

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the HTTP client to use, closing it only if we created it."""
        client = self._http_client or peek_http_client()
        if client is not None:
            yield client
            return

        client = create_http_client(timeout=self.timeout)
        try:
            yield client
        finally:
            await client.aclose()

    def _get_endpoint_url(self, endpoint: str) -> str:
        """Build full URL for an API endpoint (e.g. ``"mentions/geography"``)."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"
