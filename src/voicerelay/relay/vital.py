"""Vital API client for link token issuance.

Configuration via Environment Variables:
    VITAL_API_KEY: API key sent as x-vital-api-key
    VITAL_BASE_URL: API base URL (default: sandbox US region)
    VITAL_TIMEOUT: Request timeout in seconds (default: 30)
"""

import logging
from typing import Any

import httpx

from ..config import DEFAULT_VITAL_BASE_URL

logger = logging.getLogger(__name__)


class VitalError(Exception):
    """Base exception for Vital API errors."""

    pass


class VitalAPIError(VitalError):
    """Raised when the Vital API returns a non-success response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class VitalTimeoutError(VitalError):
    """Raised when a Vital request times out."""

    pass


class VitalClient:
    """Async HTTP client for the Vital link API.

    Each call opens its own ``httpx.AsyncClient`` so the client holds no
    connection state between requests. ``transport`` lets tests substitute
    an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_VITAL_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Vital API key is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "x-vital-api-key": self._api_key,
                "accept": "application/json",
            },
        )

    async def create_link_token(
        self,
        user_id: str,
        provider: str | None = None,
        redirect_url: str | None = None,
    ) -> dict[str, Any]:
        """Issue a link token that lets ``user_id`` connect a wearable.

        Args:
            user_id: Vital user identifier
            provider: Optional provider slug to preselect
            redirect_url: Optional URL to return to after linking

        Returns:
            Decoded JSON response (link_token, link_web_url)

        Raises:
            ValueError: If user_id is blank
            VitalTimeoutError: If the request times out
            VitalAPIError: If the API answers with a non-2xx status
        """
        if not user_id or not user_id.strip():
            raise ValueError("user_id cannot be empty")

        payload: dict[str, Any] = {"user_id": user_id.strip()}
        if provider:
            payload["provider"] = provider
        if redirect_url:
            payload["redirect_url"] = redirect_url

        try:
            async with self._client() as client:
                response = await client.post("/v2/link/token", json=payload)
        except httpx.TimeoutException as e:
            raise VitalTimeoutError(
                f"Vital link token request timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise VitalAPIError(f"Vital request failed: {e}") from e

        if response.is_error:
            body = response.text
            raise VitalAPIError(
                f"Vital error {response.status_code}: {body}",
                status_code=response.status_code,
                response_body=body,
            )

        logger.info(f"Issued Vital link token for {user_id}")
        return response.json()
