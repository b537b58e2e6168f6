"""httpx-backed transport for the Graph API."""

import logging
from typing import Optional

import httpx

from ..config.constants import DEFAULT_HTTP_TIMEOUT
from ..models.request import ApiRequest
from .base import RawResponse, Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """
    Sends requests with an ``httpx.AsyncClient``.

    The bearer token is sent with every request and can be rotated in
    place with ``set_access_token()`` without touching the connection
    pool. Passing ``client`` lets callers (and tests, via
    ``httpx.MockTransport``) supply a preconfigured AsyncClient; the
    transport then does not own it and ``aclose()`` leaves it open.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._auth_header = f"Bearer {access_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"Authorization": self._auth_header},
            timeout=timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_access_token(self, access_token: str) -> None:
        self._auth_header = f"Bearer {access_token}"
        if self._owns_client:
            self._client.headers["Authorization"] = self._auth_header

    async def send(self, request: ApiRequest) -> RawResponse:
        headers = {"Authorization": self._auth_header}
        headers.update(request.headers)

        response = await self._client.request(
            request.method,
            f"{self._base_url}{request.path}",
            params=request.params,
            headers=headers,
            json=request.json_body,
            data=request.data,
            files=request.files,
        )
        logger.debug(f"{request.method} {request.path} -> {response.status_code}")

        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
