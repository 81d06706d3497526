"""HTTP/JSON client for the remote persuasion backend."""

import logging
from typing import Any

import httpx

from client.base import PersuasionBackend
from client.errors import FALLBACK_MESSAGE, APIError
from client.signing import BearerTokenSigner, RequestSigner

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class HTTPBackend(PersuasionBackend):
    """Talks to the real backend over HTTPS.

    No retry, no backoff: a failed call surfaces directly to the caller.

    Usage:
        backend = HTTPBackend(
            base_url="https://cognitive-persuasion-backend.onrender.com",
            signer=BearerTokenSigner(token),
        )
        data = await backend.list_businesses()
    """

    def __init__(
        self,
        base_url: str,
        signer: RequestSigner,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.signer = signer
        self.timeout = timeout
        self._transport = transport

    @property
    def backend_name(self) -> str:
        return f"http:{self.signer.mode}"

    def set_token(self, token: str | None) -> None:
        if isinstance(self.signer, BearerTokenSigner):
            self.signer.set_token(token)

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        headers.update(self.signer.headers())
        return headers

    async def request(self, endpoint: str, method: str = "GET", body: dict | None = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug("API request: %s %s", method, url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._get_headers(),
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.error("API request %s %s failed: %s", method, endpoint, e)
            raise APIError(FALLBACK_MESSAGE) from e

        try:
            data = response.json()
        except ValueError:
            data = None
            if response.is_success:
                logger.error("API %s %s returned non-JSON body", method, endpoint)
                raise APIError("Invalid JSON response", status_code=response.status_code)

        if not response.is_success:
            error = APIError.from_response(response.status_code, data)
            logger.error("API error %d on %s %s: %s", response.status_code, method, endpoint, error.message)
            raise error

        return data
