"""HTTP transport for the token endpoint.

The transport only moves bytes: it posts the form body and hands back the
status and raw body. Interpreting status codes and parsing JSON belongs to
the engine, so any object satisfying :class:`TokenTransport` can replace
the httpx-based default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from authcode.models.errors import NetworkError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """Status line and body of a token endpoint response."""

    status_code: int
    reason: str = ""
    body: bytes = field(default=b"", repr=False)


class TokenTransport(Protocol):
    """Protocol for posting a token request and returning the raw response."""

    def exchange(
        self, token_endpoint: str, form_body: dict[str, str], authorization: str
    ) -> RawResponse:
        """Send the token request.

        Args:
            token_endpoint: Token endpoint URL
            form_body: Form fields, sent as application/x-www-form-urlencoded
            authorization: Value of the Authorization header

        Returns:
            RawResponse with whatever status and body the server sent

        Raises:
            NetworkError: If no response could be obtained
        """
        ...


class HttpxTokenTransport:
    """Token transport backed by :class:`httpx.Client`.

    Every call opens and closes its own client, so the connection is
    released on every exit path. No pooling or retries.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the transport.

        Args:
            timeout: HTTP request timeout in seconds
            verify: Whether to verify TLS certificates
            transport: Optional httpx transport, e.g. httpx.MockTransport
        """
        self.timeout = timeout
        self.verify = verify
        self._transport = transport

    def exchange(
        self, token_endpoint: str, form_body: dict[str, str], authorization: str
    ) -> RawResponse:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "Authorization": authorization,
        }

        try:
            with httpx.Client(
                timeout=self.timeout, verify=self.verify, transport=self._transport
            ) as client:
                response = client.post(token_endpoint, data=form_body, headers=headers)
                return RawResponse(
                    status_code=response.status_code,
                    reason=response.reason_phrase,
                    body=response.content,
                )

        except httpx.HTTPError as e:
            logger.error(f"Token request to {token_endpoint} failed: {e!r}")
            raise NetworkError(f"HTTP error during token exchange: {e}") from e
