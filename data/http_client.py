"""RelayerHttpClient — blocking JSON transport to the relayer.

No retries: a failed call is surfaced to the caller as ``RelayerApiError``
straight away.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx
import structlog

from core.errors import RelayerApiError
from models.request import TransactionRequest

logger = structlog.get_logger("data.http_client")

DEFAULT_TIMEOUT_S = 30.0


# ── Request bodies ───────────────────────────────────────────────────


@dataclass(frozen=True)
class JsonBody:
    """Arbitrary JSON value."""

    value: Any


@dataclass(frozen=True)
class SubmissionBody:
    """A ``TransactionRequest`` headed for ``/submit``."""

    request: TransactionRequest


RequestBody = Union[JsonBody, SubmissionBody]


def serialize_body(body: RequestBody) -> str:
    """Serialize with ``", "`` and ``": "`` separators.

    The builder signature is computed over this exact string, so the same
    output must be both signed and sent.
    """
    if isinstance(body, SubmissionBody):
        return json.dumps(body.request.to_wire())
    if isinstance(body, JsonBody):
        return json.dumps(body.value)
    raise TypeError(f"unsupported request body: {type(body).__name__}")


# ── Client ───────────────────────────────────────────────────────────


class RelayerHttpClient:
    """Thin wrapper over ``httpx.Client``.

    Parameters
    ----------
    timeout_s:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
        )

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: Optional[RequestBody] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON response.

        Raises
        ------
        RelayerApiError
            On connection failure, non-2xx status or undecodable JSON.
        """
        send_headers = dict(headers or {})
        content: Optional[str] = None
        if body is not None:
            content = serialize_body(body)
            send_headers.setdefault("Content-Type", "application/json")

        try:
            resp = self._client.request(
                method,
                url,
                headers=send_headers,
                content=content,
                params=params,
            )
        except httpx.HTTPError as exc:
            logger.warning("http_client.request_failed", method=method, url=url, error=str(exc))
            raise RelayerApiError(None, f"Request failed: {exc}") from exc

        if not resp.is_success:
            logger.warning(
                "http_client.bad_status",
                method=method,
                url=url,
                status_code=resp.status_code,
            )
            raise RelayerApiError(resp.status_code, resp.text or "Unknown error")

        try:
            return resp.json()
        except ValueError as exc:
            raise RelayerApiError(None, f"Failed to parse JSON: {exc}") from exc

    def get(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        return self.request("GET", url, headers=headers, params=params)

    def post(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: Optional[RequestBody] = None,
    ) -> Any:
        return self.request("POST", url, headers=headers, body=body)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RelayerHttpClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
