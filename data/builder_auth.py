"""Builder-program authentication headers for relayer writes.

Every authenticated request carries an HMAC-SHA256 signature over
``timestamp + method + path + body``.  The body must be signed in exactly
the serialized form that is sent, so callers pass the same string to
``BuilderConfig.headers`` and to the HTTP layer.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from py_clob_client.signing.hmac import build_hmac_signature

POLY_BUILDER_API_KEY = "POLY_BUILDER_API_KEY"
POLY_BUILDER_PASSPHRASE = "POLY_BUILDER_PASSPHRASE"
POLY_BUILDER_SIGNATURE = "POLY_BUILDER_SIGNATURE"
POLY_BUILDER_TIMESTAMP = "POLY_BUILDER_TIMESTAMP"


@dataclass(frozen=True)
class BuilderApiCreds:
    """Builder API key, base64url secret and passphrase."""

    key: str
    secret: str
    passphrase: str

    def __repr__(self) -> str:
        return f"BuilderApiCreds(key={self.key!r}, secret=***, passphrase=***)"


class BuilderConfig:
    """Produces builder auth headers from local credentials.

    Parameters
    ----------
    creds:
        Builder API credentials.
    clock:
        Returns the current Unix time in seconds.  Injectable for tests.
    """

    def __init__(
        self,
        creds: BuilderApiCreds,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._creds = creds
        self._clock = clock

    def is_valid(self) -> bool:
        return bool(self._creds.key and self._creds.secret and self._creds.passphrase)

    def headers(
        self,
        method: str,
        request_path: str,
        body: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> dict[str, str]:
        """Headers authenticating one request.

        Parameters
        ----------
        method:
            HTTP method, upper-case.
        request_path:
            Path component only (e.g. ``/submit``).
        body:
            Serialized JSON body exactly as it will be sent, or ``None``.
        timestamp:
            Unix seconds; defaults to ``clock()``.
        """
        ts = int(self._clock()) if timestamp is None else timestamp
        signature = build_hmac_signature(
            self._creds.secret,
            ts,
            method,
            request_path,
            body,
        )
        return {
            POLY_BUILDER_API_KEY: self._creds.key,
            POLY_BUILDER_PASSPHRASE: self._creds.passphrase,
            POLY_BUILDER_SIGNATURE: signature,
            POLY_BUILDER_TIMESTAMP: str(ts),
        }
