"""Exception taxonomy for the relayer client.

Client-side failures (validation, encoding, signing, preconditions) derive
from ``RelayerClientError``.  Anything that went wrong talking to the
relayer is a ``RelayerApiError`` and carries the HTTP status when one was
received.
"""

from __future__ import annotations


class RelayerClientError(Exception):
    """Base class for failures raised before or around a relayer call."""


# ── Encoding ─────────────────────────────────────────────────────────


class EncodingError(RelayerClientError, ValueError):
    """Malformed address, numeric or hex input to a hashing or packing stage.

    Also a ``ValueError``, so pydantic validators surface it as a field error.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


class InvalidNumericField(EncodingError):
    """A decimal string field is not a non-negative 256-bit integer."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(
            field,
            f"expected a non-negative base-10 integer, got {value!r}",
        )
        self.value = value


# ── Signatures ───────────────────────────────────────────────────────


class SignatureError(RelayerClientError):
    """Signature bytes violate the 65-byte r||s||v contract."""


class InvalidSignatureLength(SignatureError):

    def __init__(self, length: int) -> None:
        super().__init__(
            f"Invalid signature length: expected 65 bytes, got {length}"
        )
        self.length = length


class InvalidRecoveryId(SignatureError):

    def __init__(self, v: int) -> None:
        super().__init__(
            f"Invalid signature 'v' (expected 0,1,27,28), got {v}"
        )
        self.v = v


# ── Client state ─────────────────────────────────────────────────────


class PreconditionFailed(RelayerClientError):
    """A signer or builder credentials are required but missing."""


class StateConflict(RelayerClientError):
    """Safe deployment state does not allow the requested operation."""


class UnsupportedChain(RelayerClientError):

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Invalid chainID: {chain_id}")
        self.chain_id = chain_id


# ── Transport ────────────────────────────────────────────────────────


class RelayerApiError(Exception):
    """Non-2xx relayer response or a failed request.

    ``status_code`` is ``None`` when no HTTP response was received
    (connection error, timeout, undecodable body).
    """

    def __init__(self, status_code: int | None, error_msg: str) -> None:
        if status_code is None:
            text = f"Request exception: {error_msg}"
        else:
            text = (
                f"API error: status_code={status_code}, "
                f"error_message={error_msg}"
            )
        super().__init__(text)
        self.status_code = status_code
        self.error_msg = error_msg
