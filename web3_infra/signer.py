"""Signer — local secp256k1 signing of 32-byte struct hashes.

Two modes, chosen by the request kind:

- ``sign`` signs the hash as-is (SAFE-CREATE).
- ``sign_eip712_struct_hash`` wraps the hash with the
  ``"\\x19Ethereum Signed Message:\\n32"`` prefix, re-hashes and signs
  (SAFE).  The Safe verifies these through its eth_sign path.
"""

from __future__ import annotations

from typing import Protocol

import structlog
from eth_account import Account
from eth_account.messages import encode_defunct

from core.errors import RelayerClientError
from web3_infra.codec import decode_hex, to_hex

logger = structlog.get_logger("web3_infra.signer")


class SigningCapability(Protocol):
    """What the request builders need from a signer."""

    def address(self) -> str: ...

    def sign(self, message_hash: str) -> str: ...

    def sign_eip712_struct_hash(self, message_hash: str) -> str: ...


class Signer:
    """Private-key signer bound to one chain.

    Parameters
    ----------
    private_key:
        Hex-encoded private key (``0x`` prefix optional).
    chain_id:
        Chain the signatures are intended for.
    """

    def __init__(self, private_key: str, chain_id: int) -> None:
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError) as exc:
            raise RelayerClientError(f"Invalid private key: {exc}") from exc
        self._chain_id = chain_id

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def address(self) -> str:
        """Checksummed signer address."""
        return self._account.address

    def sign(self, message_hash: str) -> str:
        """Sign a 32-byte hash directly, no prefix."""
        digest = _hash_bytes(message_hash)
        signed = self._account.unsafe_sign_hash(digest)
        return to_hex(signed.signature)

    def sign_eip712_struct_hash(self, message_hash: str) -> str:
        """Sign ``keccak("\\x19Ethereum Signed Message:\\n32" ++ hash)``."""
        digest = _hash_bytes(message_hash)
        signed = self._account.sign_message(encode_defunct(primitive=digest))
        logger.debug("signer.signed_struct_hash", address=self.address())
        return to_hex(signed.signature)

    def __repr__(self) -> str:
        return f"Signer(address={self.address()}, chain_id={self._chain_id})"


def _hash_bytes(message_hash: str) -> bytes:
    digest = decode_hex(message_hash, "message_hash")
    if len(digest) != 32:
        raise RelayerClientError("Invalid hash length")
    return digest
