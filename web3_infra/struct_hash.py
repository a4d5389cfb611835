"""Struct hashes the Safe contracts verify signatures against.

Two encodings live here:

- ``create_struct_hash``: standard EIP-712 signing hash of a ``SafeTx``
  under the domain ``{chainId, verifyingContract=<safe>}``.
- ``create_safe_create_struct_hash``: keccak of the ABI-encoded
  ``CreateProxy`` tuple.  A simplified domain (type name ++ factory ++
  8-byte chain id) is built alongside it but is not part of the digest.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from eth_abi import encode
from eth_account.messages import encode_typed_data
from web3 import Web3

from config.contracts import SAFE_FACTORY_NAME
from models.transaction import OperationType, checksum
from web3_infra.codec import decode_hex_lenient, parse_uint256, to_hex

logger = structlog.get_logger("web3_infra.struct_hash")

# Field order is part of the on-chain type hash; never reorder.
SAFE_TX_TYPES: dict[str, list[dict[str, str]]] = {
    "SafeTx": [
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "data", "type": "bytes"},
        {"name": "operation", "type": "uint8"},
        {"name": "safeTxGas", "type": "uint256"},
        {"name": "baseGas", "type": "uint256"},
        {"name": "gasPrice", "type": "uint256"},
        {"name": "gasToken", "type": "address"},
        {"name": "refundReceiver", "type": "address"},
        {"name": "nonce", "type": "uint256"},
    ],
}


# ── SafeTx (execution) ───────────────────────────────────────────────


def create_struct_hash(
    chain_id: int,
    safe: str,
    to: str,
    value: str,
    data: str,
    operation: OperationType,
    safe_tx_gas: str,
    base_gas: str,
    gas_price: str,
    gas_token: str,
    refund_receiver: str,
    nonce: str,
) -> str:
    """EIP-712 signing hash of a ``SafeTx`` as a ``0x`` hex string.

    Numeric arguments are base-10 strings.  ``data`` is decoded leniently:
    malformed hex hashes as empty bytes.

    Raises
    ------
    InvalidNumericField
        If a numeric argument does not parse as a uint256.
    EncodingError
        If an address argument is malformed.
    """
    message = {
        "to": checksum(to, "to"),
        "value": parse_uint256(value, "value"),
        "data": decode_hex_lenient(data),
        "operation": int(operation),
        "safeTxGas": parse_uint256(safe_tx_gas, "safe_tx_gas"),
        "baseGas": parse_uint256(base_gas, "base_gas"),
        "gasPrice": parse_uint256(gas_price, "gas_price"),
        "gasToken": checksum(gas_token, "gas_token"),
        "refundReceiver": checksum(refund_receiver, "refund_receiver"),
        "nonce": parse_uint256(nonce, "nonce"),
    }
    domain = {
        "chainId": chain_id,
        "verifyingContract": checksum(safe, "safe"),
    }

    signable = encode_typed_data(
        domain_data=domain,
        message_types=SAFE_TX_TYPES,
        message_data=message,
    )
    digest = Web3.keccak(b"\x19" + signable.version + signable.header + signable.body)
    return to_hex(digest)


# ── CreateProxy (deployment) ─────────────────────────────────────────


def make_create_domain(name: str, verifying_contract: str, chain_id: int) -> bytes:
    """Simplified domain bytes: ``name ++ contract(20) ++ chain_id(8, BE)``."""
    return (
        name.encode("utf-8")
        + bytes.fromhex(checksum(verifying_contract, "verifying_contract")[2:])
        + chain_id.to_bytes(8, "big")
    )


@dataclass(frozen=True)
class CreateProxy:
    """Payment terms signed when asking the factory to deploy a Safe."""

    payment_token: str
    payment: int
    payment_receiver: str

    def signable_bytes(self, domain: bytes) -> bytes:
        # domain is accepted but not encoded
        return encode(
            ["address", "uint256", "address"],
            [
                checksum(self.payment_token, "payment_token"),
                self.payment,
                checksum(self.payment_receiver, "payment_receiver"),
            ],
        )

    def struct_hash(self, domain: bytes) -> str:
        return to_hex(Web3.keccak(self.signable_bytes(domain)))


def create_safe_create_struct_hash(
    safe_factory: str,
    chain_id: int,
    payment_token: str,
    payment: str,
    payment_receiver: str,
) -> str:
    """Struct hash signed for a SAFE-CREATE request.

    Raises
    ------
    InvalidNumericField
        If ``payment`` is not a uint256 decimal string.
    EncodingError
        If the factory, payment token or payment receiver is malformed.
    """
    create_proxy = CreateProxy(
        payment_token=payment_token,
        payment=parse_uint256(payment, "payment"),
        payment_receiver=payment_receiver,
    )
    domain = make_create_domain(SAFE_FACTORY_NAME, safe_factory, chain_id)
    logger.debug(
        "struct_hash.create_domain",
        domain=to_hex(domain),
        factory=safe_factory,
        chain_id=chain_id,
    )
    return create_proxy.struct_hash(domain)
