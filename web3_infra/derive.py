"""Counterfactual Safe address derivation (CREATE2)."""

from __future__ import annotations

from eth_abi import encode
from web3 import Web3

from config.contracts import SAFE_INIT_CODE_HASH
from models.transaction import checksum
from web3_infra.codec import decode_hex, to_hex


def get_create2_address(bytecode_hash: str, from_address: str, salt: bytes) -> str:
    """Return ``keccak(0xff ++ deployer ++ salt ++ bytecode_hash)[12:]``."""
    payload = (
        b"\xff"
        + bytes.fromhex(checksum(from_address, "from_address")[2:])
        + salt
        + decode_hex(bytecode_hash, "bytecode_hash")
    )
    digest = Web3.keccak(payload)
    return Web3.to_checksum_address(to_hex(digest[12:]))


def derive_safe_address(owner: str, safe_factory: str) -> str:
    """Address the factory deploys the owner's Safe to.

    The salt is ``keccak(abi.encode(owner))``.  Pure: nothing is fetched
    from chain, so the result is valid before deployment.
    """
    salt = Web3.keccak(encode(["address"], [checksum(owner, "owner")]))
    return get_create2_address(SAFE_INIT_CODE_HASH, safe_factory, bytes(salt))
