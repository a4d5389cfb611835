"""SafeTransaction — one call the Safe should perform."""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3

from core.errors import EncodingError


class OperationType(IntEnum):
    """Safe operation kind, encoded on-chain as a single ``uint8``."""

    CALL = 0
    DELEGATE_CALL = 1  # target code runs in the Safe's storage context


class TransactionType(str, Enum):
    """Relayer transaction kind tag."""

    SAFE = "SAFE"
    SAFE_CREATE = "SAFE-CREATE"


def checksum(address: str, field: str = "address") -> str:
    """Validate a 20-byte hex address and return its checksummed form.

    Raises
    ------
    EncodingError
        If ``address`` is not a hex address; the error names ``field``.
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise EncodingError(field, f"invalid address {address!r}")
    return Web3.to_checksum_address(address)


class SafeTransaction(BaseModel):
    """Elementary transaction handed to the relay client.

    ``data`` is hex (``0x`` prefix optional) and ``value`` is a base-10
    wei amount kept as a string so arbitrary 256-bit values survive.
    """

    model_config = ConfigDict(frozen=True)

    to: str
    operation: OperationType = OperationType.CALL
    data: str = "0x"
    value: str = Field(default="0")

    @field_validator("to")
    @classmethod
    def to_is_address(cls, v: str) -> str:
        return checksum(v, "to")
