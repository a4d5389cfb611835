"""Per-chain contract addresses and protocol constants.

The table is built once (``DEFAULT_CONTRACT_TABLE``) and handed to the
client by reference.  Nothing mutates it after import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from web3 import Web3

from core.errors import UnsupportedChain

# ── Protocol constants ───────────────────────────────────────────────

# keccak of the Safe proxy creation bytecode used by the factory
SAFE_INIT_CODE_HASH = "0x2bce2127ff07fb632d16c8347c4ebf501f4841168bed00d9e6ef715ddb6fcecf"

# Type name mixed into the Safe creation domain bytes
SAFE_FACTORY_NAME = "Polymarket Contract Proxy Factory"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# ── Deployed contracts ───────────────────────────────────────────────

POLYGON_SAFE_FACTORY = "0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b"
POLYGON_SAFE_MULTISEND = "0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761"


@dataclass(frozen=True)
class ContractConfig:
    """Factory and multisend (aggregator) addresses for one chain."""

    safe_factory: str
    safe_multisend: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "safe_factory", Web3.to_checksum_address(self.safe_factory))
        object.__setattr__(self, "safe_multisend", Web3.to_checksum_address(self.safe_multisend))


@dataclass(frozen=True)
class ContractConfigTable:
    """Read-only mapping of chain id → ``ContractConfig``."""

    entries: Mapping[int, ContractConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def get(self, chain_id: int) -> ContractConfig:
        """Return the config for ``chain_id``.

        Raises
        ------
        UnsupportedChain
            If the chain has no entry.
        """
        try:
            return self.entries[chain_id]
        except KeyError:
            raise UnsupportedChain(chain_id) from None

    def chain_ids(self) -> list[int]:
        return sorted(self.entries)


DEFAULT_CONTRACT_TABLE = ContractConfigTable(
    entries={
        # Polygon mainnet
        137: ContractConfig(
            safe_factory=POLYGON_SAFE_FACTORY,
            safe_multisend=POLYGON_SAFE_MULTISEND,
        ),
        # Polygon Amoy testnet
        80002: ContractConfig(
            safe_factory=POLYGON_SAFE_FACTORY,
            safe_multisend=POLYGON_SAFE_MULTISEND,
        ),
    }
)


def get_contract_config(
    chain_id: int,
    table: ContractConfigTable = DEFAULT_CONTRACT_TABLE,
) -> ContractConfig:
    """Look up ``chain_id`` in ``table`` (the default table if omitted)."""
    return table.get(chain_id)
