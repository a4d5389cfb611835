"""Tests for config.contracts — per-chain contract table."""

from __future__ import annotations

import dataclasses

import pytest

from config.contracts import (
    DEFAULT_CONTRACT_TABLE,
    POLYGON_SAFE_FACTORY,
    POLYGON_SAFE_MULTISEND,
    ContractConfig,
    ContractConfigTable,
    get_contract_config,
)
from core.errors import RelayerClientError, UnsupportedChain


class TestContractConfigTable:

    @pytest.mark.parametrize("chain_id", [137, 80002])
    def test_known_chains(self, chain_id: int) -> None:
        config = get_contract_config(chain_id)
        assert config.safe_factory == POLYGON_SAFE_FACTORY
        assert config.safe_multisend == POLYGON_SAFE_MULTISEND

    @pytest.mark.parametrize("chain_id", [0, 1, 80001, -137])
    def test_unknown_chain(self, chain_id: int) -> None:
        with pytest.raises(UnsupportedChain) as exc_info:
            DEFAULT_CONTRACT_TABLE.get(chain_id)
        assert exc_info.value.chain_id == chain_id
        assert str(exc_info.value) == f"Invalid chainID: {chain_id}"
        assert isinstance(exc_info.value, RelayerClientError)

    def test_chain_ids(self) -> None:
        assert DEFAULT_CONTRACT_TABLE.chain_ids() == [137, 80002]

    def test_entries_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_CONTRACT_TABLE.entries[1] = ContractConfig(  # type: ignore[index]
                POLYGON_SAFE_FACTORY, POLYGON_SAFE_MULTISEND
            )

    def test_source_mapping_copied(self) -> None:
        source = {5: ContractConfig(POLYGON_SAFE_FACTORY, POLYGON_SAFE_MULTISEND)}
        table = ContractConfigTable(source)
        source[6] = source[5]
        with pytest.raises(UnsupportedChain):
            table.get(6)

    def test_config_frozen(self) -> None:
        config = get_contract_config(137)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.safe_factory = POLYGON_SAFE_MULTISEND  # type: ignore[misc]

    def test_config_checksums(self) -> None:
        config = ContractConfig(POLYGON_SAFE_FACTORY.lower(), POLYGON_SAFE_MULTISEND.lower())
        assert config.safe_factory == POLYGON_SAFE_FACTORY

    def test_custom_table_lookup(self) -> None:
        table = ContractConfigTable({5: ContractConfig("0x" + "11" * 20, "0x" + "22" * 20)})
        assert get_contract_config(5, table).safe_multisend.lower() == "0x" + "22" * 20
