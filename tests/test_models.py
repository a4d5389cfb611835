"""Tests for models/ — wire form and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.errors import EncodingError, RelayerClientError
from models import (
    OperationType,
    RelayerTransactionState,
    SafeTransaction,
    SignatureParams,
    TransactionRequest,
    TransactionType,
)
from models.transaction import checksum

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class TestSafeTransaction:

    def test_defaults(self) -> None:
        tx = SafeTransaction(to=OWNER)
        assert tx.operation == OperationType.CALL
        assert tx.data == "0x"
        assert tx.value == "0"

    def test_address_checksummed(self) -> None:
        assert SafeTransaction(to=OWNER.lower()).to == OWNER

    @pytest.mark.parametrize("to", ["", "0x1234", "not-an-address", "0x" + "zz" * 20])
    def test_invalid_address(self, to: str) -> None:
        with pytest.raises(ValidationError):
            SafeTransaction(to=to)

    def test_checksum_names_field(self) -> None:
        with pytest.raises(EncodingError) as exc_info:
            checksum("0x12", "payment_token")
        assert exc_info.value.field == "payment_token"
        assert isinstance(exc_info.value, RelayerClientError)
        assert checksum(OWNER.lower(), "owner") == OWNER

    def test_frozen(self) -> None:
        tx = SafeTransaction(to=OWNER)
        with pytest.raises(ValidationError):
            tx.value = "1"  # type: ignore[misc]

    def test_operation_from_int(self) -> None:
        assert SafeTransaction(to=OWNER, operation=1).operation is OperationType.DELEGATE_CALL


class TestTransactionRequest:

    def _request(self, **overrides) -> TransactionRequest:
        fields = dict(
            type=TransactionType.SAFE,
            from_address=OWNER,
            to=OWNER,
            proxy_wallet=OWNER,
            data="0x",
            signature="0x00",
            signature_params=SignatureParams(gas_price="0", operation="0"),
        )
        fields.update(overrides)
        return TransactionRequest(**fields)

    def test_wire_aliases(self) -> None:
        wire = self._request(value="0", nonce="1", metadata="m").to_wire()
        assert list(wire) == [
            "type",
            "from",
            "to",
            "proxyWallet",
            "data",
            "signature",
            "value",
            "signatureParams",
            "nonce",
            "metadata",
        ]
        assert wire["type"] == "SAFE"
        assert wire["signatureParams"] == {"gasPrice": "0", "operation": "0"}

    def test_none_fields_dropped(self) -> None:
        wire = self._request().to_wire()
        assert "value" not in wire
        assert "nonce" not in wire
        assert "metadata" not in wire

    def test_create_type_tag(self) -> None:
        assert self._request(type=TransactionType.SAFE_CREATE).to_wire()["type"] == "SAFE-CREATE"

    def test_populate_by_alias(self) -> None:
        request = TransactionRequest.model_validate(self._request().to_wire())
        assert request == self._request()


class TestRelayerTransactionState:

    @pytest.mark.parametrize("state", list(RelayerTransactionState))
    def test_parse_known(self, state: RelayerTransactionState) -> None:
        assert RelayerTransactionState.parse(state.value) is state

    def test_parse_unknown(self) -> None:
        assert RelayerTransactionState.parse("STATE_PENDING") is None
