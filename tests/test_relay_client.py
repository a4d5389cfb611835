"""Tests for execution.relay_client — orchestration over a mocked transport."""

from __future__ import annotations

import json
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
from py_clob_client.signing.hmac import build_hmac_signature

from config.contracts import ContractConfig, ContractConfigTable
from config.settings import Settings
from core.errors import (
    PreconditionFailed,
    RelayerApiError,
    RelayerClientError,
    StateConflict,
    UnsupportedChain,
)
from data.builder_auth import (
    POLY_BUILDER_API_KEY,
    POLY_BUILDER_SIGNATURE,
    POLY_BUILDER_TIMESTAMP,
    BuilderApiCreds,
    BuilderConfig,
)
from data.http_client import RelayerHttpClient, SubmissionBody, serialize_body
from execution.relay_client import RelayClient
from execution.response import RelayerTransactionResponse
from models.transaction import OperationType, SafeTransaction
from web3_infra.derive import derive_safe_address

PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RELAYER = "https://relayer.test"
SECRET = "c2VjcmV0LXNlY3JldC1zZWNyZXQ="
FIXED_TS = 1_700_000_000

USDC = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"


def _builder() -> BuilderConfig:
    return BuilderConfig(BuilderApiCreds("key-1", SECRET, "pass-1"), clock=lambda: FIXED_TS)


def _http(
    deployed: Any = True,
    nonce: Any = None,
    submit: Any = None,
    transaction: Any = None,
) -> MagicMock:
    """Transport mock routing GETs by path."""
    http = MagicMock(spec=RelayerHttpClient)
    nonce = {"nonce": "7"} if nonce is None else nonce
    submit = {"transactionID": "tx-1", "transactionHash": "0xhash"} if submit is None else submit

    def get(url: str, headers: Optional[dict] = None, params: Optional[dict] = None) -> Any:
        if url.endswith("/deployed"):
            return {"deployed": deployed} if not isinstance(deployed, dict) else deployed
        if url.endswith("/nonce"):
            return nonce
        if url.endswith("/transaction"):
            return transaction
        if url.endswith("/transactions"):
            return []
        raise AssertionError(f"unexpected GET {url}")

    http.get.side_effect = get
    http.post.return_value = submit
    return http


def _client(http: MagicMock, **kwargs: Any) -> RelayClient:
    kwargs.setdefault("private_key", PRIVATE_KEY)
    kwargs.setdefault("builder_config", _builder())
    return RelayClient(RELAYER, 137, http=http, sleep=lambda _s: None, **kwargs)


def _approve() -> SafeTransaction:
    return SafeTransaction(to=USDC, operation=OperationType.CALL, data="0x095ea7b3", value="0")


class TestConstruction:

    def test_unsupported_chain(self) -> None:
        with pytest.raises(UnsupportedChain, match="Invalid chainID: 1"):
            RelayClient(RELAYER, 1, http=_http())

    def test_trailing_slash_dropped(self) -> None:
        http = _http()
        client = RelayClient(RELAYER + "/", 137, http=http)
        client.get_transactions()
        http.get.assert_called_once_with(f"{RELAYER}/transactions")

    def test_custom_contract_table(self) -> None:
        table = ContractConfigTable(
            {5: ContractConfig("0x" + "11" * 20, "0x" + "22" * 20)}
        )
        client = RelayClient(RELAYER, 5, private_key=PRIVATE_KEY, contract_table=table, http=_http())
        assert client.chain_id == 5
        assert client.get_expected_safe() == derive_safe_address(ADDRESS, "0x" + "11" * 20)

    def test_from_settings(self) -> None:
        settings = Settings(
            RELAYER_URL=RELAYER,
            CHAIN_ID=80002,
            PK=PRIVATE_KEY,
            BUILDER_API_KEY="k",
            BUILDER_SECRET=SECRET,
            BUILDER_PASS_PHRASE="p",
            POLL_MAX_ATTEMPTS=4,
            POLL_INTERVAL_MS=1500,
        )
        client = RelayClient.from_settings(settings, http=_http())
        assert client.chain_id == 80002
        assert client.wait_schedule.max_polls == 4
        assert client.wait_schedule.poll_frequency_ms == 1500
        assert client.get_expected_safe().startswith("0x")

    def test_from_settings_without_creds(self) -> None:
        settings = Settings(RELAYER_URL=RELAYER, PK="", BUILDER_API_KEY="")
        client = RelayClient.from_settings(settings, http=_http())
        with pytest.raises(PreconditionFailed):
            client.get_expected_safe()
        with pytest.raises(PreconditionFailed):
            client.deploy()


class TestReads:

    def test_get_nonce(self) -> None:
        http = _http(nonce={"nonce": "3"})
        client = _client(http)
        assert client.get_nonce(ADDRESS, "SAFE") == {"nonce": "3"}
        http.get.assert_called_once_with(
            f"{RELAYER}/nonce", params={"address": ADDRESS, "type": "SAFE"}
        )

    def test_get_transaction(self) -> None:
        http = _http(transaction=[{"state": "STATE_NEW"}])
        client = _client(http)
        assert client.get_transaction("tx-9") == [{"state": "STATE_NEW"}]
        http.get.assert_called_once_with(f"{RELAYER}/transaction", params={"id": "tx-9"})

    @pytest.mark.parametrize(
        "payload,expected",
        [
            ({"deployed": True}, True),
            ({"deployed": False}, False),
            ({"deployed": "true"}, False),
            ({}, False),
        ],
    )
    def test_get_deployed_payload_shapes(self, payload: dict, expected: bool) -> None:
        client = _client(_http(deployed=payload))
        assert client.get_deployed("0x" + "ab" * 20) is expected

    def test_reads_need_no_signer(self) -> None:
        client = RelayClient(RELAYER, 137, http=_http())
        assert client.get_transactions() == []

    def test_expected_safe_needs_signer(self) -> None:
        client = RelayClient(RELAYER, 137, http=_http())
        with pytest.raises(PreconditionFailed):
            client.get_expected_safe()

    def test_expected_safe(self) -> None:
        client = _client(_http())
        assert client.get_expected_safe() == derive_safe_address(
            ADDRESS, client.contract_config.safe_factory
        )

    def test_transport_error_propagates(self) -> None:
        http = MagicMock(spec=RelayerHttpClient)
        http.get.side_effect = RelayerApiError(500, "boom")
        client = _client(http)
        with pytest.raises(RelayerApiError) as exc_info:
            client.get_transactions()
        assert exc_info.value.status_code == 500


class TestExecute:

    def test_requires_signer(self) -> None:
        http = _http()
        client = RelayClient(RELAYER, 137, builder_config=_builder(), http=http)
        with pytest.raises(PreconditionFailed):
            client.execute([_approve()])
        http.get.assert_not_called()
        http.post.assert_not_called()

    def test_requires_builder_creds(self) -> None:
        http = _http()
        client = RelayClient(RELAYER, 137, private_key=PRIVATE_KEY, http=http)
        with pytest.raises(PreconditionFailed):
            client.execute([_approve()])
        http.post.assert_not_called()

    def test_undeployed_safe(self) -> None:
        http = _http(deployed=False)
        client = _client(http)
        with pytest.raises(StateConflict, match="is not deployed"):
            client.execute([_approve()])
        http.post.assert_not_called()

    @pytest.mark.parametrize("payload", [{}, {"nonce": 7}, [], None, "7"])
    def test_invalid_nonce_payload(self, payload: Any) -> None:
        http = _http(nonce=payload)
        http.get.side_effect = (
            lambda url, headers=None, params=None: {"deployed": True}
            if url.endswith("/deployed")
            else payload
        )
        client = _client(http)
        with pytest.raises(RelayerClientError, match="invalid nonce payload"):
            client.execute([_approve()])
        http.post.assert_not_called()

    def test_submits_signed_request(self) -> None:
        http = _http(nonce={"nonce": "7"})
        client = _client(http)

        resp = client.execute([_approve()], metadata="approve")

        assert isinstance(resp, RelayerTransactionResponse)
        assert resp.transaction_id == "tx-1"
        assert resp.transaction_hash == "0xhash"
        assert resp.hash == "0xhash"

        http.post.assert_called_once()
        url = http.post.call_args.args[0]
        headers = http.post.call_args.kwargs["headers"]
        body = http.post.call_args.kwargs["body"]

        assert url == f"{RELAYER}/submit"
        assert isinstance(body, SubmissionBody)
        wire = body.request.to_wire()
        assert wire["type"] == "SAFE"
        assert wire["from"] == ADDRESS
        assert wire["nonce"] == "7"
        assert wire["metadata"] == "approve"
        assert wire["proxyWallet"] == client.get_expected_safe()

        assert headers[POLY_BUILDER_API_KEY] == "key-1"
        assert headers[POLY_BUILDER_TIMESTAMP] == str(FIXED_TS)
        assert headers[POLY_BUILDER_SIGNATURE] == build_hmac_signature(
            SECRET, FIXED_TS, "POST", "/submit", serialize_body(body)
        )

    def test_nonce_fetched_for_signer_address(self) -> None:
        http = _http()
        _client(http).execute([_approve()])
        http.get.assert_any_call(f"{RELAYER}/nonce", params={"address": ADDRESS, "type": "SAFE"})

    def test_missing_ids_in_response(self) -> None:
        http = _http(submit={"transactionID": 12})
        resp = _client(http).execute([_approve()])
        assert resp.transaction_id is None
        assert resp.transaction_hash is None

    def test_submit_error_propagates(self) -> None:
        http = _http()
        http.post.side_effect = RelayerApiError(400, "bad signature")
        with pytest.raises(RelayerApiError, match="status_code=400"):
            _client(http).execute([_approve()])

    def test_bad_builder_secret(self) -> None:
        http = _http()
        builder = BuilderConfig(BuilderApiCreds("key-1", "abc", "pass-1"), clock=lambda: FIXED_TS)
        client = _client(http, builder_config=builder)
        with pytest.raises(RelayerClientError, match="Failed to generate builder headers") as exc_info:
            client.execute([_approve()])
        assert isinstance(exc_info.value.__cause__, ValueError)
        http.post.assert_not_called()


class TestDeploy:

    def test_already_deployed(self) -> None:
        http = _http(deployed=True)
        with pytest.raises(StateConflict, match="already deployed"):
            _client(http).deploy()
        http.post.assert_not_called()

    def test_submits_create_request(self) -> None:
        http = _http(deployed=False)
        client = _client(http)

        resp = client.deploy()

        assert resp.transaction_id == "tx-1"
        body = http.post.call_args.kwargs["body"]
        wire = body.request.to_wire()
        assert wire["type"] == "SAFE-CREATE"
        assert wire["to"] == client.contract_config.safe_factory
        assert wire["signatureParams"]["payment"] == "0"
        assert "nonce" not in wire
        assert json.loads(serialize_body(body)) == wire

    def test_requires_builder_creds(self) -> None:
        http = _http(deployed=False)
        client = RelayClient(RELAYER, 137, private_key=PRIVATE_KEY, http=http)
        with pytest.raises(PreconditionFailed):
            client.deploy()


class TestResponse:

    def test_wait_polls_until_mined(self) -> None:
        http = _http(transaction=[{"transactionID": "tx-1", "state": "STATE_MINED"}])
        resp = _client(http).execute([_approve()])
        assert resp.wait() == {"transactionID": "tx-1", "state": "STATE_MINED"}

    def test_wait_returns_none_on_failure(self) -> None:
        http = _http(transaction=[{"transactionID": "tx-1", "state": "STATE_FAILED"}])
        resp = _client(http).execute([_approve()])
        assert resp.wait() is None

    def test_wait_uses_client_budget(self) -> None:
        sleeps: list[float] = []
        http = _http(transaction=[{"state": "STATE_NEW"}])
        client = RelayClient(
            RELAYER,
            137,
            private_key=PRIVATE_KEY,
            builder_config=_builder(),
            http=http,
            sleep=sleeps.append,
        )
        resp = client.execute([_approve()])
        assert resp.wait() is None
        assert len(sleeps) == client.wait_schedule.max_polls - 1
        assert set(sleeps) == {2.0}

    def test_wait_overrides(self) -> None:
        sleeps: list[float] = []
        http = _http(transaction=[{"state": "STATE_NEW"}])
        client = RelayClient(
            RELAYER,
            137,
            private_key=PRIVATE_KEY,
            builder_config=_builder(),
            http=http,
            sleep=sleeps.append,
        )
        resp = client.execute([_approve()])
        assert resp.wait(max_polls=3, poll_frequency_ms=5000) is None
        assert sleeps == [5.0, 5.0]

    def test_no_id(self) -> None:
        client = _client(_http())
        resp = RelayerTransactionResponse(None, None, client)
        assert resp.wait() is None
        with pytest.raises(RelayerApiError, match="No transaction ID"):
            resp.get_transaction()

    def test_get_transaction(self) -> None:
        http = _http(transaction=[{"state": "STATE_NEW"}])
        resp = RelayerTransactionResponse("tx-1", None, _client(http))
        assert resp.get_transaction() == [{"state": "STATE_NEW"}]
