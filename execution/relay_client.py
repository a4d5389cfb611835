"""RelayClient — submits Safe transactions to the relayer and tracks them.

Usage::

    from data.builder_auth import BuilderApiCreds, BuilderConfig

    client = RelayClient(
        "https://relayer-v2.polymarket.com",
        chain_id=137,
        private_key="0xabc...",
        builder_config=BuilderConfig(BuilderApiCreds(key, secret, passphrase)),
    )
    resp = client.execute([approve_tx], metadata="approve USDC")
    mined = resp.wait()

Everything is blocking.  Transport failures are raised as
``RelayerApiError`` and never retried.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Iterable, Optional, Sequence

import structlog

from config.contracts import (
    DEFAULT_CONTRACT_TABLE,
    ZERO_ADDRESS,
    ContractConfig,
    ContractConfigTable,
)
from config.settings import Settings
from core.errors import PreconditionFailed, RelayerClientError, StateConflict
from data.builder_auth import BuilderApiCreds, BuilderConfig
from data.endpoints import (
    GET_DEPLOYED,
    GET_NONCE,
    GET_TRANSACTION,
    GET_TRANSACTIONS,
    SUBMIT_TRANSACTION,
)
from data.http_client import RelayerHttpClient, SubmissionBody, serialize_body
from execution.poller import (
    DEFAULT_MAX_POLLS,
    DEFAULT_POLL_FREQUENCY_MS,
    PollSchedule,
    poll_until_state,
)
from execution.request_builder import (
    SafeCreateTransactionArgs,
    SafeTransactionArgs,
    build_safe_create_transaction_request,
    build_safe_transaction_request,
)
from execution.response import RelayerTransactionResponse
from models.request import TransactionRequest
from models.transaction import SafeTransaction, TransactionType
from web3_infra.derive import derive_safe_address
from web3_infra.signer import Signer, SigningCapability

logger = structlog.get_logger("execution.relay_client")

# Budget used by RelayerTransactionResponse.wait()
WAIT_MAX_POLLS = 30
WAIT_POLL_FREQUENCY_MS = 2000


class RelayClient:
    """Client for the Safe relayer.

    Parameters
    ----------
    relayer_url:
        Relayer base URL; a trailing ``/`` is dropped.
    chain_id:
        Target chain.  Must be present in ``contract_table``.
    private_key:
        Hex private key.  Needed for anything that signs.
    builder_config:
        Builder credentials.  Needed for ``execute`` and ``deploy``.
    signer:
        Alternative to ``private_key``: any object with ``address``,
        ``sign`` and ``sign_eip712_struct_hash``.
    contract_table:
        Chain → contract addresses.  Built once, passed by reference.
    http:
        Transport; defaults to a ``RelayerHttpClient``.
    wait_schedule:
        Poll budget used by ``RelayerTransactionResponse.wait``.
    sleep:
        Blocking sleep used between polls.  Injectable for tests.

    Raises
    ------
    UnsupportedChain
        If ``chain_id`` has no contract config.
    """

    def __init__(
        self,
        relayer_url: str,
        chain_id: int,
        private_key: Optional[str] = None,
        builder_config: Optional[BuilderConfig] = None,
        *,
        signer: Optional[SigningCapability] = None,
        contract_table: ContractConfigTable = DEFAULT_CONTRACT_TABLE,
        http: Optional[RelayerHttpClient] = None,
        wait_schedule: PollSchedule = PollSchedule(WAIT_MAX_POLLS, WAIT_POLL_FREQUENCY_MS),
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._relayer_url = relayer_url[:-1] if relayer_url.endswith("/") else relayer_url
        self._chain_id = chain_id
        self._contract_config = contract_table.get(chain_id)
        if signer is None and private_key:
            signer = Signer(private_key, chain_id)
        self._signer = signer
        self._builder_config = builder_config
        self._http = http if http is not None else RelayerHttpClient()
        self._sleep = sleep
        self.wait_schedule = wait_schedule

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> RelayClient:
        """Build a client from ``Settings`` (env / ``.env``)."""
        creds = BuilderApiCreds(
            key=settings.BUILDER_API_KEY,
            secret=settings.BUILDER_SECRET,
            passphrase=settings.BUILDER_PASS_PHRASE,
        )
        builder_config = BuilderConfig(creds)
        kwargs.setdefault("http", RelayerHttpClient(timeout_s=settings.HTTP_TIMEOUT_SECONDS))
        kwargs.setdefault(
            "wait_schedule",
            PollSchedule(settings.POLL_MAX_ATTEMPTS, settings.POLL_INTERVAL_MS),
        )
        return cls(
            settings.RELAYER_URL,
            settings.CHAIN_ID,
            private_key=settings.PK or None,
            builder_config=builder_config if builder_config.is_valid() else None,
            **kwargs,
        )

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def contract_config(self) -> ContractConfig:
        return self._contract_config

    # ── Reads ────────────────────────────────────────────────────

    def get_nonce(self, signer_address: str, signer_type: str) -> Any:
        return self._http.get(
            f"{self._relayer_url}{GET_NONCE}",
            params={"address": signer_address, "type": signer_type},
        )

    def get_transaction(self, transaction_id: str) -> Any:
        return self._http.get(
            f"{self._relayer_url}{GET_TRANSACTION}",
            params={"id": transaction_id},
        )

    def get_transactions(self) -> Any:
        return self._http.get(f"{self._relayer_url}{GET_TRANSACTIONS}")

    def get_deployed(self, safe_address: str) -> bool:
        payload = self._http.get(
            f"{self._relayer_url}{GET_DEPLOYED}",
            params={"address": safe_address},
        )
        deployed = payload.get("deployed") if isinstance(payload, dict) else None
        return deployed if isinstance(deployed, bool) else False

    def get_expected_safe(self) -> str:
        """Counterfactual Safe address of the configured signer."""
        self._assert_signer_needed()
        return derive_safe_address(
            self._signer.address(),
            self._contract_config.safe_factory,
        )

    # ── Writes ───────────────────────────────────────────────────

    def execute(
        self,
        transactions: Sequence[SafeTransaction],
        metadata: Optional[str] = None,
    ) -> RelayerTransactionResponse:
        """Sign and submit ``transactions`` as one Safe transaction.

        Raises
        ------
        PreconditionFailed
            If the signer or builder credentials are missing.
        StateConflict
            If the Safe is not deployed yet.
        RelayerApiError
            If any relayer call fails.
        """
        self._assert_signer_needed()
        self._assert_builder_creds_needed()

        safe_address = self.get_expected_safe()
        if not self.get_deployed(safe_address):
            raise StateConflict(f"expected safe {safe_address} is not deployed")

        from_address = self._signer.address()
        nonce_payload = self.get_nonce(from_address, TransactionType.SAFE.value)
        nonce = nonce_payload.get("nonce") if isinstance(nonce_payload, dict) else None
        if not isinstance(nonce, str):
            raise RelayerClientError("invalid nonce payload received")

        args = SafeTransactionArgs(
            from_address=from_address,
            nonce=nonce,
            chain_id=self._chain_id,
            transactions=tuple(transactions),
        )
        request = build_safe_transaction_request(
            self._signer,
            args,
            self._contract_config,
            metadata,
        )
        return self._submit(request)

    def deploy(self) -> RelayerTransactionResponse:
        """Ask the relayer to deploy the signer's Safe.

        Raises
        ------
        PreconditionFailed
            If the signer or builder credentials are missing.
        StateConflict
            If the Safe is already deployed.
        RelayerApiError
            If any relayer call fails.
        """
        self._assert_signer_needed()
        self._assert_builder_creds_needed()

        safe_address = self.get_expected_safe()
        if self.get_deployed(safe_address):
            raise StateConflict(f"safe {safe_address} is already deployed!")

        args = SafeCreateTransactionArgs(
            from_address=self._signer.address(),
            chain_id=self._chain_id,
            payment_token=ZERO_ADDRESS,
            payment="0",
            payment_receiver=ZERO_ADDRESS,
        )
        request = build_safe_create_transaction_request(
            self._signer,
            args,
            self._contract_config,
        )
        return self._submit(request)

    # ── Polling ──────────────────────────────────────────────────

    def poll_until_state(
        self,
        transaction_id: str,
        states: Iterable[str],
        fail_state: Optional[str] = None,
        max_polls: int = DEFAULT_MAX_POLLS,
        poll_frequency_ms: int = DEFAULT_POLL_FREQUENCY_MS,
    ) -> Optional[dict[str, Any]]:
        """Poll ``/transaction`` until one of ``states`` (see ``execution.poller``)."""
        return poll_until_state(
            self.get_transaction,
            transaction_id,
            states,
            fail_state=fail_state,
            schedule=PollSchedule(max_polls, poll_frequency_ms),
            sleep=self._sleep,
        )

    # ── Internals ────────────────────────────────────────────────

    def _submit(self, request: TransactionRequest) -> RelayerTransactionResponse:
        body = SubmissionBody(request)
        headers = self._generate_builder_headers("POST", SUBMIT_TRANSACTION, serialize_body(body))
        resp = self._http.post(
            f"{self._relayer_url}{SUBMIT_TRANSACTION}",
            headers=headers,
            body=body,
        )
        resp = resp if isinstance(resp, dict) else {}
        transaction_id = resp.get("transactionID")
        transaction_hash = resp.get("transactionHash")

        logger.info(
            "relay_client.submitted",
            type=request.type.value,
            proxy_wallet=request.proxy_wallet,
            transaction_id=transaction_id,
            transaction_hash=transaction_hash,
        )
        return RelayerTransactionResponse(
            transaction_id if isinstance(transaction_id, str) else None,
            transaction_hash if isinstance(transaction_hash, str) else None,
            self,
        )

    def _generate_builder_headers(
        self,
        method: str,
        request_path: str,
        body: Optional[str],
    ) -> dict[str, str]:
        self._assert_builder_creds_needed()
        try:
            return self._builder_config.headers(method, request_path, body)
        except ValueError as exc:  # binascii.Error on a non-base64 secret
            raise RelayerClientError(f"Failed to generate builder headers: {exc}") from exc

    def _assert_signer_needed(self) -> None:
        if self._signer is None:
            raise PreconditionFailed("signer is required for this endpoint")

    def _assert_builder_creds_needed(self) -> None:
        if self._builder_config is None:
            raise PreconditionFailed("builder credentials are required for this endpoint")
