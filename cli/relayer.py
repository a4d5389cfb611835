"""Relayer CLI — deploy a Safe, submit approvals and inspect transactions.

Reads ``RELAYER_URL``, ``CHAIN_ID``, ``PK`` and the ``BUILDER_*``
credentials from the environment / ``.env``.

Usage:
    python3 -m cli.relayer safe
    python3 -m cli.relayer deploy --wait
    python3 -m cli.relayer approve --token <erc20> --spender <addr> --wait
    python3 -m cli.relayer status <transaction_id>
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

import structlog
from eth_abi import encode
from web3 import Web3

from config.settings import settings
from core.errors import RelayerApiError, RelayerClientError
from core.logger import setup_logging
from execution.relay_client import RelayClient
from execution.response import RelayerTransactionResponse
from models.transaction import OperationType, SafeTransaction

logger = structlog.get_logger("cli.relayer")

MAX_UINT256 = 2**256 - 1

# Polygon USDC.e and the CTF contract, the usual approval pair
DEFAULT_USDC_ADDRESS = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"
DEFAULT_CTF_ADDRESS = "0x4D97DCd97eC945f40cF65F87097ACe5EA0476045"


def encode_approve(spender: str, amount: int) -> str:
    """Calldata for ``approve(address,uint256)``."""
    selector = Web3.keccak(text="approve(address,uint256)")[:4]
    args = encode(["address", "uint256"], [Web3.to_checksum_address(spender), amount])
    return "0x" + (bytes(selector) + args).hex()


def create_approve_txn(token: str, spender: str, amount: int = MAX_UINT256) -> SafeTransaction:
    return SafeTransaction(
        to=token,
        operation=OperationType.CALL,
        data=encode_approve(spender, amount),
        value="0",
    )


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _finish(resp: RelayerTransactionResponse, wait: bool) -> None:
    _print({"transaction_id": resp.transaction_id, "transaction_hash": resp.transaction_hash})
    if wait:
        _print({"awaited": resp.wait()})


# ── Commands ─────────────────────────────────────────────────────────


def cmd_safe(client: RelayClient, args: argparse.Namespace) -> None:
    safe = client.get_expected_safe()
    _print({"safe": safe, "deployed": client.get_deployed(safe)})


def cmd_deploy(client: RelayClient, args: argparse.Namespace) -> None:
    _finish(client.deploy(), args.wait)


def cmd_approve(client: RelayClient, args: argparse.Namespace) -> None:
    txns = [create_approve_txn(args.token, spender) for spender in args.spender]
    _finish(client.execute(txns, metadata=args.metadata), args.wait)


def cmd_status(client: RelayClient, args: argparse.Namespace) -> None:
    _print(client.get_transaction(args.transaction_id))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="relayer",
        description="Safe relayer client",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG)")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("safe", help="Show the derived Safe address and deployment status")

    sub_deploy = subparsers.add_parser("deploy", help="Deploy the signer's Safe")
    sub_deploy.add_argument("--wait", action="store_true", help="Poll until mined")

    sub_approve = subparsers.add_parser("approve", help="Approve spenders for an ERC-20")
    sub_approve.add_argument("--token", default=DEFAULT_USDC_ADDRESS, help="ERC-20 token address")
    sub_approve.add_argument(
        "--spender",
        action="append",
        default=None,
        help="Spender address (repeatable; default: CTF)",
    )
    sub_approve.add_argument("--metadata", default=None, help="Free-form relayer metadata")
    sub_approve.add_argument("--wait", action="store_true", help="Poll until mined")

    sub_status = subparsers.add_parser("status", help="Fetch a relayer transaction")
    sub_status.add_argument("transaction_id")

    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "approve" and not args.spender:
        args.spender = [DEFAULT_CTF_ADDRESS]

    cmd_map = {
        "safe": cmd_safe,
        "deploy": cmd_deploy,
        "approve": cmd_approve,
        "status": cmd_status,
    }

    setup_logging(args.log_level)
    try:
        client = RelayClient.from_settings(settings)
        cmd_map[args.command](client, args)
    except (RelayerClientError, RelayerApiError) as exc:
        logger.error("cli.relayer.failed", command=args.command, error=str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
