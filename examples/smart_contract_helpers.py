#!/usr/bin/env python3
"""
smart_contract_helpers.py: view calls and state-changing calls on a contract

Walks through the two convenience helpers for contracts:

  1) `call_contract_view`: run a read-only method without a transaction and
     decode its Borsh return value with `BinaryReader`
  2) calling a storage-writing method as a view fails with ExitStatus.FAILED
  3) `call_contract_state_change`: the same method as a signed transaction,
     waiting for confirmation and returning the command receipt

The default contract is a "HelloContract" instance on testnet exposing
`i_say_hello() -> String` and `hello_set_many()` (writes ten 10 KB values).

Environment
-----------
PCHAIN_RPC_URL        (default: http://127.0.0.1:8080)
PCHAIN_PUBLIC_KEY     signer public key, base64url (required for part 3)
PCHAIN_PRIVATE_KEY    signer private key, base64url (required for part 3)

Usage
-----
python examples/smart_contract_helpers.py --contract ZxjCCuD8s5TEnXlbn9F7JMYmjNFMs5cGHSj21g9Ea0Y
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from pchain_sdk import BinaryReader, ExitStatus, PChain, SDKConfig
from pchain_sdk.errors import PChainSdkError
from pchain_sdk.tx.build import MAX_GAS_LIMIT

DEFAULT_CONTRACT = "ZxjCCuD8s5TEnXlbn9F7JMYmjNFMs5cGHSj21g9Ea0Y"


async def run(cfg: SDKConfig, contract: str, skip_state_change: bool) -> int:
    async with PChain(cfg.rpc_url, timeout=cfg.request_timeout) as chain:
        # Part 1: view call, return value is a Borsh String
        view = await chain.call_contract_view(contract, "i_say_hello")
        print("Exit status:", view.exit_status.name)
        if view.exit_status == ExitStatus.SUCCESS:
            print("Return value:", BinaryReader(view.return_values).read_string())

        # Part 2: a storage-writing method cannot run as a view
        failed = await chain.call_contract_view(contract, "hello_set_many")
        print("hello_set_many as view, exit status:", failed.exit_status.name)

        if skip_state_change:
            return 0

        # Part 3: run it as a transaction instead; it stores ~100 KB so give it a high gas limit
        receipt = await chain.call_contract_state_change(
            contract,
            "hello_set_many",
            None,
            None,
            cfg.keypair(),
            gas_limit=MAX_GAS_LIMIT,
        )
        print("hello_set_many as transaction, exit status:", receipt.exit_status.name)
        print("Gas used:", receipt.gas_used)
        print("Return values:", receipt.return_values.hex() or "(none)")
        print("Logs:", len(receipt.logs))
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description="Contract view/state-change walkthrough")
    ap.add_argument("--contract", default=DEFAULT_CONTRACT, help="contract address (base64url)")
    ap.add_argument("--view-only", action="store_true", help="skip the signed state-change call")
    args = ap.parse_args()

    cfg = SDKConfig.from_env()
    try:
        return asyncio.run(run(cfg, args.contract, args.view_only))
    except PChainSdkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
