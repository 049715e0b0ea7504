#!/usr/bin/env python3
"""
token_transfer.py: send a small amount of tokens and check balances

This example shows how to:
  1) Connect to a ParallelChain fullnode
  2) Read the recipient's balance
  3) Transfer tokens with `transfer_token` (submit + wait for confirmation)
  4) Read the balance again and print the transaction hash

Environment
-----------
PCHAIN_RPC_URL        (default: http://127.0.0.1:8080)
PCHAIN_TIMEOUT        (default: 30)
PCHAIN_PUBLIC_KEY     signer public key, base64url (required)
PCHAIN_PRIVATE_KEY    signer private key, base64url (required)

Usage
-----
python examples/token_transfer.py \
  --to uwNayTusG-6R3qzftWNmC_OIbpCf5i2pfaacHRd9058 \
  --amount 99
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pchain_sdk import PChain, SDKConfig
from pchain_sdk.errors import PChainSdkError, PChainTimeoutError


async def run(cfg: SDKConfig, to_address: str, amount: int) -> int:
    keypair = cfg.keypair()

    async with PChain(cfg.rpc_url, timeout=cfg.request_timeout) as chain:
        before = await chain.get_account_balance(to_address)
        print(f"Before: balance is {before}")

        try:
            tx_hash = await chain.transfer_token(to_address, amount, keypair)
        except PChainTimeoutError:
            # the transaction may still land; look it up later with `pchain tx`
            print("Transfer submitted but not confirmed yet", file=sys.stderr)
            return 2

        after = await chain.get_account_balance(to_address)
        if after - before != amount:
            print("Transfer amounts do not match (concurrent activity on the account?)")
        print(f"After: balance is {after}")
        print(f"Successfully transferred {amount} to {to_address}, tx hash: {tx_hash}")
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description="Transfer tokens on ParallelChain")
    ap.add_argument("--to", default="uwNayTusG-6R3qzftWNmC_OIbpCf5i2pfaacHRd9058", help="recipient (base64url)")
    ap.add_argument("--amount", type=int, default=99, help="amount in grays")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    cfg = SDKConfig.from_env()
    try:
        return asyncio.run(run(cfg, args.to, args.amount))
    except PChainSdkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
