#!/usr/bin/env python3
"""
smart_contract_e2e.py: deploy a contract, then call it

End-to-end contract flow against a fullnode:

  1) read a .wasm binary and deploy it with a `Deploy` command
  2) predict the contract address with `build_contract_address(signer, nonce)`
     and read the code back with `get_contract_code` as a sanity check
  3) call `hello_from(name: String) -> u32` with a Borsh-encoded argument,
     decode the u32 return value and print the emitted logs

The contract is expected to be the "HelloContract" sample, whose `hello_from`
logs a greeting and returns the length of *name*.

Environment
-----------
PCHAIN_RPC_URL        (default: http://127.0.0.1:8080)
PCHAIN_PUBLIC_KEY     signer public key, base64url (required)
PCHAIN_PRIVATE_KEY    signer private key, base64url (required)

Usage
-----
python examples/smart_contract_e2e.py --wasm hello_contract.wasm --name parallelchain
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pchain_sdk import (BinaryReader, BinaryWriter, Call, Deploy, ExitStatus,
                        PChain, SDKConfig)
from pchain_sdk.errors import PChainSdkError
from pchain_sdk.tx.build import MAX_GAS_LIMIT

CALL_GAS_LIMIT = 3_000_000


async def run(cfg: SDKConfig, wasm: bytes, name: str) -> int:
    keypair = cfg.keypair()
    async with PChain(cfg.rpc_url, timeout=cfg.request_timeout) as chain:
        # Step 1: deploy. The contract address depends on the nonce used here.
        deploy_nonce = await chain.get_account_nonce(keypair.address)
        deploy_tx = (
            chain.build_transaction(keypair, deploy_nonce)
            .add_command(Deploy(contract=wasm, cbi_version=0))
            .set_gas_limit(MAX_GAS_LIMIT)
            .build()
        )
        print(f"Deploying {len(wasm)} bytes, tx={deploy_tx.hash}")
        receipt = await chain.submit_and_confirm_transaction(deploy_tx)
        if receipt[0].exit_status != ExitStatus.SUCCESS:
            print("error: deploy failed:", receipt[0].exit_status.name, file=sys.stderr)
            return 1

        # Step 2: predict the address and check the stored code matches
        contract = chain.build_contract_address(keypair.address, deploy_nonce)
        code = await chain.get_contract_code(contract)
        if code is None:
            print(f"error: no contract found at {contract}", file=sys.stderr)
            return 1
        if code != wasm:
            print(f"error: code at {contract} does not match the deployed binary", file=sys.stderr)
            return 1
        print("Contract deployed to:", contract)

        # Step 3: call hello_from; each argument is Borsh-encoded on its own
        arg = BinaryWriter().write_string(name).to_bytes()
        call_nonce = await chain.get_account_nonce(keypair.address)
        call_tx = (
            chain.build_transaction(keypair, call_nonce)
            .add_command(Call(target=contract, method="hello_from", arguments=(arg,)))
            .set_gas_limit(CALL_GAS_LIMIT)
            .build()
        )
        result = (await chain.submit_and_confirm_transaction(call_tx))[0]
        if result.exit_status != ExitStatus.SUCCESS:
            print("error: call failed:", result.exit_status.name, file=sys.stderr)
            return 1

        returned = BinaryReader(result.return_values).read_u32()
        print(f"Return value is {returned}, expected {len(name.encode())}")
        for log in result.logs:
            print(f"  {log.topic.decode(errors='replace')}: {log.value.decode(errors='replace')}")
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description="Deploy a contract and call it")
    ap.add_argument("--wasm", required=True, type=Path, help="contract binary (.wasm)")
    ap.add_argument("--name", default="parallelchain", help="argument passed to hello_from")
    args = ap.parse_args()

    cfg = SDKConfig.from_env()
    try:
        return asyncio.run(run(cfg, args.wasm.read_bytes(), args.name))
    except PChainSdkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
