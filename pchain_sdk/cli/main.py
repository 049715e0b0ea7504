"""
pchain_sdk.cli.main
===================

`pchain`: a small command-line interface over the SDK for querying a
ParallelChain fullnode and sending simple transfers.

Examples
--------
    $ pchain --rpc https://node.example balance mC23wtyCuuku5jK6AHnHmYPE3YHXaBh1WZbR3bOmMJQ
    $ pchain block --height 749315
    $ pchain block --latest
    $ pchain tx hRle-75dVeso4_dZxUQN5NFKQ2eoxm_wmHYySTGscOU
    $ pchain contract-address oK8Kvd-2cWYloQaPNlGtG3Q5dV6JFKzVrXOAhBRt5hs 47987
    $ pchain keygen
    $ pchain transfer <recipient> 1000      # keys from PCHAIN_PUBLIC_KEY / PCHAIN_PRIVATE_KEY

Configuration
-------------
- RPC URL      : `--rpc` or env `PCHAIN_RPC_URL` (default: http://127.0.0.1:8080)
- HTTP Timeout : `--timeout` or env `PCHAIN_TIMEOUT` seconds (default: 30.0)
- Signer keys  : `--public-key` / `--private-key` or env `PCHAIN_PUBLIC_KEY` / `PCHAIN_PRIVATE_KEY`
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from ..address import derive_contract_address
from ..client import PChain
from ..config import SDKConfig
from ..errors import PChainSdkError
from ..types.core import PublicAddress, Sha256Hash
from ..utils.bytes import b64url_encode, to_hex
from ..version import __version__ as SDK_VERSION
from ..wallet.keypair import Keypair

app = typer.Typer(
    name="pchain",
    help="ParallelChain SDK CLI: query accounts, blocks and transactions, send transfers.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main", "to_jsonable"]

T = TypeVar("T")


@dataclass
class Ctx:
    rpc: str
    timeout: float


def to_jsonable(obj: Any) -> Any:
    """Render SDK values as JSON-friendly data: ids as base64url, other bytes as hex."""
    if isinstance(obj, (PublicAddress, Sha256Hash)):
        return str(obj)
    if isinstance(obj, IntEnum):
        return obj.name
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return to_hex(bytes(obj), prefix=False)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out = {}
        if hasattr(type(obj), "TAG"):
            out["type"] = type(obj).__name__
        for f in dataclasses.fields(obj):
            out[f.name] = to_jsonable(getattr(obj, f.name))
        return out
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in obj.items()}
    return obj


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(to_jsonable(obj), indent=2, ensure_ascii=False))


def _run(ctx: typer.Context, fn: Callable[[PChain], Awaitable[T]]) -> T:
    """Run *fn* against a PChain bound to the configured endpoint; SDK errors exit 1."""
    c: Ctx = ctx.obj

    async def _go() -> T:
        async with PChain(c.rpc, timeout=c.timeout) as chain:
            return await fn(chain)

    try:
        return asyncio.run(_go())
    except PChainSdkError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def _root(
    ctx: typer.Context,
    rpc: Optional[str] = typer.Option(
        None,
        "--rpc",
        help="Fullnode RPC URL.",
        envvar="PCHAIN_RPC_URL",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
        envvar="PCHAIN_TIMEOUT",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log SDK activity to stderr."),
) -> None:
    """Resolve effective configuration for this CLI process."""
    try:
        cfg = SDKConfig.from_env(rpc_url=rpc, request_timeout=timeout)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = Ctx(rpc=cfg.rpc_url, timeout=cfg.request_timeout)


# --- Offline commands ---------------------------------------------------------


@app.command("version")
def version() -> None:
    """Print the SDK CLI version."""
    typer.echo(f"pchain-sdk {SDK_VERSION}")


@app.command("keygen")
def keygen() -> None:
    """Generate a fresh Ed25519 keypair (base64url)."""
    kp = Keypair.generate()
    _print_json({"public_key": b64url_encode(kp.public_key), "private_key": b64url_encode(kp.private_key)})


@app.command("contract-address")
def contract_address(
    deployer: str = typer.Argument(..., help="Deployer address (base64url)"),
    nonce: int = typer.Argument(..., help="Nonce of the deploying transaction"),
) -> None:
    """Compute the address a contract gets when *deployer* deploys it with *nonce*."""
    try:
        typer.echo(str(derive_contract_address(deployer, nonce)))
    except PChainSdkError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


# --- Queries -------------------------------------------------------------------


@app.command("balance")
def balance(ctx: typer.Context, address: str = typer.Argument(..., help="Account address (base64url)")) -> None:
    """Print an account's balance in grays."""
    typer.echo(str(_run(ctx, lambda chain: chain.get_account_balance(address))))


@app.command("nonce")
def nonce(ctx: typer.Context, address: str = typer.Argument(..., help="Account address (base64url)")) -> None:
    """Print an account's nonce."""
    typer.echo(str(_run(ctx, lambda chain: chain.get_account_nonce(address))))


@app.command("code")
def code(ctx: typer.Context, address: str = typer.Argument(..., help="Contract address (base64url)")) -> None:
    """Print a contract's bytecode as hex, or `null` if the account holds none."""
    result = _run(ctx, lambda chain: chain.get_contract_code(address))
    typer.echo("null" if result is None else to_hex(result, prefix=False))


@app.command("block")
def block(
    ctx: typer.Context,
    height: Optional[int] = typer.Option(None, "--height", help="Block height"),
    hash: Optional[str] = typer.Option(None, "--hash", help="Block hash (base64url)"),
    latest: bool = typer.Option(False, "--latest", help="Highest committed block"),
) -> None:
    """Fetch and display a block by height, hash, or the latest committed one."""
    chosen = sum((height is not None, hash is not None, latest))
    if chosen != 1:
        raise typer.BadParameter("Provide exactly one of --height, --hash or --latest")

    if latest:
        result = _run(ctx, lambda chain: chain.get_latest_committed_block())
    else:
        block_id = height if height is not None else hash
        result = _run(ctx, lambda chain: chain.get_block(block_id))
    if result is None:
        typer.echo("null")
        return
    _print_json(result)


@app.command("tx")
def tx(ctx: typer.Context, tx_hash: str = typer.Argument(..., help="Transaction hash (base64url)")) -> None:
    """Look up a confirmed transaction with its receipt."""
    result = _run(ctx, lambda chain: chain.get_transaction(tx_hash))
    if result is None:
        typer.echo("null")
        return
    _print_json(result)


# --- Transactions -------------------------------------------------------------------


@app.command("transfer")
def transfer(
    ctx: typer.Context,
    recipient: str = typer.Argument(..., help="Recipient address (base64url)"),
    amount: int = typer.Argument(..., help="Amount in grays"),
    public_key: Optional[str] = typer.Option(None, "--public-key", envvar="PCHAIN_PUBLIC_KEY"),
    private_key: Optional[str] = typer.Option(None, "--private-key", envvar="PCHAIN_PRIVATE_KEY"),
) -> None:
    """Transfer *amount* grays to *recipient* and wait for confirmation."""
    if not public_key or not private_key:
        raise typer.BadParameter("signer keys are required (--public-key/--private-key)")
    try:
        keypair = Keypair.from_base64url(public_key, private_key)
    except PChainSdkError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    tx_hash = _run(ctx, lambda chain: chain.transfer_token(recipient, amount, keypair))
    typer.echo(str(tx_hash))


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
