"""
pchain_sdk.types
================

Protocol datatypes.

This package exposes two submodules:

- :mod:`pchain_sdk.types.core`: protocol values (commands, transactions, receipts, blocks, accounts)
- :mod:`pchain_sdk.types.rpc`: request/response bodies of the node's RPC routes

You can import either the modules:

    from pchain_sdk.types import core, rpc
    tx: core.SignedTx

or import concrete names directly:

    from pchain_sdk.types import SignedTx, StateRequest

Attributes are resolved on first access.
"""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Dict, List

__all__ = ["core", "rpc"]

# Map of friendly name -> absolute module path
_SUBMODULES: Dict[str, str] = {
    "core": "pchain_sdk.types.core",
    "rpc": "pchain_sdk.types.rpc",
}


def _load_submodule(name: str) -> ModuleType:
    path = _SUBMODULES.get(name)
    if not path:
        raise AttributeError(f"module 'pchain_sdk.types' has no attribute '{name}'")
    return importlib.import_module(path)


def __getattr__(name: str):
    if name in _SUBMODULES:
        return _load_submodule(name)

    for sm_name in _SUBMODULES:
        mod = _load_submodule(sm_name)
        if name in getattr(mod, "__all__", ()):
            return getattr(mod, name)

    raise AttributeError(f"module 'pchain_sdk.types' has no attribute '{name}'")


def __dir__() -> List[str]:
    base: List[str] = list(__all__)
    for sm in _SUBMODULES:
        base.extend(getattr(_load_submodule(sm), "__all__", ()))
    return sorted(set(base))
