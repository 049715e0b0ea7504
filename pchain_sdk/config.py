"""
SDK configuration for scripts and the CLI: RPC endpoint, timeout and signer keys.

The reader, writer and facade never read the environment themselves; they take
an endpoint and a keypair as plain arguments. `SDKConfig.from_env()` is the one
place environment variables are consulted.

Environment (default prefix ``PCHAIN_``)
----------------------------------------
PCHAIN_RPC_URL       fullnode base URL, http or https (default http://127.0.0.1:8080)
PCHAIN_TIMEOUT       HTTP timeout in seconds (default 30)
PCHAIN_PUBLIC_KEY    signer public key, base64url (optional)
PCHAIN_PRIVATE_KEY   signer private key, base64url (optional)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ValidationError
from .wallet.keypair import Keypair

DEFAULT_RPC_URL = "http://127.0.0.1:8080"
DEFAULT_TIMEOUT_S = 30.0

_SCHEMES = ("http://", "https://")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v not in (None, "") else default


def _check_rpc_url(url: str) -> str:
    if not url.lower().startswith(_SCHEMES):
        raise ValueError(f"RPC URL must start with http:// or https://, got: {url!r}")
    return url


def _parse_timeout(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"timeout must be a number of seconds, got: {raw!r}") from e
    if value <= 0:
        raise ValueError(f"timeout must be positive, got: {value}")
    return value


@dataclass(slots=True)
class SDKConfig:
    rpc_url: str = DEFAULT_RPC_URL
    request_timeout: float = DEFAULT_TIMEOUT_S
    # base64url Ed25519 keys
    public_key: Optional[str] = field(default=None, repr=False)
    private_key: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_env(
        cls,
        prefix: str = "PCHAIN_",
        *,
        rpc_url: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> "SDKConfig":
        """
        Read configuration from the environment. Explicit *rpc_url* and
        *request_timeout* win, and their variables are then not read at all.
        """
        if rpc_url is None:
            rpc_url = _env(f"{prefix}RPC_URL", DEFAULT_RPC_URL)
        if request_timeout is None:
            raw = _env(f"{prefix}TIMEOUT")
            request_timeout = _parse_timeout(raw) if raw is not None else DEFAULT_TIMEOUT_S
        elif request_timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {request_timeout}")
        return cls(
            rpc_url=_check_rpc_url(rpc_url),  # type: ignore[arg-type]
            request_timeout=float(request_timeout),
            public_key=_env(f"{prefix}PUBLIC_KEY"),
            private_key=_env(f"{prefix}PRIVATE_KEY"),
        )

    @property
    def has_keypair(self) -> bool:
        return bool(self.public_key and self.private_key)

    def keypair(self) -> Keypair:
        """Build the signing keypair, or raise ValidationError if keys are not configured."""
        if not self.has_keypair:
            raise ValidationError("PUBLIC_KEY and PRIVATE_KEY must both be configured")
        return Keypair.from_base64url(self.public_key, self.private_key)  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, Any]:
        """Non-secret view of the configuration."""
        return {
            "rpc_url": self.rpc_url,
            "request_timeout": self.request_timeout,
            "has_keypair": self.has_keypair,
        }


__all__ = ["SDKConfig", "DEFAULT_RPC_URL", "DEFAULT_TIMEOUT_S"]
