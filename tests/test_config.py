from __future__ import annotations

import pytest

from pchain_sdk.config import SDKConfig
from pchain_sdk.errors import ValidationError
from pchain_sdk.utils.bytes import b64url_encode

_VARS = ("PCHAIN_RPC_URL", "PCHAIN_TIMEOUT", "PCHAIN_PUBLIC_KEY", "PCHAIN_PRIVATE_KEY")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = SDKConfig.from_env()
    assert cfg.rpc_url == "http://127.0.0.1:8080"
    assert cfg.request_timeout == 30.0
    assert not cfg.has_keypair
    assert cfg.to_dict() == {"rpc_url": "http://127.0.0.1:8080", "request_timeout": 30.0, "has_keypair": False}


def test_env_overrides(monkeypatch, keypair):
    monkeypatch.setenv("PCHAIN_RPC_URL", "https://node.example")
    monkeypatch.setenv("PCHAIN_TIMEOUT", "5")
    monkeypatch.setenv("PCHAIN_PUBLIC_KEY", keypair.public_key_base64url())
    monkeypatch.setenv("PCHAIN_PRIVATE_KEY", b64url_encode(keypair.private_key))

    cfg = SDKConfig.from_env()

    assert cfg.rpc_url == "https://node.example"
    assert cfg.request_timeout == 5.0
    assert cfg.has_keypair
    assert cfg.keypair() == keypair


def test_custom_prefix(monkeypatch):
    monkeypatch.setenv("TESTNET_RPC_URL", "http://testnet:9000")
    assert SDKConfig.from_env(prefix="TESTNET_").rpc_url == "http://testnet:9000"


def test_bad_scheme_rejected(monkeypatch):
    monkeypatch.setenv("PCHAIN_RPC_URL", "ftp://node")
    with pytest.raises(ValueError):
        SDKConfig.from_env()


def test_keypair_requires_both_halves(keypair):
    cfg = SDKConfig(public_key=keypair.public_key_base64url())
    with pytest.raises(ValidationError):
        cfg.keypair()


def test_keys_hidden_from_repr(keypair):
    secret = b64url_encode(keypair.private_key)
    cfg = SDKConfig(public_key=keypair.public_key_base64url(), private_key=secret)
    assert secret not in repr(cfg)


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_bad_timeout_rejected(monkeypatch, raw):
    monkeypatch.setenv("PCHAIN_TIMEOUT", raw)
    with pytest.raises(ValueError):
        SDKConfig.from_env()


def test_empty_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PCHAIN_RPC_URL", "")
    monkeypatch.setenv("PCHAIN_PUBLIC_KEY", "")
    cfg = SDKConfig.from_env()
    assert cfg.rpc_url == "http://127.0.0.1:8080"
    assert cfg.public_key is None


def test_explicit_values_skip_environment(monkeypatch):
    monkeypatch.setenv("PCHAIN_RPC_URL", "not-a-url")
    monkeypatch.setenv("PCHAIN_TIMEOUT", "abc")
    cfg = SDKConfig.from_env(rpc_url="https://node.example", request_timeout=5)
    assert cfg.rpc_url == "https://node.example"
    assert cfg.request_timeout == 5.0


@pytest.mark.parametrize("kwargs", [{"rpc_url": "ftp://node"}, {"request_timeout": 0}])
def test_explicit_values_are_checked(kwargs):
    with pytest.raises(ValueError):
        SDKConfig.from_env(**kwargs)
