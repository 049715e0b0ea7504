from __future__ import annotations

import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pchain_sdk.address import (as_public_address, as_sha256_hash,
                                derive_contract_address, is_valid)
from pchain_sdk.errors import ValidationError
from pchain_sdk.types.core import PublicAddress, Sha256Hash
from pchain_sdk.utils.hash import sha256

DEPLOYER = "oK8Kvd-2cWYloQaPNlGtG3Q5dV6JFKzVrXOAhBRt5hs"


def test_known_contract_address():
    addr = derive_contract_address(DEPLOYER, 47987)
    assert str(addr) == "lu-2SF7uOB5EBNLGFkLWHzieJ4BNqxQJ48sQiRpzj90"


def test_nonce_is_little_endian_u64():
    deployer = as_public_address(DEPLOYER)
    expected = sha256(bytes(deployer) + (47987).to_bytes(8, "little"))
    assert bytes(derive_contract_address(deployer, 47987)) == expected
    big_endian = sha256(bytes(deployer) + struct.pack(">Q", 47987))
    assert bytes(derive_contract_address(deployer, 47987)) != big_endian


@given(st.binary(min_size=32, max_size=32), st.integers(min_value=0, max_value=2**64 - 1))
def test_derivation_is_deterministic(raw, nonce):
    a = derive_contract_address(raw, nonce)
    assert a == derive_contract_address(PublicAddress(raw), nonce)
    assert isinstance(a, PublicAddress)


def test_distinct_nonces_give_distinct_addresses():
    seen = {derive_contract_address(DEPLOYER, n) for n in range(50)}
    assert len(seen) == 50


@pytest.mark.parametrize("nonce", [-1, 2**64, "1", 1.0, True])
def test_invalid_nonce(nonce):
    with pytest.raises(ValidationError):
        derive_contract_address(DEPLOYER, nonce)


def test_negative_nonce_message():
    with pytest.raises(ValidationError, match="invalid nonce"):
        derive_contract_address(DEPLOYER, -5)


@pytest.mark.parametrize("bad", ["", "abc", b"\x00" * 31, b"\x00" * 33, 42, None, "!!!!"])
def test_as_public_address_rejects(bad):
    with pytest.raises(ValidationError):
        as_public_address(bad)
    assert not is_valid(bad)


def test_as_public_address_accepts_all_forms():
    addr = as_public_address(DEPLOYER)
    assert as_public_address(bytes(addr)) == addr
    assert as_public_address(bytearray(bytes(addr))) == addr
    assert as_public_address(addr) is addr
    assert is_valid(DEPLOYER)


def test_as_sha256_hash():
    h = as_sha256_hash("hRle-75dVeso4_dZxUQN5NFKQ2eoxm_wmHYySTGscOU")
    assert isinstance(h, Sha256Hash)
    assert bytes(h).hex().startswith("85195e")
    with pytest.raises(ValidationError):
        as_sha256_hash(b"\x01")
