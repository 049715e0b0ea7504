from __future__ import annotations

import base64

import pytest

from conftest import load_hex
from pchain_sdk.errors import CodecError
from pchain_sdk.tx.encode import verify_signature
from pchain_sdk.types.core import (AccountWithContract, AccountWithoutContract,
                                   Call, CommandReceipt, ExitStatus, Log,
                                   PublicAddress, Receipt, Sha256Hash,
                                   SignedTx, Transfer)
from pchain_sdk.types.rpc import (BlockHashByHeightRequest,
                                  BlockHashByHeightResponse, BlockResponse,
                                  HighestCommittedBlockResponse, StateRequest,
                                  StateResponse, SubmitTransactionError,
                                  SubmitTransactionResponse,
                                  TransactionRequest, TransactionResponse,
                                  ViewRequest, ViewResponse)
from pchain_sdk.utils.borsh import BinaryReader, BinaryWriter
from pchain_sdk.utils.hash import sha256

ACCOUNT = PublicAddress.from_base64url("6YokxrV0U2y6zg8FElk3Rb7j_jGolP28ZuMd6P2XXn0")
TX_HASH = Sha256Hash.from_base64url("hRle-75dVeso4_dZxUQN5NFKQ2eoxm_wmHYySTGscOU")
TX_SIGNER = "pveHxHcfPNRH-ljtu6kN7d6T5cTugjg8QauT0A8OkAU"
BLOCK_749315 = "SLB4JfkeKtq6h9GHclW7RNHgq77kP1j23dR3-LqW1U8"


# ---- primitives ---------------------------------------------------------------


def test_writer_little_endian_and_prefixes():
    w = BinaryWriter()
    w.write_u8(1).write_u32(2).write_u64(3).write_bool(True).write_string("hi")
    w.write_option(None, BinaryWriter.write_u64).write_option(7, BinaryWriter.write_u32)
    w.write_vec([b"a", b""], BinaryWriter.write_bytes)
    assert w.to_bytes().hex() == (
        "01"
        "02000000"
        "0300000000000000"
        "01"
        "020000006869"
        "00"
        "0107000000"
        "02000000" "0100000061" "00000000"
    )


def test_writer_rejects_out_of_range():
    with pytest.raises(CodecError):
        BinaryWriter().write_u8(256)
    with pytest.raises(CodecError):
        BinaryWriter().write_u64(-1)
    with pytest.raises(CodecError):
        BinaryWriter().write_fixed(b"\x00" * 31, 32)


def test_reader_truncated_and_trailing():
    with pytest.raises(CodecError):
        BinaryReader(b"\x01\x02").read_u32()
    with pytest.raises(CodecError):
        BlockHashByHeightRequest.deserialize(bytes(9))
    with pytest.raises(CodecError):
        BinaryReader(b"\x02").read_bool()
    with pytest.raises(CodecError):
        BinaryReader(b"\x05").read_option(BinaryReader.read_u8)


# ---- state ----------------------------------------------------------------------


def test_state_request_matches_node_bytes():
    req = StateRequest(accounts=frozenset([ACCOUNT]), include_contract=False)
    assert req.serialize().hex() == (
        "01000000e98a24c6b574536cbace0f0512593745bee3fe31a894fdbc66e31de8fd975e7d"
        "00"
        "00000000"
    )
    with_contract = StateRequest(frozenset([ACCOUNT]), include_contract=True)
    assert with_contract.serialize().hex().endswith("0100000000")


def test_state_request_base64_vector():
    addr = PublicAddress.from_base64url("mC23wtyCuuku5jK6AHnHmYPE3YHXaBh1WZbR3bOmMJQ")
    req = StateRequest(frozenset([addr]), include_contract=False)
    assert base64.b64encode(req.serialize()).decode() == "AQAAAJgtt8LcgrrpLuYyugB5x5mDxN2B12gYdVmW0d2zpjCUAAAAAAA="


def test_state_request_sorts_accounts():
    a = PublicAddress(b"\x02" * 32)
    b = PublicAddress(b"\x01" * 32)
    raw = StateRequest(frozenset([a, b]), False).serialize()
    assert raw[4:36] == bytes(b)
    assert raw[36:68] == bytes(a)


def test_state_response_decodes_account_without_contract():
    raw = bytes.fromhex(
        "01000000e98a24c6b574536cbace0f0512593745bee3fe31a894fdbc66e31de8fd975e7d"
        "010a00000000000000395bec1e00000000000000000000"
        "f5a90f0ea25dd388d85d0306ad733146933fc8a291abbe5b2aff6dad914afcda"
    )
    resp = StateResponse.deserialize(raw)
    account = resp.accounts[ACCOUNT]
    assert isinstance(account, AccountWithoutContract)
    assert account.nonce == 10
    assert account.balance == 518806329
    assert resp.storage_tuples == {}
    assert resp.serialize() == raw


def test_state_response_base64_vector():
    raw = base64.b64decode(
        "AQAAAJgtt8LcgrrpLuYyugB5x5mDxN2B12gYdVmW0d2zpjCUAZUAAAAAAAAA4H86QgAAAAAAAAAAAADAhOi1zRAUBwAsDrUVenweK7J3IbbGdILyOCyYosNw9A=="
    )
    resp = StateResponse.deserialize(raw)
    (account,) = resp.accounts.values()
    assert (account.nonce, account.balance) == (149, 1111130080)


def test_account_with_contract_roundtrip():
    acct = AccountWithContract(nonce=1, balance=2, contract=b"\x00asm\x01", cbi_version=0, storage_hash=None)
    resp = StateResponse({ACCOUNT: acct}, {ACCOUNT: {b"k": b"v"}}, Sha256Hash(bytes(32)))
    back = StateResponse.deserialize(resp.serialize())
    assert back.accounts[ACCOUNT] == acct
    assert back.accounts[ACCOUNT].has_contract
    assert back.storage_tuples[ACCOUNT] == {b"k": b"v"}


def test_unknown_account_variant():
    raw = bytes.fromhex("01000000") + bytes(ACCOUNT) + b"\x07" + bytes(64)
    with pytest.raises(CodecError):
        StateResponse.deserialize(raw)


# ---- blocks -------------------------------------------------------------------------


def test_block_hash_by_height_vectors():
    assert BlockHashByHeightRequest(749315).serialize().hex() == "036f0b0000000000"
    resp = BlockHashByHeightResponse.deserialize(bytes.fromhex(
        "036f0b0000000000"
        "0148b07825f91e2adaba87d1877255bb44d1e0abbee43f58f6ddd477f8ba96d54f"
    ))
    assert resp.block_height == 749315
    assert str(resp.block_hash) == BLOCK_749315


def test_highest_committed_block_vector():
    resp = HighestCommittedBlockResponse.deserialize(bytes.fromhex(
        "010c92c102ea686e2d825f2ab36d17598c39d4f9f882f961937e0d57805f58631e"
    ))
    assert str(resp.block_hash) == "DJLBAupobi2CXyqzbRdZjDnU-fiC-WGTfg1XgF9YYx4"


@pytest.mark.parametrize(
    "name,height,block_hash",
    [
        ("block_response_762049.hex", 762049, "iyJSh7SUwk-v1VoXt0YbZvCpqbxeSKWQ-o8xMkhvakU"),
        ("block_response_763256.hex", 763256, "DJLBAupobi2CXyqzbRdZjDnU-fiC-WGTfg1XgF9YYx4"),
    ],
)
def test_empty_blocks_decode_and_roundtrip(name, height, block_hash):
    raw = load_hex(name)
    block = BlockResponse.deserialize(raw).block
    assert block.height == height
    assert str(block.hash) == block_hash
    assert block.transactions == ()
    assert block.receipts == ()
    assert BlockResponse(block).serialize() == raw


def test_block_with_transfer_decodes():
    raw = load_hex("block_response_749315.hex")
    block = BlockResponse.deserialize(raw).block
    assert block.height == 749315
    assert str(block.hash) == BLOCK_749315
    assert block.header.gas_used == 166350
    assert BlockResponse(block).serialize() == raw

    (tx,) = block.transactions
    assert str(tx.signer) == TX_SIGNER
    assert tx.nonce == 193
    assert tx.transaction.gas_limit == 67_500_000
    assert tx.transaction.max_base_fee_per_gas == 8
    assert tx.transaction.priority_fee_per_gas == 0
    (cmd,) = tx.commands
    assert cmd == Transfer(
        PublicAddress.from_base64url("mC23wtyCuuku5jK6AHnHmYPE3YHXaBh1WZbR3bOmMJQ"), 2_000_000_000
    )

    (receipt,) = block.receipts
    assert receipt[0].exit_status is ExitStatus.SUCCESS
    assert receipt[0].gas_used == 32820


def test_real_transaction_signature_and_hash():
    block = BlockResponse.deserialize(load_hex("block_response_749315.hex")).block
    tx = block.transactions[0]
    assert tx.hash == TX_HASH
    assert tx.hash.value == sha256(tx.signature)
    assert verify_signature(tx)
    assert SignedTx.deserialize(tx.serialize()) == tx


def test_transaction_response_fixture():
    raw = load_hex("transaction_response_hRle.hex")
    resp = TransactionResponse.deserialize(raw)
    assert resp.transaction.hash == TX_HASH
    assert resp.receipt[0].succeeded
    assert str(resp.block_hash) == BLOCK_749315
    assert resp.position == 0
    assert resp.serialize() == raw


def test_transaction_request_and_missing_block():
    req = TransactionRequest(TX_HASH, include_receipt=True)
    assert req.serialize().hex() == "85195efbbe5d55eb28e3f759c5440de4d14a4367a8c66ff09876324931ac70e501"
    assert BlockResponse.deserialize(b"\x00").block is None


def test_block_trailing_bytes_rejected():
    raw = load_hex("block_response_762049.hex")
    with pytest.raises(CodecError):
        BlockResponse.deserialize(raw + b"\x00")
    with pytest.raises(CodecError):
        BlockResponse.deserialize(raw[:-1])


# ---- submit / view -------------------------------------------------------------------


def test_submit_transaction_response():
    assert SubmitTransactionResponse.deserialize(b"\x00").error is None
    assert SubmitTransactionResponse.deserialize(b"\x01\x01").error is SubmitTransactionError.MEMPOOL_FULL
    with pytest.raises(CodecError):
        SubmitTransactionResponse.deserialize(b"\x01\x09")


def test_view_roundtrip():
    req = ViewRequest(ACCOUNT, "get_hello", (b"\x01\x02",))
    assert ViewRequest.deserialize(req.serialize()) == req

    cr = CommandReceipt(ExitStatus.FAILED, 5, b"\xff", (Log(b"t", b"v"),))
    raw = ViewResponse(cr).serialize()
    assert raw[:9] == b"\x01" + (5).to_bytes(8, "little")
    assert ViewResponse.deserialize(raw).receipt == cr
    assert not cr.succeeded


def test_call_arguments_encoding():
    call = Call(ACCOUNT, "m", None, None)
    w = BinaryWriter()
    call.write_fields(w)
    assert w.to_bytes() == bytes(ACCOUNT) + b"\x01\x00\x00\x00m" + b"\x00" + b"\x00"

    receipt = Receipt((CommandReceipt(ExitStatus.SUCCESS, 1),))
    assert len(receipt) == 1
    assert list(receipt)[0].gas_used == 1
