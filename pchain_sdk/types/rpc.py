"""
Request/response bodies for the node's binary RPC routes.

Each route takes one Borsh-encoded request and answers one Borsh-encoded
response; `highest_committed_block` takes no body. Maps and sets are written
sorted by key bytes, as the node expects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, FrozenSet, Optional, Tuple

from ..errors import CodecError
from ..utils.borsh import BinaryReader, BinaryWriter, decode_exact
from ..utils.bytes import BytesLike
from .core import (Account, Block, CommandReceipt, PublicAddress, Receipt,
                   Sha256Hash, SignedTx, read_account, write_account)


class _Message:
    __slots__ = ()

    def write(self, w: BinaryWriter) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def serialize(self) -> bytes:
        w = BinaryWriter()
        self.write(w)
        return w.to_bytes()

    @classmethod
    def read(cls, r: BinaryReader):  # pragma: no cover - overridden
        raise NotImplementedError

    @classmethod
    def deserialize(cls, data: BytesLike):
        return decode_exact(data, cls.read)


def _write_hash(w: BinaryWriter, h: Sha256Hash) -> None:
    h.write(w)


def _write_addr(w: BinaryWriter, a: PublicAddress) -> None:
    a.write(w)


# --- state ----------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class StateRequest(_Message):
    accounts: FrozenSet[PublicAddress]
    include_contract: bool
    storage_keys: Dict[PublicAddress, FrozenSet[bytes]] = field(default_factory=dict)

    def write(self, w: BinaryWriter) -> None:
        w.write_vec(sorted(self.accounts, key=bytes), _write_addr)
        w.write_bool(self.include_contract)
        w.write_u32(len(self.storage_keys))
        for addr in sorted(self.storage_keys, key=bytes):
            addr.write(w)
            w.write_vec(sorted(self.storage_keys[addr]), BinaryWriter.write_bytes)

    @classmethod
    def read(cls, r: BinaryReader) -> "StateRequest":
        accounts = frozenset(r.read_vec(PublicAddress.read))
        include_contract = r.read_bool()
        storage_keys: Dict[PublicAddress, FrozenSet[bytes]] = {}
        for _ in range(r.read_u32()):
            addr = PublicAddress.read(r)
            storage_keys[addr] = frozenset(r.read_vec(BinaryReader.read_bytes))
        return cls(accounts, include_contract, storage_keys)


@dataclass(slots=True, frozen=True)
class StateResponse(_Message):
    # None only when a transport hands back a body without an accounts map
    accounts: Optional[Dict[PublicAddress, Account]]
    storage_tuples: Dict[PublicAddress, Dict[bytes, bytes]] = field(default_factory=dict)
    block_hash: Optional[Sha256Hash] = None

    def write(self, w: BinaryWriter) -> None:
        accounts = self.accounts or {}
        w.write_u32(len(accounts))
        for addr in sorted(accounts, key=bytes):
            addr.write(w)
            write_account(w, accounts[addr])
        w.write_u32(len(self.storage_tuples))
        for addr in sorted(self.storage_tuples, key=bytes):
            addr.write(w)
            kv = self.storage_tuples[addr]
            w.write_u32(len(kv))
            for k in sorted(kv):
                w.write_bytes(k)
                w.write_bytes(kv[k])
        if self.block_hash is None:
            raise CodecError("StateResponse.block_hash is required on the wire")
        self.block_hash.write(w)

    @classmethod
    def read(cls, r: BinaryReader) -> "StateResponse":
        accounts: Dict[PublicAddress, Account] = {}
        for _ in range(r.read_u32()):
            addr = PublicAddress.read(r)
            accounts[addr] = read_account(r)
        storage: Dict[PublicAddress, Dict[bytes, bytes]] = {}
        for _ in range(r.read_u32()):
            addr = PublicAddress.read(r)
            kv: Dict[bytes, bytes] = {}
            for _ in range(r.read_u32()):
                k = r.read_bytes()
                kv[k] = r.read_bytes()
            storage[addr] = kv
        return cls(accounts, storage, Sha256Hash.read(r))


# --- blocks ---------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class BlockRequest(_Message):
    block_hash: Sha256Hash

    def write(self, w: BinaryWriter) -> None:
        self.block_hash.write(w)

    @classmethod
    def read(cls, r: BinaryReader) -> "BlockRequest":
        return cls(Sha256Hash.read(r))


@dataclass(slots=True, frozen=True)
class BlockResponse(_Message):
    block: Optional[Block]

    def write(self, w: BinaryWriter) -> None:
        w.write_option(self.block, lambda w_, b: b.write(w_))

    @classmethod
    def read(cls, r: BinaryReader) -> "BlockResponse":
        return cls(r.read_option(Block.read))


@dataclass(slots=True, frozen=True)
class BlockHashByHeightRequest(_Message):
    block_height: int

    def write(self, w: BinaryWriter) -> None:
        w.write_u64(self.block_height)

    @classmethod
    def read(cls, r: BinaryReader) -> "BlockHashByHeightRequest":
        return cls(r.read_u64())


@dataclass(slots=True, frozen=True)
class BlockHashByHeightResponse(_Message):
    block_height: int
    block_hash: Optional[Sha256Hash]

    def write(self, w: BinaryWriter) -> None:
        w.write_u64(self.block_height)
        w.write_option(self.block_hash, _write_hash)

    @classmethod
    def read(cls, r: BinaryReader) -> "BlockHashByHeightResponse":
        return cls(r.read_u64(), r.read_option(Sha256Hash.read))


@dataclass(slots=True, frozen=True)
class HighestCommittedBlockResponse(_Message):
    block_hash: Optional[Sha256Hash]

    def write(self, w: BinaryWriter) -> None:
        w.write_option(self.block_hash, _write_hash)

    @classmethod
    def read(cls, r: BinaryReader) -> "HighestCommittedBlockResponse":
        return cls(r.read_option(Sha256Hash.read))


# --- transactions -----------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TransactionRequest(_Message):
    transaction_hash: Sha256Hash
    include_receipt: bool

    def write(self, w: BinaryWriter) -> None:
        self.transaction_hash.write(w)
        w.write_bool(self.include_receipt)

    @classmethod
    def read(cls, r: BinaryReader) -> "TransactionRequest":
        return cls(Sha256Hash.read(r), r.read_bool())


@dataclass(slots=True, frozen=True)
class TransactionResponse(_Message):
    transaction: Optional[SignedTx] = None
    receipt: Optional[Receipt] = None
    block_hash: Optional[Sha256Hash] = None
    position: Optional[int] = None

    def write(self, w: BinaryWriter) -> None:
        w.write_option(self.transaction, lambda w_, tx: tx.write(w_))
        w.write_option(self.receipt, lambda w_, rc: rc.write(w_))
        w.write_option(self.block_hash, _write_hash)
        w.write_option(self.position, BinaryWriter.write_u32)

    @classmethod
    def read(cls, r: BinaryReader) -> "TransactionResponse":
        return cls(
            r.read_option(SignedTx.read),
            r.read_option(Receipt.read),
            r.read_option(Sha256Hash.read),
            r.read_option(BinaryReader.read_u32),
        )


@dataclass(slots=True, frozen=True)
class ReceiptRequest(_Message):
    transaction_hash: Sha256Hash

    def write(self, w: BinaryWriter) -> None:
        self.transaction_hash.write(w)

    @classmethod
    def read(cls, r: BinaryReader) -> "ReceiptRequest":
        return cls(Sha256Hash.read(r))


@dataclass(slots=True, frozen=True)
class ReceiptResponse(_Message):
    transaction_hash: Sha256Hash
    receipt: Optional[Receipt] = None
    block_hash: Optional[Sha256Hash] = None
    position: Optional[int] = None

    def write(self, w: BinaryWriter) -> None:
        self.transaction_hash.write(w)
        w.write_option(self.receipt, lambda w_, rc: rc.write(w_))
        w.write_option(self.block_hash, _write_hash)
        w.write_option(self.position, BinaryWriter.write_u32)

    @classmethod
    def read(cls, r: BinaryReader) -> "ReceiptResponse":
        return cls(
            Sha256Hash.read(r),
            r.read_option(Receipt.read),
            r.read_option(Sha256Hash.read),
            r.read_option(BinaryReader.read_u32),
        )


class SubmitTransactionError(IntEnum):
    UNACCEPTABLE_NONCE = 0
    MEMPOOL_FULL = 1
    OTHER = 2


def _read_submit_error(r: BinaryReader) -> SubmitTransactionError:
    raw = r.read_u8()
    try:
        return SubmitTransactionError(raw)
    except ValueError as e:
        raise CodecError(f"unknown submit_transaction error variant {raw}") from e


@dataclass(slots=True, frozen=True)
class SubmitTransactionRequest(_Message):
    transaction: SignedTx

    def write(self, w: BinaryWriter) -> None:
        self.transaction.write(w)

    @classmethod
    def read(cls, r: BinaryReader) -> "SubmitTransactionRequest":
        return cls(SignedTx.read(r))


@dataclass(slots=True, frozen=True)
class SubmitTransactionResponse(_Message):
    error: Optional[SubmitTransactionError] = None

    def write(self, w: BinaryWriter) -> None:
        w.write_option(self.error, lambda w_, e: w_.write_u8(int(e)))

    @classmethod
    def read(cls, r: BinaryReader) -> "SubmitTransactionResponse":
        return cls(r.read_option(_read_submit_error))


# --- view -----------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ViewRequest(_Message):
    target: PublicAddress
    method: str
    arguments: Optional[Tuple[bytes, ...]] = None

    def write(self, w: BinaryWriter) -> None:
        self.target.write(w)
        w.write_string(self.method)
        w.write_option(
            self.arguments,
            lambda w_, args: w_.write_vec(list(args), BinaryWriter.write_bytes),
        )

    @classmethod
    def read(cls, r: BinaryReader) -> "ViewRequest":
        target = PublicAddress.read(r)
        method = r.read_string()
        args = r.read_option(lambda r_: r_.read_vec(BinaryReader.read_bytes))
        return cls(target, method, tuple(args) if args is not None else None)


@dataclass(slots=True, frozen=True)
class ViewResponse(_Message):
    receipt: CommandReceipt

    def write(self, w: BinaryWriter) -> None:
        self.receipt.write(w)

    @classmethod
    def read(cls, r: BinaryReader) -> "ViewResponse":
        return cls(CommandReceipt.read(r))


__all__ = [
    "StateRequest",
    "StateResponse",
    "BlockRequest",
    "BlockResponse",
    "BlockHashByHeightRequest",
    "BlockHashByHeightResponse",
    "HighestCommittedBlockResponse",
    "TransactionRequest",
    "TransactionResponse",
    "ReceiptRequest",
    "ReceiptResponse",
    "SubmitTransactionError",
    "SubmitTransactionRequest",
    "SubmitTransactionResponse",
    "ViewRequest",
    "ViewResponse",
]
