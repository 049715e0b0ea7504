"""
Core protocol types for the Python SDK.

Every type here is a frozen dataclass with two codec hooks:

- ``write(w: BinaryWriter)`` appends the Borsh encoding of the value
- ``read(r: BinaryReader)`` (classmethod) decodes one value at the cursor

plus ``serialize()`` / ``deserialize(data)`` convenience wrappers where a value
travels on its own. Binary fields are Python ``bytes``; 32-byte identifiers are
wrapped in :class:`PublicAddress` / :class:`Sha256Hash`, which print as
unpadded base64url.

Nothing here performs network I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type, Union

from ..errors import CodecError, ValidationError
from ..utils.borsh import BinaryReader, BinaryWriter, decode_exact
from ..utils.bytes import BytesLike, b64url_decode, b64url_encode

# --- 32-byte identifiers -------------------------------------------------------


@dataclass(slots=True, frozen=True)
class _Bytes32:
    value: bytes

    LENGTH: ClassVar[int] = 32

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise ValidationError(f"{type(self).__name__} expects bytes, got {type(self.value).__name__}")
        b = bytes(self.value)
        if len(b) != self.LENGTH:
            raise ValidationError(
                f"{type(self).__name__} must be exactly {self.LENGTH} bytes, got {len(b)}"
            )
        object.__setattr__(self, "value", b)

    @classmethod
    def from_base64url(cls, s: str):
        try:
            raw = b64url_decode(s)
        except ValueError as e:
            raise ValidationError(f"invalid base64url {cls.__name__}: {s!r}") from e
        return cls(raw)

    def to_base64url(self) -> str:
        return b64url_encode(self.value)

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.to_base64url()

    def write(self, w: BinaryWriter) -> None:
        w.write_fixed(self.value, self.LENGTH)

    @classmethod
    def read(cls, r: BinaryReader):
        return cls(r.read_fixed(cls.LENGTH))


class PublicAddress(_Bytes32):
    """An Ed25519 public key or a contract address."""

    __slots__ = ()


class Sha256Hash(_Bytes32):
    """A block, transaction or state hash."""

    __slots__ = ()


AddressLike = Union[str, BytesLike, PublicAddress]
HashLike = Union[str, BytesLike, Sha256Hash]


def _write_args(w: BinaryWriter, args: Optional[Tuple[bytes, ...]]) -> None:
    w.write_option(args, lambda w_, a: w_.write_vec(list(a), BinaryWriter.write_bytes))


def _read_args(r: BinaryReader) -> Optional[Tuple[bytes, ...]]:
    args = r.read_option(lambda r_: r_.read_vec(BinaryReader.read_bytes))
    return tuple(args) if args is not None else None


# --- Commands -------------------------------------------------------------------
#
# Closed tagged union. TAG is the Borsh enum variant index.


@dataclass(slots=True, frozen=True)
class Transfer:
    recipient: PublicAddress
    amount: int

    TAG: ClassVar[int] = 0

    def write_fields(self, w: BinaryWriter) -> None:
        self.recipient.write(w)
        w.write_u64(self.amount)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "Transfer":
        return cls(PublicAddress.read(r), r.read_u64())


@dataclass(slots=True, frozen=True)
class Deploy:
    contract: bytes
    cbi_version: int

    TAG: ClassVar[int] = 1

    def write_fields(self, w: BinaryWriter) -> None:
        w.write_bytes(self.contract)
        w.write_u32(self.cbi_version)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "Deploy":
        return cls(r.read_bytes(), r.read_u32())


@dataclass(slots=True, frozen=True)
class Call:
    target: PublicAddress
    method: str
    arguments: Optional[Tuple[bytes, ...]] = None
    amount: Optional[int] = None

    TAG: ClassVar[int] = 2

    def __post_init__(self) -> None:
        if self.arguments is not None and not isinstance(self.arguments, tuple):
            object.__setattr__(self, "arguments", tuple(bytes(a) for a in self.arguments))

    def write_fields(self, w: BinaryWriter) -> None:
        self.target.write(w)
        w.write_string(self.method)
        _write_args(w, self.arguments)
        w.write_option(self.amount, BinaryWriter.write_u64)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "Call":
        return cls(
            PublicAddress.read(r),
            r.read_string(),
            _read_args(r),
            r.read_option(BinaryReader.read_u64),
        )


@dataclass(slots=True, frozen=True)
class CreatePool:
    commission_rate: int

    TAG: ClassVar[int] = 3

    def write_fields(self, w: BinaryWriter) -> None:
        w.write_u8(self.commission_rate)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "CreatePool":
        return cls(r.read_u8())


@dataclass(slots=True, frozen=True)
class SetPoolSettings:
    commission_rate: int

    TAG: ClassVar[int] = 4

    def write_fields(self, w: BinaryWriter) -> None:
        w.write_u8(self.commission_rate)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "SetPoolSettings":
        return cls(r.read_u8())


@dataclass(slots=True, frozen=True)
class DeletePool:
    TAG: ClassVar[int] = 5

    def write_fields(self, w: BinaryWriter) -> None:
        pass

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "DeletePool":
        return cls()


@dataclass(slots=True, frozen=True)
class CreateDeposit:
    operator: PublicAddress
    balance: int
    auto_stake_rewards: bool

    TAG: ClassVar[int] = 6

    def write_fields(self, w: BinaryWriter) -> None:
        self.operator.write(w)
        w.write_u64(self.balance)
        w.write_bool(self.auto_stake_rewards)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "CreateDeposit":
        return cls(PublicAddress.read(r), r.read_u64(), r.read_bool())


@dataclass(slots=True, frozen=True)
class SetDepositSettings:
    operator: PublicAddress
    auto_stake_rewards: bool

    TAG: ClassVar[int] = 7

    def write_fields(self, w: BinaryWriter) -> None:
        self.operator.write(w)
        w.write_bool(self.auto_stake_rewards)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "SetDepositSettings":
        return cls(PublicAddress.read(r), r.read_bool())


@dataclass(slots=True, frozen=True)
class TopUpDeposit:
    operator: PublicAddress
    amount: int

    TAG: ClassVar[int] = 8

    def write_fields(self, w: BinaryWriter) -> None:
        self.operator.write(w)
        w.write_u64(self.amount)

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "TopUpDeposit":
        return cls(PublicAddress.read(r), r.read_u64())


@dataclass(slots=True, frozen=True)
class _OperatorMaxAmount:
    """Shared shape of the withdraw/stake/unstake deposit commands."""

    operator: PublicAddress
    max_amount: int

    def write_fields(self, w: BinaryWriter) -> None:
        self.operator.write(w)
        w.write_u64(self.max_amount)

    @classmethod
    def read_fields(cls, r: BinaryReader):
        return cls(PublicAddress.read(r), r.read_u64())


@dataclass(slots=True, frozen=True)
class WithdrawDeposit(_OperatorMaxAmount):
    TAG: ClassVar[int] = 9


@dataclass(slots=True, frozen=True)
class StakeDeposit(_OperatorMaxAmount):
    TAG: ClassVar[int] = 10


@dataclass(slots=True, frozen=True)
class UnstakeDeposit(_OperatorMaxAmount):
    TAG: ClassVar[int] = 11


@dataclass(slots=True, frozen=True)
class NextEpoch:
    TAG: ClassVar[int] = 12

    def write_fields(self, w: BinaryWriter) -> None:
        pass

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "NextEpoch":
        return cls()


Command = Union[
    Transfer,
    Deploy,
    Call,
    CreatePool,
    SetPoolSettings,
    DeletePool,
    CreateDeposit,
    SetDepositSettings,
    TopUpDeposit,
    WithdrawDeposit,
    StakeDeposit,
    UnstakeDeposit,
    NextEpoch,
]

COMMAND_TYPES: Dict[int, Type[Any]] = {
    cls.TAG: cls
    for cls in (
        Transfer,
        Deploy,
        Call,
        CreatePool,
        SetPoolSettings,
        DeletePool,
        CreateDeposit,
        SetDepositSettings,
        TopUpDeposit,
        WithdrawDeposit,
        StakeDeposit,
        UnstakeDeposit,
        NextEpoch,
    )
}

# Commands an account may put in its own transactions.
USER_COMMAND_TYPES: Tuple[Type[Any], ...] = (
    Transfer,
    Deploy,
    Call,
    CreateDeposit,
    SetDepositSettings,
    TopUpDeposit,
    WithdrawDeposit,
    StakeDeposit,
    UnstakeDeposit,
)


def write_command(w: BinaryWriter, cmd: Command) -> None:
    if type(cmd) not in COMMAND_TYPES.values():
        raise CodecError(f"not a command: {type(cmd).__name__}")
    w.write_u8(cmd.TAG)
    cmd.write_fields(w)


def read_command(r: BinaryReader) -> Command:
    tag = r.read_u8()
    cls = COMMAND_TYPES.get(tag)
    if cls is None:
        raise CodecError(f"unknown command variant {tag}")
    return cls.read_fields(r)


# --- Transactions ---------------------------------------------------------------

SIGNATURE_LENGTH = 64


@dataclass(slots=True, frozen=True)
class Transaction:
    """An unsigned transaction. Command order is execution order."""

    signer: PublicAddress
    nonce: int
    commands: Tuple[Command, ...]
    gas_limit: int
    max_base_fee_per_gas: int
    priority_fee_per_gas: int

    def __post_init__(self) -> None:
        if not isinstance(self.commands, tuple):
            object.__setattr__(self, "commands", tuple(self.commands))

    def write(self, w: BinaryWriter) -> None:
        self.signer.write(w)
        w.write_u64(self.nonce)
        w.write_vec(list(self.commands), write_command)
        w.write_u64(self.gas_limit)
        w.write_u64(self.max_base_fee_per_gas)
        w.write_u64(self.priority_fee_per_gas)

    @classmethod
    def read(cls, r: BinaryReader) -> "Transaction":
        return cls(
            signer=PublicAddress.read(r),
            nonce=r.read_u64(),
            commands=tuple(r.read_vec(read_command)),
            gas_limit=r.read_u64(),
            max_base_fee_per_gas=r.read_u64(),
            priority_fee_per_gas=r.read_u64(),
        )

    def signing_bytes(self) -> bytes:
        """The message an Ed25519 signature covers: the SignedTx layout with zeroed signature and hash."""
        w = BinaryWriter()
        self.write(w)
        w.write_fixed(bytes(SIGNATURE_LENGTH), SIGNATURE_LENGTH)
        w.write_fixed(bytes(Sha256Hash.LENGTH), Sha256Hash.LENGTH)
        return w.to_bytes()


@dataclass(slots=True, frozen=True)
class SignedTx:
    transaction: Transaction
    signature: bytes
    hash: Sha256Hash

    def __post_init__(self) -> None:
        if len(self.signature) != SIGNATURE_LENGTH:
            raise ValidationError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(self.signature)}")

    def write(self, w: BinaryWriter) -> None:
        self.transaction.write(w)
        w.write_fixed(self.signature, SIGNATURE_LENGTH)
        self.hash.write(w)

    @classmethod
    def read(cls, r: BinaryReader) -> "SignedTx":
        tx = Transaction.read(r)
        return cls(tx, r.read_fixed(SIGNATURE_LENGTH), Sha256Hash.read(r))

    def serialize(self) -> bytes:
        w = BinaryWriter()
        self.write(w)
        return w.to_bytes()

    @classmethod
    def deserialize(cls, data: BytesLike) -> "SignedTx":
        return decode_exact(data, cls.read)

    # Convenience passthroughs
    @property
    def signer(self) -> PublicAddress:
        return self.transaction.signer

    @property
    def nonce(self) -> int:
        return self.transaction.nonce

    @property
    def commands(self) -> Tuple[Command, ...]:
        return self.transaction.commands


# --- Receipts -------------------------------------------------------------------


class ExitStatus(IntEnum):
    SUCCESS = 0
    FAILED = 1
    GAS_EXHAUSTED = 2


@dataclass(slots=True, frozen=True)
class Log:
    topic: bytes
    value: bytes

    def write(self, w: BinaryWriter) -> None:
        w.write_bytes(self.topic)
        w.write_bytes(self.value)

    @classmethod
    def read(cls, r: BinaryReader) -> "Log":
        return cls(r.read_bytes(), r.read_bytes())


@dataclass(slots=True, frozen=True)
class CommandReceipt:
    exit_status: ExitStatus
    gas_used: int
    return_values: bytes = b""
    logs: Tuple[Log, ...] = ()

    def write(self, w: BinaryWriter) -> None:
        w.write_u8(int(self.exit_status))
        w.write_u64(self.gas_used)
        w.write_bytes(self.return_values)
        w.write_vec(list(self.logs), lambda w_, log: log.write(w_))

    @classmethod
    def read(cls, r: BinaryReader) -> "CommandReceipt":
        raw = r.read_u8()
        try:
            status = ExitStatus(raw)
        except ValueError as e:
            raise CodecError(f"unknown exit status {raw}") from e
        return cls(status, r.read_u64(), r.read_bytes(), tuple(r.read_vec(Log.read)))

    @property
    def succeeded(self) -> bool:
        return self.exit_status == ExitStatus.SUCCESS


@dataclass(slots=True, frozen=True)
class Receipt:
    """Per-transaction receipt; command_receipts[i] pairs with commands[i]."""

    command_receipts: Tuple[CommandReceipt, ...] = ()

    def write(self, w: BinaryWriter) -> None:
        w.write_vec(list(self.command_receipts), lambda w_, cr: cr.write(w_))

    @classmethod
    def read(cls, r: BinaryReader) -> "Receipt":
        return cls(tuple(r.read_vec(CommandReceipt.read)))

    def __len__(self) -> int:
        return len(self.command_receipts)

    def __getitem__(self, i: int) -> CommandReceipt:
        return self.command_receipts[i]

    def __iter__(self):
        return iter(self.command_receipts)


# --- Accounts -------------------------------------------------------------------


def _read_hash_opt(r: BinaryReader) -> Optional[Sha256Hash]:
    return r.read_option(Sha256Hash.read)


@dataclass(slots=True, frozen=True)
class AccountWithContract:
    nonce: int
    balance: int
    contract: Optional[bytes] = None
    cbi_version: Optional[int] = None
    storage_hash: Optional[Sha256Hash] = None

    TAG: ClassVar[int] = 0
    has_contract: ClassVar[bool] = True

    def write_fields(self, w: BinaryWriter) -> None:
        w.write_u64(self.nonce)
        w.write_u64(self.balance)
        w.write_option(self.contract, BinaryWriter.write_bytes)
        w.write_option(self.cbi_version, BinaryWriter.write_u32)
        w.write_option(self.storage_hash, lambda w_, h: h.write(w_))

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "AccountWithContract":
        return cls(
            nonce=r.read_u64(),
            balance=r.read_u64(),
            contract=r.read_option(BinaryReader.read_bytes),
            cbi_version=r.read_option(BinaryReader.read_u32),
            storage_hash=_read_hash_opt(r),
        )


@dataclass(slots=True, frozen=True)
class AccountWithoutContract:
    nonce: int
    balance: int
    cbi_version: Optional[int] = None
    storage_hash: Optional[Sha256Hash] = None

    TAG: ClassVar[int] = 1
    has_contract: ClassVar[bool] = False

    def write_fields(self, w: BinaryWriter) -> None:
        w.write_u64(self.nonce)
        w.write_u64(self.balance)
        w.write_option(self.cbi_version, BinaryWriter.write_u32)
        w.write_option(self.storage_hash, lambda w_, h: h.write(w_))

    @classmethod
    def read_fields(cls, r: BinaryReader) -> "AccountWithoutContract":
        return cls(
            nonce=r.read_u64(),
            balance=r.read_u64(),
            cbi_version=r.read_option(BinaryReader.read_u32),
            storage_hash=_read_hash_opt(r),
        )


Account = Union[AccountWithContract, AccountWithoutContract]


def write_account(w: BinaryWriter, account: Account) -> None:
    w.write_u8(account.TAG)
    account.write_fields(w)


def read_account(r: BinaryReader) -> Account:
    tag = r.read_u8()
    if tag == AccountWithContract.TAG:
        return AccountWithContract.read_fields(r)
    if tag == AccountWithoutContract.TAG:
        return AccountWithoutContract.read_fields(r)
    raise CodecError(f"unknown account variant {tag}")


# --- Blocks ---------------------------------------------------------------------


class Phase(IntEnum):
    GENERIC = 0
    PREPARE = 1
    PRECOMMIT = 2
    COMMIT = 3


@dataclass(slots=True, frozen=True)
class QuorumCertificate:
    """HotStuff-rs quorum certificate justifying a block."""

    chain_id: int
    view: int
    block: Sha256Hash
    phase: Phase
    # PRECOMMIT/COMMIT carry the view they vote on
    phase_view: Optional[int]
    signatures: Tuple[Optional[bytes], ...] = ()

    def write(self, w: BinaryWriter) -> None:
        w.write_u64(self.chain_id)
        w.write_u64(self.view)
        self.block.write(w)
        w.write_u8(int(self.phase))
        if self.phase in (Phase.PRECOMMIT, Phase.COMMIT):
            w.write_u64(self.phase_view or 0)
        w.write_vec(
            list(self.signatures),
            lambda w_, s: w_.write_option(s, lambda w2, b: w2.write_fixed(b, SIGNATURE_LENGTH)),
        )

    @classmethod
    def read(cls, r: BinaryReader) -> "QuorumCertificate":
        chain_id = r.read_u64()
        view = r.read_u64()
        block = Sha256Hash.read(r)
        raw = r.read_u8()
        try:
            phase = Phase(raw)
        except ValueError as e:
            raise CodecError(f"unknown phase variant {raw}") from e
        phase_view = r.read_u64() if phase in (Phase.PRECOMMIT, Phase.COMMIT) else None
        sigs = r.read_vec(lambda r_: r_.read_option(lambda r2: r2.read_fixed(SIGNATURE_LENGTH)))
        return cls(chain_id, view, block, phase, phase_view, tuple(sigs))


LOGS_BLOOM_LENGTH = 256


@dataclass(slots=True, frozen=True)
class BlockHeader:
    hash: Sha256Hash
    height: int
    justify: QuorumCertificate
    data_hash: Sha256Hash
    chain_id: int
    proposer: PublicAddress
    timestamp: int
    base_fee: int
    gas_used: int
    txs_hash: Sha256Hash
    receipts_hash: Sha256Hash
    state_hash: Sha256Hash
    logs_bloom: bytes = field(default=bytes(LOGS_BLOOM_LENGTH), repr=False)

    @property
    def prev_block_hash(self) -> Sha256Hash:
        return self.justify.block

    def write(self, w: BinaryWriter) -> None:
        self.hash.write(w)
        w.write_u64(self.height)
        self.justify.write(w)
        self.data_hash.write(w)
        w.write_u64(self.chain_id)
        self.proposer.write(w)
        w.write_u32(self.timestamp)
        w.write_u64(self.base_fee)
        w.write_u64(self.gas_used)
        self.txs_hash.write(w)
        self.receipts_hash.write(w)
        self.state_hash.write(w)
        w.write_fixed(self.logs_bloom, LOGS_BLOOM_LENGTH)

    @classmethod
    def read(cls, r: BinaryReader) -> "BlockHeader":
        return cls(
            hash=Sha256Hash.read(r),
            height=r.read_u64(),
            justify=QuorumCertificate.read(r),
            data_hash=Sha256Hash.read(r),
            chain_id=r.read_u64(),
            proposer=PublicAddress.read(r),
            timestamp=r.read_u32(),
            base_fee=r.read_u64(),
            gas_used=r.read_u64(),
            txs_hash=Sha256Hash.read(r),
            receipts_hash=Sha256Hash.read(r),
            state_hash=Sha256Hash.read(r),
            logs_bloom=r.read_fixed(LOGS_BLOOM_LENGTH),
        )


@dataclass(slots=True, frozen=True)
class Block:
    """A committed block. receipts[i] belongs to transactions[i]."""

    header: BlockHeader
    transactions: Tuple[SignedTx, ...] = ()
    receipts: Tuple[Receipt, ...] = ()

    @property
    def hash(self) -> Sha256Hash:
        return self.header.hash

    @property
    def height(self) -> int:
        return self.header.height

    def write(self, w: BinaryWriter) -> None:
        self.header.write(w)
        w.write_vec(list(self.transactions), lambda w_, tx: tx.write(w_))
        w.write_vec(list(self.receipts), lambda w_, rc: rc.write(w_))

    @classmethod
    def read(cls, r: BinaryReader) -> "Block":
        return cls(
            BlockHeader.read(r),
            tuple(r.read_vec(SignedTx.read)),
            tuple(r.read_vec(Receipt.read)),
        )


# --- Read-side composite ----------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TransactionResult:
    """A transaction with its receipt and where it landed. Never partially populated."""

    transaction: SignedTx
    receipt: Receipt
    block_hash: Sha256Hash
    position: int


__all__ = [
    "PublicAddress",
    "Sha256Hash",
    "AddressLike",
    "HashLike",
    # commands
    "Transfer",
    "Deploy",
    "Call",
    "CreatePool",
    "SetPoolSettings",
    "DeletePool",
    "CreateDeposit",
    "SetDepositSettings",
    "TopUpDeposit",
    "WithdrawDeposit",
    "StakeDeposit",
    "UnstakeDeposit",
    "NextEpoch",
    "Command",
    "COMMAND_TYPES",
    "USER_COMMAND_TYPES",
    "write_command",
    "read_command",
    # transactions
    "Transaction",
    "SignedTx",
    "SIGNATURE_LENGTH",
    # receipts
    "ExitStatus",
    "Log",
    "CommandReceipt",
    "Receipt",
    # accounts
    "AccountWithContract",
    "AccountWithoutContract",
    "Account",
    "write_account",
    "read_account",
    # blocks
    "Phase",
    "QuorumCertificate",
    "BlockHeader",
    "Block",
    "TransactionResult",
]
