"""
ParallelChain SDK (Python)
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Errors
from .errors import (  # noqa: F401
    CodecError,
    DomainError,
    IntegrityError,
    NonceError,
    NotFoundError,
    PChainSdkError,
    PChainTimeoutError,
    RpcError,
    TransferFailedError,
    ValidationError,
)

# Config
from .config import SDKConfig  # noqa: F401

# Types
from .types.core import (  # noqa: F401
    Block,
    Call,
    CommandReceipt,
    CreateDeposit,
    Deploy,
    ExitStatus,
    PublicAddress,
    Receipt,
    SetDepositSettings,
    Sha256Hash,
    SignedTx,
    StakeDeposit,
    TopUpDeposit,
    Transaction,
    TransactionResult,
    Transfer,
    UnstakeDeposit,
    WithdrawDeposit,
)

# Wallet & tx
from .wallet.keypair import Keypair  # noqa: F401
from .tx.build import TransactionBuilder  # noqa: F401
from .address import derive_contract_address  # noqa: F401

# RPC, reader, writer
from .rpc.http import RpcClient  # noqa: F401
from .reader import PChainReader  # noqa: F401
from .writer import PChainWriter  # noqa: F401
from .client import PChain  # noqa: F401

# Utilities
from .utils.borsh import BinaryReader, BinaryWriter  # noqa: F401
from .utils.retry import RETRY, poll, retry_with_backoff  # noqa: F401

__all__ = [
    "__version__",
    # Errors
    "PChainSdkError", "ValidationError", "NonceError", "NotFoundError",
    "IntegrityError", "PChainTimeoutError", "DomainError", "TransferFailedError",
    "RpcError", "CodecError",
    # Config
    "SDKConfig",
    # Types
    "PublicAddress", "Sha256Hash",
    "Transfer", "Deploy", "Call",
    "CreateDeposit", "SetDepositSettings", "TopUpDeposit",
    "WithdrawDeposit", "StakeDeposit", "UnstakeDeposit",
    "Transaction", "SignedTx", "Receipt", "CommandReceipt", "ExitStatus",
    "Block", "TransactionResult",
    # Wallet & tx
    "Keypair", "TransactionBuilder", "derive_contract_address",
    # Clients
    "RpcClient", "PChainReader", "PChainWriter", "PChain",
    # Utilities
    "BinaryWriter", "BinaryReader", "RETRY", "poll", "retry_with_backoff",
]
