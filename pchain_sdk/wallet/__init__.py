"""
Wallet helpers: Ed25519 keypairs used to sign transactions.
"""

from .keypair import Keypair, verify_ed25519

__all__ = ["Keypair", "verify_ed25519"]
