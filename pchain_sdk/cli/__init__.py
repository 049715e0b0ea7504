"""
Command-line interface for the ParallelChain SDK (`pchain`).
"""

from .main import app, main

__all__ = ["app", "main"]
