"""
awsenv - .env files <-> AWS Parameter Store

Pushes .env files into SSM Parameter Store (encrypting whatever looks
sensitive), pulls namespaces back out as export lines, and purges namespaces
behind a two-step confirmation.
"""

__version__ = "0.2.0"

from .core import lexer, inference, syncer, purge

__all__ = [
    "lexer",
    "inference",
    "syncer",
    "purge",
]
