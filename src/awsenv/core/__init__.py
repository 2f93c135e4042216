"""
awsenv core modules.

Includes:
- lexer: Quote-aware .env parsing
- inference: Secret detection (SecureString vs String)
- paths: Namespace/key <-> parameter path mapping
- pool: Bounded concurrency for store calls
- syncer: .env -> Parameter Store sync engine
- purge: Namespace deletion engine
- exporter: Parameter Store -> export lines
- store: Parameter Store backends
- config: .awsenv and environment settings
"""

from . import lexer
from . import inference
from . import paths
from . import pool
from . import syncer
from . import purge
from . import exporter
from . import store
from . import config

__all__ = [
    "lexer",
    "inference",
    "paths",
    "pool",
    "syncer",
    "purge",
    "exporter",
    "store",
    "config",
]
