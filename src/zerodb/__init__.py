"""
zerodb: embedded JSON document store with dot-path access and optional
encryption at rest.

Modules:
- paths: get/set/has/delete/push/increment/decrement/update by dot path
- query: flat equality/regex matching over a list of records
- crypto: PBKDF2 key derivation, AES-256-CBC + HMAC-SHA256 envelopes
- persistence: file load/save with format detection and atomic writes
- store: the `ZeroDB` class tying the above together
"""

import logging

from .config import StoreConfig
from .errors import (
    ConfigError,
    IntegrityError,
    InvalidQuery,
    InvalidState,
    MalformedStoreError,
    PathNotFound,
    StoreIOError,
    TypeMismatch,
    ZeroDBError,
)
from .store import ZeroDB

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ZeroDB",
    "StoreConfig",
    "ZeroDBError",
    "ConfigError",
    "MalformedStoreError",
    "IntegrityError",
    "PathNotFound",
    "TypeMismatch",
    "InvalidQuery",
    "InvalidState",
    "StoreIOError",
]
