from __future__ import annotations


class ZeroDBError(RuntimeError):
    """Base error for zerodb."""


class ConfigError(ZeroDBError):
    """Missing or invalid source or encryption configuration."""


class MalformedStoreError(ZeroDBError):
    """Store file content is not a parseable JSON object."""


class IntegrityError(ZeroDBError):
    """Signature verification failed: the state was altered or the secret is wrong."""


class PathNotFound(ZeroDBError):
    """Nothing is stored at the requested path."""


class TypeMismatch(ZeroDBError):
    """The stored value (or an argument) has the wrong type for the operation."""


class InvalidQuery(ZeroDBError):
    """A query must be a flat mapping of field name to criterion."""


class InvalidState(ZeroDBError):
    """A state value must be a mapping."""


class StoreIOError(ZeroDBError):
    """File system failure while reading, writing or removing the store file."""
