from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from . import paths, query
from .config import StoreConfig
from .crypto import DEFAULT_ITERATIONS, CryptoEngine
from .errors import InvalidState
from .persistence import PersistenceManager


def _require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidState(f"{what} must be a mapping, got {type(value).__name__}")
    return dict(value)


class ZeroDB:
    """
    Embedded JSON document store addressed by dot paths.

    Usage
    - `db = ZeroDB("database.json")` loads (or creates) the file.
    - `db.set("user.name", "John")`, `db.get("user.name")`, `db.push("posts", {...})`.
    - `db.save()` persists the document; nothing is written until then.

    Notes
    - With `encryption=True` the file is an AES-256 envelope signed with
      HMAC-SHA256; `secret` is required. A plaintext file opened this way is
      encrypted in place on load.
    - Every value returned is a copy; mutating it never changes the store.
    - Not safe for concurrent use of one file from several instances.
    """

    def __init__(
        self,
        source: str,
        *,
        encryption: bool = False,
        secret: Optional[str] = None,
        iterations: int = DEFAULT_ITERATIONS,
        empty: bool = False,
        base_dir: Optional[os.PathLike[str] | str] = None,
    ) -> None:
        config = StoreConfig.build(
            source=source,
            encryption=encryption,
            secret=secret,
            iterations=iterations,
            empty=empty,
            base_dir=base_dir,
        )
        self._init_from_config(config)

    # -------- Construction helpers --------
    @classmethod
    def from_config(cls, config: StoreConfig) -> "ZeroDB":
        db = cls.__new__(cls)
        db._init_from_config(config)
        return db

    @classmethod
    def from_env(cls) -> "ZeroDB":
        return cls.from_config(StoreConfig.from_env())

    def _init_from_config(self, config: StoreConfig) -> None:
        crypto = CryptoEngine(config.secret, iterations=config.iterations) if config.encryption else None
        persistence = PersistenceManager(config.source, base_dir=config.base_dir, crypto=crypto)
        # Load before assigning anything so a failed load leaves no usable store
        document = persistence.load(empty=config.empty)
        self._persistence = persistence
        self._document: Dict[str, Any] = document
        self._initial: Dict[str, Any] = {}

    @property
    def path(self) -> Path:
        return self._persistence.path

    @property
    def encrypted(self) -> bool:
        return self._persistence.encrypted

    # -------- State --------
    def init(self, initial: Mapping[str, Any], *, force: bool = False) -> None:
        """Record `initial` as the reset target.

        The live document is replaced only when it is empty or `force` is set.
        """
        initial = _require_mapping(initial, "initial state")
        self._initial = copy.deepcopy(initial)
        if not self._document or force:
            self._document = copy.deepcopy(initial)

    def reset(self) -> None:
        self._document = copy.deepcopy(self._initial)

    def get_state(self) -> Dict[str, Any]:
        return copy.deepcopy(_require_mapping(self._document, "state"))

    def set_state(self, state: Mapping[str, Any]) -> None:
        self._document = copy.deepcopy(_require_mapping(state, "state"))

    # -------- Path operations --------
    def get(self, path: str, default: Any = None) -> Any:
        return paths.get_path(self._document, path, default)

    def has(self, path: str) -> bool:
        return paths.has_path(self._document, path)

    def set(self, path: str, value: Any) -> None:
        paths.set_path(self._document, path, value)

    def delete(self, path: str) -> None:
        paths.delete_path(self._document, path)

    def push(self, path: str, value: Any) -> None:
        paths.push_path(self._document, path, value)

    def increment(self, path: str, amount: Any = 1) -> None:
        paths.increment_path(self._document, path, amount)

    def decrement(self, path: str, amount: Any = 1) -> None:
        paths.decrement_path(self._document, path, amount)

    def update(self, path: str, updater: Callable[[Any], Any]) -> None:
        paths.update_path(self._document, path, updater)

    # -------- Queries --------
    def find(self, path: str, criteria: Mapping[str, Any]) -> List[Any]:
        """Return the records in the list at `path` matching every field of `criteria`.

        A criterion is either a literal compared by value or a compiled regex
        tested against string fields. Missing paths and non-lists give `[]`.
        """
        compiled = query.compile_query(criteria)
        return query.find(self._lookup_raw(path), compiled)

    def find_one(self, path: str, criteria: Mapping[str, Any]) -> Optional[Any]:
        compiled = query.compile_query(criteria)
        return query.find_one(self._lookup_raw(path), compiled)

    def _lookup_raw(self, path: str) -> Any:
        found, value = paths.lookup(self._document, path)
        return value if found else None

    # -------- Persistence --------
    def save(self) -> bool:
        return self._persistence.save(self._document)

    def destroy(self) -> None:
        """Delete the backing file and forget the in-memory document."""
        self._persistence.remove()
        self._document = {}
        self._initial = {}
