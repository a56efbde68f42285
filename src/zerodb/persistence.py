from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .crypto import CryptoEngine
from .errors import ConfigError, MalformedStoreError, StoreIOError, TypeMismatch
from .models import Envelope


logger = logging.getLogger(__name__)


def _dump_json(data: Dict[str, Any]) -> str:
    try:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as ex:
        raise TypeMismatch(f"document is not JSON serializable: {ex}") from ex


def _parse_object(text: str, what: str) -> Dict[str, Any]:
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, ValueError) as ex:
        raise MalformedStoreError(f"{what} contains malformed JSON") from ex
    if not isinstance(raw, dict):
        raise MalformedStoreError(f"{what} must contain a JSON object, got {type(raw).__name__}")
    return raw


class PersistenceManager:
    """
    Owns the store file on disk.

    Usage
    - `load()` returns the plaintext document, creating the file when it is missing.
    - `save(document)` writes the document, sealed when a `CryptoEngine` is configured.
    - `remove()` deletes the file.

    Notes
    - `source` is resolved against `base_dir` (default: the working directory
      at construction time).
    - Writes go to a temp file in the same directory and are moved into place
      with `os.replace`, so readers only ever see a complete file.
    - Saves are serialized per instance. Two instances on the same file are
      not coordinated (last writer wins).
    """

    def __init__(
        self,
        source: os.PathLike[str] | str,
        *,
        base_dir: Optional[os.PathLike[str] | str] = None,
        crypto: Optional[CryptoEngine] = None,
    ) -> None:
        base = Path(base_dir) if base_dir is not None else Path.cwd()
        self._path = (base / Path(source)).resolve()
        self._crypto = crypto
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def encrypted(self) -> bool:
        return self._crypto is not None

    @property
    def exists(self) -> bool:
        return self._path.exists()

    # -------- Core operations --------
    def load(self, *, empty: bool = False) -> Dict[str, Any]:
        """Read the document from disk.

        Raises:
        - MalformedStoreError if the file (or decrypted payload) is not a JSON object.
        - IntegrityError if the signature does not verify.
        - ConfigError if the file is encrypted but no secret is configured.
        - StoreIOError for file system failures.
        """
        if empty or not self._path.exists():
            logger.info("Creating empty store at %s", self._path)
            self.save({})
            return {}

        raw = _parse_object(self._read_text(), "Store file")

        if not Envelope.is_envelope(raw):
            if self._crypto is not None:
                logger.info("Encrypting plaintext store at %s", self._path)
                self.save(raw)
            return raw

        if self._crypto is None:
            raise ConfigError(f"{self._path} is encrypted; a secret is required to open it")
        try:
            envelope = Envelope.model_validate(raw)
        except ValidationError as ex:
            raise MalformedStoreError("Store file has an invalid encryption envelope") from ex

        plain_text = self._crypto.open(envelope)
        document = _parse_object(plain_text, "Decrypted state")
        logger.debug("Loaded encrypted store from %s", self._path)
        return document

    def save(self, document: Dict[str, Any]) -> bool:
        payload = _dump_json(document)
        if self._crypto is not None:
            payload = _dump_json(self._crypto.seal(payload).to_json_dict())
        with self._lock:
            self._atomic_write(payload)
        logger.debug("Saved store to %s", self._path)
        return True

    def remove(self) -> None:
        with self._lock:
            try:
                self._path.unlink(missing_ok=True)
            except OSError as ex:
                raise StoreIOError(f"Failed to remove {self._path}") from ex
        logger.info("Removed store file %s", self._path)

    # -------- Internal --------
    def _read_text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as ex:
            raise MalformedStoreError("Store file is not valid UTF-8") from ex
        except OSError as ex:
            raise StoreIOError(f"Failed to read {self._path}") from ex

    def _atomic_write(self, payload: str) -> None:
        tmp_path: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            if self._path.exists():
                os.chmod(tmp_path, self._path.stat().st_mode)
            os.replace(tmp_path, self._path)
            tmp_path = None
        except OSError as ex:
            raise StoreIOError(f"Failed to write {self._path}") from ex
        finally:
            if tmp_path is not None:
                # Best-effort cleanup of the temp file
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass
