from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .crypto import DEFAULT_ITERATIONS
from .errors import ConfigError


# Environment variable names for convenience configuration
ENV_SOURCE = "ZERODB_SOURCE"
ENV_ENCRYPTION = "ZERODB_ENCRYPTION"
ENV_SECRET = "ZERODB_SECRET"
ENV_ITERATIONS = "ZERODB_ITERATIONS"
ENV_EMPTY = "ZERODB_EMPTY"
ENV_BASE_DIR = "ZERODB_BASE_DIR"

SOURCE_EXTENSION = ".json"

_TRUTHY = {"1", "true", "yes", "on"}


class StoreConfig(BaseModel):
    """
    Validated constructor options for a store.

    Fields
    - source: path of the JSON file backing the store (must end in `.json`).
    - encryption: encrypt the file at rest.
    - secret: password for key derivation; required iff `encryption`.
    - iterations: PBKDF2 iteration count used when sealing.
    - empty: start from an empty document, overwriting any existing file.
    - base_dir: directory `source` is resolved against (default: working directory).
    """

    source: str = Field(..., min_length=1, description="Store file path")
    encryption: bool = Field(default=False, description="Encrypt the file at rest")
    secret: Optional[str] = Field(default=None, description="Encryption secret")
    iterations: int = Field(default=DEFAULT_ITERATIONS, gt=0, description="PBKDF2 iterations")
    empty: bool = Field(default=False, description="Force-create an empty store")
    base_dir: Optional[Path] = Field(default=None, description="Base directory for `source`")

    @field_validator("source")
    @classmethod
    def _check_extension(cls, v: str) -> str:
        if Path(v).suffix.lower() != SOURCE_EXTENSION:
            raise ValueError("Database source should be JSON")
        return v

    @model_validator(mode="after")
    def _check_secret(self) -> "StoreConfig":
        if self.encryption and not self.secret:
            raise ValueError("secret is required when encryption is enabled")
        return self

    @classmethod
    def build(cls, **options) -> "StoreConfig":
        """Validate options, raising `ConfigError` instead of pydantic's error."""
        try:
            return cls.model_validate(options)
        except ValidationError as ve:
            raise ConfigError(f"Invalid store configuration: {ve}") from ve

    # -------- Construction helpers --------
    @classmethod
    def from_env(cls) -> "StoreConfig":
        source = os.environ.get(ENV_SOURCE)
        encryption = os.environ.get(ENV_ENCRYPTION, "").strip().lower() in _TRUTHY
        secret = os.environ.get(ENV_SECRET) or None
        missing = [name for name, val in [(ENV_SOURCE, source)] if not val]
        if encryption and not secret:
            missing.append(ENV_SECRET)
        if missing:
            raise ConfigError(
                f"Missing required environment variables for store: {', '.join(missing)}"
            )
        options = {
            "source": source,
            "encryption": encryption,
            "secret": secret,
            "empty": os.environ.get(ENV_EMPTY, "").strip().lower() in _TRUTHY,
        }
        iterations = os.environ.get(ENV_ITERATIONS)
        if iterations:
            options["iterations"] = iterations
        base_dir = os.environ.get(ENV_BASE_DIR)
        if base_dir:
            options["base_dir"] = base_dir
        return cls.build(**options)
