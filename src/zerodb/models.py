from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


META_KEY = "__meta__"
STATE_KEY = "__state__"


class EnvelopeMeta(BaseModel):
    """Key-derivation parameters stored next to the cipher text.

    Both fields are optional on read so a partially written envelope still
    parses; the loader fills in a fresh salt or the configured iteration count.
    """

    salt: Optional[str] = Field(default=None, description="Hex-encoded 128-bit PBKDF2 salt")
    iterations: Optional[int] = Field(default=None, gt=0, strict=True, description="PBKDF2 iteration count")


class EnvelopeState(BaseModel):
    content: str = Field(..., description="Base64 AES-256-CBC cipher text (IV prepended)")
    signature: str = Field(..., description="Hex HMAC-SHA256 over `content`")


class Envelope(BaseModel):
    """
    On-disk representation of an encrypted document.

    Serialized as:
        {"__meta__": {"salt": "...", "iterations": 50000},
         "__state__": {"content": "...", "signature": "..."}}

    Notes
    - The presence of `__meta__` is what marks a file as encrypted.
    - An Envelope never becomes the in-memory document.
    """

    model_config = ConfigDict(populate_by_name=True)

    meta: EnvelopeMeta = Field(default_factory=EnvelopeMeta, alias=META_KEY)
    state: EnvelopeState = Field(..., alias=STATE_KEY)

    @staticmethod
    def is_envelope(raw: Dict[str, Any]) -> bool:
        return META_KEY in raw

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
