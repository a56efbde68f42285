"""
Password-based encryption for the store file.

- Key: PBKDF2-HMAC-SHA256 over the secret, 256-bit output.
- Cipher: AES-256-CBC, PKCS7 padding, random 16-byte IV prepended to the
  cipher bytes, base64 text on the wire.
- Integrity: HMAC-SHA256 over the base64 cipher text (encrypt-then-MAC),
  hex encoded. The signature is always verified before decryption.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import ConfigError, IntegrityError
from .models import Envelope, EnvelopeMeta, EnvelopeState


logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 50_000
SALT_SIZE = 16
KEY_SIZE = 32
IV_SIZE = 16


@dataclass(frozen=True)
class SignedCipherText:
    cipher_text: str
    signature: str


def generate_salt() -> str:
    return os.urandom(SALT_SIZE).hex()


def derive_key(secret: str, salt: str, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    if not isinstance(iterations, int) or isinstance(iterations, bool) or iterations <= 0:
        raise ConfigError("iterations must be a positive integer")
    try:
        salt_bytes = bytes.fromhex(salt)
    except (TypeError, ValueError) as ex:
        raise ConfigError("salt must be a hex string") from ex
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=KEY_SIZE, salt=salt_bytes, iterations=iterations)
    return kdf.derive(secret.encode("utf-8"))


def _sign(cipher_text: str, key: bytes) -> hmac.HMAC:
    h = hmac.HMAC(key, hashes.SHA256())
    h.update(cipher_text.encode("utf-8"))
    return h


def encrypt_and_sign(plain_text: str, key: bytes) -> SignedCipherText:
    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain_text.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    raw = iv + encryptor.update(padded) + encryptor.finalize()
    cipher_text = base64.b64encode(raw).decode("ascii")
    signature = _sign(cipher_text, key).finalize().hex()
    return SignedCipherText(cipher_text=cipher_text, signature=signature)


def verify(cipher_text: str, signature: str, key: bytes) -> bool:
    try:
        expected = bytes.fromhex(signature)
    except (TypeError, ValueError):
        return False
    # Only the canonical lowercase form is accepted
    if expected.hex() != signature:
        return False
    try:
        _sign(cipher_text, key).verify(expected)  # constant-time
    except InvalidSignature:
        return False
    return True


def decrypt(cipher_text: str, key: bytes) -> str:
    """Decrypt verified cipher text. Callers must run `verify` first."""
    try:
        raw = base64.b64decode(cipher_text.encode("ascii"), validate=True)
        if len(raw) < IV_SIZE * 2 or len(raw) % IV_SIZE:
            raise ValueError("cipher text has an invalid length")
        decryptor = Cipher(algorithms.AES(key), modes.CBC(raw[:IV_SIZE])).decryptor()
        padded = decryptor.update(raw[IV_SIZE:]) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
    except (binascii.Error, ValueError, UnicodeError) as ex:
        raise IntegrityError("Failed to decrypt state") from ex


class CryptoEngine:
    """
    Seals plaintext into an `Envelope` and opens it again with a secret.

    The iteration count used for sealing comes from configuration; the one
    used for opening comes from the envelope, so files written with an older
    default stay readable.
    """

    def __init__(self, secret: str, *, iterations: int = DEFAULT_ITERATIONS) -> None:
        if not secret or not isinstance(secret, str):
            raise ConfigError("secret is required for encryption")
        if not isinstance(iterations, int) or isinstance(iterations, bool) or iterations <= 0:
            raise ConfigError("iterations must be a positive integer")
        self._secret = secret
        self._iterations = iterations

    @property
    def iterations(self) -> int:
        return self._iterations

    def seal(self, plain_text: str) -> Envelope:
        salt = generate_salt()
        key = derive_key(self._secret, salt, self._iterations)
        signed = encrypt_and_sign(plain_text, key)
        return Envelope(
            meta=EnvelopeMeta(salt=salt, iterations=self._iterations),
            state=EnvelopeState(content=signed.cipher_text, signature=signed.signature),
        )

    def open(self, envelope: Envelope) -> str:
        salt = envelope.meta.salt
        if salt is None:
            logger.debug("Envelope has no salt; deriving with a fresh one")
            salt = generate_salt()
        iterations = envelope.meta.iterations or self._iterations
        try:
            key = derive_key(self._secret, salt, iterations)
        except ConfigError as ex:
            raise IntegrityError("stored key-derivation parameters are invalid") from ex
        if not verify(envelope.state.content, envelope.state.signature, key):
            raise IntegrityError("state has been altered")
        return decrypt(envelope.state.content, key)
