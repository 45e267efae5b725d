"""Deterministic hashing and authenticated encryption of email addresses.

Emails are never stored or queried in plaintext. Each user row carries

* ``email_hash``: a keyed HMAC-SHA256 of the normalized email, hex encoded. It is a
  pure function of the email and is the unique lookup key.
* ``email_encrypted``: ``base64(nonce || ciphertext)`` produced with
  ChaCha20-Poly1305 under a second key and a fresh random nonce per call.

Both keys are derived from one master key with HKDF-SHA256 under distinct 8-byte
contexts, so neither operation's key reveals the other.
"""

import base64
import binascii
import os
from typing import NamedTuple, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from memberhub.core.exceptions import (
    ConfigurationError,
    DecryptionFailure,
    UnsupportedVersionError,
)

KDF_KEY_BYTES = 32
SUBKEY_BYTES = 32
NONCE_BYTES = 12
HASH_CONTEXT = b"emlhash1"
ENCRYPTION_CONTEXT = b"emlencr1"
CURRENT_VERSION = 1


class EncryptedEmail(NamedTuple):
    """Ciphertext of an email together with the scheme version that produced it."""

    data: str
    version: int


class ProcessedEmail(NamedTuple):
    """Everything a user row stores about an email."""

    hash: str
    encrypted_data: str
    version: int


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address."""
    return email.strip().lower()


class EmailEncryption:
    """Codec for email lookup hashes and ciphertexts.

    The derived keys are read-only after construction, so one instance can be shared by
    concurrent requests. Call ``close`` (or use the instance as a context manager) to
    overwrite the key material once the codec is no longer needed.
    """

    def __init__(self, master_key: Union[str, bytes]):
        """Derive the hash and encryption subkeys from a master key.

        Args:
        ----
            master_key (str | bytes): Base64 text of the master key, or the raw key bytes.
                Must hold at least 32 bytes; only the first 32 are used.

        Raises:
        ------
            ConfigurationError: If the key is not valid base64 or is too short.

        """
        raw_key = bytearray(self._decode_master_key(master_key))
        try:
            if len(raw_key) < KDF_KEY_BYTES:
                raise ConfigurationError(
                    f"Email encryption key must be at least {KDF_KEY_BYTES} bytes"
                )
            ikm = bytes(raw_key[:KDF_KEY_BYTES])
            self._hash_key: Optional[bytearray] = bytearray(self._derive(ikm, HASH_CONTEXT))
            self._encryption_key: Optional[bytearray] = bytearray(
                self._derive(ikm, ENCRYPTION_CONTEXT)
            )
        finally:
            _wipe(raw_key)

    @staticmethod
    def _decode_master_key(master_key: Union[str, bytes]) -> bytes:
        if isinstance(master_key, bytes):
            return master_key
        if not master_key:
            raise ConfigurationError("Email encryption key is not configured")
        try:
            return base64.b64decode(master_key, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConfigurationError("Email encryption key is not valid base64") from e

    @staticmethod
    def _derive(ikm: bytes, context: bytes) -> bytes:
        return HKDF(
            algorithm=hashes.SHA256(),
            length=SUBKEY_BYTES,
            salt=None,
            info=context,
        ).derive(ikm)

    def _keys(self) -> tuple[bytes, bytes]:
        if self._hash_key is None or self._encryption_key is None:
            raise ConfigurationError("Email encryption codec has been closed")
        return bytes(self._hash_key), bytes(self._encryption_key)

    def hash_email(self, email: str) -> str:
        """Compute the deterministic lookup hash of an email.

        Args:
        ----
            email (str): The email address, normalized before hashing.

        Returns:
        -------
            str: 64 hex characters.

        """
        hash_key, _ = self._keys()
        mac = hmac.HMAC(hash_key, hashes.SHA256())
        mac.update(normalize_email(email).encode("utf-8"))
        return mac.finalize().hex()

    def encrypt_email(self, email: str) -> EncryptedEmail:
        """Encrypt a normalized email under a fresh random nonce.

        Args:
        ----
            email (str): The email address.

        Returns:
        -------
            EncryptedEmail: base64 of nonce followed by ciphertext, and the scheme version.

        """
        _, encryption_key = self._keys()
        nonce = os.urandom(NONCE_BYTES)
        ciphertext = ChaCha20Poly1305(encryption_key).encrypt(
            nonce, normalize_email(email).encode("utf-8"), None
        )
        return EncryptedEmail(
            data=base64.b64encode(nonce + ciphertext).decode("ascii"),
            version=CURRENT_VERSION,
        )

    def decrypt_email(self, data: str, version: int = CURRENT_VERSION) -> str:
        """Decrypt a payload produced by ``encrypt_email``.

        Args:
        ----
            data (str): base64 of nonce followed by ciphertext.
            version (int): The scheme version stored alongside the payload.

        Returns:
        -------
            str: The normalized email.

        Raises:
        ------
            UnsupportedVersionError: If the version is not the current scheme.
            DecryptionFailure: If the payload is malformed or fails authentication.

        """
        if version != CURRENT_VERSION:
            raise UnsupportedVersionError(version)

        _, encryption_key = self._keys()
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionFailure("Invalid base64 encoding") from e

        if len(raw) <= NONCE_BYTES:
            raise DecryptionFailure("Invalid nonce length")

        nonce, ciphertext = raw[:NONCE_BYTES], raw[NONCE_BYTES:]
        try:
            plaintext = ChaCha20Poly1305(encryption_key).decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionFailure(
                "Decryption failed - data may be corrupted or tampered"
            ) from e

        return plaintext.decode("utf-8")

    def process_email(self, email: str) -> ProcessedEmail:
        """Hash and encrypt an email in one go, as done when a user is created."""
        encrypted = self.encrypt_email(email)
        return ProcessedEmail(
            hash=self.hash_email(email),
            encrypted_data=encrypted.data,
            version=encrypted.version,
        )

    @property
    def closed(self) -> bool:
        """Whether the key material has been wiped."""
        return self._hash_key is None

    def close(self) -> None:
        """Overwrite the derived keys with zeros and drop them."""
        for key in (getattr(self, "_hash_key", None), getattr(self, "_encryption_key", None)):
            if key is not None:
                _wipe(key)
        self._hash_key = None
        self._encryption_key = None

    def __enter__(self) -> "EmailEncryption":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()


def _wipe(buffer: bytearray) -> None:
    for i in range(len(buffer)):
        buffer[i] = 0
