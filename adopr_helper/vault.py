"""
Encrypted at-rest storage for the Azure DevOps personal access token.

The token is sealed with AES-256-GCM under a key derived from the host
machine (machine id, hostname, platform, architecture). The key is never
stored; it is recomputed for every encrypt and decrypt, so a settings file
copied to another machine fails to decrypt instead of leaking the token.

Stored form: ``base64(tag) + "." + base64(iv) + "." + base64(ciphertext)``.
"""

import base64
import binascii
import hashlib
import os
import platform
import socket
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from adopr_helper.config import PAT_KEY, ConfigScope, ConfigStore
from adopr_helper.exceptions import AuthenticationError, CredentialMissingError
from adopr_helper.logging import get_logger, log_vault_operation

MACHINE_ID_ENV_VAR = "ADOPR_HELPER_MACHINE_ID"
SEGMENT_DELIMITER = "."
IV_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32

_MACHINE_ID_FILES = ("/etc/machine-id", "/var/lib/dbus/machine-id")

logger = get_logger("vault")


@dataclass(frozen=True)
class MachineFingerprint:
    """Host characteristics the encryption key is derived from."""

    machine_id: str
    hostname: str
    platform: str
    architecture: str

    @classmethod
    def from_host(cls) -> "MachineFingerprint":
        """Read the fingerprint of the current machine."""
        return cls(
            machine_id=_read_machine_id(),
            hostname=socket.gethostname(),
            platform=sys.platform,
            architecture=platform.machine(),
        )

    def derive_key(self) -> bytes:
        """Return the 256-bit AES key for this fingerprint."""
        combined = SEGMENT_DELIMITER.join(
            (self.machine_id, self.hostname, self.platform, self.architecture)
        )
        return hashlib.sha256(combined.encode("utf-8")).digest()


def _read_machine_id() -> str:
    override = os.environ.get(MACHINE_ID_ENV_VAR)
    if override:
        return override

    for candidate in _MACHINE_ID_FILES:
        path = Path(candidate)
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if value:
            return value

    # MAC-address based node id; stable for a given network interface
    return f"{uuid.getnode():012x}"


@dataclass(frozen=True)
class EncryptedSecret:
    """AES-GCM output split into its three parts."""

    auth_tag: bytes
    iv: bytes
    ciphertext: bytes

    def encode(self) -> str:
        """Serialize to the dotted base64 storage form."""
        return SEGMENT_DELIMITER.join(
            base64.b64encode(part).decode("ascii")
            for part in (self.auth_tag, self.iv, self.ciphertext)
        )

    @classmethod
    def decode(cls, value: str) -> "EncryptedSecret":
        """
        Parse the dotted base64 storage form.

        Raises:
            AuthenticationError: If the value is not three valid base64 segments
        """
        parts = value.strip().split(SEGMENT_DELIMITER)
        if len(parts) != 3:
            raise AuthenticationError()

        try:
            auth_tag, iv, ciphertext = (
                base64.b64decode(part.encode("ascii"), validate=True) for part in parts
            )
        except (binascii.Error, UnicodeEncodeError) as e:
            raise AuthenticationError() from e

        if len(auth_tag) != TAG_LENGTH or not iv:
            raise AuthenticationError()

        return cls(auth_tag=auth_tag, iv=iv, ciphertext=ciphertext)


class CredentialVault:
    """
    Encrypts, stores, and recovers the personal access token.

    Example:
        ```python
        vault = CredentialVault(JsonFileConfigStore.default())
        vault.set("my-pat")
        token = vault.get()  # "my-pat" on this machine
        ```
    """

    def __init__(
        self,
        store: ConfigStore,
        fingerprint: Callable[[], MachineFingerprint] = MachineFingerprint.from_host,
    ) -> None:
        """
        Initialize the vault.

        Args:
            store: Settings store holding the encrypted token
            fingerprint: Callable returning the machine fingerprint; called on
                every encrypt/decrypt
        """
        self.store = store
        self._fingerprint = fingerprint

    def _key(self) -> bytes:
        return self._fingerprint().derive_key()

    def encrypt(self, plaintext: str) -> EncryptedSecret:
        """Encrypt plaintext under the machine key with a fresh random IV."""
        iv = os.urandom(IV_LENGTH)
        sealed = AESGCM(self._key()).encrypt(iv, plaintext.encode("utf-8"), None)
        log_vault_operation("encrypt")
        return EncryptedSecret(
            auth_tag=sealed[-TAG_LENGTH:],
            iv=iv,
            ciphertext=sealed[:-TAG_LENGTH],
        )

    def decrypt(self, secret: EncryptedSecret | str) -> str:
        """
        Decrypt a secret produced by ``encrypt``.

        Args:
            secret: EncryptedSecret or its encoded string form

        Returns:
            The original plaintext

        Raises:
            AuthenticationError: On tag mismatch, malformed input, or a
                secret sealed on another machine
        """
        if isinstance(secret, str):
            secret = EncryptedSecret.decode(secret)

        try:
            plaintext = AESGCM(self._key()).decrypt(
                secret.iv, secret.ciphertext + secret.auth_tag, None
            )
        except (InvalidTag, ValueError) as e:
            log_vault_operation("decrypt", "authentication tag mismatch")
            raise AuthenticationError() from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise AuthenticationError() from e

    def has_credential(self) -> bool:
        """True if an encrypted token is stored (decryptable or not)."""
        return bool(self.store.get(PAT_KEY))

    def get(self) -> str:
        """
        Return the stored token in plaintext.

        Raises:
            CredentialMissingError: If no token has been stored
            AuthenticationError: If the stored token cannot be decrypted here
        """
        stored = self.store.get(PAT_KEY)
        if not stored:
            raise CredentialMissingError()

        try:
            return self.decrypt(stored)
        except AuthenticationError:
            logger.warning("Stored PAT could not be decrypted; it must be re-entered")
            raise

    def set(self, token: str) -> None:
        """Encrypt token and store it globally, replacing any previous token."""
        if not token:
            raise ValueError("token must not be empty")
        self.store.set(PAT_KEY, self.encrypt(token).encode(), ConfigScope.GLOBAL)
        log_vault_operation("store")

    def clear(self) -> None:
        """Remove the stored token."""
        self.store.clear(PAT_KEY, ConfigScope.GLOBAL)
        log_vault_operation("clear")
