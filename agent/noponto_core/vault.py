"""
Encrypted credential storage for the time-card API.

Layout on disk: one JSON key-value file (noponto.dat) holding, under a
fixed key, base64(nonce[12] || AES-256-GCM ciphertext+tag) of the
credential JSON. The AES key is generated once per installation and kept
in a separate owner-only key file.
"""

import base64
import binascii
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .constants import NONCE_SIZE, KEY_SIZE_BITS, VAULT_STORE_KEY, CONFIG_REQUIRED_FIELDS
from .config import log, STORE_FILE, KEY_FILE
from .errors import CryptoError, DecryptionError, StorageError, ConfigError


# ─── Key-value store ─────────────────────────────────────────────

class JsonStore:
    """Single JSON object on disk. Every write is flushed and atomically replaced."""

    def __init__(self, path=STORE_FILE):
        self.path = Path(path)

    def _read_all(self):
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store file {self.path} is corrupt: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Store file {self.path} is not a JSON object")
        return data

    def _write_all(self, data):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".store-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                try:
                    os.unlink(tmp)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise StorageError(f"Cannot write store file {self.path}: {e}") from e

    def get(self, key, default=None):
        return self._read_all().get(key, default)

    def set(self, key, value):
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key):
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


# ─── Per-installation key ────────────────────────────────────────

class KeyFile:
    """AES-256 key generated on first use and stored owner read/write only."""

    def __init__(self, path=KEY_FILE):
        self.path = Path(path)
        self._key = None

    def get_key(self):
        if self._key is None:
            self._key = self._load_or_create()
        return self._key

    def _load_or_create(self):
        try:
            if self.path.exists():
                key = self.path.read_bytes()
            else:
                key = AESGCM.generate_key(bit_length=KEY_SIZE_BITS)
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd = os.open(str(self.path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
                with os.fdopen(fd, "wb") as f:
                    f.write(key)
                    f.flush()
                    os.fsync(f.fileno())
                log.info("Created new vault key at %s", self.path)
        except OSError as e:
            raise StorageError(f"Cannot access vault key {self.path}: {e}") from e

        if len(key) * 8 != KEY_SIZE_BITS:
            raise CryptoError(f"Vault key {self.path} has {len(key)} bytes, expected {KEY_SIZE_BITS // 8}")
        return key


# ─── Credentials ─────────────────────────────────────────────────

@dataclass(frozen=True)
class PontoConfig:
    employee_id: str
    access_token: str
    client: str
    uid: str
    uuid: str

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ConfigError("Credential config must be a JSON object")
        missing = [k for k in CONFIG_REQUIRED_FIELDS
                   if not isinstance(data.get(k), str) or not data.get(k).strip()]
        if missing:
            raise ConfigError(f"Missing required field(s): {', '.join(missing)}")
        return cls(
            employee_id=data["employeeId"],
            access_token=data["accessToken"],
            client=data["client"],
            uid=data["uid"],
            uuid=data["uuid"],
        )

    @classmethod
    def from_json(cls, text):
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            raise ConfigError(f"Credential config is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self):
        return {
            "employeeId": self.employee_id,
            "accessToken": self.access_token,
            "client": self.client,
            "uid": self.uid,
            "uuid": self.uuid,
        }

    def to_json(self):
        return json.dumps(self.to_dict())


class CredentialVault:
    """
    save(plain) / load() → plain. load() on an empty store returns "".
    Decryption problems raise DecryptionError and are never reported as
    "not configured".
    """

    def __init__(self, store=None, key_provider=None, store_key=VAULT_STORE_KEY):
        self._store = store or JsonStore()
        self._keys = key_provider or KeyFile()
        self._store_key = store_key

    def _cipher(self):
        try:
            return AESGCM(self._keys.get_key())
        except ValueError as e:
            raise CryptoError(f"Cannot build cipher: {e}") from e

    def encrypt(self, plain):
        nonce = os.urandom(NONCE_SIZE)
        try:
            ciphertext = self._cipher().encrypt(nonce, plain.encode("utf-8"), None)
        except (ValueError, OverflowError) as e:
            raise CryptoError(f"Encryption failed: {e}") from e
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, blob):
        try:
            raw = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("malformed_base64", f"Stored credentials are not valid base64: {e}") from e
        # b64decode ignores non-zero padding bits; only the canonical text is accepted.
        if base64.b64encode(raw).decode("ascii") != blob:
            raise DecryptionError("malformed_base64", "Stored credentials are not canonical base64")
        if len(raw) < NONCE_SIZE:
            raise DecryptionError("too_short", f"Stored credentials too short ({len(raw)} bytes)")

        nonce, ciphertext = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        try:
            plain = self._cipher().decrypt(nonce, ciphertext, None)
        except InvalidTag:
            raise DecryptionError("authentication_failed",
                                  "Stored credentials failed authentication") from None
        try:
            return plain.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("invalid_utf8", f"Decrypted credentials are not UTF-8: {e}") from e

    def save(self, plain):
        self._store.set(self._store_key, self.encrypt(plain))
        log.info("Credentials saved to %s", getattr(self._store, "path", "store"))

    def load(self):
        blob = self._store.get(self._store_key)
        if blob is None:
            return ""
        if not isinstance(blob, str):
            raise DecryptionError("malformed_base64", "Stored credentials are not a string")
        return self.decrypt(blob)

    def clear(self):
        self._store.delete(self._store_key)
        log.info("Credentials removed")

    def save_config(self, config):
        self.save(config.to_json())

    def load_config(self):
        """PontoConfig from the vault, or None if nothing is stored yet."""
        plain = self.load()
        if not plain:
            return None
        return PontoConfig.from_json(plain)
