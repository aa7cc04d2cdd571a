"""Cache collaborator contract and its implementations.

The cache is a plain string-keyed store with no ordering or eviction
policy. Two implementations are provided:

- InMemoryCache: process-local dict, the default
- EncryptedFileCache: a single JSON document encrypted with Fernet
  (AES-128-CBC + HMAC), with the key kept in the OS keyring, 0600 file
  permissions and file locking
"""

import base64
import hashlib
import json
import logging
import os
import stat
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Protocol

import keyring
from cryptography.fernet import Fernet, InvalidToken

from .errors import CacheDecryptionError, CacheStorageError

logger = logging.getLogger(__name__)

# File locking support
if sys.platform != "win32":
    import fcntl

    @contextmanager
    def _file_lock(filepath: Path, exclusive: bool = True) -> Generator[None, None, None]:
        """Lock the cache file via fcntl (shared for readers)."""
        lock_path = filepath.with_suffix(filepath.suffix + ".lock")
        lock_path.touch(exist_ok=True)

        with open(lock_path, "r") as lock_file:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
else:
    import msvcrt

    @contextmanager
    def _file_lock(filepath: Path, exclusive: bool = True) -> Generator[None, None, None]:
        """Lock the cache file via msvcrt. Readers also lock exclusively."""
        lock_path = filepath.with_suffix(filepath.suffix + ".lock")
        lock_path.touch(exist_ok=True)

        with open(lock_path, "r+") as lock_file:
            try:
                msvcrt.locking(lock_file.fileno(), msvcrt.LK_LOCK, 1)
                yield
            finally:
                try:
                    msvcrt.locking(lock_file.fileno(), msvcrt.LK_UNLCK, 1)
                except OSError:
                    pass


# Keyring entry holding the Fernet key
KEYRING_SERVICE = "oidc-authcode"
KEYRING_USERNAME = "cache-encryption-key"

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "oidc-authcode"
CACHE_FILE = "cache.json"


class CacheStorage(Protocol):
    """String-keyed storage capability used by the client."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> bool: ...

    def contains(self, key: str) -> bool: ...

    def list_keys(self) -> list[str]: ...

    def clear(self) -> None: ...


class InMemoryCache:
    """Process-local cache backed by a dict."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def remove(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def contains(self, key: str) -> bool:
        return key in self._store

    def list_keys(self) -> list[str]:
        return list(self._store)

    def clear(self) -> None:
        self._store.clear()


def _derive_fallback_key() -> bytes:
    """Fernet key derived from /etc/machine-id, the home directory and user name.

    Stands in for the keyring key on hosts without a keyring backend.
    """
    components = []

    # Machine ID (Linux)
    machine_id_path = Path("/etc/machine-id")
    if machine_id_path.exists():
        components.append(machine_id_path.read_text().strip())

    components.append(str(Path.home()))
    components.append(os.environ.get("USER", os.environ.get("USERNAME", "authcode")))

    key_bytes = hashlib.sha256(":".join(components).encode()).digest()

    return base64.urlsafe_b64encode(key_bytes)


class EncryptedFileCache:
    """Encrypted on-disk cache.

    Every operation reads (and, for writes, rewrites) one encrypted JSON
    document under a file lock, so separate processes see a consistent view.
    """

    def __init__(self, cache_dir: Path | None = None):
        """Initialize the cache.

        Args:
            cache_dir: Optional custom storage directory
        """
        self.cache_dir = cache_dir or DEFAULT_CACHE_DIR
        self._cipher: Fernet | None = None
        self._using_keyring = False

        self._init_storage()
        self._init_encryption()

    @property
    def path(self) -> Path:
        return self.cache_dir / CACHE_FILE

    def _init_storage(self) -> None:
        """Create the storage directory with owner-only permissions."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        try:
            self.cache_dir.chmod(stat.S_IRWXU)
        except OSError as e:
            logger.warning(f"Could not set directory permissions: {e}")

    def _init_encryption(self) -> None:
        """Load (or create) the Fernet key from the keyring, else derive one."""
        try:
            key = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)

            if key is None:
                key = Fernet.generate_key().decode("ascii")
                keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, key)
                logger.debug("Generated new encryption key in keyring")

            self._cipher = Fernet(key.encode("ascii"))
            self._using_keyring = True
            logger.debug("Using keyring for encryption key storage")

        except Exception as e:
            # Any keyring backend failure degrades to the machine-derived key
            logger.warning(
                f"Keyring not available: {type(e).__name__}: {e}. "
                f"Cache entries are encrypted with a machine-derived key instead."
            )
            self._cipher = Fernet(_derive_fallback_key())
            self._using_keyring = False

    def _encrypt(self, data: str) -> str:
        if self._cipher is None:
            raise CacheStorageError("Encryption not initialized")
        return self._cipher.encrypt(data.encode("utf-8")).decode("ascii")

    def _decrypt(self, data: str) -> str:
        if self._cipher is None:
            raise CacheStorageError("Encryption not initialized")
        try:
            return self._cipher.decrypt(data.encode("ascii")).decode("utf-8")
        except InvalidToken as e:
            raise CacheStorageError(
                "Failed to decrypt cache data. The encryption key may have changed."
            ) from e

    def _read(self) -> dict[str, str]:
        """Read and decrypt the cache document under a shared lock.

        Raises:
            CacheDecryptionError: If decryption fails or the data is corrupted
        """
        if not self.path.exists():
            return {}

        try:
            with _file_lock(self.path, exclusive=False):
                decrypted = self._decrypt(self.path.read_text())
                result: dict[str, str] = json.loads(decrypted)
                return result
        except CacheStorageError as e:
            raise CacheDecryptionError(
                f"Cannot decrypt {self.path}. The encryption key may have changed. "
                f"Run 'authcode cache clear' to reset the cache."
            ) from e
        except json.JSONDecodeError as e:
            raise CacheDecryptionError(
                f"Cache file {self.path} is corrupted. "
                f"Run 'authcode cache clear' to reset the cache."
            ) from e

    def _write(self, data: dict[str, str]) -> None:
        """Encrypt and write the cache document under an exclusive lock."""
        encrypted = self._encrypt(json.dumps(data, indent=2))

        with _file_lock(self.path, exclusive=True):
            self.path.write_text(encrypted)
            try:
                self.path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 0600
            except OSError as e:
                logger.warning(f"Could not set file permissions: {e}")

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        logger.debug(f"Stored cache entry {key}")

    def remove(self, key: str) -> bool:
        data = self._read()
        if key not in data:
            return False
        del data[key]
        self._write(data)
        logger.debug(f"Removed cache entry {key}")
        return True

    def contains(self, key: str) -> bool:
        return key in self._read()

    def list_keys(self) -> list[str]:
        return list(self._read())

    def clear(self) -> None:
        """Delete the cache file. Works even when the file cannot be decrypted."""
        if self.path.exists():
            self.path.unlink()
        logger.info("Cleared cache")

    def is_using_keyring(self) -> bool:
        """Check if keyring is being used for encryption key storage."""
        return self._using_keyring
