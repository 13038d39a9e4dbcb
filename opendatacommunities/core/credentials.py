"""
Credentials for the Open Data Communities API.

The API uses HTTP Basic Authentication with a base64 encoded ``user:key``
pair. Credentials can be passed explicitly to the client as a Credentials
object, or held in the process-wide CredentialStore:

- ``set_key(user, key)`` initializes the store,
- ``clear_key()`` tears it down,
- when nothing was set, the store falls back to the ``ODC_API_KEY``
  variable (already encoded) or the ``ODC_USER`` / ``ODC_KEY`` pair, read
  from the environment or a ``.env`` file.
"""

import base64
import os
import threading
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .config import CREDENTIALS, MESSAGES
from .errors import AuthError, ConfigError, ValidationError
from .logging import get_logger


logger = get_logger(__name__)


def encode_key(user: str, key: str) -> str:
    """
    Encode a username and API key for Basic Authentication.

    Args:
        user: Open Data Communities username (email)
        key: Open Data Communities API key

    Returns:
        Base64 encoded ``user:key`` string

    Raises:
        ValidationError: If user or key is not a string
    """
    if not isinstance(user, str):
        raise ValidationError("user must be a character string", {"received": type(user).__name__})
    if not isinstance(key, str):
        raise ValidationError("key must be a character string", {"received": type(key).__name__})

    raw_key = f"{user.strip()}:{key.strip()}".encode("utf-8")
    return base64.b64encode(raw_key).decode("ascii")


@dataclass(frozen=True)
class Credentials:
    """
    An encoded Basic-Authentication credential.

    Attributes:
        encoded_key: Base64 encoded ``user:key`` string
    """

    encoded_key: str

    @classmethod
    def from_user_key(cls, user: str, key: str) -> "Credentials":
        return cls(encode_key(user, key))

    @property
    def authorization(self) -> str:
        return f"Basic {self.encoded_key}"

    def __repr__(self) -> str:
        return "Credentials(encoded_key='***')"


class CredentialStore:
    """
    Process-wide holder of the API credentials.

    Explicitly set credentials take precedence over the environment.
    """

    def __init__(self, load_env_file: Optional[bool] = None):
        self._credentials: Optional[Credentials] = None
        self._lock = threading.Lock()
        self._load_env_file = (
            CREDENTIALS["LOAD_DOTENV"] if load_env_file is None else load_env_file
        )
        self._env_loaded = False

    def set_key(self, user: Optional[str] = None, key: Optional[str] = None, overwrite: bool = False) -> Credentials:
        """
        Store a username and API key.

        Args:
            user: Open Data Communities username (usually an email address)
            key: Open Data Communities API key
            overwrite: Replace credentials that are already stored

        Returns:
            The stored credentials

        Raises:
            ValidationError: If user or key is missing
            ConfigError: If credentials exist and overwrite is False
        """
        if user is None or key is None:
            raise ValidationError(MESSAGES["MISSING_CREDENTIALS"])

        credentials = Credentials.from_user_key(user, key)
        with self._lock:
            if self._credentials is not None and not overwrite:
                raise ConfigError(MESSAGES["KEY_EXISTS"])
            self._credentials = credentials

        logger.info("API key successfully set.")
        return credentials

    def clear(self) -> None:
        with self._lock:
            self._credentials = None

    def _from_environment(self) -> Optional[Credentials]:
        if self._load_env_file and not self._env_loaded:
            load_dotenv()
            self._env_loaded = True

        encoded = os.environ.get(CREDENTIALS["ENCODED_KEY_ENV"], "").strip()
        if encoded:
            return Credentials(encoded)

        user = os.environ.get(CREDENTIALS["USER_ENV"], "").strip()
        key = os.environ.get(CREDENTIALS["KEY_ENV"], "").strip()
        if user and key:
            return Credentials.from_user_key(user, key)

        return None

    def get_credentials(self) -> Credentials:
        """
        Return the active credentials.

        Raises:
            AuthError: If no credentials were set and none are in the environment
        """
        with self._lock:
            if self._credentials is not None:
                return self._credentials

        credentials = self._from_environment()
        if credentials is None:
            raise AuthError(MESSAGES["NO_API_KEY"])
        return credentials

    def get_key(self) -> str:
        return self.get_credentials().encoded_key


# Default store shared by clients created without explicit credentials
default_store = CredentialStore()


def set_key(user: Optional[str] = None, key: Optional[str] = None, overwrite: bool = False) -> Credentials:
    """Store credentials in the default store."""
    return default_store.set_key(user, key, overwrite=overwrite)


def get_key() -> str:
    """Return the encoded key from the default store."""
    return default_store.get_key()


def clear_key() -> None:
    """Remove credentials from the default store."""
    default_store.clear()
