"""Secret storage in the system keyring."""

import logging
import os
from abc import ABC, abstractmethod

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .config import APP_NAME
from .errors import NotFoundError, StoreAccessError

KEYRING_SERVICE = APP_NAME
SERVICE_ENV = "OTP_KEYCHAIN_SERVICE"

log = logging.getLogger(__name__)


def keyring_service() -> str:
    """Get keyring service name, respecting OTP_KEYCHAIN_SERVICE."""
    return os.environ.get(SERVICE_ENV) or KEYRING_SERVICE


class SecretStore(ABC):
    """Maps a provider name to its base32 secret."""

    @abstractmethod
    def get(self, provider: str) -> str:
        """Return the stored secret.

        Raises:
            NotFoundError: If no secret is stored for provider
        """

    @abstractmethod
    def set(self, provider: str, secret: str) -> None:
        """Store or replace a secret."""

    @abstractmethod
    def delete(self, provider: str) -> None:
        """Delete a secret.

        Raises:
            NotFoundError: If no secret is stored for provider
        """

    def has(self, provider: str) -> bool:
        try:
            self.get(provider)
        except NotFoundError:
            return False
        return True


class KeyringSecretStore(SecretStore):
    """Secrets stored as keyring passwords, one entry per provider.

    Uses GNOME Keyring/KWallet on Linux, Keychain on macOS and the
    Credential Manager on Windows, whichever backend keyring selects.
    """

    def __init__(self, service: str = KEYRING_SERVICE):
        self.service = service

    def get(self, provider: str) -> str:
        try:
            secret = keyring.get_password(self.service, provider)
        except KeyringError as e:
            raise StoreAccessError(f"keyring error reading '{provider}': {e}") from e
        if secret is None:
            raise NotFoundError(f"provider '{provider}' not found in keychain")
        return secret

    def set(self, provider: str, secret: str) -> None:
        log.debug(f"Storing secret for '{provider}' in keyring service '{self.service}'")
        try:
            keyring.set_password(self.service, provider, secret)
        except KeyringError as e:
            raise StoreAccessError(f"keyring error saving '{provider}': {e}") from e

    def delete(self, provider: str) -> None:
        log.debug(f"Deleting secret for '{provider}' from keyring service '{self.service}'")
        try:
            keyring.delete_password(self.service, provider)
        except PasswordDeleteError as e:
            raise NotFoundError(f"provider '{provider}' not found in keychain") from e
        except KeyringError as e:
            raise StoreAccessError(f"keyring error deleting '{provider}': {e}") from e
