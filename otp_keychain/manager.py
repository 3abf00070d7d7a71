"""Provider operations spanning the keyring and the registry file.

The secret store and the registry are separate systems without a shared
transaction. add() and remove() write the secret first and the registry
second, and undo the secret write if the registry cannot be saved.
"""

import logging
import time
from typing import Callable, Optional

from .config import ProviderRegistry
from .errors import (
    AlreadyExistsError,
    InvalidParameterError,
    NotFoundError,
    OtpError,
    PartialFailureError,
    PersistenceError,
)
from .store import SecretStore
from .totp import DEFAULT_DIGITS, TotpCode, TotpParameters, decode_secret, generate

log = logging.getLogger(__name__)


def normalize_secret(secret: str) -> str:
    """Strip whitespace and upper-case a base32 secret."""
    return "".join(secret.split()).upper()


class OtpManager:
    """Operations behind the command line interface."""

    def __init__(
            self,
            store: SecretStore,
            registry: ProviderRegistry,
            clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.registry = registry
        self._clock = clock or time.time

    def list_providers(self) -> list[str]:
        return self.registry.names()

    def generate(self, provider: str, moment: Optional[int] = None) -> TotpCode:
        """Generate the current code for a provider.

        Args:
            provider: Provider name
            moment: Unix time in seconds (defaults to now)

        Raises:
            ProviderNotFoundError: If provider is not in the registry
            NotFoundError: If the secret is missing from the keychain
            DecodeError: If the stored secret is not valid base32
        """
        config = self.registry.get(provider)
        secret = self.store.get(provider)
        params = TotpParameters(digits=config.token_size)
        if moment is None:
            moment = int(self._clock())
        return generate(decode_secret(secret), params, moment)

    def add(self, provider: str, secret: str, digits: int = DEFAULT_DIGITS):
        """Register a provider: secret into the keychain, then config entry.

        Raises:
            InvalidParameterError: If provider name or digits are invalid
            DecodeError: If secret is not valid base32
            AlreadyExistsError: If the keychain already holds a secret for provider
            PartialFailureError: If the config could not be saved
        """
        if not provider or not provider.strip():
            raise InvalidParameterError("provider name cannot be empty")
        TotpParameters(digits=digits)
        secret = normalize_secret(secret)
        decode_secret(secret)

        if self.store.has(provider):
            raise AlreadyExistsError(f"provider '{provider}' already exists in keychain")

        # A config entry without a secret is left over from a partial write
        previous = self.registry.get(provider) if provider in self.registry else None
        if previous is not None:
            log.warning(f"Replacing config entry for '{provider}', which had no secret")

        self.store.set(provider, secret)
        self.registry.add(provider, token_size=digits)
        try:
            self.registry.save()
        except PersistenceError as e:
            if previous is None:
                self.registry.remove(provider)
            else:
                self.registry.add(provider, token_size=previous.token_size)
            rolled_back = self._rollback(lambda: self.store.delete(provider), provider)
            raise PartialFailureError(
                f"secret for '{provider}' stored but config not saved: {e}", rolled_back
            ) from e
        log.info(f"Added provider '{provider}' ({digits} digits)")

    def remove(self, provider: str):
        """Remove a provider: secret from the keychain, then config entry.

        Raises:
            ProviderNotFoundError: If provider is not in the registry
            NotFoundError: If the secret is missing from the keychain
            PartialFailureError: If the config could not be saved
        """
        config = self.registry.get(provider)
        secret = self.store.get(provider)

        self.store.delete(provider)
        self.registry.remove(provider)
        try:
            self.registry.save()
        except PersistenceError as e:
            self.registry.add(provider, token_size=config.token_size)
            rolled_back = self._rollback(lambda: self.store.set(provider, secret), provider)
            raise PartialFailureError(
                f"secret for '{provider}' deleted but config not saved: {e}", rolled_back
            ) from e
        log.info(f"Removed provider '{provider}'")

    def export(self) -> list[tuple[str, str]]:
        """Return (provider, secret) for every registered provider.

        Raises:
            NotFoundError: If a registered provider has no secret
        """
        return [(name, self.store.get(name)) for name in self.registry.names()]

    def check(self) -> list[str]:
        """Return registered providers whose secret is missing."""
        missing = []
        for name in self.registry.names():
            try:
                self.store.get(name)
            except NotFoundError:
                log.warning(f"Provider '{name}' is in config but not in keychain")
                missing.append(name)
        return missing

    @staticmethod
    def _rollback(undo: Callable[[], None], provider: str) -> bool:
        try:
            undo()
        except OtpError as e:
            log.error(f"Rollback for '{provider}' failed: {e}")
            return False
        log.warning(f"Rolled back keychain change for '{provider}'")
        return True
