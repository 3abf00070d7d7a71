"""Shared fixtures."""

import pytest

from otp_keychain.config import ProviderRegistry
from otp_keychain.errors import NotFoundError
from otp_keychain.manager import OtpManager
from otp_keychain.store import SecretStore

RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


class MemorySecretStore(SecretStore):
    """In-memory stand-in for the keyring."""

    def __init__(self):
        self.secrets = {}

    def get(self, provider):
        try:
            return self.secrets[provider]
        except KeyError:
            raise NotFoundError(f"provider '{provider}' not found in keychain") from None

    def set(self, provider, secret):
        self.secrets[provider] = secret

    def delete(self, provider):
        if provider not in self.secrets:
            raise NotFoundError(f"provider '{provider}' not found in keychain")
        del self.secrets[provider]


@pytest.fixture
def store():
    return MemorySecretStore()


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "otp-keychain" / "config.json"


@pytest.fixture
def registry(config_path):
    return ProviderRegistry.load(config_path)


@pytest.fixture
def manager(store, registry):
    return OtpManager(store, registry, clock=lambda: 59)
