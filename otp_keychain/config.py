"""Provider registry stored as a JSON file in the user config directory.

Only non-secret metadata lives here. Secrets are kept in the keyring
(see store.py).
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from platformdirs import user_config_dir

from .errors import InvalidParameterError, PersistenceError, ProviderNotFoundError
from .totp import DEFAULT_DIGITS, MAX_DIGITS

APP_NAME = "otp-keychain"
CONFIG_FILE = "config.json"
CONFIG_ENV = "OTP_KEYCHAIN_CONFIG"

log = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Get registry file path, respecting OTP_KEYCHAIN_CONFIG."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME)) / CONFIG_FILE


@dataclass
class ProviderConfig:
    token_size: int = DEFAULT_DIGITS

    def __post_init__(self):
        if isinstance(self.token_size, bool) or not isinstance(self.token_size, int):
            raise InvalidParameterError(f"token_size must be an integer, got {self.token_size!r}")
        if not 1 <= self.token_size <= MAX_DIGITS:
            raise InvalidParameterError(
                f"token_size must be between 1 and {MAX_DIGITS}, got {self.token_size}"
            )

    def to_dict(self) -> dict:
        return {"token_size": self.token_size}


class ProviderRegistry:
    """Provider name -> ProviderConfig, persisted as JSON.

    File layout:
        {"secrets": {"github": {"token_size": 6}}}
    """

    def __init__(self, path: Union[str, Path], providers: Optional[dict] = None):
        self.path = Path(path)
        self._providers: dict[str, ProviderConfig] = dict(providers or {})

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "ProviderRegistry":
        """Load the registry, returning an empty one if the file is missing.

        Raises:
            PersistenceError: If the file cannot be read or parsed
        """
        path = Path(path) if path else default_config_path()
        if not path.exists():
            log.debug(f"No config at {path}, starting empty")
            return cls(path)

        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            raise PersistenceError(f"could not read config {path}: {e}") from e

        secrets = data.get("secrets", {}) if isinstance(data, dict) else None
        if not isinstance(secrets, dict):
            raise PersistenceError(f"malformed config {path}: 'secrets' must be an object")

        providers = {}
        for name, entry in secrets.items():
            if not isinstance(entry, dict):
                raise PersistenceError(f"malformed config {path}: entry '{name}' must be an object")
            try:
                providers[name] = ProviderConfig(token_size=entry.get("token_size", DEFAULT_DIGITS))
            except InvalidParameterError as e:
                raise PersistenceError(f"malformed config {path}: '{name}': {e}") from e

        log.debug(f"Loaded {len(providers)} provider(s) from {path}")
        return cls(path, providers)

    def save(self):
        """Write the registry atomically with owner-only permissions.

        Raises:
            PersistenceError: If the file cannot be written
        """
        data = {"secrets": {name: cfg.to_dict() for name, cfg in self._providers.items()}}
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".config-", suffix=".tmp")
            os.close(fd)
            with open(tmp_name, "w") as f:
                json.dump(data, f, indent=2)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"could not write config {self.path}: {e}") from e
        log.debug(f"Saved {len(self._providers)} provider(s) to {self.path}")

    def names(self) -> list[str]:
        return list(self._providers)

    def get(self, name: str) -> ProviderConfig:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(name) from None

    def add(self, name: str, token_size: int = DEFAULT_DIGITS) -> ProviderConfig:
        config = ProviderConfig(token_size=token_size)
        self._providers[name] = config
        return config

    def remove(self, name: str) -> ProviderConfig:
        try:
            return self._providers.pop(name)
        except KeyError:
            raise ProviderNotFoundError(name) from None

    def __contains__(self, name) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)
