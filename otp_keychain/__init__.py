"""otp-keychain - TOTP generator backed by the system keyring."""

from .config import ProviderConfig, ProviderRegistry, default_config_path
from .errors import (
    AlreadyExistsError,
    ClipboardError,
    DecodeError,
    InvalidParameterError,
    NotFoundError,
    OtpError,
    PartialFailureError,
    PersistenceError,
    ProviderNotFoundError,
    StoreAccessError,
)
from .manager import OtpManager
from .store import KeyringSecretStore, SecretStore
from .totp import (
    TotpCode,
    TotpParameters,
    decode_secret,
    generate,
    generate_totp,
    remaining_seconds,
    validate_secret,
)

__version__ = "0.1.0"

__all__ = [
    # TOTP
    "TotpCode",
    "TotpParameters",
    "decode_secret",
    "generate",
    "generate_totp",
    "remaining_seconds",
    "validate_secret",
    # Storage
    "SecretStore",
    "KeyringSecretStore",
    "ProviderConfig",
    "ProviderRegistry",
    "default_config_path",
    # Operations
    "OtpManager",
    # Errors
    "OtpError",
    "DecodeError",
    "NotFoundError",
    "ProviderNotFoundError",
    "AlreadyExistsError",
    "InvalidParameterError",
    "StoreAccessError",
    "PersistenceError",
    "PartialFailureError",
    "ClipboardError",
]
