"""Exceptions raised by otp-keychain."""


class OtpError(Exception):
    """Base class for all otp-keychain errors."""


class DecodeError(OtpError):
    """Secret is not valid base32."""


class NotFoundError(OtpError):
    """Lookup miss in the secret store or the registry."""


class ProviderNotFoundError(NotFoundError):
    """Provider has no entry in the registry."""

    def __init__(self, provider: str):
        super().__init__(f"provider '{provider}' not found in config")
        self.provider = provider


class AlreadyExistsError(OtpError):
    """Provider is already registered."""


class InvalidParameterError(OtpError):
    """TOTP parameter or provider field out of range."""


class StoreAccessError(OtpError):
    """The OS credential store failed (locked, denied, unavailable)."""


class PersistenceError(OtpError):
    """Registry file could not be read or written."""


class ClipboardError(OtpError):
    """No usable clipboard mechanism."""


class PartialFailureError(OtpError):
    """A two-step add/remove failed halfway.

    Attributes:
        rolled_back: True if the first step was undone, False if the
            secret store and the registry may now disagree.
    """

    def __init__(self, message: str, rolled_back: bool):
        if not rolled_back:
            message += " (rollback failed, manual cleanup may be needed)"
        super().__init__(message)
        self.rolled_back = rolled_back
