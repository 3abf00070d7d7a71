"""TOTP code generation (RFC 6238, HMAC-SHA1)."""

import base64
import hmac
import struct
import time
from dataclasses import dataclass
from typing import Optional

from .errors import DecodeError, InvalidParameterError

DEFAULT_DIGITS = 6
TIME_STEP = 30
INITIAL_OFFSET = 0

SUPPORTED_ALGORITHMS = ("sha1",)

# 0x7FFFFFFF has ten decimal digits
MAX_DIGITS = 10
MAX_COUNTER = 2 ** 64 - 1


@dataclass(frozen=True)
class TotpParameters:
    """Fixed inputs of the TOTP computation for one provider."""

    digits: int = DEFAULT_DIGITS
    time_step: int = TIME_STEP
    initial_offset: int = INITIAL_OFFSET
    algorithm: str = "sha1"

    def __post_init__(self):
        if isinstance(self.digits, bool) or not isinstance(self.digits, int):
            raise InvalidParameterError(f"digit count must be an integer, got {self.digits!r}")
        if not 1 <= self.digits <= MAX_DIGITS:
            raise InvalidParameterError(
                f"digit count must be between 1 and {MAX_DIGITS}, got {self.digits}"
            )
        if self.time_step <= 0:
            raise InvalidParameterError(f"time step must be positive, got {self.time_step}")
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise InvalidParameterError(f"unsupported algorithm: {self.algorithm}")


@dataclass(frozen=True)
class TotpCode:
    """A generated code and how long it stays valid."""

    code: str
    remaining: int
    counter: int

    def __str__(self):
        return f"{self.code} ({self.remaining:2} sec)"


def decode_secret(secret: str) -> bytes:
    """Decode a base32 (RFC 4648) secret.

    Whitespace is ignored and lowercase is accepted. Padding is optional,
    but if present it must be correct.

    Args:
        secret: Base32-encoded TOTP secret

    Returns:
        Raw secret bytes

    Raises:
        DecodeError: If secret is empty or not valid base32
    """
    cleaned = "".join(secret.split()).upper()
    if not cleaned:
        raise DecodeError("secret is empty")
    if "=" not in cleaned:
        cleaned += "=" * (-len(cleaned) % 8)
    try:
        key = base64.b32decode(cleaned)
    except ValueError as e:
        raise DecodeError(f"invalid base32 secret: {e}") from e
    if not key:
        raise DecodeError("secret is empty")
    return key


def validate_secret(secret: str) -> bool:
    """Check if a TOTP secret is valid base32."""
    try:
        decode_secret(secret)
        return True
    except DecodeError:
        return False


def _check_moment(moment: int, params: TotpParameters):
    if moment < 0:
        raise InvalidParameterError(f"moment must not be negative, got {moment}")
    if moment < params.initial_offset:
        raise InvalidParameterError(
            f"moment {moment} is before the initial offset {params.initial_offset}"
        )


def counter_at(moment: int, params: TotpParameters) -> int:
    """Number of whole time steps elapsed since the initial offset."""
    _check_moment(moment, params)
    counter = (moment - params.initial_offset) // params.time_step
    if counter > MAX_COUNTER:
        raise InvalidParameterError(f"moment {moment} overflows the 64-bit counter")
    return counter


def truncate(digest: bytes) -> int:
    """Dynamic truncation of an HMAC digest to a 31-bit integer."""
    offset = digest[-1] & 0x0F
    return struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF


def hotp_value(secret_bytes: bytes, counter: int, params: TotpParameters) -> int:
    """Numeric one-time password for a counter value, before padding."""
    msg = struct.pack(">Q", counter)
    digest = hmac.new(secret_bytes, msg, params.algorithm).digest()
    return truncate(digest) % (10 ** params.digits)


def format_code(value: int, digits: int) -> str:
    """Render a code as exactly `digits` decimal digits."""
    return str(value).zfill(digits)


def remaining_seconds(moment: int, params: TotpParameters) -> int:
    """Seconds left in the current window, in (0, time_step].

    At an exact window boundary a fresh window has just started, so the
    full time step is returned rather than 0.
    """
    _check_moment(moment, params)
    return params.time_step - (moment - params.initial_offset) % params.time_step


def generate(secret_bytes: bytes, params: TotpParameters, moment: int) -> TotpCode:
    """Generate the TOTP code valid at `moment`.

    Args:
        secret_bytes: Decoded shared secret
        params: TOTP parameters
        moment: Unix time in seconds

    Returns:
        TotpCode with the zero-padded code and remaining validity
    """
    moment = int(moment)
    counter = counter_at(moment, params)
    value = hotp_value(secret_bytes, counter, params)
    return TotpCode(
        code=format_code(value, params.digits),
        remaining=remaining_seconds(moment, params),
        counter=counter,
    )


def generate_totp(secret: str, digits: int = DEFAULT_DIGITS, moment: Optional[int] = None) -> TotpCode:
    """Generate a TOTP code from a base32 secret.

    Uses the system clock when `moment` is not given.

    Raises:
        DecodeError: If secret is invalid
        InvalidParameterError: If digits is out of range
    """
    params = TotpParameters(digits=digits)
    if moment is None:
        moment = int(time.time())
    return generate(decode_secret(secret), params, moment)
