"""
otpauth package
===============

Công cụ tạo và xác minh OTP (HOTP/TOTP) theo chuẩn RFC 4226 & RFC 6238,
tương thích Google Authenticator, kèm builder cho otpauth:// URI.

──────────────────────────────────────────────
Giải thuật cốt lõi
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP với counter = floor(timestamp / 30)
- Dynamic Truncation: lấy 4 byte từ HMAC tại offset = (byte cuối & 0x0F)

──────────────────────────────────────────────
Ví dụ sử dụng nhanh
──────────────────────────────────────────────
>>> from otpauth import create_secret, totp, verify_totp, UriBuilder
>>> secret = create_secret()
>>> code, remaining = totp(secret)
>>> verify_totp(secret, code)
True
>>> uri = UriBuilder().account("alice@example").issuer("otp-demo").secret(secret).build_uri()
"""
import logging

from otpauth.exceptions import (
    InvalidArgumentError,
    OtpError,
    SecretDecodeError,
    UriDomainError,
)
from otpauth.otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_TIME_STEP,
    GoogleAuthenticator,
    create_secret,
    generate_code,
    hotp,
    time_slice,
    totp,
    verify_hotp,
    verify_totp,
)
from otpauth.parameters import Algorithm, OtpType
from otpauth.uri_builder import UriBuilder

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Algorithm",
    "DEFAULT_DIGITS",
    "DEFAULT_TIME_STEP",
    "GoogleAuthenticator",
    "InvalidArgumentError",
    "OtpError",
    "OtpType",
    "SecretDecodeError",
    "UriBuilder",
    "UriDomainError",
    "create_secret",
    "generate_code",
    "hotp",
    "time_slice",
    "totp",
    "verify_hotp",
    "verify_totp",
]
