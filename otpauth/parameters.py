"""Các giá trị liệt kê cho otpauth URI: loại OTP và thuật toán HMAC."""

import hashlib
from enum import Enum

from otpauth.exceptions import InvalidArgumentError


class OtpType(str, Enum):
    TOTP = "totp"
    HOTP = "hotp"

    @classmethod
    def parse(cls, value) -> "OtpType":
        """Nhận OtpType hoặc chuỗi 'totp' / 'hotp' (không phân biệt hoa thường)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown OTP type: {value!r}") from None


class Algorithm(str, Enum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digestmod(self):
        # hashlib constructor, dùng trực tiếp cho hmac.new(...)
        return _DIGESTS[self]

    @classmethod
    def parse(cls, value) -> "Algorithm":
        """Nhận Algorithm hoặc tên 'SHA1' / 'sha256' / ..."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidArgumentError(f"Unknown algorithm: {value!r}") from None


_DIGESTS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}
