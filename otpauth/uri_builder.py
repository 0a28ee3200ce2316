"""
uri_builder.py — Dựng otpauth:// URI để import vào app Authenticator (qua QR code).

Định dạng:
    otpauth://TYPE/LABEL?PARAMETERS

- TYPE   : "totp" (mặc định) hoặc "hotp"
- LABEL  : account, hoặc "issuer:%20account" (percent-encode theo RFC 3986)
- PARAMS : theo thứ tự cố định secret, issuer, algorithm, digits, counter, period;
           chỉ có mặt khi đã được set.

Ví dụ:
    >>> UriBuilder().account("foo").secret("bar").build_uri()
    'otpauth://totp/foo?secret=bar'
"""

import logging
from typing import Optional, Union
from urllib.parse import quote

from otpauth import base32
from otpauth.exceptions import InvalidArgumentError, UriDomainError
from otpauth.parameters import Algorithm, OtpType

logger = logging.getLogger(__name__)

SCHEME = "otpauth"
DIGITS = (6, 8)


def _rawurlencode(value: str) -> str:
    return quote(value, safe="")


class UriBuilder:
    """
    Builder kiểu chain: mỗi setter trả về self.

    Setter kiểm tra giá trị đơn lẻ (InvalidArgumentError);
    build_uri() kiểm tra tổ hợp field (UriDomainError).
    """

    def __init__(self):
        self._secret: Optional[str] = None
        self._account = ""
        self._issuer: Optional[str] = None
        self._type = OtpType.TOTP
        self._algorithm: Optional[Algorithm] = None
        self._digits: Optional[int] = None
        self._counter: Optional[int] = None
        self._period: Optional[int] = None

    def secret(self, secret: Union[str, bytes], encode: bool = False) -> "UriBuilder":
        """
        Arguments:
            secret: secret base32, hoặc raw secret nếu encode=True
            encode: nếu True, chạy base32.encode() trên raw secret trước
        """
        if encode:
            if isinstance(secret, str):
                secret = secret.encode("utf-8")
            secret = base32.encode(secret)
        self._secret = secret
        return self

    def account(self, account: str) -> "UriBuilder":
        self._account = account
        return self

    def issuer(self, issuer: str) -> "UriBuilder":
        self._issuer = issuer
        return self

    def type(self, otp_type: Union[OtpType, str]) -> "UriBuilder":
        self._type = OtpType.parse(otp_type)
        return self

    def algorithm(self, algorithm: Union[Algorithm, str]) -> "UriBuilder":
        self._algorithm = Algorithm.parse(algorithm)
        return self

    def digits(self, digits: int) -> "UriBuilder":
        if digits not in DIGITS:
            raise InvalidArgumentError("Number of digits must be 6 or 8")
        self._digits = digits
        return self

    def counter(self, counter: int) -> "UriBuilder":
        if counter < 0:
            raise InvalidArgumentError("Counter must be an integer greater than or equal to zero")
        self._counter = counter
        return self

    def period(self, period: int) -> "UriBuilder":
        if period < 1:
            raise InvalidArgumentError("Period must be an integer greater than zero")
        self._period = period
        return self

    def _check(self) -> None:
        if self._secret is None:
            raise UriDomainError("Secret is required for OTP URIs")
        if self._type is OtpType.HOTP and self._counter is None:
            raise UriDomainError("Counter is a required HOTP parameter")
        if self._type is OtpType.TOTP and self._counter is not None:
            raise UriDomainError("Counter parameter does not apply to TOTP")
        if self._type is OtpType.HOTP and self._period is not None:
            raise UriDomainError("Period parameter does not apply to HOTP")

    def build_uri(self) -> str:
        self._check()

        issuer = _rawurlencode(self._issuer) if self._issuer else None
        label = _rawurlencode(self._account)
        if issuer:
            label = f"{issuer}:%20{label}"

        params = [
            ("secret", self._secret),
            ("issuer", issuer),
            ("algorithm", self._algorithm.value if self._algorithm else None),
            ("digits", self._digits),
            ("counter", self._counter),
            ("period", self._period),
        ]
        query = "&".join(f"{k}={v}" for k, v in params if v is not None)
        return f"{SCHEME}://{self._type.value}/{label}?{query}"

    def __str__(self) -> str:
        return self.build_uri()

    def qr_code_data_uri(self, renderer=None) -> str:
        """
        QR code (PNG data URI) cho URI hiện tại.

        renderer: callable(uri) -> data URI; mặc định qr.to_data_uri
        """
        uri = self.build_uri()
        logger.debug("Rendering QR code for %s URI", self._type.value)
        if renderer is None:
            from otpauth import qr
            renderer = qr.to_data_uri
        return renderer(uri)
