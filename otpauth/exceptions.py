"""
exceptions.py — Các lỗi dùng chung cho otpauth.

Phân loại:
- InvalidArgumentError : tham số sai ngay tại chỗ (độ dài secret, digits, counter, period...)
- SecretDecodeError    : secret Base32 không decode được (hoặc rỗng)
- UriDomainError       : tổ hợp tham số của UriBuilder không hợp lệ khi build URI

Hai lỗi đầu kế thừa ValueError để caller cũ `except ValueError` vẫn bắt được.
"""


class OtpError(Exception):
    """Base class cho mọi lỗi của otpauth."""


class InvalidArgumentError(OtpError, ValueError):
    """Một tham số đơn lẻ nằm ngoài miền giá trị cho phép."""


class SecretDecodeError(OtpError, ValueError):
    """Secret Base32 sai định dạng hoặc decode ra rỗng."""


class UriDomainError(OtpError):
    """Các field của UriBuilder mâu thuẫn nhau (vd: HOTP mà thiếu counter)."""
