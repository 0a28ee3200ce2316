#!/usr/bin/env python3
"""
otp_core.py — Core library cho TOTP / HOTP (RFC 6238 / RFC 4226), tương thích Google Authenticator.

Mục tiêu:
- Chứa các hàm thuần (pure functions) để dùng trực tiếp bởi CLI / REST API.
- Số chữ số và thuật toán là tham số của từng lời gọi -> an toàn khi dùng đa luồng.
- Class GoogleAuthenticator giữ lại API kiểu "engine có cấu hình" (code_length mutable)
  cho các caller quen dùng theo kiểu đó.

Lưu ý bảo mật:
- Core không lưu secret, không cache mã OTP. Caller tự chịu trách nhiệm xoá secret sau khi dùng.
- verify_* không bao giờ raise khi secret hỏng: trả về False, không để lộ
  "secret sai định dạng" khác với "mã sai".
"""

import hmac
import logging
import secrets
import struct
import time
from typing import Optional, Tuple

from otpauth import base32
from otpauth.exceptions import InvalidArgumentError, SecretDecodeError
from otpauth.parameters import Algorithm
from otpauth.uri_builder import UriBuilder

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # chuẩn: 6 chữ số
DEFAULT_TIME_STEP = 30      # TOTP step (giây)
DEFAULT_WINDOW = 1          # cho phép lệch +/- 1 step
DEFAULT_SECRET_LENGTH = 16  # 16 ký tự base32 = 80 bit
MIN_SECRET_LENGTH = 16
MAX_SECRET_LENGTH = 128
MAX_COUNTER = 2 ** 64 - 1   # counter được pack thành 8 byte


# --- Secret ----------------------------------------------------------------
def create_secret(secret_length: int = DEFAULT_SECRET_LENGTH) -> str:
    """
    Sinh secret ngẫu nhiên gồm đúng `secret_length` ký tự base32.

    - Lấy secret_length byte từ CSPRNG (module secrets), mỗi byte -> 1 ký tự (byte & 31).
    - Nếu nguồn ngẫu nhiên không dùng được, exception được để nguyên (fatal).

    Raises:
        InvalidArgumentError: nếu secret_length ngoài [16, 128]
    """
    # Valid secret lengths are 80 to 640 bits
    if secret_length < MIN_SECRET_LENGTH or secret_length > MAX_SECRET_LENGTH:
        raise InvalidArgumentError("Bad secret length")
    return base32.encode(secrets.token_bytes(secret_length))


def decode_secret(secret_b32: str) -> bytes:
    """
    Base32-decode secret, raise nếu không dùng được.

    Raises:
        SecretDecodeError: secret sai định dạng hoặc rỗng
    """
    key = base32.decode(secret_b32)
    if not key:
        raise SecretDecodeError("Could not decode secret")
    return key


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Chuyển counter sang 8-byte big-endian như RFC4226 yêu cầu.

    Ví dụ: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Dynamic truncation theo RFC4226 §5.3.

    - offset = 4 bit thấp của byte cuối
    - lấy 4 byte từ offset, đọc big-endian, xoá bit cao nhất -> số 31-bit
    """
    offset = hmac_digest[-1] & 0x0F
    (value,) = struct.unpack(">I", hmac_digest[offset:offset + 4])
    return value & 0x7FFFFFFF


def generate_code(
    key: bytes,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """
    Tính mã OTP từ raw key + counter.

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. HMAC-<algorithm>(key, message)
    3. Dynamic truncate -> dbc
    4. otp = dbc % 10^digits, zero-pad đủ `digits` ký tự

    Raises:
        InvalidArgumentError: nếu counter ngoài [0, 2^64 - 1] hoặc digits < 1
    """
    if counter < 0:
        raise InvalidArgumentError("Counter must be an integer greater than or equal to zero")
    if counter > MAX_COUNTER:
        raise InvalidArgumentError("Counter must fit in 64 bits")
    if digits < 1:
        raise InvalidArgumentError("Number of digits must be at least 1")
    algorithm = Algorithm.parse(algorithm)
    digest = hmac.new(key, int_to_bytes(counter), algorithm.digestmod).digest()
    return str(dynamic_truncate(digest) % (10 ** digits)).zfill(digits)


def time_slice(unix_time: float, step: int = DEFAULT_TIME_STEP) -> int:
    """floor(unix_time / step) — chỉ số cửa sổ thời gian tính từ epoch."""
    if step < 1:
        raise InvalidArgumentError("Period must be an integer greater than zero")
    return int(unix_time // step)


def hotp(
    secret_b32: str,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """
    Sinh mã HOTP từ secret base32.

    Raises:
        SecretDecodeError: nếu secret không decode được
        InvalidArgumentError: nếu counter âm
    """
    return generate_code(decode_secret(secret_b32), counter, digits, algorithm)


def totp(
    secret_b32: str,
    timestamp: Optional[float] = None,
    timestep: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> Tuple[str, int]:
    """
    Sinh mã TOTP: HOTP với counter = floor(timestamp / timestep).

    Trả về:
        (code, remaining_seconds)
    """
    if timestamp is None:
        timestamp = time.time()
    counter = time_slice(timestamp, timestep)
    code = hotp(secret_b32, counter, digits, algorithm)
    remaining = int(timestep - (int(timestamp) % timestep))
    return code, remaining


# --- OTP verification helpers ---------------------------------------------
def verify_totp(
    secret_b32: str,
    code: str,
    window: int = DEFAULT_WINDOW,
    timestamp: Optional[float] = None,
    timestep: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> bool:
    """
    Xác minh mã TOTP, chấp nhận lệch `window` step về trước/sau.

    - Độ dài code phải đúng bằng `digits` (vd "0" + mã đúng -> False).
    - Secret hỏng -> False (không raise).
    - So sánh bằng hmac.compare_digest (constant-time).
    """
    if len(code) != digits:
        return False
    key = base32.decode(secret_b32)
    if not key:
        logger.debug("verify_totp: secret could not be decoded")
        return False
    if timestamp is None:
        timestamp = time.time()

    current = time_slice(timestamp, timestep)
    # bỏ qua các slice ngoài [0, MAX_COUNTER]
    first = max(current - window, 0)
    last = min(current + window, MAX_COUNTER)
    for test_counter in range(first, last + 1):
        expected = generate_code(key, test_counter, digits, algorithm)
        if hmac.compare_digest(expected.encode(), code.encode()):
            return True
    return False


def verify_hotp(
    secret_b32: str,
    code: str,
    counter: int,
    look_ahead: int = DEFAULT_WINDOW,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> Tuple[bool, int]:
    """
    Xác minh mã HOTP với counter hiện tại, cho phép vượt trước `look_ahead`.

    Trả về:
        (True, counter tiếp theo nên dùng) nếu khớp, ngược lại (False, counter)
    """
    if len(code) != digits or counter < 0 or counter > MAX_COUNTER:
        return False, counter
    key = base32.decode(secret_b32)
    if not key:
        logger.debug("verify_hotp: secret could not be decoded")
        return False, counter

    for test_counter in range(counter, min(counter + look_ahead, MAX_COUNTER) + 1):
        expected = generate_code(key, test_counter, digits, algorithm)
        if hmac.compare_digest(expected.encode(), code.encode()):
            return True, test_counter + 1
    return False, counter


# --- Engine kiểu Google Authenticator ---------------------------------------
class GoogleAuthenticator:
    """
    Engine có cấu hình số chữ số (mặc định 6), API kiểu Google Authenticator.

    code_length là trạng thái mutable của instance: không chia sẻ một instance
    giữa nhiều thread mà không khoá. Dùng các hàm module-level nếu cần thread-safe.
    """

    def __init__(self, code_length: int = DEFAULT_DIGITS):
        self.code_length = code_length

    def set_code_length(self, length: int) -> "GoogleAuthenticator":
        # nên >= 6, nhưng không kiểm tra (giữ hành vi cũ)
        self.code_length = length
        return self

    def create_secret(self, secret_length: int = DEFAULT_SECRET_LENGTH) -> str:
        return create_secret(secret_length)

    def get_code(self, secret: str, timeslice: Optional[int] = None) -> str:
        """Tính mã cho secret tại time slice cho trước (mặc định: slice hiện tại)."""
        if timeslice is None:
            timeslice = time_slice(time.time())
        return generate_code(decode_secret(secret), timeslice, self.code_length)

    def verify_code(
        self,
        secret: str,
        code: str,
        discrepancy: int = DEFAULT_WINDOW,
        now: Optional[float] = None,
    ) -> bool:
        """
        Chấp nhận mã từ discrepancy*30s trước tới discrepancy*30s sau.
        """
        return verify_totp(
            secret,
            code,
            window=discrepancy,
            timestamp=now,
            digits=self.code_length,
        )

    def get_uri_builder(self) -> UriBuilder:
        """UriBuilder đã điền sẵn digits nếu code_length khác mặc định."""
        builder = UriBuilder()
        if self.code_length != DEFAULT_DIGITS:
            builder.digits(self.code_length)
        return builder

    def get_qr_code_url(self, name: str, secret: str) -> str:
        """Data URI (PNG) của QR code cho otpauth://totp/{name}?secret={secret}."""
        uri = f"otpauth://totp/{name}?secret={secret}"
        # qrcode + Pillow chỉ cần khi thực sự render
        from otpauth import qr

        return qr.to_data_uri(uri)
