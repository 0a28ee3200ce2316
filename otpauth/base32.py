"""
base32.py — Base32 codec cho OTP secret.

- encode(): KHÔNG phải base32 chuẩn. Mỗi byte đầu vào -> đúng 1 ký tự (byte & 31).
  Dùng để biến byte ngẫu nhiên thành secret có độ dài chính xác (createSecret).
- decode(): base32 RFC 4648, từng nhóm 8 ký tự -> 5 byte.

Ghi chú về nhóm cuối bị thiếu:
  Nhóm ngắn được lấp 0 cho đủ 8 ký tự và vẫn cho ra đủ 5 byte, kể cả các byte 0
  ở cuối. Các byte này được giữ lại như dữ liệu (ví dụ "SECRET" -> 5 byte chứ
  không phải 3), vì mã OTP đã phát hành cho các secret ngắn phụ thuộc vào chúng.
  Với HMAC, byte 0 ở cuối key không làm đổi kết quả (key được pad 0 tới block size).
"""

from typing import Optional

from otpauth.exceptions import InvalidArgumentError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PADDING = "="

# Số ký tự '=' hợp lệ cho một chuỗi base32 (tương ứng 5/4/3/2/1 byte ở nhóm cuối)
ALLOWED_PADDING = (6, 4, 3, 1, 0)

_LOOKUP = {ch: i for i, ch in enumerate(ALPHABET)}


def encode(data: bytes, length: Optional[int] = None) -> str:
    """
    Map từng byte sang ALPHABET[byte & 31].

    Arguments:
        data: byte đầu vào (thường từ secrets.token_bytes)
        length: chỉ encode `length` byte đầu tiên (None -> toàn bộ)
    """
    if length is None:
        length = len(data)
    if length < 0:
        raise InvalidArgumentError("length must be non-negative")
    return "".join(ALPHABET[b & 31] for b in data[:length])


def _padding_ok(text: str) -> bool:
    count = text.count(PADDING)
    if count not in ALLOWED_PADDING:
        return False
    # padding chỉ được nằm thành một dãy liền ở cuối
    return count == 0 or text.endswith(PADDING * count)


def decode(text: str) -> Optional[bytes]:
    """
    Decode base32 text -> raw bytes.

    Trả về:
        bytes: dữ liệu đã decode (b"" nếu text rỗng)
        None : nếu số '=' không hợp lệ, '=' không nằm ở cuối,
               hoặc có ký tự ngoài ALPHABET (chỉ chữ HOA A-Z và 2-7)
    """
    if not text:
        return b""
    if not _padding_ok(text):
        return None

    symbols = text.rstrip(PADDING)
    if any(ch not in _LOOKUP for ch in symbols):
        return None

    out = bytearray()
    for i in range(0, len(symbols), 8):
        group = symbols[i:i + 8]
        bits = 0
        for j in range(8):
            bits = (bits << 5) | (_LOOKUP[group[j]] if j < len(group) else 0)
        out += bits.to_bytes(5, "big")
    return bytes(out)
