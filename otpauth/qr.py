"""
qr.py — Render QR code (PNG) cho otpauth URI.

Core chỉ coi kết quả là blob PNG / data URI, không đọc nội dung ảnh.
"""

import base64
import io
import logging

import qrcode
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 260   # pixel, cạnh ảnh vuông
DEFAULT_MARGIN = 10  # pixel, viền trắng quanh QR
DATA_URI_PREFIX = "data:image/png;base64,"


def render_png(data: str, size: int = DEFAULT_SIZE, margin: int = DEFAULT_MARGIN) -> bytes:
    """
    Tạo ảnh PNG vuông size x size chứa QR code của `data`.

    - box_size được chọn lớn nhất sao cho QR vừa trong (size - 2*margin).
    - Nếu data quá dài để vừa, ảnh được nới rộng thay vì cắt mất QR.
    """
    qr = qrcode.QRCode(box_size=1, border=0)
    qr.add_data(data)
    qr.make(fit=True)
    qr.box_size = max(1, (size - 2 * margin) // qr.modules_count)

    buffer = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buffer, format="PNG")
    buffer.seek(0)
    code_img = Image.open(buffer).convert("RGB")

    side = max(size, code_img.width + 2 * margin)
    canvas = Image.new("RGB", (side, side), "white")
    offset = (side - code_img.width) // 2
    canvas.paste(code_img, (offset, offset))

    out = io.BytesIO()
    canvas.save(out, format="PNG")
    logger.debug("Rendered %dx%d QR code (%d modules)", side, side, qr.modules_count)
    return out.getvalue()


def to_data_uri(data: str, size: int = DEFAULT_SIZE, margin: int = DEFAULT_MARGIN) -> str:
    """data:image/png;base64,... cho QR code của `data`."""
    png = render_png(data, size=size, margin=margin)
    return DATA_URI_PREFIX + base64.b64encode(png).decode("ascii")
