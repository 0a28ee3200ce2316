"""
FLASK APP MAIN ENTRY POINT - OTP API SERVER
===========================================

Thiết lập Flask app, cấu hình CORS, đăng ký Blueprint otp_bp.

Cấu hình (mặc định ở DEFAULT_CONFIG, ghi đè bằng biến môi trường OTPAUTH_*):
- OTPAUTH_SECRET_LENGTH  : độ dài secret sinh ra bởi /generate_secret
- OTPAUTH_VERIFY_WINDOW  : số step cho phép lệch khi /verify
- OTPAUTH_MAX_VERIFY_WINDOW : giới hạn trên cho window / look_ahead trong request
- OTPAUTH_QR_SIZE        : kích thước ảnh QR (pixel)
- OTPAUTH_QR_MARGIN      : viền ảnh QR (pixel)
- OTPAUTH_DEFAULT_ISSUER : issuer mặc định cho URI nếu request không gửi

Ví dụ: OTPAUTH_QR_SIZE=320 python -m otpauth_web.app
"""
import logging

from flask import Flask
from flask_cors import CORS

from otpauth import otp_core, qr

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "SECRET_LENGTH": otp_core.DEFAULT_SECRET_LENGTH,
    "VERIFY_WINDOW": otp_core.DEFAULT_WINDOW,
    "MAX_VERIFY_WINDOW": 10,
    "QR_SIZE": qr.DEFAULT_SIZE,
    "QR_MARGIN": qr.DEFAULT_MARGIN,
    "DEFAULT_ISSUER": None,
}


def create_app(config=None) -> Flask:
    """
    Tạo Flask app.

    Thứ tự ưu tiên cấu hình: DEFAULT_CONFIG < biến môi trường OTPAUTH_* < `config`.
    """
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    # from_prefixed_env parse giá trị bằng json.loads -> "320" thành int 320
    app.config.from_prefixed_env("OTPAUTH")
    if config:
        app.config.update(config)

    # Cho phép frontend (domain/port khác) gọi API
    CORS(app)

    from otpauth_web.routes import otp_bp
    app.register_blueprint(otp_bp)

    logger.debug("otpauth API created (QR %spx, window %s)",
                 app.config["QR_SIZE"], app.config["VERIFY_WINDOW"])
    return app


app = create_app()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True, host='0.0.0.0', port=5000)
