"""
OTP API ROUTES - FLASK BLUEPRINT

Các endpoint REST cho TOTP/HOTP. API không lưu trạng thái: secret được gửi kèm
trong mỗi request (JSON body), server không ghi secret ra đâu cả.

VÍ DỤ:
curl -X POST http://localhost:5000/generate_secret -H "Content-Type: application/json" -d "{}"
curl -X POST http://localhost:5000/code -H "Content-Type: application/json" -d '{"secret": "JBSWY3DPEHPK3PXP"}'
"""
import logging

from flask import Blueprint, current_app, jsonify, request

from otpauth import otp_core, qr
from otpauth.exceptions import InvalidArgumentError, SecretDecodeError, UriDomainError
from otpauth.parameters import Algorithm
from otpauth.uri_builder import UriBuilder

logger = logging.getLogger(__name__)

otp_bp = Blueprint('otp', __name__)


# --- Error handlers ----------------------------------------------------------
@otp_bp.errorhandler(InvalidArgumentError)
@otp_bp.errorhandler(SecretDecodeError)
def handle_bad_argument(e):
    return jsonify({"error": str(e)}), 400


@otp_bp.errorhandler(UriDomainError)
def handle_domain_error(e):
    return jsonify({"error": str(e)}), 422


# --- Request helpers ---------------------------------------------------------
def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _required(data: dict, name: str):
    if name not in data or data[name] in (None, ""):
        raise InvalidArgumentError(f"{name} is required")
    return data[name]


def _int(data: dict, name: str, default=None):
    value = data.get(name, default)
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidArgumentError(f"{name} must be an integer") from None


def _window(data: dict, name: str, default: int) -> int:
    value = _int(data, name, default)
    limit = current_app.config["MAX_VERIFY_WINDOW"]
    if value < 0 or value > limit:
        raise InvalidArgumentError(f"{name} must be between 0 and {limit}")
    return value


def _str(data: dict, name: str) -> str:
    value = _required(data, name)
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{name} must be a string")
    return value


def _builder_from_json(data: dict) -> UriBuilder:
    builder = UriBuilder().secret(_str(data, "secret"), encode=bool(data.get("raw", False)))
    builder.type(data.get("type", "totp"))
    builder.account(str(data.get("account", "")))
    issuer = data.get("issuer", current_app.config["DEFAULT_ISSUER"])
    if issuer:
        builder.issuer(str(issuer))
    if data.get("algorithm"):
        builder.algorithm(data["algorithm"])
    for name in ("digits", "counter", "period"):
        value = _int(data, name)
        if value is not None:
            getattr(builder, name)(value)
    return builder


# --- Endpoints ---------------------------------------------------------------
@otp_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"})


@otp_bp.route('/generate_secret', methods=['POST'])
def generate_secret():
    """
    TẠO SECRET KEY

      curl -X POST http://localhost:5000/generate_secret -H "Content-Type: application/json" -d '{"length": 32}'
    """
    data = _json_body()
    length = _int(data, "length", current_app.config["SECRET_LENGTH"])
    secret = otp_core.create_secret(length)
    logger.info("Generated secret %s... (length=%d)", secret[:4], length)
    return jsonify({"secret": secret, "success": True})


@otp_bp.route('/code', methods=['POST'])
def get_code():
    """
    TÍNH MÃ OTP

    Input (JSON body):
      {
        "secret": "JBSWY3DPEHPK3PXP",  # BẮT BUỘC
        "counter": 1,                  # nếu có -> HOTP, không có -> TOTP
        "timestamp": 1700000000,       # TOTP: thời điểm tính (mặc định: now)
        "digits": 6,
        "period": 30,
        "algorithm": "SHA1"
      }
    """
    data = _json_body()
    secret = _str(data, "secret")
    digits = _int(data, "digits", otp_core.DEFAULT_DIGITS)
    algorithm = Algorithm.parse(data.get("algorithm", Algorithm.SHA1))

    counter = _int(data, "counter")
    if counter is not None:
        code = otp_core.hotp(secret, counter, digits, algorithm)
        return jsonify({"code": code, "counter": counter})

    period = _int(data, "period", otp_core.DEFAULT_TIME_STEP)
    code, remaining = otp_core.totp(secret, _int(data, "timestamp"), period, digits, algorithm)
    return jsonify({"code": code, "remaining": remaining})


@otp_bp.route('/verify', methods=['POST'])
def verify_totp_route():
    """
    XÁC MINH MÃ TOTP

    Output: {"valid": true} hoặc {"valid": false}
    Secret sai định dạng cũng trả về {"valid": false}, không phải lỗi 400.
    """
    data = _json_body()
    code = _str(data, "code")
    secret = data.get("secret") if isinstance(data.get("secret"), str) else ""
    valid = otp_core.verify_totp(
        secret,
        code,
        window=_window(data, "window", current_app.config["VERIFY_WINDOW"]),
        timestamp=_int(data, "timestamp"),
        timestep=_int(data, "period", otp_core.DEFAULT_TIME_STEP),
        digits=_int(data, "digits", otp_core.DEFAULT_DIGITS),
        algorithm=Algorithm.parse(data.get("algorithm", Algorithm.SHA1)),
    )
    return jsonify({"valid": valid})


@otp_bp.route('/verify_hotp', methods=['POST'])
def verify_hotp_route():
    """
    XÁC MINH MÃ HOTP

    Output:
      {"valid": true, "new_counter": 2}  # Nếu thành công
      {"valid": false}                   # Nếu thất bại
    """
    data = _json_body()
    code = _str(data, "code")
    counter = _int(data, "counter")
    if counter is None:
        raise InvalidArgumentError("counter is required")
    secret = data.get("secret") if isinstance(data.get("secret"), str) else ""

    valid, new_counter = otp_core.verify_hotp(
        secret,
        code,
        counter,
        look_ahead=_window(data, "look_ahead", otp_core.DEFAULT_WINDOW),
        digits=_int(data, "digits", otp_core.DEFAULT_DIGITS),
        algorithm=Algorithm.parse(data.get("algorithm", Algorithm.SHA1)),
    )
    if valid:
        return jsonify({"valid": valid, "new_counter": new_counter})
    return jsonify({"valid": valid})


@otp_bp.route('/otpauth_uri', methods=['POST'])
def get_otpauth_uri():
    """
    LẤY URI ĐỂ TẠO QR CODE CHO AUTHENTICATOR APPS

      curl -X POST http://localhost:5000/otpauth_uri -H "Content-Type: application/json" \
           -d '{"secret": "JBSWY3DPEHPK3PXP", "account": "user@gmail.com", "issuer": "MyApp"}'
    """
    uri = _builder_from_json(_json_body()).build_uri()
    return jsonify({"uri": uri})


@otp_bp.route('/qr_code', methods=['POST'])
def get_qr_code():
    """
    TẠO QR CODE (PNG data URI) cho otpauth URI. Cùng input với /otpauth_uri.
    """
    uri = _builder_from_json(_json_body()).build_uri()
    data_uri = qr.to_data_uri(
        uri,
        size=current_app.config["QR_SIZE"],
        margin=current_app.config["QR_MARGIN"],
    )
    return jsonify({"qr_code": data_uri, "uri": uri})
