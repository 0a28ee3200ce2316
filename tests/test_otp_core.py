"""Tests for the OTP engine (HOTP/TOTP generation and verification)."""

import time

import pyotp
import pytest

from otpauth import base32, otp_core
from otpauth.exceptions import InvalidArgumentError, SecretDecodeError
from otpauth.otp_core import GoogleAuthenticator
from otpauth.parameters import Algorithm
from tests.conftest import RFC_SECRET_ASCII, RFC_SECRET_B32


# --- RFC vectors -----------------------------------------------------------

RFC4226_CODES = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]


@pytest.mark.parametrize("counter,expected", list(enumerate(RFC4226_CODES)))
def test_hotp_rfc4226_vectors(counter, expected):
    assert otp_core.generate_code(RFC_SECRET_ASCII, counter) == expected
    assert otp_core.hotp(RFC_SECRET_B32, counter) == expected


RFC6238_KEYS = {
    Algorithm.SHA1: b"12345678901234567890",
    Algorithm.SHA256: b"12345678901234567890123456789012",
    Algorithm.SHA512: b"1234567890123456789012345678901234567890123456789012345678901234",
}


@pytest.mark.parametrize(
    "unix_time,algorithm,expected",
    [
        (59, Algorithm.SHA1, "94287082"),
        (1111111109, Algorithm.SHA1, "07081804"),
        (1111111111, Algorithm.SHA1, "14050471"),
        (1234567890, Algorithm.SHA1, "89005924"),
        (2000000000, Algorithm.SHA1, "69279037"),
        (20000000000, Algorithm.SHA1, "65353130"),
        (59, Algorithm.SHA256, "46119246"),
        (1111111109, Algorithm.SHA256, "68084774"),
        (1234567890, Algorithm.SHA256, "91819424"),
        (20000000000, Algorithm.SHA256, "77737706"),
        (59, Algorithm.SHA512, "90693936"),
        (1111111109, Algorithm.SHA512, "25091201"),
        (1234567890, Algorithm.SHA512, "93441116"),
        (20000000000, Algorithm.SHA512, "47863826"),
    ],
)
def test_totp_rfc6238_vectors(unix_time, algorithm, expected):
    counter = otp_core.time_slice(unix_time)
    code = otp_core.generate_code(RFC6238_KEYS[algorithm], counter, 8, algorithm)
    assert code == expected


# --- Pure helpers ----------------------------------------------------------

def test_int_to_bytes():
    assert otp_core.int_to_bytes(1) == b"\x00" * 7 + b"\x01"
    assert otp_core.int_to_bytes(2 ** 32) == b"\x00\x00\x00\x01\x00\x00\x00\x00"


def test_dynamic_truncate_rfc4226_example():
    # RFC 4226 §5.4 worked example
    digest = bytes.fromhex("1f8698690e02ca16618550ef7f19da8e945b555a")
    assert otp_core.dynamic_truncate(digest) == 0x50EF7F19


def test_generate_code_zero_pads():
    codes = [otp_core.generate_code(RFC_SECRET_ASCII, c) for c in range(200)]
    assert all(len(c) == 6 and c.isdigit() for c in codes)
    assert any(c.startswith("0") for c in codes)


def test_generate_code_negative_counter():
    with pytest.raises(InvalidArgumentError):
        otp_core.generate_code(RFC_SECRET_ASCII, -1)


def test_generate_code_counter_must_fit_64_bits():
    assert otp_core.generate_code(RFC_SECRET_ASCII, otp_core.MAX_COUNTER).isdigit()
    with pytest.raises(InvalidArgumentError, match="64 bits"):
        otp_core.generate_code(RFC_SECRET_ASCII, otp_core.MAX_COUNTER + 1)


@pytest.mark.parametrize("digits", [0, -1])
def test_generate_code_rejects_bad_digits(digits):
    with pytest.raises(InvalidArgumentError):
        otp_core.generate_code(RFC_SECRET_ASCII, 0, digits=digits)


@pytest.mark.parametrize(
    "unix_time,step,expected",
    [(0, 30, 0), (29.9, 30, 0), (30, 30, 1), (59, 30, 1), (1385909245, 30, 46196974), (120, 60, 2)],
)
def test_time_slice(unix_time, step, expected):
    assert otp_core.time_slice(unix_time, step) == expected


def test_time_slice_rejects_bad_step():
    with pytest.raises(InvalidArgumentError):
        otp_core.time_slice(100, 0)


def test_hotp_bad_secret_raises():
    with pytest.raises(SecretDecodeError, match="Could not decode secret"):
        otp_core.hotp("not base32!", 0)


def test_totp_returns_remaining_seconds():
    code, remaining = otp_core.totp(RFC_SECRET_B32, timestamp=59, digits=8)
    assert code == "94287082"
    assert remaining == 1
    _, remaining = otp_core.totp(RFC_SECRET_B32, timestamp=60)
    assert remaining == 30


# --- Cross-check with pyotp --------------------------------------------------

@pytest.mark.parametrize("secret", ["JBSWY3DPEHPK3PXP", RFC_SECRET_B32, "ORSXG5A="])
def test_agrees_with_pyotp(secret):
    for counter in (0, 1, 7, 123456):
        assert otp_core.hotp(secret, counter) == pyotp.HOTP(secret).at(counter)
    for ts in (0, 59, 1700000000):
        assert otp_core.totp(secret, ts)[0] == pyotp.TOTP(secret).at(ts)


def test_agrees_with_pyotp_sha256_8_digits():
    secret = "JBSWY3DPEHPK3PXP"
    expected = pyotp.TOTP(secret, digits=8, digest="sha256").at(1700000000)
    code, _ = otp_core.totp(secret, 1700000000, digits=8, algorithm=Algorithm.SHA256)
    assert code == expected


# --- Secret generation -------------------------------------------------------

def test_create_secret_default_length():
    secret = otp_core.create_secret()
    assert len(secret) == 16
    assert base32.decode(secret)


@pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 64, 127, 128, 129, 200])
def test_create_secret_length_bounds(length):
    if length < 16 or length > 128:
        with pytest.raises(InvalidArgumentError, match="Bad secret length"):
            otp_core.create_secret(length)
    else:
        secret = otp_core.create_secret(length)
        assert len(secret) == length
        assert set(secret) <= set(base32.ALPHABET)


def test_create_secret_is_random():
    assert otp_core.create_secret() != otp_core.create_secret()


# --- verify_totp / verify_hotp ----------------------------------------------

def test_verify_totp_window():
    now = 1700000000
    key = base32.decode(RFC_SECRET_B32)
    current = otp_core.time_slice(now)
    for offset in (-1, 0, 1):
        code = otp_core.generate_code(key, current + offset)
        assert otp_core.verify_totp(RFC_SECRET_B32, code, timestamp=now)
    far = otp_core.generate_code(key, current + 2)
    assert not otp_core.verify_totp(RFC_SECRET_B32, far, timestamp=now)
    assert otp_core.verify_totp(RFC_SECRET_B32, far, window=2, timestamp=now)


def test_verify_totp_skips_negative_slices():
    code = otp_core.generate_code(base32.decode(RFC_SECRET_B32), 0)
    assert otp_core.verify_totp(RFC_SECRET_B32, code, timestamp=0)


@pytest.mark.parametrize("secret", ["", "n", "==", "===A===", "abc!"])
def test_verify_totp_bad_secret_is_false(secret):
    assert otp_core.verify_totp(secret, "123456") is False


def test_verify_totp_non_ascii_code():
    assert otp_core.verify_totp(RFC_SECRET_B32, "12345é") is False


def test_verify_totp_far_future_timestamp_is_false():
    assert otp_core.verify_totp(RFC_SECRET_B32, "123456", timestamp=1e21) is False


def test_verify_hotp_look_ahead():
    code = otp_core.hotp(RFC_SECRET_B32, 6)
    assert otp_core.verify_hotp(RFC_SECRET_B32, code, 5) == (True, 7)
    assert otp_core.verify_hotp(RFC_SECRET_B32, code, 4) == (False, 4)
    assert otp_core.verify_hotp(RFC_SECRET_B32, code, 4, look_ahead=2) == (True, 7)


def test_verify_hotp_bad_input():
    assert otp_core.verify_hotp("", "755224", 0) == (False, 0)
    assert otp_core.verify_hotp(RFC_SECRET_B32, "0755224", 0) == (False, 0)


def test_verify_hotp_counter_limit():
    last = otp_core.MAX_COUNTER
    code = otp_core.hotp(RFC_SECRET_B32, last)
    assert otp_core.verify_hotp(RFC_SECRET_B32, code, last - 1, look_ahead=5) == (True, last + 1)
    assert otp_core.verify_hotp(RFC_SECRET_B32, code, last + 1) == (False, last + 1)


def test_core_does_not_import_qr_renderer():
    # qrcode/Pillow chỉ được load khi render QR
    assert not hasattr(otp_core, "qr")


# --- GoogleAuthenticator facade ---------------------------------------------

@pytest.mark.parametrize(
    "secret,timeslice,code,passes",
    [
        ("SECRET", 0, "200470", True),
        ("SECRET", 1385909245, "780018", True),
        ("SECRET", 1378934578, "705013", True),
        ("SECRET", 1378934578, "000000", False),
    ],
)
def test_get_code_known_values(authenticator, secret, timeslice, code, passes):
    generated = authenticator.get_code(secret, timeslice)
    if passes:
        assert generated == code
    else:
        assert generated != code


@pytest.mark.parametrize("secret", ["", "n", "==", "===A==="])
def test_get_code_bad_secret(authenticator, secret):
    with pytest.raises(SecretDecodeError, match="Could not decode secret"):
        authenticator.get_code(secret)


def test_verify_code(authenticator):
    now = time.time()
    code = authenticator.get_code("SECRET", otp_core.time_slice(now))
    assert authenticator.verify_code("SECRET", code, now=now)
    assert not authenticator.verify_code("SECRET", "INVALIDCODE", now=now)
    assert not authenticator.verify_code("", code, now=now)


def test_verify_code_default_now(authenticator):
    code = authenticator.get_code("SECRET")
    assert authenticator.verify_code("SECRET", code)


def test_verify_code_leading_zero_rejected(authenticator):
    now = 1385909245 * 30
    code = authenticator.get_code("SECRET", otp_core.time_slice(now))
    assert authenticator.verify_code("SECRET", code, now=now)
    assert not authenticator.verify_code("SECRET", "0" + code, now=now)


def test_set_code_length(authenticator):
    assert authenticator.set_code_length(8) is authenticator
    code = authenticator.get_code("SECRET", 0)
    assert len(code) == 8
    assert code.endswith("200470")
    assert authenticator.verify_code("SECRET", code, now=15)
    assert not authenticator.verify_code("SECRET", code[2:], now=15)


def test_code_length_is_per_instance():
    a = GoogleAuthenticator().set_code_length(8)
    b = GoogleAuthenticator()
    assert len(a.get_code("SECRET", 0)) == 8
    assert len(b.get_code("SECRET", 0)) == 6


def test_create_secret_facade(authenticator):
    assert len(authenticator.create_secret()) == 16
    with pytest.raises(InvalidArgumentError):
        authenticator.create_secret(8)


def test_get_qr_code_url(authenticator):
    url = authenticator.get_qr_code_url("Test", "SECRET")
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert set(url[len(prefix):]) <= set(
        "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/="
    )
