"""Shared fixtures."""

import pytest

from otpauth.otp_core import GoogleAuthenticator
from otpauth_web.app import create_app

# RFC 4226 Appendix D / RFC 6238 Appendix B seed, base32 encoded
RFC_SECRET_ASCII = b"12345678901234567890"
RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def authenticator():
    return GoogleAuthenticator()


@pytest.fixture
def app():
    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()
