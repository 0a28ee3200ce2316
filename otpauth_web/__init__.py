"""
otpauth_web package

REST API (Flask) bọc quanh otpauth core: sinh secret, tính/xác minh mã,
dựng otpauth URI và QR code.
"""

from .app import app, create_app

__all__ = ['app', 'create_app']
