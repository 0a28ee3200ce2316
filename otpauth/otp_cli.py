#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper cho otpauth core.

Cung cấp các subcommand:
- secret      : sinh secret base32 ngẫu nhiên
- code        : tính mã TOTP (theo thời gian) hoặc HOTP (--counter)
- verify      : xác minh mã TOTP
- hotp-verify : xác minh mã HOTP, in counter tiếp theo
- uri         : in otpauth:// URI
- qr          : xuất QR code (PNG) cho otpauth:// URI

Secret luôn được truyền qua tham số, CLI không đọc/ghi file secret.

Exit code: 0 = OK, 1 = mã không hợp lệ, 2 = tham số sai.
"""

import argparse
import logging
import sys

from otpauth import otp_core, qr
from otpauth.exceptions import OtpError
from otpauth.parameters import Algorithm, OtpType
from otpauth.uri_builder import UriBuilder

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


# --- CLI command handlers ---
def cmd_secret(args):
    print(otp_core.create_secret(args.length))
    return EXIT_OK


def cmd_code(args):
    if args.counter is not None:
        code = otp_core.hotp(args.secret, args.counter, args.digits, args.algorithm)
        print(code)
        logger.info("HOTP(%dd, counter=%d)", args.digits, args.counter)
        return EXIT_OK

    code, remaining = otp_core.totp(
        args.secret, args.time, args.period, args.digits, args.algorithm
    )
    print(code)
    logger.info("TOTP(%dd) valid ~%ds", args.digits, remaining)
    return EXIT_OK


def cmd_verify(args):
    ok = otp_core.verify_totp(
        args.secret,
        args.code,
        window=args.window,
        timestamp=args.time,
        timestep=args.period,
        digits=args.digits,
        algorithm=args.algorithm,
    )
    if ok:
        print("[+] TOTP code is VALID")
        return EXIT_OK
    print("[-] TOTP code is INVALID")
    return EXIT_INVALID


def cmd_hotp_verify(args):
    ok, new_counter = otp_core.verify_hotp(
        args.secret,
        args.code,
        args.counter,
        look_ahead=args.look_ahead,
        digits=args.digits,
        algorithm=args.algorithm,
    )
    if ok:
        print(f"[+] HOTP code is VALID (next counter = {new_counter})")
        return EXIT_OK
    print("[-] HOTP code is INVALID")
    return EXIT_INVALID


def _builder_from_args(args) -> UriBuilder:
    builder = (
        UriBuilder()
        .type(args.type)
        .account(args.account)
        .secret(args.secret, encode=args.raw)
    )
    if args.issuer:
        builder.issuer(args.issuer)
    if args.algorithm:
        builder.algorithm(args.algorithm)
    if args.digits is not None:
        builder.digits(args.digits)
    if args.counter is not None:
        builder.counter(args.counter)
    if args.period is not None:
        builder.period(args.period)
    return builder


def cmd_uri(args):
    print(_builder_from_args(args).build_uri())
    return EXIT_OK


def cmd_qr(args):
    uri = _builder_from_args(args).build_uri()
    if args.output:
        png = qr.render_png(uri, size=args.size, margin=args.margin)
        with open(args.output, "wb") as f:
            f.write(png)
        print(f"[*] QR code written to {args.output}")
    else:
        print(qr.to_data_uri(uri, size=args.size, margin=args.margin))
    return EXIT_OK


# --- Argparse builder ---
def _add_otp_options(p, with_counter=False):
    p.add_argument("--secret", required=True, help="Base32 secret")
    p.add_argument("--digits", type=int, default=otp_core.DEFAULT_DIGITS, help="Number of OTP digits")
    p.add_argument("--algorithm", type=Algorithm.parse, default=Algorithm.SHA1,
                   help="HMAC algorithm (SHA1, SHA256, SHA512)")
    if with_counter:
        p.add_argument("--counter", type=int, required=True, help="Current HOTP counter")
    else:
        p.add_argument("--period", type=int, default=otp_core.DEFAULT_TIME_STEP, help="TOTP time step (seconds)")
        p.add_argument("--time", type=float, help="Unix time to use instead of now")


def _add_uri_options(p):
    p.add_argument("--secret", required=True, help="Base32 secret (or raw secret with --raw)")
    p.add_argument("--raw", action="store_true", help="Encode the given raw secret first")
    p.add_argument("--account", default="", help="Account label")
    p.add_argument("--issuer", help="Issuer label")
    p.add_argument("--type", type=OtpType.parse, default=OtpType.TOTP, help="totp or hotp")
    p.add_argument("--algorithm", help="SHA1, SHA256 or SHA512")
    p.add_argument("--digits", type=int, help="6 or 8")
    p.add_argument("--counter", type=int, help="HOTP counter (required for hotp)")
    p.add_argument("--period", type=int, help="TOTP period (seconds)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otpauth", description="TOTP/HOTP generator and otpauth:// URI tool")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = p.add_subparsers(dest="cmd")

    # secret
    ps = sub.add_parser("secret", help="Generate a random base32 secret")
    ps.add_argument("--length", type=int, default=otp_core.DEFAULT_SECRET_LENGTH,
                    help="Secret length in characters (16-128)")
    ps.set_defaults(func=cmd_secret)

    # code
    pc = sub.add_parser("code", help="Compute a TOTP code (or HOTP with --counter)")
    _add_otp_options(pc)
    pc.add_argument("--counter", type=int, help="Compute HOTP for this counter instead")
    pc.set_defaults(func=cmd_code)

    # verify
    pv = sub.add_parser("verify", help="Verify a TOTP code")
    _add_otp_options(pv)
    pv.add_argument("--code", required=True, help="OTP code to verify")
    pv.add_argument("--window", type=int, default=otp_core.DEFAULT_WINDOW, help="Allowed +/- step window")
    pv.set_defaults(func=cmd_verify)

    # hotp-verify
    ph = sub.add_parser("hotp-verify", help="Verify a HOTP code")
    _add_otp_options(ph, with_counter=True)
    ph.add_argument("--code", required=True, help="OTP code to verify")
    ph.add_argument("--look-ahead", type=int, default=otp_core.DEFAULT_WINDOW, help="Allowed counter look-ahead")
    ph.set_defaults(func=cmd_hotp_verify)

    # uri
    pu = sub.add_parser("uri", help="Print an otpauth:// URI")
    _add_uri_options(pu)
    pu.set_defaults(func=cmd_uri)

    # qr
    pq = sub.add_parser("qr", help="Render the otpauth:// URI as a QR code")
    _add_uri_options(pq)
    pq.add_argument("--output", "-o", help="Write PNG to this path (default: print data URI)")
    pq.add_argument("--size", type=int, default=qr.DEFAULT_SIZE, help="Image size in pixels")
    pq.add_argument("--margin", type=int, default=qr.DEFAULT_MARGIN, help="Margin in pixels")
    pq.set_defaults(func=cmd_qr)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_USAGE
    try:
        return args.func(args)
    except OtpError as e:
        print(f"[!] {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
