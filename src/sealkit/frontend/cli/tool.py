"""
Command-line encryption tool.

Text mode reads TEXT (or stdin) and prints base64; file mode (``--in`` and
``--out``) writes the raw envelope bytes.

Usage:
    sealkit encrypt "some text"
    sealkit decrypt --in secret.bin --out secret.txt --legacy
    sealkit newkey
    python -m sealkit.frontend.cli.tool info
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional, Sequence

from sealkit import __version__
from sealkit.core.exceptions import SealKitError
from sealkit.core.hashing import calculate_sha256
from sealkit.frontend.cli.clipboard import copy_to_clipboard
from sealkit.frontend.cli.context import ToolContext, build_context
from sealkit.frontend.cli.logging_config import configure_logging, level_for_verbosity
from sealkit.security.crypto import LEGAL_KEY_SIZES


logger = logging.getLogger(__name__)


def _read_text(text: Optional[str]) -> str:
    if text is not None:
        return text
    text = sys.stdin.read()
    # a shell pipe adds one line ending; any further blank lines are content
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return text


def _context_from_args(args: argparse.Namespace) -> ToolContext:
    return build_context(
        passphrase=args.passphrase,
        key_size=args.key_size,
        encoding=args.encoding,
        legacy=True if args.legacy else None,
    )


def _emit(args: argparse.Namespace, result: str) -> None:
    print(result)
    if args.copy and copy_to_clipboard(result):
        print("(copied to clipboard)", file=sys.stderr)


def _run_file(args: argparse.Namespace, ctx: ToolContext, encrypt: bool) -> None:
    src = Path(args.in_path).expanduser()
    dst = Path(args.out_path).expanduser()
    data = src.read_bytes()
    if encrypt:
        out = ctx.provider.encrypt_bytes(ctx.passphrase, data, ctx.key_size)
    else:
        out = ctx.provider.decrypt_bytes(ctx.passphrase, data, ctx.key_size)
    dst.write_bytes(out)
    logger.info("wrote %d bytes to %s (sha256 %s)", len(out), dst, calculate_sha256(dst))


def cmd_encrypt(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    if args.in_path:
        _run_file(args, ctx, encrypt=True)
        return 0
    text = _read_text(args.text)
    _emit(args, ctx.provider.encrypt_string(ctx.passphrase, text, ctx.encoding, ctx.key_size))
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    ctx = _context_from_args(args)
    if args.in_path:
        _run_file(args, ctx, encrypt=False)
        return 0
    text = _read_text(args.text).strip()
    _emit(args, ctx.provider.decrypt_string(ctx.passphrase, text, ctx.encoding, ctx.key_size))
    return 0


def cmd_newkey(args: argparse.Namespace) -> int:
    # A random UUID makes a reasonable application passphrase.
    _emit(args, str(uuid.uuid4()))
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    ctx = build_context(passphrase="", key_size=args.key_size, legacy=True if args.legacy else None)
    print(f"sealkit {__version__}")
    print(f"provider: {type(ctx.provider).__name__}")
    print(f"key size: {ctx.key_size} bits")
    print(f"NIST certified algorithm: {ctx.provider.is_nist_certified_algorithm}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sealkit", description="Passphrase-based AES encryption")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--passphrase", default=None, help="defaults to $SEALKIT_PASSPHRASE or a prompt")
    common.add_argument("--key-size", type=int, default=None, choices=LEGAL_KEY_SIZES)
    common.add_argument("--legacy", action="store_true", help="use the header-framed envelope")
    common.add_argument("--copy", action="store_true", help="copy the result to the clipboard")

    crypt = argparse.ArgumentParser(add_help=False, parents=[common])
    crypt.add_argument("text", nargs="?", default=None)
    crypt.add_argument("--encoding", default=None)
    crypt.add_argument("--in", dest="in_path", default=None)
    crypt.add_argument("--out", dest="out_path", default=None)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("encrypt", parents=[crypt], help="encrypt text or a file").set_defaults(func=cmd_encrypt)
    sub.add_parser("decrypt", parents=[crypt], help="decrypt text or a file").set_defaults(func=cmd_decrypt)
    sub.add_parser("newkey", parents=[common], help="print a new random passphrase").set_defaults(func=cmd_newkey)
    sub.add_parser("info", parents=[common], help="show version and provider").set_defaults(func=cmd_info)
    return parser


# Main entry point
def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in ("encrypt", "decrypt") and bool(args.in_path) != bool(args.out_path):
        parser.error("--in and --out must be given together")

    configure_logging(level_for_verbosity(args.verbose))

    try:
        return args.func(args)
    except (SealKitError, OSError, UnicodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
