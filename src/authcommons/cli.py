"""Command-line utilities for inspecting authcommons payloads.

Lists the response-code table, resolves wire codes, decodes response payloads
and encodes new ones. Useful when debugging traffic between an
authentication client and server.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from authcommons.codes import ResponseCode, ResponseCodeView, classify
from authcommons.config import get_settings
from authcommons.errors import AuthCommonsError
from authcommons.models import AuthenticationChallenge, AuthenticationResponse

console = Console()
logger = logging.getLogger(__name__)

_HANDLER_NAME = "authcommons-cli"


def _setup_logging(verbose: bool) -> None:
    """Attach a console handler to the package logger."""
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log.level)
    package_logger = logging.getLogger("authcommons")
    package_logger.setLevel(level)
    if any(h.get_name() == _HANDLER_NAME for h in package_logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    package_logger.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authcommons",
        description="Inspect authentication response codes and payloads.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # codes
    sub.add_parser("codes", help="List all response codes")

    # lookup
    lookup_p = sub.add_parser("lookup", help="Resolve an integer wire code")
    lookup_p.add_argument("code", type=int, help="Integer status code")

    # inspect
    inspect_p = sub.add_parser("inspect", help="Decode a response payload")
    inspect_p.add_argument(
        "path", nargs="?", default="-", help="JSON file (default: stdin)"
    )

    # encode
    encode_p = sub.add_parser("encode", help="Encode a response as JSON")
    encode_p.add_argument("username", help="Username from the request")
    encode_p.add_argument(
        "--response",
        default=ResponseCode.AUTH_FAILURE.name,
        choices=[member.name for member in ResponseCode],
        help="Response code name (default: AUTH_FAILURE)",
    )
    encode_p.add_argument("--challenge-name", default="", help="Challenge name")
    encode_p.add_argument("--challenge-data", default="", help="Challenge data")
    encode_p.add_argument("--challenge-state", default="", help="Challenge state")
    encode_p.add_argument(
        "--with-code", action="store_true", help="Include the numeric response code"
    )

    return parser


def _print_codes(con: Console) -> None:
    table = Table(title="Response codes")
    table.add_column("Code", justify="right")
    table.add_column("Name")
    table.add_column("Class")
    for member in ResponseCode:
        table.add_row(str(member.code), member.name, classify(member.code) or "-")
    con.print(table)


def _lookup(code: int, con: Console) -> None:
    try:
        member = ResponseCode.from_code(code)
    except AuthCommonsError as exc:
        con.print(f"[red]Error:[/] {escape(str(exc))}")
        sys.exit(1)
    con.print(f"{member.code} -> {member.name} ({classify(member.code)})")


def _read_payload(path: str) -> bytes:
    # Raw bytes; decode_response reports bad encodings as PayloadError
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _inspect(path: str, con: Console) -> None:
    try:
        response = AuthenticationResponse.from_json(_read_payload(path))
    except (AuthCommonsError, OSError) as exc:
        con.print(f"[red]Error:[/] {escape(str(exc))}")
        sys.exit(1)

    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("username", escape(response.username))
    table.add_row("status", str(response.status))
    table.add_row("response", response.response.name)
    table.add_row("class", classify(response.status) or "unrecognised")
    if not response.challenge.is_empty:
        table.add_row("challenge.name", escape(str(response.challenge.name)))
        table.add_row("challenge.data", escape(str(response.challenge.data)))
        table.add_row("challenge.state", escape(response.challenge.state))
    con.print(table)


def _encode(args: argparse.Namespace, con: Console) -> None:
    challenge = AuthenticationChallenge(
        name=args.challenge_name,
        data=args.challenge_data,
        state=args.challenge_state,
    )
    response = AuthenticationResponse.create(
        args.username, ResponseCode.from_name(args.response), challenge
    )
    view = ResponseCodeView.WITH_CODE if args.with_code else None
    result = response.to_json(view=view)
    if not result.success:
        con.print(f"[red]Error:[/] {escape(str(result.error))}")
        sys.exit(1)
    con.print(
        result.payload, markup=False, highlight=False, emoji=False, soft_wrap=True
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``authcommons`` command."""
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    logger.debug("Running command %s", args.command)

    if args.command == "codes":
        _print_codes(console)
    elif args.command == "lookup":
        _lookup(args.code, console)
    elif args.command == "inspect":
        _inspect(args.path, console)
    elif args.command == "encode":
        _encode(args, console)


if __name__ == "__main__":
    main()
