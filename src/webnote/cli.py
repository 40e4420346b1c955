from __future__ import annotations

import argparse
import errno
import ipaddress
import socket
import sys
from importlib import metadata
from pathlib import Path

import uvicorn
from rich.console import Console
from rich.markup import escape

import tomllib

from .codec import DEFAULT_ENCODING, SUPPORTED_ENCODINGS, UnsupportedEncodingError, resolve_encoding
from .logging_utils import build_uvicorn_log_config
from .web import WebConfig, create_app

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000

console = Console()
err_console = Console(stderr=True)


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("webnote")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _encoding_arg(value: str) -> str:
    try:
        return resolve_encoding(value)
    except UnsupportedEncodingError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="webnote",
        description="A simple web UI note: edit one text file in the browser.",
    )
    ap.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"webnote {__version__}",
    )
    ap.add_argument(
        "path",
        nargs="?",
        help="Path to the text file. Omit it to pick a location on first save.",
    )
    ap.add_argument(
        "-p",
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port to listen on (default: {DEFAULT_PORT}).",
    )
    ap.add_argument(
        "-e",
        "--encoding",
        type=_encoding_arg,
        default=DEFAULT_ENCODING,
        help=(
            "Encoding used to open and create the file "
            f"(default: {DEFAULT_ENCODING}; one of {', '.join(SUPPORTED_ENCODINGS)})."
        ),
    )
    ap.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Loopback interface to bind (default: {DEFAULT_HOST}).",
    )
    ap.add_argument(
        "--save-as",
        help="Save new notes to this path instead of asking with a native dialog.",
    )
    ap.add_argument(
        "--no-pause",
        action="store_true",
        help="Exit immediately on startup errors instead of waiting for a key press.",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Server log level (default: info).",
    )
    return ap


def _resolve_path(value: str | None) -> Path | None:
    if not value:
        return None
    return Path(value).expanduser().resolve()


def _is_loopback(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def _bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        if sys.platform != "win32":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def _report_bind_error(host: str, port: int, exc: OSError) -> None:
    address = f"{host}:{port}"
    if exc.errno == errno.EADDRINUSE:
        err_console.print(
            f"[bold red]Error:[/] Address {escape(address)} has already been used. "
            "Please use another available port."
        )
    else:
        err_console.print(f"[bold red]Address binding error[/] ({escape(address)}): {escape(str(exc))}")


def _stdin_is_interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def _wait_for_acknowledgement() -> None:
    try:
        console.input("Press Enter to continue...")
    except (EOFError, KeyboardInterrupt):
        pass


def _run_server(args: argparse.Namespace) -> int:
    config = WebConfig(
        path=_resolve_path(args.path),
        encoding=args.encoding,
        host=args.host,
        port=args.port,
        save_as=_resolve_path(args.save_as),
    )
    if not _is_loopback(config.host):
        err_console.print(
            f"[yellow]Warning:[/] {escape(config.host)} is not a loopback address; "
            "the note will be reachable from other machines."
        )

    try:
        sock = _bind_socket(config.host, config.port)
    except OSError as exc:
        _report_bind_error(config.host, config.port, exc)
        if not args.no_pause and _stdin_is_interactive():
            _wait_for_acknowledgement()
        return 1

    app = create_app(config)
    host_label = f"[{config.host}]" if ":" in config.host else config.host
    console.print(f"Encoding: {config.encoding}", markup=False)
    if config.path is not None:
        console.print(f"Editing: {config.path}", markup=False)
    else:
        console.print("No file yet; the first save will ask where to store it.")
    console.print(f"Service run at: http://{host_label}:{config.port}", markup=False)
    console.print("Press Ctrl+C to stop.\n")

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            log_config=build_uvicorn_log_config(args.log_level),
            log_level=args.log_level,
        )
    )
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_server(args)


if __name__ == "__main__":
    raise SystemExit(main())
