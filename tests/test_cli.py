from __future__ import annotations

import socket
from pathlib import Path

import pytest

import webnote.cli as cli


class _FakeConfig:
    def __init__(self, app, **kwargs) -> None:
        self.app = app
        self.kwargs = kwargs


class _FakeServer:
    instances: list["_FakeServer"] = []

    def __init__(self, config: _FakeConfig) -> None:
        self.config = config
        self.sockets = None
        _FakeServer.instances.append(self)

    def run(self, sockets=None) -> None:
        self.sockets = sockets


@pytest.fixture
def fake_uvicorn(monkeypatch):
    _FakeServer.instances = []
    monkeypatch.setattr(cli.uvicorn, "Config", _FakeConfig)
    monkeypatch.setattr(cli.uvicorn, "Server", _FakeServer)
    return _FakeServer


def test_parser_defaults() -> None:
    args = cli.build_parser().parse_args([])
    assert args.path is None
    assert args.port == 3000
    assert args.encoding == "utf-8"
    assert args.host == "127.0.0.1"
    assert args.save_as is None
    assert args.no_pause is False


def test_parser_normalizes_encoding_aliases() -> None:
    args = cli.build_parser().parse_args(["notes.txt", "-e", "CP936", "-p", "8080"])
    assert args.path == "notes.txt"
    assert args.encoding == "gbk"
    assert args.port == 8080


def test_parser_rejects_unknown_encoding(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.build_parser().parse_args(["--encoding", "latin-1"])
    assert excinfo.value.code == 2
    assert "not supported" in capsys.readouterr().err


def test_main_serves_on_bound_socket(fake_uvicorn, tmp_path: Path, capsys) -> None:
    note = tmp_path / "note.txt"

    exit_code = cli.main([str(note), "--port", "0", "--encoding", "gbk"])

    assert exit_code == 0
    [server] = fake_uvicorn.instances
    assert server.sockets and server.sockets[0].fileno() == -1
    config = server.config.app.state.config
    assert config.path == note.resolve()
    assert config.encoding == "gbk"
    assert server.config.kwargs["log_config"]["loggers"]["webnote"]["level"] == "INFO"
    out = capsys.readouterr().out
    assert "Encoding: gbk" in out
    assert "Service run at: http://127.0.0.1:0" in out


def test_main_reports_port_in_use(fake_uvicorn, capsys) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]

        exit_code = cli.main(["--port", str(port), "--no-pause"])

    assert exit_code == 1
    assert fake_uvicorn.instances == []
    err = " ".join(capsys.readouterr().err.split())
    assert f"Address 127.0.0.1:{port} has already been used" in err


def test_bind_error_waits_for_acknowledgement_on_tty(fake_uvicorn, monkeypatch) -> None:
    prompts: list[str] = []

    def _fail_bind(host: str, port: int) -> socket.socket:
        raise OSError(13, "Permission denied")

    monkeypatch.setattr(cli, "_bind_socket", _fail_bind)
    monkeypatch.setattr(cli, "_stdin_is_interactive", lambda: True)
    monkeypatch.setattr(cli.console, "input", lambda prompt="": prompts.append(prompt) or "")

    assert cli.main(["--port", "80"]) == 1
    assert prompts == ["Press Enter to continue..."]


def test_non_loopback_host_warns(fake_uvicorn, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "_bind_socket", lambda host, port: socket.socket())

    assert cli.main(["--host", "0.0.0.0", "--port", "0"]) == 0
    assert "not a loopback address" in " ".join(capsys.readouterr().err.split())
