from __future__ import annotations

import json
import socket
import zlib

from execlink.app.main import build_settings, main
from execlink.adapters.storage_local import StorageLocal


def _recv_all(server: socket.socket) -> bytes:
    conn, _ = server.accept()
    with conn:
        conn.settimeout(2.0)
        chunks = []
        while True:
            data = conn.recv(65536)
            if not data:
                return b"".join(chunks)
            chunks.append(data)


def test_check_closed_port_exits_nonzero(closed_port, tmp_path, capsys) -> None:
    code = main(["check", str(closed_port), "--settings-dir", str(tmp_path), "--json"])
    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out == {"port": str(closed_port), "live": False}


def test_check_live_port(backlog_listener, tmp_path, capsys) -> None:
    code = main(["check", str(backlog_listener), "--settings-dir", str(tmp_path)])
    assert code == 0
    assert capsys.readouterr().out.strip() == "live"


def test_send_code_to_explicit_port(tmp_path, capsys) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]

        code = main(["send", "--port", str(port), "--code", "print(1)", "--settings-dir", str(tmp_path)])
        received = _recv_all(server)

    assert code == 0
    assert zlib.decompress(received) == b"print(1)"
    assert f"Successfully executed script on port: {port}" in capsys.readouterr().out
    assert StorageLocal(root_dir=str(tmp_path)).load_user_settings()["last_port"] == str(port)


def test_send_file_uses_stored_port(backlog_listener, tmp_path, capsys) -> None:
    StorageLocal(root_dir=str(tmp_path)).save_user_settings({"last_port": str(backlog_listener)})
    script = tmp_path / "script.txt"
    script.write_text("print('from file')", encoding="utf-8")

    code = main(["send", "--file", str(script), "--settings-dir", str(tmp_path), "--json"])
    out = json.loads(capsys.readouterr().out)

    assert code == 0
    assert out["ok"] is True
    assert out["port"] == str(backlog_listener)
    assert out["bytes_sent"] > 0


def test_send_failure_exit_code(closed_port, tmp_path, capsys) -> None:
    code = main(["send", "--port", str(closed_port), "--settings-dir", str(tmp_path)])
    assert code == 1
    assert capsys.readouterr().out.startswith(f"Failed to connect or send on port {closed_port}: ")


def test_invalid_timeout_override(tmp_path, capsys) -> None:
    code = main(["check", "8392", "--probe-timeout-ms", "0", "--settings-dir", str(tmp_path)])
    assert code == 2
    assert "probe_timeout_ms must be positive" in capsys.readouterr().err


def test_build_settings_ignores_bad_file(tmp_path) -> None:
    (tmp_path / "user_settings.json").write_text("{not json", encoding="utf-8")
    vm = build_settings(StorageLocal(root_dir=str(tmp_path)))
    assert vm.last_port == ""

    (tmp_path / "user_settings.json").write_text('{"unknown": 1}', encoding="utf-8")
    vm = build_settings(StorageLocal(root_dir=str(tmp_path)))
    assert vm.send_timeout_ms == 3000
