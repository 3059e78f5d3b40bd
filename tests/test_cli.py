import json

import pytest

from netrecon import cli
from netrecon.errors import ResolutionError
from netrecon.models import ProbeResult, ScanTarget


@pytest.fixture
def fake_target(monkeypatch):
    def resolve(host, reverse=True):
        return ScanTarget(host=host, address="203.0.113.5", reverse_name="web.example" if reverse else None)
    monkeypatch.setattr(cli, "resolve_target", resolve)


@pytest.fixture
def fake_probe(monkeypatch):
    calls = []

    def probe(address, port, timeout_ms):
        calls.append(port)
        if port == 80:
            return ProbeResult(port=80, is_open=True, banner="HTTP/1.0 200\nServer: x")
        if port == 443:
            return ProbeResult(port=443, is_open=True)
        return ProbeResult(port=port, is_open=False)

    monkeypatch.setattr("netrecon.scanner.probe_port", probe)
    return calls


def test_text_output(fake_target, fake_probe, capsys):
    rc = cli.main(["--host", "example.test", "-p", "22,80,443", "-c", "3", "-t", "500"])
    out = capsys.readouterr().out

    assert rc == 0
    assert "Scanning example.test (203.0.113.5) - 3 ports, concurrency=3, timeout=500ms" in out
    assert "Reverse DNS: web.example" in out
    assert "80\topen\thttp\tHTTP/1.0 200\n" in out
    assert "443\topen\thttps\n" in out
    assert "Scan complete. 2 open port(s) found." in out
    assert sorted(fake_probe) == [22, 80, 443]


def test_json_output(fake_target, fake_probe, capsys):
    rc = cli.main(["--target", "example.test", "--ports", "22,80,443", "--json", "--no-rdns"])
    payload = json.loads(capsys.readouterr().out)

    assert rc == 0
    assert payload == {
        "target": "example.test",
        "ip": "203.0.113.5",
        "rdns": None,
        "scanned_ports": 3,
        "open_ports": [
            {"port": 80, "open": True, "service": "http", "banner": "HTTP/1.0 200\nServer: x"},
            {"port": 443, "open": True, "service": "https", "banner": None},
        ],
    }


def test_resolution_failure_aborts_before_probing(monkeypatch, fake_probe, capsys):
    def fail(host, reverse=True):
        raise ResolutionError(host, "Name or service not known")
    monkeypatch.setattr(cli, "resolve_target", fail)

    rc = cli.main(["--host", "nonexistent.invalid", "-p", "1-10"])
    captured = capsys.readouterr()

    assert rc == cli.EXIT_RESOLUTION
    assert fake_probe == []
    assert "Host resolution failed: Name or service not known" in captured.err
    assert "Scan complete" not in captured.out


def test_invalid_timeout_is_usage_error(fake_target):
    with pytest.raises(SystemExit) as info:
        cli.main(["--host", "example.test", "-t", "0"])
    assert info.value.code == 2


def test_save_results_file(fake_target, fake_probe, tmp_path, capsys):
    rc = cli.main([
        "--host", "example.test", "-p", "80,443",
        "--format", "json", "--out-dir", str(tmp_path),
    ])
    assert rc == 0
    saved = list(tmp_path.iterdir())
    assert len(saved) == 1
    data = json.loads(saved[0].read_text(encoding="utf-8"))
    assert [p["port"] for p in data["open_ports"]] == [80, 443]


def test_max_time_reports_partial_results(monkeypatch, fake_target, capsys):
    import time

    def slow_probe(address, port, timeout_ms):
        time.sleep(0.05)
        return ProbeResult(port=port, is_open=True)

    monkeypatch.setattr("netrecon.scanner.probe_port", slow_probe)

    rc = cli.main([
        "--host", "example.test", "-p", "1-100", "-c", "1",
        "--json", "--max-time", "0.3",
    ])
    payload = json.loads(capsys.readouterr().out)

    assert rc == cli.EXIT_CANCELLED
    assert 0 < payload["scanned_ports"] < 100
    assert len(payload["open_ports"]) == payload["scanned_ports"]


def test_dash_h_is_help_not_host(capsys):
    with pytest.raises(SystemExit) as info:
        cli.main(["-h"])
    assert info.value.code == 0
    assert "--host" in capsys.readouterr().out
