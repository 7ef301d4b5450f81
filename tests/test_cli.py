# tests/test_cli.py
import pytest
from typer.testing import CliRunner

from icmpsweep import main
from icmpsweep._exceptions import RawSocketPermissionError
from icmpsweep._models import FailureKind, HostReport, HostStats, RunReport

runner = CliRunner()


class FakeDispatcher:
    """Replaces Dispatcher so no raw sockets are opened."""

    instances = []
    fail = False

    def __init__(self, probe_runner, concurrency_limit, *, on_complete=None):
        self.probe_runner = probe_runner
        self.concurrency_limit = concurrency_limit
        self.on_complete = on_complete
        self.calls = []
        FakeDispatcher.instances.append(self)

    def run_all(self, hosts, packet_count):
        self.calls.append((list(hosts), packet_count))
        if FakeDispatcher.fail:
            raise RawSocketPermissionError("Operation not permitted")
        reports = []
        for index, host in enumerate(hosts):
            report = HostReport(target=host, identifier=index, resolved=host)
            if host == "unknown.invalid":
                report.failure = FailureKind.RESOLUTION_ERROR
                report.error = f"Resolve error {host}"
            else:
                report.stats = HostStats(sent=packet_count, received=packet_count, rtt_min=1.0, rtt_max=3.0, rtt_total=2.0 * packet_count)
                report.stats.finalize()
            reports.append(report)
            self.on_complete(report)
        return RunReport(hosts=reports, elapsed=0.5, peak_concurrency=min(len(hosts), self.concurrency_limit))


@pytest.fixture(autouse=True)
def fake_dispatcher(monkeypatch):
    FakeDispatcher.instances = []
    FakeDispatcher.fail = False
    monkeypatch.setattr(main, "Dispatcher", FakeDispatcher)
    return FakeDispatcher


@pytest.fixture
def hosts_file(tmp_path):
    path = tmp_path / "hosts.csv"
    path.write_text("# lab hosts\n192.0.2.1,router\nunknown.invalid,typo\n", encoding="utf-8")
    return path


def test_sweep_prints_line_per_host(hosts_file, fake_dispatcher):
    result = runner.invoke(main.app, ["--file", str(hosts_file), "-c", "4", "-r", "2"])
    assert result.exit_code == 0, result.output
    assert "192.0.2.1 (192.0.2.1): sent=4 received=4 lost=0" in result.output
    assert "Resolve error unknown.invalid" in result.output
    assert "2 hosts, 4 packets sent" in result.output
    dispatcher = fake_dispatcher.instances[0]
    assert dispatcher.concurrency_limit == 2
    assert dispatcher.calls == [(["192.0.2.1", "unknown.invalid"], 4)]


def test_options_reach_probe_runner(hosts_file, fake_dispatcher):
    result = runner.invoke(main.app, ["-f", str(hosts_file), "--timeout", "1.5", "--interval", "0.2"])
    assert result.exit_code == 0, result.output
    probe_runner = fake_dispatcher.instances[0].probe_runner
    assert probe_runner.timeout == 1.5
    assert probe_runner.interval == 0.2


def test_table_option(hosts_file):
    result = runner.invoke(main.app, ["-f", str(hosts_file), "--table"])
    assert result.exit_code == 0, result.output
    assert "icmpsweep summary" in result.output


def test_permission_failure_exits_non_zero(hosts_file, fake_dispatcher):
    fake_dispatcher.fail = True
    result = runner.invoke(main.app, ["-f", str(hosts_file)])
    assert result.exit_code == 1
    assert "sent=" not in result.output
    assert "hosts," not in result.output


@pytest.mark.parametrize("args", [["-c", "0"], ["-r", "0"]])
def test_zero_count_or_routines_rejected(hosts_file, args):
    result = runner.invoke(main.app, ["-f", str(hosts_file), *args])
    assert result.exit_code == 2


def test_missing_host_file(tmp_path, fake_dispatcher):
    result = runner.invoke(main.app, ["-f", str(tmp_path / "nope.csv")])
    assert result.exit_code == 2
    assert fake_dispatcher.instances == []
