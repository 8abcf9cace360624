from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from hdsctl import cli
from hdsctl.core.errors import DeviceIdentityError, ScriptExecutionError


class FakeService:
    instances: list[FakeService] = []

    def __init__(self, link=None) -> None:
        self.link = link
        self.load_warnings = ()
        self.values = {"ch1Disp": "ON", "horScal": "1.0ms"}
        self.scripts: list[str] = []
        self.closed = False
        FakeService.instances.append(self)

    def close(self) -> None:
        self.closed = True

    def get_field(self, field, use_cache=True):
        return self.values[field]

    def set_field(self, field, value):
        self.values[field] = value

    def execute_script(self, text, emit=print):
        self.scripts.append(text)
        if "?" in text:
            emit("ON")


runner = CliRunner()


def test_run_joins_arguments_into_script(monkeypatch) -> None:
    FakeService.instances.clear()
    monkeypatch.setattr(cli, "HdsService", FakeService)
    result = runner.invoke(cli.app, ["run", ":CH1:DISP", "ON;:CH1:DISP?"])
    assert result.exit_code == 0
    assert FakeService.instances[-1].scripts == [":CH1:DISP ON;:CH1:DISP?"]
    assert result.stdout.strip() == "ON"
    assert FakeService.instances[-1].closed


def test_run_reads_script_file(monkeypatch, tmp_path: Path) -> None:
    FakeService.instances.clear()
    monkeypatch.setattr(cli, "HdsService", FakeService)
    script = tmp_path / "setup.scpi"
    script.write_text(":CH1:DISP ON\n:HOR:SCAL 10ms\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "--file", str(script)])
    assert result.exit_code == 0
    assert FakeService.instances[-1].scripts == [":CH1:DISP ON\n:HOR:SCAL 10ms\n"]


def test_run_without_commands_fails(monkeypatch) -> None:
    monkeypatch.setattr(cli, "HdsService", FakeService)
    result = runner.invoke(cli.app, ["run"])
    assert result.exit_code == 2


def test_mock_flag_passes_mock_link(monkeypatch) -> None:
    FakeService.instances.clear()
    monkeypatch.setattr(cli, "HdsService", FakeService)
    result = runner.invoke(cli.app, ["--mock", "get", "ch1Disp"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "ON"
    assert isinstance(FakeService.instances[-1].link, cli.MockDeviceLink)


def test_set_prints_device_value(monkeypatch) -> None:
    monkeypatch.setattr(cli, "HdsService", FakeService)
    result = runner.invoke(cli.app, ["set", "horScal", "10ms"])
    assert result.exit_code == 0
    assert "horScal=10ms" in result.stdout


def test_script_error_is_clean(monkeypatch) -> None:
    class FailingService(FakeService):
        def execute_script(self, text, emit=print):
            raise ScriptExecutionError("failed to set :BOGUS 1: Unknown command: :BOGUS", ":BOGUS 1")

    monkeypatch.setattr(cli, "HdsService", FailingService)
    result = runner.invoke(cli.app, ["run", ":BOGUS 1"])
    assert result.exit_code == 1
    assert "Error: failed to set :BOGUS 1" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_identity_mismatch_aborts(monkeypatch) -> None:
    class WrongDevice(FakeService):
        def __init__(self, link=None) -> None:
            raise DeviceIdentityError("Unsupported device: 'RIGOL TECHNOLOGIES,DS1054Z'")

    monkeypatch.setattr(cli, "HdsService", WrongDevice)
    result = runner.invoke(cli.app, ["get", "ch1Disp"])
    assert result.exit_code == 1
    assert "Unsupported device" in result.stderr


def test_fields_lists_catalog(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("HDSCTL_CONFIG", raising=False)
    result = runner.invoke(cli.app, ["fields"])
    assert result.exit_code == 0
    assert "ch1Disp: :CH1:DISPlay (readwrite) [ON, OFF]" in result.stdout
    assert "idn: *IDN (read)" in result.stdout


def test_version() -> None:
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert "hdsctl version" in result.stdout
