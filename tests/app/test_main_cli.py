from __future__ import annotations

from pathlib import Path

import pytest

from sakesync.app import PreflightReport
from sakesync.config.errors import ConfigurationError
from sakesync.ui import cli as cli_module


def test_sync_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "sync_sake_catalog", fake_sync)

    cli_module.main(["sync"])

    assert captured == {"dry_run": None, "report_dir": None}


def test_sync_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "sync_sake_catalog", fake_sync)

    cli_module.main(["-v", "sync", "--dry-run", "--report-dir", "out/reports"])

    assert captured["dry_run"] is True
    assert captured["report_dir"] == Path("out/reports")


def test_missing_command_is_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_sync_failure_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> None:
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(cli_module, "sync_sake_catalog", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 1


def test_configuration_error_exits_with_usage_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> None:
        raise ConfigurationError("DATABASE_URI is empty")

    monkeypatch.setattr(cli_module, "sync_sake_catalog", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 2


def test_check_passes_when_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    report = PreflightReport(active_records=3, source_sizes={"brands": 3})
    monkeypatch.setattr(cli_module, "check_environment", lambda: report)

    cli_module.main(["check"])


def test_check_fails_when_source_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    report = PreflightReport(missing_tables=["sake_master"], source_error="HTTP 503")
    monkeypatch.setattr(cli_module, "check_environment", lambda: report)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["check"])

    assert excinfo.value.code == 1


def test_ctrl_c_exits_with_interrupt_code() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.sigint_handler(2, None)

    assert excinfo.value.code == cli_module.INTERRUPTED_EXIT_CODE


def test_interrupted_sync_is_not_swallowed(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> None:
        cli_module.sigint_handler(2, None)

    monkeypatch.setattr(cli_module, "sync_sake_catalog", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 130
