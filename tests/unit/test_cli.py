"""Unit tests for the command line entry point (monitoring/cli.py)."""

from __future__ import annotations

import json
import logging

import pytest
from conftest import failing_probe, passing_probe

from config.settings import Settings
from monitoring import cli, log as log_mod
from probes import network, openshift, storage, system


@pytest.fixture(autouse=True)
def no_syslog(monkeypatch):
    # Force the stderr fallback so tests never write to the host's syslog
    monkeypatch.setattr(log_mod, "SYSLOG_ADDRESS", "/nonexistent/dev/log")
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("MONITORING_CONFIG", raising=False)
    yield
    logger = logging.getLogger(log_mod.LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def all_probes_pass(monkeypatch):
    for module in (network, openshift, storage, system):
        for attr in dir(module):
            if attr.startswith("check_"):
                monkeypatch.setattr(module, attr, passing_probe)


def _write_config(tmp_path, text: str):
    path = tmp_path / "config.yml"
    path.write_text(text)
    return str(path)


def test_healthy_run_prints_report_and_exits_zero(tmp_path, capsys, all_probes_pass):
    config = _write_config(tmp_path, "node:\n  type: storage\n")
    cli.main(["--config", config])
    out = capsys.readouterr().out
    payload = json.loads(out)
    assert payload["events"] == [{"summary": "system healthy", "category": "HEALTHY"}]


def test_major_events_still_exit_zero(tmp_path, capsys, all_probes_pass, monkeypatch):
    monkeypatch.setattr(storage, "check_glusterd_running", failing_probe)
    config = _write_config(tmp_path, "node:\n  type: storage\n")
    cli.main(["-c", config])
    payload = json.loads(capsys.readouterr().out)
    assert payload["events"] == [{"summary": "boom", "category": "MAJOR"}]


def test_pretty_flag(tmp_path, capsys, all_probes_pass):
    config = _write_config(tmp_path, "node:\n  type: worker\n")
    cli.main(["-p", "-c", config])
    out = capsys.readouterr().out
    assert out.startswith('{\n  "name": "ch.sbb.openshift-integration"')


def test_config_from_environment_variable(tmp_path, capsys, all_probes_pass, monkeypatch):
    monkeypatch.setenv("MONITORING_CONFIG", _write_config(tmp_path, "node:\n  type: worker\n"))
    cli.main([])
    assert json.loads(capsys.readouterr().out)["events"][0]["category"] == "HEALTHY"


def test_master_without_etcd_exits_non_zero_without_json(tmp_path, capsys, all_probes_pass):
    config = _write_config(tmp_path, "node:\n  type: master\nrouter:\n  ips: 10.0.0.1\n")
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-c", config])
    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "etcd.ips" in captured.err


def test_missing_config_file_exits_non_zero(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-c", str(tmp_path / "nope.yml")])
    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Not able to read config file" in captured.err


def test_debug_flag_logs_checks_to_stderr(tmp_path, capsys, all_probes_pass):
    config = _write_config(tmp_path, "node:\n  type: storage\n")
    cli.main(["-d", "-c", config])
    captured = capsys.readouterr()
    assert "Running storage checks for OpenShift." in captured.err
    assert "DEBU" in captured.err
    json.loads(captured.out)
