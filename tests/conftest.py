"""
tests/conftest.py — Shared fixtures and path setup for all tests.

Adds the project root to sys.path so unit tests can import:
    from config.settings import Settings
    from monitoring.plan import build_plan
    from probes import ProbeResult
"""
import pathlib
import sys

import pytest

# Make project root importable without installing as a package
PROJECT_ROOT = pathlib.Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from probes import ProbeResult  # noqa: E402


class FakeCompleted:
    """Stand-in for subprocess.CompletedProcess returned by a fake run()."""

    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


@pytest.fixture
def fake_run(monkeypatch):
    """Patch subprocess.run with canned results keyed by the command name.

    A response is a FakeCompleted, an exception to raise, or a callable
    taking the argument list.

    Usage:
        calls = fake_run({"lvs": FakeCompleted(stdout="...")})
    """

    def install(responses: dict[str, FakeCompleted]) -> list[list[str]]:
        calls: list[list[str]] = []

        def run(args, **kwargs):  # noqa: ANN001, ANN003
            calls.append(list(args))
            response = responses[args[0]]
            if isinstance(response, BaseException):
                raise response
            if callable(response):
                return response(list(args))
            return response

        import subprocess

        monkeypatch.setattr(subprocess, "run", run)
        return calls

    return install


def passing_probe(**kwargs) -> ProbeResult:
    return ProbeResult("fake", True, "healthy")


def failing_probe(message: str = "boom", **kwargs) -> ProbeResult:
    return ProbeResult("fake", False, message)
