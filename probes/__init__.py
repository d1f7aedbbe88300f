"""
probes — Health probes for OpenShift worker, master and storage nodes.

Every probe is a plain function that returns a ProbeResult. Probes do their
own I/O (subprocess, HTTP, DNS) with explicit timeouts and turn expected
errors into failed results. The orchestrator in monitoring/ decides which
probes run for a node role and how severe a failure is.

Usage:
    from probes import ProbeResult
    from probes.storage import check_mount_point_sizes
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass


@dataclass(frozen=True)
class ProbeResult:
    name: str
    passed: bool
    message: str
    detail: str | None = None


def ok(name: str, message: str = "healthy") -> ProbeResult:
    return ProbeResult(name, True, message)


def failed(name: str, message: str, detail: str | None = None) -> ProbeResult:
    return ProbeResult(name, False, message, detail=detail)


def run_command(args: list[str], timeout_seconds: int) -> subprocess.CompletedProcess:
    """Run a local command and capture its output.

    Raises subprocess.TimeoutExpired / OSError to the calling probe, which
    reports them as a failure.
    """
    return subprocess.run(
        args,
        capture_output=True,
        text=True,
        timeout=timeout_seconds,
    )


def output_of(result: subprocess.CompletedProcess, limit: int = 500) -> str:
    return ((result.stdout or "") + "\n" + (result.stderr or "")).strip()[:limit]
