"""
probes/system.py — Host-level probes shared by every node role.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from probes import ProbeResult, failed, ok, output_of, run_command

SECONDS_PER_DAY = 86400


def check_ntpd(timeout_seconds: int = 10) -> ProbeResult:
    name = "ntpd"
    try:
        result = run_command(["ntpstat"], timeout_seconds)
    except subprocess.TimeoutExpired:
        return failed(name, f"ntpstat timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run ntpstat: {e}")
    # ntpstat: 0 synchronised, 1 not synchronised, 2 ntpd unreachable
    if result.returncode == 1:
        return failed(name, "Clock is not synchronised with ntpd", detail=output_of(result))
    if result.returncode != 0:
        return failed(name, "ntpd is not running or not reachable", detail=output_of(result))
    return ok(name, "synchronised")


def _certificates(paths: tuple[str, ...]) -> tuple[list[Path], list[str]]:
    found: list[Path] = []
    searched: list[str] = []
    for raw in paths:
        directory = Path(raw)
        if not directory.is_dir():
            continue
        searched.append(raw)
        found.extend(sorted(directory.glob("*.crt")))
    return found, searched


def check_certificate_expiry(
    paths: tuple[str, ...],
    days: int,
    timeout_seconds: int = 10,
) -> ProbeResult:
    name = f"Certificates <{days}d"
    certs, searched = _certificates(paths)
    if not searched:
        return failed(name, f"No certificate directory found in {', '.join(paths)}")

    expiring = []
    for cert in certs:
        try:
            result = run_command(
                [
                    "openssl",
                    "x509",
                    "-checkend",
                    str(days * SECONDS_PER_DAY),
                    "-noout",
                    "-in",
                    str(cert),
                ],
                timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            return failed(name, f"openssl timed out on {cert} ({timeout_seconds}s)")
        except OSError as e:
            return failed(name, f"could not run openssl: {e}")
        if result.returncode != 0:
            expiring.append(str(cert))

    if expiring:
        return failed(
            name, f"Certificates expire within {days} days: {', '.join(expiring)}"
        )
    return ok(name, f"{len(certs)} certificate(s) valid for more than {days} days")
