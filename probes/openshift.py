"""
probes/openshift.py — Cluster-level probes run on master nodes.

Shell out to `oc` and `etcdctl` the way an operator would; both are present
on every master.
"""

from __future__ import annotations

import subprocess

from probes import ProbeResult, failed, ok, output_of, run_command

ETCD_PORT = 2379
MAX_ROUTER_RESTARTS = 5
MAX_LOGGING_RESTARTS = 5
SYSTEM_PROJECT_PREFIXES = ("openshift", "kube-")
SYSTEM_PROJECTS = {"default", "logging", "management-infra"}


def _oc(name: str, args: list[str], timeout_seconds: int) -> tuple[list[str] | None, ProbeResult | None]:
    """Run `oc <args>` and return its stdout lines, or a failed result."""
    try:
        result = run_command(["oc", *args], timeout_seconds)
    except subprocess.TimeoutExpired:
        return None, failed(name, f"oc {args[0]} timed out ({timeout_seconds}s)")
    except OSError as e:
        return None, failed(name, f"could not run oc: {e}")
    if result.returncode != 0:
        return None, failed(
            name, f"oc {' '.join(args[:2])} returned non-zero", detail=output_of(result)
        )
    return [ln.strip() for ln in result.stdout.splitlines() if ln.strip()], None


def check_oc_get_nodes(timeout_seconds: int = 10) -> ProbeResult:
    name = "Nodes ready"
    lines, error = _oc(name, ["get", "nodes", "--no-headers"], timeout_seconds)
    if error is not None:
        return error
    if not lines:
        return failed(name, "oc get nodes returned no nodes")
    not_ready = []
    for line in lines:
        fields = line.split()
        # "Ready,SchedulingDisabled" is a healthy but cordoned node
        if len(fields) < 2 or not fields[1].startswith("Ready"):
            not_ready.append(fields[0])
    if not_ready:
        return failed(name, f"Nodes are not ready: {', '.join(not_ready)}")
    return ok(name, f"{len(lines)} node(s) ready")


def check_etcd_health(
    addresses: tuple[str, ...],
    cert_dir: str = "/etc/origin/master",
    timeout_seconds: int = 10,
) -> ProbeResult:
    name = "etcd cluster"
    endpoints = ",".join(f"https://{ip}:{ETCD_PORT}" for ip in addresses)
    try:
        result = run_command(
            [
                "etcdctl",
                "--cert-file",
                f"{cert_dir}/master.etcd-client.crt",
                "--key-file",
                f"{cert_dir}/master.etcd-client.key",
                "--ca-file",
                f"{cert_dir}/master.etcd-ca.crt",
                "--endpoints",
                endpoints,
                "cluster-health",
            ],
            timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        return failed(name, f"etcd cluster-health timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run etcdctl: {e}")
    if result.returncode != 0 or "cluster is healthy" not in result.stdout:
        return failed(name, f"etcd cluster is not healthy ({endpoints})", detail=output_of(result))
    return ok(name, "cluster is healthy")


def _restart_counts(lines: list[str]) -> dict[str, int]:
    counts = {}
    for line in lines:
        fields = line.split()
        if len(fields) < 4:
            continue
        try:
            counts[fields[0]] = int(fields[3])
        except ValueError:
            continue
    return counts


def _check_restarts(
    name: str,
    namespace: str,
    selector: list[str],
    max_restarts: int,
    timeout_seconds: int,
) -> ProbeResult:
    lines, error = _oc(
        name, ["get", "pods", "-n", namespace, "--no-headers", *selector], timeout_seconds
    )
    if error is not None:
        return error
    restarted = {
        pod: count for pod, count in _restart_counts(lines).items() if count > max_restarts
    }
    if restarted:
        pods = ", ".join(f"{pod} ({count}x)" for pod, count in sorted(restarted.items()))
        return failed(name, f"Pods in {namespace} restarted more than {max_restarts} times: {pods}")
    return ok(name, f"no pod in {namespace} restarted more than {max_restarts} times")


def check_router_restart_count(
    max_restarts: int = MAX_ROUTER_RESTARTS, timeout_seconds: int = 10
) -> ProbeResult:
    return _check_restarts(
        "Router restarts", "default", ["-l", "router"], max_restarts, timeout_seconds
    )


def check_logging_restarts_count(
    max_restarts: int = MAX_LOGGING_RESTARTS, timeout_seconds: int = 10
) -> ProbeResult:
    return _check_restarts("Logging restarts", "logging", [], max_restarts, timeout_seconds)


def _is_system_project(project: str) -> bool:
    return project in SYSTEM_PROJECTS or project.startswith(SYSTEM_PROJECT_PREFIXES)


def check_limits_and_quotas(allowed_without_limits: int = 0, timeout_seconds: int = 10) -> ProbeResult:
    name = "Limits and quotas"
    projects, error = _oc(
        name,
        ["get", "projects", "--no-headers", "-o", "custom-columns=NAME:.metadata.name"],
        timeout_seconds,
    )
    if error is not None:
        return error
    limited, error = _oc(
        name,
        [
            "get",
            "limitrange",
            "--all-namespaces",
            "--no-headers",
            "-o",
            "custom-columns=NS:.metadata.namespace",
        ],
        timeout_seconds,
    )
    if error is not None:
        return error
    quoted, error = _oc(
        name,
        [
            "get",
            "quota",
            "--all-namespaces",
            "--no-headers",
            "-o",
            "custom-columns=NS:.metadata.namespace",
        ],
        timeout_seconds,
    )
    if error is not None:
        return error

    covered = set(limited) & set(quoted)
    missing = sorted(p for p in projects if not _is_system_project(p) and p not in covered)
    if len(missing) > allowed_without_limits:
        return failed(
            name,
            f"{len(missing)} project(s) without limits or quotas "
            f"(allowed {allowed_without_limits}): {', '.join(missing)}",
        )
    return ok(name, f"{len(missing)} project(s) without limits or quotas")
