"""
probes/network.py — DNS and HTTP reachability probes.

HTTP probes use urllib with an unverified TLS context: cluster-internal
endpoints (master API, hawkular) are served with the cluster CA, which the
monitoring host does not necessarily trust.
"""

from __future__ import annotations

import socket
import ssl
import subprocess
import urllib.error
import urllib.request

from probes import ProbeResult, failed, ok, output_of, run_command

KUBERNETES_SERVICE = "kubernetes.default.svc.cluster.local"
ROUTER_HEALTH_PORT = 1936
REGISTRY_PORT = 5000


def _unverified_context() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _http_get(url: str, timeout_seconds: int) -> tuple[int, str]:
    with urllib.request.urlopen(
        url, timeout=timeout_seconds, context=_unverified_context()
    ) as resp:
        return resp.status, resp.read(4096).decode("utf-8", errors="replace")


def _check_http_ok(name: str, url: str, timeout_seconds: int, what: str) -> ProbeResult:
    try:
        status, _ = _http_get(url, timeout_seconds)
    except urllib.error.HTTPError as e:
        return failed(name, f"{what} returned HTTP {e.code} ({url})")
    except urllib.error.URLError as e:
        return failed(name, f"{what} not reachable at {url}", detail=str(e.reason))
    except (OSError, ValueError) as e:
        return failed(name, f"{what} check failed at {url}: {e}")
    if status != 200:
        return failed(name, f"{what} returned HTTP {status} ({url})")
    return ok(name, f"{what} reachable")


def _nslookup(name: str, args: list[str], timeout_seconds: int) -> ProbeResult:
    try:
        result = run_command(["nslookup", *args], timeout_seconds)
    except subprocess.TimeoutExpired:
        return failed(name, f"DNS lookup of {args[0]} timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run nslookup: {e}")
    if result.returncode != 0:
        return failed(name, f"DNS lookup of {args[0]} failed", detail=output_of(result))
    return ok(name, f"{args[0]} resolved")


def check_dns_nslookup_on_kubernetes(timeout_seconds: int = 10) -> ProbeResult:
    return _nslookup("DNS kubernetes service", [KUBERNETES_SERVICE], timeout_seconds)


def check_dns_service_node(timeout_seconds: int = 10, server: str | None = None) -> ProbeResult:
    """Resolve the kubernetes service through the DNS server running on this node."""
    name = "DNS node service"
    if server is None:
        try:
            server = socket.gethostbyname(socket.gethostname())
        except OSError as e:
            return failed(name, f"could not determine node address: {e}")
    return _nslookup(name, [KUBERNETES_SERVICE, server], timeout_seconds)


def check_http_service(url: str, timeout_seconds: int = 10) -> ProbeResult:
    return _check_http_ok("HTTP service", url, timeout_seconds, "HTTP service")


def check_external_system(url: str, timeout_seconds: int = 10) -> ProbeResult:
    return _check_http_ok("External system", url, timeout_seconds, "External system")


def check_router_health(ip: str, timeout_seconds: int = 10) -> ProbeResult:
    url = f"http://{ip}:{ROUTER_HEALTH_PORT}/healthz"
    return _check_http_ok(f"Router {ip}", url, timeout_seconds, f"Router {ip}")


def check_registry_health(ip: str, timeout_seconds: int = 10) -> ProbeResult:
    url = f"http://{ip}:{REGISTRY_PORT}/healthz"
    return _check_http_ok("Registry", url, timeout_seconds, f"Registry {ip}")


def check_master_apis(url: str, timeout_seconds: int = 10) -> ProbeResult:
    return _check_http_ok("Master API", url, timeout_seconds, "Master API")


def check_hawkular_health(ip: str, timeout_seconds: int = 10) -> ProbeResult:
    name = "Hawkular metrics"
    url = f"https://{ip}/hawkular/metrics/status"
    try:
        status, body = _http_get(url, timeout_seconds)
    except urllib.error.HTTPError as e:
        return failed(name, f"Hawkular returned HTTP {e.code} ({url})")
    except urllib.error.URLError as e:
        return failed(name, f"Hawkular not reachable at {url}", detail=str(e.reason))
    except (OSError, ValueError) as e:
        return failed(name, f"Hawkular check failed at {url}: {e}")
    if status != 200 or "STARTED" not in body:
        return failed(name, f"Hawkular metrics not started (HTTP {status})", detail=body[:500])
    return ok(name, "STARTED")
