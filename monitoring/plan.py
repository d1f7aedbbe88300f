"""
monitoring/plan.py — Role-based check plan.

Maps a node role onto the ordered list of probes to run, the severity each
failure is reported with, and the parameters each probe is called with.
Thresholds are operational policy and live here as constants; they are not
derived from one another.

Order of a plan:
    1. MAJOR checks for the role
    2. MINOR checks for the role
    3. MINOR checks shared by every role
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from config.settings import ConfigurationError
from monitoring.events import Severity
from probes import ProbeResult, network, openshift, storage, system

if TYPE_CHECKING:
    from config.settings import Settings

ROLES = ("worker", "master", "storage")

# -----------------------------------------------------------------------------
# Thresholds per role and tier
# -----------------------------------------------------------------------------
STORAGE_MOUNT_USAGE = {"MAJOR": 90, "MINOR": 85}
STORAGE_LV_POOL_USAGE = {"MAJOR": 90, "MINOR": 80}
STORAGE_VG_MIN_FREE = {"MAJOR": 5, "MINOR": 10}
STORAGE_OPEN_FILES_PERCENT = 90
WORKER_DOCKER_POOL_USAGE = {"MAJOR": 90, "MINOR": 80}
CERTIFICATE_EXPIRY_DAYS = {"MAJOR": 30, "MINOR": 80}

NODE_CERT_DIRS = ("/etc/origin/node",)
MASTER_CERT_DIRS = ("/etc/origin/master", "/etc/origin/node")


@dataclass(frozen=True)
class CheckPlanEntry:
    name: str
    probe: Callable[..., ProbeResult]
    severity: Severity
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Bound once at plan time; probes only ever see a read-only view
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))


def _entry(
    name: str, probe: Callable[..., ProbeResult], severity: Severity, **parameters: Any
) -> CheckPlanEntry:
    return CheckPlanEntry(name, probe, severity, parameters)


def validate_required(role: str, cfg: Settings) -> None:
    """Fail fast on configuration a role cannot run without."""
    if role not in ROLES:
        raise ConfigurationError(f"Unknown node type '{role}' (expected one of {', '.join(ROLES)})")
    if role == "master":
        missing = []
        if not cfg.etcd_addresses:
            missing.append("etcd.ips")
        if not cfg.router_addresses:
            missing.append("router.ips")
        if missing:
            raise ConfigurationError(
                f"Can't read service IPs from configuration file: {', '.join(missing)} required "
                "for node type master"
            )


def _storage_capacity_entries(tier: Severity, t: int) -> list[CheckPlanEntry]:
    return [
        _entry(
            "mount points",
            storage.check_mount_point_sizes,
            tier,
            threshold=STORAGE_MOUNT_USAGE[tier],
            timeout_seconds=t,
        ),
        _entry(
            "lv pools",
            storage.check_lv_pool_sizes,
            tier,
            threshold=STORAGE_LV_POOL_USAGE[tier],
            timeout_seconds=t,
        ),
        _entry(
            "vg sizes",
            storage.check_vg_sizes,
            tier,
            min_free_percent=STORAGE_VG_MIN_FREE[tier],
            timeout_seconds=t,
        ),
    ]


def _storage_plan(cfg: Settings) -> list[CheckPlanEntry]:
    t = cfg.PROBE_TIMEOUT_SECONDS
    return [
        _entry("glusterd", storage.check_glusterd_running, "MAJOR", timeout_seconds=t),
        *_storage_capacity_entries("MAJOR", t),
        _entry(
            "open files",
            storage.check_open_file_count,
            "MINOR",
            max_percent=STORAGE_OPEN_FILES_PERCENT,
        ),
        *_storage_capacity_entries("MINOR", t),
    ]


def _dns_entries(t: int) -> list[CheckPlanEntry]:
    return [
        _entry("dns kubernetes", network.check_dns_nslookup_on_kubernetes, "MAJOR", timeout_seconds=t),
        _entry("dns node service", network.check_dns_service_node, "MAJOR", timeout_seconds=t),
    ]


def _certificate_entry(tier: Severity, paths: tuple[str, ...], t: int) -> CheckPlanEntry:
    return _entry(
        "certificates",
        system.check_certificate_expiry,
        tier,
        paths=paths,
        days=CERTIFICATE_EXPIRY_DAYS[tier],
        timeout_seconds=t,
    )


def _http_service_entry(cfg: Settings) -> list[CheckPlanEntry]:
    if not cfg.HTTP_SERVICE_URL:
        return []
    return [
        _entry(
            "http service",
            network.check_http_service,
            "MINOR",
            url=cfg.HTTP_SERVICE_URL,
            timeout_seconds=cfg.PROBE_TIMEOUT_SECONDS,
        )
    ]


def _worker_plan(cfg: Settings) -> list[CheckPlanEntry]:
    t = cfg.PROBE_TIMEOUT_SECONDS
    plan = [
        _entry(
            "docker pool",
            storage.check_docker_pool,
            "MAJOR",
            threshold=WORKER_DOCKER_POOL_USAGE["MAJOR"],
            timeout_seconds=t,
        ),
        *_dns_entries(t),
        _certificate_entry("MAJOR", NODE_CERT_DIRS, t),
        _entry(
            "docker pool",
            storage.check_docker_pool,
            "MINOR",
            threshold=WORKER_DOCKER_POOL_USAGE["MINOR"],
            timeout_seconds=t,
        ),
        *_http_service_entry(cfg),
        _certificate_entry("MINOR", NODE_CERT_DIRS, t),
    ]
    return plan


def _master_plan(cfg: Settings) -> list[CheckPlanEntry]:
    t = cfg.PROBE_TIMEOUT_SECONDS
    plan = [
        _entry("nodes", openshift.check_oc_get_nodes, "MAJOR", timeout_seconds=t),
        _entry(
            "etcd",
            openshift.check_etcd_health,
            "MAJOR",
            addresses=tuple(cfg.etcd_addresses),
            cert_dir=cfg.ETCD_CERT_DIR,
            timeout_seconds=t,
        ),
    ]
    if cfg.REGISTRY_IP:
        plan.append(
            _entry(
                "registry", network.check_registry_health, "MAJOR", ip=cfg.REGISTRY_IP, timeout_seconds=t
            )
        )
    # One entry per router, each with its own address bound
    plan += [
        _entry(f"router {ip}", network.check_router_health, "MAJOR", ip=ip, timeout_seconds=t)
        for ip in cfg.router_addresses
    ]
    plan += [
        _entry("master api", network.check_master_apis, "MAJOR", url=cfg.MASTER_API_URL, timeout_seconds=t),
        *_dns_entries(t),
        _certificate_entry("MAJOR", MASTER_CERT_DIRS, t),
    ]

    if cfg.EXTERNAL_SYSTEM_URL:
        plan.append(
            _entry(
                "external system",
                network.check_external_system,
                "MINOR",
                url=cfg.EXTERNAL_SYSTEM_URL,
                timeout_seconds=t,
            )
        )
    if cfg.HAWKULAR_IP:
        plan.append(
            _entry("hawkular", network.check_hawkular_health, "MINOR", ip=cfg.HAWKULAR_IP, timeout_seconds=t)
        )
    plan += [
        _entry("router restarts", openshift.check_router_restart_count, "MINOR", timeout_seconds=t),
        _entry(
            "limits and quotas",
            openshift.check_limits_and_quotas,
            "MINOR",
            allowed_without_limits=cfg.PROJECTS_WITHOUT_LIMITS,
            timeout_seconds=t,
        ),
        *_http_service_entry(cfg),
        _entry("logging restarts", openshift.check_logging_restarts_count, "MINOR", timeout_seconds=t),
        _certificate_entry("MINOR", MASTER_CERT_DIRS, t),
    ]
    return plan


_ROLE_PLANS = {
    "worker": _worker_plan,
    "master": _master_plan,
    "storage": _storage_plan,
}


def build_plan(role: str, cfg: Settings) -> list[CheckPlanEntry]:
    """Build the ordered check plan for a node role.

    Raises:
        ConfigurationError: if configuration required by the role is missing.
    """
    validate_required(role, cfg)
    plan = _ROLE_PLANS[role](cfg)
    plan.append(_entry("ntpd", system.check_ntpd, "MINOR", timeout_seconds=cfg.PROBE_TIMEOUT_SECONDS))
    return plan
