"""
probes/storage.py — Filesystem and LVM capacity probes.

Used on storage nodes (gluster bricks, LVM pools, volume groups) and on
workers (docker thin pool). Thresholds come from the check plan.
"""

from __future__ import annotations

import subprocess

from probes import ProbeResult, failed, ok, output_of, run_command

GLUSTER_MOUNT_PREFIX = "/gluster"
DOCKER_POOL = "docker-vg/docker-pool"
FILE_NR_PATH = "/proc/sys/fs/file-nr"


def _percent(raw: str) -> float | None:
    raw = raw.strip().rstrip("%")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def check_glusterd_running(timeout_seconds: int = 10) -> ProbeResult:
    name = "glusterd"
    try:
        result = run_command(["systemctl", "is-active", "glusterd"], timeout_seconds)
    except subprocess.TimeoutExpired:
        return failed(name, f"glusterd status check timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not query glusterd status: {e}")
    if result.returncode != 0:
        return failed(name, "glusterd is not running", detail=output_of(result))
    return ok(name, "running")


def check_mount_point_sizes(
    threshold: int,
    timeout_seconds: int = 10,
    prefix: str = GLUSTER_MOUNT_PREFIX,
) -> ProbeResult:
    name = f"Mount points >{threshold}%"
    try:
        result = run_command(["df", "--output=pcent,target"], timeout_seconds)
    except subprocess.TimeoutExpired:
        return failed(name, f"df timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run df: {e}")
    if result.returncode != 0:
        return failed(name, "df returned non-zero", detail=output_of(result))

    full = []
    for line in result.stdout.splitlines()[1:]:
        parts = line.split(None, 1)
        if len(parts) != 2 or not parts[1].startswith(prefix):
            continue
        usage = _percent(parts[0])
        if usage is not None and usage > threshold:
            full.append(f"{parts[1]} ({usage:g}%)")

    if full:
        return failed(
            name, f"Mount point usage is above {threshold}%: {', '.join(full)}"
        )
    return ok(name, f"all {prefix} mount points below {threshold}%")


def check_lv_pool_sizes(threshold: int, timeout_seconds: int = 10) -> ProbeResult:
    name = f"LV pools >{threshold}%"
    try:
        result = run_command(
            [
                "lvs",
                "--noheadings",
                "--separator",
                ",",
                "-o",
                "vg_name,lv_name,lv_attr,data_percent,metadata_percent",
            ],
            timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        return failed(name, f"lvs timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run lvs: {e}")
    if result.returncode != 0:
        return failed(name, "lvs returned non-zero", detail=output_of(result))

    full = []
    for line in result.stdout.splitlines():
        fields = [f.strip() for f in line.split(",")]
        if len(fields) != 5 or not fields[2].startswith("t"):
            # Only thin pools carry a meaningful data/metadata usage
            continue
        vg, lv, _, data, meta = fields
        for kind, raw in (("data", data), ("metadata", meta)):
            usage = _percent(raw)
            if usage is not None and usage > threshold:
                full.append(f"{vg}/{lv} {kind} {usage:g}%")

    if full:
        return failed(name, f"LV pool usage is above {threshold}%: {', '.join(full)}")
    return ok(name, f"all thin pools below {threshold}%")


def check_vg_sizes(min_free_percent: int, timeout_seconds: int = 10) -> ProbeResult:
    name = f"VG free <{min_free_percent}%"
    try:
        result = run_command(
            [
                "vgs",
                "--noheadings",
                "--units",
                "g",
                "--nosuffix",
                "--separator",
                ",",
                "-o",
                "vg_name,vg_size,vg_free",
            ],
            timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        return failed(name, f"vgs timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run vgs: {e}")
    if result.returncode != 0:
        return failed(name, "vgs returned non-zero", detail=output_of(result))

    low = []
    for line in result.stdout.splitlines():
        fields = [f.strip() for f in line.split(",")]
        if len(fields) != 3:
            continue
        vg, size, free = fields[0], _percent(fields[1]), _percent(fields[2])
        if not size or free is None:
            continue
        free_percent = free / size * 100
        if free_percent < min_free_percent:
            low.append(f"{vg} ({free_percent:.1f}% free)")

    if low:
        return failed(
            name, f"VG free space is below {min_free_percent}%: {', '.join(low)}"
        )
    return ok(name, f"all volume groups have >={min_free_percent}% free")


def check_docker_pool(
    threshold: int,
    timeout_seconds: int = 10,
    pool: str = DOCKER_POOL,
) -> ProbeResult:
    name = f"Docker pool >{threshold}%"
    try:
        result = run_command(
            [
                "lvs",
                "--noheadings",
                "--separator",
                ",",
                "-o",
                "data_percent,metadata_percent",
                pool,
            ],
            timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        return failed(name, f"lvs timed out ({timeout_seconds}s)")
    except OSError as e:
        return failed(name, f"could not run lvs: {e}")
    if result.returncode != 0:
        return failed(name, f"could not read usage of {pool}", detail=output_of(result))

    fields = [f.strip() for f in result.stdout.strip().split(",")]
    if len(fields) != 2:
        return failed(name, f"unexpected lvs output for {pool}: {result.stdout.strip()!r}")
    data, meta = _percent(fields[0]), _percent(fields[1])
    if data is None or meta is None:
        return failed(name, f"unexpected lvs output for {pool}: {result.stdout.strip()!r}")
    if data > threshold or meta > threshold:
        return failed(
            name,
            f"Docker pool usage is above {threshold}%: data {data:g}%, metadata {meta:g}%",
        )
    return ok(name, f"data {data:g}%, metadata {meta:g}%")


def check_open_file_count(max_percent: int = 90, path: str = FILE_NR_PATH) -> ProbeResult:
    name = "Open files"
    try:
        with open(path, encoding="utf-8") as handle:
            allocated, _, limit = (int(v) for v in handle.read().split()[:3])
    except (OSError, ValueError) as e:
        return failed(name, f"could not read open file count from {path}: {e}")
    if limit <= 0:
        return failed(name, f"invalid open file limit {limit} in {path}")
    usage = allocated / limit * 100
    if usage > max_percent:
        return failed(
            name,
            f"Open file count {allocated} is above {max_percent}% of the limit {limit}",
        )
    return ok(name, f"{allocated} of {limit} ({usage:.1f}%)")
