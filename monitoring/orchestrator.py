"""
monitoring/orchestrator.py — Runs the check plan for this node and builds the report.

Importable (used by the CLI and tests):
    from monitoring.orchestrator import run, run_plan
    report = run(cfg)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from monitoring.events import Event, evaluate, healthy_event
from monitoring.plan import CheckPlanEntry, build_plan
from monitoring.report import Report, build_report

if TYPE_CHECKING:
    from config.settings import Settings

log = logging.getLogger("openshift-monitoring-cli")


def run_plan(plan: Iterable[CheckPlanEntry]) -> Report:
    """Evaluate every entry in order and return the finished report."""
    events: list[Event] = []
    for entry in plan:
        log.debug("Running %s check: %s", entry.severity.lower(), entry.name)
        event = evaluate(entry)
        if event is not None:
            events.append(event)

    if not events:
        events.append(healthy_event())
    return build_report(events)


def run(cfg: Settings) -> Report:
    """Run all checks for the configured node type.

    Raises:
        ConfigurationError: before any probe runs, if the node type is missing
            required configuration.
    """
    log.info("Running %s checks for OpenShift.", cfg.role)
    plan = build_plan(cfg.role, cfg)
    log.debug("Check plan has %d entries.", len(plan))
    return run_plan(plan)
