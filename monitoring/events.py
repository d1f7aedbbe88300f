"""
monitoring/events.py — Report events and the severity classifier.

A probe failure becomes exactly one Event whose category is the severity
the check plan bound to that probe. Successful probes produce nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from monitoring.plan import CheckPlanEntry

Severity = Literal["MAJOR", "MINOR"]
Category = Literal["MAJOR", "MINOR", "HEALTHY"]

HEALTHY_SUMMARY = "system healthy"

log = logging.getLogger("openshift-monitoring-cli")


class Event(BaseModel):
    """One detected problem, as consumed by the monitoring pipeline."""

    model_config = ConfigDict(frozen=True)

    summary: str
    category: Category


def healthy_event() -> Event:
    return Event(summary=HEALTHY_SUMMARY, category="HEALTHY")


def evaluate(entry: CheckPlanEntry) -> Event | None:
    """Run one planned probe and classify a failure by the entry's severity.

    Never raises for probe problems: a probe that blows up is reported the
    same way as a probe that detected a failure.
    """
    try:
        result = entry.probe(**entry.parameters)
    except Exception as exc:  # noqa: BLE001
        summary = str(exc) or f"{entry.name}: {type(exc).__name__}"
    else:
        if result.passed:
            log.debug("OK %s: %s", entry.name, result.message)
            return None
        summary = result.message
        if result.detail:
            log.debug("%s detail: %s", entry.name, result.detail)

    log.error("%s: %s", entry.severity, summary)
    return Event(summary=summary, category=entry.severity)
