"""
monitoring/report.py — Integration report assembly and JSON output.

The report shape is the contract with the external monitoring tool: key
names and key order are reproduced exactly, and `events` is always a JSON
array.
"""

from __future__ import annotations

from collections.abc import Iterable

import orjson
from pydantic import BaseModel, Field

from monitoring.events import Event

INTEGRATION_NAME = "ch.sbb.openshift-integration"
PROTOCOL_VERSION = "1"
INTEGRATION_VERSION = "1.0.0"


class Report(BaseModel):
    name: str = INTEGRATION_NAME
    protocol_version: str = PROTOCOL_VERSION
    integration_version: str = INTEGRATION_VERSION
    events: list[Event] = Field(default_factory=list)


def build_report(events: Iterable[Event]) -> Report:
    return Report(events=list(events))


def to_json(report: Report, pretty: bool = False) -> str:
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(report.model_dump(mode="json"), option=option).decode("utf-8")
