# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one planning run
    context: Optional[str]  # kubeconfig context the plan targets

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(context: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "context": context,
    }


# ---------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PlanStarted(BaseEvent):
    hosts: int
    servers: int
    host_limit: Optional[int] = None

@dataclass(frozen=True)
class HostPlanned(BaseEvent):
    hostname: str
    address: str
    role: str
    ordinal: int

@dataclass(frozen=True)
class PlanTruncated(BaseEvent):
    host_limit: int
    skipped: List[str]

@dataclass(frozen=True)
class PlanComputed(BaseEvent):
    order: List[str]
    primary: Optional[str]
    servers: int
    workers: int

@dataclass(frozen=True)
class PlanFailed(BaseEvent):
    error: str
