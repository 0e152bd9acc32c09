# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/cli/helper.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List

from haplan.config.models import Host
from haplan.deploy.models import Plan
from haplan.utils.serialize import to_jsonable


def example_hosts() -> List[Host]:
    return [
        Host(hostname="node-1", address="192.168.128.102"),
        Host(hostname="node-2", address="192.168.128.103"),
        Host(hostname="node-3", address="192.168.128.104"),
    ]


def example_hosts_json() -> str:
    """Example hosts file, in the format load_hosts() reads."""
    return json.dumps([h.model_dump(by_alias=True) for h in example_hosts()], indent=2)


def plan_as_json(plan: Plan) -> str:
    """
    Machine-readable plan: the script plus one entry per host block.
    """
    doc = {
        "script": plan.text,
        "primary": plan.primary.host_address if plan.primary else None,
        "blocks": to_jsonable(list(plan.blocks)),
    }
    return json.dumps(doc, indent=2)


def write_script(path: Path, text: str) -> Path:
    """Write the script and make it executable."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    os.chmod(path, 0o755)
    return path
