# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/deploy/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from haplan.config.models import Host

SCRIPT_HEADER = "#!/bin/sh\n\n"


class Role(str, Enum):
    PRIMARY_CONTROL_PLANE = "primary-control-plane"
    ADDITIONAL_CONTROL_PLANE = "additional-control-plane"
    WORKER = "worker"

    @property
    def is_control_plane(self) -> bool:
        return self is not Role.WORKER


@dataclass(frozen=True)
class RoleAssignment:
    """
    Role chosen for one host.

    ordinal counts within the host's group: control-plane nodes are numbered
    1..c (the primary is always 1), workers are numbered from 1 on their own.
    """
    host: Host
    role: Role
    ordinal: int
    index: int          # 0-based position in the hosts file


@dataclass(frozen=True)
class CommandBlock:
    host_address: str
    hostname: str
    role: Role
    ordinal: int
    rendered_text: str


@dataclass(frozen=True)
class Plan:
    blocks: Tuple[CommandBlock, ...] = ()
    header: str = SCRIPT_HEADER

    @property
    def text(self) -> str:
        return self.header + "".join(b.rendered_text for b in self.blocks)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    @property
    def primary(self) -> Optional[CommandBlock]:
        for b in self.blocks:
            if b.role is Role.PRIMARY_CONTROL_PLANE:
                return b
        return None

    @property
    def control_plane(self) -> Tuple[CommandBlock, ...]:
        return tuple(b for b in self.blocks if b.role.is_control_plane)

    @property
    def workers(self) -> Tuple[CommandBlock, ...]:
        return tuple(b for b in self.blocks if b.role is Role.WORKER)
