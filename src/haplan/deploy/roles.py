# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/deploy/roles.py

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from haplan.config.models import Host
from .models import Role, RoleAssignment

log = logging.getLogger("haplan")


def assign_roles(
    hosts: Sequence[Host],
    desired_control_plane_count: int,
    host_limit: Optional[int] = None,
) -> List[RoleAssignment]:
    """
    Classify hosts in file order.

    The first host is the primary control-plane node, the next
    desired_control_plane_count - 1 hosts join the control plane and every
    remaining host is a worker. Hosts past host_limit get no role at all.
    A count below 1 is treated as 1 so there is always a primary.
    """
    servers = max(1, desired_control_plane_count)
    limit = host_limit if host_limit and host_limit > 0 else None

    assignments: List[RoleAssignment] = []
    servers_assigned = 0
    workers_assigned = 0

    for index, host in enumerate(hosts):
        if limit is not None and index >= limit:
            log.debug("host limit %d reached, skipping %d host(s)", limit, len(hosts) - index)
            break

        if servers_assigned == 0:
            servers_assigned = 1
            role, ordinal = Role.PRIMARY_CONTROL_PLANE, servers_assigned
        elif servers_assigned < servers:
            servers_assigned += 1
            role, ordinal = Role.ADDITIONAL_CONTROL_PLANE, servers_assigned
        else:
            workers_assigned += 1
            role, ordinal = Role.WORKER, workers_assigned

        assignments.append(RoleAssignment(host=host, role=role, ordinal=ordinal, index=index))
        log.debug("%s (%s) -> %s #%d", host.hostname, host.address, role.value, ordinal)

    return assignments
