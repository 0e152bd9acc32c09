# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..config.models import ClusterTopologyConfig, Host
from .models import CommandBlock, Plan, Role, RoleAssignment
from .roles import assign_roles
from .template_renderer import TemplateRenderer

# Observer bits
from ..observers.dispatcher import EventBus
from ..observers.events import (
    HostPlanned,
    PlanComputed,
    PlanFailed,
    PlanStarted,
    PlanTruncated,
    new_ctx,
)

log = logging.getLogger("haplan")

TOKEN_VAR = "NODE_TOKEN"

TEMPLATES = {
    Role.PRIMARY_CONTROL_PLANE: "primary.sh.j2",
    Role.ADDITIONAL_CONTROL_PLANE: "server.sh.j2",
    Role.WORKER: "worker.sh.j2",
}


class PlanRenderError(RuntimeError):
    pass


def tls_san_clause(tls_san: str) -> str:
    if not tls_san:
        return ""
    return f" \\\n--tls-san {tls_san}"


def extra_args_clause(extra_args: str) -> str:
    if not extra_args:
        return ""
    return f' \\\n--k3s-extra-args "{extra_args}"'


def background_suffix(background: bool) -> str:
    return " &" if background else ""


class PlanRenderer:
    """
    Turns role assignments into script blocks, in order.

    The primary block must come first: it is where the join token is
    captured, and every later block points at the primary's address and
    reads the token from the variable it exported.
    """

    def __init__(self, cfg: ClusterTopologyConfig, templates: Optional[TemplateRenderer] = None):
        self.cfg = cfg
        self.templates = templates or TemplateRenderer()
        self._primary: Optional[Host] = None
        self._token_ref: Optional[str] = None

    def render(self, assignments: Sequence[RoleAssignment]) -> Plan:
        self._primary = None
        self._token_ref = None
        blocks: List[CommandBlock] = []

        for processed, a in enumerate(assignments, start=1):
            blocks.append(self.render_block(a))
            if self.cfg.host_limit and processed >= self.cfg.host_limit:
                break

        return Plan(blocks=tuple(blocks))

    def render_block(self, a: RoleAssignment) -> CommandBlock:
        if a.role is Role.PRIMARY_CONTROL_PLANE:
            text = self._render_primary(a)
        else:
            text = self._render_join(a)

        return CommandBlock(
            host_address=a.host.address,
            hostname=a.host.hostname,
            role=a.role,
            ordinal=a.ordinal,
            rendered_text=text,
        )

    def _render_primary(self, a: RoleAssignment) -> str:
        cfg = self.cfg
        text = self.templates.render(
            TEMPLATES[a.role],
            {
                "ordinal": a.ordinal,
                "host": a.host.address,
                "user": cfg.login_user,
                "kubeconfig_path": cfg.kubeconfig_path,
                "context": cfg.kubeconfig_context,
                "tls_san": tls_san_clause(cfg.tls_san),
                "extra_args": extra_args_clause(cfg.control_plane_extra_args),
                "token_var": TOKEN_VAR,
            },
        )
        self._primary = a.host
        self._token_ref = f'"${TOKEN_VAR}"'
        return text

    def _render_join(self, a: RoleAssignment) -> str:
        if self._primary is None or self._token_ref is None:
            raise PlanRenderError(
                f"Host '{a.host.hostname}' ({a.role.value}) comes before the primary "
                "control-plane node; there is no join token to reference"
            )

        cfg = self.cfg
        if a.role is Role.WORKER:
            extra_args = cfg.worker_extra_args
            tls_san = ""    # the SAN belongs on API servers only
        else:
            extra_args = cfg.control_plane_extra_args
            tls_san = cfg.tls_san

        return self.templates.render(
            TEMPLATES[a.role],
            {
                "ordinal": a.ordinal,
                "host": a.host.address,
                "server_host": self._primary.address,
                "token_ref": self._token_ref,
                "user": cfg.login_user,
                "tls_san": tls_san_clause(tls_san),
                "extra_args": extra_args_clause(extra_args),
                "background": background_suffix(cfg.run_agents_in_background),
            },
        )


def plan(
    hosts: Sequence[Host],
    cfg: ClusterTopologyConfig,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
    templates: Optional[TemplateRenderer] = None,
) -> Plan:
    """
    Build the bootstrap script for hosts.
    Emits PlanStarted / HostPlanned / PlanComputed (or PlanFailed) if an
    EventBus is provided. An empty host list gives an empty Plan.
    """
    ctx = run_ctx or new_ctx(context=cfg.kubeconfig_context)
    try:
        if bus:
            bus.emit(PlanStarted(
                hosts=len(hosts),
                servers=cfg.desired_control_plane_count,
                host_limit=cfg.host_limit,
                **ctx,
            ))

        assignments = assign_roles(hosts, cfg.desired_control_plane_count, cfg.host_limit)
        result = PlanRenderer(cfg, templates=templates).render(assignments)

        if result.is_empty:
            log.warning("No hosts to plan; the script will only contain its header")

        if bus:
            for b in result.blocks:
                bus.emit(HostPlanned(
                    hostname=b.hostname,
                    address=b.host_address,
                    role=b.role.value,
                    ordinal=b.ordinal,
                    **ctx,
                ))
            if cfg.host_limit and len(hosts) > cfg.host_limit:
                bus.emit(PlanTruncated(
                    host_limit=cfg.host_limit,
                    skipped=[h.hostname for h in hosts[cfg.host_limit:]],
                    **ctx,
                ))
            bus.emit(PlanComputed(
                order=[b.hostname for b in result.blocks],
                primary=result.primary.hostname if result.primary else None,
                servers=len(result.control_plane),
                workers=len(result.workers),
                **ctx,
            ))
        return result

    except Exception as e:
        if bus:
            bus.emit(PlanFailed(error=str(e), **ctx))
        raise
