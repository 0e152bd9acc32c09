# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/cli/app.py
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from haplan.config.loader import ConfigFileError, HostsFileError, load_hosts, load_topology
from haplan.deploy.planner import plan as build_plan

from haplan.cli.helper import example_hosts_json, plan_as_json, write_script

from haplan.logging.log import init_logging
from haplan.observers.dispatcher import EventBus
from haplan.observers.logger import LoggerObserver
from haplan.observers.jsonfile import JsonFileObserver
from haplan.observers.events import new_ctx


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Plan a highly-available K3s installation with k3sup")


class OutputFormat(str, Enum):
    script = "script"
    json = "json"


@app.callback()
def main() -> None:
    """
    Generate a shell script of k3sup install/join commands for an HA cluster.
    """


# ------------------------------------------------------------------------------
# plan
# ------------------------------------------------------------------------------

@app.command()
def plan(
    hosts_file: Optional[Path] = typer.Argument(
        None,
        help='JSON or YAML list of hosts, e.g. [{"hostname": "node-1", "ip": "192.168.128.102"}]',
    ),
    servers: Optional[int] = typer.Option(
        None, "--servers", help="Number of servers to use from the devices file [default: 3]"
    ),
    local_path: Optional[str] = typer.Option(
        None, "--local-path", help="Where to save the kubeconfig file [default: kubeconfig]"
    ),
    context: Optional[str] = typer.Option(
        None, "--context", help="Name of the kubeconfig context to use [default: default]"
    ),
    user: Optional[str] = typer.Option(
        None, "--user", help="Username for SSH login [default: root]"
    ),
    tls_san: Optional[str] = typer.Option(
        None, "--tls-san", help="SAN for TLS certificates, can be a comma-separated list"
    ),
    server_k3s_extra_args: Optional[str] = typer.Option(
        None, "--server-k3s-extra-args", help="Extra arguments to be passed into the k3s server"
    ),
    agent_k3s_extra_args: Optional[str] = typer.Option(
        None, "--agent-k3s-extra-args", help="Extra arguments to be passed into the k3s agent"
    ),
    background: Optional[bool] = typer.Option(
        None,
        "--background/--no-background",
        help="Run the installation in the background for all agents/nodes after the first server is up",
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", help="Maximum number of nodes to use from the devices file, 0 to use all devices"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Topology YAML file (defaults to $HAPLAN_CONFIG or haplan.yaml next to the hosts file)"
    ),
    init: bool = typer.Option(False, "--init", help="Output an example hosts.json file"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the plan to this file instead of stdout"
    ),
    fmt: OutputFormat = typer.Option(OutputFormat.script, "--format", help="script or json"),
    events_file: Optional[Path] = typer.Option(
        None, "--events-file", help="Append planning events to this JSON lines file"
    ),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for run logs"),
    debug: bool = typer.Option(False, "--debug"),
):
    """
    Plan an installation of K3s.

    The first host becomes the primary server, the next --servers - 1 hosts
    join as additional servers and the rest join as agents.
    """
    if init:
        typer.echo(example_hosts_json())
        raise typer.Exit(0)

    if hosts_file is None:
        raise typer.BadParameter(
            "give a path to a JSON file containing a list of devices",
            param_hint="HOSTS_FILE",
        )

    logger, run_id, log_path = init_logging(base_dir=log_dir, verbose=debug)

    overrides = {
        "desired_control_plane_count": servers,
        "login_user": user,
        "kubeconfig_path": local_path,
        "kubeconfig_context": context,
        "tls_san": tls_san,
        "control_plane_extra_args": server_k3s_extra_args,
        "worker_extra_args": agent_k3s_extra_args,
        "run_agents_in_background": background,
        "host_limit": limit,
    }

    try:
        hosts = load_hosts(hosts_file)
        cfg = load_topology(config, overrides=overrides, hosts_path=hosts_file)
    except (HostsFileError, ConfigFileError) as exc:
        logger.error("%s", exc)
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    logger.debug("topology: %s", cfg.model_dump())

    observers = [LoggerObserver(logger)]
    if events_file:
        observers.append(JsonFileObserver(events_file))
    bus = EventBus(observers=observers)

    result = build_plan(
        hosts,
        cfg,
        bus=bus,
        run_ctx=new_ctx(context=cfg.kubeconfig_context, run_id=run_id),
    )

    if fmt is OutputFormat.json:
        rendered = plan_as_json(result)
    else:
        rendered = result.text

    if output:
        written = write_script(output, rendered + "\n")
        logger.info("Plan written to %s", written)
        typer.secho(f"Wrote {len(result.blocks)} host block(s) to {written}", err=True)
    else:
        typer.echo(rendered)

    logger.info("Run log: %s", log_path)


if __name__ == "__main__":
    app()
