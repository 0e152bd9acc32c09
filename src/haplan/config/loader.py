# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/config/loader.py

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from .models import ClusterTopologyConfig, Host

log = logging.getLogger("haplan")

CONFIG_ENV_VAR = "HAPLAN_CONFIG"
DEFAULT_CONFIG_NAME = "haplan.yaml"


class HostsFileError(ValueError):
    pass


class ConfigFileError(ValueError):
    pass


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def _find_config_file(hosts_path: Optional[Path]) -> Optional[Path]:
    """
    Locate the topology file using this priority:

    1. HAPLAN_CONFIG environment variable (explicit override)
    2. haplan.yaml in the same directory as the hosts file
    """
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        p = Path(env).expanduser()
        if p.is_file():
            return p
        log.warning("%s=%s does not exist, skipping", CONFIG_ENV_VAR, env)
        return None

    if hosts_path is not None:
        p = Path(hosts_path).parent / DEFAULT_CONFIG_NAME
        if p.is_file():
            return p

    return None


def load_hosts(path: str | Path) -> List[Host]:
    """
    Read the ordered host list.

    ``.yaml``/``.yml`` files go through PyYAML, anything else is parsed as
    JSON. The document must be a list of ``{"hostname": ..., "ip": ...}``
    records (``address`` is accepted in place of ``ip``). Order is kept.
    """
    path = Path(path)
    if not path.is_file():
        raise HostsFileError(f"Hosts file not found: {path}")

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text())
        else:
            data = json.loads(path.read_text())
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise HostsFileError(f"Could not parse hosts file {path}: {exc}") from exc

    if data is None:
        data = []
    if not isinstance(data, list):
        raise HostsFileError(
            f"Hosts file {path} must contain a list of hosts, got {type(data).__name__}"
        )

    hosts: List[Host] = []
    for i, record in enumerate(data):
        if not isinstance(record, dict):
            raise HostsFileError(f"{path}: entry {i} is not an object: {record!r}")
        try:
            hosts.append(Host.model_validate(record))
        except ValidationError as exc:
            raise HostsFileError(f"{path}: entry {i} is not a valid host: {exc}") from exc

    log.debug("Loaded %d host(s) from %s", len(hosts), path)
    return hosts


def load_topology(
    path: str | Path | None = None,
    overrides: Optional[dict] = None,
    hosts_path: str | Path | None = None,
) -> ClusterTopologyConfig:
    """
    Build the ClusterTopologyConfig for a run.

    Values come from, lowest priority first:
      1. model defaults
      2. the topology YAML (``path``, else ``HAPLAN_CONFIG``, else
         ``haplan.yaml`` next to the hosts file); ``${ENV_VAR}``
         placeholders are expanded at load time
      3. ``overrides`` (CLI flags); ``None`` and ``""`` never override
    """
    data: dict = {}

    if path is not None:
        config_path: Optional[Path] = Path(path)
        if not config_path.is_file():
            raise ConfigFileError(f"Config file not found: {config_path}")
    else:
        config_path = _find_config_file(Path(hosts_path) if hosts_path else None)

    if config_path:
        log.debug("Reading topology from %s", config_path)
        try:
            data = _load_yaml(config_path)
        except yaml.YAMLError as exc:
            raise ConfigFileError(f"Could not parse config file {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigFileError(f"Config file {config_path} must contain a mapping")
    else:
        log.debug("No topology file found, using defaults and CLI flags")

    _deep_merge(data, overrides or {})

    try:
        return ClusterTopologyConfig.model_validate(data)
    except ValidationError as exc:
        source = config_path or "command line"
        raise ConfigFileError(f"Invalid topology settings ({source}): {exc}") from exc
