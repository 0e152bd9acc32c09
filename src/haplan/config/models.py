# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/haplan/config/models.py

import logging
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger("haplan")


class Host(BaseModel):
    """
    A machine taken from the hosts file. Position in the file is its identity.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    hostname: str
    # hosts files written for k3sup use "ip"
    address: str = Field(
        validation_alias=AliasChoices("ip", "address"),
        serialization_alias="ip",
    )


class ClusterTopologyConfig(BaseModel):
    """Settings for one planning run. Never mutated while planning."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    desired_control_plane_count: int = 3
    login_user: str = "root"
    kubeconfig_path: str = "kubeconfig"
    kubeconfig_context: str = "default"
    tls_san: str = ""
    control_plane_extra_args: str = ""
    worker_extra_args: str = ""
    run_agents_in_background: bool = False
    host_limit: Optional[int] = None   # None = use every host

    @field_validator(
        "tls_san",
        "control_plane_extra_args",
        "worker_extra_args",
        mode="before",
    )
    @classmethod
    def _none_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("desired_control_plane_count")
    @classmethod
    def _at_least_one_server(cls, value: int) -> int:
        if value < 1:
            log.warning(
                "desired_control_plane_count=%s is below 1; using 1 control-plane node",
                value,
            )
            return 1
        return value

    @field_validator("host_limit")
    @classmethod
    def _non_positive_limit_is_unbounded(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            if value < 0:
                log.warning("host_limit=%s is negative; using every host", value)
            return None
        return value
