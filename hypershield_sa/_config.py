# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_NAME = "hypershield"
DEFAULT_NAMESPACE = "hypershield"
DEFAULT_ATTEMPTS = 30
DEFAULT_INTERVAL = 1.0
DEFAULT_FIELD_MANAGER = "hypershield-sa"


@dataclass
class Settings:
    """Inputs for a single provisioning run.

    ``name`` is shared by the ClusterRole, ClusterRoleBinding and ServiceAccount,
    and the token Secret is called ``<name>-token``.
    """

    name: str = DEFAULT_NAME
    namespace: str = DEFAULT_NAMESPACE
    api_server_public_ip: str | None = None
    attempts: int = DEFAULT_ATTEMPTS
    interval: float = DEFAULT_INTERVAL
    timeout: float | None = None
    kubeconfig: str | None = None
    context: str | None = None
    field_manager: str = DEFAULT_FIELD_MANAGER

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.interval < 0:
            raise ValueError("interval must not be negative")
        if not self.api_server_public_ip:
            self.api_server_public_ip = None

    @property
    def secret_name(self) -> str:
        return f"{self.name}-token"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs) -> Settings:
        """Build settings from ``NAME``, ``NAMESPACE`` and ``API_SERVER_PUBLIC_IP``.

        Empty variables fall back to the defaults. Keyword arguments override
        anything read from the environment.
        """
        if environ is None:
            environ = os.environ
        values = {
            "name": environ.get("NAME") or DEFAULT_NAME,
            "namespace": environ.get("NAMESPACE") or DEFAULT_NAMESPACE,
            "api_server_public_ip": environ.get("API_SERVER_PUBLIC_IP") or None,
        }
        values.update(kwargs)
        return cls(**values)
