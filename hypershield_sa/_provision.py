# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from rich.console import Console

from ._cluster import Cluster
from ._config import Settings
from ._credentials import Credentials, extract_credentials, resolve_server_url
from ._manifest import render_manifest
from ._poller import wait_for_token

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    """Outcome of a successful provisioning run."""

    settings: Settings
    credentials: Credentials
    applied: list[str] = field(default_factory=list)

    @property
    def credential(self) -> str:
        """The packaged single-line credential."""
        return self.credentials.pack()


async def provision(
    settings: Settings,
    cluster: Cluster | None = None,
    console: Console | None = None,
) -> ProvisionResult:
    """Provision the ServiceAccount and package its credentials.

    Steps run strictly in order and the first failure stops the run:

    1. check the local configuration has a context selected
    2. apply the ClusterRole, ClusterRoleBinding, ServiceAccount and token Secret
    3. wait for the token controller to populate the Secret
    4. decode the token and CA certificate
    5. resolve the API server URL, applying the public IP override

    Args:
        settings: Names, override and polling parameters for this run
        cluster: An already connected cluster, connects from the kubeconfig if omitted
        console: Where progress is printed, silent if omitted

    Raises:
        ProvisionError: If any step fails.
    """
    if console is None:
        console = Console(quiet=True)
    if cluster is None:
        cluster = await Cluster.connect(
            kubeconfig=settings.kubeconfig, context=settings.context
        )

    console.print("Installing Hypershield ServiceAccount...", highlight=False)
    console.print(f"  Name: {settings.name}", highlight=False, markup=False)
    console.print(f"  Namespace: {settings.namespace}", highlight=False, markup=False)
    console.print()

    applied = []
    for document in render_manifest(settings.name, settings.namespace):
        obj = await cluster.apply(document, settings.field_manager)
        applied.append(f"{obj.singular}/{obj.name}")
        console.print(f"{obj.singular}/{obj.name} applied", highlight=False, markup=False)
    console.print()
    console.print("[green]✓ Successfully installed Hypershield ServiceAccount[/green]")
    console.print()

    console.print("Waiting for secret to be created...")
    secret = await wait_for_token(
        cluster,
        settings.name,
        settings.namespace,
        attempts=settings.attempts,
        interval=settings.interval,
        timeout=settings.timeout,
    )

    console.print("Extracting credentials...")
    token, ca_cert = extract_credentials(secret)
    server = resolve_server_url(cluster.server_url, settings.api_server_public_ip)
    logger.debug("Credentials extracted for %s/%s", settings.namespace, settings.secret_name)
    return ProvisionResult(
        settings=settings,
        credentials=Credentials(server=server, token=token, ca_cert=ca_cert),
        applied=applied,
    )
