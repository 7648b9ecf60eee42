# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
import base64

import pytest
from rich.console import Console

from hypershield_sa import (
    ApplyError,
    ClusterAccessError,
    CredentialDataError,
    Settings,
    TokenTimeoutError,
    provision,
)
from hypershield_sa._cluster import Cluster
from hypershield_sa._testutils import (
    EXAMPLE_CA,
    EXAMPLE_SERVER,
    EXAMPLE_TOKEN,
    FakeCluster,
    make_secret,
)


async def test_provision(ready_cluster):
    result = await provision(Settings(interval=0), cluster=ready_cluster)

    assert [doc["kind"] for doc in ready_cluster.applied] == [
        "ClusterRole",
        "ClusterRoleBinding",
        "ServiceAccount",
        "Secret",
    ]
    assert result.applied == [
        "clusterrole/hypershield",
        "clusterrolebinding/hypershield",
        "serviceaccount/hypershield",
        "secret/hypershield-token",
    ]
    assert result.credentials.server == EXAMPLE_SERVER
    assert result.credentials.token == EXAMPLE_TOKEN
    assert result.credentials.ca_cert == EXAMPLE_CA
    assert base64.b64decode(result.credential).decode() == (
        f"{EXAMPLE_SERVER}|{EXAMPLE_TOKEN}|{EXAMPLE_CA}"
    )


async def test_provision_public_ip(ready_cluster):
    settings = Settings(api_server_public_ip="203.0.113.10", interval=0)
    result = await provision(settings, cluster=ready_cluster)
    assert result.credentials.server == "https://203.0.113.10:6443"
    server, _, _ = base64.b64decode(result.credential).decode().split("|", 2)
    assert server == "https://203.0.113.10:6443"


async def test_provision_prints_progress(ready_cluster):
    console = Console(record=True, width=200)
    await provision(Settings(name="my-sa", namespace="my-ns", interval=0), ready_cluster, console)
    output = console.export_text()
    assert "Installing Hypershield ServiceAccount..." in output
    assert "Name: my-sa" in output
    assert "Namespace: my-ns" in output
    assert "clusterrole/my-sa applied" in output
    assert "secret/my-sa-token applied" in output
    assert "✓ Successfully installed Hypershield ServiceAccount" in output
    assert "Waiting for secret to be created..." in output
    assert "Extracting credentials..." in output


async def test_provision_apply_failure_stops():
    cluster = FakeCluster(secrets=[make_secret()], fail_on_kind="ClusterRoleBinding")
    with pytest.raises(ApplyError, match="clusterrolebinding/hypershield"):
        await provision(Settings(interval=0), cluster=cluster)
    assert [doc["kind"] for doc in cluster.applied] == ["ClusterRole"]
    assert cluster.secret_reads == 0


async def test_provision_timeout():
    cluster = FakeCluster(secrets=[make_secret(token="")])
    with pytest.raises(TokenTimeoutError):
        await provision(Settings(attempts=3, interval=0), cluster=cluster)
    assert cluster.secret_reads == 3


async def test_provision_empty_ca():
    cluster = FakeCluster(secrets=[make_secret(ca="")])
    with pytest.raises(CredentialDataError, match="CA length: 0"):
        await provision(Settings(interval=0), cluster=cluster)


async def test_provision_connects_with_settings(monkeypatch):
    cluster = FakeCluster(secrets=[make_secret()])
    calls = []

    async def connect(kubeconfig=None, context=None):
        calls.append((kubeconfig, context))
        return cluster

    monkeypatch.setattr(Cluster, "connect", connect)
    await provision(Settings(kubeconfig="/tmp/kubeconfig", context="prod", interval=0))
    assert calls == [("/tmp/kubeconfig", "prod")]


async def test_provision_checks_context_before_apply(monkeypatch):
    async def connect(kubeconfig=None, context=None):
        raise ClusterAccessError("No Kubernetes context is currently set")

    monkeypatch.setattr(Cluster, "connect", connect)
    with pytest.raises(ClusterAccessError):
        await provision(Settings(interval=0))
