# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
import uuid

import httpx
import pytest

from hypershield_sa._cluster import Cluster
from hypershield_sa._testutils import FakeCluster, make_secret
from kr8s._api import Api


@pytest.fixture
def ready_cluster():
    return FakeCluster(secrets=[make_secret()])


@pytest.fixture
def connect_to(monkeypatch):
    """Make ``Cluster.connect`` hand out the given cluster."""

    def _connect_to(cluster):
        async def connect(kubeconfig=None, context=None):
            return cluster

        monkeypatch.setattr(Cluster, "connect", connect)
        return cluster

    return _connect_to


@pytest.fixture
def api_server_version(monkeypatch):
    """Answer ``/version`` requests locally so kr8s can load a config offline."""
    version_info = {
        "major": "1",
        "minor": "31",
        "gitVersion": "v1.31.0",
        "gitCommit": "",
        "gitTreeState": "clean",
        "buildDate": "2024-08-13T07:28:49Z",
        "goVersion": "go1.22.5",
        "compiler": "gc",
        "platform": "linux/amd64",
    }

    async def send(self, request, **kwargs):
        if request.url.path.rstrip("/") != "/version":
            raise httpx.ConnectError("offline", request=request)
        return httpx.Response(200, json=version_info, request=request)

    monkeypatch.setattr(httpx.AsyncClient, "send", send)
    return version_info


@pytest.fixture
def ns(k8s_cluster):
    name = f"hypershield-pytest-{uuid.uuid4().hex[:6]}"
    k8s_cluster.kubectl("create", "namespace", name)
    yield name
    k8s_cluster.kubectl("delete", "namespace", name, "--wait=false")


@pytest.fixture(autouse=True)
def ensure_new_api_between_tests():
    yield
    Api._instances.clear()
