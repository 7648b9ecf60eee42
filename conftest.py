# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
import os
import shutil
import time
from collections.abc import Generator

import pytest
from pytest_kind.cluster import KindCluster


@pytest.fixture(scope="session")
def k8s_cluster(request) -> Generator[KindCluster, None, None]:
    if shutil.which("docker") is None:
        pytest.skip("docker is required to run a kind cluster")
    image = None
    if version := os.environ.get("KUBERNETES_VERSION"):
        image = f"kindest/node:v{version}"

    kind_cluster = KindCluster(
        name="pytest-hypershield-sa",
        image=image,
    )
    kind_cluster.create()
    os.environ["KUBECONFIG"] = str(kind_cluster.kubeconfig_path)
    # Wait for the token controller to be running before continuing
    while True:
        try:
            kind_cluster.kubectl("get", "serviceaccount", "default")
            break
        except Exception:
            time.sleep(1)
    yield kind_cluster
    del os.environ["KUBECONFIG"]
    if not request.config.getoption("keep_cluster"):  # pragma: no cover
        kind_cluster.delete()
