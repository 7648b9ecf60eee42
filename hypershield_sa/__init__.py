# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
"""
This module contains `hypershield_sa`, a bootstrap tool that provisions a read-only
Hypershield ServiceAccount in a Kubernetes cluster and packages its credentials.

The packaged credential is ``base64("<server>|<token>|<ca.crt>")`` on a single line.
Cluster access goes through `kr8s` using the local kubeconfig.
"""
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

from ._cluster import Cluster
from ._config import Settings
from ._credentials import (
    Credentials,
    extract_credentials,
    pack_credential,
    resolve_server_url,
    unpack_credential,
)
from ._exceptions import (
    ApplyError,
    ClusterAccessError,
    CredentialDataError,
    ProvisionError,
    TokenTimeoutError,
)
from ._manifest import manifest_yaml, render_manifest
from ._poller import TokenState, token_state, wait_for_token
from ._provision import ProvisionResult, provision

try:
    __version__ = _version("hypershield-sa")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ApplyError",
    "Cluster",
    "ClusterAccessError",
    "CredentialDataError",
    "Credentials",
    "ProvisionError",
    "ProvisionResult",
    "Settings",
    "TokenState",
    "TokenTimeoutError",
    "extract_credentials",
    "manifest_yaml",
    "pack_credential",
    "provision",
    "render_manifest",
    "resolve_server_url",
    "token_state",
    "unpack_credential",
    "wait_for_token",
]
