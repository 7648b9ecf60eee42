# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
from __future__ import annotations

import yaml

RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"
RBAC_API_GROUP = "rbac.authorization.k8s.io"
SERVICE_ACCOUNT_NAME_ANNOTATION = "kubernetes.io/service-account.name"
SERVICE_ACCOUNT_UID_ANNOTATION = "kubernetes.io/service-account.uid"
SERVICE_ACCOUNT_TOKEN_TYPE = "kubernetes.io/service-account-token"

HYPERSHIELD_API_GROUPS = ["cilium.io"]
HYPERSHIELD_RESOURCES = [
    "alertrules",
    "sandboxpolicies",
    "sandboxpoliciesnamespaced",
    "tetragonnetworkpolicies",
    "tetragonnetworkpoliciesnamespaced",
    "tracingpolicies",
    "tracingpoliciesnamespaced",
]
READ_ONLY_VERBS = ["get", "list", "watch"]


def cluster_role(name: str) -> dict:
    return {
        "apiVersion": RBAC_API_VERSION,
        "kind": "ClusterRole",
        "metadata": {"name": name},
        "rules": [
            {
                "apiGroups": list(HYPERSHIELD_API_GROUPS),
                "resources": list(HYPERSHIELD_RESOURCES),
                "verbs": list(READ_ONLY_VERBS),
            }
        ],
    }


def cluster_role_binding(name: str, namespace: str) -> dict:
    return {
        "apiVersion": RBAC_API_VERSION,
        "kind": "ClusterRoleBinding",
        "metadata": {"name": name},
        "subjects": [
            {"kind": "ServiceAccount", "name": name, "namespace": namespace}
        ],
        "roleRef": {
            "kind": "ClusterRole",
            "name": name,
            "apiGroup": RBAC_API_GROUP,
        },
    }


def service_account(name: str, namespace: str) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {"name": name, "namespace": namespace},
    }


def service_account_token_secret(name: str, namespace: str) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": f"{name}-token",
            "namespace": namespace,
            "annotations": {SERVICE_ACCOUNT_NAME_ANNOTATION: name},
        },
        "type": SERVICE_ACCOUNT_TOKEN_TYPE,
    }


def render_manifest(name: str, namespace: str) -> list[dict]:
    """Build the resources granting read-only access to the Hypershield CRDs.

    The documents are returned in apply order: ClusterRole, ClusterRoleBinding,
    ServiceAccount and the long-lived token Secret for that ServiceAccount.
    Names are not validated here; the API server rejects invalid ones on apply.

    Args:
        name: Name shared by the RBAC objects and the ServiceAccount
        namespace: Namespace of the ServiceAccount and its token Secret

    Returns:
        A list of Kubernetes resource specs.

    Examples:
        >>> [doc["kind"] for doc in render_manifest("hypershield", "hypershield")]
        ['ClusterRole', 'ClusterRoleBinding', 'ServiceAccount', 'Secret']
    """
    return [
        cluster_role(name),
        cluster_role_binding(name, namespace),
        service_account(name, namespace),
        service_account_token_secret(name, namespace),
    ]


def manifest_yaml(name: str, namespace: str) -> str:
    """Render the manifest as a multi-document YAML stream."""
    return yaml.safe_dump_all(
        render_manifest(name, namespace), sort_keys=False, explicit_start=False
    )
