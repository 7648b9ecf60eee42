# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
from __future__ import annotations

import json
import logging
import ssl

import httpx

import kr8s
import kr8s.asyncio
from kr8s.asyncio.objects import (
    APIObject,
    Secret,
    ServiceAccount,
    object_from_spec,
)

from ._exceptions import ApplyError, ClusterAccessError

logger = logging.getLogger(__name__)

APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"
CONFIGURE_HINTS = [
    "Please configure your kubeconfig to connect to a cluster:",
    "  kubectl config get-contexts",
    "  kubectl config use-context <context-name>",
]
REACH_HINTS = [
    "Please check the API server of the current context is reachable:",
    "  kubectl cluster-info",
]
# ssl.SSLError subclasses OSError so it must be matched first
UNREACHABLE_ERRORS = (
    kr8s.ServerError,
    kr8s.APITimeoutError,
    httpx.HTTPError,
    ssl.SSLError,
)


class Cluster:
    """The Kubernetes operations needed to provision a ServiceAccount.

    .. warning::
        Use :meth:`Cluster.connect` rather than instantiating this directly so the
        local configuration is checked before anything is sent to the cluster.

    """

    def __init__(self, api: kr8s.asyncio.Api, context: str) -> None:
        self.api = api
        self.context = context

    @classmethod
    async def connect(
        cls, kubeconfig: str | None = None, context: str | None = None
    ) -> Cluster:
        """Load the local client configuration and check a context is selected.

        Recent kr8s releases ask the API server for its version while loading
        the configuration. No objects are read or changed.

        Args:
            kubeconfig: Path to a kubeconfig file, defaults to ``$KUBECONFIG``
            context: Context to use instead of the kubeconfig's current context

        Raises:
            ClusterAccessError: If no configuration can be loaded, no context is
                set or the API server cannot be reached.
        """
        try:
            api = await kr8s.asyncio.api(kubeconfig=kubeconfig, context=context)
        except UNREACHABLE_ERRORS as e:
            raise ClusterAccessError(
                f"Unable to reach the Kubernetes API server: {e}",
                hints=REACH_HINTS,
            ) from e
        except (ValueError, KeyError, IndexError, TypeError, OSError) as e:
            raise ClusterAccessError(
                f"Unable to load Kubernetes client configuration: {e}",
                hints=CONFIGURE_HINTS,
            ) from e
        if context is None and not _current_context(api):
            raise ClusterAccessError(
                "No Kubernetes context is currently set", hints=CONFIGURE_HINTS
            )
        logger.debug("Using context %s at %s", api.auth.active_context, api.auth.server)
        return cls(api, api.auth.active_context)

    @property
    def server_url(self) -> str:
        """API server URL of the active cluster."""
        return self.api.auth.server

    async def apply(self, document: dict, field_manager: str) -> APIObject:
        """Create or update a resource with a server-side apply.

        Re-applying an identical document leaves the object unchanged.

        Raises:
            ApplyError: If the API server rejects the document or cannot be reached.
        """
        obj = object_from_spec(document, api=self.api)
        logger.debug("Applying %s/%s", obj.singular, obj.name)
        try:
            async with self.api.call_api(
                "PATCH",
                version=obj.version,
                url=f"{obj.endpoint}/{obj.name}",
                namespace=obj.namespace,
                content=json.dumps(obj.raw),
                headers={"Content-Type": APPLY_PATCH_CONTENT_TYPE},
                params={"fieldManager": field_manager, "force": "true"},
            ) as resp:
                obj.raw = resp.json()
        except kr8s.ServerError as e:
            raise ApplyError(
                f"{obj.singular}/{obj.name} failed: {e}", kind=obj.kind, name=obj.name
            ) from e
        except (kr8s.APITimeoutError, httpx.HTTPError, ssl.SSLError) as e:
            raise ApplyError(
                f"{obj.singular}/{obj.name} failed: unable to reach the Kubernetes API server: {e}",
                kind=obj.kind,
                name=obj.name,
            ) from e
        return obj

    async def get_secret(self, name: str, namespace: str) -> dict | None:
        """Return the Secret as a plain dict, or ``None`` if it does not exist."""
        secret = Secret({"metadata": {"name": name, "namespace": namespace}}, api=self.api)
        try:
            await secret.refresh()
        except kr8s.NotFoundError:
            return None
        return secret.raw.to_dict()

    async def service_account_uid(self, name: str, namespace: str) -> str | None:
        """Return the UID of a ServiceAccount, or ``None`` if it does not exist."""
        sa = ServiceAccount(
            {"metadata": {"name": name, "namespace": namespace}}, api=self.api
        )
        try:
            await sa.refresh()
        except kr8s.NotFoundError:
            return None
        return sa.metadata.get("uid")


def _current_context(api: kr8s.asyncio.Api) -> str:
    kubeconfig = getattr(api.auth, "kubeconfig", None)
    if kubeconfig is None:
        return ""
    try:
        return kubeconfig.current_context or ""
    except KeyError:
        return ""
