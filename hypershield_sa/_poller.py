# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
#
# The token controller fills in a service-account-token Secret asynchronously, so
# the Secret can exist for a while with no token. Readiness is decided from the
# token field itself, never from the presence of the object.
from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

import anyio
import httpx

import kr8s

from ._config import DEFAULT_ATTEMPTS, DEFAULT_INTERVAL
from ._exceptions import TokenTimeoutError
from ._manifest import SERVICE_ACCOUNT_UID_ANNOTATION

if TYPE_CHECKING:
    from ._cluster import Cluster

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (kr8s.ServerError, kr8s.APITimeoutError, httpx.HTTPError)
CONTROLLER_HINT = "  This may indicate an issue with the Kubernetes token controller"


class TokenState(enum.Enum):
    WAITING = "waiting"
    READY = "ready"
    TIMED_OUT = "timed out"


def token_state(secret: dict | None, service_account_uid: str | None = None) -> TokenState:
    """Classify a Secret snapshot as ready or still waiting.

    A Secret bound to a different ServiceAccount UID than the live one is stale
    and is treated as not ready.
    """
    if not secret:
        return TokenState.WAITING
    if not (secret.get("data") or {}).get("token"):
        return TokenState.WAITING
    annotations = (secret.get("metadata") or {}).get("annotations") or {}
    bound_uid = annotations.get(SERVICE_ACCOUNT_UID_ANNOTATION)
    if service_account_uid and bound_uid and bound_uid != service_account_uid:
        logger.debug(
            "Secret is bound to ServiceAccount UID %s, expected %s",
            bound_uid,
            service_account_uid,
        )
        return TokenState.WAITING
    return TokenState.READY


async def wait_for_token(
    cluster: Cluster,
    name: str,
    namespace: str,
    attempts: int = DEFAULT_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    timeout: float | None = None,
) -> dict:
    """Wait until the token Secret of a ServiceAccount has been populated.

    The Secret ``<name>-token`` is checked up to ``attempts`` times, sleeping
    ``interval`` seconds between checks. API errors while polling count as a
    failed check.

    Args:
        cluster: The cluster to poll
        name: Name of the ServiceAccount
        namespace: Namespace of the ServiceAccount
        attempts: Maximum number of checks
        interval: Seconds to sleep between checks
        timeout: Optional overall deadline in seconds

    Returns:
        The ready Secret as a dict.

    Raises:
        TokenTimeoutError: If the token is not populated in time.
    """
    secret_name = f"{name}-token"
    try:
        with anyio.fail_after(timeout):
            return await _poll(cluster, name, secret_name, namespace, attempts, interval)
    except TimeoutError as e:
        raise TokenTimeoutError(
            f"Secret {secret_name} was not created or token was not populated "
            f"within {timeout} seconds\n{CONTROLLER_HINT}",
            attempts=attempts,
        ) from e


async def _poll(
    cluster: Cluster,
    name: str,
    secret_name: str,
    namespace: str,
    attempts: int,
    interval: float,
) -> dict:
    try:
        sa_uid = await cluster.service_account_uid(name, namespace)
    except TRANSIENT_ERRORS as e:
        logger.debug("Unable to read ServiceAccount %s: %s", name, e)
        sa_uid = None
    for attempt in range(1, attempts + 1):
        try:
            secret = await cluster.get_secret(secret_name, namespace)
        except TRANSIENT_ERRORS as e:
            logger.debug("Attempt %d: error reading secret %s: %s", attempt, secret_name, e)
            secret = None
        state = token_state(secret, sa_uid)
        logger.debug("Attempt %d/%d: secret %s is %s", attempt, attempts, secret_name, state.value)
        if state is TokenState.READY:
            assert secret is not None
            return secret
        if attempt < attempts:
            await anyio.sleep(interval)
    logger.debug("Secret %s is %s", secret_name, TokenState.TIMED_OUT.value)
    raise TokenTimeoutError(
        f"Secret {secret_name} was not created or token was not populated "
        f"after {attempts} attempts\n{CONTROLLER_HINT}",
        attempts=attempts,
    )
