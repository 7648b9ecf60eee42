# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
from __future__ import annotations

import base64
import binascii
import ipaddress
import logging
import re
from dataclasses import dataclass

from ._exceptions import CredentialDataError

logger = logging.getLogger(__name__)

DELIMITER = "|"
PORT_SUFFIX = re.compile(r":(?P<port>[0-9]+)$")


@dataclass
class Credentials:
    """Everything a client needs to reach the cluster as the ServiceAccount."""

    server: str
    token: str
    ca_cert: str

    def pack(self) -> str:
        return pack_credential(self.server, self.token, self.ca_cert)

    @classmethod
    def unpack(cls, value: str) -> Credentials:
        return unpack_credential(value)


def _decode_field(data: dict, key: str) -> str:
    try:
        return base64.b64decode(data.get(key) or "", validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CredentialDataError(f"Secret field {key} is not valid base64 text: {e}") from e


def extract_credentials(secret: dict) -> tuple[str, str]:
    """Decode the token and CA certificate of a service-account-token Secret.

    Returns:
        A ``(token, ca_cert)`` tuple.

    Raises:
        CredentialDataError: If either decoded value is empty or malformed.
    """
    data = secret.get("data") or {}
    token = _decode_field(data, "token")
    ca_cert = _decode_field(data, "ca.crt")
    if not token or not ca_cert:
        raise CredentialDataError(
            "Failed to extract token or CA certificate from secret\n"
            f"  Token length: {len(token)}\n"
            f"  CA length: {len(ca_cert)}",
            token_length=len(token),
            ca_length=len(ca_cert),
        )
    return token, ca_cert


def resolve_server_url(internal_url: str, public_ip: str | None = None) -> str:
    """Return the API server URL clients outside the cluster should use.

    With ``public_ip`` the host is replaced and the port of ``internal_url`` is
    kept, unless ``public_ip`` carries a port of its own. If ``internal_url``
    has no trailing port the result has none either. IPv6 addresses are
    bracketed.

    Examples:
        >>> resolve_server_url("https://10.0.0.1:6443", "203.0.113.10")
        'https://203.0.113.10:6443'
        >>> resolve_server_url("https://10.0.0.1:6443", "203.0.113.10:8443")
        'https://203.0.113.10:8443'
    """
    if not public_ip:
        return internal_url
    host = public_ip
    has_port = False
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        has_port = PORT_SUFFIX.search(host) is not None
    else:
        if address.version == 6:
            host = f"[{address.compressed}]"
    server = f"https://{host}"
    match = PORT_SUFFIX.search(internal_url)
    if match and not has_port:
        server = f"{server}:{match.group('port')}"
    logger.debug("Replaced API server %s with %s", internal_url, server)
    return server


def pack_credential(server: str, token: str, ca_cert: str) -> str:
    """Join the server URL, token and CA certificate into one base64 line."""
    joined = DELIMITER.join([server, token, ca_cert])
    return base64.b64encode(joined.encode("utf-8")).decode("ascii")


def unpack_credential(value: str) -> Credentials:
    """Parse a string produced by :func:`pack_credential`.

    Raises:
        CredentialDataError: If the value is not a packaged credential.
    """
    try:
        joined = base64.b64decode(value.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CredentialDataError(f"Credential is not valid base64 text: {e}") from e
    parts = joined.split(DELIMITER, 2)
    if len(parts) != 3 or not all(parts):
        raise CredentialDataError(
            "Credential must contain a server URL, token and CA certificate "
            f"separated by '{DELIMITER}'"
        )
    return Credentials(*parts)
