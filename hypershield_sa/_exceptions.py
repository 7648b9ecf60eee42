# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License

from typing import Optional, Sequence


class ProvisionError(Exception):
    """Base class for every fatal error raised while provisioning."""


class ClusterAccessError(ProvisionError):
    """The local cluster configuration is missing or has no context selected.

    Attributes:
        hints: Lines suggesting how to fix the configuration
    """

    def __init__(self, message: str, hints: Optional[Sequence[str]] = None) -> None:
        self.hints = list(hints or [])
        super().__init__(message)


class ApplyError(ProvisionError):
    """The Kubernetes API server rejected one of the manifest documents.

    Attributes:
        kind: The kind of the object that failed
        name: The name of the object that failed
    """

    def __init__(self, message: str, kind: str = "", name: str = "") -> None:
        self.kind = kind
        self.name = name
        super().__init__(message)


class TokenTimeoutError(ProvisionError):
    """The ServiceAccount token was not populated within the polling budget.

    Attributes:
        attempts: How many times the Secret was checked
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        self.attempts = attempts
        super().__init__(message)


class CredentialDataError(ProvisionError):
    """The token or CA certificate read from the Secret is empty or malformed.

    Attributes:
        token_length: Length of the decoded token
        ca_length: Length of the decoded CA certificate
    """

    def __init__(self, message: str, token_length: int = 0, ca_length: int = 0) -> None:
        self.token_length = token_length
        self.ca_length = ca_length
        super().__init__(message)
