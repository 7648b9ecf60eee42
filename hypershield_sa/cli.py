# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from ._config import (
    DEFAULT_ATTEMPTS,
    DEFAULT_INTERVAL,
    DEFAULT_NAME,
    DEFAULT_NAMESPACE,
    Settings,
)
from ._credentials import unpack_credential
from ._exceptions import ClusterAccessError, CredentialDataError, ProvisionError
from ._manifest import manifest_yaml
from ._provision import ProvisionResult, provision
from ._typer_utils import configure_logging, register

console = Console()
err_console = Console(stderr=True)

BANNER = "=" * 42

app = typer.Typer(
    no_args_is_help=True,
    help="Provision a read-only Hypershield ServiceAccount and package its credentials.",
)


def print_error(error: ProvisionError) -> None:
    err_console.print()
    err_console.print(f"[red]✗ Error:[/red] {escape(str(error))}", highlight=False)
    if isinstance(error, ClusterAccessError):
        for hint in error.hints:
            err_console.print(hint, highlight=False, markup=False)


def print_result(result: ProvisionResult) -> None:
    settings = result.settings
    console.print()
    console.print(BANNER)
    console.print("Installation Complete!")
    console.print(BANNER)
    console.print()
    console.print("Copy the following authentication token:")
    console.print()
    console.print(result.credential, soft_wrap=True, highlight=False, markup=False)
    console.print()
    console.print("Credentials extracted from:")
    console.print(f"  Namespace: {settings.namespace}", highlight=False, markup=False)
    console.print(f"  Secret: {settings.secret_name}", highlight=False, markup=False)
    console.print(
        f"  API Server: {result.credentials.server}", highlight=False, markup=False
    )
    console.print()


async def install(
    name: str = typer.Option(
        DEFAULT_NAME,
        "--name",
        envvar="NAME",
        help="Name of the ServiceAccount, ClusterRole and ClusterRoleBinding.",
    ),
    namespace: str = typer.Option(
        DEFAULT_NAMESPACE,
        "-n",
        "--namespace",
        envvar="NAMESPACE",
        help="Namespace of the ServiceAccount and its token Secret.",
    ),
    api_server_public_ip: Optional[str] = typer.Option(
        None,
        "--api-server-public-ip",
        envvar="API_SERVER_PUBLIC_IP",
        help="Public address to put in the credential instead of the cluster's "
        "API server host. The original port is kept.",
    ),
    attempts: int = typer.Option(
        DEFAULT_ATTEMPTS,
        "--attempts",
        min=1,
        help="How many times to check the token Secret before giving up.",
    ),
    interval: float = typer.Option(
        DEFAULT_INTERVAL,
        "--interval",
        min=0,
        help="Seconds to wait between checks of the token Secret.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0,
        help="Overall deadline in seconds for the token to be populated.",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        help="Path to the kubeconfig file to use.",
    ),
    context: Optional[str] = typer.Option(
        None,
        "--context",
        help="The name of the kubeconfig context to use.",
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Log API calls and polling to stderr."
    ),
):
    """Install the ServiceAccount and print its packaged credential.

    \b
    Applies a ClusterRole granting get/list/watch on the Hypershield cilium.io
    resources, binds it to a ServiceAccount, waits for the ServiceAccount token
    and prints base64("<server>|<token>|<ca.crt>") as a single line.

    \b
    Examples:
    \b
        # Install with defaults
        hypershield-sa install

    \b
        # Customize both name and namespace
        NAME=my-sa NAMESPACE=my-ns hypershield-sa install

    \b
        # Use a public IP for the API server in the token
        hypershield-sa install --api-server-public-ip 203.0.113.10
    """
    configure_logging(verbose)
    settings = Settings(
        name=name,
        namespace=namespace,
        api_server_public_ip=api_server_public_ip,
        attempts=attempts,
        interval=interval,
        timeout=timeout,
        kubeconfig=kubeconfig,
        context=context,
    )
    try:
        result = await provision(settings, console=console)
    except ProvisionError as e:
        print_error(e)
        raise typer.Exit(code=1)
    print_result(result)


def manifest(
    name: str = typer.Option(DEFAULT_NAME, "--name", envvar="NAME"),
    namespace: str = typer.Option(
        DEFAULT_NAMESPACE, "-n", "--namespace", envvar="NAMESPACE"
    ),
):
    """Print the resources that install would apply, without contacting a cluster."""
    typer.echo(manifest_yaml(name, namespace), nl=False)


def decode(credential: str = typer.Argument(..., help="A packaged credential.")):
    """Show the contents of a packaged credential."""
    try:
        credentials = unpack_credential(credential)
    except CredentialDataError as e:
        print_error(e)
        raise typer.Exit(code=1)
    console.print(f"API Server: {credentials.server}", highlight=False, markup=False)
    console.print(f"Token length: {len(credentials.token)}", highlight=False)
    console.print("CA certificate:")
    console.print(credentials.ca_cert, highlight=False, markup=False)


def version():
    """Print the hypershield-sa version."""
    typer.echo(__version__)


register(app, install)
register(app, manifest)
register(app, decode)
register(app, version)


def go():
    app()


if __name__ == "__main__":
    go()
