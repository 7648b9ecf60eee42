# SPDX-FileCopyrightText: Copyright (c) 2025, Hypershield Developers (See LICENSE for list)
# SPDX-License-Identifier: BSD 3-Clause License
import asyncio
import inspect
import logging
from functools import wraps

from rich.console import Console
from rich.logging import RichHandler


def _typer_async(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def register(app, func, alias=None):
    if inspect.iscoroutinefunction(func):
        func = _typer_async(func)
    if alias is not None:
        app.command(alias)(func)
    else:
        app.command()(func)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, at debug level when ``verbose`` is set."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
