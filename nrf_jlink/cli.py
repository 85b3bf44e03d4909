#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Command line application for J-Link management."""

import asyncio
import functools
import logging
import sys
from typing import Any, Callable, Optional

import click
import colorama
import prettytable
from spsdk.exceptions import SPSDKError

from . import __version__
from .common import JlinkInstallType, TransferProgress
from .config import JlinkConfig
from .jlink import Jlink

logger = logging.getLogger(__name__)
colorama.init()

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def handle_errors(func: Callable) -> Callable:
    """Report package errors as a message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SPSDKError as exc:
            logger.debug("Command failed", exc_info=True)
            message = exc.description or str(exc)
            click.echo(f"{colorama.Fore.RED}ERROR: {message}{colorama.Fore.RESET}", err=True)
            raise click.exceptions.Exit(1) from exc

    return wrapper


def print_progress(progress: TransferProgress) -> None:
    """Print transfer progress on a single line."""
    if progress.percentage is None:
        click.echo(f"\r{progress.transferred} bytes", nl=False)
    else:
        click.echo(f"\r{progress.percentage:5.1f} %", nl=False)


def _run(coroutine: Any) -> Any:
    return asyncio.run(coroutine)


@click.group(name="nrf-jlink", no_args_is_help=True)
@click.option(
    "-t",
    "--install-type",
    type=click.Choice([item.value for item in JlinkInstallType], case_sensitive=False),
    default=JlinkInstallType.INSTALLER.value,
    show_default=True,
    help="Way J-Link gets installed.",
)
@click.option(
    "-e",
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    help=(
        "Path to the configuration file. "
        "Default search paths: $NRF_JLINK_DOTENV_PATH, .nrf-jlink.env, ~/.nrf-jlink.env, "
        "~/.config/nrf-jlink/.nrf-jlink.env"
    ),
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity, use -vv for debug output.")
@click.version_option(__version__)
@click.pass_context
@handle_errors
def main(ctx: click.Context, install_type: str, env_file: Optional[str], verbose: int) -> None:
    """Manage SEGGER J-Link installations."""
    logging.basicConfig(level=LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)])
    if ctx.obj is None:
        ctx.obj = Jlink(install_type=install_type, config=JlinkConfig.load(env_file))


@main.command(name="list-local")
@click.pass_obj
@handle_errors
def list_local(jlink: Jlink) -> None:
    """List locally installed J-Link copies."""
    installed = jlink.list_local_installed()
    if not installed:
        click.echo("No J-Link installation found.")
        return
    for path in installed:
        click.echo(path)


@main.command(name="list-remote")
@click.pass_obj
@handle_errors
def list_remote(jlink: Jlink) -> None:
    """List J-Link versions available on the mirror."""
    table = prettytable.PrettyTable(["Version", "File", "Size", "URL"])
    table.align = "l"
    for download in _run(jlink.list_remote()):
        table.add_row(
            [download.version, download.filename, download.size or "", download.url]
        )
    click.echo(table)


@main.command(name="download", no_args_is_help=True)
@click.argument("version")
@click.option("--segger", is_flag=True, help="Download directly from SEGGER.")
@click.pass_obj
@handle_errors
def download(jlink: Jlink, version: str, segger: bool) -> None:
    """Download J-Link VERSION."""
    if segger:
        path = _run(jlink.download_from_segger(version, print_progress))
    else:
        path = _run(jlink.download(version, print_progress))
    click.echo()
    click.echo(f"J-Link downloaded to: {path}")


@main.command(name="install")
@click.option("-j", "--jlink-version", help="Version to install, must be downloaded already.")
@click.option("-p", "--install-path", type=click.Path(file_okay=False), help="Installation path.")
@click.option("--accept-license", is_flag=True, help="Accept J-Link license.")
@click.pass_obj
@handle_errors
def install(
    jlink: Jlink, jlink_version: Optional[str], install_path: Optional[str], accept_license: bool
) -> None:
    """Install downloaded J-Link."""
    if jlink_version:
        jlink.set_jlink_version(jlink_version)
    if accept_license:
        jlink.accept_license()
    _run(jlink.install(install_path))
    click.echo(f"{colorama.Fore.GREEN}J-Link installed.{colorama.Fore.RESET}")


@main.command(name="download-and-install", no_args_is_help=True)
@click.argument("version")
@click.option("--accept-license", is_flag=True, help="Accept J-Link license.")
@click.pass_obj
@handle_errors
def download_and_install(jlink: Jlink, version: str, accept_license: bool) -> None:
    """Download J-Link VERSION from the mirror and install it."""
    if accept_license:
        jlink.accept_license()
    _run(jlink.download_and_install(version, print_progress))
    click.echo()
    click.echo(f"{colorama.Fore.GREEN}J-Link {version} installed.{colorama.Fore.RESET}")


@main.command(name="version")
@click.option(
    "-p", "--jlink-path", type=click.Path(exists=True, file_okay=False), help="J-Link directory."
)
@click.pass_obj
@handle_errors
def version(jlink: Jlink, jlink_path: Optional[str]) -> None:
    """Print version of the J-Link library."""
    if jlink_path:
        jlink.set_jlink_path(jlink_path)
    click.echo(_run(jlink.get_version()))


@main.command(name="upload", no_args_is_help=True)
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("version")
@click.pass_obj
@handle_errors
def upload(jlink: Jlink, file_path: str, version: str) -> None:
    """Upload J-Link FILE_PATH of VERSION to the mirror."""
    url = _run(jlink.upload(file_path, version, print_progress))
    click.echo()
    click.echo(f"Uploaded to: {url}")


@main.group(name="license", no_args_is_help=True)
def license_group() -> None:
    """J-Link license."""


@license_group.command(name="show")
@click.pass_obj
@handle_errors
def license_show(jlink: Jlink) -> None:
    """Print J-Link license."""
    click.echo(jlink.show_license())


@license_group.command(name="accept")
@click.pass_obj
@handle_errors
def license_accept(jlink: Jlink) -> None:
    """Accept J-Link license."""
    jlink.accept_license()
    click.echo("J-Link license accepted.")


@license_group.command(name="decline")
@click.pass_obj
@handle_errors
def license_decline(jlink: Jlink) -> None:
    """Decline J-Link license."""
    jlink.decline_license()
    click.echo("J-Link license declined.")


if __name__ == "__main__":
    sys.exit(main())  # pylint: disable=no-value-for-parameter
