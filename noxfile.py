#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Helper file to run development tasks."""

import shutil
from pathlib import Path

import nox
import tomli
from nox.logger import logger

nox.options.default_venv_backend = "uv|venv"
nox.options.reuse_venv = "yes"
nox.options.stop_on_first_error = True

THIS_DIR = Path(__file__).parent


def get_extras(name: str) -> list[str]:
    data = tomli.loads(THIS_DIR.joinpath("pyproject.toml").read_text(encoding="utf-8"))
    extras = data["project"].get("optional-dependencies", {}).get(name, [])
    logger.info(f"Extra '{name}': {', '.join(extras)}")
    return extras


@nox.session
def tests(session: nox.Session) -> None:
    """Run unit tests. Additional arguments are passed to pytest."""
    session.install(".[test]")
    session.run("pytest", *session.posargs)


@nox.session
def lint(session: nox.Session) -> None:
    """Run formatting, lint and typing checks."""
    session.install(".", *get_extras("dev"))
    session.run("black", "--check", "nrf_jlink", "tests")
    session.run("isort", "--check-only", "nrf_jlink", "tests")
    session.run("pylint", "nrf_jlink")
    session.run("mypy", "nrf_jlink")


@nox.session
def build(session: nox.Session) -> None:
    """Build Python packages."""
    session.install("build", "twine")
    if Path("dist").exists():
        shutil.rmtree("dist")
    session.run("python", "-m", "build", "--installer", "uv")
    session.run("twine", "check", "--strict", "dist/*")


@nox.session
def upload(session: nox.Session) -> None:
    """Use twine to upload built packages. To use custom pypi repo use `--repository <repo-name>`."""
    extra_args = []
    if "--repository" in session.posargs:
        repository_index = session.posargs.index("--repository")
        extra_args.extend(["--repository", session.posargs[repository_index + 1]])
    session.install("twine")
    session.run("twine", "upload", "dist/*", *extra_args)
