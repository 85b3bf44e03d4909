#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""J-Link backend using the platform native installer."""

import asyncio
import glob
import logging
import os
from typing import List, Optional

from .errors import JlinkInstallError
from .jlink_abstract import JlinkAbstract

logger = logging.getLogger(__name__)


class JlinkInstaller(JlinkAbstract):
    """J-Link managed by SEGGER installer packages."""

    ARTIFACT_EXTENSIONS = {
        "win32": "exe",
        "darwin": "pkg",
        "linux": "deb",
    }

    def search_dirs(self) -> List[str]:
        """Get directories the SEGGER installer puts J-Link into."""
        if self.os_name == "win32":
            program_files = [
                os.environ.get("ProgramFiles", "C:\\Program Files"),
                os.environ.get("ProgramFiles(x86)", "C:\\Program Files (x86)"),
            ]
            return [os.path.join(directory, "SEGGER") for directory in program_files]
        if self.os_name == "darwin":
            return ["/Applications/SEGGER"]
        return ["/opt/SEGGER"]

    def list_local_installed(self) -> List[str]:
        """List J-Link installations made by the SEGGER installer."""
        installed = set()
        for directory in self.search_dirs():
            for candidate in glob.glob(os.path.join(directory, "JLink*")):
                if os.path.isdir(candidate):
                    installed.add(candidate)
        return sorted(installed)

    def install_command(self, artifact: str, install_path: Optional[str] = None) -> List[str]:
        """Get command installing the artifact.

        :raises JlinkInstallError: Installation directory can't be changed on this platform
        """
        if self.os_name == "win32":
            command = [artifact, "/S"]
            if install_path:
                # NSIS requires /D to be the last argument
                command.append(f"/D={install_path}")
            return command
        if install_path:
            raise JlinkInstallError(
                f"Installation directory can't be changed on '{self.os_name}'"
            )
        if self.os_name == "darwin":
            return ["installer", "-pkg", artifact, "-target", "/"]
        return ["dpkg", "-i", artifact]

    async def _install_file(self, artifact: str, install_path: Optional[str] = None) -> None:
        command = self.install_command(artifact, install_path)
        logger.info(f"Running: {' '.join(command)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise JlinkInstallError(f"Cannot run J-Link installer: {exc}") from exc
        stdout, stderr = await process.communicate()
        if stdout:
            logger.debug(stdout.decode(errors="replace").strip())
        if process.returncode != 0:
            raise JlinkInstallError(
                f"J-Link installer failed ({process.returncode}): "
                f"{stderr.decode(errors='replace').strip()}"
            )
        logger.info(f"J-Link installed from {artifact}")
