#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""J-Link backend using self-contained bundles."""

import asyncio
import json
import logging
import os
import shutil
import tarfile
import zipfile
from typing import List, Optional

from .common import convert_to_segger_version
from .config import JlinkConfig
from .errors import JlinkError, JlinkInstallError
from .jlink_abstract import JlinkAbstract

logger = logging.getLogger(__name__)


class JlinkBundle(JlinkAbstract):
    """J-Link unpacked from an archive into the bundle directory.

    The native installer is bypassed, so acceptance of the license is recorded
    by this backend and kept in the bundle directory between runs.
    """

    ARTIFACT_EXTENSIONS = {
        "win32": "zip",
        "darwin": "tgz",
        "linux": "tgz",
    }
    LICENSE_STATE_FILE = "license.json"

    def __init__(self, os_name: str, arch: str, config: Optional[JlinkConfig] = None) -> None:
        super().__init__(os_name, arch, config)
        self.license_accepted = self._load_license_state()

    @property
    def license_state_file(self) -> str:
        """Path of the file keeping the license decision."""
        return os.path.join(self.config.bundle_dir, self.LICENSE_STATE_FILE)

    def _load_license_state(self) -> Optional[bool]:
        if not os.path.isfile(self.license_state_file):
            return None
        try:
            with open(self.license_state_file, encoding="utf-8") as f:
                return bool(json.load(f)["accepted"])
        except (ValueError, KeyError, TypeError) as exc:
            raise JlinkError(f"Corrupted license state file: {self.license_state_file}") from exc

    def _save_license_state(self) -> None:
        os.makedirs(self.config.bundle_dir, exist_ok=True)
        with open(self.license_state_file, "w", encoding="utf-8") as f:
            json.dump({"accepted": bool(self.license_accepted)}, f)

    def accept_license(self) -> None:
        super().accept_license()
        self._save_license_state()

    def decline_license(self) -> None:
        super().decline_license()
        self._save_license_state()

    def list_local_installed(self) -> List[str]:
        """List J-Link bundles in the bundle directory."""
        if not os.path.isdir(self.config.bundle_dir):
            return []
        return sorted(
            entry.path for entry in os.scandir(self.config.bundle_dir) if entry.is_dir()
        )

    async def _install_file(self, artifact: str, install_path: Optional[str] = None) -> None:
        target = install_path
        if not target:
            if not self.jlink_version:
                raise JlinkError("No J-Link version selected")
            target = os.path.join(
                self.config.bundle_dir, f"JLink_{convert_to_segger_version(self.jlink_version)}"
            )
        jlink_path = await asyncio.to_thread(self._unpack, artifact, target)
        logger.info(f"J-Link bundle installed into {jlink_path}")
        self.set_jlink_path(jlink_path)

    @staticmethod
    def _check_members(artifact: str, target: str) -> None:
        """Refuse archives with entries resolving outside the target directory."""
        root = os.path.realpath(target)

        def inside(path: str) -> bool:
            resolved = os.path.realpath(os.path.join(root, path))
            return os.path.commonpath([root, resolved]) == root

        if tarfile.is_tarfile(artifact):
            with tarfile.open(artifact) as tar:
                for member in tar.getmembers():
                    if os.path.isabs(member.name) or not inside(member.name):
                        raise JlinkInstallError(f"Unsafe path in J-Link bundle: {member.name}")
                    if member.issym():
                        link = os.path.join(os.path.dirname(member.name), member.linkname)
                    elif member.islnk():
                        link = member.linkname
                    else:
                        continue
                    if os.path.isabs(member.linkname) or not inside(link):
                        raise JlinkInstallError(
                            f"Unsafe link in J-Link bundle: {member.name} -> {member.linkname}"
                        )
        elif zipfile.is_zipfile(artifact):
            with zipfile.ZipFile(artifact) as archive:
                for name in archive.namelist():
                    if os.path.isabs(name) or not inside(name):
                        raise JlinkInstallError(f"Unsafe path in J-Link bundle: {name}")

    @staticmethod
    def _unpack(artifact: str, target: str) -> str:
        logger.debug(f"Unpacking {artifact} into {target}")
        try:
            JlinkBundle._check_members(artifact, target)
            os.makedirs(target, exist_ok=True)
            shutil.unpack_archive(artifact, target)
        except (shutil.ReadError, tarfile.TarError, zipfile.BadZipFile, ValueError, OSError) as exc:
            raise JlinkInstallError(f"Cannot unpack J-Link bundle {artifact}: {exc}") from exc
        entries = os.listdir(target)
        if len(entries) == 1 and os.path.isdir(os.path.join(target, entries[0])):
            return os.path.join(target, entries[0])
        return target
