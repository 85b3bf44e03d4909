#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Capability interface shared by J-Link backends."""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests
from pylink import JLink
from pylink.library import Library

from .common import (
    JlinkDownload,
    ProgressCallback,
    TransferProgress,
    convert_to_segger_version,
    get_artifact_filename,
    normalize_version,
    version_key,
)
from .config import JlinkConfig
from .errors import (
    JlinkConfigError,
    JlinkDownloadError,
    JlinkError,
    JlinkLicenseError,
    JlinkPlatformError,
    JlinkVersionError,
)
from .transfer import download_file, upload_file

logger = logging.getLogger(__name__)
logger_pylink = logger.getChild("PyLink")
logger_pylink.setLevel(logging.CRITICAL)

LICENSE_URL = "https://www.segger.com/purchase/licensing/license-sfl/"
LICENSE_NOTICE = (
    "SEGGER J-Link is distributed under the SEGGER Terms of Use.\n"
    f"Read the full license text at {LICENSE_URL} before accepting it."
)

# mapping operating system -> name of the J-Link shared library
_LIBRARY_NAMES = {
    "darwin": "libjlinkarm.dylib",
    "linux": "libjlinkarm.so",
}


def _threadsafe(callback: Optional[ProgressCallback]) -> Optional[ProgressCallback]:
    """Make the callback run on the event loop even when reported from a worker thread.

    The worker waits for the callback, so its exceptions abort the transfer.
    """
    if callback is None:
        return None
    loop = asyncio.get_running_loop()

    async def call(progress: TransferProgress) -> None:
        callback(progress)

    def report(progress: TransferProgress) -> None:
        asyncio.run_coroutine_threadsafe(call(progress), loop).result()

    return report


class JlinkAbstract(ABC):
    """Base class of J-Link backends.

    Remote listing, downloads, uploads and the bookkeeping of path, version and
    license are common for all backends. Backends differ in the kind of artifact
    they handle and the way it gets installed.
    """

    # mapping operating system -> artifact file extension
    ARTIFACT_EXTENSIONS: Dict[str, str] = {}

    def __init__(self, os_name: str, arch: str, config: Optional[JlinkConfig] = None) -> None:
        """Initialize the backend.

        :param os_name: Operating system, one of 'win32', 'darwin', 'linux'
        :param arch: Normalized CPU architecture
        :param config: Settings of the backend, defaults are used if not given
        """
        self.os_name = os_name
        self.arch = arch
        self.config = config or JlinkConfig()
        self.jlink_path: Optional[str] = self.config.jlink_path
        self.jlink_version: Optional[str] = None
        self.license_accepted: Optional[bool] = None
        self.session = requests.Session()

    @abstractmethod
    def list_local_installed(self) -> List[str]:
        """List paths of locally installed J-Link copies."""

    @abstractmethod
    async def _install_file(self, artifact: str, install_path: Optional[str] = None) -> None:
        """Install the downloaded artifact."""

    def artifact_filename(self, version: str) -> str:
        """Get file name of the artifact handled by this backend.

        :raises JlinkPlatformError: Operating system is not supported by the backend
        """
        extension = self.ARTIFACT_EXTENSIONS.get(self.os_name)
        if extension is None:
            raise JlinkPlatformError(
                f"{type(self).__name__} does not support operating system '{self.os_name}'"
            )
        return get_artifact_filename(self.os_name, self.arch, version, extension)

    def artifact_path(self, version: str) -> str:
        """Get path of the downloaded artifact."""
        return os.path.join(self.config.download_dir, self.artifact_filename(version))

    def _mirror_url(self, version: str, filename: str) -> str:
        return f"{self.config.repo_url}/{convert_to_segger_version(version)}/{filename}"

    async def list_remote(self) -> List[JlinkDownload]:
        """List J-Link artifacts available on the mirror for this platform."""
        return await asyncio.to_thread(self._list_remote)

    def _list_remote(self) -> List[JlinkDownload]:
        url = f"{self.config.storage_url}?list&deep=1&listFolders=0"
        logger.info(f"Listing J-Link versions: {url}")
        try:
            response = self.session.get(url, timeout=self.config.timeout)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"unexpected content of type {type(data).__name__}")
            files = data.get("files", [])
        except (requests.RequestException, ValueError) as exc:
            raise JlinkDownloadError(f"Listing of J-Link versions failed: {exc}") from exc

        downloads = []
        for item in files:
            parts = item.get("uri", "").strip("/").split("/")
            if len(parts) != 2:
                continue
            folder, filename = parts
            try:
                version = normalize_version(folder)
            except JlinkVersionError:
                logger.debug(f"Skipping unexpected folder '{folder}'")
                continue
            if filename != self.artifact_filename(version):
                continue
            downloads.append(
                JlinkDownload(
                    version=version,
                    filename=filename,
                    url=self._mirror_url(version, filename),
                    size=item.get("size"),
                    sha256=item.get("sha2"),
                    last_modified=item.get("lastModified"),
                )
            )
        downloads.sort(key=lambda download: version_key(download.version))
        return downloads

    async def download(
        self, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> str:
        """Download J-Link from the mirror.

        :param version: J-Link version
        :param progress_update: Optional callback to track the download progress
        :return: Path of the downloaded artifact
        """
        url = self._mirror_url(version, self.artifact_filename(version))
        return await asyncio.to_thread(
            download_file,
            self.session,
            url,
            self.artifact_path(version),
            _threadsafe(progress_update),
            self.config.timeout,
        )

    async def download_from_segger(
        self, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> str:
        """Download J-Link directly from SEGGER.

        Downloading from SEGGER requires accepting their license agreement as
        part of the request.

        :param version: J-Link version
        :param progress_update: Optional callback to track the download progress
        :return: Path of the downloaded artifact
        """
        url = f"{self.config.segger_url.rstrip('/')}/{self.artifact_filename(version)}"
        return await asyncio.to_thread(
            download_file,
            self.session,
            url,
            self.artifact_path(version),
            _threadsafe(progress_update),
            self.config.timeout,
            "POST",
            {"accept_license_agreement": "accepted", "submit": "Download software"},
        )

    def _ensure_license_accepted(self) -> None:
        if not self.license_accepted:
            raise JlinkLicenseError(
                "J-Link license must be accepted before installation, see the license text"
            )

    async def install(self, install_path: Optional[str] = None) -> None:
        """Install the downloaded artifact of the selected J-Link version.

        :param install_path: Optional installation directory
        :raises JlinkError: No version selected or its artifact was not downloaded
        :raises JlinkLicenseError: License has not been accepted
        """
        if not self.jlink_version:
            raise JlinkError("No J-Link version selected")
        artifact = self.artifact_path(self.jlink_version)
        if not os.path.isfile(artifact):
            raise JlinkError(f"J-Link {self.jlink_version} has not been downloaded: {artifact}")
        self._ensure_license_accepted()
        await self._install_file(artifact, install_path)

    async def download_and_install(
        self, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> None:
        """Download J-Link from the mirror and install it.

        The downloaded version becomes the selected one.
        """
        self._ensure_license_accepted()
        artifact = await self.download(version, progress_update)
        self.set_jlink_version(version)
        await self._install_file(artifact)

    def _library_file(self) -> str:
        if not self.jlink_path:
            raise JlinkError("J-Link path is not set")
        if self.os_name == "win32":
            name = "JLinkARM.dll" if self.arch == "i386" else "JLink_x64.dll"
        else:
            name = _LIBRARY_NAMES.get(self.os_name, "libjlinkarm.so")
        return os.path.join(self.jlink_path, name)

    async def get_version(self) -> str:
        """Get version of the J-Link library in use."""
        return await asyncio.to_thread(self._read_library_version)

    def _read_library_version(self) -> str:
        library_file = None
        if self.jlink_path:
            library_file = self._library_file()
            if not os.path.isfile(library_file):
                raise JlinkError(f"J-Link library not found: {library_file}")
            logger.debug(f"Loading J-Link library {library_file}")
        try:
            jlink = JLink(
                lib=Library(dllpath=library_file) if library_file else None,
                log=logger_pylink.info,
                detailed_log=logger_pylink.debug,
                error=logger_pylink.error,
                warn=logger_pylink.warning,
            )
        except (TypeError, OSError) as exc:
            raise JlinkError("Cannot open J-Link DLL") from exc
        return jlink.version

    async def upload(
        self, file_path: str, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> str:
        """Upload J-Link artifact to the mirror.

        :param file_path: Path of the artifact
        :param version: J-Link version of the artifact
        :param progress_update: Optional callback to track the upload progress
        :return: URL the artifact was uploaded to
        :raises JlinkConfigError: Artifactory token is not configured
        """
        token = self.config.artifactory_token
        if not token:
            raise JlinkConfigError(
                "Artifactory token not provided. Set NRF_JLINK_ARTIFACTORY_TOKEN."
            )
        url = self._mirror_url(version, os.path.basename(file_path))
        response = await asyncio.to_thread(
            upload_file,
            self.session,
            url,
            file_path,
            {"Authorization": f"Bearer {token}"},
            _threadsafe(progress_update),
            self.config.timeout,
        )
        try:
            data = response.json()
        except ValueError:
            return url
        if isinstance(data, dict) and data.get("downloadUri"):
            return data["downloadUri"]
        return url

    def set_jlink_path(self, path: str) -> None:
        """Set path to the J-Link library."""
        self.jlink_path = path

    def get_jlink_path(self) -> Optional[str]:
        """Get path to the J-Link library."""
        return self.jlink_path

    def set_jlink_version(self, version: str) -> None:
        """Set J-Link version to use."""
        self.jlink_version = version

    def get_jlink_version(self) -> Optional[str]:
        """Get J-Link version in use."""
        return self.jlink_version

    def accept_license(self) -> None:
        """Accept J-Link license."""
        logger.info("J-Link license accepted")
        self.license_accepted = True

    def decline_license(self) -> None:
        """Decline J-Link license."""
        logger.info("J-Link license declined")
        self.license_accepted = False

    def show_license(self) -> str:
        """Get J-Link license text."""
        if self.jlink_path:
            license_file = os.path.join(self.jlink_path, "License.txt")
            if os.path.isfile(license_file):
                with open(license_file, encoding="utf-8", errors="replace") as f:
                    return f.read()
        return LICENSE_NOTICE
