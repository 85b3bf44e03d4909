#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Main module for J-Link management."""

import logging
from typing import Dict, List, Optional, Type, Union

from .common import (
    JlinkDownload,
    JlinkInstallType,
    ProgressCallback,
    current_arch,
    current_os,
)
from .config import JLINK_PATH_VARIABLE, Environment, JlinkConfig
from .errors import JlinkInstallTypeError
from .jlink_abstract import JlinkAbstract
from .jlink_bundle import JlinkBundle
from .jlink_installer import JlinkInstaller

logger = logging.getLogger(__name__)

# mapping install type -> backend class
BACKENDS: Dict[JlinkInstallType, Type[JlinkAbstract]] = {
    JlinkInstallType.INSTALLER: JlinkInstaller,
    JlinkInstallType.BUNDLE: JlinkBundle,
}


def create_backend(
    install_type: Union[str, JlinkInstallType],
    os_name: str,
    arch: str,
    config: Optional[JlinkConfig] = None,
) -> JlinkAbstract:
    """Create J-Link backend for given install type.

    :param install_type: Install type, 'installer' or 'bundle'
    :param os_name: Operating system
    :param arch: CPU architecture
    :param config: Settings passed to the backend, read from environment variables by default
    :return: The backend instance
    :raises JlinkInstallTypeError: Install type is not supported
    """
    try:
        backend_class = BACKENDS[JlinkInstallType(install_type)]
    except (ValueError, KeyError) as exc:
        raise JlinkInstallTypeError(
            f"Invalid install type: '{install_type}'. "
            f"Supported: {[item.value for item in JlinkInstallType]}"
        ) from exc
    return backend_class(os_name, arch, config or JlinkConfig.from_environment())


class Jlink:
    """J-Link manager.

    Every operation is handled by the backend chosen by install type.
    Errors raised by the backend are propagated unchanged.
    """

    def __init__(
        self,
        install_type: Optional[Union[str, JlinkInstallType]] = None,
        os_name: Optional[str] = None,
        arch: Optional[str] = None,
        config: Optional[JlinkConfig] = None,
        environment: Optional[Environment] = None,
    ) -> None:
        """Initialize the J-Link manager.

        :param install_type: 'installer' (default) or 'bundle'
        :param os_name: Operating system, the current one by default
        :param arch: CPU architecture, the current one by default
        :param config: Backend settings, read from environment variables by default
        :param environment: Environment receiving NRF_JLINK_PATH, process environment by default
        :raises JlinkInstallTypeError: Install type is not supported
        """
        self.os_name = os_name or current_os()
        self.arch = arch or current_arch()
        self.environment = environment or Environment()
        self.jlink = create_backend(
            install_type or JlinkInstallType.INSTALLER, self.os_name, self.arch, config
        )
        self.install_type = JlinkInstallType(install_type or JlinkInstallType.INSTALLER)
        logger.debug(
            f"J-Link manager using {type(self.jlink).__name__} for {self.os_name}/{self.arch}"
        )

    def list_local_installed(self) -> List[str]:
        """Lists all J-Link versions installed locally.

        :return: Paths of the installed J-Link copies.
        """
        return self.jlink.list_local_installed()

    async def list_remote(self) -> List[JlinkDownload]:
        """Lists all J-Link versions provided by the mirror.

        :return: Records describing the available J-Link artifacts.
        """
        return await self.jlink.list_remote()

    async def download(
        self, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> str:
        """Downloads the specified version of J-Link from the mirror.

        :param version: The version of J-Link to download.
        :param progress_update: Optional callback to track the download progress.
        :return: Path of the downloaded J-Link.
        """
        return await self.jlink.download(version, progress_update)

    async def download_from_segger(
        self, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> str:
        """Downloads the specified version of J-Link from SEGGER.

        :param version: The version of J-Link to download.
        :param progress_update: Optional callback to track the download progress.
        :return: Path of the downloaded J-Link.
        """
        return await self.jlink.download_from_segger(version, progress_update)

    async def install(self, install_path: Optional[str] = None) -> None:
        """Installs the downloaded J-Link of the selected version."""
        await self.jlink.install(install_path)

    async def download_and_install(
        self, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> None:
        """Downloads the specified version of J-Link from the mirror and installs it.

        :param version: The version of J-Link to download.
        :param progress_update: Optional callback to track the download progress.
        """
        await self.jlink.download_and_install(version, progress_update)

    async def get_version(self) -> str:
        """Retrieves the version of the installed J-Link.

        :return: The J-Link version, e.g. '7.94e'.
        """
        return await self.jlink.get_version()

    async def upload(
        self, file_path: str, version: str, progress_update: Optional[ProgressCallback] = None
    ) -> str:
        """Uploads the specified file to the mirror.

        :param file_path: The path to the J-Link file to upload.
        :param version: The version of the J-Link being uploaded.
        :param progress_update: Optional callback to track the upload progress.
        :return: URL the file was uploaded to.
        """
        return await self.jlink.upload(file_path, version, progress_update)

    def set_jlink_path(self, path: str) -> None:
        """Sets the path to the J-Link library.

        Also sets the process environment variable NRF_JLINK_PATH.

        :param path: The path to the J-Link library.
        """
        self.environment.set(JLINK_PATH_VARIABLE, path)
        self.jlink.set_jlink_path(path)

    def get_jlink_path(self) -> Optional[str]:
        """Gets the path to the J-Link library."""
        return self.jlink.get_jlink_path()

    def set_jlink_version(self, version: str) -> None:
        """Sets the version of the J-Link library to use."""
        self.jlink.set_jlink_version(version)

    def get_jlink_version(self) -> Optional[str]:
        """Gets the version of the J-Link library in use."""
        return self.jlink.get_jlink_version()

    def accept_license(self) -> None:
        """Accepts the J-Link license.

        This is required before installing J-Link.
        """
        self.jlink.accept_license()

    def decline_license(self) -> None:
        """Declines the J-Link license."""
        self.jlink.decline_license()

    def show_license(self) -> str:
        """Shows the J-Link license.

        :return: The J-Link license text.
        """
        return self.jlink.show_license()
