#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Configuration of J-Link management taken from environment and dotenv files."""

import logging
import os
from dataclasses import dataclass
from typing import MutableMapping, Optional

from dotenv import load_dotenv

from .errors import JlinkConfigError

logger = logging.getLogger(__name__)

JLINK_PATH_VARIABLE = "NRF_JLINK_PATH"
DEFAULT_DOTENV_PATH = ".nrf-jlink.env"
DEFAULT_ARTIFACTORY_URL = "https://files.nordicsemi.com/artifactory"
DEFAULT_REPO_PATH = "swtools/external/segger/jlink"
DEFAULT_SEGGER_URL = "https://www.segger.com/downloads/jlink"
DEFAULT_TIMEOUT = 60


class Environment:
    """Access to process environment variables.

    Wraps ``os.environ`` unless another mapping is given, so the process
    environment stays untouched in tests.
    """

    def __init__(self, variables: Optional[MutableMapping[str, str]] = None) -> None:
        self._variables = os.environ if variables is None else variables

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get value of environment variable."""
        return self._variables.get(name, default)

    def set(self, name: str, value: str) -> None:
        """Set value of environment variable."""
        logger.debug(f"Setting environment variable {name}={value}")
        self._variables[name] = value


def load_env_file(env_file: Optional[str] = None) -> Optional[str]:
    """Load the first existing dotenv file into process environment.

    :param env_file: Explicit path to dotenv file, searched first
    :return: Path of the loaded file, None if no file was found
    """
    env_file_candidates = [
        env_file,
        os.environ.get("NRF_JLINK_DOTENV_PATH"),
        DEFAULT_DOTENV_PATH,
        os.path.expanduser(f"~/{DEFAULT_DOTENV_PATH}"),
        os.path.expanduser(f"~/.config/nrf-jlink/{DEFAULT_DOTENV_PATH}"),
    ]
    for candidate in env_file_candidates:
        if candidate and os.path.exists(candidate):
            logger.debug(f"Loading J-Link configuration from '{candidate}'.")
            load_dotenv(candidate)
            return candidate
    return None


@dataclass
class JlinkConfig:
    """Settings used by J-Link backends."""

    artifactory_url: str = DEFAULT_ARTIFACTORY_URL
    repo_path: str = DEFAULT_REPO_PATH
    segger_url: str = DEFAULT_SEGGER_URL
    download_dir: str = os.path.expanduser("~/.nrf-jlink/downloads")
    bundle_dir: str = os.path.expanduser("~/.nrf-jlink/bundles")
    artifactory_token: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    jlink_path: Optional[str] = None

    @property
    def repo_url(self) -> str:
        """URL of J-Link repository on the mirror."""
        return f"{self.artifactory_url.rstrip('/')}/{self.repo_path.strip('/')}"

    @property
    def storage_url(self) -> str:
        """URL of Artifactory storage API for the J-Link repository."""
        return f"{self.artifactory_url.rstrip('/')}/api/storage/{self.repo_path.strip('/')}"

    @classmethod
    def from_environment(cls, environment: Optional[Environment] = None) -> "JlinkConfig":
        """Create configuration from environment variables.

        :param environment: Environment to read, process environment by default
        :raises JlinkConfigError: Invalid value of a variable
        """
        env = environment or Environment()
        timeout_str = env.get("NRF_JLINK_TIMEOUT", str(DEFAULT_TIMEOUT)) or str(DEFAULT_TIMEOUT)
        try:
            timeout = int(timeout_str)
        except ValueError as exc:
            raise JlinkConfigError(f"Invalid NRF_JLINK_TIMEOUT value: '{timeout_str}'") from exc
        if timeout <= 0:
            raise JlinkConfigError(f"NRF_JLINK_TIMEOUT must be positive, got {timeout}")

        return cls(
            artifactory_url=env.get("NRF_JLINK_ARTIFACTORY_URL") or DEFAULT_ARTIFACTORY_URL,
            repo_path=env.get("NRF_JLINK_REPO_PATH") or DEFAULT_REPO_PATH,
            segger_url=env.get("NRF_JLINK_SEGGER_URL") or DEFAULT_SEGGER_URL,
            download_dir=os.path.expanduser(
                env.get("NRF_JLINK_DOWNLOAD_DIR") or "~/.nrf-jlink/downloads"
            ),
            bundle_dir=os.path.expanduser(
                env.get("NRF_JLINK_BUNDLE_DIR") or "~/.nrf-jlink/bundles"
            ),
            artifactory_token=env.get("NRF_JLINK_ARTIFACTORY_TOKEN"),
            timeout=timeout,
            jlink_path=env.get(JLINK_PATH_VARIABLE),
        )

    @classmethod
    def load(cls, env_file: Optional[str] = None) -> "JlinkConfig":
        """Load dotenv file (if any) and create configuration from process environment."""
        load_env_file(env_file)
        return cls.from_environment()
