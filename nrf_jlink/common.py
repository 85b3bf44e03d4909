#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Common types and helpers shared by J-Link backends."""

import platform
import re
import struct
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .errors import JlinkPlatformError, JlinkVersionError

# version as used by SEGGER in file names, e.g. V794e, or in the UI, e.g. 7.94e
_VERSION_RE = re.compile(r"^[vV]?(?P<major>\d+?)\.?(?P<minor>\d{2})(?P<revision>[a-z]?)$")

# mapping operating system -> SEGGER operating system label
_SEGGER_OS = {
    "win32": "Windows",
    "darwin": "MacOSX",
    "linux": "Linux",
}

# mapping platform.machine() -> normalized architecture
_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "i386",
    "i686": "i386",
    "x86": "i386",
    "ia32": "i386",
    "armv7l": "arm",
    "arm": "arm",
}


class JlinkInstallType(str, Enum):
    """Strategies used to install J-Link."""

    INSTALLER = "installer"
    BUNDLE = "bundle"


@dataclass(frozen=True)
class JlinkDownload:
    """J-Link artifact available for download."""

    version: str
    filename: str
    url: str
    size: Optional[int] = None
    sha256: Optional[str] = None
    last_modified: Optional[str] = None


@dataclass(frozen=True)
class TransferProgress:
    """Progress of a download or an upload."""

    transferred: int
    total: Optional[int] = None

    @property
    def percentage(self) -> Optional[float]:
        """Transferred amount in percent, None if total size is unknown."""
        if not self.total:
            return None
        return min(100.0, self.transferred * 100.0 / self.total)


ProgressCallback = Callable[[TransferProgress], None]


def current_os() -> str:
    """Get operating system of the running process."""
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def current_arch() -> str:
    """Get normalized CPU architecture of the running process.

    A 32-bit interpreter on a 64-bit host needs the 32-bit J-Link.
    """
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine)
    if struct.calcsize("P") == 4:
        return {"x86_64": "i386", "arm64": "arm"}.get(arch, arch)
    return arch


def _parse_version(version: str) -> re.Match:
    match = _VERSION_RE.match(version.strip())
    if match is None:
        raise JlinkVersionError(f"Invalid J-Link version: '{version}'")
    return match


def normalize_version(version: str) -> str:
    """Convert J-Link version into its human readable form.

    :param version: Version in any supported form, e.g. 'V794e', '7.94e'
    :return: Version like '7.94e'
    :raises JlinkVersionError: Version could not be parsed
    """
    match = _parse_version(version)
    return f"{int(match['major'])}.{match['minor']}{match['revision']}"


def convert_to_segger_version(version: str) -> str:
    """Convert J-Link version into the form used by SEGGER in file names.

    :param version: Version in any supported form, e.g. 'V794e', '7.94e'
    :return: Version like 'V794e'
    :raises JlinkVersionError: Version could not be parsed
    """
    match = _parse_version(version)
    return f"V{int(match['major'])}{match['minor']}{match['revision']}"


def version_key(version: str) -> tuple:
    """Sort key for J-Link versions."""
    match = _parse_version(version)
    return (int(match["major"]), int(match["minor"]), match["revision"])


def get_artifact_filename(os_name: str, arch: str, version: str, extension: str) -> str:
    """Get SEGGER file name of J-Link artifact.

    :param os_name: Operating system, one of 'win32', 'darwin', 'linux'
    :param arch: Normalized architecture
    :param version: J-Link version
    :param extension: File extension without leading dot
    :return: File name like 'JLink_Linux_V794e_x86_64.deb'
    :raises JlinkPlatformError: Operating system or architecture is not supported
    """
    segger_os = _SEGGER_OS.get(os_name)
    if segger_os is None:
        raise JlinkPlatformError(f"Unsupported operating system: '{os_name}'")
    if os_name == "darwin":
        segger_arch = "universal"
    elif arch in set(_ARCH_ALIASES.values()):
        segger_arch = arch
    else:
        raise JlinkPlatformError(f"Unsupported architecture: '{arch}'")
    return f"JLink_{segger_os}_{convert_to_segger_version(version)}_{segger_arch}.{extension}"
