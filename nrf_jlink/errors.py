#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Errors used in the package."""

from spsdk.exceptions import SPSDKError, SPSDKValueError


class JlinkError(SPSDKError):
    """Base J-Link management error."""


class JlinkInstallTypeError(JlinkError, SPSDKValueError):
    """Unsupported install type."""


class JlinkConfigError(JlinkError):
    """Invalid or missing configuration."""


class JlinkPlatformError(JlinkError):
    """Operating system or architecture not supported."""


class JlinkVersionError(JlinkError):
    """Malformed J-Link version."""


class JlinkDownloadError(JlinkError):
    """Listing or downloading from a remote source failed."""


class JlinkUploadError(JlinkError):
    """Upload to the artifact repository failed."""


class JlinkInstallError(JlinkError):
    """Installation failed."""


class JlinkLicenseError(JlinkError):
    """J-Link license has not been accepted."""
