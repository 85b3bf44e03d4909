#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Top-level package for SEGGER J-Link management."""

__author__ = """NXP"""
__email__ = "michal.starecek@nxp.com"
__version__ = "0.1.0"

from .common import JlinkDownload, JlinkInstallType, TransferProgress
from .jlink import Jlink

__all__ = ["Jlink", "JlinkDownload", "JlinkInstallType", "TransferProgress"]
