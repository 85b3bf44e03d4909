#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

import io
import os
import tarfile

import pytest

from nrf_jlink.config import JlinkConfig


@pytest.fixture
def config(tmp_path):
    return JlinkConfig(
        artifactory_url="https://mirror.test/artifactory",
        repo_path="swtools/external/segger/jlink",
        segger_url="https://segger.test/downloads/jlink",
        download_dir=os.path.join(tmp_path, "downloads"),
        bundle_dir=os.path.join(tmp_path, "bundles"),
        timeout=5,
    )


@pytest.fixture
def bundle_archive():
    """Gzipped tarball resembling a SEGGER J-Link bundle."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in [
            ("JLink_Linux_V794e_x86_64/libjlinkarm.so", b"\x7fELF"),
            ("JLink_Linux_V794e_x86_64/License.txt", b"SEGGER license"),
        ]:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()
