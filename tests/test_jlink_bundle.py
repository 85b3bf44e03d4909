#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests for the bundle backend."""

import io
import os
import tarfile

import pytest

from nrf_jlink.errors import JlinkError, JlinkInstallError, JlinkLicenseError
from nrf_jlink.jlink_bundle import JlinkBundle
from tests.fakes import FakeResponse, FakeSession


@pytest.fixture
def bundle(config):
    return JlinkBundle("linux", "x86_64", config)


def write_artifact(backend, version, content):
    path = backend.artifact_path(version)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)
    return path


def test_artifact_filename(config):
    assert JlinkBundle("linux", "x86_64", config).artifact_filename("7.94e") == (
        "JLink_Linux_V794e_x86_64.tgz"
    )
    assert JlinkBundle("darwin", "x86_64", config).artifact_filename("7.94e") == (
        "JLink_MacOSX_V794e_universal.tgz"
    )
    assert JlinkBundle("win32", "x86_64", config).artifact_filename("7.94e") == (
        "JLink_Windows_V794e_x86_64.zip"
    )


def test_list_local_installed_missing_dir(bundle):
    assert bundle.list_local_installed() == []


def test_list_local_installed(bundle, config):
    for name in ["JLink_V794e", "JLink_V788"]:
        os.makedirs(os.path.join(config.bundle_dir, name))
    bundle.accept_license()

    assert bundle.list_local_installed() == [
        os.path.join(config.bundle_dir, "JLink_V788"),
        os.path.join(config.bundle_dir, "JLink_V794e"),
    ]


def test_license_persisted(bundle, config):
    assert bundle.license_accepted is None
    bundle.accept_license()
    assert os.path.isfile(os.path.join(config.bundle_dir, "license.json"))
    assert JlinkBundle("linux", "x86_64", config).license_accepted is True

    bundle.decline_license()
    assert JlinkBundle("linux", "x86_64", config).license_accepted is False


def test_corrupted_license_state(config):
    os.makedirs(config.bundle_dir)
    with open(os.path.join(config.bundle_dir, "license.json"), "w", encoding="utf-8") as f:
        f.write("{accepted")
    with pytest.raises(JlinkError, match="Corrupted license state file"):
        JlinkBundle("linux", "x86_64", config)


@pytest.mark.asyncio
async def test_install(bundle, config, bundle_archive):
    write_artifact(bundle, "7.94e", bundle_archive)
    bundle.set_jlink_version("7.94e")
    bundle.accept_license()

    await bundle.install()

    expected = os.path.join(config.bundle_dir, "JLink_V794e", "JLink_Linux_V794e_x86_64")
    assert bundle.get_jlink_path() == expected
    assert os.path.isfile(os.path.join(expected, "libjlinkarm.so"))
    assert bundle.show_license() == "SEGGER license"
    assert bundle.list_local_installed() == [os.path.join(config.bundle_dir, "JLink_V794e")]


@pytest.mark.asyncio
async def test_install_custom_path(bundle, bundle_archive, tmp_path):
    write_artifact(bundle, "7.94e", bundle_archive)
    bundle.set_jlink_version("V794e")
    bundle.accept_license()
    target = os.path.join(tmp_path, "tools", "jlink")

    await bundle.install(target)

    assert bundle.get_jlink_path() == os.path.join(target, "JLink_Linux_V794e_x86_64")


@pytest.mark.asyncio
async def test_install_requires_license(bundle, bundle_archive):
    write_artifact(bundle, "7.94e", bundle_archive)
    bundle.set_jlink_version("7.94e")
    with pytest.raises(JlinkLicenseError):
        await bundle.install()
    assert bundle.get_jlink_path() is None


@pytest.mark.asyncio
async def test_install_invalid_archive(bundle):
    write_artifact(bundle, "7.94e", b"this is not a tarball")
    bundle.set_jlink_version("7.94e")
    bundle.accept_license()
    with pytest.raises(JlinkInstallError, match="Cannot unpack"):
        await bundle.install()


@pytest.mark.asyncio
async def test_download_and_install(bundle, config, bundle_archive):
    half = len(bundle_archive) // 2
    bundle.session = FakeSession(
        FakeResponse(
            [bundle_archive[:half], bundle_archive[half:]],
            headers={"Content-Length": str(len(bundle_archive))},
        )
    )
    bundle.accept_license()
    reported = []

    await bundle.download_and_install("7.94e", reported.append)

    assert bundle.get_jlink_version() == "7.94e"
    assert bundle.get_jlink_path() == os.path.join(
        config.bundle_dir, "JLink_V794e", "JLink_Linux_V794e_x86_64"
    )
    assert reported[-1].percentage == 100
    _, url, _ = bundle.session.requests[0]
    assert url.endswith("/V794e/JLink_Linux_V794e_x86_64.tgz")


def make_tarball(members):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for info, content in members:
            tar.addfile(info, io.BytesIO(content) if content is not None else None)
    return buffer.getvalue()


def file_member(name, content):
    info = tarfile.TarInfo(name)
    info.size = len(content)
    return info, content


@pytest.mark.asyncio
async def test_install_rejects_path_outside_bundle(bundle, config, tmp_path):
    archive = make_tarball(
        [
            file_member("JLink_Linux_V794e_x86_64/libjlinkarm.so", b"\x7fELF"),
            file_member("../../escaped.txt", b"outside"),
        ]
    )
    write_artifact(bundle, "7.94e", archive)
    bundle.set_jlink_version("7.94e")
    bundle.accept_license()

    with pytest.raises(JlinkInstallError, match="Unsafe path"):
        await bundle.install()

    assert not os.path.exists(os.path.join(tmp_path, "escaped.txt"))
    assert not os.path.exists(os.path.join(config.bundle_dir, "escaped.txt"))
    assert not os.path.exists(os.path.join(config.bundle_dir, "JLink_V794e"))
    assert bundle.get_jlink_path() is None


@pytest.mark.asyncio
async def test_install_rejects_link_outside_bundle(bundle):
    link = tarfile.TarInfo("JLink_Linux_V794e_x86_64/etc")
    link.type = tarfile.SYMTYPE
    link.linkname = "../../../../etc"
    archive = make_tarball([(link, None)])
    write_artifact(bundle, "7.94e", archive)
    bundle.set_jlink_version("7.94e")
    bundle.accept_license()

    with pytest.raises(JlinkInstallError, match="Unsafe link"):
        await bundle.install()


@pytest.mark.asyncio
async def test_install_file_requires_version(bundle, bundle_archive):
    artifact = write_artifact(bundle, "7.94e", bundle_archive)
    with pytest.raises(JlinkError, match="No J-Link version selected"):
        await bundle._install_file(artifact)
