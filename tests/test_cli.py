#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests for the nrf-jlink command line."""

import os

import pytest
from click.testing import CliRunner

from nrf_jlink import cli
from nrf_jlink.config import Environment
from nrf_jlink.jlink import Jlink
from nrf_jlink.jlink_abstract import LICENSE_URL
from nrf_jlink.jlink_bundle import JlinkBundle
from tests.fakes import FakeResponse, FakeSession


@pytest.fixture
def jlink(config):
    return Jlink("bundle", "linux", "x86_64", config=config, environment=Environment({}))


def invoke(args, obj=None):
    return CliRunner().invoke(cli.main, args, obj=obj)


def test_command_line_interface():
    help_result = invoke(["--help"])
    assert help_result.exit_code == 0
    assert "Usage: nrf-jlink" in help_result.output
    for command in ["list-local", "list-remote", "download", "install", "license", "upload"]:
        assert command in help_result.output


def test_invalid_install_type():
    result = invoke(["--install-type", "zip", "list-local"])
    assert result.exit_code == 2


def test_options_create_manager(monkeypatch, config, tmp_path):
    env_file = os.path.join(tmp_path, "jlink.env")
    with open(env_file, "w", encoding="utf-8") as f:
        f.write("NRF_JLINK_TIMEOUT=5\n")
    loaded = []

    def load(env_file=None):
        loaded.append(env_file)
        return config

    monkeypatch.setattr(cli.JlinkConfig, "load", load)

    result = invoke(["-t", "bundle", "-e", env_file, "list-local"])

    assert result.exit_code == 0, result.output
    assert loaded == [env_file]
    assert "No J-Link installation found." in result.output


def test_list_local(jlink, config):
    os.makedirs(os.path.join(config.bundle_dir, "JLink_V794e"))
    result = invoke(["list-local"], jlink)
    assert result.exit_code == 0
    assert os.path.join(config.bundle_dir, "JLink_V794e") in result.output


def test_list_remote(jlink):
    jlink.jlink.session = FakeSession(
        FakeResponse(
            json_data={
                "files": [
                    {"uri": "/V794e/JLink_Linux_V794e_x86_64.tgz", "size": 90},
                    {"uri": "/V794e/JLink_Linux_V794e_x86_64.deb", "size": 100},
                ]
            }
        )
    )
    result = invoke(["list-remote"], jlink)
    assert result.exit_code == 0, result.output
    assert "7.94e" in result.output
    assert "JLink_Linux_V794e_x86_64.tgz" in result.output
    assert "JLink_Linux_V794e_x86_64.deb" not in result.output


def test_list_remote_failure(jlink):
    jlink.jlink.session = FakeSession(FakeResponse(status_code=503))
    result = invoke(["list-remote"], jlink)
    assert result.exit_code == 1
    assert "ERROR: Listing of J-Link versions failed: 503" in result.output
    assert "SPSDK:" not in result.output


def test_license_commands(jlink, config):
    result = invoke(["license", "accept"], jlink)
    assert result.exit_code == 0
    assert "J-Link license accepted." in result.output
    assert JlinkBundle("linux", "x86_64", config).license_accepted is True

    result = invoke(["license", "decline"], jlink)
    assert result.exit_code == 0
    assert "J-Link license declined." in result.output
    assert JlinkBundle("linux", "x86_64", config).license_accepted is False

    result = invoke(["license", "show"], jlink)
    assert result.exit_code == 0
    assert LICENSE_URL in result.output


def test_install_without_version(jlink):
    result = invoke(["install", "--accept-license"], jlink)
    assert result.exit_code == 1
    assert "No J-Link version selected" in result.output


def test_install(jlink, bundle_archive):
    artifact = jlink.jlink.artifact_path("7.94e")
    os.makedirs(os.path.dirname(artifact))
    with open(artifact, "wb") as f:
        f.write(bundle_archive)

    result = invoke(["install", "-j", "7.94e", "--accept-license"], jlink)

    assert result.exit_code == 0, result.output
    assert "J-Link installed." in result.output
    assert jlink.get_jlink_path().endswith("JLink_Linux_V794e_x86_64")


def test_download_and_install_requires_license(jlink):
    jlink.jlink.session = FakeSession(FakeResponse([b"data"]))
    result = invoke(["download-and-install", "7.94e"], jlink)
    assert result.exit_code == 1
    assert "license must be accepted" in result.output
    assert jlink.jlink.session.requests == []


def test_download(jlink, config):
    jlink.jlink.session = FakeSession(FakeResponse([b"data"], headers={"Content-Length": "4"}))
    result = invoke(["download", "V794e"], jlink)
    assert result.exit_code == 0, result.output
    assert os.path.join(config.download_dir, "JLink_Linux_V794e_x86_64.tgz") in result.output


def test_upload_without_token(jlink, tmp_path):
    source = os.path.join(tmp_path, "JLink_Linux_V794e_x86_64.tgz")
    with open(source, "wb") as f:
        f.write(b"data")
    result = invoke(["upload", source, "7.94e"], jlink)
    assert result.exit_code == 1
    assert "NRF_JLINK_ARTIFACTORY_TOKEN" in result.output
