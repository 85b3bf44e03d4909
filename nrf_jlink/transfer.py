#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2026 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Streaming HTTP transfers with progress reporting."""

import logging
import os
from typing import Dict, Iterator, Optional

import requests

from .common import ProgressCallback, TransferProgress
from .errors import JlinkDownloadError, JlinkError, JlinkUploadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _remove_partial(path: str) -> None:
    if os.path.exists(path):
        logger.debug(f"Removing partial file {path}")
        os.remove(path)


def download_file(
    session: requests.Session,
    url: str,
    destination: str,
    progress: Optional[ProgressCallback] = None,
    timeout: int = 60,
    method: str = "GET",
    data: Optional[Dict[str, str]] = None,
) -> str:
    """Download file from URL.

    Data are written into ``<destination>.part`` first, the file is renamed when
    the transfer is complete.

    :param session: HTTP session to use
    :param url: Source URL
    :param destination: Path of the downloaded file
    :param progress: Optional callback receiving the transfer progress
    :param timeout: Timeout of the HTTP request in seconds
    :param method: HTTP method
    :param data: Optional form data sent with the request
    :return: Path of the downloaded file
    :raises JlinkDownloadError: The HTTP request failed
    """
    os.makedirs(os.path.dirname(os.path.abspath(destination)), exist_ok=True)
    partial = f"{destination}.part"
    logger.info(f"Downloading {url} into {destination}")
    try:
        with session.request(method, url, data=data, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            total = int(response.headers.get("Content-Length", 0)) or None
            transferred = 0
            with open(partial, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    transferred += len(chunk)
                    if progress:
                        progress(TransferProgress(transferred, total))
    except requests.RequestException as exc:
        _remove_partial(partial)
        raise JlinkDownloadError(f"Download of {url} failed: {exc}") from exc
    except Exception:
        _remove_partial(partial)
        raise
    os.replace(partial, destination)
    logger.debug(f"Downloaded {transferred} bytes from {url}")
    return destination


class _FileBody:
    """Upload body read in chunks.

    The length is known up front so requests sends ``Content-Length`` instead of
    chunked transfer encoding.
    """

    def __init__(self, path: str, progress: Optional[ProgressCallback] = None) -> None:
        self.path = path
        self.total = os.path.getsize(path)
        self.progress = progress

    def __len__(self) -> int:
        return self.total

    def __iter__(self) -> Iterator[bytes]:
        transferred = 0
        with open(self.path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                transferred += len(chunk)
                yield chunk
                if self.progress:
                    self.progress(TransferProgress(transferred, self.total))


def upload_file(
    session: requests.Session,
    url: str,
    source: str,
    headers: Optional[Dict[str, str]] = None,
    progress: Optional[ProgressCallback] = None,
    timeout: int = 60,
) -> requests.Response:
    """Upload file to URL using HTTP PUT.

    :param session: HTTP session to use
    :param url: Target URL
    :param source: Path of the file to upload
    :param headers: Additional HTTP headers
    :param progress: Optional callback receiving the transfer progress
    :param timeout: Timeout of the HTTP request in seconds
    :return: HTTP response
    :raises JlinkError: Source file does not exist
    :raises JlinkUploadError: The HTTP request failed
    """
    if not os.path.isfile(source):
        raise JlinkError(f"File to upload does not exist: {source}")
    logger.info(f"Uploading {source} to {url}")
    try:
        response = session.put(
            url,
            data=_FileBody(source, progress),
            headers=headers,
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise JlinkUploadError(f"Upload to {url} failed: {exc}") from exc
    return response
