from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlparse

import requests

from .errors import DownloadError
from .manifest import EmojiRequest

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60
CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ResolvedAsset:
    name: str
    local_path: str
    temporary: bool = False

    def cleanup(self) -> None:
        if not self.temporary:
            return
        try:
            os.remove(self.local_path)
        except OSError as e:
            logger.debug("could not remove %s: %s", self.local_path, e)


def is_remote(src: str) -> bool:
    return "://" in src


def url_extension(url: str) -> str:
    return os.path.splitext(urlparse(url).path)[1]


def fetch_to_local_file(url: str) -> str:
    tmp = tempfile.NamedTemporaryFile(prefix="emoji-", suffix=url_extension(url), delete=False)
    try:
        with tmp:
            with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        tmp.write(chunk)
    except (requests.RequestException, OSError) as e:
        try:
            os.remove(tmp.name)
        except OSError:
            pass
        raise DownloadError(url, e) from e
    return tmp.name


def resolve(request: EmojiRequest, fetch: Callable[[str], str] = fetch_to_local_file) -> ResolvedAsset:
    if is_remote(request.src):
        logger.info("downloading %s...", request.name)
        path = fetch(request.src)
        logger.info("downloaded  %s.", request.name)
        return ResolvedAsset(name=request.name, local_path=path, temporary=True)

    # no existence check: a missing file shows up as an upload failure
    logger.info("using local file for %s.", request.name)
    return ResolvedAsset(name=request.name, local_path=request.src)
