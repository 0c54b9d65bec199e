from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import httpx

from .errors import NotFound, TransportError
from .path_handler import LocationKind, RepoLocation, classify_location, convert_blob_to_raw


DEFAULT_TIMEOUT = 30.0


class ContentFetcher:
    """Reads changelog text from the filesystem or over HTTP.

    Raises ``NotFound`` when the file is missing (local) or the server answers
    404, and ``TransportError`` for every other failure.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        workspace: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.workspace = Path(workspace or os.getenv("GITHUB_WORKSPACE") or os.getcwd())
        self._transport = transport

    async def fetch(self, location: Union[RepoLocation, str], token: Optional[str] = None) -> str:
        if isinstance(location, str):
            location = classify_location(location)
        if location.kind is LocationKind.LOCAL:
            return self.read_local(location.value)
        return await self.fetch_remote(convert_blob_to_raw(location.value), token)

    def read_local(self, file_path: str) -> str:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.workspace / path
        logging.info(f"Reading changelog from {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as e:
            raise NotFound(file_path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise TransportError(f"Error reading file {file_path}: {e}") from e
        logging.info(f"Successfully read changelog ({len(text)} chars)")
        return text

    async def fetch_remote(self, url: str, token: Optional[str] = None) -> str:
        logging.info(f"Fetching changelog from {url}")
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True, transport=self._transport
            ) as client:
                resp = await client.get(url, headers=headers)
                if resp.status_code == 401 and token:
                    # GitHub still accepts the older "token" scheme for some PATs
                    logging.debug("Bearer authentication rejected, retrying with token scheme")
                    headers["Authorization"] = f"token {token}"
                    resp = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Error fetching {url}: {e}") from e

        if resp.status_code == 404:
            raise NotFound(url)
        if resp.is_error:
            raise TransportError(
                f"Failed to fetch {url}: {resp.status_code} {resp.reason_phrase}"
            )
        logging.info(f"Successfully fetched changelog ({len(resp.text)} chars)")
        return resp.text
