"""
GitHub contents-API storage for page config documents.

Reads decode the base64 `content` field of
GET /repos/{owner}/{repo}/contents/{path}?ref={branch}.
Writes look up the current blob sha first and send it with the PUT, so
GitHub rejects the commit if the file changed in between.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from core.errors import (
    ConfigParseError,
    RemoteReadError,
    RemoteUnavailableError,
    RemoteWriteError,
)
from core.page_keys import PageKey

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "site-config-admin/1.0"


@dataclass
class GitHubConfig:
    token: str
    owner: str
    repo: str
    branch: str = "main"
    api_url: str = "https://api.github.com"
    file_paths: Dict[str, str] = field(default_factory=dict)

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.owner and self.repo)


def encode_github_path(path: str) -> str:
    """Percent-encode each segment of a repository path, keeping the slashes."""
    return "/".join(urllib.parse.quote(segment, safe="") for segment in path.split("/"))


class GitHubConfigStore:
    """
    Config store backed by a GitHub repository.

    No timeouts or retries are added here; httpx defaults apply and the
    first failure is reported.
    """

    def __init__(
        self,
        config: GitHubConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        # Tests pass an httpx.MockTransport here
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self._headers(), transport=self._transport)

    def contents_url(self, page_key: PageKey) -> str:
        path = self.config.file_paths.get(page_key.value)
        if not path:
            raise RemoteUnavailableError(f"No GitHub path configured for {page_key.value}")
        base = self.config.api_url.rstrip("/")
        return (
            f"{base}/repos/{self.config.owner}/{self.config.repo}"
            f"/contents/{encode_github_path(path)}"
        )

    async def read(self, page_key: PageKey) -> Any:
        if not self.is_configured:
            raise RemoteUnavailableError("GitHub variables missing")

        url = self.contents_url(page_key)
        try:
            async with self._client() as client:
                response = await client.get(url, params={"ref": self.config.branch})
        except httpx.RequestError as e:
            raise RemoteReadError(f"GitHub read failed: {e}") from e

        if not response.is_success:
            raise RemoteReadError(
                f"GitHub read failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteReadError(
                "GitHub read failed: response is not JSON",
                status_code=response.status_code,
            ) from e

        encoded = body.get("content") if isinstance(body, dict) else None
        if not isinstance(encoded, str):
            raise RemoteReadError(
                "GitHub read failed: response has no file content",
                status_code=response.status_code,
            )

        try:
            decoded = base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ConfigParseError(f"GitHub content for {page_key.value} is not valid base64 text: {e}") from e

        try:
            return json.loads(decoded)
        except json.JSONDecodeError as e:
            raise ConfigParseError(f"Invalid JSON in GitHub {page_key.value} config: {e}") from e

    async def _current_sha(self, client: httpx.AsyncClient, url: str) -> Optional[str]:
        """
        Fetch the blob sha of the file on the branch.

        Any non-success answer means there is nothing to overwrite yet;
        404 is the expected case for a brand-new file.
        """
        response = await client.get(url, params={"ref": self.config.branch})
        if not response.is_success:
            if response.status_code != 404:
                logger.warning(
                    "GitHub sha lookup returned %s for %s; committing without sha",
                    response.status_code,
                    url,
                )
            return None

        try:
            data = response.json()
        except ValueError:
            return None
        sha = data.get("sha") if isinstance(data, dict) else None
        return sha if isinstance(sha, str) else None

    async def write(
        self,
        page_key: PageKey,
        document: Any,
        message: Optional[str] = None,
    ) -> None:
        if not self.is_configured:
            raise RemoteUnavailableError("GitHub environment variables missing")

        url = self.contents_url(page_key)
        try:
            content = json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False).encode("utf-8")
        except ValueError as e:
            raise ConfigParseError(f"Refusing to commit non-JSON value: {e}") from e
        payload: Dict[str, Any] = {
            "message": message or f"Update {page_key.value} config",
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.config.branch,
        }

        try:
            async with self._client() as client:
                sha = await self._current_sha(client, url)
                if sha:
                    payload["sha"] = sha
                response = await client.put(url, json=payload)
        except httpx.RequestError as e:
            raise RemoteWriteError(f"GitHub commit failed: {e}") from e

        if not response.is_success:
            text = response.text
            raise RemoteWriteError(
                f"GitHub commit failed: {response.status_code} {text}",
                status_code=response.status_code,
                body=text,
            )

        logger.info(
            "Committed %s config to %s/%s@%s",
            page_key.value,
            self.config.owner,
            self.config.repo,
            self.config.branch,
        )
