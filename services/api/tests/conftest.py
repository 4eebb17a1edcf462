"""
Shared fixtures for the admin API tests.

Run with: pytest services/api/tests -v
"""
import base64
import json
import sys
import os
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from settings import Settings  # noqa: E402

OWNER = "acme"
REPO = "site"
BRANCH = "main"


def make_settings(config_dir, remote: bool = False, **overrides) -> Settings:
    """Settings that ignore the developer's environment and .env file."""
    values: Dict[str, Any] = {
        "config_directory": str(config_dir),
        "admin_username": "admin",
        "admin_password": "secret",
        "admin_credentials": "",
        "admin_base_path": "/admin",
        "github_token": "ghp_test" if remote else "",
        "github_owner": OWNER if remote else "",
        "github_repo": REPO if remote else "",
        "github_branch": BRANCH,
        "github_api_url": "https://api.github.com",
        "allowed_origins": "*",
        "max_body_bytes": 1024 * 1024,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def basic_auth(username: str, password: str) -> Dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


class FakeGitHub:
    """
    In-memory stand-in for the GitHub contents API.

    Files are keyed by repository path and hold (raw_text, sha). PUT follows
    GitHub's rules: updating an existing file needs the current sha.
    """

    def __init__(self):
        self.files: Dict[str, Tuple[str, str]] = {}
        self.requests: List[httpx.Request] = []
        self.get_status: Optional[int] = None
        self.put_status: Optional[int] = None
        self._sha_counter = 0

    def _next_sha(self) -> str:
        self._sha_counter += 1
        return f"sha{self._sha_counter:04d}"

    def seed(self, path: str, document: Any) -> str:
        sha = self._next_sha()
        self.files[path] = (json.dumps(document, indent=2), sha)
        return sha

    def seed_raw(self, path: str, text: str) -> str:
        sha = self._next_sha()
        self.files[path] = (text, sha)
        return sha

    def document(self, path: str) -> Any:
        return json.loads(self.files[path][0])

    @property
    def puts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT"]

    def _path(self, request: httpx.Request) -> str:
        prefix = f"/repos/{OWNER}/{REPO}/contents/"
        assert request.url.path.startswith(prefix), request.url.path
        return request.url.path[len(prefix):]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)

        if request.method == "GET":
            if self.get_status is not None:
                return httpx.Response(self.get_status, json={"message": "boom"})
            if path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            text, sha = self.files[path]
            encoded = base64.encodebytes(text.encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"path": path, "sha": sha, "content": encoded, "encoding": "base64"})

        if request.method == "PUT":
            if self.put_status is not None:
                return httpx.Response(self.put_status, json={"message": "forced failure"})
            body = json.loads(request.content)
            current = self.files.get(path)
            if current is not None:
                if "sha" not in body:
                    return httpx.Response(422, json={"message": "\"sha\" wasn't supplied."})
                if body["sha"] != current[1]:
                    return httpx.Response(409, json={"message": f"{path} does not match {body['sha']}"})
            text = base64.b64decode(body["content"]).decode("utf-8")
            sha = self._next_sha()
            self.files[path] = (text, sha)
            return httpx.Response(201 if current is None else 200, json={"content": {"path": path, "sha": sha}})

        return httpx.Response(405)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "config"


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return basic_auth("admin", "secret")
