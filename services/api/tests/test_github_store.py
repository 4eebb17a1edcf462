"""
Tests for the GitHub contents-API store, against an in-memory fake.

Run with: pytest tests/test_github_store.py -v
"""
import asyncio
import base64
import json

import httpx
import pytest

from adapters.github import GitHubConfig, GitHubConfigStore, encode_github_path
from core.errors import (
    ConfigParseError,
    RemoteReadError,
    RemoteUnavailableError,
    RemoteWriteError,
)
from core.page_keys import PageKey
from conftest import BRANCH, OWNER, REPO

FILE_PATHS = {
    "home": "public/config/home.json",
    "services": "public/config/services.json",
    "products": "public/config/products.json",
    "get-started": "public/config/get-started.json",
    "contact": "public/config/contact.json",
}


def make_store(transport, **overrides) -> GitHubConfigStore:
    values = dict(token="ghp_test", owner=OWNER, repo=REPO, branch=BRANCH, file_paths=FILE_PATHS)
    values.update(overrides)
    return GitHubConfigStore(GitHubConfig(**values), transport=transport)


class TestRead:

    def test_reads_and_decodes(self, github):
        github.seed("public/config/home.json", {"title": "Welcome"})
        store = make_store(github.transport())
        assert asyncio.run(store.read(PageKey.HOME)) == {"title": "Welcome"}

        request = github.requests[0]
        assert request.method == "GET"
        assert request.url.params["ref"] == "main"
        assert request.headers["Authorization"] == "Bearer ghp_test"
        assert request.headers["Accept"] == "application/vnd.github+json"

    def test_uses_configured_branch(self, github):
        github.seed("public/config/home.json", {})
        store = make_store(github.transport(), branch="staging")
        asyncio.run(store.read(PageKey.HOME))
        assert github.requests[0].url.params["ref"] == "staging"

    def test_not_configured(self, github):
        store = make_store(github.transport(), token="")
        with pytest.raises(RemoteUnavailableError):
            asyncio.run(store.read(PageKey.HOME))
        assert github.requests == []

    def test_missing_file(self, github):
        store = make_store(github.transport())
        with pytest.raises(RemoteReadError) as exc:
            asyncio.run(store.read(PageKey.CONTACT))
        assert exc.value.status_code == 404
        assert "404" in str(exc.value)

    def test_invalid_json_content(self, github):
        github.seed_raw("public/config/home.json", "{nope")
        store = make_store(github.transport())
        with pytest.raises(ConfigParseError):
            asyncio.run(store.read(PageKey.HOME))

    def test_response_without_content(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[{"name": "dir"}]))
        store = make_store(transport)
        with pytest.raises(RemoteReadError):
            asyncio.run(store.read(PageKey.HOME))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(httpx.MockTransport(handler))
        with pytest.raises(RemoteReadError):
            asyncio.run(store.read(PageKey.HOME))


class TestWrite:

    def test_creates_new_file_without_sha(self, github):
        store = make_store(github.transport())
        asyncio.run(store.write(PageKey.SERVICES, {"items": [1, 2]}))

        assert github.document("public/config/services.json") == {"items": [1, 2]}
        body = json.loads(github.puts[0].content)
        assert "sha" not in body
        assert body["branch"] == "main"
        assert body["message"] == "Update services config"
        assert base64.b64decode(body["content"]).decode("utf-8") == json.dumps({"items": [1, 2]}, indent=2)

    def test_updates_existing_file_with_sha(self, github):
        sha = github.seed("public/config/home.json", {"v": 1})
        store = make_store(github.transport())
        asyncio.run(store.write(PageKey.HOME, {"v": 2}, message="Tweak hero"))

        body = json.loads(github.puts[0].content)
        assert body["sha"] == sha
        assert body["message"] == "Tweak hero"
        assert github.document("public/config/home.json") == {"v": 2}

    def test_get_before_put(self, github):
        store = make_store(github.transport())
        asyncio.run(store.write(PageKey.HOME, {}))
        assert [r.method for r in github.requests] == ["GET", "PUT"]

    def test_conflict_surfaces(self, github):
        github.seed("public/config/home.json", {"v": 1})

        def racing_handler(request):
            response = github.handler(request)
            if request.method == "GET":
                # Someone else commits between our GET and PUT
                github.seed("public/config/home.json", {"v": "theirs"})
            return response

        store = make_store(httpx.MockTransport(racing_handler))
        with pytest.raises(RemoteWriteError) as exc:
            asyncio.run(store.write(PageKey.HOME, {"v": "ours"}))

        assert exc.value.status_code == 409
        assert "does not match" in exc.value.body
        assert github.document("public/config/home.json") == {"v": "theirs"}

    def test_put_failure_carries_status_and_body(self, github):
        github.put_status = 403
        store = make_store(github.transport())
        with pytest.raises(RemoteWriteError) as exc:
            asyncio.run(store.write(PageKey.HOME, {}))
        assert exc.value.status_code == 403
        assert "forced failure" in exc.value.body
        assert str(exc.value).startswith("GitHub commit failed: 403")

    def test_sha_lookup_error_tolerated(self, github):
        github.get_status = 500
        store = make_store(github.transport())
        asyncio.run(store.write(PageKey.PRODUCTS, {"p": 1}))
        assert "sha" not in json.loads(github.puts[0].content)

    def test_not_configured(self, github):
        store = make_store(github.transport(), owner="")
        with pytest.raises(RemoteUnavailableError):
            asyncio.run(store.write(PageKey.HOME, {}))
        assert github.requests == []

    def test_non_finite_number_rejected(self, github):
        store = make_store(github.transport())
        with pytest.raises(ConfigParseError):
            asyncio.run(store.write(PageKey.PRODUCTS, {"price": float("nan")}))
        assert github.requests == []

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        store = make_store(httpx.MockTransport(handler))
        with pytest.raises(RemoteWriteError):
            asyncio.run(store.write(PageKey.HOME, {}))


class TestPaths:

    def test_contents_url(self, github):
        store = make_store(github.transport())
        assert store.contents_url(PageKey.GET_STARTED) == (
            "https://api.github.com/repos/acme/site/contents/public/config/get-started.json"
        )

    def test_segments_are_encoded(self):
        assert encode_github_path("site config/ü.json") == "site%20config/%C3%BC.json"

    def test_missing_path_mapping(self, github):
        store = make_store(github.transport(), file_paths={"home": "home.json"})
        with pytest.raises(RemoteUnavailableError):
            asyncio.run(store.read(PageKey.CONTACT))
