"""Shared test fixtures."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from pyrinth.core.dispatch import ApiResponse

USER_AGENT = "pyrinth-tests/1.0 (tests@example.com)"
TOKEN = "mrp_testtoken"
API = "https://api.modrinth.com/v2"

SODIUM_SHA1 = "795d4c12bffdb1b21eed5ff87c07ce5ca3c0dcbf"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep tests away from the real config directory and tokens."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("PYRINTH_TOKEN", raising=False)
    monkeypatch.delenv("MODRINTH_TOKEN", raising=False)
    return config_home


class FakeTransport:
    """Transport returning canned responses and recording requests."""

    def __init__(self, *responses: ApiResponse) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        self.requests.append(
            {
                "method": method,
                "url": url,
                "json": json,
                "content": content,
                "headers": dict(headers or {}),
            }
        )
        return self.responses.pop(0)

    async def aclose(self) -> None:
        self.closed = True


def _make_response(
    status_code: int = 200,
    body: Any = None,
    headers: Mapping[str, str] | None = None,
    url: str = f"{API}/test",
) -> ApiResponse:
    """Helper to build an ApiResponse with a JSON body."""
    content = b"" if body is None else json.dumps(body).encode()
    return ApiResponse(
        status_code=status_code, headers=dict(headers or {}), content=content, url=url
    )


@pytest.fixture
def make_response():
    """Return the ApiResponse builder."""
    return _make_response


@pytest.fixture
def fake_transport():
    """Return a factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def project_payload() -> dict:
    """Sample Modrinth project API response."""
    return {
        "id": "AANobbMI",
        "slug": "sodium",
        "title": "Sodium",
        "description": "A modern rendering engine for Minecraft",
        "body": "Long description",
        "categories": ["optimization"],
        "additional_categories": [],
        "client_side": "required",
        "server_side": "unsupported",
        "status": "approved",
        "requested_status": None,
        "issues_url": "https://github.com/CaffeineMC/sodium/issues",
        "source_url": "https://github.com/CaffeineMC/sodium",
        "wiki_url": "",
        "discord_url": None,
        "donation_urls": [
            {
                "id": "kofi",
                "platform": "Ko-fi",
                "url": "https://ko-fi.com/jellysquid_",
            }
        ],
        "project_type": "mod",
        "downloads": 12345678,
        "icon_url": "https://cdn.modrinth.com/data/AANobbMI/icon.png",
        "color": 8703084,
        "thread_id": "AANobbMI",
        "monetization_status": "monetized",
        "team": "4reLOAKe",
        "organization": None,
        "published": "2021-01-03T00:53:34.185936Z",
        "updated": "2024-12-01T10:00:00Z",
        "approved": "2021-01-03T00:53:34.185936Z",
        "queued": None,
        "followers": 25000,
        "license": {
            "id": "LicenseRef-Polyform-Shield-License-1.0.0",
            "name": "",
            "url": "https://polyformproject.org/licenses/shield/1.0.0/",
        },
        "versions": ["v1", "v2", "v3"],
        "game_versions": ["1.21.4"],
        "loaders": ["fabric", "quilt"],
        "gallery": [],
    }


@pytest.fixture
def version_payload() -> dict:
    """Sample Modrinth version API response."""
    return {
        "id": "xuWxRZPd",
        "project_id": "AANobbMI",
        "author_id": "TEZXhE2U",
        "name": "Sodium 0.6.0",
        "version_number": "0.6.0+mc1.21.4",
        "changelog": "Fixes",
        "dependencies": [
            {
                "version_id": None,
                "project_id": "P7dR8mSH",
                "file_name": None,
                "dependency_type": "optional",
            }
        ],
        "game_versions": ["1.21.4", "1.21.3"],
        "version_type": "release",
        "loaders": ["fabric", "quilt"],
        "featured": True,
        "status": "listed",
        "requested_status": None,
        "date_published": "2024-01-15T10:00:00Z",
        "downloads": 1000,
        "files": [
            {
                "hashes": {
                    "sha512": "abc123def456",
                    "sha1": SODIUM_SHA1,
                },
                "url": "https://cdn.modrinth.com/data/AANobbMI/versions/xuWxRZPd/sodium.jar",
                "filename": "sodium-fabric-0.6.0+mc1.21.4.jar",
                "primary": True,
                "size": 1234567,
                "file_type": None,
            }
        ],
    }


@pytest.fixture
def user_payload() -> dict:
    """Sample Modrinth user API response."""
    return {
        "id": "TEZXhE2U",
        "username": "jellysquid3",
        "name": None,
        "email": None,
        "bio": "Sodium developer",
        "payout_data": None,
        "github_id": 1234,
        "avatar_url": "https://avatars.githubusercontent.com/u/1234",
        "created": "2020-11-20T00:00:00Z",
        "role": "developer",
        "badges": 0,
    }


@pytest.fixture
def search_payload() -> dict:
    """Sample Modrinth search API response."""
    return {
        "hits": [
            {
                "project_id": "AANobbMI",
                "slug": "sodium",
                "title": "Sodium",
                "description": "A modern rendering engine",
                "author": "jellysquid3",
                "categories": ["optimization", "fabric"],
                "display_categories": ["optimization"],
                "client_side": "required",
                "server_side": "unsupported",
                "project_type": "mod",
                "downloads": 12345678,
                "follows": 25000,
                "icon_url": "",
                "versions": ["1.21.3", "1.21.4"],
                "date_created": "2021-01-03T00:53:34Z",
                "date_modified": "2024-12-01T10:00:00Z",
                "latest_version": "1.21.4",
                "license": "LicenseRef-Polyform-Shield-License-1.0.0",
                "gallery": [],
                "featured_gallery": None,
            }
        ],
        "offset": 0,
        "limit": 10,
        "total_hits": 1,
    }
