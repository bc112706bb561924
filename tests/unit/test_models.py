"""Tests for pyrinth.core.models."""

from datetime import UTC, datetime

import pytest
from pydantic import SecretStr, ValidationError

from pyrinth.core.models import (
    ClientConfig,
    DependencyType,
    GameVersion,
    ImageFileExt,
    LatestVersionBody,
    Notification,
    Project,
    ProjectStatus,
    ProjectSupportRange,
    ProjectType,
    ReportItemType,
    SearchResult,
    SortIndex,
    TeamMember,
    User,
    UserRole,
    Version,
    VersionType,
)


class TestProjectType:
    """Tests for ProjectType enum."""

    def test_project_type_values(self) -> None:
        """ProjectType enum has the API values."""
        assert ProjectType.MOD.value == "mod"
        assert ProjectType.SHADER.value == "shader"
        assert ProjectType.RESOURCEPACK.value == "resourcepack"
        assert ProjectType.DATAPACK.value == "datapack"
        assert ProjectType.PROJECT.value == "project"

    def test_project_type_is_str(self) -> None:
        """ProjectType members compare equal to strings."""
        assert ProjectType.MOD == "mod"


class TestSmallEnums:
    """Tests for the remaining enums."""

    def test_image_content_type(self) -> None:
        """Image extensions map to image MIME types."""
        assert ImageFileExt.PNG.content_type == "image/png"
        assert ImageFileExt.WEBP.content_type == "image/webp"

    def test_report_item_types_are_lowercase(self) -> None:
        """Report item types are serialized in lowercase."""
        assert [t.value for t in ReportItemType] == [
            "project",
            "user",
            "version",
            "unknown",
        ]

    def test_sort_index_values(self) -> None:
        """SortIndex covers every sort order of the search route."""
        assert {s.value for s in SortIndex} == {
            "relevance",
            "downloads",
            "follows",
            "newest",
            "updated",
        }


class TestClientConfig:
    """Tests for ClientConfig model."""

    def test_defaults(self) -> None:
        """Defaults point at the public v2 API."""
        # Arrange & Act
        config = ClientConfig(user_agent="app/1.0")

        # Assert
        assert config.base_url == "https://api.modrinth.com/"
        assert config.api_version == 2
        assert config.timeout == 30.0
        assert config.token is None
        assert not config.authenticated

    def test_api_base_url(self) -> None:
        """The versioned base always ends with a slash."""
        # Arrange & Act
        config = ClientConfig(
            user_agent="app", base_url="https://staging-api.modrinth.com", api_version=3
        )

        # Assert
        assert config.root_url == "https://staging-api.modrinth.com/"
        assert config.api_base_url == "https://staging-api.modrinth.com/v3/"

    def test_token_is_secret(self) -> None:
        """The token is hidden in reprs."""
        # Arrange & Act
        config = ClientConfig(user_agent="app", token=SecretStr("mrp_secret"))

        # Assert
        assert config.authenticated
        assert "mrp_secret" not in repr(config)
        assert config.token.get_secret_value() == "mrp_secret"

    def test_is_frozen(self) -> None:
        """ClientConfig cannot be changed after creation."""
        config = ClientConfig(user_agent="app")

        with pytest.raises(ValidationError):
            config.user_agent = "other"  # type: ignore[misc]


class TestProject:
    """Tests for Project model."""

    def test_from_api_response(self, project_payload: dict) -> None:
        """Project parses a full API response."""
        # Arrange & Act
        project = Project.model_validate(project_payload)

        # Assert
        assert project.id == "AANobbMI"
        assert project.slug == "sodium"
        assert project.project_type == ProjectType.MOD
        assert project.client_side == ProjectSupportRange.REQUIRED
        assert project.status == ProjectStatus.APPROVED
        assert project.published.tzinfo is not None
        assert project.donation_urls[0].platform == "Ko-fi"
        assert project.license is not None
        assert project.license.url is not None

    def test_empty_links_become_none(self, project_payload: dict) -> None:
        """Empty link strings are read as missing."""
        # Arrange
        project_payload["license"]["url"] = ""

        # Act
        project = Project.model_validate(project_payload)

        # Assert
        assert project.wiki_url is None
        assert project.license is not None
        assert project.license.url is None

    def test_missing_optional_fields(self, project_payload: dict) -> None:
        """Optional fields fall back to defaults."""
        # Arrange
        for key in ("body", "gallery", "loaders", "license", "color"):
            project_payload.pop(key)

        # Act
        project = Project.model_validate(project_payload)

        # Assert
        assert project.body == ""
        assert project.gallery == []
        assert project.license is None

    def test_missing_required_field_raises(self, project_payload: dict) -> None:
        """Required fields must be present."""
        # Arrange
        del project_payload["team"]

        # Act & Assert
        with pytest.raises(ValidationError):
            Project.model_validate(project_payload)

    def test_unknown_fields_are_ignored(self, project_payload: dict) -> None:
        """Fields added by newer API versions do not break decoding."""
        # Arrange
        project_payload["brand_new_field"] = 1

        # Act & Assert
        assert Project.model_validate(project_payload).id == "AANobbMI"


class TestVersion:
    """Tests for Version model."""

    def test_from_api_response(self, version_payload: dict) -> None:
        """Version parses a full API response."""
        # Arrange & Act
        version = Version.model_validate(version_payload)

        # Assert
        assert version.version_type == VersionType.RELEASE
        assert version.dependencies[0].dependency_type == DependencyType.OPTIONAL
        assert version.files[0].hashes.sha1 == version_payload["files"][0][
            "hashes"
        ]["sha1"]
        assert version.date_published == datetime(2024, 1, 15, 10, tzinfo=UTC)

    def test_extra_hashes_are_kept(self, version_payload: dict) -> None:
        """Unknown hash algorithms are kept as extras."""
        # Arrange
        version_payload["files"][0]["hashes"]["md5"] = "d41d8cd9"

        # Act
        version = Version.model_validate(version_payload)

        # Assert
        assert version.files[0].hashes.model_extra == {"md5": "d41d8cd9"}

    def test_primary_file(self, version_payload: dict) -> None:
        """primary_file prefers the file flagged as primary."""
        # Arrange
        secondary = {
            **version_payload["files"][0],
            "filename": "sources.jar",
            "primary": False,
        }
        version_payload["files"].insert(0, secondary)

        # Act
        version = Version.model_validate(version_payload)

        # Assert
        assert version.primary_file is not None
        assert version.primary_file.filename == "sodium-fabric-0.6.0+mc1.21.4.jar"

    def test_primary_file_falls_back_to_first(self, version_payload: dict) -> None:
        """Without a primary flag the first file is used."""
        # Arrange
        version_payload["files"][0]["primary"] = False

        # Act
        version = Version.model_validate(version_payload)

        # Assert
        assert version.primary_file == version.files[0]

    def test_primary_file_none_without_files(self, version_payload: dict) -> None:
        """A version without files has no primary file."""
        version_payload["files"] = []

        assert Version.model_validate(version_payload).primary_file is None


class TestUserAndTeams:
    """Tests for User, TeamMember and Notification models."""

    def test_user(self, user_payload: dict) -> None:
        """User parses an API response."""
        # Arrange & Act
        user = User.model_validate(user_payload)

        # Assert
        assert user.username == "jellysquid3"
        assert user.role == UserRole.DEVELOPER
        assert user.payout_data is None

    def test_team_member(self, user_payload: dict) -> None:
        """TeamMember embeds the user."""
        # Arrange
        payload = {
            "team_id": "4reLOAKe",
            "user": user_payload,
            "role": "Lead developer",
            "permissions": 1023,
            "accepted": True,
            "payouts_split": 100.0,
            "ordering": 0,
        }

        # Act
        member = TeamMember.model_validate(payload)

        # Assert
        assert member.user.id == "TEZXhE2U"
        assert member.accepted

    def test_notification_type_alias(self) -> None:
        """The "type" key is exposed as notification_type."""
        # Arrange
        payload = {
            "id": "UJZAarsd",
            "user_id": "TEZXhE2U",
            "type": "team_invite",
            "title": "Invite",
            "text": "You were invited",
            "link": "/project/sodium",
            "read": False,
            "created": "2024-01-01T00:00:00Z",
            "actions": [
                {"title": "Accept", "action_route": ["POST", "team/4reLOAKe/join"]}
            ],
        }

        # Act
        notification = Notification.model_validate(payload)

        # Assert
        assert notification.notification_type is not None
        assert notification.notification_type.value == "team_invite"
        assert notification.actions[0].action_route == ("POST", "team/4reLOAKe/join")


class TestTags:
    """Tests for tag models."""

    def test_game_version(self) -> None:
        """GameVersion parses a tag entry."""
        # Arrange & Act
        tag = GameVersion.model_validate(
            {
                "version": "1.21.4",
                "version_type": "release",
                "date": "2024-12-03T10:24:17Z",
                "major": False,
            }
        )

        # Assert
        assert tag.version == "1.21.4"
        assert not tag.major


class TestSearchResult:
    """Tests for SearchResult model."""

    def test_from_api_response(self, search_payload: dict) -> None:
        """SearchResult parses hits and paging."""
        # Arrange & Act
        result = SearchResult.model_validate(search_payload)

        # Assert
        assert result.total_hits == 1
        hit = result.hits[0]
        assert hit.slug == "sodium"
        assert hit.icon_url is None
        assert hit.game_versions == ["1.21.3", "1.21.4"]
        assert hit.project_type == ProjectType.MOD

    def test_empty_result(self) -> None:
        """A search without hits is valid."""
        # Arrange & Act
        result = SearchResult.model_validate(
            {"hits": [], "offset": 0, "limit": 10, "total_hits": 0}
        )

        # Assert
        assert result.hits == []


class TestRequestBodies:
    """Tests for request body models."""

    def test_latest_version_body_dump(self) -> None:
        """LatestVersionBody dumps to the JSON body of the update routes."""
        # Arrange
        body = LatestVersionBody(loaders=["fabric"], game_versions=["1.21.4"])

        # Act & Assert
        assert body.model_dump(mode="json") == {
            "loaders": ["fabric"],
            "game_versions": ["1.21.4"],
        }
