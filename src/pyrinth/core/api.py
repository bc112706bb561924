"""Modrinth API client."""

import hashlib
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Self

import httpx
from pydantic import SecretStr

from pyrinth.core.config import DEFAULT_USER_AGENT
from pyrinth.core.dispatch import Dispatcher, HttpxTransport, Transport
from pyrinth.core.exceptions import AuthenticationRequiredError, HashMismatchError
from pyrinth.core.facets import Facet, FacetBuilder
from pyrinth.core.models import (
    Category,
    ClientConfig,
    DonationPlatform,
    EditMultipleProjectsBody,
    GameVersion,
    HashAlgorithm,
    ImageFileExt,
    LatestVersionBody,
    LicenseTag,
    LoaderTag,
    Notification,
    Project,
    ProjectDependencies,
    Record,
    Report,
    ReportSubmission,
    RequestedProjectStatus,
    RequestedVersionStatus,
    SearchResult,
    SortIndex,
    Statistics,
    TeamMember,
    User,
    Version,
    VersionFile,
    Welcome,
)
from pyrinth.core.urls import join_all, with_query, with_query_json
from pyrinth.core.validation import check_id_slug, check_sha1_hash

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 100
MAX_RANDOM_COUNT = 100

Facets = FacetBuilder | Sequence[Sequence[Facet | str]]


class _ProjectCheck(Record):
    id: str


def _facets_to_lists(facets: Facets) -> list[list[str]]:
    if isinstance(facets, FacetBuilder):
        return facets.build()
    return [[str(facet) for facet in clause] for clause in facets]


def _as_utc(time: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if time.tzinfo is None:
        return time.replace(tzinfo=UTC)
    return time.astimezone(UTC)


class ModrinthClient:
    """Async client for the Modrinth API.

    The configuration is fixed at construction, so one client can be shared
    by concurrent tasks. Methods marked as requiring authentication raise
    AuthenticationRequiredError before any request when no token is set.

    Example:
        async with ModrinthClient("my-app/1.0 (me@example.com)") as client:
            sodium = await client.get_project("sodium")
    """

    def __init__(
        self,
        user_agent: str | None = None,
        token: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            user_agent: User-Agent header; see config.build_user_agent
            token: Personal access token for authenticated routes
            config: Full configuration. user_agent and token, when given,
                override the values it carries.
            transport: Optional transport for dependency injection.
                It is not closed by the client.
        """
        if config is None:
            config = ClientConfig(user_agent=user_agent or DEFAULT_USER_AGENT)
        updates: dict[str, Any] = {}
        if user_agent is not None:
            updates["user_agent"] = user_agent
        if token is not None:
            updates["token"] = SecretStr(token)
        if updates:
            config = config.model_copy(update=updates)
        self._config = config

        self._owns_transport = transport is None
        if transport is None:
            transport = HttpxTransport(httpx.AsyncClient(timeout=config.timeout))
        self._dispatcher = Dispatcher(
            transport,
            api_base_url=config.api_base_url,
            user_agent=config.user_agent,
            token=config.token.get_secret_value() if config.token else None,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def authenticated(self) -> bool:
        """Whether requests carry an Authorization header."""
        return self._config.authenticated

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._dispatcher.transport.aclose()

    def _url(self, *segments: str) -> httpx.URL:
        return join_all(self._config.api_base_url, segments)

    def _require_auth(self, operation: str) -> None:
        if not self.authenticated:
            raise AuthenticationRequiredError(operation)

    # --- Projects ---

    async def get_project(self, project_id: str) -> Project:
        """Get a project by ID or slug.

        Args:
            project_id: Project ID or slug (e.g., "AANobbMI" or "sodium")

        Returns:
            Project instance

        Raises:
            InvalidIDError: If project_id is malformed
            NotFoundError: If project doesn't exist
            APIError: For other API errors
        """
        check_id_slug(project_id)
        return await self._dispatcher.send_json(
            "GET", self._url("project", project_id), Project
        )

    async def get_multiple_projects(self, project_ids: Sequence[str]) -> list[Project]:
        """Get several projects in one request.

        Unknown IDs are silently left out of the result by the server.
        """
        check_id_slug(project_ids)
        url = with_query_json(self._url("projects"), "ids", list(project_ids))
        return await self._dispatcher.send_json("GET", url, list[Project])

    async def delete_project(self, project_id: str) -> None:
        """Delete a project. Requires authentication."""
        self._require_auth("delete_project")
        check_id_slug(project_id)
        await self._dispatcher.send("DELETE", self._url("project", project_id))

    async def edit_multiple_projects(
        self, project_ids: Sequence[str], edits: EditMultipleProjectsBody
    ) -> None:
        """Apply edits to every project in project_ids. Requires authentication."""
        self._require_auth("edit_multiple_projects")
        check_id_slug(project_ids)
        url = with_query_json(self._url("projects"), "ids", list(project_ids))
        await self._dispatcher.send(
            "PATCH", url, json=edits.model_dump(mode="json", exclude_none=True)
        )

    async def get_random_projects(self, count: int) -> list[Project]:
        """Get up to count random projects.

        The server may return fewer projects than requested.

        Raises:
            ValueError: If count is outside 1..100
        """
        if not 1 <= count <= MAX_RANDOM_COUNT:
            raise ValueError(f"count must be between 1 and {MAX_RANDOM_COUNT}")
        url = with_query(self._url("projects_random"), "count", count)
        return await self._dispatcher.send_json("GET", url, list[Project])

    async def check_validity(self, project_id: str) -> str:
        """Check that an ID or slug refers to a project.

        Returns:
            The project's stable ID

        Raises:
            NotFoundError: If no such project exists
        """
        check_id_slug(project_id)
        result = await self._dispatcher.send_json(
            "GET", self._url("project", project_id, "check"), _ProjectCheck
        )
        return result.id

    async def get_project_dependencies(self, project_id: str) -> ProjectDependencies:
        """Get every project and version the project depends on."""
        check_id_slug(project_id)
        return await self._dispatcher.send_json(
            "GET",
            self._url("project", project_id, "dependencies"),
            ProjectDependencies,
        )

    async def change_project_icon(
        self, project_id: str, image: bytes, ext: ImageFileExt
    ) -> None:
        """Replace the project's icon. Requires authentication.

        Args:
            project_id: Project ID or slug
            image: Raw image data
            ext: File extension of image
        """
        self._require_auth("change_project_icon")
        check_id_slug(project_id)
        url = with_query(self._url("project", project_id, "icon"), "ext", ext)
        await self._dispatcher.send(
            "PATCH", url, content=image, headers={"Content-Type": ext.content_type}
        )

    async def delete_project_icon(self, project_id: str) -> None:
        """Remove the project's icon. Requires authentication."""
        self._require_auth("delete_project_icon")
        check_id_slug(project_id)
        await self._dispatcher.send(
            "DELETE", self._url("project", project_id, "icon")
        )

    async def add_gallery_image(
        self,
        project_id: str,
        image: bytes,
        ext: ImageFileExt,
        featured: bool,
        title: str | None = None,
        description: str | None = None,
        ordering: int | None = None,
    ) -> None:
        """Upload an image to the project's gallery. Requires authentication.

        The image may be at most 5 MiB.

        Args:
            project_id: Project ID or slug
            image: Raw image data
            ext: File extension of image
            featured: Whether the image is the featured gallery image
            title: Optional title
            description: Optional description
            ordering: Optional sort position within the gallery
        """
        self._require_auth("add_gallery_image")
        check_id_slug(project_id)
        url = self._url("project", project_id, "gallery")
        url = with_query(url, "ext", ext)
        url = with_query(url, "featured", featured)
        if title is not None:
            url = with_query(url, "title", title)
        if description is not None:
            url = with_query(url, "description", description)
        if ordering is not None:
            url = with_query(url, "ordering", ordering)
        await self._dispatcher.send(
            "POST", url, content=image, headers={"Content-Type": ext.content_type}
        )

    async def delete_gallery_image(self, project_id: str, image_url: str) -> None:
        """Remove the gallery image at image_url. Requires authentication."""
        self._require_auth("delete_gallery_image")
        check_id_slug(project_id)
        url = with_query(self._url("project", project_id, "gallery"), "url", image_url)
        await self._dispatcher.send("DELETE", url)

    async def follow(self, project_id: str) -> None:
        """Follow a project. Requires authentication."""
        self._require_auth("follow")
        check_id_slug(project_id)
        await self._dispatcher.send("POST", self._url("project", project_id, "follow"))

    async def unfollow(self, project_id: str) -> None:
        """Unfollow a project. Requires authentication."""
        self._require_auth("unfollow")
        check_id_slug(project_id)
        await self._dispatcher.send(
            "DELETE", self._url("project", project_id, "follow")
        )

    async def schedule_project(
        self,
        project_id: str,
        time: datetime,
        requested_status: RequestedProjectStatus,
    ) -> None:
        """Schedule a status change of a project. Requires authentication.

        Args:
            project_id: Project ID or slug
            time: When the change takes effect; naive values are read as UTC
            requested_status: Status to switch to
        """
        self._require_auth("schedule_project")
        check_id_slug(project_id)
        await self._dispatcher.send(
            "POST",
            self._url("project", project_id, "schedule"),
            json={
                "time": _as_utc(time).isoformat(),
                "requested_status": requested_status.value,
            },
        )

    # --- Versions ---

    async def list_versions(
        self,
        project_id: str,
        loaders: Sequence[str] | None = None,
        game_versions: Sequence[str] | None = None,
        featured: bool | None = None,
    ) -> list[Version]:
        """Get the versions of a project, newest first.

        Args:
            project_id: Project ID or slug
            loaders: Only versions supporting one of these loaders
            game_versions: Only versions supporting one of these game versions
            featured: Only featured (True) or non-featured (False) versions

        Returns:
            List of Version instances

        Raises:
            NotFoundError: If project doesn't exist
        """
        check_id_slug(project_id)
        url = self._url("project", project_id, "version")
        if loaders is not None:
            url = with_query_json(url, "loaders", list(loaders))
        if game_versions is not None:
            url = with_query_json(url, "game_versions", list(game_versions))
        if featured is not None:
            url = with_query_json(url, "featured", featured)
        return await self._dispatcher.send_json("GET", url, list[Version])

    async def get_version(self, version_id: str) -> Version:
        check_id_slug(version_id)
        return await self._dispatcher.send_json(
            "GET", self._url("version", version_id), Version
        )

    async def get_multiple_versions(self, version_ids: Sequence[str]) -> list[Version]:
        check_id_slug(version_ids)
        url = with_query_json(self._url("versions"), "ids", list(version_ids))
        return await self._dispatcher.send_json("GET", url, list[Version])

    async def delete_version(self, version_id: str) -> None:
        """Delete a version. Requires authentication."""
        self._require_auth("delete_version")
        check_id_slug(version_id)
        await self._dispatcher.send("DELETE", self._url("version", version_id))

    async def schedule_version(
        self,
        version_id: str,
        time: datetime,
        requested_status: RequestedVersionStatus,
    ) -> None:
        """Schedule a status change of a version. Requires authentication."""
        self._require_auth("schedule_version")
        check_id_slug(version_id)
        await self._dispatcher.send(
            "POST",
            self._url("version", version_id, "schedule"),
            json={
                "time": _as_utc(time).isoformat(),
                "requested_status": requested_status.value,
            },
        )

    # --- Version files ---

    async def get_version_from_hash(self, sha1: str) -> Version:
        """Get the version that contains the file with this SHA1 hash.

        Raises:
            InvalidHashError: If sha1 is not 40 lowercase hex characters
            NotFoundError: If no file has this hash
        """
        check_sha1_hash(sha1)
        return await self._dispatcher.send_json(
            "GET", self._url("version_file", sha1), Version
        )

    async def delete_version_file_from_hash(
        self, sha1: str, version_id: str | None = None
    ) -> None:
        """Delete the file with this hash. Requires authentication.

        Args:
            sha1: SHA1 hash of the file
            version_id: Version to delete from, when several files share the hash
        """
        self._require_auth("delete_version_file_from_hash")
        check_sha1_hash(sha1)
        url = self._url("version_file", sha1)
        if version_id is not None:
            check_id_slug(version_id)
            url = with_query(url, "version_id", version_id)
        await self._dispatcher.send("DELETE", url)

    async def get_versions_from_hashes(
        self, hashes: Sequence[str]
    ) -> dict[str, Version]:
        """Get the versions of several files at once.

        Returns:
            Mapping of hash to Version; unknown hashes are missing
        """
        check_sha1_hash(hashes)
        return await self._dispatcher.send_json(
            "POST",
            self._url("version_files"),
            dict[str, Version],
            json={"hashes": list(hashes), "algorithm": HashAlgorithm.SHA1.value},
        )

    async def latest_version_from_hash(
        self, sha1: str, filters: LatestVersionBody
    ) -> Version:
        """Get the newest version of the file's project matching filters."""
        check_sha1_hash(sha1)
        url = with_query(
            self._url("version_file", sha1, "update"), "algorithm", HashAlgorithm.SHA1
        )
        return await self._dispatcher.send_json(
            "POST", url, Version, json=filters.model_dump(mode="json")
        )

    async def latest_versions_from_hashes(
        self, hashes: Sequence[str], filters: LatestVersionBody
    ) -> dict[str, Version]:
        """Bulk form of latest_version_from_hash."""
        check_sha1_hash(hashes)
        return await self._dispatcher.send_json(
            "POST",
            self._url("version_files", "update"),
            dict[str, Version],
            json={
                "hashes": list(hashes),
                "algorithm": HashAlgorithm.SHA1.value,
                **filters.model_dump(mode="json"),
            },
        )

    async def download_version_file(self, file: VersionFile) -> bytes:
        """Download a version file and verify its SHA1 hash.

        The Authorization header is not sent to the file host.

        Returns:
            The file contents

        Raises:
            HashMismatchError: If the contents do not match file.hashes.sha1
        """
        response = await self._dispatcher.send("GET", file.url, include_auth=False)
        actual = hashlib.sha1(response.content).hexdigest()
        if actual != file.hashes.sha1.lower():
            raise HashMismatchError(file.filename, file.hashes.sha1, actual)
        logger.debug("Downloaded %s (%d bytes)", file.filename, len(response.content))
        return response.content

    # --- Users ---

    async def get_user(self, user_id: str) -> User:
        """Get a user by ID or username."""
        check_id_slug(user_id)
        return await self._dispatcher.send_json(
            "GET", self._url("user", user_id), User
        )

    async def get_multiple_users(self, user_ids: Sequence[str]) -> list[User]:
        check_id_slug(user_ids)
        url = with_query_json(self._url("users"), "ids", list(user_ids))
        return await self._dispatcher.send_json("GET", url, list[User])

    async def list_user_projects(self, user_id: str) -> list[Project]:
        """Get the projects of a user."""
        check_id_slug(user_id)
        return await self._dispatcher.send_json(
            "GET", self._url("user", user_id, "projects"), list[Project]
        )

    async def get_current_user(self) -> User:
        """Get the user the token belongs to. Requires authentication."""
        self._require_auth("get_current_user")
        return await self._dispatcher.send_json("GET", self._url("user"), User)

    async def get_notifications(self, user_id: str) -> list[Notification]:
        """Get a user's notifications. Requires authentication."""
        self._require_auth("get_notifications")
        check_id_slug(user_id)
        return await self._dispatcher.send_json(
            "GET", self._url("user", user_id, "notifications"), list[Notification]
        )

    async def followed_projects(self, user_id: str) -> list[Project]:
        """Get the projects a user follows. Requires authentication."""
        self._require_auth("followed_projects")
        check_id_slug(user_id)
        return await self._dispatcher.send_json(
            "GET", self._url("user", user_id, "follows"), list[Project]
        )

    async def delete_user(self, user_id: str) -> None:
        """Delete a user. Requires authentication."""
        self._require_auth("delete_user")
        check_id_slug(user_id)
        await self._dispatcher.send("DELETE", self._url("user", user_id))

    # --- Teams ---

    async def list_project_team_members(self, project_id: str) -> list[TeamMember]:
        check_id_slug(project_id)
        return await self._dispatcher.send_json(
            "GET", self._url("project", project_id, "members"), list[TeamMember]
        )

    async def list_team_members(self, team_id: str) -> list[TeamMember]:
        check_id_slug(team_id)
        return await self._dispatcher.send_json(
            "GET", self._url("team", team_id, "members"), list[TeamMember]
        )

    async def list_multiple_teams_members(
        self, team_ids: Sequence[str]
    ) -> list[list[TeamMember]]:
        """Get the members of several teams, one list per team."""
        check_id_slug(team_ids)
        url = with_query_json(self._url("teams"), "ids", list(team_ids))
        return await self._dispatcher.send_json("GET", url, list[list[TeamMember]])

    async def add_team_member(self, team_id: str, user_id: str) -> None:
        """Invite a user to a team. Requires authentication."""
        self._require_auth("add_team_member")
        check_id_slug(team_id, user_id)
        await self._dispatcher.send(
            "POST", self._url("team", team_id, "members"), json={"user_id": user_id}
        )

    async def join_team(self, team_id: str) -> None:
        """Accept an invite to a team. Requires authentication."""
        self._require_auth("join_team")
        check_id_slug(team_id)
        await self._dispatcher.send("POST", self._url("team", team_id, "join"))

    async def remove_team_member(self, team_id: str, user_id: str) -> None:
        """Remove a member from a team. Requires authentication."""
        self._require_auth("remove_team_member")
        check_id_slug(team_id, user_id)
        await self._dispatcher.send(
            "DELETE", self._url("team", team_id, "members", user_id)
        )

    async def transfer_ownership(self, team_id: str, user_id: str) -> None:
        """Make user_id the owner of a team. Requires authentication."""
        self._require_auth("transfer_ownership")
        check_id_slug(team_id, user_id)
        await self._dispatcher.send(
            "PATCH", self._url("team", team_id, "owner"), json={"user_id": user_id}
        )

    # --- Tags ---

    async def list_categories(self) -> list[Category]:
        return await self._dispatcher.send_json(
            "GET", self._url("tag", "category"), list[Category]
        )

    async def list_loaders(self) -> list[LoaderTag]:
        return await self._dispatcher.send_json(
            "GET", self._url("tag", "loader"), list[LoaderTag]
        )

    async def list_game_versions(self) -> list[GameVersion]:
        return await self._dispatcher.send_json(
            "GET", self._url("tag", "game_version"), list[GameVersion]
        )

    async def list_licenses(self) -> list[LicenseTag]:
        return await self._dispatcher.send_json(
            "GET", self._url("tag", "license"), list[LicenseTag]
        )

    async def list_donation_platforms(self) -> list[DonationPlatform]:
        return await self._dispatcher.send_json(
            "GET", self._url("tag", "donation_platform"), list[DonationPlatform]
        )

    async def list_report_types(self) -> list[str]:
        return await self._dispatcher.send_json(
            "GET", self._url("tag", "report_type"), list[str]
        )

    # --- Search ---

    async def search(
        self,
        query: str = "",
        facets: Facets | None = None,
        index: SortIndex = SortIndex.RELEVANCE,
        offset: int | None = None,
        limit: int | None = None,
        filters: str | None = None,
        version: str | None = None,
    ) -> SearchResult:
        """Search for projects.

        Args:
            query: Search query string
            facets: FacetBuilder, or clauses of facets; clauses are ANDed and
                the facets inside a clause are ORed
            index: Sort order
            offset: Number of results to skip
            limit: Maximum results (server default 10, max 100)
            filters: Raw filter expression, e.g. "downloads > 1000"
            version: Raw version filter, e.g. 'versions="1.21.4"'

        Returns:
            SearchResult instance

        Raises:
            ValueError: If limit is outside 1..100 or offset is negative
        """
        if limit is not None and not 1 <= limit <= MAX_SEARCH_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_SEARCH_LIMIT}")
        if offset is not None and offset < 0:
            raise ValueError("offset must not be negative")

        url = self._url("search")
        if query:
            url = with_query(url, "query", query)
        facet_lists = _facets_to_lists(facets) if facets is not None else []
        if facet_lists:
            url = with_query_json(url, "facets", facet_lists)
        url = with_query(url, "index", index)
        if offset is not None:
            url = with_query(url, "offset", offset)
        if limit is not None:
            url = with_query(url, "limit", limit)
        if filters is not None:
            url = with_query(url, "filters", filters)
        if version is not None:
            url = with_query(url, "version", version)
        return await self._dispatcher.send_json("GET", url, SearchResult)

    # --- Miscellaneous ---

    async def submit_report(self, report: ReportSubmission) -> Report:
        """Send a report to the moderators. Requires authentication.

        Valid report types are listed by list_report_types.
        """
        self._require_auth("submit_report")
        check_id_slug(report.item_id)
        return await self._dispatcher.send_json(
            "POST", self._url("report"), Report, json=report.model_dump(mode="json")
        )

    async def get_statistics(self) -> Statistics:
        return await self._dispatcher.send_json(
            "GET", self._url("statistics"), Statistics
        )

    async def welcome(self) -> Welcome:
        """Get the unversioned API root document."""
        return await self._dispatcher.send_json(
            "GET", self._config.root_url, Welcome
        )
