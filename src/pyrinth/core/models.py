"""Data models mirroring the Modrinth API v2 schemas."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, SecretStr


def _empty_to_none(value: object) -> object:
    # The API sends "" for unset links
    if value == "":
        return None
    return value


OptionalUrl = Annotated[str | None, BeforeValidator(_empty_to_none)]


class Record(BaseModel):
    """Immutable record decoded from a single API response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


# === Enums ===


class ProjectType(str, Enum):
    """Project types on Modrinth."""

    # Can be a mod, plugin or data pack; read the loaders for specifics
    PROJECT = "project"
    MOD = "mod"
    SHADER = "shader"
    PLUGIN = "plugin"
    MODPACK = "modpack"
    DATAPACK = "datapack"
    RESOURCEPACK = "resourcepack"


class ProjectStatus(str, Enum):
    """Moderation status of a project."""

    APPROVED = "approved"
    ARCHIVED = "archived"
    REJECTED = "rejected"
    DRAFT = "draft"
    UNLISTED = "unlisted"
    PROCESSING = "processing"
    WITHHELD = "withheld"
    SCHEDULED = "scheduled"
    PRIVATE = "private"
    UNKNOWN = "unknown"


class RequestedProjectStatus(str, Enum):
    """Status a project owner may request or schedule."""

    APPROVED = "approved"
    ARCHIVED = "archived"
    UNLISTED = "unlisted"
    PRIVATE = "private"
    DRAFT = "draft"


class MonetizationStatus(str, Enum):
    """Monetization status of a project."""

    MONETIZED = "monetized"
    DEMONETIZED = "demonetized"
    FORCE_DEMONETIZED = "force-demonetized"


class ProjectSupportRange(str, Enum):
    """Whether a project is needed on the client or server side."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class ImageFileExt(str, Enum):
    """Image file extensions accepted for icons and gallery images."""

    PNG = "png"
    JPG = "jpg"
    JPEG = "jpeg"
    BMP = "bmp"
    GIF = "gif"
    WEBP = "webp"
    SVG = "svg"
    SVGZ = "svgz"
    RGB = "rgb"

    @property
    def content_type(self) -> str:
        """MIME type sent with uploads of this extension."""
        return f"image/{self.value}"


class VersionType(str, Enum):
    """Release channel of a version."""

    RELEASE = "release"
    BETA = "beta"
    ALPHA = "alpha"


class VersionStatus(str, Enum):
    """Visibility status of a version."""

    LISTED = "listed"
    ARCHIVED = "archived"
    DRAFT = "draft"
    UNLISTED = "unlisted"
    SCHEDULED = "scheduled"
    UNKNOWN = "unknown"


class RequestedVersionStatus(str, Enum):
    """Status a version owner may request or schedule."""

    LISTED = "listed"
    ARCHIVED = "archived"
    DRAFT = "draft"
    UNLISTED = "unlisted"


class DependencyType(str, Enum):
    """Dependency types for Modrinth versions."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    INCOMPATIBLE = "incompatible"
    EMBEDDED = "embedded"


class HashAlgorithm(str, Enum):
    """Hash algorithms understood by the version file routes."""

    SHA512 = "sha512"
    SHA1 = "sha1"


class AdditionalFileType(str, Enum):
    """Type of a non-primary version file."""

    REQUIRED_RESOURCE_PACK = "required-resource-pack"
    OPTIONAL_RESOURCE_PACK = "optional-resource-pack"


class UserRole(str, Enum):
    """Site-wide role of a user."""

    DEVELOPER = "developer"
    MODERATOR = "moderator"
    ADMIN = "admin"


class NotificationType(str, Enum):
    """Kind of a user notification."""

    PROJECT_UPDATE = "project_update"
    TEAM_INVITE = "team_invite"
    STATUS_UPDATE = "status_update"


class GameVersionType(str, Enum):
    """Type of a game version."""

    RELEASE = "release"
    SNAPSHOT = "snapshot"
    BETA = "beta"
    ALPHA = "alpha"


class ReportItemType(str, Enum):
    """Kind of item a report refers to."""

    PROJECT = "project"
    USER = "user"
    VERSION = "version"
    UNKNOWN = "unknown"


class SortIndex(str, Enum):
    """Sorting method for search results."""

    RELEVANCE = "relevance"
    DOWNLOADS = "downloads"
    FOLLOWS = "follows"
    NEWEST = "newest"
    UPDATED = "updated"


# === Local data models ===


class ClientConfig(BaseModel):
    """Immutable settings shared by every request of one client."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.modrinth.com/"
    api_version: int = 2
    user_agent: str
    token: SecretStr | None = None
    timeout: float = 30.0

    @property
    def root_url(self) -> str:
        """The unversioned base URL, always ending with a slash."""
        return self.base_url if self.base_url.endswith("/") else self.base_url + "/"

    @property
    def api_base_url(self) -> str:
        """Base URL of the configured API version."""
        return f"{self.root_url}v{self.api_version}/"

    @property
    def authenticated(self) -> bool:
        return self.token is not None


# === Projects ===


class ProjectLicense(Record):
    """License attached to a project."""

    id: str  # SPDX identifier
    name: str
    url: OptionalUrl = None


class DonationLink(Record):
    """A link to one of the project's donation pages."""

    id: str
    platform: str
    url: str


class GalleryItem(Record):
    """An image uploaded to a project's gallery."""

    url: str
    raw_url: str | None = None
    featured: bool
    title: str | None = None
    description: str | None = None
    created: datetime
    # Gallery images sort by ordering, then alphabetically by title
    ordering: int = 0


class Project(Record):
    """Project information from Modrinth API.

    The slug may change at any time; store the id for long term references.
    """

    id: str
    slug: str
    title: str
    description: str
    body: str = ""
    categories: list[str] = Field(default_factory=list)
    additional_categories: list[str] = Field(default_factory=list)
    client_side: ProjectSupportRange = ProjectSupportRange.UNKNOWN
    server_side: ProjectSupportRange = ProjectSupportRange.UNKNOWN
    status: ProjectStatus = ProjectStatus.UNKNOWN
    requested_status: RequestedProjectStatus | None = None
    issues_url: OptionalUrl = None
    source_url: OptionalUrl = None
    wiki_url: OptionalUrl = None
    discord_url: OptionalUrl = None
    donation_urls: list[DonationLink] = Field(default_factory=list)
    project_type: ProjectType
    downloads: int
    icon_url: OptionalUrl = None
    color: int | None = None
    thread_id: str | None = None
    monetization_status: MonetizationStatus | None = None
    team: str
    organization: str | None = None
    published: datetime
    updated: datetime
    approved: datetime | None = None
    queued: datetime | None = None
    followers: int
    license: ProjectLicense | None = None
    versions: list[str]
    game_versions: list[str] = Field(default_factory=list)
    loaders: list[str] = Field(default_factory=list)
    gallery: list[GalleryItem] = Field(default_factory=list)


class EditMultipleProjectsBody(BaseModel):
    """Fields to change on every selected project.

    Fields left as None are not sent.
    """

    categories: list[str] | None = None
    add_categories: list[str] | None = None
    remove_categories: list[str] | None = None
    additional_categories: list[str] | None = None
    add_additional_categories: list[str] | None = None
    remove_additional_categories: list[str] | None = None
    donation_urls: list[DonationLink] | None = None
    add_donation_urls: list[DonationLink] | None = None
    remove_donation_urls: list[DonationLink] | None = None
    issues_url: str | None = None
    source_url: str | None = None
    wiki_url: str | None = None
    discord_url: str | None = None


# === Versions ===


class FileHashes(Record):
    """Hashes of a version file; other algorithms land in model_extra."""

    model_config = ConfigDict(extra="allow")

    sha512: str
    sha1: str


class VersionFile(Record):
    """Downloadable file information from Modrinth API."""

    hashes: FileHashes
    url: str
    filename: str
    # At most one file per version is primary
    primary: bool
    size: int
    file_type: AdditionalFileType | None = None


class Dependency(Record):
    """A dependency for a project version."""

    version_id: str | None = None
    project_id: str | None = None
    file_name: str | None = None
    dependency_type: DependencyType


class Version(Record):
    """Version information from Modrinth API."""

    id: str
    project_id: str
    author_id: str
    name: str
    version_number: str
    changelog: str | None = None
    dependencies: list[Dependency] = Field(default_factory=list)
    game_versions: list[str]
    version_type: VersionType
    loaders: list[str]
    featured: bool = False
    status: VersionStatus | None = None
    requested_status: RequestedVersionStatus | None = None
    date_published: datetime
    downloads: int = 0
    files: list[VersionFile]

    @property
    def primary_file(self) -> VersionFile | None:
        """The primary file, falling back to the first file."""
        for file in self.files:
            if file.primary:
                return file
        return self.files[0] if self.files else None


class ProjectDependencies(Record):
    """Projects and versions a project depends on."""

    projects: list[Project]
    versions: list[Version]


class LatestVersionBody(BaseModel):
    """Filters for the latest-version-from-hash routes."""

    loaders: list[str]
    game_versions: list[str]


# === Users and teams ===


class PayoutData(Record):
    """Payout information, only visible to the user themselves."""

    balance: float
    payout_wallet: str | None = None
    payout_wallet_type: str | None = None
    payout_address: str | None = None


class User(Record):
    """User information from Modrinth API."""

    id: str
    username: str
    name: str | None = None
    email: str | None = None
    bio: str | None = None
    payout_data: PayoutData | None = None
    github_id: int | None = None
    avatar_url: OptionalUrl = None
    created: datetime
    role: UserRole
    badges: int = 0


class TeamMember(Record):
    """A member of a project's team."""

    team_id: str
    user: User
    role: str
    # Bitflags; requires authorisation to view
    permissions: int | None = None
    accepted: bool
    payouts_split: float | None = None
    ordering: int | None = None


class NotificationAction(Record):
    """An action offered by a notification."""

    title: str
    # (HTTP method, route)
    action_route: tuple[str, str]


class Notification(Record):
    """A notification addressed to a user."""

    id: str
    user_id: str
    notification_type: NotificationType | None = Field(default=None, alias="type")
    title: str
    text: str
    link: str  # relative to the site root
    read: bool
    created: datetime
    actions: list[NotificationAction] = Field(default_factory=list)


# === Tags ===


class Category(Record):
    """A category applicable to projects of project_type."""

    icon: str  # SVG markup
    name: str
    project_type: ProjectType
    header: str


class LoaderTag(Record):
    """A loader and the project types it can load."""

    icon: str
    name: str
    supported_project_types: list[ProjectType]


class GameVersion(Record):
    """A game version known to Modrinth."""

    version: str
    version_type: GameVersionType
    date: datetime
    major: bool


class LicenseTag(Record):
    """A license that projects may declare."""

    short: str
    name: str


class DonationPlatform(Record):
    """A supported donation platform."""

    short: str
    name: str


# === Search ===


class SearchHit(Record):
    """A single search result from Modrinth API."""

    project_id: str
    slug: str | None = None
    title: str
    description: str
    author: str
    categories: list[str] = Field(default_factory=list)
    display_categories: list[str] = Field(default_factory=list)
    client_side: ProjectSupportRange = ProjectSupportRange.UNKNOWN
    server_side: ProjectSupportRange = ProjectSupportRange.UNKNOWN
    project_type: ProjectType
    downloads: int
    follows: int = 0
    icon_url: OptionalUrl = None
    color: int | None = None
    thread_id: str | None = None
    monetization_status: MonetizationStatus | None = None
    game_versions: list[str] = Field(default_factory=list, alias="versions")
    date_created: datetime
    date_modified: datetime
    latest_version: str | None = None
    license: str = ""
    gallery: list[str] = Field(default_factory=list)
    featured_gallery: OptionalUrl = None


class SearchResult(Record):
    """Search results from Modrinth API."""

    hits: list[SearchHit]
    offset: int
    limit: int
    total_hits: int


# === Miscellaneous ===


class ReportSubmission(BaseModel):
    """A report to send to the moderators."""

    report_type: str
    item_id: str
    item_type: ReportItemType
    body: str


class Report(Record):
    """A report as stored by Modrinth."""

    id: str
    report_type: str
    item_id: str
    item_type: ReportItemType
    body: str
    reporter: str
    created: datetime
    closed: bool = False
    thread_id: str | None = None


class Statistics(Record):
    """Counts of content hosted on this Modrinth instance."""

    projects: int
    versions: int
    files: int
    authors: int


class Welcome(Record):
    """The API root document."""

    about: str
    documentation: str
    name: str
    version: str
