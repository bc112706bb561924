"""Configuration file handling."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

import httpx
import tomlkit
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from pyrinth import __version__

from .models import ClientConfig

# Constants
APP_NAME = "pyrinth"
DEFAULT_USER_AGENT = f"{APP_NAME}/{__version__}"
TOKEN_ENV_VARS = ("PYRINTH_TOKEN", "MODRINTH_TOKEN")


@dataclass
class ValidationError:
    """A single validation error."""

    field: str
    message: str


class ConfigValidationError(Exception):
    """Configuration validation failed."""

    def __init__(self, message: str, errors: list[ValidationError] | None = None):
        super().__init__(message)
        self.errors = errors or []


def build_user_agent(
    name: str, version: str | None = None, contact: str | None = None
) -> str:
    """Format a User-Agent string as Modrinth asks for it.

    Args:
        name: Program name (required)
        version: Program version
        contact: Contact address, e.g. an email

    Returns:
        "name/version (contact)" with the optional parts left out when None
    """
    user_agent = name
    if version:
        user_agent += f"/{version}"
    if contact:
        user_agent += f" ({contact})"
    return user_agent


def get_config_dir() -> Path:
    """Get XDG Base Directory compliant config directory.

    Returns:
        Path to config directory (XDG_CONFIG_HOME/pyrinth or ~/.config/pyrinth)
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if xdg_config_home:
        return Path(xdg_config_home) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_default_config_path() -> Path:
    """Get default path for config.toml."""
    return get_config_dir() / "config.toml"


def get_env_token() -> str | None:
    """Return the first non-empty token found in the environment."""
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def load_config(path: Path | None = None) -> ClientConfig:
    """Load config.toml and return ClientConfig.

    A token from the environment takes precedence over one in the file.

    Args:
        path: Path to config file (defaults to XDG_CONFIG_HOME/pyrinth/config.toml)

    Returns:
        ClientConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_path = path or get_default_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML: {e}") from e

    client = data.get("client", {})
    values = {
        key: client[key]
        for key in ("base_url", "api_version", "user_agent", "timeout")
        if key in client
    }
    token = get_env_token() or client.get("token")
    if token:
        values["token"] = token

    try:
        return ClientConfig(**values)
    except PydanticValidationError as e:
        errors = [
            ValidationError(
                field=".".join(str(loc) for loc in err["loc"]), message=err["msg"]
            )
            for err in e.errors()
        ]
        raise ConfigValidationError(f"Invalid config: {config_path}", errors) from e


def load_config_or_default(path: Path | None = None) -> ClientConfig:
    """Load config.toml, or build a default config when there is none.

    Raises:
        ConfigValidationError: If an existing config is invalid
    """
    try:
        return load_config(path)
    except FileNotFoundError:
        token = get_env_token()
        return ClientConfig(
            user_agent=DEFAULT_USER_AGENT,
            token=SecretStr(token) if token else None,
        )


def generate_config(
    user_agent: str,
    path: Path | None = None,
    base_url: str | None = None,
    force: bool = False,
) -> Path:
    """Generate config.toml.

    The token is never written; set PYRINTH_TOKEN instead.

    Args:
        user_agent: User-Agent to send with every request
        path: Output path (defaults to XDG_CONFIG_HOME/pyrinth/config.toml)
        base_url: API root to use instead of the public Modrinth API
        force: Overwrite existing file

    Returns:
        Path to created config file

    Raises:
        FileExistsError: If file exists and force=False
    """
    config_path = path or get_default_config_path()

    if config_path.exists() and not force:
        raise FileExistsError(f"Config file already exists: {config_path}")

    # Create parent directory if it doesn't exist
    config_path.parent.mkdir(parents=True, exist_ok=True)

    defaults = ClientConfig(user_agent=user_agent)

    doc = tomlkit.document()
    doc.add(tomlkit.comment("pyrinth configuration"))
    doc.add(tomlkit.comment("Set PYRINTH_TOKEN to authenticate requests."))
    doc.add(tomlkit.nl())

    client = tomlkit.table()
    client.add("user_agent", user_agent)
    client.add("base_url", base_url or defaults.base_url)
    client.add("api_version", defaults.api_version)
    client.add("timeout", defaults.timeout)
    doc.add("client", client)

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(tomlkit.dumps(doc))

    return config_path


def validate_config(config: ClientConfig) -> list[ValidationError]:
    """Validate ClientConfig values.

    Args:
        config: ClientConfig instance to validate

    Returns:
        List of ValidationError (empty if valid)
    """
    errors: list[ValidationError] = []

    try:
        url: httpx.URL | None = httpx.URL(config.base_url)
    except httpx.InvalidURL:
        url = None
    if url is None or url.scheme not in ("http", "https") or not url.host:
        errors.append(
            ValidationError(
                field="base_url",
                message=f"Not an absolute http(s) URL: {config.base_url}",
            )
        )

    if config.api_version < 1:
        errors.append(
            ValidationError(
                field="api_version",
                message=f"API version must be positive: {config.api_version}",
            )
        )

    if not config.user_agent.strip():
        errors.append(
            ValidationError(field="user_agent", message="User agent is empty")
        )

    if config.timeout <= 0:
        errors.append(
            ValidationError(
                field="timeout", message=f"Timeout must be positive: {config.timeout}"
            )
        )

    return errors
