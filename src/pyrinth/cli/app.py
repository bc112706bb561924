"""Typer CLI application."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Annotated, Any, TypeVar

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pyrinth import __version__
from pyrinth.core.api import ModrinthClient
from pyrinth.core.config import (
    ConfigValidationError,
    DEFAULT_USER_AGENT,
    build_user_agent,
    generate_config,
    get_default_config_path,
    load_config_or_default,
    validate_config,
)
from pyrinth.core.exceptions import NotFoundError, PyrinthError, RateLimitError
from pyrinth.core.facets import Facet, FacetBuilder
from pyrinth.core.models import ProjectType, SortIndex

T = TypeVar("T")

app = typer.Typer(
    name="pyrinth",
    help="Query the Modrinth API from the command line.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class TagKind(str, Enum):
    """Tag lists exposed by the tags command."""

    CATEGORIES = "categories"
    LOADERS = "loaders"
    GAME_VERSIONS = "game-versions"
    LICENSES = "licenses"
    DONATION_PLATFORMS = "donation-platforms"
    REPORT_TYPES = "report-types"


JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output in JSON format"),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"pyrinth {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log requests to stderr."),
    ] = False,
) -> None:
    """Query the Modrinth API from the command line."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


def _client() -> ModrinthClient:
    try:
        config = load_config_or_default()
    except ConfigValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        for error in e.errors:
            console.print(f"  {error.field}: {error.message}")
        raise typer.Exit(code=1) from None

    errors = validate_config(config)
    if errors:
        console.print("[red]Error:[/red] Invalid configuration")
        for error in errors:
            console.print(f"  {error.field}: {error.message}")
        raise typer.Exit(code=1)
    return ModrinthClient(config=config)


def _run(call: Callable[[ModrinthClient], Awaitable[T]]) -> T:
    """Run one client call, turning library errors into exit code 1."""

    async def _main() -> T:
        async with _client() as client:
            return await call(client)

    try:
        return asyncio.run(_main())
    except RateLimitError as e:
        console.print(
            f"[red]Error:[/red] Rate limited. Try again in {e.retry_after} seconds."
        )
    except NotFoundError:
        console.print("[red]Error:[/red] Not found on Modrinth.")
    except PyrinthError as e:
        console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(code=1)


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [_dump(item) for item in data]
    if isinstance(data, dict):
        return {key: _dump(value) for key, value in data.items()}
    return data


def _print_json(data: Any) -> None:
    typer.echo(json.dumps(_dump(data), indent=2, ensure_ascii=False))


@app.command()
def init(
    non_interactive: Annotated[
        bool,
        typer.Option(
            "--non-interactive",
            "-y",
            help="Use default values without prompting.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config.toml.",
        ),
    ] = False,
) -> None:
    """Create config.toml.

    The file is created in XDG Base Directory compliant location:
    - $XDG_CONFIG_HOME/pyrinth/ (if XDG_CONFIG_HOME is set)
    - ~/.config/pyrinth/ (default)
    """
    if non_interactive:
        user_agent = DEFAULT_USER_AGENT
    else:
        name = typer.prompt("Application name", default="pyrinth")
        version = typer.prompt("Application version", default=__version__)
        contact = typer.prompt("Contact (email or URL)", default="")
        user_agent = build_user_agent(name, version or None, contact or None)

    try:
        config_path = generate_config(
            user_agent=user_agent, path=get_default_config_path(), force=force
        )
    except FileExistsError:
        console.print(
            "[red]Error:[/red] config.toml already exists. Use --force to overwrite."
        )
        raise typer.Exit(code=1) from None

    console.print(f"✓ Created {config_path}", style="green")
    console.print("Set PYRINTH_TOKEN to use authenticated commands.")


@app.command()
def project(
    project_id: Annotated[str, typer.Argument(help="Project ID or slug")],
    json_output: JsonOption = False,
) -> None:
    """Show a project.

    Example:
        pyrinth project sodium
    """
    result = _run(lambda client: client.get_project(project_id))

    if json_output:
        _print_json(result)
        return

    console.print(f"[bold]{result.title}[/bold] ({result.project_type.value})")
    console.print(f"  {result.description}")
    console.print(f"  ID:        {result.id}")
    console.print(f"  Slug:      {result.slug}")
    console.print(f"  Downloads: {result.downloads:,}")
    console.print(f"  Followers: {result.followers:,}")
    if result.loaders:
        console.print(f"  Loaders:   {', '.join(result.loaders)}")
    if result.license is not None:
        console.print(f"  License:   {result.license.name}")
    if result.source_url:
        console.print(f"  Source:    {result.source_url}")


@app.command()
def versions(
    project_id: Annotated[str, typer.Argument(help="Project ID or slug")],
    loader: Annotated[
        list[str] | None,
        typer.Option("--loader", "-l", help="Only versions for this loader"),
    ] = None,
    game_version: Annotated[
        list[str] | None,
        typer.Option("--game-version", "-g", help="Only versions for this game"),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Number of versions to show"),
    ] = 10,
    json_output: JsonOption = False,
) -> None:
    """List the versions of a project, newest first.

    Example:
        pyrinth versions sodium --loader fabric --game-version 1.21.4
    """
    result = _run(
        lambda client: client.list_versions(
            project_id, loaders=loader or None, game_versions=game_version or None
        )
    )
    shown = result[:limit] if limit > 0 else result

    if json_output:
        _print_json(shown)
        return

    if not shown:
        console.print(f"No matching versions for '{project_id}'.")
        return

    for item in shown:
        published = item.date_published.strftime("%Y-%m-%d")
        console.print(
            f"{item.version_number:<30} {item.version_type.value:<8} {published}"
        )
        console.print(
            f"   {', '.join(item.loaders)} | {', '.join(item.game_versions[:5])}"
        )


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search keyword")] = "",
    type_filter: Annotated[
        ProjectType | None,
        typer.Option("--type", "-t", help="Filter by project type"),
    ] = None,
    facet: Annotated[
        list[str] | None,
        typer.Option(
            "--facet",
            "-F",
            help="Extra facet such as 'versions:1.21.4'; repeat to AND them.",
        ),
    ] = None,
    sort: Annotated[
        SortIndex,
        typer.Option("--sort", "-s", help="Sort order"),
    ] = SortIndex.RELEVANCE,
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", help="Number of results to show"),
    ] = 10,
    offset: Annotated[
        int,
        typer.Option("--offset", help="Number of results to skip"),
    ] = 0,
    json_output: JsonOption = False,
) -> None:
    """Search for projects on Modrinth.

    Example:
        pyrinth search sodium
        pyrinth search shader --type shader --limit 5
        pyrinth search "" --facet categories:fabric --sort downloads
    """
    builder = FacetBuilder()
    if type_filter is not None:
        builder.and_(Facet.project_type(type_filter))
    try:
        for text in facet or []:
            builder.and_(Facet.parse(text))
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None

    if not 1 <= limit <= 100:
        console.print("[red]Error:[/red] --limit must be between 1 and 100.")
        raise typer.Exit(code=1)
    if offset < 0:
        console.print("[red]Error:[/red] --offset must not be negative.")
        raise typer.Exit(code=1)

    result = _run(
        lambda client: client.search(
            query, facets=builder, index=sort, offset=offset, limit=limit
        )
    )

    if json_output:
        _print_json(result.hits)
        return

    if not result.hits:
        console.print(f"No results found for '{query}'.")
        return

    console.print(f"\nSearch results for '{query}' ({result.total_hits:,} total):\n")
    for i, hit in enumerate(result.hits, start=offset + 1):
        console.print(f"{i}. {hit.title} ({hit.project_type.value})")
        console.print(f"   {hit.description}")
        console.print(f"   Slug: {hit.slug or hit.project_id}")
        console.print(f"   Downloads: {hit.downloads:,}\n")


@app.command("hash")
def hash_(
    sha1: Annotated[str, typer.Argument(help="SHA1 hash of a mod file")],
    json_output: JsonOption = False,
) -> None:
    """Find the version a file belongs to from its SHA1 hash."""
    result = _run(lambda client: client.get_version_from_hash(sha1.lower()))

    if json_output:
        _print_json(result)
        return

    console.print(f"[bold]{result.name}[/bold] ({result.version_number})")
    console.print(f"  Project:  {result.project_id}")
    console.print(f"  Version:  {result.id}")
    console.print(f"  Channel:  {result.version_type.value}")
    console.print(f"  Loaders:  {', '.join(result.loaders)}")


@app.command()
def user(
    user_id: Annotated[str, typer.Argument(help="User ID or username")],
    json_output: JsonOption = False,
) -> None:
    """Show a user."""
    result = _run(lambda client: client.get_user(user_id))

    if json_output:
        _print_json(result)
        return

    console.print(f"[bold]{result.username}[/bold] ({result.role.value})")
    console.print(f"  ID:      {result.id}")
    console.print(f"  Joined:  {result.created.strftime('%Y-%m-%d')}")
    if result.bio:
        console.print(f"  Bio:     {result.bio}")


async def _fetch_tags(client: ModrinthClient, kind: TagKind) -> list[Any]:
    if kind is TagKind.CATEGORIES:
        return await client.list_categories()
    if kind is TagKind.LOADERS:
        return await client.list_loaders()
    if kind is TagKind.GAME_VERSIONS:
        return await client.list_game_versions()
    if kind is TagKind.LICENSES:
        return await client.list_licenses()
    if kind is TagKind.DONATION_PLATFORMS:
        return await client.list_donation_platforms()
    return await client.list_report_types()


def _tag_row(item: Any) -> tuple[str, str]:
    if isinstance(item, str):
        return item, ""
    if hasattr(item, "project_type"):
        return item.name, item.project_type.value
    if hasattr(item, "supported_project_types"):
        return item.name, ", ".join(t.value for t in item.supported_project_types)
    if hasattr(item, "version_type"):
        return item.version, item.version_type.value
    return item.short, item.name


@app.command()
def tags(
    kind: Annotated[TagKind, typer.Argument(help="Which tag list to show")],
    json_output: JsonOption = False,
) -> None:
    """List categories, loaders, game versions and other tags."""
    result = _run(lambda client: _fetch_tags(client, kind))

    if json_output:
        _print_json(result)
        return

    table = Table(title=kind.value)
    table.add_column("Name")
    table.add_column("Details")
    for item in result:
        table.add_row(*_tag_row(item))
    console.print(table)


@app.command()
def stats(json_output: JsonOption = False) -> None:
    """Show content statistics of the Modrinth instance."""
    result = _run(lambda client: client.get_statistics())

    if json_output:
        _print_json(result)
        return

    console.print(f"Projects: {result.projects:,}")
    console.print(f"Versions: {result.versions:,}")
    console.print(f"Files:    {result.files:,}")
    console.print(f"Authors:  {result.authors:,}")
