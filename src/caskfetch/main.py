"""CLI entry point for Caskfetch."""

import sys
from pathlib import Path
from typing import Annotated

import typer
from mashumaro.exceptions import MissingField
from py_app_dev.core.exceptions import UserNotificationException
from py_app_dev.core.logging import logger, setup_logger, time_it

from caskfetch import __version__
from caskfetch.caskfetch import CaskFetch
from caskfetch.domain import ResolvedDownload, Settings
from caskfetch.downloader import DownloadError, HashMismatchError
from caskfetch.errors import CaskFetchError, ResolutionError
from caskfetch.progress import RichDownloadProgress

package_name = "caskfetch"
DEFAULT_ROOT_DIR = Path.home() / ".caskfetch"

ConfigOption = Annotated[Path | None, typer.Option("-c", "--config", help="Path to a JSON settings file.")]
RootOption = Annotated[Path, typer.Option("--root", help="Root directory for Caskfetch.")]
DescriptorsOption = Annotated[bool, typer.Option("--descriptors", help="Use code search and parse descriptor files instead of the JSON index.")]

app = typer.Typer(
    name=package_name,
    help="Search Homebrew casks and resolve their download URLs.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def version(
    version: bool = typer.Option(None, "--version", "-v", is_eager=True, help="Show version and exit."),
) -> None:
    if version:
        typer.echo(f"{package_name} {__version__}")
        raise typer.Exit()


def _load_settings(config_file: Path | None) -> Settings:
    if config_file is None:
        return Settings()
    if not config_file.is_file():
        raise UserNotificationException(f"Settings file {config_file} does not exist.")
    try:
        return Settings.from_json_file(config_file)
    except (MissingField, TypeError, ValueError) as e:
        raise UserNotificationException(f"Invalid settings file {config_file}: {e}") from e


def _resolve(caskfetch: CaskFetch, name: str, descriptors: bool) -> ResolvedDownload:
    selection = caskfetch.find(name, descriptors=descriptors)
    if selection is None:
        raise UserNotificationException(f"No cask named '{name}' found.")
    result = caskfetch.resolve_download(selection)
    if isinstance(result, ResolutionError):
        raise UserNotificationException(str(result))
    return result


@app.command(help="Search for casks by name or description.")
@time_it("search")
def search(
    query: Annotated[str, typer.Argument(help="Search query (substring).")],
    descriptors: DescriptorsOption = False,
    config_file: ConfigOption = None,
    root_dir: RootOption = DEFAULT_ROOT_DIR,
) -> None:
    caskfetch = CaskFetch(root_dir=root_dir, settings=_load_settings(config_file))
    try:
        if descriptors:
            names = [location.name for location in caskfetch.search_descriptors(query)]
        else:
            names = [result.name for result in caskfetch.search(query)]
    except CaskFetchError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e

    if not names:
        typer.echo("No search results")
        return

    typer.echo(f"{len(names)} result{'s' if len(names) > 1 else ''}")
    for name in names:
        typer.echo(f"  {name}")


@app.command(help="Resolve the download URL of a cask.")
@time_it("url")
def url(
    name: Annotated[str, typer.Argument(help="Cask token or name.")],
    descriptors: DescriptorsOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON.")] = False,
    config_file: ConfigOption = None,
    root_dir: RootOption = DEFAULT_ROOT_DIR,
) -> None:
    caskfetch = CaskFetch(root_dir=root_dir, settings=_load_settings(config_file))
    try:
        resolved = _resolve(caskfetch, name, descriptors)
    except (CaskFetchError, UserNotificationException) as e:
        logger.error(str(e))
        raise typer.Exit(1) from e

    if as_json:
        typer.echo(resolved.to_json_string())
        return
    typer.echo(f"{resolved.name or name} {resolved.version}".rstrip())
    if resolved.description:
        typer.echo(resolved.description)
    if resolved.homepage:
        typer.echo(resolved.homepage)
    typer.echo(resolved.url)


@app.command(help="Download a cask into the local cache.")
@time_it("download")
def download(
    name: Annotated[str, typer.Argument(help="Cask token or name.")],
    descriptors: DescriptorsOption = False,
    cache: Annotated[bool, typer.Option("--cache/--no-cache", help="Use download cache.")] = True,
    config_file: ConfigOption = None,
    root_dir: RootOption = DEFAULT_ROOT_DIR,
) -> None:
    with RichDownloadProgress() as progress:
        caskfetch = CaskFetch(
            root_dir=root_dir,
            settings=_load_settings(config_file),
            progress_callback=progress.on_download,
            use_cache=cache,
        )
        try:
            resolved = _resolve(caskfetch, name, descriptors)
            result = caskfetch.download(resolved)
        except (CaskFetchError, UserNotificationException, DownloadError, HashMismatchError) as e:
            logger.error(str(e))
            raise typer.Exit(1) from e

    logger.info(f"Downloaded {resolved.name or name} to {result.path}")
    typer.echo(str(result.path))


def main() -> int:
    try:
        setup_logger()
        app()
        return 0
    except UserNotificationException as e:
        logger.error(f"{e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
