import sys
from pathlib import Path
from typing import Optional
from logging import getLogger

import click

from . import exc
from .build import build, load_and_check
from .config import Config, load_config, default_config_file
from .logging import configure_logging, LOG_LEVELS
from .value_objs import BuildReport
from .version import get_version

logger = getLogger(__name__)

config_file_option = click.option(
    "-f",
    "--config-file",
    default=None,
    help="Path to config file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)

log_level_option = click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="How much to log",
)


def get_cli_config(config_file: Optional[Path]) -> Config:
    if config_file is None:
        config_file = default_config_file()
    try:
        return load_config(config_file)
    except exc.InvalidConfigException as e:
        raise click.BadParameter(str(e), param_hint="config file")


def log_report(report: BuildReport) -> None:
    for failure in report.failures:
        logger.warning("failed to load %s: %s", failure.path, failure.error)
    for cycle in report.cycles:
        logger.warning("%s", cycle)


@click.command("postbase-build", help="Build the site into the output directory")
@click.version_option(get_version(), prog_name="postbase")
@config_file_option
@log_level_option
@click.option(
    "--content-dir",
    default=None,
    type=click.Path(path_type=Path),
    help="Override the content directory",
)
@click.option(
    "--output-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Override the output directory",
)
@click.option(
    "--include-future/--exclude-future",
    default=None,
    help="Publish (or hold back) posts dated in the future",
)
def build_cli(
    config_file: Optional[Path],
    log_level: str,
    content_dir: Optional[Path],
    output_dir: Optional[Path],
    include_future: Optional[bool],
) -> None:
    configure_logging(log_level.upper())
    config = get_cli_config(config_file)
    if content_dir is not None:
        config.content_dir = content_dir
    if output_dir is not None:
        config.output_dir = output_dir
    if include_future is not None:
        config.include_future = include_future

    try:
        report = build(config)
    except exc.DirectoryReadError as e:
        logger.error("unable to read content directory: %s", e.directory)
        sys.exit(1)
    log_report(report)
    click.echo(
        f"{len(report.pages)} pages written to {config.output_dir} "
        f"({report.published} of {report.loaded} posts published, "
        f"{report.warning_count()} warnings)"
    )


@click.command("postbase-check", help="Load the content and report any problems")
@config_file_option
@log_level_option
def check_cli(config_file: Optional[Path], log_level: str) -> None:
    configure_logging(log_level.upper())
    config = get_cli_config(config_file)
    try:
        _, report = load_and_check(config)
    except exc.DirectoryReadError as e:
        logger.error("unable to read content directory: %s", e.directory)
        sys.exit(1)
    log_report(report)
    click.echo(
        f"{report.loaded} posts loaded, {len(report.failures)} failures, "
        f"{len(report.cycles)} series cycles"
    )
    if report.warning_count() > 0:
        sys.exit(1)


@click.command("postbase-config")
@config_file_option
def config_cli(config_file: Optional[Path]):
    configure_logging()
    logger.info(get_cli_config(config_file))


@click.command("postbase-serve", help="Serve a live preview of the site")
@config_file_option
@click.option("--host", default="127.0.0.1", help="Interface to listen on")
@click.option("--port", default=8000, type=int, help="Port to listen on")
@click.option(
    "--reload/--no-reload",
    default=True,
    help="Reload the content from disk on every request",
)
def serve_cli(config_file: Optional[Path], host: str, port: int, reload: bool) -> None:
    from .web.app import init_app

    configure_logging()
    config = get_cli_config(config_file)
    try:
        app = init_app(config, reload_store=reload)
    except exc.DirectoryReadError as e:
        logger.error("unable to read content directory: %s", e.directory)
        sys.exit(1)
    app.run(host=host, port=port)
