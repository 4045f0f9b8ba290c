from logging import getLogger
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

import toml

from . import exc

logger = getLogger(__name__)

SLUG_SOURCES = ("title", "path")


@dataclass
class Config:
    """A typecheckable config object.

    In order to keep the benefits of typechecking, don't pass this into places
    where the typechecker can't find it - ie: jinja templates.

    """

    content_dir: Path
    output_dir: Path
    site_title: str
    base_url: str
    author: str = ""

    # whether non-draft posts dated after the build time are published
    include_future: bool = False

    slug_source: str = "title"
    excerpt_length: int = 300
    workers: int = 1


__config__: Optional[Config] = None


def load_config(config_file: Path) -> Config:
    """Loads the configuration at the given path.

    Relative directories are taken to be relative to the config file.

    """
    logger.info("loading config from %s", config_file)
    if config_file.exists():
        with open(config_file, encoding="utf-8") as config_f:
            as_dict = toml.load(config_f)
    else:
        logger.warning("config file ('%s') not found, using defaults", config_file)
        as_dict = {}
    root = config_file.parent
    include_future = as_dict.get("include_future", False)
    if not isinstance(include_future, bool):
        raise exc.InvalidConfigException(
            f"include_future must be true or false, not {include_future!r}"
        )
    slug_source = as_dict.get("slug_source", "title")
    if slug_source not in SLUG_SOURCES:
        raise exc.InvalidConfigException(
            f"slug_source must be one of {SLUG_SOURCES}, not '{slug_source}'"
        )
    return Config(
        content_dir=root / as_dict.get("content_dir", "content"),
        output_dir=root / as_dict.get("output_dir", "public"),
        site_title=as_dict.get("site_title", "My blog"),
        base_url=as_dict.get("base_url", "http://localhost:8000"),
        author=as_dict.get("author", ""),
        include_future=include_future,
        slug_source=slug_source,
        excerpt_length=int(as_dict.get("excerpt_length", 300)),
        workers=int(as_dict.get("workers", 1)),
    )


def default_config_file() -> Path:
    """Returns the location of the default config file"""
    return Path.cwd() / "postbase.toml"


def get_config() -> Config:
    """Returns the config.

    Loaded from ./postbase.toml on first use.  Tests should build a Config
    directly rather than going through this.

    """
    global __config__
    if __config__ is None:
        __config__ = load_config(default_config_file())

    return __config__
