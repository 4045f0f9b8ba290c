"""Builds the whole site: load, query, render, write."""

from datetime import datetime, timezone
from logging import getLogger
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from . import query
from .config import Config
from .feed import make_feed
from .render import render_index, render_post
from .store import Store, load
from .value_objs import BuildReport, Site

logger = getLogger(__name__)

FEED_FILENAME = "index.xml"


def site_from_config(config: Config) -> Site:
    return Site(title=config.site_title, base_url=config.base_url, author=config.author)


def render_site(
    store: Store, config: Config, now: Optional[datetime] = None
) -> Dict[Path, Union[str, bytes]]:
    """Every page of the site, keyed by its path relative to the output
    directory."""
    if now is None:
        now = datetime.now(timezone.utc)
    site = site_from_config(config)
    include_future = config.include_future
    posts = query.published(store, include_future, now)

    pages: Dict[Path, Union[str, bytes]] = {}
    pages[Path("index.html")] = render_index(
        posts, site, excerpt_length=config.excerpt_length, canonical_url=site.url_for("")
    )
    slugs = query.site_term_slugs(store, include_future, now)
    for post in posts:
        nav = query.series_nav(store, post, include_future, now)
        pages[Path("posts", post.slug, "index.html")] = render_post(post, site, nav, slugs)

    for section, index in [
        ("tags", query.tag_index(store, include_future, now)),
        ("categories", query.category_index(store, include_future, now)),
    ]:
        section_slugs = slugs.for_section(section)
        for term, term_posts in index.items():
            if term not in section_slugs:
                continue
            term_slug = section_slugs[term]
            pages[Path(section, term_slug, "index.html")] = render_index(
                term_posts,
                site,
                page_title=term,
                excerpt_length=config.excerpt_length,
                canonical_url=site.url_for(section, term_slug),
            )

    pages[Path(FEED_FILENAME)] = make_feed(posts, site.url_for(FEED_FILENAME), site)
    return pages


def write_pages(output_dir: Path, pages: Dict[Path, Union[str, bytes]]) -> List[Path]:
    written = []
    for relative_path, content in sorted(pages.items()):
        path = output_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


def load_and_check(
    config: Config, now: Optional[datetime] = None
) -> Tuple[Store, BuildReport]:
    """Load the store and collect everything wrong with it, without
    rendering anything."""
    store = load(config.content_dir, slug_source=config.slug_source, workers=config.workers)
    report = BuildReport(
        loaded=len(store),
        published=len(query.published(store, config.include_future, now)),
        failures=list(store.failures),
        cycles=query.series_cycles(store, config.include_future, now),
    )
    return store, report


def build(config: Config, now: Optional[datetime] = None) -> BuildReport:
    """Build the site into config.output_dir.

    Only an unreadable content directory is fatal (DirectoryReadError
    propagates, and nothing is written).  Everything else ends up in the
    report.

    """
    if now is None:
        now = datetime.now(timezone.utc)
    store, report = load_and_check(config, now)
    pages = render_site(store, config, now)
    report.pages = write_pages(config.output_dir, pages)
    logger.info(
        "built %d pages from %d posts (%d published) with %d warnings",
        len(report.pages),
        report.loaded,
        report.published,
        report.warning_count(),
    )
    return report
