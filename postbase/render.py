"""Turns posts into pages."""

import json
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from .frontmatter import slugify
from .markdown import render_markdown, split_excerpt, strip_more_marker
from .value_objs import Post, SeriesNav, Site, TermSlugs

DEFAULT_EXCERPT_LENGTH = 300

_env: Optional[Environment] = None


def get_env() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=PackageLoader("postbase", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
        )
    return _env


@dataclass
class IndexEntry:
    post: Post
    excerpt: str
    truncated: bool


def render_body(post: Post) -> str:
    return render_markdown(strip_more_marker(post.body))


def index_entry(post: Post, excerpt_length: int = DEFAULT_EXCERPT_LENGTH) -> IndexEntry:
    excerpt = split_excerpt(post.body, excerpt_length)
    return IndexEntry(
        post=post,
        excerpt=render_markdown(excerpt.markdown),
        truncated=excerpt.truncated,
    )


def term_links(
    section: str, terms: Sequence[str], site: Site, slugs: TermSlugs
) -> List[Tuple[str, Optional[str]]]:
    """(term, url) for each term.  Terms without a slug get no url."""
    section_slugs = slugs.for_section(section)
    links = []
    for term in terms:
        slug = section_slugs.get(term) or slugify(term)
        links.append((term, site.url_for(section, slug) if slug else None))
    return links


def render_post(
    post: Post,
    site: Site,
    nav: Optional[SeriesNav] = None,
    slugs: Optional[TermSlugs] = None,
) -> str:
    """A full page for one post.

    Tag and category links use the site's term slugs where given, and the
    plain slugified term otherwise.

    """
    if slugs is None:
        slugs = TermSlugs()
    post_url = site.url_for("posts", post.slug)
    return get_env().get_template("post.html").render(
        post=post,
        rendered=render_body(post),
        nav=nav or SeriesNav(),
        tag_links=term_links("tags", post.sorted_tags(), site, slugs),
        category_links=term_links("categories", post.sorted_categories(), site, slugs),
        site=site,
        page_title=post.title,
        description=post.description,
        canonical_url=post_url,
        ld_json=make_ld_json(post, post_url, site),
    )


def render_index(
    posts: Sequence[Post],
    site: Site,
    page_title: str = "",
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    canonical_url: Optional[str] = None,
) -> str:
    """A listing page.  The posts are shown in the order given."""
    return get_env().get_template("index.html").render(
        entries=[index_entry(post, excerpt_length) for post in posts],
        site=site,
        page_title=page_title,
        heading=page_title,
        canonical_url=canonical_url,
    )


def make_ld_json(post: Post, post_url: str, site: Site) -> str:
    author_name = post.author or site.author
    document = {
        "@context": "https://schema.org",
        "@type": "BlogPosting",
        "headline": post.title,
        "url": post_url,
        "description": post.description,
        "mainEntityOfPage": post_url,
        "datePublished": post.date.isoformat(),
        "dateCreated": post.date.isoformat(),
        "keywords": post.sorted_tags(),
        "publisher": {
            "@type": "Organization",
            "name": site.title,
            "url": site.url_for(""),
        },
    }
    if author_name:
        document["author"] = {"@type": "Person", "name": author_name}
    # escape "</" so that the json can't close the script element
    return json.dumps(document, indent=4).replace("</", "<\\/")
