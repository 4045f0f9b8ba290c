from typing import List

from flask import Blueprint, Response, make_response, abort

from .. import exc, query
from ..build import FEED_FILENAME
from ..feed import make_feed
from ..render import render_index, render_post
from ..value_objs import Post
from .func import get_postbase_config, get_site, get_store

bp = Blueprint("blog", __name__)


def published_posts() -> List[Post]:
    return query.published(get_store(), get_postbase_config().include_future)


def no_store(response: Response) -> Response:
    # a preview should always reflect what is on disk
    response.cache_control.no_store = True
    return response


@bp.route("/")
def blog_index() -> Response:
    site = get_site()
    config = get_postbase_config()
    return no_store(
        make_response(
            render_index(
                published_posts(),
                site,
                excerpt_length=config.excerpt_length,
                canonical_url=site.url_for(""),
            )
        )
    )


@bp.route("/posts/<slug>/", methods=["GET"])
def post(slug: str) -> Response:
    store = get_store()
    include_future = get_postbase_config().include_future
    post_obj = store.post_by_slug(slug)
    if not query.is_published(post_obj, include_future):
        raise exc.PostDoesNotExistException(slug)
    nav = query.series_nav(store, post_obj, include_future)
    slugs = query.site_term_slugs(store, include_future)
    return no_store(make_response(render_post(post_obj, get_site(), nav, slugs)))


def term_page(section: str, term_slug: str, index) -> Response:
    # urls carry term slugs, so find the term that was given this one
    slugs = query.term_slugs(index, section)
    for term, posts in index.items():
        if slugs.get(term) == term_slug:
            site = get_site()
            return no_store(
                make_response(
                    render_index(
                        posts,
                        site,
                        page_title=term,
                        excerpt_length=get_postbase_config().excerpt_length,
                        canonical_url=site.url_for(section, term_slug),
                    )
                )
            )
    abort(404)


@bp.route("/tags/<tag>/")
def tag(tag: str) -> Response:
    index = query.tag_index(get_store(), get_postbase_config().include_future)
    return term_page("tags", tag, index)


@bp.route("/categories/<category>/")
def category(category: str) -> Response:
    index = query.category_index(get_store(), get_postbase_config().include_future)
    return term_page("categories", category, index)


@bp.route(f"/{FEED_FILENAME}")
def rss() -> Response:
    site = get_site()
    feed = make_feed(published_posts(), site.url_for(FEED_FILENAME), site)
    return no_store(Response(feed, mimetype="application/rss+xml"))
