from typing import Sequence

from feedgen.feed import FeedGenerator

from .value_objs import Post, Site
from .version import get_version


def make_feed(posts: Sequence[Post], feed_url: str, site: Site) -> bytes:
    """An RSS feed of the given posts, which should already be filtered down
    to the published ones."""
    fg = FeedGenerator()
    fg.id(feed_url)
    fg.title(site.title)
    fg.language("en")
    fg.link(href=feed_url, rel="self")
    fg.link(href=site.url_for(""), rel="alternate")
    fg.description(site.title)
    fg.generator("postbase", version=get_version())
    if site.author:
        fg.author(name=site.author)

    # feedgen puts entries added later at the top of the feed
    for post in reversed(posts):
        post_url = site.url_for("posts", post.slug)
        fe = fg.add_entry()
        fe.id(post_url)
        fe.title(post.title)
        fe.description(post.description or post.title)
        fe.link(href=post_url)
        fe.pubDate(post.date)
        for tag in post.sorted_tags():
            fe.category(term=tag)

    return fg.rss_str(pretty=True)
