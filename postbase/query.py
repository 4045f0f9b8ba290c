"""Derived views over a Store.  Nothing here mutates anything."""

from datetime import datetime, timezone
from logging import getLogger
from typing import Dict, Iterable, List, Optional, Set

from . import exc
from .frontmatter import slugify
from .store import Store
from .value_objs import Post, SeriesChain, SeriesNav, SeriesRef, TermSlugs

logger = getLogger(__name__)


def is_published(post: Post, include_future: bool = False, now: Optional[datetime] = None) -> bool:
    """Drafts are never published.  Posts dated after now are published only
    if include_future is set."""
    if post.draft:
        return False
    if include_future:
        return True
    if now is None:
        now = datetime.now(timezone.utc)
    return post.date <= now


def listing_order(posts: Iterable[Post]) -> List[Post]:
    """Newest first, with slug order breaking ties."""
    by_slug = sorted(posts, key=lambda p: p.slug)
    return sorted(by_slug, key=lambda p: p.date, reverse=True)


def published(
    store: Store, include_future: bool = False, now: Optional[datetime] = None
) -> List[Post]:
    if now is None:
        now = datetime.now(timezone.utc)
    return listing_order(
        post for post in store if is_published(post, include_future, now)
    )


def by_tag(
    store: Store, tag: str, include_future: bool = False, now: Optional[datetime] = None
) -> List[Post]:
    return [post for post in published(store, include_future, now) if tag in post.tags]


def by_category(
    store: Store,
    category: str,
    include_future: bool = False,
    now: Optional[datetime] = None,
) -> List[Post]:
    return [
        post
        for post in published(store, include_future, now)
        if category in post.categories
    ]


def tag_index(
    store: Store, include_future: bool = False, now: Optional[datetime] = None
) -> Dict[str, List[Post]]:
    index: Dict[str, List[Post]] = {}
    for post in published(store, include_future, now):
        for tag in post.tags:
            index.setdefault(tag, []).append(post)
    return {tag: index[tag] for tag in sorted(index)}


def category_index(
    store: Store, include_future: bool = False, now: Optional[datetime] = None
) -> Dict[str, List[Post]]:
    index: Dict[str, List[Post]] = {}
    for post in published(store, include_future, now):
        for category in post.categories:
            index.setdefault(category, []).append(post)
    return {category: index[category] for category in sorted(index)}


def term_slugs(terms: Iterable[str], section: str = "tags") -> Dict[str, str]:
    """Give each term a url slug that no other term in the section shares.

    Terms are case-sensitive, so "Elixir" and "elixir" are different tags
    that slugify alike.  In sorted order, the first term takes the plain slug
    and later ones get a numeric suffix.  Terms with no usable slug are left
    out.

    """
    slugs: Dict[str, str] = {}
    taken: Dict[str, str] = {}
    for term in sorted(set(terms)):
        base = slugify(term)
        if base == "":
            logger.warning("%s '%s' has no usable slug", section, term)
            continue
        slug = base
        suffix = 2
        while slug in taken:
            slug = f"{base}-{suffix}"
            suffix += 1
        if slug != base:
            logger.warning(
                "%s '%s' and '%s' share a slug, using '%s'",
                section,
                taken[base],
                term,
                slug,
            )
        taken[slug] = term
        slugs[term] = slug
    return slugs


def site_term_slugs(
    store: Store, include_future: bool = False, now: Optional[datetime] = None
) -> TermSlugs:
    return TermSlugs(
        tags=term_slugs(tag_index(store, include_future, now), "tags"),
        categories=term_slugs(category_index(store, include_future, now), "categories"),
    )


def resolve_ref(
    store: Store,
    ref: Optional[SeriesRef],
    include_future: bool = False,
    now: Optional[datetime] = None,
) -> Optional[Post]:
    """Find the post a series reference names, if it names a published one.

    Tried in order: the slug from a link target, the slug of the title and
    finally the title itself (ignoring case).

    """
    if ref is None:
        return None

    candidates: List[Optional[Post]] = []
    if ref.slug is not None:
        candidates.append(store.get(ref.slug))
    if ref.title != "":
        candidates.append(store.get(slugify(ref.title)))
        folded = ref.title.casefold()
        candidates.extend(post for post in store if post.title.casefold() == folded)

    for candidate in candidates:
        if candidate is not None and is_published(candidate, include_future, now):
            return candidate
    return None


def series_nav(
    store: Store, post: Post, include_future: bool = False, now: Optional[datetime] = None
) -> SeriesNav:
    return SeriesNav(
        previous=resolve_ref(store, post.series_links.previous, include_future, now),
        next=resolve_ref(store, post.series_links.next, include_future, now),
    )


def series_chain(
    store: Store,
    start_slug: str,
    include_future: bool = False,
    now: Optional[datetime] = None,
) -> SeriesChain:
    """Follow "next in series" links from start_slug.

    Stops at the first absent or dangling link, or when a post would be
    visited twice, in which case the chain carries the cycle.

    """
    if now is None:
        now = datetime.now(timezone.utc)
    start = store.post_by_slug(start_slug)
    if not is_published(start, include_future, now):
        raise exc.PostDoesNotExistException(start_slug)

    chain = [start]
    seen: Set[str] = {start.slug}
    current = start
    while True:
        following = resolve_ref(store, current.series_links.next, include_future, now)
        if following is None:
            return SeriesChain(tuple(chain))
        if following.slug in seen:
            cycle = exc.SeriesCycleDetected([p.slug for p in chain] + [following.slug])
            logger.info("%s", cycle)
            return SeriesChain(tuple(chain), cycle)
        chain.append(following)
        seen.add(following.slug)
        current = following


def series_cycles(
    store: Store, include_future: bool = False, now: Optional[datetime] = None
) -> List[exc.SeriesCycleDetected]:
    """Every distinct series cycle reachable from a published post."""
    cycles = []
    reported: Set[frozenset] = set()
    for post in published(store, include_future, now):
        cycle = series_chain(store, post.slug, include_future, now).cycle
        if cycle is None:
            continue
        # the looping part of the path, ie: from the first visit of the
        # revisited slug onwards
        looped = cycle.slugs[cycle.slugs.index(cycle.slugs[-1]) : -1]
        key = frozenset(looped)
        if key not in reported:
            reported.add(key)
            cycles.append(cycle)
    return cycles
