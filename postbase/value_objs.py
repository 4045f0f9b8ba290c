from datetime import datetime
from logging import getLogger
from pathlib import Path
from typing import (
    Any,
    FrozenSet,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from dataclasses import dataclass, field

from . import exc

logger = getLogger(__name__)


@dataclass(frozen=True)
class SeriesRef:
    """A weak reference to another post, as written in a post body.

    Nothing guarantees that it points anywhere: it's resolved (by slug, then
    by title) at query time.

    """

    title: str
    slug: Optional[str] = None


@dataclass(frozen=True)
class SeriesLinks:
    previous: Optional[SeriesRef] = None
    next: Optional[SeriesRef] = None


NO_SERIES_LINKS = SeriesLinks()


@dataclass(frozen=True)
class FrontMatter:
    """The interpreted header block of a content file."""

    title: str
    date: datetime
    draft: bool = False
    author: str = ""
    categories: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()
    description: str = ""
    slug: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class Post:
    slug: str
    title: str
    date: datetime
    body: str
    source_path: str
    draft: bool = False
    author: str = ""
    categories: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()
    description: str = ""
    series_links: SeriesLinks = NO_SERIES_LINKS
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def render_date(self) -> str:
        return self.date.date().isoformat()

    def sorted_tags(self) -> List[str]:
        return sorted(self.tags)

    def sorted_categories(self) -> List[str]:
        return sorted(self.categories)


@dataclass(frozen=True)
class LoadFailure:
    path: Path
    error: exc.PostbaseException


@dataclass(frozen=True)
class SeriesChain:
    posts: Tuple[Post, ...]
    cycle: Optional[exc.SeriesCycleDetected] = None

    def slugs(self) -> List[str]:
        return [post.slug for post in self.posts]


@dataclass(frozen=True)
class SeriesNav:
    previous: Optional[Post] = None
    next: Optional[Post] = None


@dataclass(frozen=True)
class Excerpt:
    markdown: str
    truncated: bool


@dataclass(frozen=True)
class TermSlugs:
    """The url slug of each tag and category.  Slugs are unique within a
    section even where two terms slugify alike."""

    tags: Mapping[str, str] = field(default_factory=dict)
    categories: Mapping[str, str] = field(default_factory=dict)

    def for_section(self, section: str) -> Mapping[str, str]:
        return self.tags if section == "tags" else self.categories


@dataclass
class Site:
    """Site-wide values needed when rendering pages."""

    title: str
    base_url: str
    author: str = ""

    def url_for(self, *parts: str) -> str:
        path = "/".join(part.strip("/") for part in parts if part)
        base = self.base_url.rstrip("/")
        if path == "":
            return base + "/"
        if "." in path.rsplit("/", 1)[-1]:
            return f"{base}/{path}"
        return f"{base}/{path}/"


@dataclass
class BuildReport:
    loaded: int = 0
    published: int = 0
    failures: List[LoadFailure] = field(default_factory=list)
    cycles: List[exc.SeriesCycleDetected] = field(default_factory=list)
    pages: List[Path] = field(default_factory=list)

    def warning_count(self) -> int:
        return len(self.failures) + len(self.cycles)

    def failures_of_type(
        self, exc_type: Union[type, Tuple[type, ...]]
    ) -> Sequence[LoadFailure]:
        return [f for f in self.failures if isinstance(f.error, exc_type)]
