"""The content store: every post found under a content directory, loaded
once and read-only afterwards."""

from concurrent.futures import ThreadPoolExecutor
from logging import getLogger
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from . import exc
from .frontmatter import parse, extract_series_links, slugify
from .value_objs import FrontMatter, LoadFailure, Post

logger = getLogger(__name__)

CONTENT_EXTENSIONS = (".md", ".markdown")

# filenames that stand for the directory they are in (page bundles)
BUNDLE_INDEX_STEMS = ("index", "_index")

ParseResult = Union[Tuple[FrontMatter, str], exc.PostbaseException]


class Store:
    """The loaded posts, keyed by slug, plus whatever failed to load."""

    def __init__(
        self, directory: Path, posts: Sequence[Post], failures: Sequence[LoadFailure]
    ):
        self.directory = directory
        self._posts: Dict[str, Post] = {
            post.slug: post for post in sorted(posts, key=lambda p: p.slug)
        }
        self.failures: Tuple[LoadFailure, ...] = tuple(failures)

    def all_posts(self) -> List[Post]:
        """All posts, drafts included, in slug order."""
        return list(self._posts.values())

    def post_by_slug(self, slug: str) -> Post:
        try:
            return self._posts[slug]
        except KeyError:
            raise exc.PostDoesNotExistException(slug)

    def get(self, slug: str) -> Optional[Post]:
        return self._posts.get(slug)

    def __contains__(self, slug: object) -> bool:
        return slug in self._posts

    def __len__(self) -> int:
        return len(self._posts)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts.values())

    def __repr__(self) -> str:
        return f"<Store {self.directory}: {len(self)} posts, {len(self.failures)} failures>"


def find_content_files(
    directory: Path, extensions: Sequence[str] = CONTENT_EXTENSIONS
) -> List[Path]:
    """Returns the content files under directory, in traversal order."""
    if not directory.is_dir():
        raise exc.DirectoryReadError(directory)
    try:
        return sorted(
            path
            for path in directory.rglob("*")
            if path.suffix.lower() in extensions and path.is_file()
        )
    except OSError as e:
        raise exc.DirectoryReadError(directory) from e


def path_slug(relative_path: Path) -> str:
    stem = relative_path.stem
    if stem in BUNDLE_INDEX_STEMS and relative_path.parent != Path("."):
        stem = relative_path.parent.name
    return slugify(stem)


def derive_slug(front_matter: FrontMatter, relative_path: Path, slug_source: str) -> str:
    if front_matter.slug is not None:
        return front_matter.slug
    if slug_source == "path":
        return path_slug(relative_path)
    return slugify(front_matter.title) or path_slug(relative_path)


def parse_file(path: Path) -> ParseResult:
    """Read and parse one file.  Errors are returned rather than raised so
    that this can be mapped over a pool."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.exception("unable to read %s", path)
        return exc.ContentFileReadError(path)
    try:
        return parse(text)
    except exc.MalformedFrontMatter as e:
        e.path = path
        return e


def load(
    directory: Path,
    slug_source: str = "title",
    workers: int = 1,
    extensions: Sequence[str] = CONTENT_EXTENSIONS,
) -> Store:
    """Load every content file under directory into a Store.

    A file that fails to parse, or whose slug is already taken by a file
    earlier in traversal order, is recorded as a failure and skipped.  Only
    being unable to read the directory itself is fatal.

    """
    paths = find_content_files(directory, extensions)
    logger.info("found %d content files under %s", len(paths), directory)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map yields in submission order, so traversal order is kept
            results: List[ParseResult] = list(executor.map(parse_file, paths))
    else:
        results = [parse_file(path) for path in paths]

    posts: List[Post] = []
    failures: List[LoadFailure] = []
    first_seen: Dict[str, Path] = {}
    for path, result in zip(paths, results):
        if isinstance(result, exc.PostbaseException):
            logger.warning("skipping %s: %s", path, result)
            failures.append(LoadFailure(path, result))
            continue

        front_matter, body = result
        relative_path = path.relative_to(directory)
        slug = derive_slug(front_matter, relative_path, slug_source)
        if slug in first_seen:
            duplicate = exc.DuplicateSlugError(slug, path, first_seen[slug])
            logger.warning("skipping %s", duplicate)
            failures.append(LoadFailure(path, duplicate))
            continue
        first_seen[slug] = path

        posts.append(
            Post(
                slug=slug,
                title=front_matter.title,
                date=front_matter.date,
                body=body,
                source_path=relative_path.as_posix(),
                draft=front_matter.draft,
                author=front_matter.author,
                categories=front_matter.categories,
                tags=front_matter.tags,
                description=front_matter.description,
                series_links=extract_series_links(body),
                extra=front_matter.extra,
            )
        )

    logger.info("loaded %d posts (%d failures)", len(posts), len(failures))
    return Store(directory, posts, failures)
