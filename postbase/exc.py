from pathlib import Path
from typing import Optional, Sequence


class PostbaseException(Exception):
    """ABC for postbase exceptions to make it possible to catch them collectively"""


class MalformedFrontMatter(PostbaseException):
    """The header block of a content file is missing, unparseable or lacks a
    required field."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(message, path)

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class ContentFileReadError(PostbaseException):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(path)


class DuplicateSlugError(PostbaseException):
    """Two content files map to the same slug.  The later one (in traversal
    order) loses."""

    def __init__(self, slug: str, path: Path, first_path: Path):
        self.slug = slug
        self.path = path
        self.first_path = first_path
        super().__init__(slug, path, first_path)

    def __str__(self) -> str:
        return f"slug '{self.slug}' from {self.path} already used by {self.first_path}"


class DirectoryReadError(PostbaseException):
    def __init__(self, directory: Path):
        self.directory = directory
        super().__init__(directory)


class SeriesCycleDetected(PostbaseException):
    """A series chain revisits a post.  Reported, not raised, by the query
    layer."""

    def __init__(self, slugs: Sequence[str]):
        # the path walked, ending with the revisited slug
        self.slugs = tuple(slugs)
        super().__init__(self.slugs)

    def __str__(self) -> str:
        return "series cycle: " + " -> ".join(self.slugs)


class PostDoesNotExistException(PostbaseException):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(slug)


class InvalidConfigException(PostbaseException):
    pass
