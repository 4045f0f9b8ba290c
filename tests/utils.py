from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
import random
import string

import yaml

from postbase.value_objs import Post, SeriesLinks

# a fixed "current time" so that tests don't depend on when they are run
NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def random_string() -> str:
    return "".join(random.choice(string.ascii_lowercase) for _ in range(32))


def front_matter(**fields: Any) -> str:
    return "---\n" + yaml.safe_dump(fields, sort_keys=False) + "---\n"


def write_post(
    directory: Path,
    filename: str,
    body: str = "Some text.\n",
    **fields: Any,
) -> Path:
    """Write a content file with YAML front matter.  Pass title=None or
    date=None to leave them out."""
    fields.setdefault("title", "A post")
    fields.setdefault("date", "2024-01-01")
    fields = {k: v for k, v in fields.items() if v is not None}
    path = directory / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(front_matter(**fields) + body, encoding="utf-8")
    return path


def make_post(series_links: Optional[SeriesLinks] = None, **overrides) -> Post:
    kwargs = {
        "slug": "hello-world",
        "title": "Hello, World",
        "date": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "body": "Hi, so about *functional programming*...",
        "source_path": "hello-world.md",
        "description": "The first post",
    }
    kwargs.update(**overrides)
    if series_links is not None:
        kwargs["series_links"] = series_links
    return Post(**kwargs)  # type: ignore
