"""Parsing of content files: the delimited header block ("front matter") and
the series links written into post bodies.

Two header styles are understood, as most static site generators do:

    ---             +++
    title: Hello    title = "Hello"
    ---             +++

the first being YAML and the second TOML.

"""

import re
import unicodedata
from datetime import date, datetime, time, timezone
from logging import getLogger
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

import toml
import yaml
from dateutil import parser as date_parser

from . import exc
from .value_objs import FrontMatter, SeriesLinks, SeriesRef

logger = getLogger(__name__)

DELIMITERS = {"---": "yaml", "+++": "toml"}

KNOWN_KEYS = {
    "title",
    "date",
    "draft",
    "author",
    "categories",
    "tags",
    "description",
    "slug",
}

SERIES_LINK_REGEX = re.compile(
    r"^[^\w\n]*(?P<direction>previous|next)\s+in\s+(?:the\s+)?series[^\w\n]*?:[*_ \t]*(?P<ref>.+?)[*_ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)

MARKDOWN_LINK_REGEX = re.compile(
    r"^\[(?P<text>[^\]]+)\]\((?P<target>[^)]+)\)"
)

REF_SHORTCODE_REGEX = re.compile(r'\{\{[<%]\s*(?:rel)?ref\s+"(?P<ref>[^"]+)"\s*[>%]\}\}')


def slugify(text: str) -> str:
    """Convert text to URL-safe slug."""
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def split_front_matter(text: str) -> Tuple[str, str, str]:
    """Split a content file into (format, header, body)."""
    if text.startswith("\ufeff"):
        text = text[1:]
    first_line, sep, rest = text.partition("\n")
    delimiter = first_line.rstrip()
    if delimiter not in DELIMITERS:
        raise exc.MalformedFrontMatter("no front matter delimiter on the first line")

    header_lines = []
    remaining = rest if sep else ""
    while remaining:
        line, sep, remaining = remaining.partition("\n")
        if line.rstrip() == delimiter:
            return DELIMITERS[delimiter], "\n".join(header_lines), remaining
        header_lines.append(line)
    raise exc.MalformedFrontMatter(f"no closing '{delimiter}' for the front matter")


def load_header(fmt: str, header: str) -> Dict[str, Any]:
    try:
        if fmt == "yaml":
            as_dict = yaml.safe_load(header)
        else:
            as_dict = toml.loads(header)
    except (yaml.YAMLError, toml.TomlDecodeError, ValueError) as e:
        # yaml raises a bare ValueError for timestamps like 2026-02-30
        raise exc.MalformedFrontMatter(f"unparseable {fmt} front matter: {e}") from e
    if as_dict is None:
        return {}
    if not isinstance(as_dict, Mapping):
        raise exc.MalformedFrontMatter("front matter is not a set of key/value pairs")
    return dict(as_dict)


def parse_date(value: Any) -> datetime:
    """Interpret a front matter date as a timezone-aware datetime.

    A bare date is taken as midnight and naive datetimes are taken as UTC.

    """
    if isinstance(value, datetime):
        as_datetime = value
    elif isinstance(value, date):
        as_datetime = datetime.combine(value, time())
    elif isinstance(value, str) and value.strip() != "":
        try:
            as_datetime = date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            raise exc.MalformedFrontMatter(f"unparseable date: '{value}'") from e
    else:
        raise exc.MalformedFrontMatter(f"unparseable date: {value!r}")

    if as_datetime.tzinfo is None:
        as_datetime = as_datetime.replace(tzinfo=timezone.utc)
    return as_datetime


def parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise exc.MalformedFrontMatter(f"'{key}' must be true or false, not {value!r}")


def parse_terms(key: str, value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset([value])
    if isinstance(value, (list, tuple)):
        # yaml will happily give us ints for tags like 2024
        return frozenset(str(term) for term in value if term is not None)
    raise exc.MalformedFrontMatter(f"'{key}' must be a list of strings")


def parse_string(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise exc.MalformedFrontMatter(f"'{key}' must be a string")
    return str(value)


def parse(text: str) -> Tuple[FrontMatter, str]:
    """Parse the raw text of a content file into its front matter and body."""
    fmt, header, body = split_front_matter(text)
    as_dict = load_header(fmt, header)

    title = parse_string("title", as_dict.get("title")).strip()
    if title == "":
        raise exc.MalformedFrontMatter("missing required field 'title'")
    if as_dict.get("date") is None:
        raise exc.MalformedFrontMatter("missing required field 'date'")

    slug: Optional[str] = None
    if as_dict.get("slug") is not None:
        slug = slugify(parse_string("slug", as_dict["slug"])) or None

    front_matter = FrontMatter(
        title=title,
        date=parse_date(as_dict["date"]),
        draft=parse_bool("draft", as_dict.get("draft", False)),
        author=parse_string("author", as_dict.get("author")),
        categories=parse_terms("categories", as_dict.get("categories")),
        tags=parse_terms("tags", as_dict.get("tags")),
        description=parse_string("description", as_dict.get("description")),
        slug=slug,
        extra={k: v for k, v in as_dict.items() if k not in KNOWN_KEYS},
    )
    return front_matter, body


def parse_series_ref(ref: str) -> SeriesRef:
    link_match = MARKDOWN_LINK_REGEX.match(ref)
    if link_match is None:
        return SeriesRef(title=ref.strip())

    title = link_match.group("text").strip()
    target = link_match.group("target").strip()
    shortcode_match = REF_SHORTCODE_REGEX.search(target)
    if shortcode_match is not None:
        target = shortcode_match.group("ref")
    # drop any link title, query string and fragment
    target = target.split()[0] if target.split() else ""
    target = target.split("#")[0].split("?")[0]
    segments = [segment for segment in target.split("/") if segment not in ("", ".", "..")]
    if not segments:
        return SeriesRef(title=title)
    last = re.sub(r"\.(md|markdown|html?)$", "", segments[-1])
    if last in ("index", "_index") and len(segments) > 1:
        last = segments[-2]
    return SeriesRef(title=title, slug=slugify(last) or None)


def extract_series_links(body: str) -> SeriesLinks:
    """Find the "Previous in series: ..." and "Next in series: ..." lines in a
    post body.  The first of each wins."""
    found: Dict[str, SeriesRef] = {}
    for match in SERIES_LINK_REGEX.finditer(body):
        direction = match.group("direction").lower()
        if direction in found:
            continue
        ref = parse_series_ref(match.group("ref"))
        if ref.title == "" and ref.slug is None:
            continue
        found[direction] = ref
    return SeriesLinks(previous=found.get("previous"), next=found.get("next"))
