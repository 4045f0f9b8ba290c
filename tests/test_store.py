from pathlib import Path

import pytest

from postbase import exc
from postbase.store import load, find_content_files
from postbase.value_objs import SeriesRef

from .utils import write_post


def test_load(content_dir):
    write_post(
        content_dir,
        "elixir.md",
        title="Elixir",
        date="2026-02-02",
        tags=["elixir"],
        categories=["Programming"],
        body="Pipes.\n\nNext in series: Part Two\n",
    )
    write_post(content_dir, "nested/deeper/about.md", title="About", date="2025-01-01")

    store = load(content_dir)

    assert len(store) == 2
    assert store.failures == ()
    assert [p.slug for p in store.all_posts()] == ["about", "elixir"]

    elixir = store.post_by_slug("elixir")
    assert elixir.title == "Elixir"
    assert elixir.tags == frozenset(["elixir"])
    assert elixir.categories == frozenset(["Programming"])
    assert elixir.source_path == "elixir.md"
    assert elixir.series_links.next == SeriesRef(title="Part Two")
    assert elixir.series_links.previous is None

    assert store.post_by_slug("about").source_path == "nested/deeper/about.md"


def test_load__empty_directory(content_dir):
    store = load(content_dir)
    assert len(store) == 0
    assert store.failures == ()


def test_load__ignores_other_files(content_dir):
    write_post(content_dir, "post.md", title="A post")
    (content_dir / "image.png").write_bytes(b"\x89PNG")
    (content_dir / "notes.txt").write_text("title: nope")
    assert [p.slug for p in load(content_dir)] == ["a-post"]


def test_load__missing_directory(tmp_path):
    with pytest.raises(exc.DirectoryReadError):
        load(tmp_path / "does-not-exist")


def test_load__not_a_directory(tmp_path):
    not_a_dir = tmp_path / "file.md"
    not_a_dir.write_text("hello")
    with pytest.raises(exc.DirectoryReadError):
        load(not_a_dir)


def test_load__missing_date_does_not_stop_others(content_dir):
    write_post(content_dir, "fine.md", title="Fine")
    bad = write_post(content_dir, "undated.md", title="Undated", date=None)
    write_post(content_dir, "zzz.md", title="Also fine")

    store = load(content_dir)

    assert [p.slug for p in store] == ["also-fine", "fine"]
    (failure,) = store.failures
    assert failure.path == bad
    assert isinstance(failure.error, exc.MalformedFrontMatter)
    assert failure.error.path == bad


@pytest.mark.parametrize("workers", [1, 4])
def test_load__impossible_date_does_not_stop_others(content_dir, workers):
    bad = content_dir / "bad.md"
    bad.write_text("---\ntitle: Bad\ndate: 2026-02-30\n---\nBody\n", encoding="utf-8")
    write_post(content_dir, "good.md", title="Good")

    store = load(content_dir, workers=workers)

    assert [p.slug for p in store] == ["good"]
    (failure,) = store.failures
    assert failure.path == bad
    assert isinstance(failure.error, exc.MalformedFrontMatter)

def test_load__unreadable_file(content_dir):
    (content_dir / "latin1.md").write_bytes(
        b"---\ntitle: Caf\xe9\ndate: 2024-01-01\n---\n"
    )
    write_post(content_dir, "fine.md", title="Fine")
    store = load(content_dir)
    assert [p.slug for p in store] == ["fine"]
    (failure,) = store.failures
    assert isinstance(failure.error, exc.ContentFileReadError)


def test_load__duplicate_slug(content_dir):
    first = write_post(content_dir, "a/about.md", title="About", body="First\n")
    second = write_post(content_dir, "b/about.md", title="About", body="Second\n")

    store = load(content_dir)

    assert len(store) == 1
    assert store.post_by_slug("about").body == "First\n"
    (failure,) = store.failures
    assert failure.path == second
    assert isinstance(failure.error, exc.DuplicateSlugError)
    assert failure.error.slug == "about"
    assert failure.error.first_path == first


def test_load__explicit_slug_wins(content_dir):
    write_post(content_dir, "about.md", title="About", slug="about-me")
    write_post(content_dir, "other.md", title="About Me")
    store = load(content_dir)
    assert [p.slug for p in store] == ["about-me"]
    (failure,) = store.failures
    assert isinstance(failure.error, exc.DuplicateSlugError)


def test_load__path_slugs(content_dir):
    write_post(content_dir, "posts/2026-02-02-hello.md", title="Hello")
    write_post(content_dir, "posts/bundle/index.md", title="A bundle")
    store = load(content_dir, slug_source="path")
    assert [p.slug for p in store] == ["2026-02-02-hello", "bundle"]


def test_load__path_slugs_allow_same_title(content_dir):
    write_post(content_dir, "one.md", title="Same")
    write_post(content_dir, "two.md", title="Same")
    store = load(content_dir, slug_source="path")
    assert [p.slug for p in store] == ["one", "two"]


def test_load__is_idempotent(blog_content):
    assert load(blog_content).all_posts() == load(blog_content).all_posts()


def test_load__parallel_matches_serial(content_dir):
    for n in range(20):
        # every other file collides, to check duplicates resolve the same way
        write_post(content_dir, f"post-{n:02}.md", title=f"Post {n // 2}", body=f"{n}\n")
    serial = load(content_dir)
    parallel = load(content_dir, workers=4)
    assert parallel.all_posts() == serial.all_posts()
    assert [f.path for f in parallel.failures] == [f.path for f in serial.failures]
    assert all(post.body in {f"{2 * n}\n" for n in range(10)} for post in parallel)


def test_post_by_slug__missing(blog_content):
    store = load(blog_content)
    with pytest.raises(exc.PostDoesNotExistException):
        store.post_by_slug("nope")
    assert store.get("nope") is None
    assert "nope" not in store
    assert "part-one" in store


def test_find_content_files__sorted(content_dir):
    for name in ["b.md", "a/c.markdown", "a.md"]:
        write_post(content_dir, name)
    assert find_content_files(content_dir) == [
        content_dir / Path("a/c.markdown"),
        content_dir / "a.md",
        content_dir / "b.md",
    ]
