from logging import DEBUG, basicConfig
from pathlib import Path

import pytest

from postbase.config import Config
from postbase.web.app import init_app

from .utils import write_post


@pytest.fixture(scope="session")
def configure_logging():
    basicConfig(level=DEBUG)


@pytest.fixture(scope="function")
def content_dir(tmp_path) -> Path:
    directory = tmp_path / "content"
    directory.mkdir()
    return directory


@pytest.fixture(scope="function")
def config(tmp_path, content_dir) -> Config:
    return Config(
        content_dir=content_dir,
        output_dir=tmp_path / "public",
        site_title="Test blog",
        base_url="http://localhost",
        author="A. Author",
        # so that tests don't depend on when they are run
        include_future=True,
    )


@pytest.fixture(scope="function")
def blog_content(content_dir):
    """A small blog: three published posts, one of them a two part series,
    and a draft."""
    write_post(
        content_dir,
        "posts/elixir-intro.md",
        title="Getting started with Elixir",
        date="2026-02-02",
        tags=["elixir", "beginner"],
        categories=["Programming"],
        description="Pattern matching and pipes",
        body="Elixir is a functional language.\n<!--more-->\nThe rest of it.\n",
    )
    write_post(
        content_dir,
        "posts/part-one.md",
        title="Part One",
        date="2026-02-05",
        tags=["elixir", "series"],
        body="The first part.\n\nNext in series: [Part Two](/posts/part-two/)\n",
    )
    write_post(
        content_dir,
        "posts/part-two.md",
        title="Part Two",
        date="2026-02-09",
        tags=["series"],
        categories=["Programming"],
        body="The second part.\n\nPrevious in series: Part One\n",
    )
    write_post(
        content_dir,
        "posts/secret.md",
        title="Secret plans",
        date="2026-02-10",
        draft=True,
        tags=["elixir"],
        body="Not yet.\n",
    )
    return content_dir


@pytest.fixture(scope="function")
def app(config, blog_content):
    a = init_app(config)
    a.config["TESTING"] = True
    a.config["DEBUG"] = False
    return a


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()
