from lxml import etree
import feedparser

from postbase.web.app import init_app

from .utils import write_post


def parse_resp(resp):
    return etree.fromstring(resp.data, etree.HTMLParser())


def test_blog_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["Cache-Control"] == "no-store"
    root = parse_resp(resp)
    assert [a.text for a in root.findall(".//article/h2/a")] == [
        "Part Two",
        "Part One",
        "Getting started with Elixir",
    ]
    assert b"Secret plans" not in resp.data


def test_post(client):
    resp = client.get("/posts/part-two/")
    assert resp.status_code == 200
    root = parse_resp(resp)
    assert root.find(".//article/h1").text == "Part Two"
    (prev_link,) = root.findall(".//nav[@class='series']/a[@rel='prev']")
    assert prev_link.text == "Part One"


def test_post__does_not_exist(client):
    resp = client.get("/posts/nope/")
    assert resp.status_code == 404
    assert resp.data == b"http error code 404: that post does not exist"


def test_post__draft(client):
    resp = client.get("/posts/secret-plans/")
    assert resp.status_code == 404


def test_tag(client):
    resp = client.get("/tags/series/")
    assert resp.status_code == 200
    root = parse_resp(resp)
    assert root.find(".//main/h1").text == "series"
    assert [a.text for a in root.findall(".//article/h2/a")] == ["Part Two", "Part One"]


def test_tag__unknown(client):
    assert client.get("/tags/cobol/").status_code == 404


def test_tag__differing_in_case(config, content_dir):
    write_post(content_dir, "a.md", title="A", tags=["Elixir"])
    write_post(content_dir, "b.md", title="B", tags=["elixir"])
    client = init_app(config).test_client()

    upper = parse_resp(client.get("/tags/elixir/"))
    assert [a.text for a in upper.findall(".//article/h2/a")] == ["A"]
    lower = parse_resp(client.get("/tags/elixir-2/"))
    assert [a.text for a in lower.findall(".//article/h2/a")] == ["B"]

    post_b = parse_resp(client.get("/posts/b/"))
    (tag_link,) = post_b.findall(".//ul[@class='tags']/li/a")
    assert tag_link.attrib["href"] == "http://localhost/tags/elixir-2/"


def test_category(client):
    resp = client.get("/categories/programming/")
    assert resp.status_code == 200
    root = parse_resp(resp)
    assert root.find(".//main/h1").text == "Programming"


def test_rss(client):
    resp = client.get("/index.xml")
    assert resp.status_code == 200
    assert resp.mimetype == "application/rss+xml"
    parsed = feedparser.parse(resp.data)
    assert parsed["feed"]["title"] == "Test blog"
    assert len(parsed["entries"]) == 3


def test_reload_store(config, content_dir):
    app = init_app(config, reload_store=True)
    client = app.test_client()
    assert client.get("/posts/fresh/").status_code == 404
    write_post(content_dir, "fresh.md", title="Fresh")
    assert client.get("/posts/fresh/").status_code == 200
