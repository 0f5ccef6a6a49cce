from datetime import datetime, timezone

import pytest
from bs4 import BeautifulSoup

from site_digest.parser.html_parser import TITLE_NOT_FOUND, extract_links, extract_page, parse_page

ARTICLE = """
<html>
<head>
  <title>  Launch Notes  </title>
  <meta name="description" content="All about the launch">
  <meta name="author" content="Jane Roe">
</head>
<body>
  <h1>Main</h1>
  <h3> Details </h3>
  <h2>   </h2>
  <time datetime="2024-03-01T12:30:00+02:00">March 1</time>
  <p> First paragraph. </p>
  <p></p>
  <p>Second <b>bold</b> paragraph.</p>
  <h6>Footer</h6>
</body>
</html>
"""


def test_extract_full_article():
    page = extract_page(ARTICLE, "http://example.com/post", 10_000)
    assert page.url == "http://example.com/post"
    assert page.title == "Launch Notes"
    assert page.meta_description == "All about the launch"
    assert page.author == "Jane Roe"
    assert page.published_at == datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)
    assert [(h.level, h.text) for h in page.headings] == [(1, "Main"), (3, "Details"), (6, "Footer")]
    assert page.paragraphs == ["First paragraph.", "Second bold paragraph."]
    assert page.extract == "All about the launch"


def test_missing_elements_are_absent():
    page = extract_page("<html><body><div>nothing</div></body></html>", "http://example.com/", 100)
    assert page.title == TITLE_NOT_FOUND
    assert page.meta_description is None
    assert page.author is None
    assert page.published_at is None
    assert page.headings == []
    assert page.paragraphs == []
    assert page.extract is None


def test_extract_falls_back_to_first_paragraph():
    page = extract_page("<title>t</title><p>one</p><p>two</p>", "http://example.com/", 100)
    assert page.extract == "one"


@pytest.mark.parametrize(
    "value",
    ["yesterday", "2024-03-01", "2024-03-01T12:30:00", ""],
)
def test_unparsable_or_naive_dates_are_dropped(value):
    page = extract_page(f'<time datetime="{value}">x</time>', "http://example.com/", 100)
    assert page.published_at is None


def test_zulu_timestamp_is_accepted():
    page = extract_page('<time datetime="2023-12-31T23:59:59Z"></time>', "http://example.com/", 100)
    assert page.published_at == datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def test_only_first_time_element_counts():
    html = '<time>no attribute</time><time datetime="2024-01-01T00:00:00Z"></time>'
    assert extract_page(html, "http://example.com/", 100).published_at is None


def test_paragraph_budget_keeps_whole_prefix():
    body = "".join(f"<p>{c * 4000}</p>" for c in "abc")
    page = extract_page(body, "http://example.com/", 8000)
    assert [len(p) for p in page.paragraphs] == [4000, 4000]
    assert page.content_length() == 8000


def test_paragraph_budget_never_cuts_midway():
    body = "<p>" + "x" * 60 + "</p><p>" + "y" * 60 + "</p>"
    page = extract_page(body, "http://example.com/", 100)
    assert page.paragraphs == ["x" * 60]
    assert page.content_length() <= 100


def test_extract_uses_first_kept_paragraph_after_trim():
    page = extract_page("<p>" + "z" * 50 + "</p>", "http://example.com/", 10)
    assert page.paragraphs == []
    assert page.extract is None


def test_extract_links_resolves_and_filters():
    html = """
    <a href="/about">About</a>
    <a href="contact#form">Contact</a>
    <a href="/about#team">About again</a>
    <a href="https://other.org/x">Other</a>
    <a href="mailto:me@example.com">Mail</a>
    <a href="javascript:void(0)">JS</a>
    <a href="#top">Top</a>
    <a href="ftp://example.com/file">FTP</a>
    <a>no href</a>
    """
    soup = BeautifulSoup(html, "html.parser")
    links = extract_links(soup, "http://example.com/blog/")
    assert links == [
        "http://example.com/about",
        "http://example.com/blog/contact",
        "https://other.org/x",
    ]


def test_parse_page_returns_page_and_links():
    parsed = parse_page('<title>T</title><p>text</p><a href="/next">n</a>', "http://example.com/", 100)
    assert parsed.page.title == "T"
    assert parsed.links == ["http://example.com/next"]


def test_extract_links_normalizes_origin_and_default_port():
    html = """
    <a href="HTTP://Example.COM">Home</a>
    <a href="http://example.com:80/#top">Home again</a>
    <a href="https://example.com:443?q=1">Secure</a>
    <a href="http://example.com:8080">Alt port</a>
    """
    links = extract_links(BeautifulSoup(html, "html.parser"), "http://example.com/blog/")
    assert links == [
        "http://example.com/",
        "https://example.com/?q=1",
        "http://example.com:8080/",
    ]
