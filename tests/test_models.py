from datetime import datetime, timezone

from site_digest.crawler.models import Heading, Page


def test_truncate_content_drops_from_end():
    page = Page(url="u", title="t", paragraphs=["aaaa", "bbbb", "cccc"])
    page.truncate_content(8)
    assert page.paragraphs == ["aaaa", "bbbb"]


def test_truncate_content_stops_at_first_overflow():
    page = Page(url="u", title="t", paragraphs=["aaaaaa", "bbbbbb", "c"])
    page.truncate_content(7)
    assert page.paragraphs == ["aaaaaa"]


def test_to_dict_is_json_ready():
    page = Page(
        url="http://example.com/",
        title="Example",
        published_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        headings=[Heading(2, "Sub")],
        paragraphs=["p"],
        extract="p",
    )
    data = page.to_dict()
    assert data["published_at"] == "2024-01-02T03:04:05+00:00"
    assert data["headings"] == [{"level": 2, "text": "Sub"}]
    assert data["meta_description"] is None
