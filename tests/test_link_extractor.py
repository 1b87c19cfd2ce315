# File: tests/test_link_extractor.py
import pytest

from site_archiver.crawler.link_extractor import (
    RegexLinkExtractor,
    SoupLinkExtractor,
    extract_links,
    filter_links,
    get_extractor,
)

BASE = "https://a.com"
CURRENT = "https://a.com/page"

EXTRACTORS = [RegexLinkExtractor(), SoupLinkExtractor()]


def body(*hrefs: str) -> str:
    return "<html><body>" + "".join(f'<a href="{h}">x</a>' for h in hrefs) + "</body></html>"


@pytest.fixture(params=EXTRACTORS, ids=["regex", "soup"])
def extractor(request):
    return request.param


def test_root_relative_link_resolved(extractor):
    assert extractor.extract(body("/about"), BASE, CURRENT) == ["https://a.com/about"]


def test_absolute_same_site_link_normalized(extractor):
    links = extractor.extract(body("HTTPS://A.COM//docs//intro/"), BASE, CURRENT)
    assert links == ["https://a.com/docs/intro"]


@pytest.mark.parametrize("href", ["#section", "https://a.com/page#section", "/other#part"])
def test_fragment_links_skipped(extractor, href):
    assert extractor.extract(body(href), BASE, CURRENT) == []


def test_current_page_skipped(extractor):
    assert extractor.extract(body("https://a.com/page/", "https://a.com/next"), BASE, CURRENT) == [
        "https://a.com/next"
    ]


@pytest.mark.parametrize(
    "href",
    ["https://other.test/b", "//cdn.other.test/x.js", "mailto:me@a.com", "javascript:void(0)", "relative/path"],
)
def test_off_site_and_unrecognized_discarded(extractor, href):
    assert extractor.extract(body(href), BASE, CURRENT) == []


def test_order_and_duplicates_kept(extractor):
    links = extractor.extract(body("/b", "/a", "/b"), BASE, CURRENT)
    assert links == ["https://a.com/b", "https://a.com/a", "https://a.com/b"]


def test_no_body_gives_nothing(extractor):
    assert extractor.extract('<html><head><link href="/style.css"></head></html>', BASE, CURRENT) == []


def test_links_outside_body_ignored(extractor):
    html = '<html><head><a href="/head-link">h</a></head><body><a href="/in-body">b</a></body></html>'
    assert extractor.extract(html, BASE, CURRENT) == ["https://a.com/in-body"]


def test_body_with_attributes_over_many_lines():
    html = """<html>
<BODY class="x"
      data-id="1">
  <a class="nav"
     href='/one'>one</a>
  <a href="/two">two</a>
</BODY>
</html>"""
    assert extract_links(html, BASE, CURRENT) == ["https://a.com/one", "https://a.com/two"]


def test_regex_needs_closing_body_tag():
    assert RegexLinkExtractor().extract('<body><a href="/x">x</a>', BASE, CURRENT) == []


def test_malformed_markup_degrades_quietly():
    html = '<body><a href="/ok">ok</a><a href=/unquoted>u</a><a href="/broken></body>'
    assert extract_links(html, BASE, CURRENT) == ["https://a.com/ok"]


def test_scope_is_a_prefix_of_the_base():
    links = filter_links(
        ["https://a.com/docs/x", "https://a.com/blog/y", "/z"],
        "https://a.com/docs",
        "https://a.com/docs",
    )
    # root-relative links are glued onto the base as-is
    assert links == ["https://a.com/docs/x", "https://a.com/docs/z"]


def test_get_extractor():
    assert isinstance(get_extractor("regex"), RegexLinkExtractor)
    assert isinstance(get_extractor(None), RegexLinkExtractor)
    assert isinstance(get_extractor("soup"), SoupLinkExtractor)
    with pytest.raises(ValueError):
        get_extractor("lxml")
