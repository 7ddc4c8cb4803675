import logging

from page_clone import (
    KIND_IMAGE,
    KIND_SCRIPT,
    KIND_STYLESHEET,
    bs4_parse,
    extract_asset_references,
    extract_hyperlinks,
    local_path_for_url,
    parse_srcset,
    rewrite_asset_reference,
    rewrite_hyperlinks,
    rewrite_srcset,
)

PAGE = """
<html><head>
  <link rel="stylesheet" href="/s.css" integrity="sha384-abc" crossorigin="anonymous">
  <link rel="icon" href="/favicon.ico">
  <script src="js/app.js"></script>
  <script>inline()</script>
</head><body>
  <img src="pic.png" srcset="pic-1x.png 1x, /img/pic-2x.png 2x">
  <img src="data:image/gif;base64,R0lGODlhAQABAAAAACw=">
  <img src="http://[broken/x.png">
  <a href="#top">top</a>
  <a href="mailto:me@ex.test">mail</a>
  <a href="tel:+100">call</a>
  <a href="/about">about</a>
  <a href="guide/#intro">guide</a>
  <a href="https://other.test/page">elsewhere</a>
</body></html>
"""


def test_extract_asset_references_kinds_and_urls():
    soup = bs4_parse(PAGE)
    refs = extract_asset_references(soup, "https://ex.test/docs/")
    found = {(r.kind, r.url) for r in refs}
    assert found == {
        (KIND_STYLESHEET, "https://ex.test/s.css"),
        (KIND_SCRIPT, "https://ex.test/docs/js/app.js"),
        (KIND_IMAGE, "https://ex.test/docs/pic.png"),
        (KIND_IMAGE, "https://ex.test/docs/pic-1x.png"),
        (KIND_IMAGE, "https://ex.test/img/pic-2x.png"),
    }


def test_invalid_reference_is_skipped_with_warning(caplog):
    soup = bs4_parse(PAGE)
    with caplog.at_level(logging.WARNING):
        refs = extract_asset_references(soup, "https://ex.test/")
    assert len(refs) == 5
    assert any("http://[broken/x.png" in rec.getMessage() for rec in caplog.records)


def test_skip_js_drops_scripts():
    soup = bs4_parse(PAGE)
    refs = extract_asset_references(soup, "https://ex.test/", skip_js=True)
    assert KIND_SCRIPT not in {r.kind for r in refs}


def test_base_href_changes_resolution():
    soup = bs4_parse('<head><base href="https://cdn.test/v2/"></head><img src="a.png">')
    (ref,) = extract_asset_references(soup, "https://ex.test/")
    assert ref.url == "https://cdn.test/v2/a.png"


def test_extract_hyperlinks_skips_fragments_and_schemes():
    soup = bs4_parse(PAGE)
    urls = [r.url for r in extract_hyperlinks(soup, "https://ex.test/")]
    assert urls == [
        "https://ex.test/about",
        "https://ex.test/guide/",
        "https://other.test/page",
    ]


def test_rewrite_hyperlinks_only_same_origin():
    soup = bs4_parse(PAGE)
    count = rewrite_hyperlinks(soup, "https://ex.test/", "https://ex.test/")
    assert count == 2
    hrefs = [a["href"] for a in soup.find_all("a")]
    assert hrefs == [
        "#top",
        "mailto:me@ex.test",
        "tel:+100",
        "./about.html",
        "./guide/index.html#intro",
        "https://other.test/page",
    ]


def test_rewrite_hyperlinks_is_idempotent():
    soup = bs4_parse('<a href="/about">x</a>')
    rewrite_hyperlinks(soup, "https://ex.test/", "https://ex.test/")
    first = soup.a["href"]
    rewrite_hyperlinks(soup, "https://ex.test/", "https://ex.test/")
    assert soup.a["href"] == first == "./about.html"


def test_rewrite_asset_reference_sets_local_path_and_drops_sri():
    soup = bs4_parse(PAGE)
    refs = extract_asset_references(soup, "https://ex.test/")
    for ref in refs:
        rewrite_asset_reference(ref, local_path_for_url(ref.url))
    link = soup.find("link", rel="stylesheet")
    assert link["href"] == "./s.css"
    assert "integrity" not in link.attrs
    assert "crossorigin" not in link.attrs
    assert soup.find("script", src=True)["src"] == "./js/app.js"
    img = soup.find("img")
    assert img["src"] == "./pic.png"
    assert img["srcset"] == "./pic-1x.png 1x, ./img/pic-2x.png 2x"


def test_rewrite_asset_reference_is_idempotent():
    soup = bs4_parse('<img srcset="a.png 1x, b.png 2x">')
    refs = extract_asset_references(soup, "https://ex.test/")
    for _ in range(2):
        for ref in refs:
            rewrite_asset_reference(ref, local_path_for_url(ref.url))
    assert soup.img["srcset"] == "./a.png 1x, ./b.png 2x"


def test_parse_srcset():
    assert parse_srcset("a.png 480w,  b.png 800w ,c.png") == ["a.png", "b.png", "c.png"]
    assert parse_srcset("") == []


def test_rewrite_srcset_keeps_unknown_candidates():
    out = rewrite_srcset("a.png 1x, b.png 2x", {"b.png": "./b.png"})
    assert out == "a.png 1x, ./b.png 2x"
