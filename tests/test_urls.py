import pytest

from link_scribe.errors import InvalidUrlError
from link_scribe.urls import (
    add_cache_buster,
    ensure_scheme,
    has_excluded_extension,
    host_of,
    validate_start_url,
)


@pytest.mark.parametrize("raw, expected", [
    ("example.com", "https://example.com"),
    ("  example.com/page ", "https://example.com/page"),
    ("http://example.com", "http://example.com"),
    ("HTTPS://Example.com", "HTTPS://Example.com"),
    ("//example.com", "https://example.com"),
])
def test_ensure_scheme(raw, expected):
    assert ensure_scheme(raw) == expected


@pytest.mark.parametrize("bad", ["", "   ", "ftp://example.com", "http://", "not a url", "http://host:99999999/"])
def test_validate_start_url_rejects(bad):
    with pytest.raises(InvalidUrlError):
        validate_start_url(bad)


def test_invalid_url_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_start_url("mailto:someone@example.com")


def test_validate_start_url_accepts_http_and_https():
    assert validate_start_url(" https://site.test/a ") == "https://site.test/a"
    assert validate_start_url("http://site.test") == "http://site.test"


def test_cache_buster_appends_to_existing_query_and_drops_fragment():
    assert add_cache_buster("https://site.test/a", now_ms=5) == "https://site.test/a?_lsc=5"
    assert add_cache_buster("https://site.test/a?x=1#frag", now_ms=5) == "https://site.test/a?x=1&_lsc=5"


@pytest.mark.parametrize("url, excluded", [
    ("https://site.test/photo.JPG", True),
    ("https://site.test/report.pdf", True),
    ("https://site.test/feed.rss", True),
    ("https://site.test/archive.tar.gz", True),
    ("https://site.test/slides.pptx?dl=1", True),
    ("https://site.test/about", False),
    ("https://site.test/page.html", False),
    ("https://site.test/", False),
])
def test_excluded_extensions(url, excluded):
    assert has_excluded_extension(url) is excluded


def test_host_is_case_insensitive_and_port_aware():
    assert host_of("https://Site.test/a") == host_of("https://site.test/b") == "site.test"
    assert host_of("https://site.test:8443/a") == "site.test:8443"
    assert host_of("/relative/path") is None
    assert host_of("http://host:99999999/") is None


@pytest.mark.parametrize("url", [
    "https://site.test:443/x",
    "https://user@site.test/x",
    "https://user:pw@SITE.test:443/x",
    "http://site.test:80/x",
])
def test_default_port_and_credentials_do_not_change_host(url):
    assert host_of(url) == host_of("https://site.test/") == "site.test"


def test_non_default_port_for_scheme_is_kept():
    assert host_of("http://site.test:443/") == "site.test:443"
