# LinkGuard
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
"""Tests for host pattern matching and URL parsing."""

import pytest

from linkguard.navigation.errors import MalformedURLError
from linkguard.navigation.matcher import matches
from linkguard.navigation.url import NavigationURL, parse_url


def url_with_host(host: str, scheme: str = "https") -> NavigationURL:
    return parse_url(f"{scheme}://{host}/path")


class TestParseUrl:
    """Tests for parse_url."""

    def test_scheme_and_host(self):
        url = parse_url("https://promo.app.link/x?y=1")
        assert url.scheme == "https"
        assert url.host == "promo.app.link"
        assert url.raw == "https://promo.app.link/x?y=1"

    def test_host_lowercased(self):
        url = parse_url("HTTPS://Shop.Example.COM/Cart")
        assert url.scheme == "https"
        assert url.host == "shop.example.com"

    def test_custom_scheme(self):
        url = parse_url("itms-appss://apps.apple.com/app/id123")
        assert url.scheme == "itms-appss"
        assert url.host == "apps.apple.com"

    def test_blank_page_has_no_host(self):
        url = parse_url("about:blank")
        assert url.scheme == "about"
        assert url.host == ""
        assert url.is_blank is True

    def test_host_label_fallback(self):
        assert parse_url("about:blank").host_label == "this site"
        assert parse_url("https://example.com").host_label == "example.com"

    def test_passthrough(self):
        url = parse_url("https://example.com")
        assert parse_url(url) is url

    @pytest.mark.parametrize("raw", [None, "", "   ", 42, "http://[::1"])
    def test_malformed(self, raw):
        with pytest.raises(MalformedURLError):
            parse_url(raw)


class TestWildcardPattern:
    """Tests for "*all." wildcard-subdomain patterns."""

    def test_single_label_subdomain_matches(self):
        assert matches(url_with_host("sub.example.com"), "*all.example.com") is True

    def test_bare_domain_does_not_match(self):
        assert matches(url_with_host("example.com"), "*all.example.com") is False

    def test_multi_label_subdomain_does_not_match(self):
        assert matches(url_with_host("a.b.example.com"), "*all.example.com") is False

    def test_dot_is_literal(self):
        # "." in the domain must not act as a regex wildcard
        assert matches(url_with_host("subXexampleYcom"), "*all.example.com") is False
        assert matches(url_with_host("sub.exampleXcom"), "*all.example.com") is False

    def test_suffix_must_be_anchored(self):
        assert matches(url_with_host("sub.example.com.evil.net"), "*all.example.com") is False
        assert matches(url_with_host("sub.notexample.com"), "*all.example.com") is False

    def test_deep_link_host(self):
        assert matches(url_with_host("promo.app.link"), "*all.app.link") is True

    def test_empty_domain_never_matches(self):
        assert matches(url_with_host("example.com"), "*all.") is False


class TestPlainPattern:
    """Tests for plain substring patterns."""

    def test_substring_matches(self):
        assert matches(url_with_host("shop.example.com"), "example") is True

    def test_no_match(self):
        assert matches(url_with_host("example2.com"), "xyz") is False

    def test_exact_host(self):
        assert matches(url_with_host("app.link"), "app.link") is True

    def test_substring_of_longer_host(self):
        assert matches(url_with_host("myapp.linkage.com"), "app.link") is True

    def test_path_is_not_matched(self):
        assert matches(parse_url("https://example.com/app.link"), "app.link") is False

    def test_empty_pattern_never_matches(self):
        assert matches(url_with_host("example.com"), "") is False

    def test_empty_host_never_matches(self):
        assert matches(parse_url("about:blank"), "blank") is False
        assert matches(parse_url("about:blank"), "*all.blank") is False


class TestCaseFolding:
    """Hosts and patterns compare case-insensitively."""

    def test_mixed_case_plain_pattern(self):
        assert matches(parse_url("https://Promo.App.Link/x"), "Promo.App.Link") is True
        assert matches(url_with_host("app.link"), "APP.LINK") is True

    def test_mixed_case_wildcard_pattern(self):
        assert matches(url_with_host("promo.app.link"), "*all.App.Link") is True

    def test_host_not_from_parse_url(self):
        url = NavigationURL(raw="https://Promo.App.Link/x", scheme="https", host="Promo.App.Link")
        assert matches(url, "promo.app.link") is True
        assert matches(url, "*all.app.link") is True
