"""Tests for URL parsing, domain splitting and company name resolution."""

import pytest

from portal_brand.io.models import BrandSignals, CompanyNameCandidate
from portal_brand.naming.company_name import (
    clean_company_name,
    collect_name_candidates,
    company_name_from_signals,
    rank_candidates,
    resolve_company_name,
)
from portal_brand.naming.domain_splitter import name_from_domain, name_from_stem
from portal_brand.naming.url import domain_stem, parse_input


class TestParseInput:
    def test_email_resolves_to_domain(self):
        assert parse_input("jane@acme.com") == "https://acme.com"

    def test_bare_domain_gets_scheme(self):
        assert parse_input("acme.com") == "https://acme.com"

    def test_url_kept(self):
        assert parse_input("http://acme.com/about") == "http://acme.com/about"

    @pytest.mark.parametrize("value", ["", "   ", "localhost"])
    def test_rejects_hostless_input(self, value):
        assert parse_input(value) is None

    def test_domain_stem(self):
        assert domain_stem("https://www.jungle-luxe.co.uk/shop") == "jungle-luxe"


class TestDomainSplitter:
    @pytest.mark.parametrize(
        "stem,expected",
        [
            ("jungleluxe", "Jungle Luxe"),
            ("hudsonvalley", "Hudson Valley"),
            ("the-brand-co", "The Brand Co"),
            ("airbnb", "Airbnb"),
            ("brand123", "Brand"),
            ("myWebsite", "My Website"),
        ],
    )
    def test_name_from_stem(self, stem, expected):
        assert name_from_stem(stem) == expected

    def test_too_short(self):
        assert name_from_stem("x") is None

    def test_name_from_domain(self):
        assert name_from_domain("https://www.jungleluxe.com") == "Jungle Luxe"


class TestCleanCompanyName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Acme Corp", "Acme"),
            ("Acme, Inc.", "Acme"),
            ("Acme LLC", "Acme"),
            ("Acme - Widgets for everyone", "Acme"),
            ("Acme | Home", "Acme"),
            ("Acme: The widget people", "Acme"),
            ("Acme — Since 1990", "Acme"),
            ("Disco Fever", "Disco Fever"),
        ],
    )
    def test_strips_taglines_and_suffixes(self, raw, expected):
        assert clean_company_name(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "Inc"])
    def test_empty_becomes_default(self, raw):
        assert clean_company_name(raw) == "Company"


class TestResolver:
    def test_site_name_beats_title(self):
        signals = BrandSignals(
            url="https://acmewidgets.com",
            title="Home | Acme Widgets",
            meta={"og:site_name": "Acme Widgets", "og:title": "Acme Widgets - Quality widgets"},
        )
        result = company_name_from_signals(signals)
        assert result.selected_name == "Acme Widgets"
        assert result.candidates[0].source == "og:site_name"
        assert "matches domain +15" in result.candidates[0].reasons

    def test_tagline_and_case_penalties_are_explained(self):
        candidates = [
            CompanyNameCandidate("acme", "og:site_name"),
            CompanyNameCandidate("ACME WIDGETS | Buy now", "title"),
        ]
        scored = {c.source: c for c in resolve_company_name(candidates, "https://example.com").candidates}
        assert "all lowercase -8" in scored["og:site_name"].reasons
        assert "tagline separator -10" in scored["title"].reasons
        assert "all uppercase -5" in scored["title"].reasons

    def test_generic_title_loses_to_domain(self):
        signals = BrandSignals(url="https://jungleluxe.com", title="Home")
        result = company_name_from_signals(signals)
        assert result.selected_name == "Jungle Luxe"
        domain = next(c for c in result.candidates if c.source == "domain")
        assert domain.parent_source == "url"

    def test_no_candidates_falls_back(self):
        assert resolve_company_name([], "https://x.io").selected_name == "Workspace"
        assert resolve_company_name([], "https://hudsonvalley.com").selected_name == "Hudson Valley"

    def test_ties_break_by_source_priority(self):
        a = CompanyNameCandidate("Acme", "title", score=20)
        b = CompanyNameCandidate("Acme", "og:title", score=20)
        assert [c.source for c in rank_candidates([a, b])] == ["og:title", "title"]

    def test_rescoring_is_stable(self):
        candidates = collect_name_candidates(
            "Acme Widgets - Quality", {"og:title": "Acme", "twitter:title": "ACME"}, "https://acme.com"
        )
        first = resolve_company_name(candidates, "https://acme.com")
        second = resolve_company_name(candidates, "https://acme.com")
        assert first == second
