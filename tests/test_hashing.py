"""Tests for the stable hash and domain helpers."""

from collections import Counter

from portal_brand.hashing import normalize_domain, pick_index, stable_hash


class TestStableHash:
    def test_known_values(self):
        assert stable_hash("") == 5381
        assert stable_hash("a") == 177670
        assert stable_hash("ab") == 5863208

    def test_stays_within_32_bits(self):
        assert 0 <= stable_hash("x" * 500) < 2**32

    def test_repeatable(self):
        assert stable_hash("acme-cpas.com") == stable_hash("acme-cpas.com")

    def test_buckets_are_roughly_uniform(self):
        """No bucket of hash(domain) % 7 is starved across 5000 domains."""
        buckets = 7
        domains = [f"company{i}-{i * 7919 % 1000}.example.com" for i in range(5000)]
        counts = Counter(stable_hash(d) % buckets for d in domains)
        expected = len(domains) / buckets
        assert len(counts) == buckets
        assert min(counts.values()) >= 0.5 * expected


class TestNormalizeDomain:
    def test_strips_scheme_www_path_and_port(self):
        assert normalize_domain("https://www.Acme.com/about?x=1") == "acme.com"
        assert normalize_domain("acme.com:8080") == "acme.com"

    def test_bare_domain(self):
        assert normalize_domain("acme-law.com") == "acme-law.com"

    def test_empty(self):
        assert normalize_domain("") == ""


def test_pick_index():
    assert pick_index("acme.com", 0) == -1
    assert pick_index("acme.com", 3) == stable_hash("acme.com") % 3
