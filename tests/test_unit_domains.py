import pytest

from adexchange.utils.domains import destination_url, normalize_domain


@pytest.mark.parametrize("raw", [
    "example.com",
    "HTTP://WWW.Example.com/",
    "  https://www.example.com/path?q=1  ",
    "www.EXAMPLE.com",
    "example.com:8080",
    "example.com.",
])
def test_normalize_domain_variants_collapse(raw):
    assert normalize_domain(raw) == "example.com"


def test_normalize_domain_is_idempotent():
    once = normalize_domain("HTTP://WWW.Example.com/")
    assert normalize_domain(once) == once


def test_normalize_keeps_other_subdomains():
    assert normalize_domain("https://blog.example.co.uk/") == "blog.example.co.uk"


@pytest.mark.parametrize("raw", ["", "   ", "not a domain", "localhost", "http://", "exa_mple.com", "-bad.com"])
def test_normalize_domain_rejects_malformed(raw):
    with pytest.raises(ValueError):
        normalize_domain(raw)


def test_destination_url_prepends_https_only_when_missing():
    assert destination_url("example.com") == "https://example.com"
    assert destination_url("http://example.com") == "http://example.com"
    assert destination_url("https://example.com/x") == "https://example.com/x"
