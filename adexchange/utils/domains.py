"""
Domain normalization and destination URL helpers.

A website is identified network-wide by its bare hostname: lowercased,
without scheme, port, path or a leading ``www.``. Every registration and
uniqueness check goes through ``normalize_domain`` so ``HTTP://WWW.Example.com/``
and ``example.com`` compare equal.
"""
import re
import urllib.parse
from adexchange.utils.logger import get_logger

logger = get_logger(__name__)

# RFC 1123 hostname labels
_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def normalize_domain(raw: str) -> str:
    """
    Reduce user input to the canonical hostname.

    Raises:
        ValueError: if no valid hostname can be extracted

    Example:
        normalize_domain("  HTTP://WWW.Example.com/path?q=1 ") -> "example.com"
    """
    if raw is None or not raw.strip():
        raise ValueError("Domain cannot be empty")

    candidate = raw.strip().lower()
    if not candidate.startswith(("http://", "https://")):
        candidate = "https://" + candidate

    try:
        hostname = urllib.parse.urlsplit(candidate).hostname
    except ValueError as e:
        raise ValueError(f"Invalid domain format: {e}") from e

    if not hostname:
        raise ValueError("Invalid domain format")

    hostname = hostname.rstrip(".")
    if hostname.startswith("www."):
        hostname = hostname[4:]

    labels = hostname.split(".")
    if len(labels) < 2 or not all(_LABEL_RE.match(label) for label in labels):
        logger.debug("Domain rejected", raw=raw, hostname=hostname)
        raise ValueError("Invalid domain format")

    return hostname


def destination_url(domain_or_url: str) -> str:
    """Redirect target for an advertiser; prepends https:// when no scheme is present."""
    target = domain_or_url.strip()
    if not target.startswith(("http://", "https://")):
        target = f"https://{target}"
    return target


__all__ = ["normalize_domain", "destination_url"]
