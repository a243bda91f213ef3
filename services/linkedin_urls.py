from __future__ import annotations

import re
import unicodedata
from typing import Optional
from urllib.parse import unquote, urlparse


# Path prefixes that identify a profile-like LinkedIn entity
PROFILE_KINDS = ("in", "company", "school", "pub", "people")

CANONICAL_HOST = "www.linkedin.com"

_INVISIBLE = ("\u200b", "\u200c", "\u200d", "\ufeff")
_TRAILING_PUNCT = ".,;:!)]}>'\""


def _clean_segment(segment: str) -> str:
    text = unicodedata.normalize("NFKC", unquote(segment)).strip().lower()
    for ch in _INVISIBLE:
        text = text.replace(ch, "")
    return text.rstrip(_TRAILING_PUNCT)


def _is_linkedin_host(host: str) -> bool:
    return host == "linkedin.com" or host.endswith(".linkedin.com")


def normalize_profile_url(url: Optional[str]) -> Optional[str]:
    """Canonical form of a LinkedIn profile URL: https, www host, /{kind}/{slug}.

    Query string and fragment are dropped; country subdomains (de., es.) fold
    into www. Returns None for non-LinkedIn URLs and for non-profile paths.
    """
    if not url:
        return None
    text = str(url).strip()
    if not re.match(r"^https?://", text, flags=re.IGNORECASE):
        text = f"https://{text}"
    u = urlparse(text)
    host = (u.hostname or "").lower()
    if not _is_linkedin_host(host):
        return None
    parts = [p for p in (u.path or "").split("/") if p]
    if len(parts) < 2:
        return None
    kind = parts[0].lower()
    if kind not in PROFILE_KINDS:
        return None
    slug = _clean_segment(parts[1])
    if not slug:
        return None
    # /pub/ URLs carry the identity across several trailing segments
    if kind == "pub" and len(parts) > 2:
        tail = "/".join(_clean_segment(p) for p in parts[2:])
        return f"https://{CANONICAL_HOST}/pub/{slug}/{tail}".rstrip("/")
    return f"https://{CANONICAL_HOST}/{kind}/{slug}"


def username_from_post_url(post_url: Optional[str]) -> Optional[str]:
    """Best-guess author username from a /posts/ URL slug.

    LinkedIn post slugs look like ``jane-doe_topic-words-activity-123``; the
    author's vanity name is the part before the first underscore. Slugs
    without an underscore fall back to the leading hyphen-delimited token.
    """
    if not post_url:
        return None
    m = re.search(r"linkedin\.com/posts/([^/?#\s]+)", str(post_url), flags=re.IGNORECASE)
    if not m:
        return None
    slug = _clean_segment(m.group(1))
    if "_" in slug:
        username = slug.split("_", 1)[0]
    else:
        username = slug.split("-", 1)[0]
    return username or None


def profile_url_from_post_url(post_url: Optional[str]) -> Optional[str]:
    username = username_from_post_url(post_url)
    if not username:
        return None
    return f"https://{CANONICAL_HOST}/in/{username}"
