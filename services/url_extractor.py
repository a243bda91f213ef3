from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List

from models import ProfileCandidate, SourceRecord
from services.linkedin_urls import normalize_profile_url, profile_url_from_post_url


logger = logging.getLogger(__name__)

_HOST = r"(?:https?://)?(?<![\w.-])(?:[a-z]{2,3}\.)?linkedin\.com"

# (a) generic link patterns, one family per profile path prefix
LINK_PATTERNS = [
    re.compile(_HOST + r"/in/[^/\s<>\"'?#]+", re.IGNORECASE),
    re.compile(_HOST + r"/company/[^/\s<>\"'?#]+", re.IGNORECASE),
    re.compile(_HOST + r"/school/[^/\s<>\"'?#]+", re.IGNORECASE),
    re.compile(_HOST + r"/pub/[^\s<>\"'?#]+", re.IGNORECASE),
    re.compile(_HOST + r"/people/[^/\s<>\"'?#]+", re.IGNORECASE),
]

# (b) labeled field embedded in free text
LABELED_PATTERN = re.compile(
    r"(?:Profile URL|URL del perfil)\s*:\s*(" + _HOST + r"/[^\s<>\"']+)",
    re.IGNORECASE,
)

# (c) post URLs, converted to a best-guess author profile
POST_PATTERN = re.compile(_HOST + r"/posts/[^\s<>\"']+", re.IGNORECASE)


def find_profile_urls(text: str) -> List[str]:
    """Normalized profile URLs mentioned in text, deduplicated, in extraction order."""
    if not text or not text.strip():
        return []

    found: List[str] = []
    for pattern in LINK_PATTERNS:
        found.extend(pattern.findall(text))

    for labeled in LABELED_PATTERN.findall(text):
        if "/posts/" in labeled.lower():
            derived = profile_url_from_post_url(labeled)
            if derived:
                found.append(derived)
        else:
            found.append(labeled)

    for post_url in POST_PATTERN.findall(text):
        derived = profile_url_from_post_url(post_url)
        if derived:
            found.append(derived)

    urls: List[str] = []
    for raw in found:
        normalized = normalize_profile_url(raw)
        if normalized is None:
            logger.debug("Ignoring non-profile LinkedIn URL %s", raw)
            continue
        if normalized not in urls:
            urls.append(normalized)
    return urls


class ProfileUrlExtractor:
    """Maps profile URLs found in record text to the records that mention them."""

    def extract(self, records: Iterable[SourceRecord]) -> List[ProfileCandidate]:
        by_url: Dict[str, ProfileCandidate] = {}
        scanned = 0
        for record in records:
            scanned += 1
            text = record.description or ""
            if record.external_link:
                text = f"{text}\n{record.external_link}"
            for url in find_profile_urls(text):
                candidate = by_url.get(url)
                if candidate is None:
                    candidate = ProfileCandidate(url=url)
                    by_url[url] = candidate
                candidate.add_source(record.id, record.display_name)
        logger.info(
            "Extracted %d unique profile URLs from %d records",
            len(by_url),
            scanned,
            extra={"step": "extract_candidates", "status": "ok"},
        )
        return list(by_url.values())
