from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models import EnrichedProfile, NormalizedProfile


# Ordered fallbacks per attribute; the first non-empty value wins.
NAME_FIELDS = ("name", "fullName", "authorName", "displayName", "userName", "fullname", "username")
POSITION_FIELDS = ("position", "currentPosition", "headline", "jobTitle", "title")
COMPANY_FIELDS = ("company", "currentCompany", "companyName")
LOCATION_FIELDS = ("location", "addressWithCountry", "geoLocationName")
URL_FIELDS = ("linkedinUrl", "url", "profileUrl", "inputUrl", "query")
ABOUT_FIELDS = ("about", "bio", "summary", "description")

# Keys tried, in order, when a field holds a nested object instead of text
_NESTED_TEXT_KEYS = ("name", "title", "position", "companyName", "text", "linkedinText", "url")


def _text(value: Any) -> str:
    """Coerce ragged scraper values (None, numbers, dicts, lists) to a stripped string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        for key in _NESTED_TEXT_KEYS:
            nested = _text(value.get(key))
            if nested:
                return nested
        return ""
    if isinstance(value, (list, tuple)):
        for item in value:
            nested = _text(item)
            if nested:
                return nested
        return ""
    return str(value).strip()


def _single_line(value: Any) -> str:
    return re.sub(r"\s+", " ", _text(value))


def _first(raw: Dict[str, Any], fields: Sequence[str]) -> str:
    for field in fields:
        value = _single_line(raw.get(field))
        if value:
            return value
    return ""


def split_name(full_name: Optional[str]) -> Tuple[str, str]:
    parts = [p for p in (full_name or "").split() if p]
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def resolve_name(raw: Dict[str, Any]) -> str:
    name = _first(raw, NAME_FIELDS[:3])
    if name:
        return name
    composed = " ".join(p for p in (_single_line(raw.get("firstName")), _single_line(raw.get("lastName"))) if p)
    if composed:
        return composed
    name = _first(raw, NAME_FIELDS[3:])
    if name:
        return name
    # Page titles look like "Jane Doe - Head of Sales - Acme | LinkedIn"
    title = _single_line(raw.get("title"))
    if " - " in title:
        return title.split(" - ", 1)[0].strip()
    return ""


def normalize_profile(raw: Dict[str, Any]) -> NormalizedProfile:
    """Map one raw scraper item onto the canonical profile shape."""
    raw = raw or {}
    name = resolve_name(raw)
    split_first, split_last = split_name(name)
    return NormalizedProfile(
        name=name,
        first_name=_single_line(raw.get("firstName")) or split_first,
        last_name=_single_line(raw.get("lastName")) or split_last,
        position=_first(raw, POSITION_FIELDS),
        company=_first(raw, COMPANY_FIELDS),
        location=_first(raw, LOCATION_FIELDS),
        profile_url=_first(raw, URL_FIELDS),
        about=_first_multiline(raw, ABOUT_FIELDS),
    )


def _first_multiline(raw: Dict[str, Any], fields: Sequence[str]) -> str:
    for field in fields:
        value = _text(raw.get(field))
        if value:
            return value
    return ""


def to_enriched_profiles(items: List[Dict[str, Any]]) -> List[EnrichedProfile]:
    return [EnrichedProfile(raw=item, normalized=normalize_profile(item)) for item in items if isinstance(item, dict)]


def to_contact_properties(
    profile: NormalizedProfile,
    profile_url: str,
    profile_property: str = "linkedin_profile_link",
) -> Dict[str, str]:
    """CRM contact properties for a profile; empty values are left out so updates never blank fields."""
    props = {
        "firstname": profile.first_name,
        "lastname": profile.last_name,
        profile_property: profile_url,
        "jobtitle": profile.position,
        "company": profile.company,
        "city": profile.location,
        "hs_bio": profile.about,
    }
    return {k: v for k, v in props.items() if v}
