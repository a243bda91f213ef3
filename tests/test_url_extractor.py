from __future__ import annotations

from fakes import make_record
from services.linkedin_urls import normalize_profile_url, profile_url_from_post_url, username_from_post_url
from services.url_extractor import ProfileUrlExtractor, find_profile_urls


def test_normalize_collapses_host_case_query_and_trailing_slash():
    expected = "https://www.linkedin.com/in/jane-doe"
    assert normalize_profile_url("https://www.linkedin.com/in/Jane-Doe?trk=feed") == expected
    assert normalize_profile_url("linkedin.com/in/jane-doe/") == expected
    assert normalize_profile_url("http://de.linkedin.com/in/jane-doe#about") == expected
    assert normalize_profile_url(expected) == expected


def test_normalize_rejects_non_profile_urls():
    assert normalize_profile_url("https://www.linkedin.com/feed/update/urn:li:activity:1") is None
    assert normalize_profile_url("https://example.com/in/jane-doe") is None
    assert normalize_profile_url("") is None


def test_post_url_username_prefers_underscore_split():
    assert username_from_post_url("https://www.linkedin.com/posts/jane-doe_hiring-sales-activity-123") == "jane-doe"
    assert username_from_post_url("https://www.linkedin.com/posts/janedoe-activity-123") == "janedoe"
    assert profile_url_from_post_url("linkedin.com/posts/jane-doe_x") == "https://www.linkedin.com/in/jane-doe"


def test_find_profile_urls_dedupes_after_normalization():
    text = "Author https://www.linkedin.com/in/Jane-Doe?trk=abc and again linkedin.com/in/jane-doe."
    assert find_profile_urls(text) == ["https://www.linkedin.com/in/jane-doe"]


def test_find_profile_urls_covers_all_profile_kinds():
    text = (
        "https://www.linkedin.com/company/acme-corp/ "
        "https://www.linkedin.com/school/some-university "
        "https://www.linkedin.com/in/john-smith"
    )
    urls = find_profile_urls(text)
    assert "https://www.linkedin.com/in/john-smith" in urls
    assert "https://www.linkedin.com/company/acme-corp" in urls
    assert "https://www.linkedin.com/school/some-university" in urls


def test_labeled_profile_field_and_post_derivation():
    text = (
        "Profile URL: https://www.linkedin.com/posts/maria-lopez_fintech-activity-77\n"
        "URL del perfil: https://es.linkedin.com/in/carlos-ruiz"
    )
    urls = find_profile_urls(text)
    assert urls == ["https://www.linkedin.com/in/carlos-ruiz", "https://www.linkedin.com/in/maria-lopez"]


def test_labeled_non_profile_url_is_dropped():
    assert find_profile_urls("Profile URL: https://www.linkedin.com/feed/") == []


def test_empty_and_whitespace_descriptions_yield_nothing():
    assert find_profile_urls("") == []
    assert find_profile_urls("   \n\t ") == []
    assert ProfileUrlExtractor().extract([make_record("1", "   ")]) == []


def test_extract_unions_records_per_url_in_first_seen_order():
    records = [
        make_record("1", "see https://www.linkedin.com/in/jane-doe?utm=x and https://linkedin.com/in/bob"),
        make_record("2", "Jane: linkedin.com/in/jane-doe"),
        make_record("3", "nothing here"),
    ]
    candidates = ProfileUrlExtractor().extract(records)

    assert [c.url for c in candidates] == [
        "https://www.linkedin.com/in/jane-doe",
        "https://www.linkedin.com/in/bob",
    ]
    jane = candidates[0]
    assert jane.record_ids == ["1", "2"]
    assert jane.record_names == ["Post: deal 1", "Post: deal 2"]
    assert candidates[1].record_ids == ["1"]


def test_extract_reads_external_link_and_counts_record_once():
    record = make_record("9", "https://www.linkedin.com/in/ana")
    record.external_link = "https://www.linkedin.com/in/ana/"
    candidates = ProfileUrlExtractor().extract([record])
    assert len(candidates) == 1
    assert candidates[0].record_ids == ["9"]


def test_extract_is_idempotent():
    records = [
        make_record("1", "https://www.linkedin.com/posts/jane-doe_topic https://linkedin.com/in/x-y"),
        make_record("2", "Profile URL: linkedin.com/in/x-y"),
    ]
    extractor = ProfileUrlExtractor()
    first = [c.model_dump() for c in extractor.extract(records)]
    second = [c.model_dump() for c in extractor.extract(records)]
    assert first == second
