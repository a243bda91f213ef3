from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from config.settings import PipelineConfig
from fakes import FakeCrm, FakeEnricher, FixedClassifier, make_record
from models import EnrichedProfile, NormalizedProfile, ProfileCandidate, ReconcileOutcome
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import (
    AdmitQuota,
    AdvanceRecords,
    CommitQuota,
    EnrichProfiles,
    ExtractCandidates,
    FetchRecords,
    ReconcileContacts,
)
from pipelines.steps.advance_records import records_ready_to_advance
from ports import PartialFetchError
from services.rate_tracker import WeeklyRateTracker
from services.reconciler import ContactReconciler


CONFIG = PipelineConfig(pipeline_id="p1", source_stage_id="source", target_stage_id="done")


def _tracker(tmp_path, limit=10):
    now = lambda: datetime(2025, 3, 5, tzinfo=timezone.utc)  # noqa: E731
    return WeeklyRateTracker(tmp_path / "weekly.json", limit, now=now)


def test_admit_quota_denied_stops_run(tmp_path):
    tracker = _tracker(tmp_path, limit=3)
    tracker.commit(3)
    crm = FakeCrm([make_record("1")])
    ctx = Pipeline([AdmitQuota(tracker), FetchRecords(crm, CONFIG)]).run(RunContext())
    assert ctx.stop_reason == "weekly_limit_reached"
    assert ctx.records == []


def test_partial_admission_caps_fetch(tmp_path):
    tracker = _tracker(tmp_path, limit=10)
    tracker.commit(8)
    crm = FakeCrm([make_record(str(i)) for i in range(5)])
    ctx = Pipeline([AdmitQuota(tracker, requested=5), FetchRecords(crm, CONFIG)]).run(RunContext())
    assert ctx.meta["admission"] == "partial"
    assert ctx.admitted == 2
    assert [r.id for r in ctx.records] == ["0", "1"]


def test_empty_source_stage_is_a_clean_stop():
    ctx = Pipeline([FetchRecords(FakeCrm(), CONFIG), ExtractCandidates()]).run(RunContext())
    assert ctx.stop_reason == "no_records"


def test_records_without_urls_are_reported():
    crm = FakeCrm([make_record("1", "no link"), make_record("2", "https://www.linkedin.com/in/x")])
    ctx = Pipeline([FetchRecords(crm, CONFIG), ExtractCandidates()]).run(RunContext())
    assert ctx.stop_reason is None
    assert ctx.meta["records_without_urls"] == ["1"]


def test_partial_fetch_keeps_records_on_context():
    class _Flaky:
        def search_records(self, **kwargs):
            raise PartialFetchError("page 2 failed", [make_record("1")], RuntimeError("502"))

    ctx = RunContext()
    with pytest.raises(PartialFetchError):
        FetchRecords(_Flaky(), CONFIG).run(ctx)
    assert [r.id for r in ctx.records] == ["1"]
    assert ctx.meta["partial_fetch"] is True


def test_enrich_profiles_pairs_results_by_normalized_url():
    jane = ProfileCandidate(url="https://www.linkedin.com/in/jane-doe")
    bob = ProfileCandidate(url="https://www.linkedin.com/in/bob")
    enricher = FakeEnricher(items=[
        {"fullName": "Bob Stone", "inputUrl": "https://linkedin.com/in/Bob/"},
        {"fullName": "Jane Doe", "linkedinUrl": "https://www.linkedin.com/in/jane-doe?trk=x"},
        {"fullName": "Stranger", "linkedinUrl": "https://www.linkedin.com/in/someone-else"},
    ])
    ctx = RunContext()
    ctx.new = [jane, bob]
    ctx = EnrichProfiles(enricher).run(ctx)

    assert enricher.calls == [[jane.url, bob.url]]
    assert ctx.profiles[jane.url].normalized.name == "Jane Doe"
    assert ctx.profiles[bob.url].normalized.name == "Bob Stone"
    assert ctx.meta["enriched_profiles"] == 3
    assert ctx.meta["unmatched_profiles"] == 1


def test_enrich_profiles_without_new_candidates_makes_no_call():
    enricher = FakeEnricher()
    ctx = EnrichProfiles(enricher).run(RunContext())
    assert enricher.calls == []
    assert ctx.meta["enriched_profiles"] == 0


def test_only_fully_associated_records_advance():
    ctx = RunContext()
    ctx.records = [make_record(rid) for rid in ("a", "b", "c", "d", "e")]
    errored = ProfileCandidate(url="https://www.linkedin.com/in/err", record_ids=["d"], record_names=["d"])
    ctx.candidates = [errored]
    ctx.outcomes = [
        ReconcileOutcome(url="u1", action="created", contact_id="1", associated_record_ids=["a", "b"]),
        ReconcileOutcome(url="u2", action="updated", contact_id="2", associated_record_ids=["b"], failed_record_ids=["c"]),
        ReconcileOutcome(url="u3", action="created", contact_id="3", associated_record_ids=["c", "d"]),
        ReconcileOutcome(url=errored.url, action="errored", reason="boom"),
        ReconcileOutcome(url="u5", action="skipped", reason="company"),
    ]
    # "c" has a failed link, "d" has an errored candidate, "e" was never linked
    assert records_ready_to_advance(ctx) == ["a", "b"]


def test_commit_quota_counts_advanced_records(tmp_path):
    tracker = _tracker(tmp_path)
    ctx = RunContext()
    ctx.advanced = ["a", "b"]
    ctx = CommitQuota(tracker).run(ctx)
    assert ctx.meta["quota_committed"] == 2
    assert json.loads((tmp_path / "weekly.json").read_text())["dealsProcessed"] == 2


def test_commit_quota_write_failure_is_reported(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    tracker = WeeklyRateTracker(blocker / "weekly.json", 10)
    ctx = RunContext()
    ctx.advanced = ["a"]
    ctx = CommitQuota(tracker).run(ctx)
    assert "quota_commit_error" in ctx.meta
    assert "quota_committed" not in ctx.meta


def test_one_failed_candidate_does_not_stop_the_batch():
    class _FirstCreateFails(FakeCrm):
        def create_contact(self, properties):
            if not getattr(self, "_failed_once", False):
                self._failed_once = True
                raise RuntimeError("contact create rejected")
            return super().create_contact(properties)

    crm = _FirstCreateFails([make_record("r1"), make_record("r2")])
    first = ProfileCandidate(url="https://www.linkedin.com/in/first", record_ids=["r1"], record_names=["r1"])
    second = ProfileCandidate(url="https://www.linkedin.com/in/second", record_ids=["r2"], record_names=["r2"])
    ctx = RunContext()
    ctx.records = list(crm.records)
    ctx.candidates = [first, second]
    ctx.new = [first, second]
    ctx.profiles = {
        first.url: EnrichedProfile(raw={}, normalized=NormalizedProfile(name="Ann One", first_name="Ann")),
        second.url: EnrichedProfile(raw={}, normalized=NormalizedProfile(name="Ben Two", first_name="Ben")),
    }
    reconciler = ContactReconciler(crm, FixedClassifier("person"))

    ctx = Pipeline([
        ReconcileContacts(reconciler, write_delay_seconds=0),
        AdvanceRecords(crm, "done", write_delay_seconds=0),
    ]).run(ctx)

    assert [o.action for o in ctx.outcomes] == ["errored", "created"]
    assert ctx.advanced == ["r2"]
    assert crm.stage_updates == [("r2", "done")]
