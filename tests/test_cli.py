from __future__ import annotations

import json
import sys
from typing import List

import cli
from fakes import FakeCrm, FakeEnricher, FixedClassifier, make_record
from pipelines.sync_dealmakers import SyncDependencies
from ports import PartialFetchError
from services.enrichment_client import EnrichmentError
from services.rate_tracker import WeeklyRateTracker


def _run_cli_with_args(args_list: List[str], monkeypatch) -> int:
    """Simulate CLI execution of cli.py with given args (non-interactive)."""
    monkeypatch.setattr(sys, "argv", ["cli.py"] + args_list)
    return cli.main()


def _env(monkeypatch, **extra):
    monkeypatch.setenv("HUBSPOT_TOKEN", "hs-test")
    monkeypatch.setenv("APIFY_TOKEN", "apify-test")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("SOURCE_STAGE_ID", "source")
    monkeypatch.setenv("TARGET_STAGE_ID", "done")
    monkeypatch.setenv("LOOKUP_DELAY_SECONDS", "0")
    monkeypatch.setenv("WRITE_DELAY_SECONDS", "0")
    monkeypatch.setenv("RUN_ID", "cli-test")
    for key, value in extra.items():
        monkeypatch.setenv(key, value)


def test_quota_set_then_show(tmp_path, monkeypatch, capsys):
    _env(monkeypatch, MAX_DEALS_PER_WEEK="10")
    tracking = tmp_path / "weekly.json"

    assert _run_cli_with_args(["--tracking-file", str(tracking), "quota", "set", "4"], monkeypatch) == 0
    assert json.loads(tracking.read_text())["dealsProcessed"] == 4

    assert _run_cli_with_args(["--tracking-file", str(tracking), "quota"], monkeypatch) == 0
    out = capsys.readouterr().out
    assert "Deals processed: 4/10" in out
    assert "Deals remaining: 6" in out

    assert _run_cli_with_args(["--tracking-file", str(tracking), "quota", "reset"], monkeypatch) == 0
    assert json.loads(tracking.read_text())["dealsProcessed"] == 0


def test_run_without_crm_token_exits_1(monkeypatch, capsys):
    _env(monkeypatch)
    monkeypatch.delenv("HUBSPOT_TOKEN", raising=False)

    def _unexpected(*args, **kwargs):
        raise AssertionError("no collaborators should be built")

    monkeypatch.setattr(cli, "build_default_dependencies", _unexpected)
    assert _run_cli_with_args(["run"], monkeypatch) == 1
    assert "HUBSPOT_TOKEN" in capsys.readouterr().out


def test_run_rejects_non_positive_weekly_limit(monkeypatch):
    _env(monkeypatch, MAX_DEALS_PER_WEEK="0")
    assert _run_cli_with_args(["run"], monkeypatch) == 1


def _patch_deps(monkeypatch, crm, enricher):
    def _build(settings, dry_run=False):
        return SyncDependencies(
            records=crm,
            contacts=crm,
            enricher=None if dry_run else enricher,
            classifier=FixedClassifier("person"),
            tracker=WeeklyRateTracker(settings.weekly_tracking_file, settings.max_deals_per_week),
        )

    monkeypatch.setattr(cli, "build_default_dependencies", _build)


def test_run_end_to_end_with_fakes(tmp_path, monkeypatch, capsys):
    _env(monkeypatch)
    crm = FakeCrm([make_record("1", "https://www.linkedin.com/in/jane-doe")])
    enricher = FakeEnricher(items=[{"fullName": "Jane Doe", "linkedinUrl": "https://www.linkedin.com/in/jane-doe"}])
    _patch_deps(monkeypatch, crm, enricher)
    tracking = tmp_path / "weekly.json"

    assert _run_cli_with_args(["--tracking-file", str(tracking), "run"], monkeypatch) == 0

    out = capsys.readouterr().out
    assert "Created: 1" in out
    assert "Deals moved to target stage: 1" in out
    assert crm.records[0].stage == "done"
    assert json.loads(tracking.read_text())["dealsProcessed"] == 1


def test_run_dry_run_prints_plan(tmp_path, monkeypatch, capsys):
    _env(monkeypatch)
    monkeypatch.delenv("APIFY_TOKEN", raising=False)
    crm = FakeCrm([make_record("1", "https://www.linkedin.com/in/jane-doe")])
    _patch_deps(monkeypatch, crm, FakeEnricher())

    assert _run_cli_with_args(["--tracking-file", str(tmp_path / "w.json"), "run", "--dry-run"], monkeypatch) == 0
    out = capsys.readouterr().out
    assert "ENRICH https://www.linkedin.com/in/jane-doe" in out
    assert crm.stage_updates == []


def test_run_enrichment_failure_exits_1(tmp_path, monkeypatch):
    _env(monkeypatch)
    crm = FakeCrm([make_record("1", "https://www.linkedin.com/in/jane-doe")])
    _patch_deps(monkeypatch, crm, FakeEnricher(error=EnrichmentError("actor failed")))

    assert _run_cli_with_args(["--tracking-file", str(tmp_path / "w.json"), "run"], monkeypatch) == 1
    assert crm.created == []


def test_move_records_previews_unless_confirmed(monkeypatch, capsys):
    _env(monkeypatch)
    crm = FakeCrm([make_record("1", stage="lost"), make_record("2", stage="lost"), make_record("3", stage="other")])
    monkeypatch.setattr(cli, "_hubspot", lambda settings: crm)

    args = ["move-records", "--from-stage", "lost", "--to-stage", "source"]
    assert _run_cli_with_args(args, monkeypatch) == 0
    assert "Preview only" in capsys.readouterr().out
    assert crm.stage_updates == []

    assert _run_cli_with_args(args + ["--confirm"], monkeypatch) == 0
    assert crm.stage_updates == [("1", "source"), ("2", "source")]


def test_list_pipelines(monkeypatch, capsys):
    _env(monkeypatch)

    class _Pipelines:
        def list_pipelines(self, object_type):
            return [{"id": "p1", "label": "Dealmakers", "stages": [{"id": "s1", "label": "New"}]}]

    monkeypatch.setattr(cli, "_hubspot", lambda settings: _Pipelines())
    assert _run_cli_with_args(["list-pipelines"], monkeypatch) == 0
    out = capsys.readouterr().out
    assert "Dealmakers (ID: p1)" in out
    assert "New (ID: s1)" in out


def test_run_reports_deals_fetched_before_search_failure(tmp_path, monkeypatch, capsys):
    _env(monkeypatch)

    class _BrokenPaging(FakeCrm):
        def search_records(self, **kwargs):
            fetched = [make_record("1"), make_record("2")]
            raise PartialFetchError("page 3 returned 502", fetched, RuntimeError("502"))

    crm = _BrokenPaging()
    _patch_deps(monkeypatch, crm, FakeEnricher())

    assert _run_cli_with_args(["--tracking-file", str(tmp_path / "w.json"), "run"], monkeypatch) == 1
    out = capsys.readouterr().out
    assert "after 2 deals were fetched" in out
    assert crm.stage_updates == []
