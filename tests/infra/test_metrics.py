"""
Tests for infra/pipeline/storage/metrics.py
"""

import json

from infra.pipeline.storage.metrics import MetricsManager, PageMetrics


class TestMetricsManagerBasics:

    def test_record_creates_file(self, tmp_path):
        metrics_file = tmp_path / "transcripts" / "metrics.json"
        mm = MetricsManager(metrics_file)

        mm.record_page(0, PageMetrics(page=1, outcome="transcribed", attempts=1))

        assert metrics_file.exists()
        assert not (tmp_path / "transcripts" / "metrics.tmp").exists()

    def test_record_and_get(self, tmp_path):
        mm = MetricsManager(tmp_path / "metrics.json")

        mm.record_page(4, PageMetrics(page=5, outcome="transcribed", attempts=3, refusals=1))

        entry = mm.get(4)
        assert entry.page == 5
        assert entry.attempts == 3
        assert entry.refusals == 1

    def test_get_nonexistent_index(self, tmp_path):
        assert MetricsManager(tmp_path / "metrics.json").get(0) is None

    def test_rerecord_replaces(self, tmp_path):
        mm = MetricsManager(tmp_path / "metrics.json")

        mm.record_page(0, PageMetrics(page=1, outcome="refused", attempts=20))
        mm.record_page(0, PageMetrics(page=1, outcome="transcribed", attempts=1))

        assert mm.get(0).outcome == "transcribed"
        assert mm.get(0).attempts == 1

    def test_pages_sorted_by_index(self, tmp_path):
        mm = MetricsManager(tmp_path / "metrics.json")
        for index in (2, 0, 1):
            mm.record_page(index, PageMetrics(page=index + 1))

        assert list(mm.pages()) == [0, 1, 2]


class TestMetricsPersistence:

    def test_reload_from_disk(self, tmp_path):
        metrics_file = tmp_path / "metrics.json"
        MetricsManager(metrics_file).record_page(1, PageMetrics(page=2, prompt_tokens=40))

        assert MetricsManager(metrics_file).get(1) == PageMetrics(page=2, prompt_tokens=40)

    def test_file_keyed_by_index(self, tmp_path):
        metrics_file = tmp_path / "metrics.json"
        MetricsManager(metrics_file).record_page(7, PageMetrics(page=8))

        data = json.loads(metrics_file.read_text())
        assert data["pages"]["7"]["page"] == 8
        assert "updated_at" in data

    def test_unknown_keys_ignored_on_load(self, tmp_path):
        metrics_file = tmp_path / "metrics.json"
        metrics_file.write_text(json.dumps({"pages": {"0": {"page": 1, "cost_usd": 0.1}}}))

        assert MetricsManager(metrics_file).get(0).page == 1

    def test_corrupt_file_starts_fresh(self, tmp_path):
        metrics_file = tmp_path / "metrics.json"
        metrics_file.write_text("{not json")

        assert MetricsManager(metrics_file).pages() == {}

    def test_reset(self, tmp_path):
        metrics_file = tmp_path / "metrics.json"
        mm = MetricsManager(metrics_file)
        mm.record_page(0, PageMetrics(page=1))

        mm.reset()

        assert mm.pages() == {}
        assert json.loads(metrics_file.read_text())["pages"] == {}


class TestMetricsSummary:

    def test_totals_and_outcomes(self, tmp_path):
        mm = MetricsManager(tmp_path / "metrics.json")
        mm.record_page(0, PageMetrics(
            page=1, outcome="transcribed", attempts=1, prompt_tokens=10, completion_tokens=4, time_seconds=1.0,
        ))
        mm.record_page(1, PageMetrics(
            page=2, outcome="refused", attempts=20, refusals=20, prompt_tokens=200, completion_tokens=80, time_seconds=2.0,
        ))
        mm.record_page(2, PageMetrics(page=3, outcome="empty", attempts=20))

        summary = mm.summary()

        assert summary["pages"] == 3
        assert summary["attempts"] == 41
        assert summary["refusals"] == 20
        assert summary["prompt_tokens"] == 210
        assert summary["completion_tokens"] == 84
        assert summary["time_seconds"] == 3.0
        assert summary["transcribed"] == 1
        assert summary["refused"] == 1
        assert summary["empty"] == 1
        assert summary["error"] == 0
