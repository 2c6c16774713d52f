"""Tests for snapshot persistence."""

import json

import pytest

from polyarb.arb.ranker import filter_opportunities
from polyarb.core.errors import PersistenceError, SnapshotNotFoundError
from polyarb.domain.models import DataSource, Opportunity, ReportSnapshot
from polyarb.services.persistence import JsonFilePersistence


@pytest.fixture
def store(tmp_path):
    return JsonFilePersistence(
        snapshot_path=tmp_path / "data.json",
        report_path=tmp_path / "index.html",
    )


@pytest.fixture
def snapshot():
    opportunities = filter_opportunities([
        {
            "id": "m1",
            "question": "Will it rain?",
            "outcomePrices": ["0.45", "0.52"],
            "volume": 1200,
            "liquidity": {"YES": 10, "NO": 20},
            "updatedAt": "2026-10-19T08:00:00Z",
        },
        {"id": "m2"},
    ])
    return ReportSnapshot(
        generated_at="2026-10-19T09:00:00.000Z",
        opportunities=opportunities,
        source=DataSource.LIVE.value,
    )


class TestJsonFilePersistence:
    """Tests for JsonFilePersistence."""

    def test_snapshot_json_shape(self, store, snapshot):
        path = store.save_snapshot(snapshot)

        data = json.loads(path.read_text(encoding="utf-8"))

        assert list(data.keys()) == ["generatedAt", "opportunities", "totalCount", "source"]
        assert data["generatedAt"] == "2026-10-19T09:00:00.000Z"
        assert data["totalCount"] == 2
        assert data["source"] == "live"
        assert list(data["opportunities"][0].keys()) == [
            "id", "question", "yes", "no", "sum", "spread", "volume", "liquidity", "updatedAt",
        ]
        assert data["opportunities"][0]["id"] == "m2"
        assert data["opportunities"][0]["spread"] == 1
        assert data["opportunities"][1]["liquidity"] == {"YES": 10, "NO": 20}

    def test_round_trip(self, store, snapshot):
        store.save_snapshot(snapshot)

        loaded = store.load_snapshot()

        assert loaded.to_dict() == snapshot.to_dict()

    def test_overwrites_previous_snapshot(self, store, snapshot):
        store.save_snapshot(snapshot)
        store.save_snapshot(ReportSnapshot(generated_at="2026-10-19T10:00:00.000Z"))

        loaded = store.load_snapshot()

        assert loaded.total_count == 0
        assert loaded.generated_at == "2026-10-19T10:00:00.000Z"

    def test_no_temp_files_left_behind(self, store, snapshot, tmp_path):
        store.save_snapshot(snapshot)
        store.save_report("<html></html>")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["data.json", "index.html"]

    def test_creates_parent_directories(self, tmp_path, snapshot):
        store = JsonFilePersistence(
            snapshot_path=tmp_path / "out" / "data.json",
            report_path=tmp_path / "out" / "index.html",
        )

        assert store.save_snapshot(snapshot).exists()

    def test_load_missing_snapshot(self, store):
        with pytest.raises(SnapshotNotFoundError):
            store.load_snapshot()

    def test_load_corrupt_snapshot(self, store):
        store.snapshot_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError):
            store.load_snapshot()

    def test_load_snapshot_without_source(self, store):
        store.snapshot_path.write_text(
            json.dumps({"generatedAt": "2026-10-19T09:00:00.000Z", "opportunities": [], "totalCount": 0}),
            encoding="utf-8",
        )

        loaded = store.load_snapshot()

        assert loaded.source == ""
        assert loaded.total_count == 0

    def test_write_failure_raises_persistence_error(self, tmp_path, snapshot):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = JsonFilePersistence(
            snapshot_path=blocker / "data.json",
            report_path=blocker / "index.html",
        )

        with pytest.raises(PersistenceError):
            store.save_snapshot(snapshot)
        with pytest.raises(PersistenceError):
            store.save_report("<html></html>")

    def test_save_report(self, store):
        path = store.save_report("<html>ok</html>")
        assert path.read_text(encoding="utf-8") == "<html>ok</html>"

    def test_non_finite_values_are_rejected(self, store):
        # Built directly, bypassing the calculator
        bad = ReportSnapshot(
            generated_at="2026-10-19T09:00:00.000Z",
            opportunities=[Opportunity(id="x", question="?", yes=float("-inf"), no=0.5)],
        )

        with pytest.raises(PersistenceError):
            store.save_snapshot(bad)
        assert not store.snapshot_path.exists()

    def test_infinite_price_strings_persist_as_standard_json(self, store):
        opportunities = filter_opportunities([
            {"id": "x", "outcomePrices": ["-inf", "0.5"]},
            {"id": "y", "outcomePrices": ["1e999", "0.2"]},
        ])
        store.save_snapshot(ReportSnapshot(generated_at="2026-10-19T09:00:00.000Z", opportunities=opportunities))

        text = store.snapshot_path.read_text(encoding="utf-8")
        data = json.loads(text, parse_constant=lambda token: pytest.fail(f"non-standard token {token}"))

        assert "Infinity" not in text
        assert [o["spread"] for o in data["opportunities"]] == [0.8, 0.5]

    def test_empty_liquidity_survives_round_trip(self, store):
        opportunities = filter_opportunities([{"id": "z", "outcomePrices": [0.4, 0.5], "liquidity": {}}])
        store.save_snapshot(ReportSnapshot(generated_at="2026-10-19T09:00:00.000Z", opportunities=opportunities))

        assert store.load_snapshot().opportunities[0].liquidity == {}
