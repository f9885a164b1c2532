"""Tests for the driver script and the sample data it falls back to."""

import json
from datetime import date

from generators.sample_data import build_sample_snapshot, monday_on_or_after
from run_allocator import main


class TestSampleData:
    def test_starts_on_a_monday(self):
        snapshot = build_sample_snapshot(date(2025, 1, 8))
        assert snapshot.get_initiative(1).start_date == date(2025, 1, 13)
        assert monday_on_or_after(date(2025, 1, 6)) == date(2025, 1, 6)

    def test_role_override_applies_to_second_initiative(self):
        snapshot = build_sample_snapshot(date(2025, 1, 6))
        assert snapshot.effective_role(2, 1).value == "BA"
        assert snapshot.effective_role(1, 1).value == "PM"


class TestMain:
    def test_apply_and_export(self, tmp_path):
        out = tmp_path / "out.json"
        code = main(["--snapshot", str(tmp_path / "missing.json"), "--export", str(out), "--apply"])

        assert code == 0
        data = json.loads(out.read_text())
        assert len(data["cells"]) > 2

    def test_loads_exported_snapshot(self, tmp_path):
        first = tmp_path / "first.json"
        main(["--snapshot", str(tmp_path / "missing.json"), "--export", str(first)])

        second = tmp_path / "second.json"
        assert main(["--snapshot", str(first), "--export", str(second)]) == 0
        assert json.loads(second.read_text()) == json.loads(first.read_text())

    def test_unknown_initiative_fails(self, tmp_path):
        code = main(["--snapshot", str(tmp_path / "missing.json"), "--export", str(tmp_path / "o.json"),
                     "--initiative", "99"])
        assert code == 1

    def test_malformed_snapshot_fails(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"cells": [{"initiative_id": 1, "person_id": 1, "date": "2025-01-06", "hours": 30}]}))

        assert main(["--snapshot", str(bad), "--export", str(tmp_path / "o.json")]) == 1
        assert not (tmp_path / "o.json").exists()

    def test_reversed_initiative_window_fails(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"initiatives": [
            {"id": 1, "name": "Portal", "start_date": "2025-02-01", "end_date": "2025-01-01"},
        ]}))
        assert main(["--snapshot", str(bad), "--export", str(tmp_path / "o.json")]) == 1

    def test_bad_log_actual_date_fails(self, tmp_path):
        code = main(["--snapshot", str(tmp_path / "missing.json"), "--export", str(tmp_path / "o.json"),
                     "--log-actual", "1", "next-monday", "6"])
        assert code == 1
