import csv
import json
from pathlib import Path

import yaml

from scripts.run import main, run_validation

ROOT = Path(__file__).resolve().parents[1]
SAMPLE = ROOT / "data" / "input" / "sample_dataset.json"


def test_run_validation_writes_artifacts(tmp_path: Path):
    """
    @brief
    Sample snapshot run produces the report JSON and the issues CSV.

    @details
    The shipped sample contains deliberate defects, so the run is
    reported invalid and every issue appears once in the CSV.
    """
    # --- Act ---
    result = run_validation(None, SAMPLE, tmp_path)
    arts = result["artifacts"]

    # --- Assert ---
    assert result["valid"] is False
    assert result["total_errors"] > 0
    assert result["data_quality_score"] < 100.0

    report = json.loads(Path(arts["validation_report"]).read_text(encoding="utf-8"))
    assert report["total_errors"] == result["total_errors"]
    assert set(report["errors"]) == {"clients", "workers", "tasks"}

    with Path(arts["issues_csv"]).open(encoding="utf-8", newline="") as f:
        assert len(list(csv.DictReader(f))) == result["total_errors"]


def test_run_validation_respects_report_switches(tmp_path: Path):
    # --- Arrange ---
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        yaml.safe_dump({"report": {"write_report": True, "write_issues_csv": False}}),
        encoding="utf-8",
    )

    # --- Act ---
    result = run_validation(cfg_path, SAMPLE, tmp_path / "out")

    # --- Assert ---
    assert result["artifacts"]["issues_csv"] is None
    assert not (tmp_path / "out" / "issues.csv").exists()


def test_main_exit_codes(tmp_path: Path):
    """
    @brief
    0 for clean data, 1 for critical issues or controlled failures.
    """
    # --- Arrange ---
    clean = tmp_path / "clean.json"
    clean.write_text(
        json.dumps({"clients": [{"ClientID": "C1", "ClientName": "A", "PriorityLevel": 2}]}),
        encoding="utf-8",
    )
    out = str(tmp_path / "out")

    # --- Act / Assert ---
    assert main(["--input", str(clean), "--output", out]) == 0
    assert main(["--input", str(SAMPLE), "--output", out]) == 1
    assert main(["--input", str(tmp_path / "missing.json"), "--output", out]) == 1
    assert main(["--config", str(tmp_path / "nope.yaml"), "--output", out]) == 1
