import json
from pathlib import Path

import pytest

from schedsim.cli import main


@pytest.fixture
def workload(tmp_path: Path) -> Path:
    path = tmp_path / "w.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "label": "P1", "arrival_time": 0, "burst_time": 4, "priority": 1},
                {"id": 2, "label": "P2", "arrival_time": 1, "burst_time": 3, "priority": 2},
                {"id": 3, "label": "P3", "arrival_time": 2, "burst_time": 1, "priority": 3},
            ]
        )
    )
    return path


def test_run_prints_metrics(workload: Path, capsys):
    assert main(["run", "-a", "fcfs", "-w", str(workload)]) == 0
    out = capsys.readouterr().out
    assert "First Come First Serve" in out
    assert "2.67" in out
    assert "100.00%" in out


def test_run_rr_with_invalid_quantum_falls_back_to_one(workload: Path, capsys):
    assert main(["run", "-a", "RR", "-w", str(workload), "-q", "0"]) == 0
    out = capsys.readouterr().out
    assert "Quantum: 1" in out


def test_run_with_step_playback(workload: Path, capsys):
    assert main(["run", "-a", "sjf", "-w", str(workload), "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "t= 8" in out


def test_compare_random_workload(capsys):
    assert main(["compare", "--random", "5", "--seed", "3", "-a", "fcfs", "rr"]) == 0
    out = capsys.readouterr().out
    assert "Algorithm comparison" in out
    assert "Round" in out


def test_generate_writes_file(tmp_path: Path, capsys):
    target = tmp_path / "out.csv"
    assert main(["generate", str(target), "-n", "3", "--seed", "1"]) == 0
    assert target.read_text().startswith("id,label,arrival_time,burst_time,priority")


def test_bad_workload_reports_error(tmp_path: Path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text('[{"label":"A","arrival_time":0,"burst_time":0}]')
    assert main(["run", "-a", "fcfs", "-w", str(bad)]) == 2
    assert "burst_time must be >= 1" in capsys.readouterr().out


def test_unknown_algorithm_is_rejected_by_parser(workload: Path):
    with pytest.raises(SystemExit):
        main(["run", "-a", "srtf", "-w", str(workload)])


def test_missing_workload_reports_error(tmp_path: Path, capsys):
    assert main(["run", "-a", "fcfs", "-w", str(tmp_path / "nope.json")]) == 2
    assert "Error:" in capsys.readouterr().out
