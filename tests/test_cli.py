"""
Tests for the command line interface.
"""

import pytest
from typer.testing import CliRunner

from clinicslots.cli.app import app

runner = CliRunner()

SNAPSHOT = """
professional_id: dr-ana
patient_id: pat-1
schedules:
  - {professional_id: dr-ana, day_of_week: 1, start_time: "09:00", end_time: "12:00"}
appointments:
  - id: apt-1
    professional_id: dr-ana
    patient_id: pat-2
    appointment_start_time: "2024-11-25T10:00:00"
    appointment_end_time: "2024-11-25T10:30:00"
treatments:
  cleaning: 30
items:
  - {id: item-1, treatment_id: cleaning, priority: 3, procedure_description: Cleaning}
  - {id: item-2, estimated_duration: 240, priority: 1}
"""


@pytest.fixture
def files(tmp_path):
    snapshot = tmp_path / "snapshot.yaml"
    snapshot.write_text(SNAPSHOT, encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text("timezone: America/Sao_Paulo\n", encoding="utf-8")
    return snapshot, config


def test_gaps_lists_free_blocks(files):
    snapshot, config = files

    result = runner.invoke(app, ["gaps", str(snapshot), "--start", "2024-11-25", "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert "2 free gap(s)" in result.output
    assert "09:00 - 10:00 (60 min)" in result.output
    assert "10:30 - 12:00 (90 min)" in result.output


def test_gaps_on_day_off(files):
    snapshot, config = files

    result = runner.invoke(app, ["gaps", str(snapshot), "--start", "2024-11-24", "--config", str(config)])

    assert result.exit_code == 0
    assert "No free gaps found" in result.output


def test_validate_conflict_exits_with_two(files):
    snapshot, config = files

    result = runner.invoke(
        app,
        [
            "validate", str(snapshot),
            "--start", "2024-11-25 10:15",
            "--end", "2024-11-25 10:45",
            "--config", str(config),
        ],
    )

    assert result.exit_code == 2
    assert "ProfessionalConflict" in result.output


def test_validate_free_slot(files):
    snapshot, config = files

    result = runner.invoke(
        app,
        [
            "validate", str(snapshot),
            "--start", "2024-11-25 09:00",
            "--end", "2024-11-25 10:00",
            "--config", str(config),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Slot available" in result.output


def test_schedule_reports_placed_and_unplaced(files):
    snapshot, config = files

    result = runner.invoke(
        app, ["schedule", str(snapshot), "--today", "2024-11-24", "--config", str(config)]
    )

    assert result.exit_code == 0, result.output
    assert "item-1" in result.output
    assert "Could not place 1 item(s)" in result.output
    assert "item-2" in result.output


def test_missing_snapshot_fails_cleanly(tmp_path, files):
    _, config = files

    result = runner.invoke(
        app, ["gaps", str(tmp_path / "missing.yaml"), "--start", "2024-11-25", "--config", str(config)]
    )

    assert result.exit_code == 1
    assert "Snapshot file not found" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "clinicslots" in result.output
