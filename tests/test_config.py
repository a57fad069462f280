"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from clinicslots.config import AppConfig, EngineSettings, RulesSettings
from clinicslots.domain.scheduler import SpacingPolicy


def test_defaults_match_clinic_rules():
    config = AppConfig()

    assert config.timezone == "America/Sao_Paulo"
    assert config.engine.min_gap_minutes == 30
    assert config.engine.step_minutes == 30
    assert config.engine.horizon_days == 60
    assert config.engine.default_duration_minutes == 60
    assert config.engine.spacing_policy is SpacingPolicy.GLOBAL
    assert config.rules.to_thresholds().max_appointments_per_day == 8


def test_load_from_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "timezone: Europe/Lisbon\n"
        "engine:\n"
        "  horizon_days: 30\n"
        "  spacing_policy: per_treatment\n"
        "professionals:\n"
        "  - {id: dr-ana, name: Dra. Ana}\n",
        encoding="utf-8",
    )

    config = AppConfig.load_from_yaml(config_file)

    assert config.timezone == "Europe/Lisbon"
    assert config.engine.horizon_days == 30
    assert config.engine.spacing_policy is SpacingPolicy.PER_TREATMENT
    assert config.professional_name("dr-ana") == "Dra. Ana"
    assert config.professional_name("unknown") == ""


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_yaml(tmp_path / "nope.yaml")


def test_root_must_be_mapping(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        AppConfig.load_from_yaml(config_file)


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        EngineSettings(step_minutes=0)
    with pytest.raises(ValidationError):
        EngineSettings(default_spacing_days=-1)
    with pytest.raises(ValidationError):
        EngineSettings(priority_labels={1: "Normal", 3: "High"})
    with pytest.raises(ValidationError):
        RulesSettings(min_appointment_minutes=60, max_appointment_minutes=30)
    with pytest.raises(ValidationError):
        AppConfig(timezone="Mars/Olympus_Mons")


def test_duplicate_professionals_are_rejected():
    with pytest.raises(ValidationError, match="Duplicate professional id"):
        AppConfig(professionals=[{"id": "p1", "name": "A"}, {"id": "p1", "name": "B"}])
