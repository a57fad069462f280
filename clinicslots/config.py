"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.rules import RuleThresholds
from .domain.scheduler import DEFAULT_PRIORITY_LABELS, SpacingPolicy


class EngineSettings(BaseModel):
    """Tunables of the gap calculator and the batch scheduler."""
    min_gap_minutes: int = 30
    step_minutes: int = 30
    horizon_days: int = 60
    default_duration_minutes: int = 60
    high_priority_spacing_days: int = 3
    default_spacing_days: int = 7
    spacing_policy: SpacingPolicy = SpacingPolicy.GLOBAL
    priority_labels: Dict[int, str] = Field(
        default_factory=lambda: {int(k): v for k, v in DEFAULT_PRIORITY_LABELS.items()}
    )

    @field_validator(
        "min_gap_minutes",
        "step_minutes",
        "horizon_days",
        "default_duration_minutes",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations and counts are positive."""
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @field_validator("high_priority_spacing_days", "default_spacing_days")
    @classmethod
    def validate_spacing(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Spacing must not be negative, got {value}")
        return value

    @field_validator("priority_labels")
    @classmethod
    def validate_labels(cls, value: Dict[int, str]) -> Dict[int, str]:
        """Ensure every priority tier has a label."""
        missing = [tier for tier in (1, 2, 3) if tier not in value]
        if missing:
            raise ValueError(f"priority_labels is missing tiers {missing}")
        return value


class RulesSettings(BaseModel):
    """Clinic booking rules."""
    max_appointments_per_day: int = 8
    daily_limit_warning_margin: int = 2
    min_hours_between_same_patient: int = 24
    max_daily_hours: int = 10
    min_appointment_minutes: int = 15
    max_appointment_minutes: int = 240

    @model_validator(mode="after")
    def validate_duration_bounds(self) -> "RulesSettings":
        """Ensure the allowed duration window is not empty."""
        if self.max_appointment_minutes <= self.min_appointment_minutes:
            raise ValueError("max_appointment_minutes must be greater than min_appointment_minutes")
        return self

    def to_thresholds(self) -> RuleThresholds:
        return RuleThresholds(**self.model_dump())


class Professional(BaseModel):
    """Professional known to the clinic."""
    id: str
    name: str


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Sao_Paulo"
    block_patient_id: Optional[str] = None
    check_patient_conflicts: bool = True
    engine: EngineSettings = Field(default_factory=EngineSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)
    professionals: List[Professional] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("professionals")
    @classmethod
    def validate_professionals(cls, value: List[Professional]) -> List[Professional]:
        """Ensure professional ids are unique."""
        seen: set[str] = set()
        for professional in value:
            if professional.id in seen:
                raise ValueError(f"Duplicate professional id detected: {professional.id}")
            seen.add(professional.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_professional(self, professional_id: str) -> Professional | None:
        """Find a professional by id."""
        for professional in self.professionals:
            if professional.id == professional_id:
                return professional
        return None

    def professional_name(self, professional_id: str) -> str:
        professional = self.find_professional(professional_id)
        return professional.name if professional else ""


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    config_path = Path.cwd() / "config.yaml"

    if not config_path.exists():
        # Fall back to the project root
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
