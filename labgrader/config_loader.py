"""
Configuration loader for the lab grader.

Handles parsing and validation of YAML configuration files.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .config import (
    BOT_SIGNATURES,
    IGNORED_PATH_PREFIXES,
    IGNORED_PATHS_EXACT,
    SANDBOX_ALLOWED_MODULES,
    SANDBOX_MEMORY_LIMIT_MB,
    SANDBOX_TIMEOUT_MS,
    SCAN_WINDOW,
    SUBMISSION_CANDIDATES,
    SUBMISSION_MARKS_LATE,
    SUBMISSION_MARKS_ON_TIME,
    TOTAL_MARKS,
)
from .lateness import parse_deadline, to_epoch_ms
from .models import ClassifierConfig, GradingTask


class GraderConfig(BaseModel):
    """
    Configuration model for the grader.
    """
    lab_name: str = Field(..., description="Lab identifier shown in the feedback")
    deadline: datetime = Field(..., description="Due date with an explicit UTC offset")
    repo_path: Path = Field(Path("."), description="Path to the student repository checkout")
    artifacts_dir: Optional[Path] = Field(None, description="Where grade.csv and feedback are written")
    student_id: Optional[str] = Field(None, description="Override for the detected student username")

    # History scanning
    scan_window: int = Field(SCAN_WINDOW, gt=0, description="Number of recent commits to inspect")
    bot_signatures: list[str] = Field(default_factory=lambda: list(BOT_SIGNATURES))
    ignored_paths: list[str] = Field(default_factory=lambda: list(IGNORED_PATHS_EXACT))
    ignored_path_prefixes: list[str] = Field(default_factory=lambda: list(IGNORED_PATH_PREFIXES))

    # Sandbox
    sandbox_timeout_ms: int = Field(SANDBOX_TIMEOUT_MS, gt=0, description="Wall-clock execution budget")
    sandbox_memory_limit_mb: Optional[int] = Field(SANDBOX_MEMORY_LIMIT_MB, description="Child address-space cap")
    allowed_modules: list[str] = Field(default_factory=lambda: list(SANDBOX_ALLOWED_MODULES))

    # Grading
    submission_candidates: list[str] = Field(default_factory=lambda: list(SUBMISSION_CANDIDATES))
    tasks: list[GradingTask] = Field(default_factory=list)
    total_marks: int = Field(TOTAL_MARKS, ge=0)
    submission_marks_on_time: int = Field(SUBMISSION_MARKS_ON_TIME, ge=0)
    submission_marks_late: int = Field(SUBMISSION_MARKS_LATE, ge=0)

    verbose: bool = Field(False, description="Enable verbose output")

    @field_validator("deadline", mode="before")
    @classmethod
    def _require_offset(cls, value):
        # YAML may already hand us a datetime; either way it must be aware
        return parse_deadline(value if isinstance(value, datetime) else str(value))

    @property
    def deadline_epoch_ms(self) -> int:
        return to_epoch_ms(self.deadline)

    def classifier_config(self) -> ClassifierConfig:
        """Immutable classifier rules for the provenance resolver."""
        return ClassifierConfig.build(
            bot_signatures=self.bot_signatures,
            ignored_exact_paths=self.ignored_paths,
            ignored_path_prefixes=self.ignored_path_prefixes,
        )


def load_config(config_path: Path) -> GraderConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If the file is empty.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        raise ValueError(f"Configuration file is empty: {config_path}")

    # Resolve relative paths relative to the config file location
    config_dir = config_path.parent
    for path_field in ["repo_path", "artifacts_dir"]:
        if config_data.get(path_field):
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path

    return GraderConfig(**config_data)
