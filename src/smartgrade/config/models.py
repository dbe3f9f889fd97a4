"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class GradingDefaults:
    """Values applied to rubrics that leave a setting unspecified."""

    assignment_weight: float = 100.0
    passing_percentage: float = 50.0
    peer_eval_weight: float = 0.0
    criterion_weight: float = 1.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GradingDefaults":
        return cls(
            assignment_weight=float(data.get("assignment_weight", 100.0)),
            passing_percentage=float(data.get("passing_percentage", 50.0)),
            peer_eval_weight=float(data.get("peer_eval_weight", 0.0)),
            criterion_weight=float(data.get("criterion_weight", 1.0)),
        )


@dataclass
class ExportSettings:
    """CSV export settings."""

    decimals: int = 2
    delimiter: str = ","

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExportSettings":
        return cls(
            decimals=int(data.get("decimals", 2)),
            delimiter=data.get("delimiter", ","),
        )


@dataclass
class LoggingSettings:
    """Log level and optional log file used by the CLI."""

    level: str = "WARNING"
    file: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoggingSettings":
        log_file = data.get("file")
        return cls(
            level=str(data.get("level", "WARNING")),
            file=Path(log_file) if log_file else None,
        )


@dataclass
class AppConfig:
    """Complete application configuration."""

    data_dir: Path = Path("./smartgrade_data")
    owner: str = "default"
    grading: GradingDefaults = field(default_factory=GradingDefaults)
    export: ExportSettings = field(default_factory=ExportSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        return cls(
            data_dir=Path(data.get("data_dir", "./smartgrade_data")),
            owner=data.get("owner", "default"),
            grading=GradingDefaults.from_dict(data.get("grading", {})),
            export=ExportSettings.from_dict(data.get("export", {})),
            logging=LoggingSettings.from_dict(data.get("logging", {})),
        )
