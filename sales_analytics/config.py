"""
Configuration loading.

Settings live in ``config.yaml`` next to this module. Both the Airflow DAG
and the CLI read it through ``load_config`` so the two entry points never
drift apart.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

CONFIG_PATH = Path(__file__).parent / "config.yaml"


def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    """
    Read the YAML config file and return it as a dict.

    Raises FileNotFoundError if the file does not exist and ValueError if it
    does not contain a mapping.
    """
    config_path = Path(path) if path else CONFIG_PATH
    with open(config_path) as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    return config


class ReportParams(BaseModel):
    """Parameters shared by the reporting queries (the ``reporting`` config section).

    Fields are strict integers: 12.5 or "12" is rejected, never truncated.
    """

    top_invoices_per_category: int = Field(3, ge=1)
    revenue_last_year: int = Field(2022, ge=1, le=9999)
    revenue_current_year: int = Field(2023, ge=1, le=9999)
    revenue_decrease_limit: int = Field(5, ge=1)

    # Lower bound (inclusive) of each shift, in hours
    afternoon_start_hour: int = Field(12, ge=0, le=24)
    evening_start_hour: int = Field(18, ge=0, le=24)

    # Lower bound (inclusive) of each transaction size, in units
    medium_min_quantity: int = Field(5, ge=1)
    large_min_quantity: int = Field(16, ge=1)

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    @model_validator(mode="after")
    def validate_shift_boundaries(self) -> "ReportParams":
        if self.afternoon_start_hour >= self.evening_start_hour:
            raise ValueError("afternoon_start_hour must be lower than evening_start_hour")
        return self

    @model_validator(mode="after")
    def validate_size_boundaries(self) -> "ReportParams":
        if self.medium_min_quantity >= self.large_min_quantity:
            raise ValueError("medium_min_quantity must be lower than large_min_quantity")
        return self

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ReportParams":
        return cls.model_validate(config.get("reporting") or {})

    def as_bind_params(self) -> dict[str, int]:
        return {
            "top_k": self.top_invoices_per_category,
            "last_year": self.revenue_last_year,
            "current_year": self.revenue_current_year,
            "decrease_limit": self.revenue_decrease_limit,
            "afternoon_start": self.afternoon_start_hour,
            "evening_start": self.evening_start_hour,
            "medium_min": self.medium_min_quantity,
            "large_min": self.large_min_quantity,
        }
