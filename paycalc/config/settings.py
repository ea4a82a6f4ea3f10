"""
Configuration management for the pay calculator.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from paycalc.calculators import rules as pay_rules
from paycalc.calculators.rules import MissingClockOutPolicy, PayRules


class PayrollConfig(BaseSettings):
    """Configuration settings for the pay calculator."""

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Rates
    default_site_rate: Decimal = Field(
        default=pay_rules.DEFAULT_SITE_RATE, alias="DEFAULT_SITE_RATE"
    )
    travel_rate_factor: Decimal = Field(
        default=pay_rules.TRAVEL_RATE_FACTOR, alias="TRAVEL_RATE_FACTOR"
    )

    # Drive time
    speed_mph: Decimal = Field(default=pay_rules.SPEED_MPH, alias="SPEED_MPH")
    driving_factor: Decimal = Field(
        default=pay_rules.DRIVING_FACTOR, alias="DRIVING_FACTOR"
    )
    earth_radius_mi: float = Field(
        default=pay_rules.EARTH_RADIUS_MI, alias="EARTH_RADIUS_MI"
    )

    # Daily thresholds
    regular_hours_threshold: Decimal = Field(
        default=pay_rules.REGULAR_HOURS_THRESHOLD, alias="REGULAR_HOURS_THRESHOLD"
    )
    overtime_hours_threshold: Decimal = Field(
        default=pay_rules.OVERTIME_HOURS_THRESHOLD, alias="OVERTIME_HOURS_THRESHOLD"
    )

    # Site time policies
    missing_clock_out_policy: MissingClockOutPolicy = Field(
        default=MissingClockOutPolicy.ZERO, alias="MISSING_CLOCK_OUT_POLICY"
    )
    default_shift_hours: Decimal = Field(
        default=pay_rules.DEFAULT_SHIFT_HOURS, alias="DEFAULT_SHIFT_HOURS"
    )
    rounding_cutoff_date: Optional[dt.date] = Field(
        default=pay_rules.ROUNDING_CUTOFF_DATE, alias="ROUNDING_CUTOFF_DATE"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator(
        "default_site_rate", "speed_mph", "driving_factor", "default_shift_hours"
    )
    @classmethod
    def validate_positive(cls, v, info):
        """Ensure rates, speeds and durations are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v

    @field_validator("missing_clock_out_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Accept policy names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("rounding_cutoff_date", mode="before")
    @classmethod
    def blank_cutoff(cls, v):
        """An empty ROUNDING_CUTOFF_DATE disables rounding."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def pay_rules(self) -> PayRules:
        """Build the PayRules passed to the calculators."""
        return PayRules(
            default_site_rate=self.default_site_rate,
            travel_rate_factor=self.travel_rate_factor,
            speed_mph=self.speed_mph,
            driving_factor=self.driving_factor,
            earth_radius_mi=self.earth_radius_mi,
            regular_threshold=self.regular_hours_threshold,
            overtime_threshold=self.overtime_hours_threshold,
            missing_clock_out_policy=self.missing_clock_out_policy,
            default_shift_hours=self.default_shift_hours,
            rounding_cutoff=self.rounding_cutoff_date,
        )


def load_config(env_file: Optional[str] = None) -> PayrollConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return PayrollConfig()


# Global configuration instance
_config: Optional[PayrollConfig] = None


def get_config() -> PayrollConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> PayrollConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
