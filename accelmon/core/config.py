"""
Configuration management system for the acceleration monitor.

This module provides Pydantic settings models for type-safe configuration with
validation and environment variable integration. Every group can be overridden
with ``ACCELMON_<GROUP>_<FIELD>`` variables or from a ``.env`` file.
"""

from typing import Optional, Tuple
from enum import Enum
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels for the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SmoothingPolicyName(str, Enum):
    """Available display smoothing policies."""
    FIXED = "fixed"
    ADAPTIVE = "adaptive"


class BaseConfig(BaseSettings):
    """
    Base configuration class with common settings for all components.

    All other configuration classes should inherit from this class.
    """
    model_config = SettingsConfigDict(env_file=".env", env_prefix="ACCELMON_", extra="ignore")


class StreamConfig(BaseConfig):
    """Configuration for the stream registry."""
    max_streams: int = 6
    activity_timeout: float = 5.0  # seconds without data before a stream is inactive

    model_config = SettingsConfigDict(env_prefix="ACCELMON_STREAM_")

    @field_validator("max_streams")
    @classmethod
    def validate_max_streams(cls, v):
        """Stream ids are single digits on the wire."""
        if not 1 <= v <= 9:
            raise ValueError("max_streams must be between 1 and 9")
        return v


class CalibrationConfig(BaseConfig):
    """Configuration for baseline/noise calibration and derived thresholds (milli-g)."""
    sample_count: int = 60
    min_deadzone: float = 250.0
    deadzone_noise_factor: float = 2.5
    min_base_threshold: float = 300.0
    threshold_noise_factor: float = 4.0
    threshold_multipliers: Tuple[float, ...] = (1.0, 1.8, 3.5, 6.0, 10.0, 16.0)
    good_noise_max: float = 250.0
    fair_noise_max: float = 500.0

    model_config = SettingsConfigDict(env_prefix="ACCELMON_CALIBRATION_")

    @field_validator("sample_count")
    @classmethod
    def validate_sample_count(cls, v):
        """A baseline needs at least two samples."""
        if v < 2:
            raise ValueError("sample_count must be at least 2")
        return v

    @field_validator("threshold_multipliers")
    @classmethod
    def validate_multipliers(cls, v):
        """Multipliers must describe six strictly increasing level boundaries."""
        if len(v) != 6:
            raise ValueError("threshold_multipliers must contain exactly six values")
        if v[0] <= 0:
            raise ValueError("threshold_multipliers must be positive")
        if any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("threshold_multipliers must be strictly increasing")
        return v

    @model_validator(mode="after")
    def validate_quality_bands(self):
        if self.fair_noise_max < self.good_noise_max:
            raise ValueError("fair_noise_max must not be below good_noise_max")
        return self


class MotionConfig(BaseConfig):
    """Configuration for the motion level classifier."""
    hysteresis_fraction: float = 0.2  # of the first threshold
    stuck_motion_timeout: float = 2.0  # seconds

    model_config = SettingsConfigDict(env_prefix="ACCELMON_MOTION_")

    @field_validator("hysteresis_fraction", "stuck_motion_timeout")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("value must not be negative")
        return v


class SmoothingConfig(BaseConfig):
    """Configuration for display smoothing."""
    policy: SmoothingPolicyName = SmoothingPolicyName.FIXED
    alpha: float = 0.15

    # Adaptive policy: linear map from mean axis noise to alpha
    noise_low: float = 5.0
    noise_high: float = 50.0
    alpha_min: float = 0.05
    alpha_max: float = 0.5

    # Manual adjustment
    adjust_step: float = 0.05
    adjust_ceiling: float = 1.0

    model_config = SettingsConfigDict(env_prefix="ACCELMON_SMOOTHING_")

    @field_validator("alpha", "alpha_min", "alpha_max", "adjust_ceiling")
    @classmethod
    def validate_alpha(cls, v):
        """Validate smoothing factors are within range."""
        if not 0.0 < v <= 1.0:
            raise ValueError("Smoothing factors must be in (0.0, 1.0]")
        return v

    @model_validator(mode="after")
    def validate_ranges(self):
        if self.noise_high <= self.noise_low:
            raise ValueError("noise_high must be greater than noise_low")
        if self.alpha_max < self.alpha_min:
            raise ValueError("alpha_max must not be below alpha_min")
        return self


class SchedulerConfig(BaseConfig):
    """Configuration for the ingestion scheduler and backlog control."""
    max_messages_per_tick: int = 20
    backlog_tick_threshold: int = 60  # ~1 s at 60 ticks/s
    purge_cap: int = 1000
    tick_rate: float = 60.0  # ticks per second
    throughput_window: float = 1.0  # seconds
    stats_log_interval: float = 5.0  # seconds

    model_config = SettingsConfigDict(env_prefix="ACCELMON_SCHEDULER_")

    @field_validator("max_messages_per_tick", "backlog_tick_threshold", "purge_cap")
    @classmethod
    def validate_positive_int(cls, v):
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("tick_rate", "throughput_window", "stats_log_interval")
    @classmethod
    def validate_positive_float(cls, v):
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @property
    def tick_interval(self) -> float:
        """Seconds between scheduling ticks."""
        return 1.0 / self.tick_rate


class SerialConfig(BaseConfig):
    """Configuration for the serial line source."""
    port: Optional[str] = None  # None = first available port
    baudrate: int = 115200
    max_buffer_bytes: int = 65536  # partial-line buffer bound

    model_config = SettingsConfigDict(env_prefix="ACCELMON_SERIAL_")


class EventConfig(BaseConfig):
    """Configuration for the event system."""
    max_trace_events: int = 1000
    tracing_enabled: bool = True

    model_config = SettingsConfigDict(env_prefix="ACCELMON_EVENT_")


class ApplicationConfig(BaseConfig):
    """
    Main application configuration that combines all component configurations.

    This is the top-level configuration class that should be used by the application.
    """
    debug: bool = False
    log_level: LogLevel = LogLevel.INFO

    stream: StreamConfig = Field(default_factory=StreamConfig)
    calibration: CalibrationConfig = Field(default_factory=CalibrationConfig)
    motion: MotionConfig = Field(default_factory=MotionConfig)
    smoothing: SmoothingConfig = Field(default_factory=SmoothingConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    serial: SerialConfig = Field(default_factory=SerialConfig)
    event: EventConfig = Field(default_factory=EventConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ACCELMON_",
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_config() -> ApplicationConfig:
    """
    Get the application configuration.

    Returns:
        The validated ApplicationConfig instance
    """
    return ApplicationConfig()
