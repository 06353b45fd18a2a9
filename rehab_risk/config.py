"""Configuration management for RehabRisk."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rehab_risk.models.risk import RiskWeights


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Record store
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/rehab_risk.db",
        description="SQLAlchemy async DSN for the patient record store",
    )

    # Domain weights (must be non-negative; defaults sum to 1.0)
    weight_pain: float = Field(default=0.25, ge=0.0)
    weight_adherence: float = Field(default=0.20, ge=0.0)
    weight_psychological: float = Field(default=0.20, ge=0.0)
    weight_movement: float = Field(default=0.15, ge=0.0)
    weight_health: float = Field(default=0.10, ge=0.0)
    weight_progression: float = Field(default=0.10, ge=0.0)

    # Risk level breakpoints on the 0-100 overall score
    critical_threshold: float = Field(default=75.0)
    high_threshold: float = Field(default=50.0)
    moderate_threshold: float = Field(default=25.0)
    trend_threshold: float = Field(
        default=5.0,
        description="Score change beyond which a trend counts as improving/worsening",
    )

    # Scorer look-back windows
    pain_window_days: int = Field(default=7)
    adherence_window_days: int = Field(default=14)
    movement_window_days: int = Field(default=14)
    health_window_days: int = Field(default=7)

    # Alerts
    enable_alerts: bool = Field(default=True)
    alert_on_critical: bool = Field(default=True)
    alert_on_increase: bool = Field(default=True)
    risk_increase_alert_threshold: float = Field(
        default=15.0,
        description="Minimum score increase since the previous assessment that raises an alert",
    )
    alert_cooldown_hours: int = Field(
        default=24,
        description="Window in which an active alert of the same type is not duplicated",
    )

    # Observability
    observability_enabled: bool = Field(default=True)
    observability_log_dir: Path = Field(
        default=Path("./data/logs"),
        description="Directory for JSONL telemetry files",
    )
    observability_log_full_content: bool = Field(
        default=False,
        description="Include raw symptom text in red-flag scan events",
    )

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)
    api_key: str = Field(
        default="",
        description="API key for authenticating requests",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (exposes error details in responses)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    def default_weights(self) -> RiskWeights:
        """Domain weights configured for this deployment."""
        return RiskWeights(
            pain=self.weight_pain,
            adherence=self.weight_adherence,
            psychological=self.weight_psychological,
            movement=self.weight_movement,
            health=self.weight_health,
            progression=self.weight_progression,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
