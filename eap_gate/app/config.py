"""Application configuration."""

from typing import Optional

from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eap_gate.quality.models import (
    GateContext,
    GateType,
    PenaltyConfig,
    ScoringConfig,
    Thresholds,
)
from eap_gate.reporting.notification import DEFAULT_CHANNEL

_NUMERIC_FIELDS = (
    "min_score",
    "max_critical",
    "base_score",
    "external_weight",
    "internal_weight",
    "failure_penalty",
    "critical_issue_penalty",
    "warning_penalty",
    "warning_threshold",
    "success_rate_threshold",
    "performance_regression_threshold",
    "execution_timeout_minutes",
)


class Settings(BaseSettings):
    """Quality gate settings read from the environment."""

    # Thresholds
    min_score: int = 80
    max_critical: int = 0
    warning_threshold: int = 5
    success_rate_threshold: float = 95.0
    performance_regression_threshold: float = 10.0
    execution_timeout_minutes: int = 60

    # Scoring
    base_score: int = 100
    external_weight: int = 60
    internal_weight: int = 40
    failure_penalty: int = 50
    critical_issue_penalty: int = 20
    warning_penalty: int = 5

    # Run identity
    eap_version: str = Field(
        default="unknown",
        validation_alias=AliasChoices("EAP_VERSION", "KTOR_VERSION"),
    )
    trigger_build: str = Field(
        default="unknown",
        validation_alias=AliasChoices("TRIGGER_BUILD", "TEAMCITY_BUILD_ID"),
    )
    branch: str = Field(
        default="main",
        validation_alias=AliasChoices("BRANCH", "TEAMCITY_BUILD_BRANCH"),
    )
    environment: str = "production"

    # Upstream signals
    external_status: str = "UNKNOWN"
    external_status_text: str = ""
    external_build_id: str = ""
    internal_status: str = "UNKNOWN"
    internal_status_text: str = ""
    internal_build_id: str = ""

    # Notifications
    notification_channel: str = DEFAULT_CHANNEL

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _default_on_garbage(cls, value, info: ValidationInfo):
        """Unparseable or empty numbers fall back to the field default."""
        default = cls.model_fields[info.field_name].default
        if value is None:
            return default
        if isinstance(value, (int, float)):
            return value
        text = str(value).strip()
        try:
            number = float(text)
        except ValueError:
            return default
        if isinstance(default, int):
            return int(number) if number.is_integer() else default
        return number

    def thresholds(self) -> Thresholds:
        return Thresholds(
            minimum_passing_score=self.min_score,
            critical_issue_threshold=self.max_critical,
            warning_issue_threshold=self.warning_threshold,
            performance_regression_threshold=self.performance_regression_threshold,
            execution_timeout_minutes=self.execution_timeout_minutes,
            success_rate_threshold=self.success_rate_threshold,
        )

    def scoring_config(self) -> ScoringConfig:
        return ScoringConfig(
            base_score=self.base_score,
            weights={
                GateType.EXTERNAL_VALIDATION: self.external_weight,
                GateType.INTERNAL_VALIDATION: self.internal_weight,
            },
            penalties=PenaltyConfig(
                failure_penalty=self.failure_penalty,
                critical_issue_penalty=self.critical_issue_penalty,
                warning_penalty=self.warning_penalty,
            ),
        )

    def upstream_parameters(self) -> dict[str, str]:
        """Upstream signals from the environment, keyed as the gates expect them."""
        return {
            "external.build.id": self.external_build_id,
            "external.status": self.external_status,
            "external.status.text": self.external_status_text,
            "internal.build.id": self.internal_build_id,
            "internal.status": self.internal_status,
            "internal.status.text": self.internal_status_text,
        }

    def build_context(self, extra_parameters: Optional[dict[str, str]] = None) -> GateContext:
        """
        Build the evaluation context.

        Args:
            extra_parameters: Parameters overriding the environment signals

        Returns:
            GateContext for one evaluation run
        """
        parameters = self.upstream_parameters()
        parameters.update(extra_parameters or {})
        return GateContext(
            eap_version=self.eap_version,
            trigger_build=self.trigger_build,
            branch=self.branch,
            environment=self.environment,
            thresholds=self.thresholds(),
            scoring_config=self.scoring_config(),
            additional_parameters=parameters,
        )


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
