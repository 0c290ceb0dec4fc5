"""Domain models for EAP quality gate evaluation."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def clamp_score(value: float) -> int:
    """Clamp a score into the 0-100 range."""
    return int(max(0, min(100, value)))


class GateStatus(str, Enum):
    """Quality gate status."""
    PENDING = "PENDING"
    EVALUATING = "EVALUATING"
    PASSED = "PASSED"
    FAILED = "FAILED"
    BLOCKED = "BLOCKED"
    SKIPPED = "SKIPPED"


class GateType(str, Enum):
    """Validation domain a gate belongs to."""
    EXTERNAL_VALIDATION = "EXTERNAL_VALIDATION"
    INTERNAL_VALIDATION = "INTERNAL_VALIDATION"
    CUSTOM = "CUSTOM"


class IssueSeverity(str, Enum):
    """Issue severity, CRITICAL being the worst."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    IssueSeverity.CRITICAL: 4,
    IssueSeverity.HIGH: 3,
    IssueSeverity.MEDIUM: 2,
    IssueSeverity.LOW: 1,
}


class GateCriteria(BaseModel):
    """Policy a single gate is evaluated against."""
    model_config = ConfigDict(frozen=True)

    minimum_pass_rate: float = 100.0
    allowed_critical_issues: int = 0
    performance_regression_threshold: float = 5.0
    execution_timeout_minutes: int = 60


class Issue(BaseModel):
    """Problem detected while evaluating a gate."""
    model_config = ConfigDict(frozen=True)

    severity: IssueSeverity
    description: str
    affected_component: str
    suggested_action: str
    related_build_id: Optional[str] = None
    error_detail: Optional[str] = None
    # Observations emitted for a clean build; charged one warning penalty per gate
    informational: bool = False

    @property
    def is_critical(self) -> bool:
        return self.severity == IssueSeverity.CRITICAL


class GateResult(BaseModel):
    """Outcome of evaluating one quality gate."""
    model_config = ConfigDict(frozen=True)

    gate_name: str
    gate_type: GateType = GateType.CUSTOM
    status: GateStatus
    score: int = 0
    critical_issues: list[Issue] = []
    warnings: list[Issue] = []
    execution_time: float = 0.0  # seconds
    timestamp: datetime = Field(default_factory=utcnow)
    eap_version: str = "unknown"
    build_id: Optional[str] = None
    additional_metrics: dict[str, float] = {}

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        return clamp_score(float(value))

    @model_validator(mode="after")
    def _check_issue_partition(self):
        if any(not issue.is_critical for issue in self.critical_issues):
            raise ValueError("critical_issues may only hold CRITICAL issues")
        if any(issue.is_critical for issue in self.warnings):
            raise ValueError("warnings may not hold CRITICAL issues")
        return self

    @property
    def issues(self) -> list[Issue]:
        return [*self.critical_issues, *self.warnings]


class PenaltyConfig(BaseModel):
    """Score deductions applied by gates."""
    model_config = ConfigDict(frozen=True)

    failure_penalty: int = 50
    critical_issue_penalty: int = 20
    warning_penalty: int = 5


def _default_weights() -> dict[GateType, int]:
    return {
        GateType.EXTERNAL_VALIDATION: 50,
        GateType.INTERNAL_VALIDATION: 50,
    }


class ScoringConfig(BaseModel):
    """Scoring configuration shared by gates and the scoring strategy."""
    model_config = ConfigDict(frozen=True)

    base_score: int = 100
    weights: dict[GateType, int] = Field(default_factory=_default_weights)
    penalties: PenaltyConfig = PenaltyConfig()


class Thresholds(BaseModel):
    """Release thresholds checked against the overall result."""
    model_config = ConfigDict(frozen=True)

    minimum_passing_score: int = 80
    critical_issue_threshold: int = 0
    warning_issue_threshold: int = 5
    performance_regression_threshold: float = 10.0
    execution_timeout_minutes: int = 60
    success_rate_threshold: float = 95.0


class GateContext(BaseModel):
    """Input for one evaluation run. Read-only to gates."""
    model_config = ConfigDict(frozen=True)

    eap_version: str = "unknown"
    trigger_build: str = "unknown"
    branch: str = "main"
    environment: str = "production"
    thresholds: Thresholds = Thresholds()
    scoring_config: ScoringConfig = ScoringConfig()
    additional_parameters: dict[str, str] = {}

    def parameter(self, key: str, default: str = "") -> str:
        """
        Look up a raw upstream signal.

        Args:
            key: Parameter name (e.g. "external.status")
            default: Value returned when the key is absent or None

        Returns:
            The parameter value as a string
        """
        value = self.additional_parameters.get(key)
        if value is None:
            return default
        return str(value)


class ExecutionSummary(BaseModel):
    """Aggregated figures for a whole run."""
    model_config = ConfigDict(frozen=True)

    total_execution_time: float = 0.0  # seconds
    samples_validated: int = 0
    tests_executed: int = 0
    success_rate: float = 0.0


class QualityReport(BaseModel):
    """Final artifact of an evaluation run."""
    model_config = ConfigDict(frozen=True)

    version: str
    overall_status: GateStatus
    overall_score: int
    external_validation: GateResult
    internal_validation: GateResult
    recommendations: list[str] = []
    next_steps: list[str] = []
    execution_summary: ExecutionSummary = ExecutionSummary()
    generated_at: datetime = Field(default_factory=utcnow)
    results: list[GateResult] = []

    @field_validator("overall_score", mode="before")
    @classmethod
    def _clamp_overall_score(cls, value):
        return clamp_score(float(value))

    @property
    def total_critical_issues(self) -> int:
        results = self.results or [self.external_validation, self.internal_validation]
        return sum(len(r.critical_issues) for r in results)

    @property
    def ready_for_release(self) -> bool:
        return self.overall_status == GateStatus.PASSED
