"""Quality gate evaluation system."""

from eap_gate.quality.models import (
    ExecutionSummary,
    GateContext,
    GateCriteria,
    GateResult,
    GateStatus,
    GateType,
    Issue,
    IssueSeverity,
    PenaltyConfig,
    QualityReport,
    ScoringConfig,
    Thresholds,
)
from eap_gate.quality.validators import QualityGate, StatusTextGate, calculate_score
from eap_gate.quality.external_validation import ExternalValidationGate
from eap_gate.quality.internal_validation import InternalValidationGate
from eap_gate.quality.scoring import ScoringStrategy, WeightedScoringStrategy

__all__ = [
    "ExecutionSummary",
    "GateContext",
    "GateCriteria",
    "GateResult",
    "GateStatus",
    "GateType",
    "Issue",
    "IssueSeverity",
    "PenaltyConfig",
    "QualityReport",
    "ScoringConfig",
    "Thresholds",
    "QualityGate",
    "StatusTextGate",
    "calculate_score",
    "ExternalValidationGate",
    "InternalValidationGate",
    "ScoringStrategy",
    "WeightedScoringStrategy",
    "default_gates",
]


def default_gates() -> list[QualityGate]:
    """The gates evaluated for every EAP: external samples, then internal suites."""
    return [ExternalValidationGate(), InternalValidationGate()]
