"""External sample validation gate."""

import logging

from eap_gate.quality.models import GateCriteria, GateType, Issue, IssueSeverity
from eap_gate.quality.validators import SUCCESS, StatusTextGate, text_contains

logger = logging.getLogger(__name__)


class ExternalValidationGate(StatusTextGate):
    """Evaluate the build of external community samples against the EAP."""

    parameter_prefix = "external"
    total_counter = "external.validation.total.samples"
    passed_counter = "external.validation.successful.samples"
    failed_counter = "external.validation.failed.samples"
    metric_names = ("samplesValidated", "samplesSucceeded", "samplesFailed")

    @property
    def name(self) -> str:
        return "External Validation"

    @property
    def gate_type(self) -> GateType:
        return GateType.EXTERNAL_VALIDATION

    def default_criteria(self) -> GateCriteria:
        return GateCriteria(
            minimum_pass_rate=100.0,
            allowed_critical_issues=0,
            performance_regression_threshold=5.0,
            execution_timeout_minutes=60,
        )

    def analyze_issues(self, build_status: str, status_text: str, build_id: str) -> list[Issue]:
        """Scan the sample build status text for known failure patterns."""
        issues = []
        related = build_id or None

        if text_contains(status_text, "BUILD FAILED") or text_contains(status_text, "compilation"):
            issues.append(
                Issue(
                    severity=IssueSeverity.CRITICAL,
                    description="Build or compilation failure detected in external samples",
                    affected_component="Build System",
                    suggested_action="Check compilation errors and dependencies in affected samples",
                    related_build_id=related,
                    error_detail=status_text or None,
                )
            )

        if text_contains(status_text, "test", "failed"):
            issues.append(
                Issue(
                    severity=IssueSeverity.HIGH,
                    description="Test failures in external samples",
                    affected_component="Tests",
                    suggested_action="Review and fix failing tests",
                    related_build_id=related,
                )
            )

        if build_status == SUCCESS:
            issues.append(
                Issue(
                    severity=IssueSeverity.LOW,
                    description="Minor warnings detected",
                    affected_component="External Samples",
                    suggested_action="Review warnings for potential improvements",
                    related_build_id=related,
                    informational=True,
                )
            )

        if issues and build_status != SUCCESS:
            logger.info(f"{self.name}: detected {len(issues)} issue(s) in status text")

        return issues
