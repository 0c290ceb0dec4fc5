"""Internal regression suite validation gate."""

from eap_gate.quality.models import GateCriteria, GateType, Issue, IssueSeverity
from eap_gate.quality.validators import SUCCESS, StatusTextGate, text_contains


class InternalValidationGate(StatusTextGate):
    """Evaluate the internal test suites run against the EAP."""

    parameter_prefix = "internal"
    total_counter = "internal.validation.total.tests"
    passed_counter = "internal.validation.passed.tests"
    failed_counter = "internal.validation.failed.tests"
    metric_names = ("testsExecuted", "testsPassed", "testsFailed")

    @property
    def name(self) -> str:
        return "Internal Validation"

    @property
    def gate_type(self) -> GateType:
        return GateType.INTERNAL_VALIDATION

    def default_criteria(self) -> GateCriteria:
        return GateCriteria(
            minimum_pass_rate=100.0,
            allowed_critical_issues=0,
            performance_regression_threshold=5.0,
            execution_timeout_minutes=45,
        )

    def analyze_issues(self, build_status: str, status_text: str, build_id: str) -> list[Issue]:
        """Scan the internal suite status text for known failure patterns."""
        issues = []
        related = build_id or None

        if text_contains(status_text, "BUILD FAILED") or text_contains(status_text, "compilation"):
            issues.append(
                Issue(
                    severity=IssueSeverity.CRITICAL,
                    description="Build or compilation failure in internal test suites",
                    affected_component="Build System",
                    suggested_action="Fix compilation errors before re-running the suites",
                    related_build_id=related,
                    error_detail=status_text or None,
                )
            )

        if text_contains(status_text, "OutOfMemory"):
            issues.append(
                Issue(
                    severity=IssueSeverity.HIGH,
                    description="Memory issues detected in internal tests",
                    affected_component="Runtime",
                    suggested_action="Increase memory allocation or optimize memory usage",
                    related_build_id=related,
                )
            )

        if text_contains(status_text, "test", "failed"):
            issues.append(
                Issue(
                    severity=IssueSeverity.HIGH,
                    description="Test failures in internal test suites",
                    affected_component="Tests",
                    suggested_action="Review internal test suite and fix failures",
                    related_build_id=related,
                )
            )

        if text_contains(status_text, "timeout"):
            issues.append(
                Issue(
                    severity=IssueSeverity.MEDIUM,
                    description="Timeout issues in internal tests",
                    affected_component="Test Execution",
                    suggested_action="Optimize test performance or increase timeout",
                    related_build_id=related,
                )
            )

        if build_status == SUCCESS:
            issues.append(
                Issue(
                    severity=IssueSeverity.LOW,
                    description="Performance warnings detected",
                    affected_component="Internal Tests",
                    suggested_action="Monitor performance metrics",
                    related_build_id=related,
                    informational=True,
                )
            )
            issues.append(
                Issue(
                    severity=IssueSeverity.LOW,
                    description="Minor test warnings",
                    affected_component="Test Suite",
                    suggested_action="Review test warnings for improvements",
                    related_build_id=related,
                    informational=True,
                )
            )

        return issues
