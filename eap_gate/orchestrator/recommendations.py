"""Recommendation and next-step generation from an overall status."""

from eap_gate.quality.models import GateResult, GateStatus, QualityReport, Thresholds


def generate_recommendations(overall_status: GateStatus, results: list[GateResult]) -> list[str]:
    """Recommendations for the given overall status."""
    if overall_status == GateStatus.PASSED:
        return [
            "EAP version is ready for release",
            "Prepare release notes and documentation",
        ]

    if overall_status == GateStatus.FAILED:
        recommendations = ["Address critical issues before release"]
        for result in results:
            if result.status == GateStatus.FAILED and result.critical_issues:
                recommendations.append(f"Fix critical issues in {result.gate_name}")
        recommendations.append("Re-run validation after fixes")
        return recommendations

    if overall_status == GateStatus.BLOCKED:
        return ["Resolve blocking issues preventing quality gate execution"]

    return ["Review quality gate status and take appropriate action"]


def generate_next_steps(overall_status: GateStatus, results: list[GateResult]) -> list[str]:
    """Next steps for the given overall status."""
    if overall_status == GateStatus.PASSED:
        return [
            "Notify community about EAP availability",
            "Update documentation with new features",
            "Monitor community feedback",
        ]

    if overall_status == GateStatus.FAILED:
        next_steps = [
            "Analyze failure reasons",
            "Create fix plan for identified issues",
            "Execute fixes and re-run validation",
        ]
        critical_count = sum(len(r.critical_issues) for r in results)
        if critical_count:
            next_steps.append(f"Prioritize critical issues: {critical_count} found")
        return next_steps

    if overall_status == GateStatus.BLOCKED:
        return [
            "Investigate blocking conditions",
            "Resolve infrastructure or configuration issues",
            "Retry quality gate execution",
        ]

    return [
        "Review quality gate execution logs",
        "Determine appropriate course of action",
    ]


def failure_reasons(report: QualityReport, thresholds: Thresholds) -> list[str]:
    """
    Explain why a report did not pass.

    Args:
        report: Evaluated quality report
        thresholds: Thresholds the report was evaluated against

    Returns:
        Human-readable reasons; empty for a passed report
    """
    if report.overall_status == GateStatus.PASSED:
        return []

    results = report.results or [report.external_validation, report.internal_validation]
    reasons = [
        f"{r.gate_name} {r.status.value.lower()}"
        for r in results
        if r.status != GateStatus.PASSED
    ]

    total_critical = report.total_critical_issues
    if total_critical > thresholds.critical_issue_threshold:
        reasons.append(
            f"Too many critical issues ({total_critical} > {thresholds.critical_issue_threshold})"
        )
    if report.overall_score < thresholds.minimum_passing_score:
        reasons.append(
            f"Score too low ({report.overall_score} < {thresholds.minimum_passing_score})"
        )
    return reasons
