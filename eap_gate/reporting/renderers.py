"""Text, JSON and TeamCity renderings of a quality report."""

import json
from typing import Any, Optional

from eap_gate.orchestrator.recommendations import failure_reasons
from eap_gate.quality.models import (
    GateResult,
    GateStatus,
    GateType,
    Issue,
    QualityReport,
    ScoringConfig,
    Thresholds,
)


def exit_code_for(report: QualityReport) -> int:
    """Process exit code: 0 when PASSED, 2 when BLOCKED, 1 otherwise."""
    if report.overall_status == GateStatus.PASSED:
        return 0
    if report.overall_status == GateStatus.BLOCKED:
        return 2
    return 1


def _issue_dict(issue: Issue) -> dict[str, Any]:
    data = {
        "severity": issue.severity.value,
        "description": issue.description,
        "affectedComponent": issue.affected_component,
        "suggestedAction": issue.suggested_action,
    }
    if issue.related_build_id:
        data["relatedBuildId"] = issue.related_build_id
    if issue.error_detail:
        data["errorDetail"] = issue.error_detail
    return data


def _gate_dict(result: GateResult) -> dict[str, Any]:
    return {
        "name": result.gate_name,
        "status": result.status.value,
        "score": result.score,
        "buildId": result.build_id,
        "criticalIssues": [_issue_dict(i) for i in result.critical_issues],
        "warnings": [_issue_dict(i) for i in result.warnings],
        "metrics": dict(result.additional_metrics),
    }


def build_json_report(report: QualityReport, thresholds: Optional[Thresholds] = None) -> dict[str, Any]:
    """
    Build the JSON report document consumed by downstream CI steps.

    Args:
        report: Evaluated quality report
        thresholds: Thresholds used for the evaluation (for failure reasons)

    Returns:
        JSON-serializable dict
    """
    thresholds = thresholds or Thresholds()
    summary = report.execution_summary
    return {
        "eapVersion": report.version,
        "timestamp": report.generated_at.isoformat(),
        "overallStatus": report.overall_status.value,
        "overallScore": report.overall_score,
        "totalCriticalIssues": report.total_critical_issues,
        "qualityGates": {
            "external": _gate_dict(report.external_validation),
            "internal": _gate_dict(report.internal_validation),
        },
        "recommendations": list(report.recommendations),
        "nextSteps": list(report.next_steps),
        "failureReasons": failure_reasons(report, thresholds),
        "executionSummary": {
            "totalExecutionTime": round(summary.total_execution_time, 3),
            "samplesValidated": summary.samples_validated,
            "testsExecuted": summary.tests_executed,
            "successRate": round(summary.success_rate, 2),
        },
        "readyForRelease": report.ready_for_release,
    }


def render_json_report(report: QualityReport, thresholds: Optional[Thresholds] = None) -> str:
    return json.dumps(build_json_report(report, thresholds), indent=2)


def _gate_block(title: str, result: GateResult) -> list[str]:
    lines = [f"{title}: {result.status.value} ({result.score}/100)"]
    if result.build_id:
        lines.append(f"  - Build: {result.build_id}")
    for key, value in result.additional_metrics.items():
        lines.append(f"  - {key}: {value:g}")
    lines.append(f"  - Critical Issues: {len(result.critical_issues)}")
    for issue in result.critical_issues:
        lines.append(f"    * {issue.description} in {issue.affected_component}")
    lines.append(f"  - Warnings: {len(result.warnings)}")
    for issue in result.warnings:
        lines.append(f"    * [{issue.severity.value}] {issue.description} in {issue.affected_component}")
    return lines


def render_text_report(
    report: QualityReport,
    thresholds: Optional[Thresholds] = None,
    scoring_config: Optional[ScoringConfig] = None,
) -> str:
    """Render the plain-text report."""
    thresholds = thresholds or Thresholds()
    scoring_config = scoring_config or ScoringConfig()
    title = f"EAP Quality Gate Report - {report.version}"
    weights = scoring_config.weights

    lines = [
        title,
        "=" * len(title),
        f"Generated: {report.generated_at.isoformat()}",
        "",
        "Overall Assessment:",
        f"- Status: {report.overall_status.value}",
        f"- Score: {report.overall_score}/100 (weighted)",
        f"- Critical Issues: {report.total_critical_issues}",
        f"- Ready for Release: {'YES' if report.ready_for_release else 'NO'}",
        "",
    ]
    lines += _gate_block("External Validation", report.external_validation)
    lines += [""]
    lines += _gate_block("Internal Validation", report.internal_validation)

    for result in report.results:
        if result.gate_type == GateType.CUSTOM:
            lines += [""]
            lines += _gate_block(result.gate_name, result)

    lines += [
        "",
        "Evaluation:",
        (
            f"- Scoring Strategy: Weighted (External "
            f"{weights.get(GateType.EXTERNAL_VALIDATION, 0)}%, Internal "
            f"{weights.get(GateType.INTERNAL_VALIDATION, 0)}%)"
        ),
        f"- Minimum Score Threshold: {thresholds.minimum_passing_score}",
        f"- Critical Issues Threshold: {thresholds.critical_issue_threshold}",
        f"- Gate Success Rate: {report.execution_summary.success_rate:.1f}%",
        "",
        "Recommendations:",
    ]
    lines += [f"- {item}" for item in report.recommendations]
    lines += ["", "Next Steps:"]
    lines += [f"- {item}" for item in report.next_steps]

    reasons = failure_reasons(report, thresholds)
    if reasons:
        lines += ["", "Failure Reasons:"]
        lines += [f"- {reason}" for reason in reasons]

    return "\n".join(lines) + "\n"


def escape_service_value(value: str) -> str:
    """Escape a value for a TeamCity service message."""
    replacements = (
        ("|", "||"),
        ("'", "|'"),
        ("\n", "|n"),
        ("\r", "|r"),
        ("[", "|["),
        ("]", "|]"),
    )
    for old, new in replacements:
        value = value.replace(old, new)
    return value


def render_service_messages(report: QualityReport, thresholds: Optional[Thresholds] = None) -> list[str]:
    """TeamCity setParameter service messages publishing the verdict."""
    thresholds = thresholds or Thresholds()
    parameters = [
        ("quality.gate.overall.status", report.overall_status.value),
        ("quality.gate.overall.score", str(report.overall_score)),
        ("quality.gate.total.critical", str(report.total_critical_issues)),
        ("quality.gate.recommendations", "; ".join(report.recommendations)),
        ("quality.gate.next.steps", "; ".join(report.next_steps)),
        ("quality.gate.failure.reasons", "; ".join(failure_reasons(report, thresholds))),
        ("external.gate.status", report.external_validation.status.value),
        ("external.gate.score", str(report.external_validation.score)),
        ("internal.gate.status", report.internal_validation.status.value),
        ("internal.gate.score", str(report.internal_validation.score)),
    ]
    return [
        f"##teamcity[setParameter name='{name}' value='{escape_service_value(value)}']"
        for name, value in parameters
    ]
