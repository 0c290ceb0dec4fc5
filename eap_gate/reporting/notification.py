"""Chat notification payload for a quality report."""

from typing import Any

from eap_gate.quality.models import GateStatus, QualityReport

DEFAULT_CHANNEL = "#ktor-projects-on-eap"

STATUS_COLORS = {
    GateStatus.PASSED: "good",
    GateStatus.FAILED: "danger",
    GateStatus.BLOCKED: "warning",
}

STATUS_ICONS = {
    GateStatus.PASSED: "✅",
    GateStatus.FAILED: "❌",
    GateStatus.BLOCKED: "⚠️",
}


def build_chat_payload(report: QualityReport, channel: str = DEFAULT_CHANNEL) -> dict[str, Any]:
    """
    Build a chat webhook payload summarizing the report.

    Args:
        report: Evaluated quality report
        channel: Target chat channel

    Returns:
        Payload dict with text and one attachment
    """
    status = report.overall_status
    icon = STATUS_ICONS.get(status, "ℹ️")
    verdict = "ready for release" if report.ready_for_release else "not ready for release"
    external = report.external_validation
    internal = report.internal_validation

    fields = [
        {"title": "Overall Score", "value": f"{report.overall_score}/100", "short": True},
        {"title": "Critical Issues", "value": str(report.total_critical_issues), "short": True},
        {
            "title": external.gate_name,
            "value": f"{external.status.value} ({external.score}/100)",
            "short": True,
        },
        {
            "title": internal.gate_name,
            "value": f"{internal.status.value} ({internal.score}/100)",
            "short": True,
        },
    ]
    if report.recommendations:
        fields.append({
            "title": "Recommendations",
            "value": "\n".join(f"• {item}" for item in report.recommendations),
            "short": False,
        })
    if report.next_steps:
        fields.append({
            "title": "Next Steps",
            "value": "\n".join(f"• {item}" for item in report.next_steps),
            "short": False,
        })

    return {
        "channel": channel,
        "text": f"{icon} EAP {report.version} quality gate {status.value}: {verdict}",
        "attachments": [
            {
                "color": STATUS_COLORS.get(status, "#cccccc"),
                "fields": fields,
                "ts": int(report.generated_at.timestamp()),
            }
        ],
    }
