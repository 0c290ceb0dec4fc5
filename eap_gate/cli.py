"""Command line entry point run by the CI quality gate step."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from eap_gate import __version__
from eap_gate.app.config import get_settings
from eap_gate.orchestrator import EvaluationEngine
from eap_gate.quality import default_gates
from eap_gate.reporting import (
    build_chat_payload,
    exit_code_for,
    render_json_report,
    render_service_messages,
    render_text_report,
)

logger = logging.getLogger(__name__)

TEXT_REPORT_NAME = "eap-quality-report.txt"
JSON_REPORT_NAME = "eap-quality-report.json"


def _load_params_file(path: Path) -> dict[str, str]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise click.BadParameter(f"cannot read {path}: {e}", param_hint="--params-file")
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must hold a JSON object", param_hint="--params-file")
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    parsed = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint="--param")
        parsed[key.strip()] = value
    return parsed


@click.group()
@click.version_option(__version__, prog_name="eap-quality-gate")
def cli():
    """EAP quality gate: release verdicts from validation pipeline results."""


@cli.command()
@click.option(
    "--params-file",
    type=click.Path(path_type=Path, dir_okay=False),
    help="JSON object of upstream parameters (e.g. external.status).",
)
@click.option("-p", "--param", "params", multiple=True, help="Upstream parameter as key=value; repeatable.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json", "teamcity"]),
    default="text",
    show_default=True,
    help="Rendering printed to stdout.",
)
@click.option(
    "--report-dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory receiving the text and JSON reports.",
)
@click.option(
    "--notification-file",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Write the chat notification payload to this file.",
)
@click.option("--channel", default=None, help="Chat channel for the notification payload.")
@click.option(
    "--blocked-reason",
    default=None,
    help="Skip evaluation and report BLOCKED with this reason.",
)
def evaluate(
    params_file: Optional[Path],
    params: tuple[str, ...],
    output_format: str,
    report_dir: Optional[Path],
    notification_file: Optional[Path],
    channel: Optional[str],
    blocked_reason: Optional[str],
):
    """Evaluate the quality gates and exit 0 only when the EAP may be released."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    extra = _load_params_file(params_file) if params_file else {}
    extra.update(_parse_pairs(params))
    context = settings.build_context(extra)
    thresholds = context.thresholds
    scoring = context.scoring_config

    logger.info(
        f"Evaluating EAP {context.eap_version}: minimum score={thresholds.minimum_passing_score}, "
        f"critical issues={thresholds.critical_issue_threshold}"
    )

    engine = EvaluationEngine()
    gates = default_gates()
    if blocked_reason:
        report = engine.blocked_report(gates, context, blocked_reason)
    else:
        report = engine.evaluate_all(gates, context)

    if output_format == "json":
        click.echo(render_json_report(report, thresholds))
    elif output_format == "teamcity":
        for line in render_service_messages(report, thresholds):
            click.echo(line)
    else:
        click.echo(render_text_report(report, thresholds, scoring), nl=False)

    if report_dir:
        report_dir.mkdir(parents=True, exist_ok=True)
        (report_dir / TEXT_REPORT_NAME).write_text(
            render_text_report(report, thresholds, scoring), encoding="utf-8"
        )
        (report_dir / JSON_REPORT_NAME).write_text(
            render_json_report(report, thresholds) + "\n", encoding="utf-8"
        )
        logger.info(f"Reports written to {report_dir}")

    if notification_file:
        payload = build_chat_payload(report, channel or settings.notification_channel)
        notification_file.parent.mkdir(parents=True, exist_ok=True)
        notification_file.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.info(f"Notification payload written to {notification_file}")

    sys.exit(exit_code_for(report))


def main():
    cli()


if __name__ == "__main__":
    main()
