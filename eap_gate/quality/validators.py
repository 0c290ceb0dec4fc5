"""Base quality gate and the scoring helper shared by gate implementations."""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from eap_gate.quality.models import (
    GateContext,
    GateCriteria,
    GateResult,
    GateStatus,
    GateType,
    Issue,
    IssueSeverity,
    ScoringConfig,
    clamp_score,
    utcnow,
)

logger = logging.getLogger(__name__)

SUCCESS = "SUCCESS"
UNKNOWN = "UNKNOWN"


def calculate_score(build_status: str, issues: list[Issue], config: ScoringConfig) -> int:
    """
    Calculate a gate score from its build status and detected issues.

    Informational observations share a single warning penalty; every other
    non-critical issue is charged one warning penalty.

    Args:
        build_status: Upstream build status ("SUCCESS" or anything else)
        issues: Issues detected by the gate
        config: Scoring configuration with base score and penalties

    Returns:
        Score clamped to 0-100
    """
    penalties = config.penalties
    score = config.base_score

    if build_status != SUCCESS:
        score -= penalties.failure_penalty

    critical = sum(1 for issue in issues if issue.is_critical)
    warnings = sum(1 for issue in issues if not issue.is_critical and not issue.informational)
    if any(issue.informational and not issue.is_critical for issue in issues):
        warnings += 1

    score -= critical * penalties.critical_issue_penalty
    score -= warnings * penalties.warning_penalty

    return clamp_score(score)


def text_contains(text: str, *needles: str) -> bool:
    """
    Check that every needle occurs in text.

    Matching ignores case but anchors each needle at a word start, so "test"
    matches "Tests failed" but not "latest" or "jvmTest".
    """
    return all(
        re.search(rf"\b{re.escape(needle)}", text, re.IGNORECASE)
        for needle in needles
    )


def parse_counter(raw: str) -> Optional[int]:
    """Parse a non-negative integer counter, None if garbled."""
    try:
        value = int(float(raw.strip()))
    except (AttributeError, ValueError, OverflowError):
        return None
    return value if value >= 0 else None


class QualityGate(ABC):
    """Base class for quality gates."""

    def __init__(
        self,
        criteria: Optional[GateCriteria] = None,
        clock: Callable = utcnow,
    ):
        """
        Initialize gate.

        Args:
            criteria: Gate policy (defaults to the gate's own criteria)
            clock: Callable returning the current UTC datetime
        """
        self.criteria = criteria or self.default_criteria()
        self.clock = clock

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this quality gate."""
        pass

    @property
    @abstractmethod
    def gate_type(self) -> GateType:
        """Validation domain of this gate."""
        pass

    def default_criteria(self) -> GateCriteria:
        """Criteria used when none are passed in."""
        return GateCriteria()

    @abstractmethod
    def evaluate(self, context: GateContext) -> GateResult:
        """
        Evaluate the gate.

        Must not raise for missing or garbled parameters.

        Returns:
            GateResult with status, score and issues
        """
        pass

    def build_result(
        self,
        context: GateContext,
        status: GateStatus,
        score: int,
        issues: list[Issue],
        started: float,
        build_id: Optional[str] = None,
        metrics: Optional[dict[str, float]] = None,
    ) -> GateResult:
        """Split issues by severity and assemble the gate's result."""
        return GateResult(
            gate_name=self.name,
            gate_type=self.gate_type,
            status=status,
            score=score,
            critical_issues=[i for i in issues if i.severity == IssueSeverity.CRITICAL],
            warnings=[i for i in issues if i.severity != IssueSeverity.CRITICAL],
            execution_time=time.time() - started,
            timestamp=self.clock(),
            eap_version=context.eap_version,
            build_id=build_id or None,
            additional_metrics=metrics or {},
        )


class StatusTextGate(QualityGate):
    """
    Gate driven by an upstream build status and its free-text status line.

    Subclasses name the parameter prefix (e.g. "external") and implement
    analyze_issues(); status, score and pass-rate handling are shared.
    """

    parameter_prefix: str = ""
    total_counter: str = ""
    passed_counter: str = ""
    failed_counter: str = ""
    metric_names: tuple[str, str, str] = ("", "", "")

    @abstractmethod
    def analyze_issues(self, build_status: str, status_text: str, build_id: str) -> list[Issue]:
        """Detect issues from the status and status text."""
        pass

    def evaluate(self, context: GateContext) -> GateResult:
        """Evaluate the gate from the context's upstream signals."""
        started = time.time()
        prefix = self.parameter_prefix
        build_id = context.parameter(f"{prefix}.build.id")
        build_status = context.parameter(f"{prefix}.status", UNKNOWN).strip() or UNKNOWN
        status_text = context.parameter(f"{prefix}.status.text")

        logger.debug(f"{self.name}: status={build_status}, build={build_id or '-'}")

        issues = self.analyze_issues(build_status, status_text, build_id)
        metrics = self.collect_metrics(context)

        # A low pass rate is reported and penalized but does not fail the gate
        pass_rate = metrics.get("passRate")
        if pass_rate is not None and pass_rate < self.criteria.minimum_pass_rate:
            issues.append(
                Issue(
                    severity=IssueSeverity.HIGH,
                    description=(
                        f"Pass rate {pass_rate:.1f}% is below the required "
                        f"{self.criteria.minimum_pass_rate:.1f}%"
                    ),
                    affected_component=self.name,
                    suggested_action="Fix failing items until the pass rate meets the gate criteria",
                    related_build_id=build_id or None,
                )
            )

        status = self.determine_status(build_status, issues)
        score = calculate_score(build_status, issues, context.scoring_config)

        return self.build_result(
            context, status, score, issues, started, build_id=build_id, metrics=metrics
        )

    def determine_status(self, build_status: str, issues: list[Issue]) -> GateStatus:
        """
        FAILED on a non-successful build or on too many CRITICAL issues.

        "Too many" means more than criteria.allowed_critical_issues. With the
        shipped criteria (0 allowed) any CRITICAL issue fails the gate; a gate
        configured with a higher allowance tolerates that many.
        """
        critical = sum(1 for issue in issues if issue.is_critical)
        if build_status != SUCCESS:
            return GateStatus.FAILED
        if critical > self.criteria.allowed_critical_issues:
            return GateStatus.FAILED
        return GateStatus.PASSED

    def collect_metrics(self, context: GateContext) -> dict[str, float]:
        """Read optional numeric counters; garbled values are skipped."""
        total_name, passed_name, failed_name = self.metric_names
        metrics: dict[str, float] = {}

        total = parse_counter(context.parameter(self.total_counter))
        passed = parse_counter(context.parameter(self.passed_counter))
        failed = parse_counter(context.parameter(self.failed_counter))

        if total is not None:
            metrics[total_name] = total
        if passed is not None:
            metrics[passed_name] = passed
        if failed is not None:
            metrics[failed_name] = failed

        if total:
            if passed is None and failed is not None:
                passed = max(0, total - failed)
            if passed is not None:
                metrics["passRate"] = round(min(passed, total) / total * 100.0, 2)

        return metrics
