"""Evaluation engine running quality gates and assembling the EAP quality report."""

import asyncio
import logging
import time
from typing import Callable, Optional

from eap_gate.orchestrator.recommendations import generate_next_steps, generate_recommendations
from eap_gate.quality.models import (
    ExecutionSummary,
    GateContext,
    GateResult,
    GateStatus,
    GateType,
    Issue,
    IssueSeverity,
    QualityReport,
    Thresholds,
    utcnow,
)
from eap_gate.quality.scoring import ScoringStrategy, WeightedScoringStrategy
from eap_gate.quality.validators import QualityGate

logger = logging.getLogger(__name__)

REPORT_SLOTS = {
    GateType.EXTERNAL_VALIDATION: "External Validation",
    GateType.INTERNAL_VALIDATION: "Internal Validation",
}


class EvaluationEngine:
    """
    Runs quality gates and combines their results into a QualityReport.

    Workflow:
    1. Evaluate every gate; a gate that raises becomes a FAILED result
    2. Combine gate scores with the scoring strategy
    3. Classify the overall status against the thresholds
    4. Attach recommendations, next steps and an execution summary

    The engine holds no per-run state, so one instance can serve concurrent
    callers with distinct contexts.
    """

    def __init__(
        self,
        scoring_strategy: Optional[ScoringStrategy] = None,
        clock: Callable = utcnow,
    ):
        """
        Initialize evaluation engine.

        Args:
            scoring_strategy: Strategy combining gate scores (default: weighted)
            clock: Callable returning the current UTC datetime
        """
        self.scoring_strategy = scoring_strategy or WeightedScoringStrategy()
        self.clock = clock

    def evaluate_single(self, gate: QualityGate, context: GateContext) -> GateResult:
        """
        Evaluate one gate.

        Args:
            gate: Gate to evaluate
            context: Evaluation context

        Returns:
            The gate's result
        """
        return gate.evaluate(context)

    def evaluate_all(self, gates: list[QualityGate], context: GateContext) -> QualityReport:
        """
        Evaluate all gates in declared order and build the report.

        Args:
            gates: Gates to evaluate
            context: Evaluation context shared by all gates

        Returns:
            QualityReport with overall status, score and guidance
        """
        started = time.time()
        results = [self._evaluate_safely(gate, context) for gate in gates]
        return self._build_report(results, context, time.time() - started)

    async def evaluate_all_async(self, gates: list[QualityGate], context: GateContext) -> QualityReport:
        """
        Evaluate all gates concurrently in worker threads.

        Results are joined in declared gate order, so the report matches
        evaluate_all() for the same context.
        """
        started = time.time()
        results = await asyncio.gather(
            *(asyncio.to_thread(self._evaluate_safely, gate, context) for gate in gates)
        )
        return self._build_report(list(results), context, time.time() - started)

    def blocked_report(self, gates: list[QualityGate], context: GateContext, reason: str) -> QualityReport:
        """
        Build a BLOCKED report for a run whose evaluation could not take place.

        Args:
            gates: Gates that would have been evaluated
            context: Evaluation context
            reason: What prevented the evaluation (e.g. an upstream job failed to start)

        Returns:
            QualityReport with BLOCKED status and score 0
        """
        logger.warning(f"Quality gate evaluation blocked: {reason}")
        results = [
            GateResult(
                gate_name=gate.name,
                gate_type=gate.gate_type,
                status=GateStatus.BLOCKED,
                score=0,
                critical_issues=[
                    Issue(
                        severity=IssueSeverity.CRITICAL,
                        description=f"Quality gate blocked: {reason}",
                        affected_component=gate.name,
                        suggested_action="Resolve the blocking condition and retry",
                    )
                ],
                timestamp=self.clock(),
                eap_version=context.eap_version,
            )
            for gate in gates
        ]
        return self._assemble(results, context, GateStatus.BLOCKED, 0, 0.0)

    def _evaluate_safely(self, gate: QualityGate, context: GateContext) -> GateResult:
        try:
            logger.info(f"Running quality gate: {gate.name}")
            result = self.evaluate_single(gate, context)
            if not isinstance(result, GateResult):
                raise TypeError(
                    f"evaluate() returned {type(result).__name__} instead of GateResult"
                )

            if result.status == GateStatus.PASSED:
                logger.info(f"Quality gate '{result.gate_name}' passed with score {result.score}")
            else:
                logger.warning(
                    f"Quality gate '{result.gate_name}' {result.status.value.lower()} with score "
                    f"{result.score} and {len(result.critical_issues)} critical issues"
                )
            return result
        except Exception as e:
            logger.error(f"Quality gate '{self._gate_name(gate)}' raised exception: {e}")
            return self._failed_result(gate, e, context)

    @staticmethod
    def _gate_name(gate: QualityGate) -> str:
        try:
            name = gate.name
        except Exception:
            return type(gate).__name__
        return name if isinstance(name, str) and name else type(gate).__name__

    @staticmethod
    def _gate_type(gate: QualityGate) -> GateType:
        try:
            gate_type = gate.gate_type
        except Exception:
            return GateType.CUSTOM
        return gate_type if isinstance(gate_type, GateType) else GateType.CUSTOM

    def _failed_result(self, gate: QualityGate, error: Exception, context: GateContext) -> GateResult:
        name = self._gate_name(gate)
        gate_type = self._gate_type(gate)
        return GateResult(
            gate_name=name,
            gate_type=gate_type,
            status=GateStatus.FAILED,
            score=0,
            critical_issues=[
                Issue(
                    severity=IssueSeverity.CRITICAL,
                    description=f"Quality gate execution failed: {error}",
                    affected_component=name,
                    suggested_action="Check quality gate configuration and dependencies",
                    error_detail=type(error).__name__,
                )
            ],
            execution_time=0.0,
            timestamp=self.clock(),
            eap_version=context.eap_version,
        )

    def _build_report(self, results: list[GateResult], context: GateContext, elapsed: float) -> QualityReport:
        overall_score = self.scoring_strategy.calculate_overall_score(results, context.scoring_config)
        overall_status = self.determine_overall_status(results, overall_score, context.thresholds)
        logger.info(f"Overall status {overall_status.value} with score {overall_score}")
        return self._assemble(results, context, overall_status, overall_score, elapsed)

    @staticmethod
    def determine_overall_status(
        results: list[GateResult],
        overall_score: int,
        thresholds: Thresholds,
    ) -> GateStatus:
        """
        Classify the run.

        Critical-issue count and score are checked first and fail the run even
        when every gate passed on its own.
        """
        total_critical = sum(len(r.critical_issues) for r in results)
        if total_critical > thresholds.critical_issue_threshold:
            return GateStatus.FAILED

        if overall_score < thresholds.minimum_passing_score:
            return GateStatus.FAILED

        if results and all(r.status == GateStatus.PASSED for r in results):
            return GateStatus.PASSED
        return GateStatus.FAILED

    def _assemble(
        self,
        results: list[GateResult],
        context: GateContext,
        overall_status: GateStatus,
        overall_score: int,
        elapsed: float,
    ) -> QualityReport:
        return QualityReport(
            version=context.eap_version,
            overall_status=overall_status,
            overall_score=overall_score,
            external_validation=self._slot(results, GateType.EXTERNAL_VALIDATION, context),
            internal_validation=self._slot(results, GateType.INTERNAL_VALIDATION, context),
            recommendations=generate_recommendations(overall_status, results),
            next_steps=generate_next_steps(overall_status, results),
            execution_summary=self._execution_summary(results, elapsed),
            generated_at=self.clock(),
            results=results,
        )

    def _slot(self, results: list[GateResult], gate_type: GateType, context: GateContext) -> GateResult:
        """First result of the given type, or a SKIPPED placeholder."""
        for result in results:
            if result.gate_type == gate_type:
                return result

        name = REPORT_SLOTS[gate_type]
        return GateResult(
            gate_name=name,
            gate_type=gate_type,
            status=GateStatus.SKIPPED,
            score=0,
            warnings=[
                Issue(
                    severity=IssueSeverity.LOW,
                    description="Quality gate was not executed",
                    affected_component=name,
                    suggested_action="Verify quality gate configuration",
                )
            ],
            timestamp=self.clock(),
            eap_version=context.eap_version,
        )

    @staticmethod
    def _execution_summary(results: list[GateResult], elapsed: float) -> ExecutionSummary:
        tests = sum(int(r.additional_metrics.get("testsExecuted", 0)) for r in results)
        samples = sum(int(r.additional_metrics.get("samplesValidated", 0)) for r in results)
        passed = sum(1 for r in results if r.status == GateStatus.PASSED)
        success_rate = passed / len(results) * 100.0 if results else 0.0

        return ExecutionSummary(
            total_execution_time=elapsed,
            samples_validated=samples,
            tests_executed=tests,
            success_rate=success_rate,
        )
