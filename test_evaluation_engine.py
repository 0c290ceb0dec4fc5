"""Tests for the evaluation engine and end-to-end release verdicts."""

import asyncio
from datetime import datetime, timezone

from eap_gate.orchestrator import EvaluationEngine, failure_reasons
from eap_gate.orchestrator.recommendations import generate_next_steps, generate_recommendations
from eap_gate.quality import (
    ExternalValidationGate,
    GateContext,
    GateResult,
    GateStatus,
    GateType,
    InternalValidationGate,
    IssueSeverity,
    QualityGate,
    ScoringConfig,
    Thresholds,
    default_gates,
)

FROZEN = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def frozen_gates() -> list[QualityGate]:
    return [ExternalValidationGate(clock=lambda: FROZEN), InternalValidationGate(clock=lambda: FROZEN)]


def make_context(parameters: dict[str, str], thresholds: Thresholds = Thresholds(), ext: int = 60, int_: int = 40):
    return GateContext(
        eap_version="3.1.0-eap-42",
        trigger_build="4711",
        thresholds=thresholds,
        scoring_config=ScoringConfig(weights={
            GateType.EXTERNAL_VALIDATION: ext,
            GateType.INTERNAL_VALIDATION: int_,
        }),
        additional_parameters=parameters,
    )


class ExplodingGate(QualityGate):
    """Gate whose evaluation always raises."""

    @property
    def name(self) -> str:
        return "External Validation"

    @property
    def gate_type(self) -> GateType:
        return GateType.EXTERNAL_VALIDATION

    def evaluate(self, context):
        raise RuntimeError("artifact repository unreachable")


class NoneGate(QualityGate):
    """Gate whose evaluation returns nothing."""

    @property
    def name(self) -> str:
        return "External Validation"

    @property
    def gate_type(self) -> GateType:
        return GateType.EXTERNAL_VALIDATION

    def evaluate(self, context):
        return None


class MisconfiguredGate(QualityGate):
    """Gate whose name cannot be resolved."""

    @property
    def name(self) -> str:
        raise RuntimeError("misconfigured")

    @property
    def gate_type(self) -> GateType:
        return GateType.CUSTOM

    def evaluate(self, context):
        raise AssertionError("never reached")


class CustomGate(QualityGate):
    """Extra gate beyond the two report slots."""

    def __init__(self, status: GateStatus, score: int):
        super().__init__()
        self.status = status
        self.score = score

    @property
    def name(self) -> str:
        return "Security Scan"

    @property
    def gate_type(self) -> GateType:
        return GateType.CUSTOM

    def evaluate(self, context):
        return GateResult(
            gate_name=self.name,
            gate_type=self.gate_type,
            status=self.status,
            score=self.score,
            eap_version=context.eap_version,
        )


def test_scenario_both_pipelines_succeed():
    engine = EvaluationEngine()
    report = engine.evaluate_all(frozen_gates(), make_context({
        "external.status": "SUCCESS",
        "internal.status": "SUCCESS",
    }))

    assert report.external_validation.score == 95
    assert report.internal_validation.score == 95
    assert report.overall_score == 95
    assert report.overall_status == GateStatus.PASSED
    assert report.ready_for_release
    assert report.recommendations[0] == "EAP version is ready for release"
    assert "Notify community about EAP availability" in report.next_steps
    assert report.execution_summary.success_rate == 100.0


def test_scenario_external_build_failure():
    engine = EvaluationEngine()
    report = engine.evaluate_all(frozen_gates(), make_context({
        "external.status": "FAILED",
        "external.status.text": "BUILD FAILED: compilation error",
        "internal.status": "SUCCESS",
    }))

    assert report.external_validation.score <= 30
    assert report.internal_validation.score == 95
    assert report.overall_score == 56
    assert report.overall_status == GateStatus.FAILED
    assert "Fix critical issues in External Validation" in report.recommendations
    assert "Prioritize critical issues: 1 found" in report.next_steps
    assert report.execution_summary.success_rate == 50.0


def test_scenario_no_data_received():
    engine = EvaluationEngine()
    report = engine.evaluate_all(frozen_gates(), make_context({
        "external.status": "UNKNOWN",
        "internal.status": "UNKNOWN",
    }))

    assert report.external_validation.status == GateStatus.FAILED
    assert report.internal_validation.status == GateStatus.FAILED
    assert report.overall_score <= 50
    assert report.overall_status == GateStatus.FAILED
    assert "Address critical issues before release" in report.recommendations


def test_success_passes_for_lenient_thresholds():
    engine = EvaluationEngine()
    parameters = {"external.status": "SUCCESS", "internal.status": "SUCCESS"}
    for min_score in (0, 50, 80, 95):
        for critical in (0, 3):
            thresholds = Thresholds(minimum_passing_score=min_score, critical_issue_threshold=critical)
            report = engine.evaluate_all(default_gates(), make_context(parameters, thresholds, 50, 50))
            assert report.overall_status == GateStatus.PASSED


def test_critical_issues_above_threshold_fail_regardless_of_score():
    engine = EvaluationEngine()
    thresholds = Thresholds(minimum_passing_score=0, critical_issue_threshold=0)
    gate = ExternalValidationGate()
    gate.criteria = gate.criteria.model_copy(update={"allowed_critical_issues": 5})
    report = engine.evaluate_all([gate, InternalValidationGate()], make_context({
        "external.status": "SUCCESS",
        "external.status.text": "compilation of sample skipped",
        "internal.status": "SUCCESS",
    }, thresholds))

    assert report.external_validation.status == GateStatus.PASSED
    assert report.total_critical_issues == 1
    assert report.overall_status == GateStatus.FAILED


def test_score_below_minimum_fails_even_when_gates_pass():
    engine = EvaluationEngine()
    thresholds = Thresholds(minimum_passing_score=99)
    report = engine.evaluate_all(default_gates(), make_context({
        "external.status": "SUCCESS",
        "internal.status": "SUCCESS",
    }, thresholds))

    assert all(r.status == GateStatus.PASSED for r in report.results)
    assert report.overall_status == GateStatus.FAILED
    assert "Score too low (95 < 99)" in failure_reasons(report, thresholds)


def test_evaluation_is_idempotent():
    engine = EvaluationEngine(clock=lambda: FROZEN)
    context = make_context({
        "external.status": "FAILED",
        "external.status.text": "tests failed",
        "internal.status": "SUCCESS",
    })

    first = engine.evaluate_all(frozen_gates(), context)
    second = engine.evaluate_all(frozen_gates(), context)

    assert first.overall_score == second.overall_score
    assert first.overall_status == second.overall_status
    for a, b in zip(first.results, second.results):
        assert a.critical_issues == b.critical_issues
        assert a.warnings == b.warnings
    assert first.generated_at == second.generated_at == FROZEN


def test_exception_in_gate_becomes_failed_result():
    engine = EvaluationEngine()
    report = engine.evaluate_all([ExplodingGate(), InternalValidationGate()], make_context({
        "internal.status": "SUCCESS",
    }))

    failed = report.external_validation
    assert failed.status == GateStatus.FAILED
    assert failed.score == 0
    assert failed.execution_time == 0.0
    assert len(failed.critical_issues) == 1
    assert failed.critical_issues[0].description == (
        "Quality gate execution failed: artifact repository unreachable"
    )
    assert failed.critical_issues[0].error_detail == "RuntimeError"

    assert report.internal_validation.status == GateStatus.PASSED
    assert report.internal_validation.score == 95
    assert report.overall_status == GateStatus.FAILED


def test_gate_returning_none_becomes_failed_result():
    engine = EvaluationEngine()
    report = engine.evaluate_all([NoneGate(), InternalValidationGate()], make_context({
        "internal.status": "SUCCESS",
    }))

    failed = report.external_validation
    assert failed.gate_name == "External Validation"
    assert failed.status == GateStatus.FAILED
    assert failed.score == 0
    assert failed.critical_issues[0].error_detail == "TypeError"
    assert "NoneType" in failed.critical_issues[0].description
    assert report.internal_validation.status == GateStatus.PASSED
    assert report.overall_status == GateStatus.FAILED


def test_gate_with_unresolvable_name_is_reported_by_class():
    engine = EvaluationEngine()
    report = engine.evaluate_all([MisconfiguredGate(), *frozen_gates()], make_context({
        "external.status": "SUCCESS",
        "internal.status": "SUCCESS",
    }))

    failed = report.results[0]
    assert failed.gate_name == "MisconfiguredGate"
    assert failed.gate_type == GateType.CUSTOM
    assert failed.status == GateStatus.FAILED
    assert failed.critical_issues[0].description == "Quality gate execution failed: misconfigured"
    assert failed.critical_issues[0].affected_component == "MisconfiguredGate"
    assert report.external_validation.status == GateStatus.PASSED
    assert report.overall_status == GateStatus.FAILED


def test_async_evaluation_survives_misbehaving_gates():
    engine = EvaluationEngine()
    report = asyncio.run(engine.evaluate_all_async(
        [NoneGate(), MisconfiguredGate(), InternalValidationGate()],
        make_context({"internal.status": "SUCCESS"}),
    ))

    assert [r.status for r in report.results] == [
        GateStatus.FAILED, GateStatus.FAILED, GateStatus.PASSED,
    ]
    assert report.results[1].gate_name == "MisconfiguredGate"


def test_pass_rate_below_criteria_still_releases():
    engine = EvaluationEngine()
    report = engine.evaluate_all(frozen_gates(), make_context({
        "external.status": "SUCCESS",
        "external.validation.total.samples": "1000",
        "external.validation.failed.samples": "1",
        "internal.status": "SUCCESS",
        "internal.validation.total.tests": "1000",
        "internal.validation.failed.tests": "1",
    }))

    for result in (report.external_validation, report.internal_validation):
        assert result.additional_metrics["passRate"] == 99.9
        assert result.status == GateStatus.PASSED
        assert any(w.severity == IssueSeverity.HIGH for w in result.warnings)
        assert result.score == 90
    assert report.overall_score == 90
    assert report.overall_status == GateStatus.PASSED
    assert report.ready_for_release


def test_missing_gate_type_gets_skipped_placeholder():
    engine = EvaluationEngine()
    report = engine.evaluate_all([InternalValidationGate()], make_context({"internal.status": "SUCCESS"}))

    placeholder = report.external_validation
    assert placeholder.status == GateStatus.SKIPPED
    assert placeholder.gate_type == GateType.EXTERNAL_VALIDATION
    assert placeholder.warnings[0].severity == IssueSeverity.LOW
    assert placeholder.warnings[0].description == "Quality gate was not executed"
    assert len(report.results) == 1


def test_no_gates_fails_with_zero_score():
    report = EvaluationEngine().evaluate_all([], make_context({}))

    assert report.overall_score == 0
    assert report.overall_status == GateStatus.FAILED
    assert report.execution_summary.success_rate == 0.0
    assert report.external_validation.status == GateStatus.SKIPPED
    assert report.internal_validation.status == GateStatus.SKIPPED


def test_extra_gate_is_scored_and_kept_in_results():
    engine = EvaluationEngine()
    gates = frozen_gates() + [CustomGate(GateStatus.FAILED, 20)]
    report = engine.evaluate_all(gates, make_context({
        "external.status": "SUCCESS",
        "internal.status": "SUCCESS",
    }, Thresholds(minimum_passing_score=0)))

    assert [r.gate_name for r in report.results] == [
        "External Validation", "Internal Validation", "Security Scan",
    ]
    # (95*60 + 95*40 + 20*50) / 150
    assert report.overall_score == 70
    assert report.overall_status == GateStatus.FAILED


def test_execution_summary_sums_metrics():
    engine = EvaluationEngine()
    report = engine.evaluate_all(default_gates(), make_context({
        "external.status": "SUCCESS",
        "external.validation.total.samples": "14",
        "external.validation.successful.samples": "14",
        "internal.status": "SUCCESS",
        "internal.validation.total.tests": "3200",
        "internal.validation.passed.tests": "3200",
    }))

    assert report.execution_summary.samples_validated == 14
    assert report.execution_summary.tests_executed == 3200


def test_async_evaluation_matches_sequential_order():
    engine = EvaluationEngine(clock=lambda: FROZEN)
    context = make_context({
        "external.status": "FAILED",
        "external.status.text": "BUILD FAILED",
        "internal.status": "SUCCESS",
    })

    sequential = engine.evaluate_all(frozen_gates(), context)
    concurrent = asyncio.run(engine.evaluate_all_async(frozen_gates(), context))

    assert [r.gate_name for r in concurrent.results] == [r.gate_name for r in sequential.results]
    assert concurrent.overall_score == sequential.overall_score
    assert concurrent.overall_status == sequential.overall_status
    assert concurrent.recommendations == sequential.recommendations


def test_async_evaluation_isolates_exceptions():
    engine = EvaluationEngine()
    report = asyncio.run(engine.evaluate_all_async(
        [ExplodingGate(), InternalValidationGate()],
        make_context({"internal.status": "SUCCESS"}),
    ))

    assert report.external_validation.score == 0
    assert report.internal_validation.score == 95


def test_blocked_report():
    engine = EvaluationEngine()
    report = engine.blocked_report(default_gates(), make_context({}), "build agent pool offline")

    assert report.overall_status == GateStatus.BLOCKED
    assert report.overall_score == 0
    assert report.external_validation.status == GateStatus.BLOCKED
    assert report.internal_validation.status == GateStatus.BLOCKED
    assert report.recommendations == ["Resolve blocking issues preventing quality gate execution"]
    assert report.next_steps[0] == "Investigate blocking conditions"
    assert "build agent pool offline" in report.external_validation.critical_issues[0].description


def test_unrecognized_status_gets_fallback_guidance():
    assert generate_recommendations(GateStatus.SKIPPED, []) == [
        "Review quality gate status and take appropriate action"
    ]
    assert generate_next_steps(GateStatus.PENDING, []) == [
        "Review quality gate execution logs",
        "Determine appropriate course of action",
    ]


def test_failed_next_steps_without_critical_issues():
    steps = generate_next_steps(GateStatus.FAILED, [])
    assert steps == [
        "Analyze failure reasons",
        "Create fix plan for identified issues",
        "Execute fixes and re-run validation",
    ]
