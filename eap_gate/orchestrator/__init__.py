"""Evaluation engine and report guidance."""

from eap_gate.orchestrator.engine import EvaluationEngine
from eap_gate.orchestrator.recommendations import (
    failure_reasons,
    generate_next_steps,
    generate_recommendations,
)

__all__ = [
    "EvaluationEngine",
    "failure_reasons",
    "generate_next_steps",
    "generate_recommendations",
]
