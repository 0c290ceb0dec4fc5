"""Scoring strategies combining per-gate results into one overall score."""

import logging
import math
from abc import ABC, abstractmethod

from eap_gate.quality.models import GateResult, ScoringConfig, clamp_score

logger = logging.getLogger(__name__)

DEFAULT_GATE_WEIGHT = 50


class ScoringStrategy(ABC):
    """Policy turning gate results into an overall score."""

    @abstractmethod
    def calculate_score(self, result: GateResult, config: ScoringConfig) -> int:
        """Score of a single gate result."""
        pass

    @abstractmethod
    def calculate_overall_score(self, results: list[GateResult], config: ScoringConfig) -> int:
        """Overall score for all gate results."""
        pass


class WeightedScoringStrategy(ScoringStrategy):
    """Weighted average of gate scores, keyed by each result's gate type."""

    def calculate_score(self, result: GateResult, config: ScoringConfig) -> int:
        return result.score

    def weight_for(self, result: GateResult, config: ScoringConfig) -> int:
        """Weight of a result; unlisted gate types weigh DEFAULT_GATE_WEIGHT, negatives count as 0."""
        weight = config.weights.get(result.gate_type, DEFAULT_GATE_WEIGHT)
        return max(0, weight)

    def calculate_overall_score(self, results: list[GateResult], config: ScoringConfig) -> int:
        """
        Calculate the weighted overall score.

        Args:
            results: Gate results in declared gate order
            config: Scoring configuration holding the weights

        Returns:
            round(sum(score * weight) / sum(weight)), or 0 when there are no
            results or the total weight is 0
        """
        if not results:
            return 0

        weighted_score = 0.0
        total_weight = 0
        for result in results:
            weight = self.weight_for(result, config)
            weighted_score += self.calculate_score(result, config) * weight
            total_weight += weight

        if total_weight <= 0:
            logger.warning("Total gate weight is 0, overall score defaults to 0")
            return 0

        return clamp_score(math.floor(weighted_score / total_weight + 0.5))
