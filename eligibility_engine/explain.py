# eligibility_engine/explain.py
"""
Explainability Module for the Loan Eligibility Engine.

=== FEATURE ATTRIBUTIONS ===

For a linear model the logit is a plain sum of per-feature terms:

    logit = sum(weight_i * normalized_feature_i)

Each term's magnitude |weight_i * normalized_feature_i| is that feature's
contribution. Contributions are expressed as a share of their total (so all
twelve sum to 100%) and only the five largest are reported, rounded to two
decimals. Equal contributions keep FEATURE_NAMES order.

=== REASON FOR DECISION ===

The written rationale is rule-based. Rules are an ordered table of
(status, predicate, reason) entries; every rule for the decided status whose
predicate holds contributes its reason, in table order:

  Approved                                  Rejected
  credit_history >= 0.7                     credit_history < 0.5
  loan_to_income_ratio < 3                  loan_to_income_ratio > 5
  employment_type == salaried               risk_score > 1,000,000
  income > 500,000                          dependents > 3

When no rule fires the sentence stops after the status:
"Application approved." rather than a dangling "based on".
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

import numpy as np

from eligibility_engine import settings
from eligibility_engine.schemas import (
    APPROVED, REJECTED, ApplicantProfile, FeatureVector, FEATURE_NAMES
)


def compute_feature_attributions(
    contributions: np.ndarray,
    feature_names: Sequence[str] = FEATURE_NAMES,
    top_n: int = settings.TOP_ATTRIBUTIONS,
) -> Dict[str, float]:
    """
    Rank features by their share of the total absolute logit contribution.

    Parameters
    ----------
    contributions : np.ndarray
        weight_i * normalized_feature_i per feature (sign is ignored).
    feature_names : sequence of str
        Names aligned with `contributions`.
    top_n : int
        Number of features to keep.

    Returns
    -------
    dict
        Feature name -> percentage, largest first, rounded to 2 decimals.
    """
    magnitudes = np.abs(np.asarray(contributions, dtype=float))
    total = magnitudes.sum()
    shares = magnitudes / total * 100 if total > 0 else np.zeros_like(magnitudes)

    # sorted() is stable, so ties keep feature order
    ranked = sorted(zip(feature_names, shares), key=lambda item: -item[1])
    return {name: round(float(share), 2) for name, share in ranked[:top_n]}


@dataclass(frozen=True)
class ExplanationRule:
    status: str
    reason: str
    applies: Callable[[FeatureVector, ApplicantProfile], bool]


EXPLANATION_RULES: List[ExplanationRule] = [
    ExplanationRule(APPROVED, "strong credit history",
                    lambda f, p: p.credit_history >= 0.7),
    ExplanationRule(APPROVED, "healthy loan-to-income ratio",
                    lambda f, p: f.loan_to_income_ratio < 3),
    ExplanationRule(APPROVED, "stable employment",
                    lambda f, p: p.employment_type == "salaried"),
    ExplanationRule(APPROVED, "good income level",
                    lambda f, p: p.income > 500_000),
    ExplanationRule(REJECTED, "weak credit history",
                    lambda f, p: p.credit_history < 0.5),
    ExplanationRule(REJECTED, "high loan-to-income ratio",
                    lambda f, p: f.loan_to_income_ratio > 5),
    ExplanationRule(REJECTED, "elevated risk score",
                    lambda f, p: f.risk_score > 1_000_000),
    ExplanationRule(REJECTED, "higher number of dependents",
                    lambda f, p: p.dependents > 3),
]


def collect_reasons(
    status: str,
    features: FeatureVector,
    profile: ApplicantProfile,
    rules: Sequence[ExplanationRule] = EXPLANATION_RULES,
) -> List[str]:
    return [rule.reason for rule in rules
            if rule.status == status and rule.applies(features, profile)]


def generate_explanation(
    status: str,
    features: FeatureVector,
    profile: ApplicantProfile,
    rules: Sequence[ExplanationRule] = EXPLANATION_RULES,
) -> str:
    """Write the one-sentence rationale for a decision."""
    reasons = collect_reasons(status, features, profile, rules)
    if not reasons:
        return f"Application {status.lower()}."
    return f"Application {status.lower()} based on {', '.join(reasons)}."
