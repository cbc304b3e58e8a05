# eligibility_engine/schemas.py
"""
Data models for the Loan Eligibility Engine.

Core records are frozen dataclasses: they are created once and never mutated.
`ApplicantForm` is the pydantic model request handlers use to validate raw
input before it reaches the engine.
"""

from dataclasses import dataclass, asdict, fields
from typing import Dict, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

APPROVED = "Approved"
REJECTED = "Rejected"


@dataclass(frozen=True)
class ApplicantProfile:
    """Raw applicant fields, assumed validated by the caller."""

    income: float
    credit_history: float
    loan_amount: float
    loan_term: int
    employment_type: str
    dependents: int
    marital_status: str


@dataclass(frozen=True)
class FeatureVector:
    """Engineered features for one applicant. Field order is FEATURE_NAMES."""

    income: float
    credit_history: float
    loan_amount: float
    loan_term: float
    dependents: float
    employment_encoded: float
    marital_encoded: float
    loan_to_income_ratio: float
    monthly_burden: float
    income_per_dependent: float
    credit_x_income: float
    risk_score: float

    def to_array(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in FEATURE_NAMES], dtype=float)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# Name <-> index table for code that iterates features generically
FEATURE_NAMES = tuple(f.name for f in fields(FeatureVector))


@dataclass(frozen=True)
class ModelMetrics:
    """Validation metrics, all percentages in [0, 100]."""

    accuracy: float
    precision: float
    recall: float
    f1_score: float
    training_samples: int
    validation_samples: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PredictionResult:
    eligibility_status: str
    credit_score: int
    prediction_confidence: int
    probability_approved: float
    feature_attributions: Dict[str, float]
    explanation: str

    def to_dict(self) -> dict:
        return asdict(self)


class ApplicantForm(BaseModel):
    """Validated loan application, as submitted by a client."""

    model_config = ConfigDict(frozen=True)

    income: float = Field(..., ge=0, description="Annual income")
    credit_history: float = Field(..., ge=0, le=1, description="Credit history score, 0 to 1")
    loan_amount: float = Field(..., gt=0, description="Requested principal")
    loan_term: int = Field(..., ge=12, le=360, description="Loan term in months")
    employment_type: Literal["salaried", "self_employed", "business"]
    dependents: int = Field(0, ge=0)
    marital_status: Literal["single", "married", "divorced", "widowed"]

    def to_profile(self) -> ApplicantProfile:
        return ApplicantProfile(**self.model_dump())
