# eligibility_engine/preprocess.py
"""
Data Preprocessing Module for the Loan Eligibility Engine.

=== WHY SYNTHETIC DATA? ===

The engine ships without a historical loan book. Instead it generates labelled
applicants from parametric random draws and a hand-written approval heuristic
(credit history, income, employment stability and loan-to-income). The
heuristic is noisy on purpose: it gives the classifier a learnable but
imperfect relationship to recover. It is NOT a model of real credit risk.

=== FEATURE ENGINEERING ===

Seven raw fields become twelve features:
  - the five numeric inputs as-is
  - employment and marital status encoded to fixed scores in [0, 1]
  - five derived ratios/interactions:
      loan_to_income_ratio = loan_amount / (income + 1)
      monthly_burden       = loan_amount * 0.01 / loan_term
      income_per_dependent = income / (dependents + 1)
      credit_x_income      = credit_history * income
      risk_score           = loan_to_income_ratio * (1 - credit_history) * (dependents + 1)

The "+1" denominators keep zero income or zero dependents from dividing by
zero. Single applicants (`engineer`) and DataFrames (`engineer_features`) go
through the same formula function.

=== NORMALIZATION ===

Z-score scaling with population statistics of the TRAINING split only.
A feature with zero spread is scaled by 1 instead of 0.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from eligibility_engine import settings
from eligibility_engine.schemas import ApplicantProfile, FeatureVector, FEATURE_NAMES

logger = logging.getLogger(__name__)

RAW_COLUMNS = [
    "income", "credit_history", "loan_amount", "loan_term",
    "employment_type", "dependents", "marital_status",
]
TARGET_COLUMN = "approved"


# =============================================================================
# CATEGORICAL ENCODER
# =============================================================================

def encode_employment(employment_type: str) -> float:
    return settings.EMPLOYMENT_SCORES.get(employment_type, settings.DEFAULT_CATEGORY_SCORE)


def encode_marital(marital_status: str) -> float:
    return settings.MARITAL_SCORES.get(marital_status, settings.DEFAULT_CATEGORY_SCORE)


def _encode_column(values: pd.Series, scores: Dict[str, float]) -> pd.Series:
    return values.map(scores).fillna(settings.DEFAULT_CATEGORY_SCORE).astype(float)


# =============================================================================
# FEATURE ENGINEER
# =============================================================================

def _derive_features(income, credit_history, loan_amount, loan_term, dependents) -> dict:
    """Derived features. Works on scalars and on pandas Series alike."""
    loan_to_income_ratio = loan_amount / (income + 1)
    return {
        "loan_to_income_ratio": loan_to_income_ratio,
        "monthly_burden": (loan_amount * 0.01) / loan_term,
        "income_per_dependent": income / (dependents + 1),
        "credit_x_income": credit_history * income,
        "risk_score": loan_to_income_ratio * (1 - credit_history) * (dependents + 1),
    }


def engineer(profile: ApplicantProfile) -> FeatureVector:
    """Build the feature vector for a single applicant."""
    derived = _derive_features(
        float(profile.income),
        float(profile.credit_history),
        float(profile.loan_amount),
        float(profile.loan_term),
        float(profile.dependents),
    )
    return FeatureVector(
        income=float(profile.income),
        credit_history=float(profile.credit_history),
        loan_amount=float(profile.loan_amount),
        loan_term=float(profile.loan_term),
        dependents=float(profile.dependents),
        employment_encoded=encode_employment(profile.employment_type),
        marital_encoded=encode_marital(profile.marital_status),
        **derived,
    )


def engineer_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Engineer features for a batch of applicants.

    Parameters
    ----------
    df : pd.DataFrame
        One row per applicant, with at least the RAW_COLUMNS.

    Returns
    -------
    pd.DataFrame
        Float columns in FEATURE_NAMES order, same index as `df`.
    """
    numeric = {col: df[col].astype(float) for col in
               ("income", "credit_history", "loan_amount", "loan_term", "dependents")}

    features = pd.DataFrame(numeric, index=df.index)
    features["employment_encoded"] = _encode_column(df["employment_type"], settings.EMPLOYMENT_SCORES)
    features["marital_encoded"] = _encode_column(df["marital_status"], settings.MARITAL_SCORES)
    for name, values in _derive_features(**numeric).items():
        features[name] = values

    return features[list(FEATURE_NAMES)]


# =============================================================================
# SYNTHETIC DATA GENERATOR
# =============================================================================

def heuristic_approval_score(
    income: np.ndarray,
    credit_history: np.ndarray,
    loan_amount: np.ndarray,
    employment_type: np.ndarray,
    dependents: np.ndarray,
) -> np.ndarray:
    """
    Noise-free approval score behind the synthetic labels.

    Weighted sum of credit history (0.4), income scaled to 2M (0.25),
    employment score (0.15) and an inverse loan-to-income term (0.2),
    minus 0.3 x a risk heuristic that grows with loan-to-income, weak
    credit and dependents.
    """
    income = np.asarray(income, dtype=float)
    credit_history = np.asarray(credit_history, dtype=float)
    loan_amount = np.asarray(loan_amount, dtype=float)
    dependents = np.asarray(dependents, dtype=float)
    employment_score = _encode_column(
        pd.Series(np.asarray(employment_type, dtype=object)), settings.EMPLOYMENT_SCORES
    ).to_numpy()

    lti_ratio = loan_amount / income
    risk = lti_ratio * (1 - credit_history) * (dependents * 0.1 + 1)

    base_approval_prob = (
        credit_history * 0.4
        + (income / 2_000_000) * 0.25
        + employment_score * 0.15
        + (1 - np.minimum(lti_ratio / 5, 1)) * 0.2
    )
    return base_approval_prob - risk * 0.3


def generate_synthetic_data(n_samples: int, random_state=None) -> pd.DataFrame:
    """
    Generate `n_samples` labelled applicants.

    Parameters
    ----------
    n_samples : int
        Number of rows to draw.
    random_state : int or np.random.Generator, optional
        Seed or generator for the draws. None draws fresh entropy.

    Returns
    -------
    pd.DataFrame
        RAW_COLUMNS plus a 0/1 `approved` column, in generation order.
    """
    if n_samples < 0:
        raise ValueError(f"n_samples must be non-negative, got {n_samples}")

    rng = np.random.default_rng(random_state)

    income = rng.uniform(*settings.INCOME_RANGE, n_samples)
    credit_history = rng.uniform(0.0, 1.0, n_samples)
    loan_amount = rng.uniform(*settings.LOAN_AMOUNT_RANGE, n_samples)
    loan_term = rng.integers(*settings.LOAN_TERM_RANGE, n_samples)
    employment_type = rng.choice(settings.EMPLOYMENT_TYPES, n_samples)
    dependents = rng.integers(*settings.DEPENDENTS_RANGE, n_samples)
    marital_status = rng.choice(settings.MARITAL_STATUSES, n_samples)

    score = heuristic_approval_score(income, credit_history, loan_amount, employment_type, dependents)
    noise = rng.uniform(-settings.LABEL_NOISE, settings.LABEL_NOISE, n_samples)
    approval_prob = np.clip(score + noise, 0.0, 1.0)

    df = pd.DataFrame({
        "income": income,
        "credit_history": credit_history,
        "loan_amount": loan_amount,
        "loan_term": loan_term,
        "employment_type": employment_type.astype(object),
        "dependents": dependents,
        "marital_status": marital_status.astype(object),
        TARGET_COLUMN: (approval_prob > settings.LABEL_THRESHOLD).astype(int),
    })

    if n_samples:
        logger.info(f"Generated {n_samples:,} synthetic applicants "
                    f"(approval rate {df[TARGET_COLUMN].mean():.2%})")
    return df


def split_data(df: pd.DataFrame, train_fraction: float = settings.TRAIN_FRACTION) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split into training and validation sets in generation order.

    No shuffling: the first floor(n * train_fraction) rows train, the rest validate.
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    split_index = int(len(df) * train_fraction)
    train_df = df.iloc[:split_index]
    validation_df = df.iloc[split_index:]

    logger.info(f"Train: {len(train_df):,} samples | Validation: {len(validation_df):,} samples")
    return train_df, validation_df


# =============================================================================
# NORMALIZER
# =============================================================================

@dataclass(frozen=True)
class ScalingParameters:
    """Per-feature mean and standard deviation, aligned with `feature_names`."""

    feature_names: Tuple[str, ...]
    means: np.ndarray
    stds: np.ndarray

    def __post_init__(self):
        for attr in ("means", "stds"):
            values = np.array(getattr(self, attr), dtype=float)
            values.setflags(write=False)
            object.__setattr__(self, attr, values)

    def apply(self, features: Union[FeatureVector, pd.DataFrame, np.ndarray]) -> np.ndarray:
        """(value - mean) / std for a single vector or a batch."""
        if isinstance(features, FeatureVector):
            values = features.to_array()
        elif isinstance(features, pd.DataFrame):
            values = features.loc[:, list(self.feature_names)].to_numpy(dtype=float)
        else:
            values = np.asarray(features, dtype=float)
        return (values - self.means) / self.stds

    def as_dict(self) -> Dict[str, Tuple[float, float]]:
        return {
            name: (float(mean), float(std))
            for name, mean, std in zip(self.feature_names, self.means, self.stds)
        }


def fit_scaler(features: pd.DataFrame) -> ScalingParameters:
    """
    Fit z-score parameters on engineered training features.

    StandardScaler uses the population standard deviation and substitutes 1
    for zero-variance columns.
    """
    columns = list(FEATURE_NAMES)
    scaler = StandardScaler()
    scaler.fit(features.loc[:, columns].to_numpy(dtype=float))
    return ScalingParameters(feature_names=tuple(columns), means=scaler.mean_, stds=scaler.scale_)
