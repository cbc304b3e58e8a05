import numpy as np
import pytest

from eligibility_engine.preprocess import ScalingParameters
from eligibility_engine.schemas import ApplicantProfile, ModelMetrics, FEATURE_NAMES
from eligibility_engine.train import TrainedModel, run_training_pipeline


@pytest.fixture(scope="session")
def trained_model():
    """One model trained on the full 5,000-sample protocol, seeded."""
    return run_training_pipeline(n_samples=5000, random_state=42)


@pytest.fixture
def strong_applicant():
    return ApplicantProfile(
        income=1_200_000,
        credit_history=0.9,
        loan_amount=1_000_000,
        loan_term=240,
        employment_type="salaried",
        dependents=1,
        marital_status="married",
    )


@pytest.fixture
def weak_applicant():
    return ApplicantProfile(
        income=150_000,
        credit_history=0.1,
        loan_amount=4_000_000,
        loan_term=360,
        employment_type="self_employed",
        dependents=4,
        marital_status="single",
    )


@pytest.fixture
def dummy_metrics():
    return ModelMetrics(
        accuracy=0.0, precision=0.0, recall=0.0, f1_score=0.0,
        training_samples=0, validation_samples=0,
    )


@pytest.fixture
def make_model(dummy_metrics):
    """Build a TrainedModel from explicit weights/scaling (identity scaling by default)."""
    def _make(weights=None, means=None, stds=None):
        n = len(FEATURE_NAMES)
        scaling = ScalingParameters(
            feature_names=FEATURE_NAMES,
            means=np.zeros(n) if means is None else means,
            stds=np.ones(n) if stds is None else stds,
        )
        return TrainedModel(
            scaling=scaling,
            weights=np.zeros(n) if weights is None else weights,
            metrics=dummy_metrics,
        )
    return _make
