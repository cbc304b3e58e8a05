# eligibility_engine/predict.py
"""
Prediction Module for the Loan Eligibility Engine.

Turns a TrainedModel and one applicant into an auditable decision:
probability, Approved/Rejected status, a 300-850 credit score, a confidence
percentage, the top feature attributions and a written rationale.
"""

import logging
from typing import Optional

from scipy.special import expit

from eligibility_engine import settings
from eligibility_engine.explain import compute_feature_attributions, generate_explanation
from eligibility_engine.preprocess import engineer
from eligibility_engine.schemas import (
    APPROVED, REJECTED, ApplicantProfile, PredictionResult, FEATURE_NAMES
)
from eligibility_engine.train import TrainedModel

logger = logging.getLogger(__name__)


class ModelNotTrainedError(RuntimeError):
    """Raised when a prediction is requested without a trained model."""


def _check_trained(model: Optional[TrainedModel]) -> TrainedModel:
    if model is None:
        raise ModelNotTrainedError("Model not trained: train a model before predicting")
    if tuple(model.scaling.feature_names) != FEATURE_NAMES or len(model.weights) != len(FEATURE_NAMES):
        raise ModelNotTrainedError(
            "Model not trained: scaling parameters and weights do not cover the feature set"
        )
    return model


def predict(profile: ApplicantProfile, model: Optional[TrainedModel]) -> PredictionResult:
    """
    Score a single applicant.

    Parameters
    ----------
    profile : ApplicantProfile
        Validated applicant fields.
    model : TrainedModel
        Output of the training pipeline. Its scaling parameters are reused
        as-is; nothing is re-fitted on the applicant.

    Returns
    -------
    PredictionResult

    Raises
    ------
    ModelNotTrainedError
        If `model` is missing or incomplete.
    """
    model = _check_trained(model)

    features = engineer(profile)
    contributions = model.scaling.apply(features) * model.weights
    probability_approved = float(expit(contributions.sum()))

    status = APPROVED if probability_approved >= settings.DECISION_THRESHOLD else REJECTED

    score_range = settings.CREDIT_SCORE_MAX - settings.CREDIT_SCORE_MIN
    credit_score = int(round(settings.CREDIT_SCORE_MIN + probability_approved * score_range))

    confidence = probability_approved if status == APPROVED else 1 - probability_approved
    prediction_confidence = int(round(confidence * 100))

    result = PredictionResult(
        eligibility_status=status,
        credit_score=credit_score,
        prediction_confidence=prediction_confidence,
        probability_approved=probability_approved,
        feature_attributions=compute_feature_attributions(contributions, model.feature_names),
        explanation=generate_explanation(status, features, profile),
    )
    logger.debug(f"{status} with p={probability_approved:.4f}, credit score {credit_score}")
    return result
