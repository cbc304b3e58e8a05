# eligibility_engine/__init__.py
"""
Loan Eligibility Engine

This package contains the scoring engine behind loan eligibility decisions:
- Feature engineering, synthetic data and normalization (preprocess.py)
- Gradient-descent logistic training and evaluation (train.py)
- Feature attributions and rule-based rationale (explain.py)
- Single-applicant decisions (predict.py)
- The process-wide trained model (model_loader.py)
"""

from eligibility_engine.schemas import (
    ApplicantForm,
    ApplicantProfile,
    FeatureVector,
    ModelMetrics,
    PredictionResult,
    FEATURE_NAMES,
)
from eligibility_engine.train import TrainedModel, run_training_pipeline
from eligibility_engine.predict import ModelNotTrainedError, predict
from eligibility_engine.model_loader import get_model, get_model_metrics, retrain_model
