# eligibility_engine/settings.py
"""
Settings for the Loan Eligibility Engine.

All hyperparameters and thresholds live here so that the training pipeline,
the predictor and the tests agree on a single set of numbers.
"""

import os
import logging
from typing import Optional

MODEL_VERSION = "v1.0-ensemble"

# --- Synthetic training protocol
TRAINING_SAMPLES = int(os.getenv("ELIGIBILITY_TRAINING_SAMPLES", "5000"))
TRAIN_FRACTION = 0.8  # first 80% in generation order, no shuffling


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


# None means unseeded: a fresh model every process
RANDOM_STATE = _optional_int(os.getenv("ELIGIBILITY_RANDOM_STATE"))

# --- Gradient descent
LEARNING_RATE = 0.01
EPOCHS = 100
INIT_WEIGHT_RANGE = 0.05  # weights start in [-0.05, 0.05)

# --- Thresholds
# Synthetic labels use a stricter cut-off than decisions. Keep the two distinct.
DECISION_THRESHOLD = 0.5
LABEL_THRESHOLD = 0.55

CREDIT_SCORE_MIN = 300
CREDIT_SCORE_MAX = 850
TOP_ATTRIBUTIONS = 5

# --- Categorical encoders
EMPLOYMENT_SCORES = {
    "salaried": 0.8,
    "self_employed": 0.5,
    "business": 0.6,
}
MARITAL_SCORES = {
    "married": 0.7,
    "single": 0.5,
    "divorced": 0.4,
    "widowed": 0.45,
}
DEFAULT_CATEGORY_SCORE = 0.5

# Draw order for the synthetic generator
EMPLOYMENT_TYPES = ["salaried", "self_employed", "business"]
MARITAL_STATUSES = ["single", "married", "divorced", "widowed"]

# --- Synthetic data ranges
INCOME_RANGE = (200_000, 2_000_000)
LOAN_AMOUNT_RANGE = (100_000, 5_000_000)
LOAN_TERM_RANGE = (12, 360)  # integer, upper bound exclusive
DEPENDENTS_RANGE = (0, 5)    # integer, upper bound exclusive
LABEL_NOISE = 0.05

# --- Logging
LOG_LEVEL = os.getenv("ELIGIBILITY_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for command-line use. Library code never calls this."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
