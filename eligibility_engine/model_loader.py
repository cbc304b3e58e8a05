# eligibility_engine/model_loader.py
"""
Process-wide trained model.

The first call to `get_model()` runs the training pipeline; every later call
returns the same TrainedModel. A lock keeps concurrent first calls from
training twice. `retrain_model()` swaps in a fresh model under the same lock.
"""

import logging
import threading
from typing import Optional

from eligibility_engine.schemas import ModelMetrics
from eligibility_engine.train import TrainedModel, run_training_pipeline

logger = logging.getLogger(__name__)

_model: Optional[TrainedModel] = None
_model_lock = threading.Lock()


def get_model() -> TrainedModel:
    global _model
    if _model is None:
        with _model_lock:
            if _model is None:
                logger.info("No trained model in this process, training one now")
                _model = run_training_pipeline()
    return _model


def retrain_model() -> ModelMetrics:
    """Train a replacement model, swap it in and return its metrics."""
    global _model
    new_model = run_training_pipeline()
    with _model_lock:
        _model = new_model
    logger.info(f"Switched to newly trained model {new_model.version} "
                f"(trained at {new_model.trained_at.isoformat()})")
    return new_model.metrics


def get_model_metrics() -> ModelMetrics:
    return get_model().metrics
