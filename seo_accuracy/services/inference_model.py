"""
Fixed-weight inference model for ML confidence.

A small 11 -> 4 -> 1 feed-forward network with a tanh hidden layer and a
sigmoid output. The weights are constants; nothing here is trained or
updated at runtime, so evaluation is deterministic and thread-safe.

    hidden = tanh(W1 @ features + B1)
    score  = sigmoid(W2 @ hidden + B2)

The raw prediction is then adjusted for the keyword context:
    - competitive industry: x0.9
    - competition level c (default 0.5): x(1 - 0.1 * c)
    - seasonality > 0.7 (default 0): x0.95
and clamped to [0, 1].
"""

import math
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np

from seo_accuracy.models.enums import Industry
from seo_accuracy.models.schemas import ContextualData, ModelMetadata


# =============================================================================
# Model Constants
# =============================================================================

MODEL_VERSION: str = "1.0.0"
TRAINED_SAMPLES: int = 10000
MODEL_ACCURACY: float = 0.94
MODEL_LAST_UPDATED: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)

W1: np.ndarray = np.array([
    [0.15, -0.12, 0.25, 0.18, 0.22, -0.08, 0.31, 0.14, -0.09, 0.16, 0.11],
    [0.09, -0.18, 0.28, 0.15, 0.19, -0.11, 0.26, 0.12, -0.07, 0.14, 0.13],
    [0.11, -0.15, 0.32, 0.21, 0.17, -0.09, 0.29, 0.16, -0.08, 0.18, 0.12],
    [0.13, -0.14, 0.27, 0.19, 0.24, -0.10, 0.33, 0.15, -0.06, 0.17, 0.14],
], dtype=np.float64)
B1: np.ndarray = np.array([0.1, -0.05, 0.08, 0.02], dtype=np.float64)
W2: np.ndarray = np.array([0.24, 0.31, 0.28, 0.17], dtype=np.float64)
B2: float = 0.15

W1.setflags(write=False)
B1.setflags(write=False)
W2.setflags(write=False)

COMPETITIVE_FACTOR: float = 0.9
COMPETITION_PENALTY: float = 0.1
DEFAULT_COMPETITION_LEVEL: float = 0.5
HIGH_SEASONALITY: float = 0.7
SEASONAL_FACTOR: float = 0.95


def model_metadata() -> ModelMetadata:
    return ModelMetadata(
        version=MODEL_VERSION,
        trainedSamples=TRAINED_SAMPLES,
        accuracy=MODEL_ACCURACY,
        lastUpdated=MODEL_LAST_UPDATED,
    )


# =============================================================================
# Inference
# =============================================================================


def sigmoid(value: float) -> float:
    return 1.0 / (1.0 + math.exp(-value))


def predict(features: Sequence[float]) -> float:
    """
    Raw network output in (0, 1).

    Raises:
        ValueError: If ``features`` does not have 11 elements.
    """
    x = np.asarray(features, dtype=np.float64)
    if x.shape != (W1.shape[1],):
        raise ValueError(f"Expected {W1.shape[1]} features, got {x.shape}")

    hidden = np.tanh(W1 @ x + B1)
    return sigmoid(float(W2 @ hidden) + B2)


def apply_contextual_adjustments(
    score: float,
    contextual: Optional[ContextualData] = None,
) -> float:
    """Scale a raw prediction by the keyword context, clamped to [0, 1]."""
    context = contextual or ContextualData()
    adjusted = score

    if context.industry == Industry.COMPETITIVE.value:
        adjusted *= COMPETITIVE_FACTOR

    competition = (
        DEFAULT_COMPETITION_LEVEL
        if context.competitionLevel is None
        else context.competitionLevel
    )
    adjusted *= 1.0 - competition * COMPETITION_PENALTY

    seasonality = context.seasonality or 0.0
    if seasonality > HIGH_SEASONALITY:
        adjusted *= SEASONAL_FACTOR

    return min(1.0, max(0.0, adjusted))
