"""
FastAPI router for ML-enhanced confidence scoring.

Key Endpoints:
- POST /confidence/ml - Hybrid ML confidence for one ranking series
- POST /confidence/ml/batch - Hybrid ML confidence for 1-50 series, in order

Rankings are supplied by the caller; this service never fetches them from
a rank tracker.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from seo_accuracy.core.dependencies import MLEngineDep
from seo_accuracy.core.exceptions import DataValidationError
from seo_accuracy.models.schemas import (
    MLBatchRequest,
    MLConfidenceInput,
    MLConfidenceResult,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/confidence", tags=["confidence"])


@router.post("/ml", response_model=MLConfidenceResult)
async def score_ml_confidence(
    request: MLConfidenceInput,
    engine: MLEngineDep,
) -> MLConfidenceResult:
    """
    Hybrid ML confidence for one keyword.

    Example Response:
        {
            "mlScore": 0.61,
            "traditionalScore": 0.83,
            "hybridScore": 0.7,
            "anomalyScore": 1.0,
            "patternRecognition": {"trend": "stable", ...},
            "confidenceLevel": "medium",
            "recommendations": ["..."],
            "modelMetadata": {"version": "1.0.0", ...}
        }
    """
    try:
        result = engine.calculate_ml_confidence(request)
        logger.debug(
            f"ML confidence for keyword {request.keywordId or '-'}: "
            f"hybrid={result.hybridScore} level={result.confidenceLevel.value}"
        )
        return result

    except DataValidationError as e:
        logger.warning(f"POST /confidence/ml rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error calculating ML confidence: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="ML confidence calculation failed"
        )


@router.post("/ml/batch", response_model=List[MLConfidenceResult])
async def score_ml_confidence_batch(
    request: MLBatchRequest,
    engine: MLEngineDep,
) -> List[MLConfidenceResult]:
    try:
        return await engine.calculate_batch_ml_confidence(request.inputs)

    except DataValidationError as e:
        logger.warning(f"POST /confidence/ml/batch rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error calculating batch ML confidence: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Batch ML confidence calculation failed"
        )
