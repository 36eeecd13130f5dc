"""
API package initialization.

This package contains the FastAPI routers of the SEO accuracy service:
- accuracy: accuracy reports, project status, confidence and discrepancies
- confidence: ML-enhanced confidence scoring (single and batch)
"""

from fastapi import APIRouter

from seo_accuracy.api.accuracy import router as accuracy_router
from seo_accuracy.api.confidence import router as confidence_router

# Create main API router
api_router = APIRouter()

# Both routers carry their own prefix
api_router.include_router(accuracy_router)
api_router.include_router(confidence_router)

__all__ = [
    "api_router",
    "accuracy_router",
    "confidence_router",
]
