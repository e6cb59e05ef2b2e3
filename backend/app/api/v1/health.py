"""
Health Check Endpoints

Provides the API health status.
"""
from fastapi import APIRouter
from datetime import datetime

from app.api.schemas import HealthCheckResponse
from app.config import settings
from app.core.vault_service import service_ready

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check endpoint

    Returns the current health status of the API.
    """
    return HealthCheckResponse(
        status="healthy",
        version=settings.API_VERSION,
        vault_ready=service_ready(),
        timestamp=datetime.utcnow()
    )
