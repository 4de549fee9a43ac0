from __future__ import annotations

from fastapi import APIRouter

from ..schemas import HealthResponse


router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", message="Video processor server is running")
