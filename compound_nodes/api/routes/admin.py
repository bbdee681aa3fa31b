"""Operational endpoints."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from compound_nodes.core.config import settings

router = APIRouter(tags=["admin"])


@router.get("/health")
async def healthcheck() -> Dict[str, str]:
    """Liveness probe."""

    return {"status": "ok", "environment": settings.ENVIRONMENT, "version": settings.APP_VERSION}


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus exposition of build metrics."""

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
