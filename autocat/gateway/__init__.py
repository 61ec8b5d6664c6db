"""
HTTP gateway mirroring the engine contract.

Components:
- schemas.py   - Pydantic models for request/response validation
- api.py       - Route handlers for /api/v1/*
"""

from autocat.gateway.api import gateway_routes
from autocat.gateway.schemas import (
    CategorizeRequest,
    CategorizeResponse,
    HealthStatus,
    ReferenceImagePayload,
)

__all__ = [
    "gateway_routes",
    "CategorizeRequest",
    "CategorizeResponse",
    "HealthStatus",
    "ReferenceImagePayload",
]
