"""Federated Search API Route."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from src.api.dependencies import ServiceContainer, get_services
from src.api_errors import ErrorCode, ValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Federated Search"])


@router.get("/search")
async def federated_search(
    q: Optional[str] = None,
    platforms: Optional[str] = None,
    limit: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    """Search several platforms at once.

    Provider failures do not fail the request; they are listed under
    ``issues`` next to the results of the providers that answered.
    """
    if not q or not q.strip():
        raise ValidationError(
            "Query parameter 'q' is required",
            ErrorCode.MISSING_REQUIRED_FIELD,
            field="q",
        )
    response = await services.aggregator.search(q, platforms, limit)
    return response.to_dict()
