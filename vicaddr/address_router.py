"""FastAPI routers for address validation endpoints.

Validity is reported in the response body; validation requests always answer
200, including for missing or unusable addresses and geocoder outages.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from vicaddr.address_pipeline import AddressValidationOrchestrator, BatchProcessor
from vicaddr.utils.resilience import ValidationAuditLog


logger = logging.getLogger(__name__)

# Router instances - configured with the orchestrator in main.py
router = APIRouter(prefix="/api/address", tags=["Address Validation"])
public_router = APIRouter(tags=["Address Validation"])

# Global references (set during app startup)
_orchestrator: AddressValidationOrchestrator | None = None
_batch_processor: BatchProcessor | None = None
_audit_log: ValidationAuditLog | None = None


def configure_router(
    orchestrator: AddressValidationOrchestrator,
    batch_processor: BatchProcessor | None = None,
    audit_log: ValidationAuditLog | None = None,
) -> None:
    """Configure the routers with pipeline dependencies.

    Args:
        orchestrator: Initialized address validation orchestrator.
        batch_processor: Optional batch processor (built from orchestrator if omitted).
        audit_log: Optional audit log exposed through /stats.
    """
    global _orchestrator, _batch_processor, _audit_log
    _orchestrator = orchestrator
    _batch_processor = batch_processor or BatchProcessor(orchestrator)
    _audit_log = audit_log if audit_log is not None else orchestrator.audit_log
    logger.info(f"Address router configured (audit={'enabled' if _audit_log is not None else 'disabled'})")


def reset_router() -> None:
    """Drop configured dependencies (used on shutdown)."""
    global _orchestrator, _batch_processor, _audit_log
    _orchestrator = None
    _batch_processor = None
    _audit_log = None


# ============================================================================
# Request/Response Models
# ============================================================================


class ValidationResponse(BaseModel):
    """Response model for a single address validation."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    is_valid: bool = Field(alias="isValid")
    confidence: str
    source: str
    address_type: str = Field(alias="addressType")
    message: str
    components: dict[str, str]
    formatted: str
    suggestions: list[dict[str, Any]]
    unmapped: bool
    fallback: bool
    regex_validation: dict[str, Any] | None = Field(default=None, alias="regexValidation")


class BatchValidateRequest(BaseModel):
    """Request model for batch validation."""

    addresses: list[str] = Field(
        ...,
        min_length=1,
        max_length=25,
        description="Addresses to validate, processed sequentially",
        examples=[["123 Main Street, Melbourne VIC 3000", "90 forman rd shelbourne 3515"]],
    )
    delay_seconds: float | None = Field(
        default=None,
        ge=0,
        le=10,
        description="Delay between geocoder calls (default from configuration)",
    )


class BatchValidateResponse(BaseModel):
    """Response model for batch validation."""

    success: bool
    results: list[ValidationResponse]
    summary: dict[str, Any]


# ============================================================================
# Endpoints
# ============================================================================


@public_router.get("/validate-address", response_model=ValidationResponse)
@router.get("/validate", response_model=ValidationResponse)
async def validate_address(
    address: str | None = Query(default=None, description="Free-text Australian address"),
) -> ValidationResponse:
    """Validate a single address.

    Tries the geocoder first and falls back to the regex parser. Invalid or
    missing input is reported in the body, never as an HTTP error.
    """
    if not _orchestrator:
        raise HTTPException(status_code=503, detail="Validator not initialized")

    result = await _orchestrator.validate(address)
    return ValidationResponse(**result.to_dict())


@router.post("/validate/batch", response_model=BatchValidateResponse)
async def validate_batch(request: BatchValidateRequest) -> BatchValidateResponse:
    """Validate several addresses, spacing out geocoder calls."""
    if not _batch_processor:
        raise HTTPException(status_code=503, detail="Batch processor not initialized")

    results, summary = await _batch_processor.process_list(
        request.addresses,
        delay_seconds=request.delay_seconds,
    )

    return BatchValidateResponse(
        success=summary.invalid == 0,
        results=[ValidationResponse(**r.to_dict()) for r in results],
        summary=summary.to_dict(),
    )


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Check address validation service health."""
    return {
        "status": "healthy" if _orchestrator else "not_initialized",
        "orchestrator": _orchestrator is not None,
        "batch_processor": _batch_processor is not None,
        "geocoder": type(_orchestrator.geocoder).__name__ if _orchestrator else None,
        "geocoder_enabled": _orchestrator.geocoder.available if _orchestrator else False,
        "audit_log": _audit_log is not None,
    }


@router.get("/stats")
async def get_stats(recent: int = Query(default=10, ge=0, le=100)) -> dict[str, Any]:
    """Audit statistics and the most recent validations."""
    if _audit_log is None:
        raise HTTPException(status_code=503, detail="Audit log not enabled")

    return {
        "stats": _audit_log.get_stats(),
        "recent": _audit_log.get_recent(recent),
    }
